"""
Deployment of the built binary and shell completions.

Copies the release binary into a per-user bin directory, installs bash and
zsh completion scripts, and runs the binary's own repository registration
(``<binary> install --force``) in an explicitly configured repository.
"""

import logging
import shutil
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from provisionkit.config.parser import DeploySettings
from provisionkit.core.exceptions import DeployError
from provisionkit.core.process import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = (
    stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH
)


@dataclass
class DeployResult:
    """Where artifacts were installed."""

    binary: Path
    completions: Dict[str, Path]


def _expand(path: str, base: Path) -> Path:
    """Expand ~ and resolve relative paths against base."""
    expanded = Path(path).expanduser()
    return expanded if expanded.is_absolute() else base / expanded


class ArtifactDeployer:
    """
    Install the built binary and completion scripts.

    Attributes:
        settings: Deployment settings
        project_root: Directory containing build output and completions
    """

    def __init__(self, settings: DeploySettings, project_root: Path):
        self.settings = settings
        self.project_root = Path(project_root)

    @property
    def binary_target(self) -> Path:
        """Installed binary path."""
        return _expand(self.settings.bin_dir, self.project_root) / self.settings.binary_name

    def deploy(self) -> DeployResult:
        """
        Copy binary and completions into place.

        Raises:
            DeployError: If a source is missing or a copy fails
        """
        name = self.settings.binary_name
        binary = self._copy(
            _expand(self.settings.binary_source, self.project_root),
            self.binary_target,
        )
        try:
            binary.chmod(EXECUTABLE_MODE)
        except OSError as e:
            raise DeployError(f"Could not make {binary} executable: {e}")
        logger.info(f"Binary installed to: {binary}")

        completions = {
            "bash": self._copy(
                _expand(self.settings.bash_completion, self.project_root),
                _expand(self.settings.bash_completion_dir, self.project_root) / name,
            ),
            "zsh": self._copy(
                _expand(self.settings.zsh_completion, self.project_root),
                _expand(self.settings.zsh_completion_dir, self.project_root) / f"_{name}",
            ),
        }
        for shell, path in completions.items():
            logger.info(f"{shell} completion installed to: {path}")

        return DeployResult(binary=binary, completions=completions)

    def _copy(self, source: Path, target: Path) -> Path:
        if not source.is_file():
            raise DeployError(f"Artifact not found: {source}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        except OSError as e:
            raise DeployError(f"Could not copy {source} to {target}: {e}")
        logger.debug(f"Copied {source} -> {target}")
        return target


class SelfRegistrar:
    """Run the installed binary's repository registration."""

    def __init__(self, runner: CommandRunner, binary: Path, repository: Path):
        self.runner = runner
        self.binary = Path(binary)
        self.repository = Path(repository)

    def register(self) -> CommandResult:
        """
        Run ``<binary> install --force`` inside the repository.

        Raises:
            DeployError: If the repository is missing or registration fails
        """
        if not self.repository.is_dir():
            raise DeployError(f"Repository directory not found: {self.repository}")

        logger.info(f"Registering {self.binary.name} in {self.repository}")
        result = self.runner.run(
            [str(self.binary), "install", "--force"], cwd=self.repository, capture=False
        )
        if not result.ok:
            raise DeployError(f"Self-registration failed: {result.describe()}")
        return result
