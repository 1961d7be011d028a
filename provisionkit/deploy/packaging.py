"""
Distribution packaging (Arch, Debian, RPM).
"""

import logging
from pathlib import Path
from typing import Dict, List

from provisionkit.config.parser import PackagingSettings
from provisionkit.core.exceptions import PackagingError, UsageError
from provisionkit.core.process import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

PACKAGE_FORMATS = ("arch", "deb", "rpm")
PACKAGE_USAGE = f"usage: provkit package [{'|'.join(PACKAGE_FORMATS)}]"


def validate_format(package_format: str) -> str:
    """
    Check a packaging format name.

    Raises:
        UsageError: If the format is not arch, deb or rpm
    """
    if package_format not in PACKAGE_FORMATS:
        raise UsageError(
            f"Unknown package format: {package_format!r}", usage=PACKAGE_USAGE
        )
    return package_format


class PackageBuilder:
    """Invoke the external packaging tool for a format."""

    def __init__(
        self,
        runner: CommandRunner,
        project_root: Path,
        settings: PackagingSettings,
    ):
        self.runner = runner
        self.project_root = Path(project_root)
        self.settings = settings

    def commands(self) -> Dict[str, List[str]]:
        """Packaging command for each format."""
        return {
            "arch": ["makepkg", "-sf"],
            "deb": ["dpkg-buildpackage", "-us", "-uc"],
            "rpm": ["rpmbuild", "-ba", self.settings.rpm_spec],
        }

    def build(self, package_format: str) -> CommandResult:
        """
        Build a distribution package.

        Raises:
            UsageError: If the format is unknown
            PackagingError: If the packaging tool fails
        """
        command = self.commands()[validate_format(package_format)]
        logger.info(f"Packaging ({package_format}): {' '.join(command)}")

        result = self.runner.run(command, cwd=self.project_root, capture=False)
        if not result.ok:
            raise PackagingError(f"Packaging failed: {result.describe()}")
        logger.info(f"{package_format} package built")
        return result
