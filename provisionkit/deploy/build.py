"""
Release build of the application.
"""

import logging
from pathlib import Path
from typing import List

from provisionkit.core.exceptions import BuildError
from provisionkit.core.process import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class BuildRunner:
    """Run the release build in the project root."""

    def __init__(self, runner: CommandRunner, project_root: Path, command: List[str]):
        self.runner = runner
        self.project_root = Path(project_root)
        self.command = list(command)

    def run(self) -> CommandResult:
        """
        Run the build command.

        Raises:
            BuildError: If the build fails
        """
        logger.info(f"Building: {' '.join(self.command)}")
        result = self.runner.run(self.command, cwd=self.project_root, capture=False)
        if not result.ok:
            raise BuildError(f"Build failed: {result.describe()}")
        logger.info("Build succeeded")
        return result
