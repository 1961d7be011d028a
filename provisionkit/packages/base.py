"""
Base system package manager abstraction for ProvisionKit.

A system package manager is treated as an opaque set of commands with an
exit status and text output: refresh the index, check whether a package
exists, report the candidate version, install packages.

Classes:
    SystemPackageManager: Abstract base class for system package managers
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from provisionkit.core.process import CommandResult, CommandRunner
from provisionkit.core.version import VersionString

logger = logging.getLogger(__name__)


class SystemPackageManager(ABC):
    """
    Abstract base class for system package managers.

    Attributes:
        runner: Command runner used for every call
        privilege_prefix: Prefix for mutating commands (e.g. ['sudo'])
    """

    def __init__(
        self, runner: CommandRunner, privilege_prefix: Optional[List[str]] = None
    ):
        self.runner = runner
        self.privilege_prefix = list(privilege_prefix or [])

    @abstractmethod
    def get_name(self) -> str:
        """Get the package manager name."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the package manager executables are on the search path."""
        pass

    @abstractmethod
    def refresh_index(self) -> CommandResult:
        """Refresh the local package index."""
        pass

    @abstractmethod
    def package_exists(self, package: str) -> bool:
        """Check whether package is known to the index."""
        pass

    @abstractmethod
    def candidate_version(self, package: str) -> VersionString:
        """
        Version the package manager would install now.

        Raises:
            ProbeError: If the candidate cannot be determined or parsed
        """
        pass

    @abstractmethod
    def install(self, packages: Sequence[str]) -> CommandResult:
        """Install packages non-interactively."""
        pass

    def _privileged(self, command: Sequence[str]) -> List[str]:
        """Prefix a mutating command with the privilege prefix."""
        return self.privilege_prefix + list(command)

    def __str__(self) -> str:
        return self.get_name()
