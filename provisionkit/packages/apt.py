"""
APT (Debian/Ubuntu) system package manager.

Candidate versions come from ``apt-cache policy``::

    rustc:
      Installed: (none)
      Candidate: 1.75.0+dfsg0ubuntu1-0ubuntu1
      Version table: ...

The token after ``Candidate:`` is cut at the first whitespace or ``-`` and
then parsed as a VersionString.
"""

import logging
import re
from typing import List, Optional, Sequence

from provisionkit.core.exceptions import ProbeError
from provisionkit.core.platform import privilege_prefix
from provisionkit.core.process import CommandResult, CommandRunner
from provisionkit.core.version import VersionString
from provisionkit.packages.base import SystemPackageManager

logger = logging.getLogger(__name__)

_CANDIDATE_PATTERN = re.compile(r"Candidate:\s*([^-\s]+)")


def parse_policy_candidate(policy_output: str) -> VersionString:
    """
    Extract the candidate version from ``apt-cache policy`` output.

    Args:
        policy_output: Text printed by apt-cache policy

    Returns:
        Parsed candidate version (suffix after '-' removed)

    Raises:
        ProbeError: If there is no Candidate line or the token is unparseable

    Example:
        >>> parse_policy_candidate("  Candidate: 1.72.0-ubuntu1").base
        '1.72.0'
    """
    match = _CANDIDATE_PATTERN.search(policy_output or "")
    if not match:
        raise ProbeError("No 'Candidate:' line found in package policy output")

    token = match.group(1)
    version = VersionString.parse(token)
    if version is None:
        raise ProbeError(f"Unparseable candidate version in package policy: {token!r}")
    return version


class AptPackageManager(SystemPackageManager):
    """APT package manager (apt-get / apt-cache)."""

    def get_name(self) -> str:
        return "apt"

    def is_available(self) -> bool:
        return self.runner.which("apt-get") is not None

    def refresh_index(self) -> CommandResult:
        logger.info("Refreshing apt package index...")
        return self.runner.run(self._privileged(["apt-get", "update"]), capture=False)

    def package_exists(self, package: str) -> bool:
        result = self.runner.run(["apt-cache", "show", package])
        return result.ok

    def policy(self, package: str) -> CommandResult:
        """Run ``apt-cache policy`` for package."""
        return self.runner.run(["apt-cache", "policy", package])

    def candidate_version(self, package: str) -> VersionString:
        result = self.policy(package)
        if not result.ok:
            raise ProbeError(f"Could not query package policy: {result.describe()}")

        logger.debug(f"apt-cache policy {package}:\n{result.stdout}")
        return parse_policy_candidate(result.stdout)

    def install(self, packages: Sequence[str]) -> CommandResult:
        logger.info(f"Installing via apt: {' '.join(packages)}")
        return self.runner.run(
            self._privileged(["apt-get", "install", "-y", *packages]), capture=False
        )


def detect_system_package_manager(
    runner: CommandRunner, use_sudo: str = "auto"
) -> Optional[SystemPackageManager]:
    """
    Detect the system package manager.

    Args:
        runner: Command runner for lookups and later calls
        use_sudo: Privilege escalation mode ('auto', 'always', 'never')

    Returns:
        Package manager instance, or None if no supported one is present
    """
    prefix: List[str] = privilege_prefix(use_sudo, runner.which("sudo") is not None)

    manager = AptPackageManager(runner, prefix)
    if manager.is_available():
        logger.debug(f"Detected system package manager: {manager}")
        return manager

    logger.debug("No supported system package manager found")
    return None
