"""
toolchain/probe.py

Toolchain probing - detects the installed compiler version, the toolchain
manager, and the version the system package repository would install.

Results are produced fresh on every call; installation steps change the
state being probed, so nothing is cached.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from provisionkit.config.parser import ToolchainSettings
from provisionkit.core.exceptions import ProbeError
from provisionkit.core.process import CommandRunner
from provisionkit.core.version import VersionString, meets_minimum
from provisionkit.packages.base import SystemPackageManager

logger = logging.getLogger(__name__)


@dataclass
class RepositoryCandidate:
    """
    What the system package repository offers for the compiler package.

    Attributes:
        package_found: Whether the package exists in the index
        version: Candidate version (None if package not found)
    """

    package_found: bool
    version: Optional[VersionString] = None


@dataclass
class ProbeResult:
    """
    Snapshot of the machine's toolchain state.

    Attributes:
        installed_version: Installed compiler version, None if absent/unparseable
        manager_present: Whether the toolchain manager executable was found
        package_manager_present: Whether a system package manager was detected
        repo_package_found: Whether the repository has the compiler package
        repo_version: Repository candidate version
        repo_error: Diagnostic if the repository probe failed
    """

    installed_version: Optional[VersionString] = None
    manager_present: bool = False
    package_manager_present: bool = False
    repo_package_found: bool = False
    repo_version: Optional[VersionString] = None
    repo_error: Optional[str] = None


def parse_compiler_version(version_output: str) -> Optional[VersionString]:
    """
    Extract the version token from compiler version output.

    ``rustc 1.75.0 (82e1608df 2023-12-21)`` yields 1.75.0.

    Returns:
        Parsed version or None if the output has no version token
    """
    fields = (version_output or "").split()
    if len(fields) < 2:
        return None
    return VersionString.parse(fields[1])


class ToolchainProbe:
    """
    Probe the installed toolchain and the system package repository.

    Attributes:
        runner: Command runner
        settings: Toolchain settings (executable and package names)
        package_manager: System package manager, or None if absent
    """

    def __init__(
        self,
        runner: CommandRunner,
        settings: ToolchainSettings,
        package_manager: Optional[SystemPackageManager] = None,
    ):
        self.runner = runner
        self.settings = settings
        self.package_manager = package_manager

    def detect_installed(self) -> Optional[VersionString]:
        """
        Detect the installed compiler version.

        Returns:
            Installed version, or None if not installed or unparseable
        """
        compiler = self.runner.which(self.settings.compiler)
        if compiler is None:
            logger.info(f"{self.settings.compiler} is not installed")
            return None

        result = self.runner.run([str(compiler), "--version"])
        if not result.ok:
            logger.debug(f"{compiler} --version failed: {result.describe()}")
            return None

        version = parse_compiler_version(result.stdout)
        if version is None:
            logger.debug(f"Could not parse version from output: {result.stdout[:200]}")
            return None

        logger.debug(f"Installed {self.settings.compiler} version: {version}")
        return version

    def detect_manager(self) -> bool:
        """Check whether the toolchain manager executable is available."""
        return self.runner.which(self.settings.manager) is not None

    def detect_repository_candidate(self) -> RepositoryCandidate:
        """
        Query the package repository for the compiler package.

        Refreshes the package index first.

        Returns:
            RepositoryCandidate

        Raises:
            ProbeError: If no package manager is present, the index refresh
                fails, or the candidate version cannot be parsed
        """
        if self.package_manager is None:
            raise ProbeError("No system package manager available")

        refresh = self.package_manager.refresh_index()
        if not refresh.ok:
            raise ProbeError(f"Package index refresh failed: {refresh.describe()}")

        package = self.settings.compiler
        if not self.package_manager.package_exists(package):
            logger.info(f"Package '{package}' not found in {self.package_manager} repository")
            return RepositoryCandidate(package_found=False)

        version = self.package_manager.candidate_version(package)
        logger.info(f"Repository candidate for '{package}': {version.base}")
        return RepositoryCandidate(package_found=True, version=version)

    def probe(
        self,
        required: Optional[VersionString] = None,
        include_repository: bool = True,
    ) -> ProbeResult:
        """
        Build a fresh ProbeResult.

        The repository is only probed when a package manager is present,
        include_repository is set, and the installed version does not
        already meet ``required``. Repository probe failures are recorded
        in ``repo_error`` rather than raised.

        Args:
            required: Minimum version; a satisfied install skips the repository
            include_repository: Probe the repository (refreshes the index)

        Returns:
            ProbeResult
        """
        result = ProbeResult(
            installed_version=self.detect_installed(),
            manager_present=self.detect_manager(),
            package_manager_present=self.package_manager is not None,
        )

        if self.package_manager is None or not include_repository:
            return result

        if required is not None and meets_minimum(result.installed_version, required):
            return result

        try:
            candidate = self.detect_repository_candidate()
        except ProbeError as e:
            logger.warning(f"Repository probe failed: {e}")
            result.repo_error = str(e)
            return result

        result.repo_package_found = candidate.package_found
        result.repo_version = candidate.version
        return result
