"""
Execution of the selected installation strategy.

Each strategy runs once and returns one AttemptOutcome. The executor never
switches from one strategy to the other after a failure; the only fallback
is between acquisition sources for the toolchain manager itself.
"""

import logging
import time
from typing import Callable, List, Optional

from provisionkit.config.parser import ToolchainSettings
from provisionkit.core.exceptions import AcquisitionError
from provisionkit.core.process import CommandRunner
from provisionkit.packages.base import SystemPackageManager
from provisionkit.toolchain.acquisition import (
    AcquisitionSource,
    AttemptOutcome,
    NetworkBootstrapAcquisition,
    PackageManagerAcquisition,
)
from provisionkit.toolchain.initializer import ToolchainInitializer
from provisionkit.toolchain.selector import Strategy

logger = logging.getLogger(__name__)


class InstallExecutor:
    """
    Run installation strategies.

    Attributes:
        runner: Command runner
        settings: Toolchain settings
        package_manager: System package manager (None if absent)
        sources: Ordered toolchain-manager acquisition sources
        initializer: Toolchain initializer run after acquisition
    """

    def __init__(
        self,
        runner: CommandRunner,
        settings: ToolchainSettings,
        package_manager: Optional[SystemPackageManager] = None,
        sources: Optional[List[AcquisitionSource]] = None,
        initializer: Optional[ToolchainInitializer] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.runner = runner
        self.settings = settings
        self.package_manager = package_manager
        if sources is None:
            sources = [
                PackageManagerAcquisition(runner, settings, package_manager, sleep=sleep),
                NetworkBootstrapAcquisition(runner, settings),
            ]
        self.sources = sources
        self.initializer = initializer or ToolchainInitializer(runner, settings)

    def execute(self, strategy: Strategy) -> AttemptOutcome:
        """
        Run a strategy.

        Raises:
            AcquisitionError: If the toolchain manager could not be acquired
            InitializationError: If toolchain initialization failed
        """
        if strategy is Strategy.SKIP:
            return AttemptOutcome(True, "toolchain already satisfies requirement", "skip")
        if strategy is Strategy.PACKAGE_MANAGER_INSTALL:
            return self.run_package_manager_install()
        return self.run_toolchain_manager_install()

    def run_package_manager_install(self) -> AttemptOutcome:
        """Install the toolchain packages with the system package manager."""
        source = Strategy.PACKAGE_MANAGER_INSTALL.value
        if self.package_manager is None:
            return AttemptOutcome(False, "no system package manager available", source)

        result = self.package_manager.install(self.settings.packages)
        if not result.ok:
            return AttemptOutcome(False, f"install failed: {result.describe()}", source)

        return AttemptOutcome(
            True,
            f"installed {' '.join(self.settings.packages)} via {self.package_manager}",
            source,
        )

    def acquire_manager(self) -> AttemptOutcome:
        """
        Try acquisition sources in order until one succeeds.

        Returns:
            Outcome of the successful source

        Raises:
            AcquisitionError: If every applicable source failed
        """
        outcomes: List[AttemptOutcome] = []

        for source in self.sources:
            if not source.is_applicable():
                logger.debug(f"Skipping acquisition source {source.name}: not applicable")
                continue

            outcome = source.acquire()
            outcomes.append(outcome)
            if outcome.success:
                logger.info(f"Acquired {self.settings.manager}: {outcome.diagnostic}")
                return outcome

            logger.warning(f"{source.name} failed: {outcome.diagnostic}")
            if source is not self.sources[-1]:
                logger.info("Trying next installation source...")

        details = "; ".join(str(o) for o in outcomes) or "no applicable source"
        raise AcquisitionError(
            f"Failed to install {self.settings.manager}: {details}", outcomes
        )

    def run_toolchain_manager_install(self) -> AttemptOutcome:
        """
        Install the toolchain through the toolchain manager.

        Acquires the manager if it is missing, then runs initialization.

        Raises:
            AcquisitionError: If the manager could not be acquired
            InitializationError: If a fatal initialization step failed
        """
        source = Strategy.TOOLCHAIN_MANAGER_INSTALL.value

        if self.runner.which(self.settings.manager) is None:
            self.acquire_manager()
            if self.runner.which(self.settings.manager) is None:
                raise AcquisitionError(
                    f"{self.settings.manager} installation failed: command not found"
                )
        else:
            logger.info(f"{self.settings.manager} already installed")

        report = self.initializer.run()
        diagnostic = f"{self.settings.channel} toolchain active via {self.settings.manager}"
        if report.warnings:
            diagnostic += f" ({len(report.warnings)} warning(s))"
        return AttemptOutcome(True, diagnostic, source)
