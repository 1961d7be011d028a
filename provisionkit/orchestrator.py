"""
Provisioning orchestration.

Sequences one provisioning run and the steps that follow it:

    PROBE -> SELECT -> EXECUTE -> VERIFY -> BUILD -> DEPLOY -> REGISTER
        -> PACKAGE (optional) -> DONE

Any fatal failure aborts the run at once; steps already applied are not
rolled back.

Usage:
    from provisionkit.config import load_config
    from provisionkit.orchestrator import ProvisioningOrchestrator

    orchestrator = ProvisioningOrchestrator(load_config(), Path.cwd())
    orchestrator.run(package_format="deb")
"""

import enum
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from provisionkit.config.parser import ProvisionConfig
from provisionkit.core.exceptions import ProvisioningError
from provisionkit.core.locking import LockManager
from provisionkit.core.platform import detect_platform
from provisionkit.core.process import CommandRunner
from provisionkit.core.version import VersionString, meets_minimum
from provisionkit.deploy.build import BuildRunner
from provisionkit.deploy.installer import ArtifactDeployer, DeployResult, SelfRegistrar
from provisionkit.deploy.packaging import PackageBuilder, validate_format
from provisionkit.packages.apt import detect_system_package_manager
from provisionkit.packages.base import SystemPackageManager
from provisionkit.toolchain.acquisition import AttemptOutcome
from provisionkit.toolchain.executor import InstallExecutor
from provisionkit.toolchain.probe import ProbeResult, ToolchainProbe
from provisionkit.toolchain.selector import Selection, Strategy, select_strategy

logger = logging.getLogger(__name__)

# Sentinel: detect the system package manager at construction time
AUTO_DETECT = object()


class Phase(enum.Enum):
    """Pipeline phases."""

    PROBE = "probe"
    SELECT = "select"
    EXECUTE = "execute"
    VERIFY = "verify"
    BUILD = "build"
    DEPLOY = "deploy"
    REGISTER = "register"
    PACKAGE = "package"
    DONE = "done"


@dataclass
class ProvisioningReport:
    """Outcome of the provisioning phase."""

    probe: ProbeResult
    selection: Selection
    outcome: AttemptOutcome
    final_version: Optional[VersionString] = None


@dataclass
class PipelineReport:
    """Outcome of a full pipeline run."""

    provisioning: Optional[ProvisioningReport] = None
    deploy: Optional[DeployResult] = None
    registered: bool = False
    package_format: Optional[str] = None
    phases: List[Phase] = field(default_factory=list)


class ProvisioningOrchestrator:
    """
    Top-level state machine for provisioning, build and deployment.

    Attributes:
        config: ProvisionKit configuration
        project_root: Application source directory
        repository: Repository the binary registers itself into
        runner: Command runner shared by all steps
        package_manager: System package manager (None if absent)
    """

    def __init__(
        self,
        config: ProvisionConfig,
        project_root: Path,
        repository: Optional[Path] = None,
        runner: Optional[CommandRunner] = None,
        package_manager=AUTO_DETECT,
        lock_manager: Optional[LockManager] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.project_root = Path(project_root).resolve()

        if repository is None and config.deploy.repository:
            repository = Path(config.deploy.repository).expanduser()
        self.repository = Path(repository) if repository else self.project_root

        self.runner = runner or CommandRunner(
            extra_paths=[Path(config.toolchain.manager_bin_dir).expanduser()]
        )
        if package_manager is AUTO_DETECT:
            package_manager = detect_system_package_manager(
                self.runner, config.package_manager.use_sudo
            )
        self.package_manager: Optional[SystemPackageManager] = package_manager
        self._lock_manager = lock_manager
        self.sleep = sleep

    @property
    def required(self) -> VersionString:
        return self.config.toolchain.required

    @property
    def lock_manager(self) -> LockManager:
        if self._lock_manager is None:
            self._lock_manager = LockManager()
        return self._lock_manager

    def make_probe(self) -> ToolchainProbe:
        return ToolchainProbe(self.runner, self.config.toolchain, self.package_manager)

    def make_executor(self) -> InstallExecutor:
        return InstallExecutor(
            self.runner,
            self.config.toolchain,
            self.package_manager,
            sleep=self.sleep,
        )

    def plan(self, include_repository: bool = True) -> Selection:
        """
        Probe and select a strategy without installing anything.

        The repository probe still refreshes the package index unless
        include_repository is False.
        """
        probe = self.make_probe().probe(
            required=self.required, include_repository=include_repository
        )
        return select_strategy(probe, self.required)

    def provision(self) -> ProvisioningReport:
        """
        Ensure the required toolchain is installed.

        Returns:
            ProvisioningReport

        Raises:
            ProvisioningError: (and subclasses) on any fatal failure
            ProvisionLockTimeout: If another run holds the lock
        """
        with self.lock_manager.provision_lock(timeout=self.config.lock.timeout):
            return self._provision_locked()

    def _provision_locked(self) -> ProvisioningReport:
        probe_tool = self.make_probe()
        logger.info(
            f"Checking {self.config.toolchain.compiler} (required >= {self.required}) "
            f"on {detect_platform()}..."
        )

        probe = probe_tool.probe(required=self.required)
        selection = select_strategy(probe, self.required)
        logger.info(f"Strategy: {selection.strategy.value} ({selection.reason})")

        outcome = self.make_executor().execute(selection.strategy)
        logger.info(f"Result: {outcome}")
        if not outcome.success:
            raise ProvisioningError(f"Toolchain installation failed: {outcome.diagnostic}")

        if selection.strategy is Strategy.SKIP:
            return ProvisioningReport(probe, selection, outcome, probe.installed_version)

        # Re-probe: the install changed the machine state
        final_version = probe_tool.detect_installed()
        if not meets_minimum(final_version, self.required):
            raise ProvisioningError(
                f"{self.config.toolchain.compiler} {final_version or '(not found)'} "
                f"does not meet required version {self.required} after installation"
            )

        logger.info(f"{self.config.toolchain.compiler} {final_version} is ready")
        return ProvisioningReport(probe, selection, outcome, final_version)

    def run(
        self,
        build: bool = True,
        register: Optional[bool] = None,
        package_format: Optional[str] = None,
    ) -> PipelineReport:
        """
        Run provisioning, build, deploy, registration and packaging.

        Args:
            build: Run the release build and deployment steps
            register: Override deploy.register
            package_format: 'arch', 'deb' or 'rpm' to build a package

        Returns:
            PipelineReport

        Raises:
            UsageError: If package_format is unknown (checked before anything runs)
            ProvisionKitError: (and subclasses) on any fatal failure
        """
        if package_format is not None:
            validate_format(package_format)
        if register is None:
            register = self.config.deploy.register

        report = PipelineReport(package_format=package_format)

        report.phases.extend([Phase.PROBE, Phase.SELECT, Phase.EXECUTE, Phase.VERIFY])
        report.provisioning = self.provision()

        if build:
            report.phases.append(Phase.BUILD)
            BuildRunner(self.runner, self.project_root, self.config.build.command).run()

            report.phases.append(Phase.DEPLOY)
            report.deploy = ArtifactDeployer(self.config.deploy, self.project_root).deploy()
            self._print_next_steps()

            if register:
                report.phases.append(Phase.REGISTER)
                SelfRegistrar(self.runner, report.deploy.binary, self.repository).register()
                report.registered = True

        if package_format is not None:
            report.phases.append(Phase.PACKAGE)
            PackageBuilder(self.runner, self.project_root, self.config.packaging).build(
                package_format
            )

        report.phases.append(Phase.DONE)
        logger.info("Installation complete!")
        return report

    def _print_next_steps(self):
        name = self.config.deploy.binary_name
        logger.info("To finish setup run:")
        logger.info(f"  {name} config")
        logger.info("Reload your shell configuration to enable completions:")
        logger.info("  bash: source ~/.bashrc")
        logger.info("  zsh:  source ~/.zshrc")
