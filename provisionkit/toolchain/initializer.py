"""
Toolchain initialization through the toolchain manager.

Runs once rustup is present:

    VERIFY_MANAGER_AVAILABLE -> SHOW_DIAGNOSTICS -> INSTALL_DEFAULT_TOOLCHAIN
        -> SET_DEFAULT_TOOLCHAIN -> VERIFY_FINAL -> SUCCESS

Diagnostic states are best-effort and only produce warnings. Any other
failing state stops the sequence with InitializationError.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import List

from provisionkit.config.parser import ToolchainSettings
from provisionkit.core.exceptions import InitializationError
from provisionkit.core.process import CommandRunner

logger = logging.getLogger(__name__)


class InitState(enum.Enum):
    """States of the initialization sequence."""

    VERIFY_MANAGER_AVAILABLE = "verify-manager-available"
    SHOW_DIAGNOSTICS = "show-diagnostics"
    INSTALL_DEFAULT_TOOLCHAIN = "install-default-toolchain"
    SET_DEFAULT_TOOLCHAIN = "set-default-toolchain"
    VERIFY_FINAL = "verify-final"
    SUCCESS = "success"
    FATAL = "fatal"


# States whose failure is logged and skipped
BEST_EFFORT_STATES = {InitState.SHOW_DIAGNOSTICS, InitState.VERIFY_FINAL}

_SEQUENCE = [
    InitState.VERIFY_MANAGER_AVAILABLE,
    InitState.SHOW_DIAGNOSTICS,
    InitState.INSTALL_DEFAULT_TOOLCHAIN,
    InitState.SET_DEFAULT_TOOLCHAIN,
    InitState.VERIFY_FINAL,
]


@dataclass
class InitializationReport:
    """States visited and warnings raised during initialization."""

    visited: List[InitState] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    final_state: InitState = InitState.VERIFY_MANAGER_AVAILABLE

    @property
    def success(self) -> bool:
        return self.final_state is InitState.SUCCESS


class ToolchainInitializer:
    """
    Ensure the default toolchain channel is installed and active.

    Attributes:
        runner: Command runner
        settings: Toolchain settings (manager name, channel)
    """

    def __init__(self, runner: CommandRunner, settings: ToolchainSettings):
        self.runner = runner
        self.settings = settings

    def _command(self, state: InitState) -> List[str]:
        manager = self.settings.manager
        channel = self.settings.channel
        commands = {
            InitState.VERIFY_MANAGER_AVAILABLE: [manager, "-V"],
            InitState.SHOW_DIAGNOSTICS: [manager, "show"],
            InitState.INSTALL_DEFAULT_TOOLCHAIN: [
                manager,
                "toolchain",
                "install",
                channel,
                "--no-self-update",
            ],
            InitState.SET_DEFAULT_TOOLCHAIN: [manager, "default", channel],
            InitState.VERIFY_FINAL: [manager, "show"],
        }
        return commands[state]

    def run(self) -> InitializationReport:
        """
        Run the initialization sequence.

        Returns:
            InitializationReport ending in SUCCESS

        Raises:
            InitializationError: If a fatal state fails
        """
        report = InitializationReport()
        logger.info(f"Initializing {self.settings.manager}...")

        for state in _SEQUENCE:
            report.visited.append(state)
            report.final_state = state

            if state is InitState.VERIFY_MANAGER_AVAILABLE and (
                self.runner.which(self.settings.manager) is None
            ):
                report.final_state = InitState.FATAL
                raise InitializationError(
                    f"{self.settings.manager} command is not available", state
                )

            result = self.runner.run(self._command(state), capture=False)
            if result.ok:
                logger.debug(f"{state.value}: ok")
                continue

            if state in BEST_EFFORT_STATES:
                warning = f"{state.value} failed: {result.describe()}"
                logger.warning(warning)
                report.warnings.append(warning)
                continue

            report.final_state = InitState.FATAL
            raise InitializationError(
                f"{state.value} failed: {result.describe()}", state
            )

        report.final_state = InitState.SUCCESS
        logger.info(
            f"Default toolchain set to '{self.settings.channel}' via {self.settings.manager}"
        )
        return report
