"""
Toolchain-manager acquisition sources.

When the toolchain manager (rustup) is missing, the executor tries an
ordered list of acquisition sources until one succeeds:

1. PackageManagerAcquisition - install the manager package with the system
   package manager, then poll until the executable shows up
2. NetworkBootstrapAcquisition - fetch the bootstrap installer over HTTPS
   and run it non-interactively

Every source reports an AttemptOutcome; none of them raise on failure.
"""

import logging
import shutil
import tempfile
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from provisionkit.config.parser import ToolchainSettings
from provisionkit.core.download import DownloadError, DownloadProgress, download_file
from provisionkit.core.process import CommandResult, CommandRunner
from provisionkit.packages.base import SystemPackageManager

logger = logging.getLogger(__name__)


@dataclass
class AttemptOutcome:
    """
    Result of an installation or acquisition attempt.

    Attributes:
        success: Whether the attempt succeeded
        diagnostic: Human-readable description of what happened
        source: Name of the source/strategy that produced this outcome
    """

    success: bool
    diagnostic: str
    source: str = ""

    def __str__(self) -> str:
        status = "ok" if self.success else "failed"
        prefix = f"{self.source}: " if self.source else ""
        return f"{prefix}{status} - {self.diagnostic}"


def wait_for_executable(
    runner: CommandRunner,
    name: str,
    attempts: int = 5,
    interval: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[Path]:
    """
    Poll the search path until an executable appears.

    Package-manager post-install hooks can finish after the install command
    returns. Each of ``attempts`` checks is followed by a fixed ``interval``
    wait when the executable is missing; one last check follows the final
    wait.

    Args:
        runner: Command runner used for lookups
        name: Executable name
        attempts: Number of polling attempts
        interval: Seconds between attempts
        sleep: Delay function

    Returns:
        Path to the executable, or None if it never appeared
    """
    for attempt in range(1, attempts + 1):
        path = runner.which(name)
        if path is not None:
            return path
        logger.info(f"Attempt {attempt}/{attempts}: {name} not ready, waiting...")
        sleep(interval)

    return runner.which(name)


class AcquisitionSource(ABC):
    """A way of getting the toolchain manager onto the machine."""

    name = "source"

    @abstractmethod
    def is_applicable(self) -> bool:
        """Whether this source can be tried on this machine."""
        pass

    @abstractmethod
    def acquire(self) -> AttemptOutcome:
        """Install the toolchain manager."""
        pass


class PackageManagerAcquisition(AcquisitionSource):
    """Install the toolchain manager package via the system package manager."""

    name = "package-manager"

    def __init__(
        self,
        runner: CommandRunner,
        settings: ToolchainSettings,
        package_manager: Optional[SystemPackageManager],
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.runner = runner
        self.settings = settings
        self.package_manager = package_manager
        self.sleep = sleep

    def is_applicable(self) -> bool:
        return self.package_manager is not None

    def acquire(self) -> AttemptOutcome:
        package = self.settings.manager_package
        logger.info(f"Installing {package} via {self.package_manager}...")

        refresh = self.package_manager.refresh_index()
        if not refresh.ok:
            return AttemptOutcome(
                False, f"index refresh failed: {refresh.describe()}", self.name
            )

        install = self.package_manager.install([package])
        if not install.ok:
            return AttemptOutcome(
                False, f"install of {package} failed: {install.describe()}", self.name
            )

        logger.info(f"Waiting for {self.settings.manager} to become available...")
        path = wait_for_executable(
            self.runner,
            self.settings.manager,
            attempts=self.settings.poll_attempts,
            interval=self.settings.poll_interval,
            sleep=self.sleep,
        )
        if path is None:
            return AttemptOutcome(
                False,
                f"{self.settings.manager} not found after installing {package} "
                f"({self.settings.poll_attempts} attempts)",
                self.name,
            )

        return AttemptOutcome(True, f"{self.settings.manager} available at {path}", self.name)


# ============================================================================
# Bootstrap script fetchers
# ============================================================================


class ScriptFetcher(ABC):
    """Fetches the bootstrap installer and runs it."""

    name = "fetcher"

    @abstractmethod
    def is_available(self, runner: CommandRunner) -> bool:
        """Whether this fetcher can be used."""
        pass

    @abstractmethod
    def run_installer(
        self, runner: CommandRunner, url: str, installer_args: Sequence[str]
    ) -> CommandResult:
        """Fetch the script at url and execute it with installer_args."""
        pass


class _DownloadThenRun(ScriptFetcher):
    """Download the script to a temporary file, run it, remove it."""

    def run_installer(
        self, runner: CommandRunner, url: str, installer_args: Sequence[str]
    ) -> CommandResult:
        workdir = Path(tempfile.mkdtemp(prefix="provisionkit-"))
        script = workdir / "bootstrap.sh"
        try:
            fetched = self._download(runner, url, script)
            if not fetched.ok:
                return fetched
            logger.info("Running bootstrap installer...")
            return runner.run(["sh", str(script), *installer_args], capture=False)
        finally:
            shutil.rmtree(workdir, ignore_errors=True)

    @abstractmethod
    def _download(self, runner: CommandRunner, url: str, script: Path) -> CommandResult:
        pass


class WgetFetcher(_DownloadThenRun):
    """wget with a progress bar."""

    name = "wget"

    def is_available(self, runner: CommandRunner) -> bool:
        return runner.which("wget") is not None

    def _download(self, runner: CommandRunner, url: str, script: Path) -> CommandResult:
        return runner.run(
            [
                "wget",
                "--https-only",
                "-O",
                str(script),
                "--progress=bar:force:noscroll",
                "--show-progress",
                url,
            ],
            capture=False,
        )


class CurlFetcher(ScriptFetcher):
    """curl piped straight into sh."""

    name = "curl"

    def is_available(self, runner: CommandRunner) -> bool:
        return runner.which("curl") is not None

    def run_installer(
        self, runner: CommandRunner, url: str, installer_args: Sequence[str]
    ) -> CommandResult:
        return runner.run_pipeline(
            ["curl", "--proto", "=https", "--tlsv1.2", "-sSf", url],
            ["sh", "-s", "--", *installer_args],
        )


class HttpFetcher(_DownloadThenRun):
    """Built-in HTTPS download for hosts without wget or curl."""

    name = "http"

    def __init__(self, download: Callable[..., Path] = download_file):
        self.download = download

    def is_available(self, runner: CommandRunner) -> bool:
        return True

    def _download(self, runner: CommandRunner, url: str, script: Path) -> CommandResult:
        command = ["download", url]
        try:
            self.download(url, script, progress_callback=_log_progress)
        except (DownloadError, ValueError) as e:
            return CommandResult(command, 1, stderr=str(e))
        return CommandResult(command, 0)


def _log_progress(progress: DownloadProgress):
    logger.debug(f"Bootstrap download: {progress}")


def default_fetchers() -> List[ScriptFetcher]:
    """Fetchers in order of preference."""
    return [WgetFetcher(), CurlFetcher(), HttpFetcher()]


class NetworkBootstrapAcquisition(AcquisitionSource):
    """Fetch and run the toolchain-manager bootstrap installer."""

    name = "network-bootstrap"

    def __init__(
        self,
        runner: CommandRunner,
        settings: ToolchainSettings,
        fetchers: Optional[List[ScriptFetcher]] = None,
    ):
        self.runner = runner
        self.settings = settings
        self.fetchers = fetchers if fetchers is not None else default_fetchers()

    def is_applicable(self) -> bool:
        return any(f.is_available(self.runner) for f in self.fetchers)

    def select_fetcher(self) -> Optional[ScriptFetcher]:
        """First available fetcher, or None."""
        for fetcher in self.fetchers:
            if fetcher.is_available(self.runner):
                return fetcher
        return None

    def acquire(self) -> AttemptOutcome:
        fetcher = self.select_fetcher()
        if fetcher is None:
            return AttemptOutcome(False, "no download tool available", self.name)

        url = self.settings.bootstrap_url
        logger.info(f"Downloading {self.settings.manager} installer from {url} ({fetcher.name})...")
        result = fetcher.run_installer(self.runner, url, ["-y"])
        if not result.ok:
            return AttemptOutcome(
                False, f"bootstrap via {fetcher.name} failed: {result.describe()}", self.name
            )

        path = self.runner.which(self.settings.manager)
        if path is None:
            return AttemptOutcome(
                False,
                f"bootstrap finished but {self.settings.manager} was not found "
                f"(expected in {self.settings.manager_bin_dir})",
                self.name,
            )

        return AttemptOutcome(True, f"{self.settings.manager} installed at {path}", self.name)
