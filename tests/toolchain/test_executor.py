"""
Tests for the installation executor.
"""

import pytest
from unittest.mock import Mock

from provisionkit.core.exceptions import AcquisitionError, InitializationError
from provisionkit.toolchain.acquisition import (
    AttemptOutcome,
    CurlFetcher,
    NetworkBootstrapAcquisition,
)
from provisionkit.toolchain.executor import InstallExecutor
from provisionkit.toolchain.initializer import InitializationReport, InitState
from provisionkit.toolchain.selector import Strategy
from tests.utils import FakeRunner


def _source(name, success, applicable=True):
    source = Mock()
    source.name = name
    source.is_applicable.return_value = applicable
    source.acquire.return_value = AttemptOutcome(success, f"{name} result", name)
    return source


def _initializer(warnings=None):
    initializer = Mock()
    initializer.run.return_value = InitializationReport(
        warnings=list(warnings or []), final_state=InitState.SUCCESS
    )
    return initializer


class TestExecuteSkip:
    """Tests for the SKIP strategy."""

    def test_skip_runs_nothing(self, runner, settings):
        outcome = InstallExecutor(runner, settings).execute(Strategy.SKIP)

        assert outcome.success is True
        assert runner.calls == []


class TestPackageManagerInstall:
    """Tests for PACKAGE_MANAGER_INSTALL."""

    def test_installs_configured_packages(self, apt_runner, apt, settings):
        outcome = InstallExecutor(apt_runner, settings, apt).execute(
            Strategy.PACKAGE_MANAGER_INSTALL
        )

        assert outcome.success is True
        assert apt_runner.commands() == ["apt-get install -y rustc cargo"]

    def test_install_failure_does_not_fall_back(self, apt_runner, apt, settings):
        """Test a failed package install is reported without switching strategy."""
        apt_runner.on("apt-get", "install", returncode=100)
        initializer = _initializer()

        outcome = InstallExecutor(
            apt_runner, settings, apt, initializer=initializer
        ).execute(Strategy.PACKAGE_MANAGER_INSTALL)

        assert outcome.success is False
        assert outcome.source == "package-manager"
        initializer.run.assert_not_called()
        assert not apt_runner.ran("sh")

    def test_no_package_manager(self, runner, settings):
        outcome = InstallExecutor(runner, settings).run_package_manager_install()

        assert outcome.success is False


class TestAcquireManager:
    """Tests for InstallExecutor.acquire_manager."""

    def test_first_source_wins(self, runner, settings):
        first, second = _source("a", True), _source("b", True)

        outcome = InstallExecutor(runner, settings, sources=[first, second]).acquire_manager()

        assert outcome.source == "a"
        second.acquire.assert_not_called()

    def test_falls_back_to_next_source(self, runner, settings):
        first, second = _source("a", False), _source("b", True)

        outcome = InstallExecutor(runner, settings, sources=[first, second]).acquire_manager()

        assert outcome.source == "b"

    def test_skips_inapplicable_sources(self, runner, settings):
        first, second = _source("a", True, applicable=False), _source("b", True)

        outcome = InstallExecutor(runner, settings, sources=[first, second]).acquire_manager()

        assert outcome.source == "b"
        first.acquire.assert_not_called()

    def test_all_sources_fail(self, runner, settings):
        sources = [_source("a", False), _source("b", False)]

        with pytest.raises(AcquisitionError, match="Failed to install rustup") as exc_info:
            InstallExecutor(runner, settings, sources=sources).acquire_manager()

        assert [o.source for o in exc_info.value.outcomes] == ["a", "b"]

    def test_no_applicable_source(self, runner, settings):
        with pytest.raises(AcquisitionError, match="no applicable source"):
            InstallExecutor(
                runner, settings, sources=[_source("a", True, applicable=False)]
            ).acquire_manager()


class TestToolchainManagerInstall:
    """Tests for TOOLCHAIN_MANAGER_INSTALL."""

    def test_manager_present_skips_acquisition(self, settings):
        runner = FakeRunner(executables=["rustup"])
        source = _source("a", True)
        initializer = _initializer()

        outcome = InstallExecutor(
            runner, settings, sources=[source], initializer=initializer
        ).execute(Strategy.TOOLCHAIN_MANAGER_INSTALL)

        assert outcome.success is True
        source.acquire.assert_not_called()
        initializer.run.assert_called_once()

    def test_package_manager_source_falls_back_to_bootstrap(self, apt_runner, apt, settings):
        """Test apt cannot provide rustup, so the network installer is used."""
        apt_runner.install("curl")
        apt_runner.on("apt-get", "install", "-y", "rustup", returncode=100)
        apt_runner.on("sh", effect=lambda: apt_runner.install("rustup"))

        outcome = InstallExecutor(apt_runner, settings, apt).execute(
            Strategy.TOOLCHAIN_MANAGER_INSTALL
        )

        assert outcome.success is True
        commands = apt_runner.commands()
        assert commands.index("apt-get install -y rustup") < commands.index(
            "curl --proto =https --tlsv1.2 -sSf https://sh.rustup.rs"
        )
        assert "rustup default stable" in commands

    def test_acquired_but_still_missing(self, runner, settings):
        """Test a source reporting success without the executable appearing."""
        with pytest.raises(AcquisitionError, match="command not found"):
            InstallExecutor(
                runner, settings, sources=[_source("a", True)], initializer=_initializer()
            ).execute(Strategy.TOOLCHAIN_MANAGER_INSTALL)

    def test_initialization_failure_propagates(self, settings):
        runner = FakeRunner(executables=["rustup"])
        runner.on("rustup", "toolchain", "install", returncode=1)

        with pytest.raises(InitializationError):
            InstallExecutor(runner, settings).execute(Strategy.TOOLCHAIN_MANAGER_INSTALL)

    def test_warnings_in_diagnostic(self, settings):
        runner = FakeRunner(executables=["rustup"])

        outcome = InstallExecutor(
            runner, settings, initializer=_initializer(["show failed"])
        ).execute(Strategy.TOOLCHAIN_MANAGER_INSTALL)

        assert "1 warning(s)" in outcome.diagnostic

    def test_without_package_manager_uses_bootstrap(self, settings):
        runner = FakeRunner(executables=["curl"])
        runner.on("sh", effect=lambda: runner.install("rustup"))
        sources = [NetworkBootstrapAcquisition(runner, settings, fetchers=[CurlFetcher()])]

        outcome = InstallExecutor(runner, settings, sources=sources).execute(
            Strategy.TOOLCHAIN_MANAGER_INSTALL
        )

        assert outcome.success is True
        assert not runner.ran("apt-get")
