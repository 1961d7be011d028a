"""
Tests for the provisioning orchestrator.
"""

import logging
from unittest.mock import patch

import pytest

from provisionkit.config.parser import (
    DeploySettings,
    ProvisionConfig,
    ToolchainSettings,
)
from provisionkit.core.exceptions import (
    BuildError,
    ProvisioningError,
    UsageError,
)
from provisionkit.core.platform import PlatformInfo
from provisionkit.orchestrator import Phase, ProvisioningOrchestrator
from provisionkit.packages.apt import AptPackageManager
from provisionkit.toolchain.selector import Strategy
from tests.utils import FakeRunner, apt_policy_output

RUSTC_165 = "rustc 1.65.0 (897e37553 2022-11-02)"
RUSTC_172 = "rustc 1.72.0 (5680fa18f 2023-08-23)"
RUSTC_175 = "rustc 1.75.0 (82e1608df 2023-12-21)"


@pytest.fixture
def pipeline_config(tmp_path):
    home = tmp_path / "home"
    return ProvisionConfig(
        toolchain=ToolchainSettings(poll_interval=0),
        deploy=DeploySettings(
            bin_dir=str(home / "bin"),
            bash_completion_dir=str(home / "bash"),
            zsh_completion_dir=str(home / "zsh"),
        ),
    )


def _orchestrator(config, project, runner, lock_manager, package_manager=None, **kwargs):
    return ProvisioningOrchestrator(
        config,
        project,
        runner=runner,
        package_manager=package_manager,
        lock_manager=lock_manager,
        sleep=lambda seconds: None,
        **kwargs,
    )


class TestProvision:
    """Tests for ProvisioningOrchestrator.provision."""

    def test_idempotent_skip(self, pipeline_config, project, apt_runner, apt, lock_manager):
        """Test a satisfied install changes nothing and refreshes no index."""
        apt_runner.install("rustc")
        apt_runner.on("rustc", "--version", stdout=RUSTC_175)

        orchestrator = _orchestrator(pipeline_config, project, apt_runner, lock_manager, apt)
        first = orchestrator.provision()
        second = orchestrator.provision()

        for report in (first, second):
            assert report.selection.strategy is Strategy.SKIP
            assert report.final_version.base == "1.75.0"
        assert not apt_runner.ran("apt-get")
        assert not apt_runner.ran("rustup")

    def test_logs_platform(self, pipeline_config, project, apt_runner, apt, lock_manager, caplog):
        apt_runner.install("rustc")
        apt_runner.on("rustc", "--version", stdout=RUSTC_175)
        orchestrator = _orchestrator(pipeline_config, project, apt_runner, lock_manager, apt)

        with patch(
            "provisionkit.orchestrator.detect_platform",
            return_value=PlatformInfo("linux", "arm64", "debian"),
        ), caplog.at_level(logging.INFO, logger="provisionkit.orchestrator"):
            orchestrator.provision()

        assert "on linux-arm64 (debian)" in caplog.text

    def test_package_manager_install(self, pipeline_config, project, apt_runner, apt, lock_manager):
        """Test a recent repository candidate is installed via apt."""
        apt_runner.on("apt-cache", "policy", stdout=apt_policy_output("1.72.0-ubuntu1"))
        apt_runner.on(
            "apt-get", "install", "-y", "rustc", "cargo",
            effect=lambda: apt_runner.install("rustc"),
        )
        apt_runner.on("rustc", "--version", stdout=RUSTC_172)

        report = _orchestrator(
            pipeline_config, project, apt_runner, lock_manager, apt
        ).provision()

        assert report.selection.strategy is Strategy.PACKAGE_MANAGER_INSTALL
        assert report.final_version.base == "1.72.0"
        assert not apt_runner.ran("rustup")

    def test_outdated_repository_uses_toolchain_manager(
        self, pipeline_config, project, apt_runner, apt, lock_manager
    ):
        """Test an old repository candidate leads to rustup."""
        apt_runner.install("rustc")
        apt_runner.install("rustup")
        apt_runner.on("rustc", "--version", stdout=RUSTC_165)
        apt_runner.on("rustc", "--version", stdout=RUSTC_175)
        apt_runner.on("apt-cache", "policy", stdout=apt_policy_output("1.66.1+dfsg1-1"))

        report = _orchestrator(
            pipeline_config, project, apt_runner, lock_manager, apt
        ).provision()

        assert report.selection.strategy is Strategy.TOOLCHAIN_MANAGER_INSTALL
        assert report.probe.installed_version.base == "1.65.0"
        assert report.final_version.base == "1.75.0"
        assert apt_runner.ran("rustup", "default", "stable")
        assert not apt_runner.ran("apt-get", "install")

    def test_no_package_manager_bootstraps(self, pipeline_config, project, lock_manager):
        """Test a machine without apt gets rustup from the network installer."""
        runner = FakeRunner(executables=["curl"])
        runner.on("sh", effect=lambda: runner.install("rustup"))
        runner.on("rustup", "default", effect=lambda: runner.install("rustc"))
        runner.on("rustc", "--version", stdout=RUSTC_175)

        report = _orchestrator(pipeline_config, project, runner, lock_manager).provision()

        assert report.selection.strategy is Strategy.TOOLCHAIN_MANAGER_INSTALL
        assert report.final_version.base == "1.75.0"
        assert not runner.ran("apt-get")
        assert runner.ran("curl")

    def test_failed_package_install_is_fatal(
        self, pipeline_config, project, apt_runner, apt, lock_manager
    ):
        """Test no fallback to the toolchain manager after an apt failure."""
        apt_runner.on("apt-cache", "policy", stdout=apt_policy_output("1.75.0-1"))
        apt_runner.on("apt-get", "install", returncode=100, stderr="E: dpkg was interrupted")

        with pytest.raises(ProvisioningError, match="dpkg was interrupted"):
            _orchestrator(pipeline_config, project, apt_runner, lock_manager, apt).provision()

        assert not apt_runner.ran("rustup")

    def test_post_install_verification(
        self, pipeline_config, project, apt_runner, apt, lock_manager
    ):
        """Test an install that leaves an old compiler is reported."""
        apt_runner.install("rustc")
        apt_runner.on("rustc", "--version", stdout=RUSTC_165)
        apt_runner.on("apt-cache", "policy", stdout=apt_policy_output("1.72.0-ubuntu1"))

        with pytest.raises(ProvisioningError, match="does not meet required version"):
            _orchestrator(pipeline_config, project, apt_runner, lock_manager, apt).provision()

    def test_plan_does_not_install(self, pipeline_config, project, apt_runner, apt, lock_manager):
        selection = _orchestrator(
            pipeline_config, project, apt_runner, lock_manager, apt
        ).plan(include_repository=False)

        assert selection.strategy is Strategy.TOOLCHAIN_MANAGER_INSTALL
        assert apt_runner.calls == []


class TestRun:
    """Tests for ProvisioningOrchestrator.run."""

    @pytest.fixture
    def ready_runner(self):
        runner = FakeRunner(executables=["rustc"])
        runner.on("rustc", "--version", stdout=RUSTC_175)
        return runner

    def test_full_pipeline(self, pipeline_config, project, ready_runner, lock_manager, tmp_path):
        report = _orchestrator(pipeline_config, project, ready_runner, lock_manager).run()

        assert report.phases == [
            Phase.PROBE,
            Phase.SELECT,
            Phase.EXECUTE,
            Phase.VERIFY,
            Phase.BUILD,
            Phase.DEPLOY,
            Phase.REGISTER,
            Phase.DONE,
        ]
        binary = tmp_path / "home" / "bin" / "git-commit-helper"
        assert report.deploy.binary == binary
        assert report.registered is True
        assert ready_runner.commands()[-2:] == [
            "cargo build --release",
            f"{binary} install --force",
        ]
        assert ready_runner.cwds[-1] == project

    def test_explicit_repository(self, pipeline_config, project, ready_runner, lock_manager, tmp_path):
        repository = tmp_path / "repo"
        repository.mkdir()

        _orchestrator(
            pipeline_config, project, ready_runner, lock_manager, repository=repository
        ).run()

        assert ready_runner.cwds[-1] == repository

    def test_repository_from_config(self, pipeline_config, project, ready_runner, lock_manager, tmp_path):
        pipeline_config.deploy.repository = str(tmp_path)

        orchestrator = _orchestrator(pipeline_config, project, ready_runner, lock_manager)

        assert orchestrator.repository == tmp_path

    def test_no_register(self, pipeline_config, project, ready_runner, lock_manager):
        report = _orchestrator(pipeline_config, project, ready_runner, lock_manager).run(
            register=False
        )

        assert report.registered is False
        assert Phase.REGISTER not in report.phases
        assert not any(c.endswith("install --force") for c in ready_runner.commands())

    def test_skip_build(self, pipeline_config, project, ready_runner, lock_manager):
        report = _orchestrator(pipeline_config, project, ready_runner, lock_manager).run(
            build=False
        )

        assert report.deploy is None
        assert not ready_runner.ran("cargo")

    def test_packaging_runs_last(self, pipeline_config, project, ready_runner, lock_manager):
        report = _orchestrator(pipeline_config, project, ready_runner, lock_manager).run(
            package_format="deb"
        )

        assert report.package_format == "deb"
        assert report.phases[-2:] == [Phase.PACKAGE, Phase.DONE]
        assert ready_runner.commands()[-1] == "dpkg-buildpackage -us -uc"

    def test_unknown_format_before_anything_runs(
        self, pipeline_config, project, ready_runner, lock_manager
    ):
        with pytest.raises(UsageError):
            _orchestrator(pipeline_config, project, ready_runner, lock_manager).run(
                package_format="msi"
            )

        assert ready_runner.calls == []
        assert ready_runner.which_calls == []

    def test_build_failure_stops_pipeline(
        self, pipeline_config, project, ready_runner, lock_manager, tmp_path
    ):
        ready_runner.on("cargo", "build", returncode=101)

        with pytest.raises(BuildError):
            _orchestrator(pipeline_config, project, ready_runner, lock_manager).run()

        assert not (tmp_path / "home" / "bin" / "git-commit-helper").exists()


class TestConstruction:
    """Tests for orchestrator defaults."""

    def test_detects_package_manager(self, pipeline_config, project, apt_runner, lock_manager):
        orchestrator = ProvisioningOrchestrator(
            pipeline_config, project, runner=apt_runner, lock_manager=lock_manager
        )

        assert isinstance(orchestrator.package_manager, AptPackageManager)

    def test_repository_defaults_to_project_root(self, pipeline_config, project, runner):
        orchestrator = ProvisioningOrchestrator(
            pipeline_config, project, runner=runner, package_manager=None
        )

        assert orchestrator.repository == project.resolve()
