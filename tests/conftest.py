"""
Pytest configuration and shared fixtures for ProvisionKit tests.
"""

import pytest
from pathlib import Path

from provisionkit.config.parser import ProvisionConfig, ToolchainSettings
from provisionkit.core.locking import LockManager
from provisionkit.core.platform import clear_platform_cache
from provisionkit.packages.apt import AptPackageManager
from tests.utils.mocks import FakeRunner


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def runner() -> FakeRunner:
    """Fake command runner with nothing installed."""
    return FakeRunner()


@pytest.fixture
def apt_runner() -> FakeRunner:
    """Fake command runner on a machine with apt."""
    return FakeRunner(executables=["apt-get", "apt-cache"])


@pytest.fixture
def apt(apt_runner) -> AptPackageManager:
    """APT package manager without sudo, bound to apt_runner."""
    return AptPackageManager(apt_runner)


@pytest.fixture
def settings() -> ToolchainSettings:
    """Default toolchain settings with instant polling."""
    return ToolchainSettings(poll_interval=0)


@pytest.fixture
def config() -> ProvisionConfig:
    """Default configuration."""
    return ProvisionConfig()


@pytest.fixture
def lock_manager(tmp_path) -> LockManager:
    """Lock manager writing into a temporary directory."""
    return LockManager(tmp_path / "lock")


@pytest.fixture
def project(tmp_path) -> Path:
    """Application project with build output and completion scripts."""
    root = tmp_path / "project"
    (root / "target" / "release").mkdir(parents=True)
    (root / "target" / "release" / "git-commit-helper").write_text("#!/bin/sh\n")
    (root / "completions").mkdir()
    (root / "completions" / "git-commit-helper.bash").write_text("complete -F _gch\n")
    (root / "completions" / "git-commit-helper.zsh").write_text("#compdef gch\n")
    return root


@pytest.fixture(autouse=True)
def _clear_platform_cache():
    clear_platform_cache()
    yield
    clear_platform_cache()
