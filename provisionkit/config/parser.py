"""YAML configuration parser for ProvisionKit.

This module provides parsing and validation for provisionkit.yaml. The file is
optional; every setting has a default matching the git-commit-helper install.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from provisionkit.core.exceptions import ConfigError
from provisionkit.core.platform import SUDO_MODES
from provisionkit.core.version import VersionString

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "provisionkit.yaml"


@dataclass
class ToolchainSettings:
    """Toolchain provisioning settings."""

    required_version: str = "1.70.0"
    compiler: str = "rustc"
    packages: List[str] = field(default_factory=lambda: ["rustc", "cargo"])
    manager: str = "rustup"
    manager_package: str = "rustup"
    manager_bin_dir: str = "~/.cargo/bin"
    channel: str = "stable"
    bootstrap_url: str = "https://sh.rustup.rs"
    poll_attempts: int = 5
    poll_interval: float = 2.0

    @property
    def required(self) -> VersionString:
        """Required version as a parsed VersionString."""
        return VersionString.coerce(self.required_version)


@dataclass
class PackageManagerSettings:
    """System package manager settings."""

    use_sudo: str = "auto"  # 'auto', 'always', 'never'


@dataclass
class BuildSettings:
    """Release build settings."""

    command: List[str] = field(default_factory=lambda: ["cargo", "build", "--release"])


@dataclass
class DeploySettings:
    """Artifact deployment settings."""

    binary_name: str = "git-commit-helper"
    binary_source: str = "target/release/git-commit-helper"
    bin_dir: str = "~/.local/bin"
    bash_completion: str = "completions/git-commit-helper.bash"
    bash_completion_dir: str = "~/.local/share/bash-completion/completions"
    zsh_completion: str = "completions/git-commit-helper.zsh"
    zsh_completion_dir: str = "~/.local/share/zsh/site-functions"
    register: bool = True
    repository: Optional[str] = None  # None means project root


@dataclass
class PackagingSettings:
    """Distribution packaging settings."""

    rpm_spec: str = "git-commit-helper.spec"


@dataclass
class LockSettings:
    """Provisioning lock settings."""

    timeout: float = 600


@dataclass
class ProvisionConfig:
    """Complete ProvisionKit configuration."""

    version: int = 1
    toolchain: ToolchainSettings = field(default_factory=ToolchainSettings)
    package_manager: PackageManagerSettings = field(
        default_factory=PackageManagerSettings
    )
    build: BuildSettings = field(default_factory=BuildSettings)
    deploy: DeploySettings = field(default_factory=DeploySettings)
    packaging: PackagingSettings = field(default_factory=PackagingSettings)
    lock: LockSettings = field(default_factory=LockSettings)


_SECTIONS = {
    "toolchain": ToolchainSettings,
    "package_manager": PackageManagerSettings,
    "build": BuildSettings,
    "deploy": DeploySettings,
    "packaging": PackagingSettings,
    "lock": LockSettings,
}


def load_config(
    config_path: Optional[Path] = None,
    project_root: Optional[Path] = None,
    required: bool = False,
) -> ProvisionConfig:
    """
    Load provisionkit.yaml.

    Args:
        config_path: Explicit config file (required to exist if given)
        project_root: Directory searched for provisionkit.yaml when no path given
        required: Raise if no configuration file is found

    Returns:
        Parsed configuration (defaults if no file found)

    Raises:
        ConfigError: If the file is missing (when required) or invalid
    """
    if config_path is None:
        config_path = (project_root or Path.cwd()) / CONFIG_FILENAME
    else:
        required = True

    if not config_path.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {config_path}")
        logger.debug(f"No configuration file at {config_path}, using defaults")
        return ProvisionConfig()

    logger.debug(f"Loading configuration from {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}")

    return parse_config_data(data or {})


def parse_config_data(data: Dict[str, Any]) -> ProvisionConfig:
    """
    Build configuration from parsed YAML data.

    Raises:
        ConfigError: If the data is invalid
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    version = data.get("version", 1)
    if version != 1:
        raise ConfigError(f"Unsupported version: {version} (expected 1)")

    unknown = set(data) - set(_SECTIONS) - {"version"}
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    sections = {
        name: _parse_section(name, cls, data.get(name))
        for name, cls in _SECTIONS.items()
    }
    config = ProvisionConfig(version=version, **sections)

    _validate(config)
    return config


def _parse_section(name: str, cls, raw: Any):
    """Instantiate a settings dataclass from a YAML mapping."""
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")

    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ConfigError(
            f"Unknown keys in '{name}': {', '.join(sorted(unknown))}"
        )
    return cls(**raw)


def _validate(config: ProvisionConfig):
    """Validate parsed configuration values."""
    toolchain = config.toolchain

    # YAML reads an unquoted 1.70 as the float 1.7
    if not isinstance(toolchain.required_version, str):
        raise ConfigError(
            "toolchain.required_version must be a quoted string "
            f"(got {toolchain.required_version!r})"
        )
    if VersionString.parse(toolchain.required_version) is None:
        raise ConfigError(
            f"Invalid toolchain.required_version: {toolchain.required_version!r}"
        )

    if not isinstance(toolchain.poll_attempts, int) or toolchain.poll_attempts < 1:
        raise ConfigError("toolchain.poll_attempts must be a positive integer")

    if not isinstance(toolchain.poll_interval, (int, float)) or toolchain.poll_interval < 0:
        raise ConfigError("toolchain.poll_interval must be a non-negative number")

    if not toolchain.packages or not isinstance(toolchain.packages, list):
        raise ConfigError("toolchain.packages must be a non-empty list")

    if not toolchain.bootstrap_url.startswith("https://"):
        raise ConfigError("toolchain.bootstrap_url must use https://")

    if config.package_manager.use_sudo not in SUDO_MODES:
        raise ConfigError(
            f"package_manager.use_sudo must be one of {', '.join(SUDO_MODES)}"
        )

    if not config.build.command or not isinstance(config.build.command, list):
        raise ConfigError("build.command must be a non-empty list")
