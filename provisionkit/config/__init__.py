"""
Configuration management for ProvisionKit.
"""

from provisionkit.config.parser import (
    CONFIG_FILENAME,
    BuildSettings,
    DeploySettings,
    LockSettings,
    PackageManagerSettings,
    PackagingSettings,
    ProvisionConfig,
    ToolchainSettings,
    load_config,
    parse_config_data,
)

__all__ = [
    "CONFIG_FILENAME",
    "ProvisionConfig",
    "ToolchainSettings",
    "PackageManagerSettings",
    "BuildSettings",
    "DeploySettings",
    "PackagingSettings",
    "LockSettings",
    "load_config",
    "parse_config_data",
]
