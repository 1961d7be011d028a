"""
Shared utilities for CLI commands.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from provisionkit.config.parser import ProvisionConfig, load_config
from provisionkit.core.exceptions import ConfigError
from provisionkit.core.version import VersionString

logger = logging.getLogger(__name__)


def resolve_project_root(path: Optional[Path] = None) -> Path:
    """
    Resolve project root directory.

    Args:
        path: Optional path (defaults to current directory)

    Returns:
        Resolved absolute path
    """
    if path is None:
        path = Path.cwd()
    return Path(path).resolve()


def load_command_config(args) -> ProvisionConfig:
    """
    Load configuration for a command and apply CLI overrides.

    Args:
        args: Parsed arguments (config, project_root, required_version)

    Returns:
        Configuration with overrides applied

    Raises:
        ConfigError: If the configuration or an override is invalid
    """
    project_root = resolve_project_root(getattr(args, "project_root", None))
    config = load_config(getattr(args, "config", None), project_root=project_root)

    required_version = getattr(args, "required_version", None)
    if required_version:
        if VersionString.parse(required_version) is None:
            raise ConfigError(f"Invalid --required-version: {required_version!r}")
        config.toolchain = replace(config.toolchain, required_version=required_version)
        logger.debug(f"Required version overridden: {required_version}")

    return config


def format_version(version: Optional[VersionString]) -> str:
    """Display form of an optional version."""
    return str(version) if version is not None else "(none)"
