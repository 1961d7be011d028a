"""
Core infrastructure for ProvisionKit.

This module provides:
- Exception hierarchy
- Version parsing and comparison
- External command execution
- Platform detection
- Downloads and cross-process locking
"""

from provisionkit.core.exceptions import (
    AcquisitionError,
    BuildError,
    ConfigError,
    DeployError,
    InitializationError,
    InvalidVersionError,
    PackagingError,
    PipelineError,
    ProbeError,
    ProvisionKitError,
    ProvisionLockTimeout,
    ProvisioningError,
    UsageError,
)
from provisionkit.core.process import CommandResult, CommandRunner
from provisionkit.core.version import Ordering, VersionString, compare, meets_minimum

__all__ = [
    # Exceptions
    "ProvisionKitError",
    "InvalidVersionError",
    "ConfigError",
    "ProvisionLockTimeout",
    "UsageError",
    "ProvisioningError",
    "ProbeError",
    "AcquisitionError",
    "InitializationError",
    "PipelineError",
    "BuildError",
    "DeployError",
    "PackagingError",
    # Process
    "CommandResult",
    "CommandRunner",
    # Version
    "Ordering",
    "VersionString",
    "compare",
    "meets_minimum",
]
