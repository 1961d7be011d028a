"""
Centralized exception hierarchy for ProvisionKit.

Fatal failures in provisioning, build, deploy and packaging are raised as
subclasses of ProvisionKitError so the CLI can report a single diagnostic
and exit non-zero. Best-effort failures are never raised; they are logged
as warnings where they happen.
"""

from typing import List, Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class ProvisionKitError(Exception):
    """Base exception for all ProvisionKit errors."""

    pass


class InvalidVersionError(ProvisionKitError):
    """Invalid or unparseable version string."""

    pass


class ConfigError(ProvisionKitError):
    """Configuration parsing or validation error."""

    pass


class ProvisionLockTimeout(ProvisionKitError):
    """Raised when the provisioning lock cannot be acquired within timeout."""

    pass


class UsageError(ProvisionKitError):
    """Invalid command-line usage (e.g. unknown packaging format)."""

    def __init__(self, message: str, usage: Optional[str] = None):
        self.usage = usage
        super().__init__(message)


# ============================================================================
# Provisioning Exceptions
# ============================================================================


class ProvisioningError(ProvisionKitError):
    """Base exception for toolchain provisioning errors."""

    pass


class ProbeError(ProvisioningError):
    """
    Raised when a toolchain or repository probe cannot produce a result.

    Covers a failed package index refresh and policy output without a
    parseable candidate version. Never converted into a default version.
    """

    pass


class AcquisitionError(ProvisioningError):
    """Raised when every acquisition source for the toolchain manager failed."""

    def __init__(self, message: str, outcomes: Optional[List] = None):
        self.outcomes = list(outcomes or [])
        super().__init__(message)


class InitializationError(ProvisioningError):
    """Raised when a fatal toolchain initialization step failed."""

    def __init__(self, message: str, state=None):
        self.state = state
        super().__init__(message)


# ============================================================================
# Pipeline Exceptions
# ============================================================================


class PipelineError(ProvisionKitError):
    """Base exception for build/deploy/packaging steps."""

    pass


class BuildError(PipelineError):
    """Raised when the release build fails."""

    pass


class DeployError(PipelineError):
    """Raised when copying artifacts or self-registration fails."""

    pass


class PackagingError(PipelineError):
    """Raised when a distribution packaging tool fails."""

    pass
