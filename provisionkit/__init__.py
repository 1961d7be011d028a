"""
ProvisionKit - provisions the Rust toolchain and installs git-commit-helper.

Checks whether a sufficient rustc is installed, installs it through the
system package manager or rustup when it is not, then builds, deploys and
optionally packages the application.
"""

from provisionkit.orchestrator import (
    PipelineReport,
    ProvisioningOrchestrator,
    ProvisioningReport,
)

__all__ = ["ProvisioningOrchestrator", "ProvisioningReport", "PipelineReport"]
