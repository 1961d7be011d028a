"""
Build, deployment and packaging steps that follow provisioning.
"""

from provisionkit.deploy.build import BuildRunner
from provisionkit.deploy.installer import ArtifactDeployer, DeployResult, SelfRegistrar
from provisionkit.deploy.packaging import (
    PACKAGE_FORMATS,
    PACKAGE_USAGE,
    PackageBuilder,
    validate_format,
)

__all__ = [
    "BuildRunner",
    "ArtifactDeployer",
    "DeployResult",
    "SelfRegistrar",
    "PackageBuilder",
    "PACKAGE_FORMATS",
    "PACKAGE_USAGE",
    "validate_format",
]
