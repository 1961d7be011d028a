"""
System package manager integrations for ProvisionKit.
"""

from provisionkit.packages.apt import (
    AptPackageManager,
    detect_system_package_manager,
    parse_policy_candidate,
)
from provisionkit.packages.base import SystemPackageManager

__all__ = [
    "SystemPackageManager",
    "AptPackageManager",
    "detect_system_package_manager",
    "parse_policy_candidate",
]
