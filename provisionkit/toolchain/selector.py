"""
Installation strategy selection.

Prefer the system package manager only when its candidate already meets the
version floor; otherwise go through the toolchain manager, which always
provides a current toolchain regardless of distribution packaging lag.
"""

import enum
from dataclasses import dataclass

from provisionkit.core.version import VersionString, meets_minimum
from provisionkit.toolchain.probe import ProbeResult


class Strategy(enum.Enum):
    """Installation strategy for a provisioning run."""

    SKIP = "skip"
    PACKAGE_MANAGER_INSTALL = "package-manager"
    TOOLCHAIN_MANAGER_INSTALL = "toolchain-manager"


@dataclass
class Selection:
    """Selected strategy and the reason it was chosen."""

    strategy: Strategy
    reason: str


def select_strategy(probe: ProbeResult, required: VersionString) -> Selection:
    """
    Choose an installation strategy from probe results.

    Args:
        probe: Fresh probe results
        required: Minimum acceptable toolchain version

    Returns:
        Selection with strategy and human-readable reason
    """
    if meets_minimum(probe.installed_version, required):
        return Selection(
            Strategy.SKIP,
            f"installed version {probe.installed_version} meets {required}",
        )

    if not probe.package_manager_present:
        return Selection(
            Strategy.TOOLCHAIN_MANAGER_INSTALL,
            "no system package manager available",
        )

    if probe.repo_error:
        return Selection(
            Strategy.TOOLCHAIN_MANAGER_INSTALL,
            f"repository probe failed: {probe.repo_error}",
        )

    if not probe.repo_package_found:
        return Selection(
            Strategy.TOOLCHAIN_MANAGER_INSTALL,
            "toolchain package not found in repository",
        )

    if not meets_minimum(probe.repo_version, required):
        return Selection(
            Strategy.TOOLCHAIN_MANAGER_INSTALL,
            f"repository version {probe.repo_version} is below {required}",
        )

    return Selection(
        Strategy.PACKAGE_MANAGER_INSTALL,
        f"repository version {probe.repo_version.base} meets {required}",
    )
