"""
Platform detection for ProvisionKit.

Detects the operating system, CPU architecture and Linux distribution, and
decides whether mutating package-manager commands need a privilege
escalation prefix.

Usage:
    from provisionkit.core.platform import detect_platform

    platform_info = detect_platform()
    print(f"Running on {platform_info}")
"""

import functools
import logging
import os
import platform
from dataclasses import dataclass
from typing import List

import distro

logger = logging.getLogger(__name__)

SUDO_MODES = ("auto", "always", "never")


@dataclass
class PlatformInfo:
    """
    Platform information.

    Attributes:
        os: Operating system ('linux', 'macos', 'windows', ...)
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm')
        distribution: Linux distribution ID ('ubuntu', 'debian', ...) or empty
    """

    os: str
    arch: str
    distribution: str = ""

    def platform_string(self) -> str:
        """Canonical platform string (e.g. 'linux-x64')."""
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        parts = [self.platform_string()]
        if self.distribution:
            parts.append(f"({self.distribution})")
        return " ".join(parts)


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    Cached; detection only runs once per process.
    """
    os_name = _detect_os()
    info = PlatformInfo(
        os=os_name,
        arch=_detect_architecture(),
        distribution=distro.id() if os_name == "linux" else "",
    )
    logger.debug(f"Detected platform: {info}")
    return info


def clear_platform_cache():
    """Clear cached platform detection (used by tests)."""
    detect_platform.cache_clear()


def _detect_os() -> str:
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    return system or "unknown"


def _detect_architecture() -> str:
    machine = platform.machine().lower()
    arch_map = {
        "x86_64": "x64",
        "amd64": "x64",
        "aarch64": "arm64",
        "arm64": "arm64",
        "i386": "x86",
        "i686": "x86",
        "armv7l": "arm",
    }
    return arch_map.get(machine, machine or "unknown")


def is_root() -> bool:
    """True if running as the superuser."""
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def privilege_prefix(mode: str, sudo_available: bool) -> List[str]:
    """
    Command prefix for mutating system package-manager calls.

    Args:
        mode: 'auto' (sudo when not root), 'always' or 'never'
        sudo_available: Whether a sudo executable was found

    Returns:
        ['sudo'] or []

    Raises:
        ValueError: If mode is unknown
    """
    if mode not in SUDO_MODES:
        raise ValueError(f"Unknown sudo mode: {mode} (expected one of {SUDO_MODES})")
    if mode == "never":
        return []
    if mode == "always":
        return ["sudo"]
    if is_root() or not sudo_available:
        return []
    return ["sudo"]
