"""
Version string parsing and ordering.

Toolchain versions are dot-separated runs of non-negative integers with an
optional pre-release/build suffix, e.g. "1.75.0", "1.70", "1.72.0-ubuntu1".
The suffix is kept for display but ignored when comparing, and missing
segments compare as zero, so "1.70" == "1.70.0".

Usage:
    from provisionkit.core.version import VersionString, meets_minimum

    installed = VersionString.parse("1.75.0")
    if meets_minimum(installed, "1.70.0"):
        print("toolchain is recent enough")
"""

import enum
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .exceptions import InvalidVersionError

# Release segments, then an optional suffix that must not start with a digit or dot
_VERSION_PATTERN = re.compile(
    r"^v?(?P<release>\d+(?:\.\d+)*)(?P<suffix>[-+~_A-Za-z].*)?$"
)


class Ordering(enum.IntEnum):
    """Result of comparing two versions."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True, eq=False)
class VersionString:
    """
    Parsed version string.

    Attributes:
        release: Numeric segments, e.g. (1, 72, 0)
        suffix: Ignored suffix, e.g. "-ubuntu1" (empty if none)
        original: Text the version was parsed from
    """

    release: Tuple[int, ...]
    suffix: str = ""
    original: str = ""

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["VersionString"]:
        """
        Parse version text.

        Args:
            text: Version text (may be None)

        Returns:
            VersionString, or None if text is empty or unparseable
        """
        if text is None:
            return None

        candidate = text.strip()
        if not candidate:
            return None

        match = _VERSION_PATTERN.match(candidate)
        if not match:
            return None

        release = tuple(int(part) for part in match.group("release").split("."))
        return cls(
            release=release,
            suffix=match.group("suffix") or "",
            original=candidate,
        )

    @classmethod
    def coerce(cls, value: Union["VersionString", str]) -> "VersionString":
        """
        Return value as a VersionString.

        Raises:
            InvalidVersionError: If value is a string that cannot be parsed
        """
        if isinstance(value, VersionString):
            return value
        parsed = cls.parse(value)
        if parsed is None:
            raise InvalidVersionError(f"Invalid version string: {value!r}")
        return parsed

    @property
    def base(self) -> str:
        """Release part without suffix (e.g. '1.72.0')."""
        return ".".join(str(part) for part in self.release)

    def __lt__(self, other: "VersionString") -> bool:
        return compare(self, other) is Ordering.LESS

    def __le__(self, other: "VersionString") -> bool:
        return compare(self, other) is not Ordering.GREATER

    def __gt__(self, other: "VersionString") -> bool:
        return compare(self, other) is Ordering.GREATER

    def __ge__(self, other: "VersionString") -> bool:
        return compare(self, other) is not Ordering.LESS

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionString):
            return NotImplemented
        return compare(self, other) is Ordering.EQUAL

    def __hash__(self) -> int:
        # Trailing zeros do not change equality, so they must not change the hash
        release = list(self.release)
        while len(release) > 1 and release[-1] == 0:
            release.pop()
        return hash(tuple(release))

    def __str__(self) -> str:
        return self.original or self.base

    def __repr__(self) -> str:
        return f"VersionString('{self}')"


def compare(
    a: Union[VersionString, str], b: Union[VersionString, str]
) -> Ordering:
    """
    Compare two versions segment by segment.

    Args:
        a: First version
        b: Second version

    Returns:
        Ordering of a relative to b

    Raises:
        InvalidVersionError: If either string cannot be parsed

    Example:
        >>> compare("1.69.9", "1.70.0")
        <Ordering.LESS: -1>
        >>> compare("1.70", "1.70.0")
        <Ordering.EQUAL: 0>
    """
    left = VersionString.coerce(a).release
    right = VersionString.coerce(b).release

    width = max(len(left), len(right))
    left = left + (0,) * (width - len(left))
    right = right + (0,) * (width - len(right))

    if left < right:
        return Ordering.LESS
    if left > right:
        return Ordering.GREATER
    return Ordering.EQUAL


def meets_minimum(
    version: Union[VersionString, str, None], required: Union[VersionString, str]
) -> bool:
    """
    Check whether version is at least the required version.

    Absent or unparseable versions never meet the minimum; this function
    does not raise for them.

    Args:
        version: Detected version (may be None)
        required: Minimum acceptable version

    Returns:
        True if version >= required
    """
    if version is None:
        return False
    if isinstance(version, str):
        version = VersionString.parse(version)
        if version is None:
            return False
    return compare(version, required) is not Ordering.LESS
