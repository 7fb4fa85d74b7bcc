"""Version string helpers.

Normalisation, comparison and diff categorisation of WordPress-style dotted
versions, plus plugin slug derivation from an install path. None of these
functions raise: malformed input yields ``None``, ``"invalid"`` or
``INVALID_VERSION_FORMAT``.
"""

import re
from typing import Literal

INVALID_VERSION_FORMAT = "invalid-version-format"

VersionDiff = Literal["major", "minor", "patch", "same", "igl", "invalid"]

# 3 or 4 numeric segments once padded
_CANONICAL_PATTERN = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+(?:\.[0-9]+)?")
# 1 to 4 numeric segments
_COMPARABLE_PATTERN = re.compile(r"[0-9]+(?:\.[0-9]+){0,3}")


def normalize_version(raw: str) -> str:
    """Right-pad a dotted version with ``0`` segments up to major.minor.patch.

    Padding is purely structural. Versions that already have three or more
    segments are returned unchanged.
    """
    parts = raw.split(".")
    while len(parts) < 3:
        parts.append("0")
    return ".".join(parts)


def format_version(raw: str) -> str:
    """Normalise and validate a version at the API/provider boundary.

    Returns:
        The canonical version, or ``INVALID_VERSION_FORMAT``.
    """
    if not isinstance(raw, str):
        return INVALID_VERSION_FORMAT

    version = normalize_version(raw.strip())
    if not _CANONICAL_PATTERN.fullmatch(version):
        return INVALID_VERSION_FORMAT
    return version


def is_valid_version(raw: str) -> bool:
    return format_version(raw) != INVALID_VERSION_FORMAT


def slug_from_install_path(path: str) -> str | None:
    """Derive a plugin slug from ``"<slug>/<file>"``.

    Returns:
        The slug, or None when the path does not have exactly two segments.
    """
    parts = path.split("/")
    if len(parts) != 2:
        return None
    return parts[0]


def _parse(version: str) -> tuple[int, int, int] | None:
    if not isinstance(version, str) or not _COMPARABLE_PATTERN.fullmatch(version):
        return None
    parts = [int(part) for part in version.split(".")]
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]


def compare_versions(a: str, b: str) -> int | None:
    """Three-way compare two versions on major, minor and patch.

    Returns:
        Negative, zero or positive, or None when either side is malformed.
    """
    left = _parse(a)
    right = _parse(b)
    if left is None or right is None:
        return None

    for x, y in zip(left, right):
        if x != y:
            return 1 if x > y else -1
    return 0


def categorize_version_diff(installed: str, latest: str) -> VersionDiff:
    """Classify how far an installed version is behind the latest one.

    ``igl`` (installed greater than latest) flags a downgrade on the source.
    """
    left = _parse(installed)
    right = _parse(latest)
    if left is None or right is None:
        return "invalid"

    if left == right:
        return "same"
    if left > right:
        return "igl"
    if left[0] != right[0]:
        return "major"
    if left[1] != right[1]:
        return "minor"
    return "patch"
