"""Release-name normalization for API lookups.

endoflife.date names release cycles by ``major.minor`` (``"1.23"``), while
users usually type the full version they have installed (``"1.23.4"``).
:func:`normalize_version` maps the latter to the former. It is the only
normalization rule applied anywhere: ``v``-prefixed or four-part versions
are left untouched.
"""

from __future__ import annotations

import re


SEMVER_PATTERN = re.compile(
    r"^(\d+)\.(\d+)\.(\d+)(?:-[0-9A-Za-z\-.]+)?(?:\+[0-9A-Za-z\-.]+)?$"
)
"""Semantic versions such as ``1.24.6``, ``2.1.0-rc.1`` or ``10.15.7+build.3``."""

MAJOR_MINOR_PATTERN = re.compile(r"^(\d+)\.(\d+)$")


def normalize_version(version: str) -> str:
    """Reduce a semantic version to its ``major.minor`` release cycle.

    Args:
        version: A user-supplied release name.

    Returns:
        ``"X.Y"`` for inputs of the form ``X.Y.Z[-pre][+build]``; the
        trimmed input for everything else (including ``X.Y``).

    Example::

        >>> normalize_version("1.23.4")
        '1.23'
        >>> normalize_version("bookworm")
        'bookworm'
    """
    ver = version.strip()
    if MAJOR_MINOR_PATTERN.match(ver):
        return ver
    match = SEMVER_PATTERN.match(ver)
    if match:
        return f"{match.group(1)}.{match.group(2)}"
    return ver


def is_semantic_version(version: str) -> bool:
    """Return ``True`` if *version* looks like ``X.Y.Z[-pre][+build]``."""
    return SEMVER_PATTERN.match(version.strip()) is not None

