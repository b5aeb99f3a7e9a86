"""Version ordering and range resolution.

Two orderings are available:

- ``legacy``: split on ``.`` and compare the leading digits of each
  component as integers, greatest first. Anything after the digits
  (``-rc``, ``+build``) is ignored, a component without digits counts as
  0, and versions with a different segment count compare equal over their
  common prefix.
- ``semver``: full semantic-version precedence via ``semantic_version``.
  Selecting it changes which candidate wins for pre-release and
  uneven-length versions.

Range satisfaction always uses npm range semantics (``^``, ``~``, x-ranges,
hyphen ranges, ``||``).

:func:`resolve_version` keeps scanning after a match, so it returns the
LOWEST satisfying candidate above the stop threshold, not the highest.
"""

from __future__ import annotations

import functools
import logging
import re
from typing import Iterable, List, Optional

from semantic_version import NpmSpec, Version

logger = logging.getLogger(__name__)

ORDERINGS = ("legacy", "semver")

_NUMERIC_RUN = re.compile(r"\d+(?:\.\d+){0,2}")
_LEADING_DIGITS = re.compile(r"\d+")


def _leading_int(segment: str) -> int:
    match = _LEADING_DIGITS.match(segment)
    return int(match.group(0)) if match else 0


def compare_versions_descending(a: str, b: str) -> int:
    """Comparator that sorts ``a`` before ``b`` when ``a`` is numerically greater.

    Examples:
        >>> sorted(["1.2.0", "1.10.0", "2.0.0"], key=functools.cmp_to_key(compare_versions_descending))
        ['2.0.0', '1.10.0', '1.2.0']
    """
    for left, right in zip(a.split("."), b.split(".")):
        difference = _leading_int(right) - _leading_int(left)
        if difference != 0:
            return difference
    return 0


def sort_versions_descending(versions: Iterable[str]) -> List[str]:
    """Sort with the legacy numeric comparator, greatest first."""
    return sorted(versions, key=functools.cmp_to_key(compare_versions_descending))


def sort_semver_descending(versions: Iterable[str]) -> List[str]:
    """Sort by semantic-version precedence, greatest first."""
    return sorted(versions, key=Version.coerce, reverse=True)


def order_versions(versions: Iterable[str], ordering: str = "legacy") -> List[str]:
    if ordering == "legacy":
        return sort_versions_descending(versions)
    if ordering == "semver":
        return sort_semver_descending(versions)
    raise ValueError(f"Unknown version ordering: {ordering}")


@functools.lru_cache(maxsize=1024)
def _parse_range(wanted: str) -> Optional[NpmSpec]:
    try:
        return NpmSpec(wanted.strip() or "*")
    except ValueError:
        logger.debug("Unsupported version range %r", wanted)
        return None


def satisfies(version: str, wanted: str) -> bool:
    """Return True if ``version`` is inside the npm range ``wanted``.

    Unparsable versions or ranges (``latest``, ``file:...``) never match.
    """
    spec = _parse_range(wanted)
    if spec is None:
        return False
    try:
        return spec.match(Version(version))
    except ValueError:
        logger.debug("Unparsable version %r", version)
        return False


def coerce_range_floor(wanted: str) -> Optional[Version]:
    """Return the coerced baseline of a range, e.g. ``^1.2`` -> ``1.2.0``.

    Returns None when the range carries no numeric part (``*``, ``latest``).
    """
    match = _NUMERIC_RUN.search(wanted)
    if match is None:
        return None
    return Version.coerce(match.group(0))


def _below_floor(version: str, floor: Version) -> bool:
    try:
        return Version.coerce(version) < floor
    except ValueError:
        return False


def resolve_version(
    wanted: str,
    candidates: Iterable[str],
    ordering: str = "legacy",
) -> Optional[str]:
    """Pick the candidate version to use for ``wanted``.

    Candidates are scanned greatest first. A candidate that does not
    satisfy the range stops the scan when it is below the range floor and
    is skipped otherwise. A satisfying candidate replaces the current match
    and the scan continues.

    Args:
        wanted: Required npm range (e.g. ``^1.0.0``)
        candidates: Available version strings
        ordering: ``legacy`` or ``semver``

    Returns:
        The last satisfying candidate seen, or None if none satisfies

    Examples:
        >>> resolve_version("^1.0.0", ["1.5.0", "1.2.0", "1.0.0", "0.9.0"])
        '1.0.0'
    """
    floor = coerce_range_floor(wanted)
    match: Optional[str] = None

    for candidate in order_versions(candidates, ordering):
        if not satisfies(candidate, wanted):
            if floor is not None and _below_floor(candidate, floor):
                break
            continue
        match = candidate

    return match


__all__ = [
    "ORDERINGS",
    "compare_versions_descending",
    "sort_versions_descending",
    "sort_semver_descending",
    "order_versions",
    "satisfies",
    "coerce_range_floor",
    "resolve_version",
]
