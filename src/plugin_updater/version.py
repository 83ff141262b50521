"""
Version comparison for the plugin updater.

Release tags are compared as dotted-numeric versions:
- A leading "v" (common in git tags) is ignored
- Versions split into runs of digits and runs of letters
- Numeric tokens compare as integers, alphabetic tokens lexically
- A numeric token outranks an alphabetic one at the same position
- When one side runs out of tokens, the longer version wins if its next
  token is numeric (1.0 < 1.0.1) and loses if it is alphabetic
  (1.0.0-beta < 1.0.0)
"""

from __future__ import annotations

import re

from plugin_updater.errors import InvalidVersionError

_TOKEN_PATTERN = re.compile(r"\d+|[A-Za-z]+")


def tokenize_version(version: str) -> list[int | str]:
    """
    Split a version string into comparable tokens.

    Args:
        version: Version string (e.g., "1.2.3", "v2.0.0-rc1").

    Returns:
        List of int (numeric runs) and lowercase str (alphabetic runs).

    Raises:
        InvalidVersionError: If the version is empty or has no tokens.
    """
    stripped = version.strip() if version else ""
    if stripped[:1] in ("v", "V") and stripped[1:2].isdigit():
        stripped = stripped[1:]

    tokens: list[int | str] = [
        int(token) if token.isdigit() else token.lower()
        for token in _TOKEN_PATTERN.findall(stripped)
    ]
    if not tokens:
        raise InvalidVersionError(
            f"Invalid version: {version!r}",
            details={"version": version},
        )
    return tokens


def _compare_tokens(left: int | str, right: int | str) -> int:
    """Compare two tokens of the same position."""
    if isinstance(left, int) and isinstance(right, int):
        return (left > right) - (left < right)
    if isinstance(left, int):
        return 1
    if isinstance(right, int):
        return -1
    return (left > right) - (left < right)


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two version strings.

    Args:
        v1: First version string.
        v2: Second version string.

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2

    Raises:
        InvalidVersionError: If either version is empty.
    """
    t1 = tokenize_version(v1)
    t2 = tokenize_version(v2)

    for left, right in zip(t1, t2):
        result = _compare_tokens(left, right)
        if result:
            return result

    if len(t1) == len(t2):
        return 0

    # The longer version decides based on what kind of token follows
    if len(t1) > len(t2):
        return 1 if isinstance(t1[len(t2)], int) else -1
    return -1 if isinstance(t2[len(t1)], int) else 1


def is_newer(candidate: str, current: str) -> bool:
    """
    Check whether ``candidate`` is strictly newer than ``current``.

    Args:
        candidate: Version offered by the release source.
        current: Version currently installed.

    Returns:
        True if candidate > current.
    """
    return compare_versions(current, candidate) < 0
