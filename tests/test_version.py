"""
Tests for the version comparison module.

Tests cover:
- Tokenizing version strings
- Numeric ordering across segments
- Pre-release and alphabetic segments
- Leading "v" in release tags
- Invalid input
"""

from __future__ import annotations

import pytest

from plugin_updater.errors import InvalidArgumentError, InvalidVersionError
from plugin_updater.version import compare_versions, is_newer, tokenize_version

# =============================================================================
# tokenize_version Tests
# =============================================================================


class TestTokenizeVersion:
    """Tests for tokenize_version function."""

    def test_simple_version(self) -> None:
        """Test tokenizing a plain dotted version."""
        assert tokenize_version("1.2.3") == [1, 2, 3]

    def test_prerelease_suffix(self) -> None:
        """Test that letter runs become their own tokens."""
        assert tokenize_version("2.0.0-RC1") == [2, 0, 0, "rc", 1]

    def test_leading_v_is_ignored(self) -> None:
        """Test that a git-style tag prefix is dropped."""
        assert tokenize_version("v1.4.0") == [1, 4, 0]
        assert tokenize_version("V1.4.0") == [1, 4, 0]

    def test_whitespace_is_stripped(self) -> None:
        """Test that surrounding whitespace is ignored."""
        assert tokenize_version("  1.0 ") == [1, 0]

    @pytest.mark.parametrize("value", ["", "   ", "...", "--"])
    def test_empty_versions_rejected(self, value: str) -> None:
        """Test that versions without tokens raise InvalidVersionError."""
        with pytest.raises(InvalidVersionError) as exc_info:
            tokenize_version(value)
        assert exc_info.value.error_code == "invalid_argument"

    def test_invalid_version_is_invalid_argument(self) -> None:
        """Test the error hierarchy of InvalidVersionError."""
        with pytest.raises(InvalidArgumentError):
            tokenize_version("")


# =============================================================================
# compare_versions Tests
# =============================================================================


class TestCompareVersions:
    """Tests for compare_versions function."""

    @pytest.mark.parametrize(
        ("older", "newer"),
        [
            ("1.0.0", "1.0.1"),
            ("1.1.9", "1.2.0"),
            ("1.9.0", "1.10.0"),
            ("0.9", "1.0"),
            ("1.0", "1.0.1"),
            ("1.0.0-beta", "1.0.0"),
            ("1.0.0-alpha", "1.0.0-beta"),
            ("1.0.0-rc1", "1.0.0-rc2"),
            ("1.0.0", "v1.0.1"),
        ],
    )
    def test_ordering(self, older: str, newer: str) -> None:
        """Test that each pair compares in both directions."""
        assert compare_versions(older, newer) == -1
        assert compare_versions(newer, older) == 1

    @pytest.mark.parametrize(
        ("v1", "v2"),
        [
            ("1.0.0", "1.0.0"),
            ("v2.3.4", "2.3.4"),
            ("1.0.0-RC1", "1.0.0-rc1"),
            ("1-0-0", "1.0.0"),
        ],
    )
    def test_equal_versions(self, v1: str, v2: str) -> None:
        """Test versions that compare equal."""
        assert compare_versions(v1, v2) == 0

    def test_numeric_not_lexical(self) -> None:
        """Test that 10 sorts after 9."""
        assert compare_versions("1.10.0", "1.9.0") == 1

    def test_invalid_version_raises(self) -> None:
        """Test comparing against an empty version."""
        with pytest.raises(InvalidVersionError):
            compare_versions("1.0.0", "")


# =============================================================================
# is_newer Tests
# =============================================================================


class TestIsNewer:
    """Tests for is_newer function."""

    def test_newer_candidate(self) -> None:
        """Test a strictly newer candidate."""
        assert is_newer("1.0.1", "1.0.0") is True

    def test_older_candidate(self) -> None:
        """Test an older candidate."""
        assert is_newer("1.1.9", "1.2.0") is False

    def test_equal_candidate(self) -> None:
        """Test that equal versions are not newer."""
        assert is_newer("1.0.0", "1.0.0") is False
