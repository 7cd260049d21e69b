"""
Tests for BCP 47 language tag recognition.
"""

import pytest

from atomfeed.bcp47 import is_valid_language_tag


class TestValidTags:
    """Tags the grammar must accept."""

    @pytest.mark.parametrize("tag", [
        "en",
        "eng",
        "zh-Hans-CN",
        "sl-rozaj-biske",
        "en-US-u-islamcal",
        "x-private",
        "zh-yue-hak",
    ])
    def test_known_valid_tags(self, tag):
        """Test well-known tags from RFC 5646 examples."""
        assert is_valid_language_tag(tag)

    def test_case_insensitive(self):
        """Test that subtag case does not matter."""
        assert is_valid_language_tag("EN-us")
        assert is_valid_language_tag("ZH-hANS-cn")

    def test_numeric_region(self):
        """Test three-digit UN M.49 region codes."""
        assert is_valid_language_tag("es-419")

    def test_digit_variant(self):
        """Test variants of a digit followed by three alphanumerics."""
        assert is_valid_language_tag("de-CH-1901")

    def test_extension_and_private_use(self):
        """Test several extensions followed by private use."""
        assert is_valid_language_tag("en-a-bbb-b-ccc-x-mine")

    def test_reserved_and_registered_language_lengths(self):
        """Test four-letter and five-to-eight-letter primary subtags."""
        assert is_valid_language_tag("abcd")
        assert is_valid_language_tag("abcdefgh")

    def test_three_extlangs(self):
        """Test the maximum number of extended language subtags."""
        assert is_valid_language_tag("zh-abc-def-ghi")


class TestInvalidTags:
    """Tags the grammar must reject."""

    @pytest.mark.parametrize("tag", [
        "e",
        "abc1",
        "en-12A",
        "en-GB-OX",
        "en-US-u-",
        "x",
        "x-",
    ])
    def test_known_invalid_tags(self, tag):
        """Test malformed tags."""
        assert not is_valid_language_tag(tag)

    def test_too_long_primary_language(self):
        """Test a primary subtag longer than eight letters."""
        assert not is_valid_language_tag("abcdefghi")

    def test_four_extlangs(self):
        """Test that more than three extlangs are rejected."""
        assert not is_valid_language_tag("zh-abc-def-ghi-jkl")

    def test_dangling_singleton(self):
        """Test an extension singleton with no subtags."""
        assert not is_valid_language_tag("en-a")
        assert not is_valid_language_tag("en-a-x-foo")

    def test_private_use_subtag_too_long(self):
        """Test that private use subtags are limited to eight characters."""
        assert not is_valid_language_tag("x-abcdefghi")
        assert not is_valid_language_tag("en-x-abcdefghi")

    def test_empty_subtags(self):
        """Test leading, trailing and doubled hyphens."""
        assert not is_valid_language_tag("-en")
        assert not is_valid_language_tag("en-")
        assert not is_valid_language_tag("en--US")


class TestTotality:
    """The recognizer never raises."""

    @pytest.mark.parametrize("value", [None, "", 42, b"en", ["en"], "   ", "én"])
    def test_non_tag_values(self, value):
        """Test that odd input is rejected rather than raising."""
        assert is_valid_language_tag(value) is False

    def test_deterministic(self):
        """Test repeated calls give the same answer."""
        results = {is_valid_language_tag("en-GB-oed") for _ in range(5)}
        assert len(results) == 1
