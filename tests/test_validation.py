"""Tests for the per-parameter validation helpers."""

import math

import pytest

from services import is_valid_http_url, round_multiple, validate_value


class TestValidateValue:
    """validate_value treats falsy values as absent, then checks kind and range."""

    @pytest.mark.parametrize(
        "value, kind, minimum, maximum, expected",
        [
            (5, "int", 1, 10, True),
            (5.0, "int", 1, 10, True),
            (5.5, "int", 1, 10, False),
            (True, "int", None, None, False),
            ("5", "int", None, None, False),
            (5, "float", None, None, True),
            (0.2, "float", 0.2, 20, True),
            (20, "float", 0.2, 20, True),
            (20.01, "float", 0.2, 20, False),
            (0.19, "float", 0.2, 20, False),
            (-360, "float", -360, 360, True),
            (-361, "float", -360, 360, False),
            (False, "float", None, None, False),
            ("webp", "string", None, None, True),
            (3, "string", None, None, False),
            (True, "bool", None, None, True),
            ("true", "bool", None, None, False),
            (5, "complex", None, None, False),
        ],
    )
    def test_kind_and_range(self, value, kind, minimum, maximum, expected):
        assert validate_value(value, kind, minimum, maximum) is expected

    @pytest.mark.parametrize("value", [None, 0, 0.0, "", False])
    def test_falsy_values_are_absent(self, value):
        """Zero is rejected even when the range starts at 0."""
        assert validate_value(value, "int", 0, 100) is False
        assert validate_value(value, "float", 0, 100) is False

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_floats_are_absent(self, value):
        assert validate_value(value, "float") is False

    def test_zero_accepted_when_not_optional(self):
        assert validate_value(0, "int", 0, 100, optional=False) is True

    def test_strings_skip_range_check(self):
        assert validate_value("anything", "string", 1, 2) is True


class TestIsValidHttpUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "http://example.com",
            "https://example.com/image.jpg",
            "https://example.com:8443/a/b.png?size=large#top",
        ],
    )
    def test_accepts_http_urls(self, url):
        assert is_valid_http_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "ftp://example.com/image.jpg",
            "httpx://example.com",
            "example.com/image.jpg",
            "/relative/image.jpg",
            "not a url",
            "https://",
            "http:///image.jpg",
            "",
            None,
            42,
        ],
    )
    def test_rejects_everything_else(self, url):
        assert not is_valid_http_url(url)


class TestRoundMultiple:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (1, 64),
            (64, 64),
            (65, 128),
            (128, 128),
            (129, 256),
            (256, 256),
            (300.5, 384),
            (4990, 4992),
            (4999, 5120),
        ],
    )
    def test_rounds_up_to_multiple_of_128(self, value, expected):
        assert round_multiple(value) == expected
