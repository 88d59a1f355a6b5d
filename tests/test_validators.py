"""Unit tests for the pure string validators."""

import pytest

from app.utils.validators import (
    is_valid_api_key_format,
    is_valid_password,
    is_valid_username,
    is_valid_uuid,
    sanitize_string,
)


class TestIsValidUUID:
    def test_accepts_canonical_uuid(self) -> None:
        assert is_valid_uuid("123e4567-e89b-12d3-a456-426614174000") is True

    def test_accepts_uppercase(self) -> None:
        assert is_valid_uuid("123E4567-E89B-12D3-A456-426614174000") is True

    @pytest.mark.parametrize(
        "value",
        [
            "123e4567e89b12d3a456426614174000",
            "null",
            "",
            "123e4567-e89b-12d3-a456-42661417400",
            "123e4567-e89b-12d3-a456-426614174000\n",
            "g23e4567-e89b-12d3-a456-426614174000",
        ],
    )
    def test_rejects_malformed(self, value: str) -> None:
        assert is_valid_uuid(value) is False


class TestSanitizeString:
    def test_trims_then_truncates(self) -> None:
        assert sanitize_string("   hello world  ", 5) == "hello"

    def test_short_input_is_only_trimmed(self) -> None:
        assert sanitize_string("\tabc\n", 10) == "abc"

    def test_whitespace_only_becomes_empty(self) -> None:
        assert sanitize_string("    ", 10) == ""

    def test_length_counts_utf16_code_units(self) -> None:
        assert sanitize_string("\U0001F600\U0001F600", 2) == "\U0001F600"
        assert sanitize_string("ab\U0001F600", 4) == "ab\U0001F600"

    def test_split_surrogate_pair_is_dropped(self) -> None:
        assert sanitize_string("\U0001F600\U0001F600", 3) == "\U0001F600"
        assert sanitize_string("a\U0001F600", 2) == "a"

    def test_non_ascii_bmp_text_counts_one_unit_per_character(self) -> None:
        assert sanitize_string("caf\u00e9 cr\u00e8me", 4) == "caf\u00e9"

    @pytest.mark.parametrize("value", ["abc", "  padded  ", "x" * 50, "a b c"])
    def test_idempotent(self, value: str) -> None:
        once = sanitize_string(value.strip(), 50)
        assert sanitize_string(once, 50) == once


class TestIsValidApiKeyFormat:
    def test_minimum_length_is_valid(self) -> None:
        key = "api_" + "a" * 16
        assert len(key) == 20
        assert is_valid_api_key_format(key) is True

    def test_one_short_is_invalid(self) -> None:
        assert is_valid_api_key_format("api_" + "a" * 15) is False

    def test_maximum_length_is_valid(self) -> None:
        assert is_valid_api_key_format("api_" + "a" * 196) is True

    def test_over_maximum_is_invalid(self) -> None:
        assert is_valid_api_key_format("api_" + "a" * 197) is False

    def test_wrong_prefix_is_invalid(self) -> None:
        assert is_valid_api_key_format("notapi_" + "a" * 30) is False
        assert is_valid_api_key_format("API_" + "a" * 30) is False


class TestIsValidUsername:
    @pytest.mark.parametrize("value", ["abc", "a@b.com", "john_doe-1.2", "x" * 100])
    def test_accepts(self, value: str) -> None:
        assert is_valid_username(value) is True

    @pytest.mark.parametrize("value", ["ab", "x" * 101, "has space", "semi;colon", "ünï"])
    def test_rejects(self, value: str) -> None:
        assert is_valid_username(value) is False


class TestIsValidPassword:
    def test_bounds(self) -> None:
        assert is_valid_password("a" * 5) is False
        assert is_valid_password("a" * 6) is True
        assert is_valid_password("a" * 128) is True
        assert is_valid_password("a" * 129) is False
