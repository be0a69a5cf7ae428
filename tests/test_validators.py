"""Tests for URL and identifier validation."""

import pytest

from shortlink.core.exceptions import InvalidAlphabetError, InvalidLengthError
from shortlink.core.validators import is_valid_url, validate_identifier


class TestURLValidation:
    """Test the absolute URI check."""

    def test_valid_urls(self):
        valid_urls = [
            "http://example.com",
            "https://www.example.com/path/to/page",
            "http://subdomain.example.com:8080/path?query=value",
            "http://localhost:8000/x",
            "ftp://files.example.com/a.txt",
            "mailto:someone@example.com",
        ]
        for url in valid_urls:
            assert is_valid_url(url), f"Should be valid: {url}"

    def test_invalid_urls(self):
        invalid_urls = [
            "",
            "not-a-url",
            "example.com",  # Missing scheme
            "/relative/path",
            "http://",  # Nothing after the scheme
            "1http://example.com",  # Scheme must start with a letter
            "http://exa mple.com",
            "http://example.com/\n",
        ]
        for url in invalid_urls:
            assert not is_valid_url(url), f"Should be invalid: {url}"

    def test_non_string(self):
        assert not is_valid_url(None)


class TestIdentifierValidation:
    def test_alphabet_violation(self):
        with pytest.raises(InvalidAlphabetError) as exc:
            validate_identifier("abc!", "abc", 4, enforce_alphabet=True, enforce_length=True)
        assert exc.value.identifier == "abc!"
        assert "abc!" in str(exc.value)

    def test_alphabet_not_enforced(self):
        validate_identifier("abc!", "abc", 4, enforce_alphabet=False, enforce_length=True)

    def test_length_violation_reports_lengths(self):
        with pytest.raises(InvalidLengthError) as exc:
            validate_identifier("abcab", "abc", 4, enforce_alphabet=True, enforce_length=True)
        assert exc.value.length == 5
        assert exc.value.required_length == 4

    def test_length_not_enforced(self):
        validate_identifier("abcab", "abc", 4, enforce_alphabet=True, enforce_length=False)

    def test_whitespace_is_trimmed(self):
        validate_identifier("  abca ", "abc", 4, enforce_alphabet=True, enforce_length=True)

    def test_empty_identifier_skips_validation(self):
        validate_identifier("   ", "abc", 4, enforce_alphabet=True, enforce_length=True)
        validate_identifier("", "abc", 4, enforce_alphabet=True, enforce_length=True)
