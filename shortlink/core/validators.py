"""
Input Validators

This module provides validation functions for bind requests:
- Absolute URI check for target and fallback URLs
- Identifier policy check (alphabet and length) for caller-supplied ids

Identifier checks run before any storage call, so a rejected request
never leaves partial state.
"""

import re
from urllib.parse import urlsplit

from shortlink.core.exceptions import InvalidAlphabetError, InvalidLengthError

# RFC 3986: scheme = ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_FORBIDDEN_RE = re.compile(r"[\s\x00-\x1f\x7f]")


def is_valid_url(url: str) -> bool:
    """
    Check that a URL is a syntactically valid absolute URI.

    Args:
        url: The URL string to validate

    Returns:
        True if the URL has a scheme and a non-empty remainder, and contains
        no whitespace or control characters

    Example:
        is_valid_url("https://example.com/a?b=c") -> True
        is_valid_url("mailto:someone@example.com") -> True
        is_valid_url("/relative/path") -> False
    """
    if not url or not isinstance(url, str):
        return False

    if _FORBIDDEN_RE.search(url):
        return False

    try:
        result = urlsplit(url)
    except ValueError:
        return False

    if not result.scheme or not _SCHEME_RE.match(result.scheme):
        return False

    # "http://" and "http:" have nothing after the scheme
    if not (result.netloc or result.path):
        return False

    return True


def validate_identifier(
    identifier: str,
    alphabet: str,
    required_length: int,
    enforce_alphabet: bool,
    enforce_length: bool
) -> None:
    """
    Validate a caller-supplied identifier against the id policy.

    Surrounding whitespace is trimmed first. An empty identifier is not
    validated: it means the id will be generated.

    Args:
        identifier: The identifier to check
        alphabet: Allowed characters
        required_length: Required identifier length
        enforce_alphabet: Reject characters outside the alphabet
        enforce_length: Reject identifiers of a different length

    Raises:
        InvalidAlphabetError: If alphabet enforcement fails
        InvalidLengthError: If length enforcement fails
    """
    identifier = (identifier or "").strip()
    if not identifier:
        return

    if enforce_alphabet and any(char not in alphabet for char in identifier):
        raise InvalidAlphabetError(identifier, alphabet)

    if enforce_length and len(identifier) != required_length:
        raise InvalidLengthError(identifier, len(identifier), required_length)
