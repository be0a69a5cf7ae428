"""
Custom Exceptions

This module defines the exceptions raised by the binding engine and its
collaborators.

Groups:
- Validation errors: raised before any storage call (URL, identifier, record)
- Storage errors: raised by the binding store and propagated unchanged
- Lifecycle errors: terminal states of a binding, carrying a redirect target
"""

from typing import Optional


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class InvalidURLError(URLShortenerException):
    """Raised when a target or fallback URL is not a valid absolute URI."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class InvalidIdentifierError(URLShortenerException):
    """Raised when a caller-supplied identifier violates the id policy."""

    def __init__(self, identifier: str, message: str):
        self.identifier = identifier
        super().__init__(message)


class InvalidAlphabetError(InvalidIdentifierError):
    """Raised when an identifier contains characters outside the alphabet."""

    def __init__(self, identifier: str, alphabet: str):
        self.alphabet = alphabet
        super().__init__(
            identifier,
            f"ID '{identifier}' doesn't match alphabet and alphabet enforcement is active"
        )


class InvalidLengthError(InvalidIdentifierError):
    """Raised when an identifier does not have the required length."""

    def __init__(self, identifier: str, length: int, required_length: int):
        self.length = length
        self.required_length = required_length
        super().__init__(
            identifier,
            f"ID '{identifier}' doesn't match length: "
            f"length {length}, required {required_length}"
        )


class InvalidPolicyError(URLShortenerException):
    """Raised when a policy value cannot produce a representable binding."""

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class DuplicateIDError(URLShortenerException):
    """Raised when inserting a binding whose identifier already exists."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"ID '{identifier}' already exists")


class NotFoundError(URLShortenerException):
    """Raised when an identifier is not found in the store."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"ID '{identifier}' not found")


class LifecycleError(URLShortenerException):
    """
    Base for terminal binding states.

    These are not failures of the engine: the caller should redirect to
    ``redirect_url`` (when non-empty) and note the reason.
    """

    reason = "URL is no longer active"

    def __init__(self, identifier: str, redirect_url: str = ""):
        self.identifier = identifier
        self.redirect_url = redirect_url
        super().__init__(f"{self.reason}: {identifier}")


class URLExpiredError(LifecycleError):
    """Raised when a binding is read after its expiration date."""
    reason = "URL expired"


class URLExhaustedError(LifecycleError):
    """Raised when a binding is read more times than its max-access limit."""
    reason = "URL max requests reached"


class InvalidRecordError(URLShortenerException):
    """Raised when an import record cannot be parsed into a bind request."""

    def __init__(self, record: list, reason: str):
        self.record = record
        self.reason = reason
        super().__init__(f"Invalid record {record!r}: {reason}")


class DatabaseError(URLShortenerException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
