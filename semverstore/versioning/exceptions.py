"""
Exception classes for the versioning module.
"""

from typing import Optional


class VersioningError(Exception):
    """Base exception for all versioning-related errors."""

    pass


class VersionFormatError(VersioningError, ValueError):
    """Raised when a version string has an invalid format."""

    def __init__(
        self,
        version_string: str,
        expected_format: str = "major.minor.patch[-prerelease][+build]",
        reason: Optional[str] = None,
    ):
        self.version_string = version_string
        self.expected_format = expected_format
        self.reason = reason
        message = (
            f"Invalid version format: '{version_string}'. "
            f"Expected format: {expected_format}"
        )
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class ConfigurationError(VersioningError):
    """Raised when a store cannot be built from its configuration."""

    pass


class VersionStoreError(VersioningError):
    """
    Raised by a version store operation.

    Carries the operation name (check, bump or set) and the location of the
    stored version so that the error can be diagnosed without credentials.
    """

    def __init__(self, operation: str, location: str, message: str = ""):
        self.operation = operation
        self.location = location
        self.message = message
        text = f"{operation} failed for {location}"
        if message:
            text += f": {message}"
        super().__init__(text)


class TransientIOError(VersionStoreError):
    """Raised when the backend is temporarily unreachable or unavailable."""

    pass


class ConflictRejected(VersionStoreError):
    """Raised by a backend write whose precondition no longer holds."""

    pass


class ConcurrencyExhausted(VersionStoreError):
    """
    Raised when every attempt of the compare-and-set loop lost a race.

    The stored value is intact; the caller may retry the whole operation.
    """

    retriable = True

    def __init__(self, operation: str, location: str, attempts: int):
        self.attempts = attempts
        super().__init__(
            operation,
            location,
            f"gave up after {attempts} conflicting write attempts",
        )
