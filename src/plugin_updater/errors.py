"""
Error types for the plugin updater.

This module defines the UpdaterError base class and subclasses for the
failure kinds that can occur while registering components, fetching release
metadata and relocating installs.

Per-component errors are absorbed at the component boundary by the resolver;
they are raised here so that each layer can decide how to report them.
"""

from __future__ import annotations

from typing import Any


class UpdaterError(Exception):
    """
    Base exception class for updater errors.

    Attributes:
        error_code: Internal error code string (e.g., "invalid_argument",
            "metadata_fetch_failed", "component_not_found").
        message: Human-readable error message.
        details: Optional structured details (e.g., identifier, URL, status).

    Example:
        >>> raise UpdaterError(
        ...     error_code="metadata_fetch_failed",
        ...     message="GitHub returned 404",
        ...     details={"url": "https://api.github.com/repos/o/r/releases/latest"},
        ... )
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize an UpdaterError.

        Args:
            error_code: Internal error code string identifying the error category.
            message: Human-readable error message.
            details: Optional dictionary with structured error details.
        """
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return (
            f"{self.__class__.__name__}("
            f"error_code={self.error_code!r}, "
            f"message={self.message!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the error to a dictionary for serialization.

        Returns:
            Dictionary with error_code, message, and details.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def log_extra(self) -> dict[str, Any]:
        """
        Return fields for a logging call's ``extra`` argument.

        LogRecord reserves "message", so the text is carried as "error".
        """
        return {
            "error_code": self.error_code,
            "error": self.message,
            "details": self.details,
        }


class InvalidArgumentError(UpdaterError):
    """Error raised when an operation receives invalid input."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize an InvalidArgumentError."""
        super().__init__(
            error_code="invalid_argument", message=message, details=details
        )


class InvalidVersionError(InvalidArgumentError):
    """Error raised when a version string cannot be compared."""


class FailedPreconditionError(UpdaterError):
    """
    Error raised when a precondition for the operation is not met.

    Used by install relocation when the staged package is missing or the
    install directory cannot be prepared.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a FailedPreconditionError."""
        super().__init__(
            error_code="failed_precondition", message=message, details=details
        )


class RegistrationRejectedError(UpdaterError):
    """
    Error raised when a registration lacks a required field.

    The resolver catches this and drops the registration; it never reaches
    the host.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a RegistrationRejectedError."""
        super().__init__(
            error_code="registration_rejected", message=message, details=details
        )


class MetadataFetchError(UpdaterError):
    """
    Error raised when release metadata cannot be fetched.

    Covers transport errors and non-2xx responses.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a MetadataFetchError."""
        super().__init__(
            error_code="metadata_fetch_failed", message=message, details=details
        )


class InvalidRepositorySourceError(MetadataFetchError):
    """Error raised when a repository source cannot be turned into a URL."""


class MetadataMalformedError(UpdaterError):
    """
    Error raised when a release response is empty, unparseable, or lacks
    the tag name.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a MetadataMalformedError."""
        super().__init__(
            error_code="metadata_malformed", message=message, details=details
        )


class ComponentNotFoundError(UpdaterError):
    """Error raised by the CLI when a detail query matches no registration."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a ComponentNotFoundError."""
        super().__init__(
            error_code="component_not_found", message=message, details=details
        )
