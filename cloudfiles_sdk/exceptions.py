"""
Custom exceptions for the Cloud Files SDK.

Every failure the client reports is one of these classes. Each carries the
HTTP status code (when a response was obtained), a human readable message
and an optional payload.
"""

from typing import Any, Optional


class CloudFilesError(Exception):
    """Base exception for all Cloud Files SDK errors."""

    error_code = "CLOUDFILES_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def __str__(self):
        if self.status_code:
            return f"[{self.error_code} {self.status_code}] {self.message}"
        return f"[{self.error_code}] {self.message}"


class TransportError(CloudFilesError):
    """Raised when no HTTP response could be obtained."""

    error_code = "TRANSPORT_ERROR"

    def __init__(self, message: str = "Failed to obtain http response", **kwargs):
        super().__init__(message, **kwargs)


class AuthenticationError(CloudFilesError):
    """Raised on 401 responses, failed authentication or a missing session."""

    error_code = "AUTH_ERROR"

    def __init__(self, message: str = "Unauthorized", **kwargs):
        super().__init__(message, **kwargs)


class NotFoundError(CloudFilesError):
    """Raised when the account, container or object does not exist."""

    error_code = "NOT_FOUND"

    def __init__(self, message: str = "Not found", **kwargs):
        super().__init__(message, **kwargs)


class ConflictError(CloudFilesError):
    """Raised when deleting a container that still holds objects."""

    error_code = "CONFLICT"

    def __init__(self, message: str = "Container must be empty prior to removing it", **kwargs):
        super().__init__(message, **kwargs)


class PreconditionFailedError(CloudFilesError):
    """Raised on 412 responses."""

    error_code = "PRECONDITION_FAILED"

    def __init__(self, message: str = "Precondition failed", **kwargs):
        super().__init__(message, **kwargs)


class UnprocessableEntityError(CloudFilesError):
    """Raised when the server's checksum does not match the supplied ETag."""

    error_code = "CHECKSUM_MISMATCH"

    def __init__(self, message: str = "Derived and computed checksums do not match", **kwargs):
        super().__init__(message, **kwargs)


class ValidationError(CloudFilesError):
    """Raised before any request when caller input is malformed."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field


class UnexpectedStatusError(CloudFilesError):
    """Raised for any status code an operation does not expect."""

    error_code = "UNEXPECTED_STATUS"

    def __init__(self, message: str = "Unexpected HTTP response", **kwargs):
        super().__init__(message, **kwargs)


class ConfigurationError(CloudFilesError):
    """Raised when SDK configuration is invalid."""

    error_code = "CONFIG_ERROR"

    def __init__(self, message: str = "Invalid configuration", config_key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.config_key = config_key
