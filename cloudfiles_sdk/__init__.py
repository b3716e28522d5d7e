"""
Cloud Files SDK - Python client for the Cloud Files object storage API.

This package provides:
- Authentication against the Cloud Files auth service
- Container and object operations with streamed uploads and downloads
- Object metadata management
- CDN publishing of containers
- A CLI for day-to-day use
"""

__version__ = "1.0.0"

from .client import CloudFilesClient
from .auth import Credentials, Session
from .models import (
    AccountInfo,
    Container,
    StorageObject,
    CdnSettings,
)
from .exceptions import (
    CloudFilesError,
    TransportError,
    AuthenticationError,
    NotFoundError,
    ConflictError,
    PreconditionFailedError,
    UnprocessableEntityError,
    ValidationError,
    UnexpectedStatusError,
    ConfigurationError,
)

__all__ = [
    # Main client
    "CloudFilesClient",
    "Credentials",
    "Session",

    # Data models
    "AccountInfo",
    "Container",
    "StorageObject",
    "CdnSettings",

    # Exceptions
    "CloudFilesError",
    "TransportError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "PreconditionFailedError",
    "UnprocessableEntityError",
    "ValidationError",
    "UnexpectedStatusError",
    "ConfigurationError",
]
