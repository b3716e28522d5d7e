"""
Data models for the Cloud Files SDK.

This module defines the read-only summaries the client returns for
accounts, containers, objects and CDN settings.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from dataclasses import dataclass, field

from .headers import ResponseHeaders
from .utils import parse_timestamp


@dataclass
class AccountInfo:
    """Usage totals for the authenticated account."""

    container_count: int = 0
    bytes_used: int = 0

    @classmethod
    def from_headers(cls, headers: ResponseHeaders) -> "AccountInfo":
        return cls(
            container_count=headers.account_container_count,
            bytes_used=headers.account_bytes_used,
        )


@dataclass
class Container:
    """A storage container and its usage summary."""

    name: str
    object_count: int = 0
    bytes_used: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Container":
        """Create Container from a JSON listing entry."""
        return cls(
            name=data["name"],
            object_count=int(data.get("count", 0)),
            bytes_used=int(data.get("bytes", 0)),
        )

    @classmethod
    def from_headers(cls, name: str, headers: ResponseHeaders) -> "Container":
        """Create Container from a HEAD response."""
        return cls(
            name=name,
            object_count=headers.container_object_count,
            bytes_used=headers.container_bytes_used,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "count": self.object_count, "bytes": self.bytes_used}


@dataclass
class StorageObject:
    """An object stored in a container."""

    name: str
    container: Optional[str] = None
    content_type: Optional[str] = None
    content_length: Optional[int] = None
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], container: Optional[str] = None) -> "StorageObject":
        """Create StorageObject from a JSON listing entry."""
        length = data.get("bytes")
        return cls(
            # pseudo-directory entries only carry 'subdir'
            name=data.get("name") or data.get("subdir", ""),
            container=container,
            content_type=data.get("content_type"),
            content_length=int(length) if length is not None else None,
            etag=data.get("hash"),
            last_modified=parse_timestamp(data.get("last_modified")),
        )

    @classmethod
    def from_headers(cls, container: str, name: str, headers: ResponseHeaders) -> "StorageObject":
        """Create StorageObject from a HEAD response."""
        return cls(
            name=name,
            container=container,
            content_type=headers.content_type,
            content_length=headers.content_length,
            etag=headers.etag,
            last_modified=parse_timestamp(headers.last_modified),
            metadata=dict(headers.metadata),
        )

    @property
    def exists(self) -> bool:
        """False for the empty result of a HEAD on a missing object."""
        return self.etag is not None or self.content_length is not None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "name": self.name,
            "container": self.container,
            "content_type": self.content_type,
            "bytes": self.content_length,
            "hash": self.etag,
            "metadata": self.metadata,
        }
        if self.last_modified:
            result["last_modified"] = self.last_modified.isoformat()
        return result


@dataclass
class CdnSettings:
    """CDN publishing state of one container."""

    name: str
    enabled: Optional[bool] = None
    uri: Optional[str] = None
    ttl: Optional[int] = None

    @classmethod
    def from_headers(cls, name: str, headers: ResponseHeaders) -> "CdnSettings":
        return cls(
            name=name,
            enabled=headers.cdn_enabled,
            uri=headers.cdn_uri,
            ttl=headers.cdn_ttl,
        )
