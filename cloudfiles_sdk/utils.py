"""
Utility functions for the Cloud Files SDK.

This module provides URL building, listing parsing and the small file
helpers shared by the client and the CLI.
"""

import math
import mimetypes
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Iterator, Optional, BinaryIO, List, Tuple
from urllib.parse import quote


def make_path(base_url: str, container: Optional[str] = None, obj: Optional[str] = None) -> str:
    """
    Build a request URL below a storage or CDN endpoint.

    The container name is fully percent-encoded. The object name is
    percent-encoded except for '/', so pseudo-directories stay readable.

    Args:
        base_url: Storage or CDN-management endpoint
        container: Container name
        obj: Object name

    Returns:
        Full request URL
    """
    parts = [base_url.rstrip("/")]
    if container:
        parts.append(quote(container, safe=""))
    if obj:
        parts.append(quote(obj, safe="/"))
    return "/".join(parts)


def build_query(
    limit: int = 0,
    marker: Optional[str] = None,
    prefix: Optional[str] = None,
    path: Optional[str] = None,
    json_format: bool = False,
) -> str:
    """
    Build a listing query string, including the leading '?'.

    A limit of zero or less means an unpaginated listing, so no limit
    parameter is sent. Returns an empty string when there are no parameters.
    """
    params: List[Tuple[str, str]] = []
    if json_format:
        params.append(("format", "json"))
    limit = int(limit or 0)
    if limit > 0:
        params.append(("limit", str(limit)))
    if marker:
        params.append(("marker", marker))
    if prefix:
        params.append(("prefix", prefix))
    if path:
        params.append(("path", path))

    if not params:
        return ""
    return "?" + "&".join(f"{key}={quote(value, safe='')}" for key, value in params)


def parse_text_list(body: str) -> List[str]:
    """Split a newline-delimited listing body into names."""
    names = []
    for line in body.split("\n"):
        # tabs and spaces may be part of a name
        name = line.rstrip("\r\n\0\x0b")
        if name:
            names.append(name)
    return names


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an HTTP date or an ISO 8601 listing timestamp.

    Args:
        value: 'Tue, 03 Feb 2009 05:26:32 GMT' or '2009-02-03T05:26:32.612278'

    Returns:
        datetime, or None when the value is missing or unparseable
    """
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


def chunk_file(source: BinaryIO, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
    """
    Yield successive reads of an upload source until it is exhausted.

    The last chunk may be shorter than chunk_size; a source that returns
    fewer bytes than asked for is read again rather than treated as done.
    """
    chunk = source.read(chunk_size)
    while chunk:
        yield chunk
        chunk = source.read(chunk_size)


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB")
    """
    if not size_bytes:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB", "PB"]
    i = int(math.floor(math.log(size_bytes, 1024)))

    if i >= len(size_names):
        i = len(size_names) - 1

    p = math.pow(1024, i)
    size = round(size_bytes / p, 2)

    return f"{size} {size_names[i]}"


def guess_mime_type(filename: str) -> str:
    """Guess MIME type from filename."""
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or "application/octet-stream"
