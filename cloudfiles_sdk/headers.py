"""
Header names and header handling for the Cloud Files REST API.

Response headers are parsed through a lookup table keyed by the lowercased
header name; anything not in the table (and not a metadata header) is
ignored.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .exceptions import ValidationError

SDK_VERSION = "1.0.0"
USER_AGENT = f"CloudFiles-Python-SDK/{SDK_VERSION}"

# Authentication
AUTH_USER_HEADER = "X-Auth-User"
AUTH_KEY_HEADER = "X-Auth-Key"
AUTH_USER_HEADER_LEGACY = "X-Storage-User"
AUTH_KEY_HEADER_LEGACY = "X-Storage-Pass"
AUTH_TOKEN = "X-Auth-Token"
AUTH_TOKEN_LEGACY = "X-Storage-Token"
STORAGE_URL = "X-Storage-Url"
CDNM_URL = "X-CDN-Management-Url"

# Account and container summaries
ACCOUNT_CONTAINER_COUNT = "X-Account-Container-Count"
ACCOUNT_BYTES_USED = "X-Account-Bytes-Used"
CONTAINER_OBJ_COUNT = "X-Container-Object-Count"
CONTAINER_BYTES_USED = "X-Container-Bytes-Used"

# CDN
CDN_URI = "X-CDN-URI"
CDN_ENABLED = "X-CDN-Enabled"
CDN_TTL = "X-TTL"

METADATA_HEADER = "X-Object-Meta-"

MAX_METADATA_KEY_LENGTH = 128
MAX_METADATA_VALUE_LENGTH = 256


@dataclass
class ResponseHeaders:
    """Recognized values from one response's header block."""

    storage_url: Optional[str] = None
    cdn_management_url: Optional[str] = None
    auth_token: Optional[str] = None
    account_container_count: int = 0
    account_bytes_used: int = 0
    container_object_count: int = 0
    container_bytes_used: int = 0
    cdn_enabled: Optional[bool] = None
    cdn_uri: Optional[str] = None
    cdn_ttl: Optional[int] = None
    etag: Optional[str] = None
    last_modified: Optional[str] = None
    content_type: Optional[str] = None
    content_length: Optional[int] = None
    metadata: Dict[str, str] = field(default_factory=dict)


def _to_int(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return 0


def _to_bool(value: str) -> Optional[bool]:
    value = value.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def encode_header_value(value: str) -> Union[str, bytes]:
    """
    Return a header value http.client can send unchanged.

    http.client encodes str values as latin-1, so anything outside ASCII is
    sent as UTF-8 bytes instead.
    """
    if value.isascii():
        return value
    return value.encode("utf-8")


def decode_header_value(value: str) -> str:
    """Undo the latin-1 decoding http.client applies to UTF-8 header values."""
    try:
        return value.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return value


def _setter(attr: str, convert: Callable[[str], Any] = str.strip):
    def apply(parsed: ResponseHeaders, value: str) -> None:
        setattr(parsed, attr, convert(value))
    return apply


def _set_legacy_token(parsed: ResponseHeaders, value: str) -> None:
    # X-Auth-Token wins over the legacy name when a server sends both
    if parsed.auth_token is None:
        parsed.auth_token = value.strip()


HEADER_TABLE: Dict[str, Callable[[ResponseHeaders, str], None]] = {
    STORAGE_URL.lower(): _setter("storage_url"),
    CDNM_URL.lower(): _setter("cdn_management_url"),
    AUTH_TOKEN.lower(): _setter("auth_token"),
    AUTH_TOKEN_LEGACY.lower(): _set_legacy_token,
    ACCOUNT_CONTAINER_COUNT.lower(): _setter("account_container_count", _to_int),
    ACCOUNT_BYTES_USED.lower(): _setter("account_bytes_used", _to_int),
    CONTAINER_OBJ_COUNT.lower(): _setter("container_object_count", _to_int),
    CONTAINER_BYTES_USED.lower(): _setter("container_bytes_used", _to_int),
    CDN_ENABLED.lower(): _setter("cdn_enabled", _to_bool),
    CDN_URI.lower(): _setter("cdn_uri"),
    CDN_TTL.lower(): _setter("cdn_ttl", _to_int),
    "etag": _setter("etag"),
    "last-modified": _setter("last_modified"),
    "content-type": _setter("content_type"),
    "content-length": _setter("content_length", _to_int),
}


def parse_response_headers(headers: Mapping[str, str]) -> ResponseHeaders:
    """
    Apply the header table to a complete response header block.

    Args:
        headers: Response headers (any mapping, names in any case)

    Returns:
        ResponseHeaders with every recognized value filled in
    """
    parsed = ResponseHeaders()
    prefix = METADATA_HEADER.lower()

    for name, value in headers.items():
        key = name.lower()
        if key.startswith(prefix):
            parsed.metadata[key[len(prefix):]] = decode_header_value(value.strip())
            continue
        setter = HEADER_TABLE.get(key)
        if setter is not None:
            setter(parsed, value)

    return parsed


def metadata_headers(metadata: Optional[Mapping[str, Any]]) -> Dict[str, Union[str, bytes]]:
    """
    Validate object metadata and turn it into request headers.

    Keys are trimmed and lowercased. Keys or values containing ':' are
    rejected, as are non-ASCII keys, keys longer than 128 characters, values
    longer than 256 characters, and keys that collide once lowercased.
    Non-ASCII values are sent as UTF-8 bytes.

    Raises:
        ValidationError: If any entry is invalid
    """
    hdrs: Dict[str, Union[str, bytes]] = {}
    if not metadata:
        return hdrs

    for raw_key, raw_value in metadata.items():
        key = str(raw_key).strip().lower()
        value = str(raw_value).strip()

        if not key:
            raise ValidationError("Metadata key cannot be empty", field="metadata")
        if not key.isascii():
            raise ValidationError(f"Metadata key must be ASCII: {key}", field="metadata")
        if ":" in key or ":" in value:
            raise ValidationError("Metadata cannot contain a ':' character", field="metadata")
        if len(key) > MAX_METADATA_KEY_LENGTH or len(value) > MAX_METADATA_VALUE_LENGTH:
            raise ValidationError(
                f"Metadata key or value exceeds maximum length: ({key}: {value})",
                field="metadata",
            )

        header = f"{METADATA_HEADER}{key}"
        if header in hdrs:
            raise ValidationError(f"Duplicate metadata key: {key}", field="metadata")
        hdrs[header] = encode_header_value(value)

    return hdrs


def request_headers(
    auth_token: str, extra: Optional[Mapping[str, Any]] = None
) -> Dict[str, Union[str, bytes]]:
    """
    Merge caller headers with the auth token and user agent.

    Caller-supplied X-Auth-Token or User-Agent headers are kept as given.
    """
    headers: Dict[str, Union[str, bytes]] = {}
    for name, value in (extra or {}).items():
        if isinstance(value, bytes):
            headers[name] = value.strip()
        else:
            headers[name] = encode_header_value(str(value).strip())

    lowered = {name.lower() for name in headers}
    if AUTH_TOKEN.lower() not in lowered:
        headers[AUTH_TOKEN] = encode_header_value(auth_token)
    if "user-agent" not in lowered:
        headers["User-Agent"] = USER_AGENT
    return headers
