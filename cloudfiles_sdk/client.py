"""
Synchronous Cloud Files client implementation.

This module provides the client for the Cloud Files REST API: account,
container and object operations against the storage endpoint, and
publishing operations against the CDN-management endpoint.
"""

import io
import logging
import time
from typing import Optional, List, Dict, Any, Callable, BinaryIO, Iterator, Mapping, Union

import requests

from .auth import AuthManager, Credentials, Session, DEFAULT_API_VERSION, DEFAULT_AUTH_HOST
from .exceptions import (
    CloudFilesError, AuthenticationError, NotFoundError, ConflictError,
    PreconditionFailedError, UnprocessableEntityError, ValidationError,
    UnexpectedStatusError, TransportError, ConfigurationError,
)
from .headers import CDN_ENABLED, CDN_TTL, metadata_headers, parse_response_headers, request_headers
from .models import AccountInfo, Container, StorageObject, CdnSettings
from .transport import ConnectionPool, RequestShape
from .utils import build_query, chunk_file, make_path, parse_text_list

logger = logging.getLogger(__name__)

MAX_CONTAINER_NAME_LENGTH = 256
MAX_OBJECT_NAME_LENGTH = 1024
DEFAULT_CDN_TTL = 86400

ProgressCallback = Callable[[int], None]

STATUS_ERRORS = {
    401: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
    412: PreconditionFailedError,
    422: UnprocessableEntityError,
}


class _ProgressReader:
    """File wrapper that reports each chunk read and stops at a known length."""

    def __init__(self, file_obj: BinaryIO, length: int, callback: Optional[ProgressCallback]):
        self._file = file_obj
        self._remaining = length
        self._callback = callback

    def __len__(self):
        return self._remaining

    def read(self, size: int = -1) -> bytes:
        if self._remaining <= 0:
            return b""
        if size is None or size < 0 or size > self._remaining:
            size = self._remaining
        data = self._file.read(size)
        self._remaining -= len(data)
        if data and self._callback:
            self._callback(len(data))
        return data


class CloudFilesClient:
    """
    Client for Cloud Files storage and CDN operations.

    Authenticate once, then every call issues a single HTTP request and
    translates the status code into a return value or an exception. Nothing
    is retried. Instances are not thread safe.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        api_version: int = DEFAULT_API_VERSION,
        auth_host: str = DEFAULT_AUTH_HOST,
        ca_bundle: Optional[str] = None,
        timeout: Optional[float] = None,
        chunk_size: int = 64 * 1024,
        debug: bool = False,
    ):
        """
        Initialize the client.

        Args:
            session: Previously obtained session (skips authenticate)
            api_version: Auth API version used in the legacy auth path
            auth_host: Auth host used when no account/host is given
            ca_bundle: CA bundle path for TLS verification
            timeout: Request timeout in seconds, None for the transport default
            chunk_size: Chunk size for streamed uploads and downloads
            debug: Log every request at DEBUG level
        """
        self.auth = AuthManager(api_version=api_version, default_host=auth_host)
        self.pool = ConnectionPool(ca_bundle=ca_bundle)
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.debug = False
        self._saved_log_level = logging.NOTSET
        self._session: Optional[Session] = session
        self._read_progress_callback: Optional[ProgressCallback] = None
        self._write_progress_callback: Optional[ProgressCallback] = None
        if debug:
            self.set_debug(True)

    # ------------------------------------------------------------------
    # Session and settings
    # ------------------------------------------------------------------

    def authenticate(
        self,
        username: str,
        api_key: str,
        account: Optional[str] = None,
        host: Optional[str] = None,
    ) -> Session:
        """
        Authenticate and keep the resulting session for later calls.

        On failure any previous session is dropped.

        Raises:
            AuthenticationError: If the service rejects the credentials
            TransportError: If no response was obtained
        """
        self._session = None
        credentials = Credentials(username=username, api_key=api_key, account=account, host=host)
        session = self.auth.authenticate(self.pool.get(RequestShape.AUTH), credentials, timeout=self.timeout)
        self._session = session
        return session

    def set_session(self, session: Session):
        """Use a session obtained elsewhere."""
        self._session = session

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def storage_url(self) -> Optional[str]:
        return self._session.storage_url if self._session else None

    @property
    def cdn_management_url(self) -> Optional[str]:
        return self._session.cdn_management_url if self._session else None

    @property
    def auth_token(self) -> Optional[str]:
        return self._session.auth_token if self._session else None

    def ssl_use_cabundle(self, path: Optional[str] = None) -> str:
        """Verify TLS against a CA bundle; see ConnectionPool.use_ca_bundle."""
        return self.pool.use_ca_bundle(path)

    def set_debug(self, enabled: bool):
        """
        Log request traces at DEBUG on the cloudfiles_sdk logger.

        Turning debug off restores the level the logger had before.
        """
        package_logger = logging.getLogger("cloudfiles_sdk")
        if enabled and not self.debug:
            self._saved_log_level = package_logger.level
            package_logger.setLevel(logging.DEBUG)
        elif not enabled and self.debug:
            package_logger.setLevel(self._saved_log_level)
        self.debug = enabled

    def set_read_progress_callback(self, callback: Optional[ProgressCallback]):
        """Called with the size of each chunk read from an upload source."""
        self._read_progress_callback = callback

    def set_write_progress_callback(self, callback: Optional[ProgressCallback]):
        """Called with the size of each chunk written during a download."""
        self._write_progress_callback = callback

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _require_session(self) -> Session:
        if self._session is None:
            raise AuthenticationError("Not authenticated; call authenticate() first")
        return self._session

    def _storage_path(self, container: Optional[str] = None, obj: Optional[str] = None) -> str:
        return make_path(self._require_session().storage_url, container, obj)

    def _cdn_path(self, container: Optional[str] = None) -> str:
        session = self._require_session()
        if not session.cdn_management_url:
            raise ConfigurationError("Session has no CDN management URL", config_key="cdn_management_url")
        return make_path(session.cdn_management_url, container)

    def _send_request(
        self,
        shape: RequestShape,
        url: str,
        headers: Optional[Mapping[str, Any]] = None,
        method: str = "GET",
        data: Any = None,
        stream: bool = False,
    ) -> requests.Response:
        """Send one request on the session for its shape."""
        session = self._require_session()
        http = self.pool.get(shape)
        start_time = time.time()

        try:
            response = http.request(
                method=method,
                url=url,
                headers=request_headers(session.auth_token, headers),
                data=data,
                stream=stream,
                allow_redirects=True,
                timeout=self.timeout,
            )
        except requests.exceptions.SSLError as e:
            raise TransportError(f"TLS error: {e}")
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Connection error: {e}")
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request timeout: {e}")
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}")
        except UnicodeEncodeError as e:
            # header names and str values must be latin-1 for http.client
            raise ValidationError(f"Request header cannot be encoded: {e}", field="headers")

        if self.debug:
            elapsed = time.time() - start_time
            logger.debug(f"{method} {url} -> {response.status_code} {response.reason} ({elapsed:.3f}s)")
        return response

    def _check(
        self,
        response: requests.Response,
        ok: tuple,
        messages: Optional[Dict[int, str]] = None,
    ):
        """Raise the exception matching a response status not in `ok`."""
        status = response.status_code
        if status in ok:
            return

        message = (messages or {}).get(status)
        error_class = STATUS_ERRORS.get(status)
        if error_class is None:
            logger.warning(f"Unexpected HTTP response {status} {response.reason} from {response.url}")
            raise UnexpectedStatusError(
                message or f"Unexpected HTTP response: {status} {response.reason}",
                status_code=status,
            )
        if message:
            raise error_class(message, status_code=status)
        raise error_class(status_code=status)

    @staticmethod
    def _validate_container(name: str):
        if not name:
            raise ValidationError("Container name not set", field="container")
        if not isinstance(name, str):
            raise ValidationError("Container name must be a string", field="container")
        if len(name) > MAX_CONTAINER_NAME_LENGTH:
            raise ValidationError(
                f"Container name exceeds {MAX_CONTAINER_NAME_LENGTH} characters", field="container"
            )
        if "/" in name:
            raise ValidationError("Container name cannot contain a '/' character", field="container")

    @staticmethod
    def _validate_object(name: str):
        if not name:
            raise ValidationError("Object name not set", field="name")
        if not isinstance(name, str):
            raise ValidationError("Object name must be a string", field="name")
        if len(name) > MAX_OBJECT_NAME_LENGTH:
            raise ValidationError(f"Object name exceeds {MAX_OBJECT_NAME_LENGTH} characters", field="name")

    def _get_text_list(self, url: str, messages: Dict[int, str]) -> List[str]:
        response = self._send_request(RequestShape.GET_CALL, url)
        if response.status_code == 204:
            return []
        self._check(response, (200,), messages)
        try:
            body = response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CloudFilesError(f"Invalid UTF-8 listing: {e}", status_code=response.status_code)
        return parse_text_list(body)

    def _get_json_list(self, url: str, messages: Dict[int, str]) -> List[Dict[str, Any]]:
        response = self._send_request(RequestShape.GET_CALL, url)
        if response.status_code == 204:
            return []
        self._check(response, (200,), messages)
        try:
            return response.json()
        except ValueError as e:
            raise CloudFilesError(f"Invalid JSON listing: {e}", status_code=response.status_code)

    def _write_body(self, response: requests.Response, write: Callable[[bytes], Any]) -> int:
        """Feed the response body to `write` chunk by chunk."""
        total = 0
        for chunk in response.iter_content(chunk_size=self.chunk_size):
            if not chunk:
                continue
            write(chunk)
            total += len(chunk)
            if self._write_progress_callback:
                self._write_progress_callback(len(chunk))
        return total

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    def head_account(self) -> AccountInfo:
        """Get container count and bytes used for the account."""
        response = self._send_request(RequestShape.HEAD, self._storage_path(), method="HEAD")
        self._check(response, (200, 204), {404: "Account not found"})
        return AccountInfo.from_headers(parse_response_headers(response.headers))

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def list_containers(self, limit: int = 0, marker: Optional[str] = None) -> List[str]:
        """
        List container names.

        Args:
            limit: Page size; 0 returns the full listing
            marker: Return names after this one

        Returns:
            Container names, empty when the account has none
        """
        url = self._storage_path() + build_query(limit=limit, marker=marker)
        return self._get_text_list(url, {404: "Invalid account name for authentication token"})

    def list_containers_info(self, limit: int = 0, marker: Optional[str] = None) -> List[Container]:
        """List containers with their object counts and byte usage."""
        url = self._storage_path() + build_query(limit=limit, marker=marker, json_format=True)
        entries = self._get_json_list(url, {404: "Invalid account name for authentication token"})
        return [Container.from_dict(entry) for entry in entries]

    def create_container(self, name: str) -> bool:
        """
        Create a container.

        Returns:
            True if the container was created, False if it already existed
        """
        self._validate_container(name)
        response = self._send_request(
            RequestShape.PUT_CONT,
            self._storage_path(name),
            headers={"Content-Length": "0"},
            method="PUT",
        )
        self._check(response, (201, 202))
        created = response.status_code == 201
        logger.info(f"Container {name} {'created' if created else 'already exists'}")
        return created

    def delete_container(self, name: str):
        """
        Delete an empty container.

        Raises:
            ConflictError: If the container still holds objects
            NotFoundError: If the container does not exist
        """
        self._validate_container(name)
        response = self._send_request(RequestShape.DEL_POST, self._storage_path(name), method="DELETE")
        self._check(response, (204,), {
            404: "Specified container did not exist to delete",
            409: "Container must be empty prior to removing it",
        })
        logger.info(f"Container {name} deleted")

    def head_container(self, name: str) -> Container:
        """Get the object count and bytes used of a container."""
        self._validate_container(name)
        response = self._send_request(RequestShape.HEAD, self._storage_path(name), method="HEAD")
        self._check(response, (200, 204), {404: "Container not found"})
        return Container.from_headers(name, parse_response_headers(response.headers))

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def list_objects(
        self,
        container: str,
        limit: int = 0,
        marker: Optional[str] = None,
        prefix: Optional[str] = None,
        path: Optional[str] = None,
    ) -> List[str]:
        """
        List object names in a container.

        Args:
            container: Container name
            limit: Page size; 0 returns the full listing
            marker: Return names after this one
            prefix: Only names starting with this prefix
            path: Only names directly below this pseudo-directory

        Returns:
            Object names, empty when the container has none
        """
        self._validate_container(container)
        url = self._storage_path(container) + build_query(limit, marker, prefix, path)
        return self._get_text_list(url, {404: "Container not found"})

    def list_objects_info(
        self,
        container: str,
        limit: int = 0,
        marker: Optional[str] = None,
        prefix: Optional[str] = None,
        path: Optional[str] = None,
    ) -> List[StorageObject]:
        """Like list_objects, but returns size, type, hash and timestamp too."""
        self._validate_container(container)
        url = self._storage_path(container) + build_query(limit, marker, prefix, path, json_format=True)
        entries = self._get_json_list(url, {404: "Container not found"})
        return [StorageObject.from_dict(entry, container=container) for entry in entries]

    def get_object(self, container: str, name: str, headers: Optional[Mapping[str, Any]] = None) -> bytes:
        """
        Download an object into memory.

        Args:
            container: Container name
            name: Object name
            headers: Extra request headers (Range, If-Match, ...)

        Returns:
            Object body; empty for a 304 Not Modified
        """
        self._validate_container(container)
        self._validate_object(name)
        buffer = bytearray()

        with self._send_request(
            RequestShape.GET_CALL, self._storage_path(container, name), headers=headers, stream=True
        ) as response:
            self._check_download(response)
            self._write_body(response, buffer.extend)

        return bytes(buffer)

    def get_object_to_stream(
        self,
        container: str,
        name: str,
        sink: BinaryIO,
        headers: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """
        Stream an object into a writable binary sink.

        Returns:
            Number of bytes written
        """
        self._validate_container(container)
        self._validate_object(name)
        if not hasattr(sink, "write"):
            raise ValidationError("Sink must be a writable file-like object", field="sink")

        def write_all(chunk: bytes):
            view = memoryview(chunk)
            written = 0
            while written < len(view):
                count = sink.write(view[written:])
                written += len(view) - written if count is None else count

        with self._send_request(
            RequestShape.GET_CALL, self._storage_path(container, name), headers=headers, stream=True
        ) as response:
            self._check_download(response)
            return self._write_body(response, write_all)

    def _check_download(self, response: requests.Response):
        status = response.status_code
        if 200 <= status < 300 or status == 304:
            return
        self._check(response, (), {404: "Object not found"})

    def put_object(
        self,
        container: str,
        name: str,
        source: Union[bytes, str, BinaryIO],
        metadata: Optional[Mapping[str, Any]] = None,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
        etag: Optional[str] = None,
    ) -> Optional[str]:
        """
        Upload an object.

        The length is known for bytes and str sources, or when content_length
        is given; otherwise the body is sent with chunked transfer encoding.

        Args:
            container: Container name
            name: Object name
            source: Object data or a readable binary file object
            metadata: Object metadata (short keys and values, no ':')
            content_type: MIME type, application/octet-stream by default
            content_length: Size of a file-like source, if known
            etag: MD5 the server must verify the body against

        Returns:
            ETag reported by the server

        Raises:
            PreconditionFailedError: On 412
            UnprocessableEntityError: If the server checksum does not match
        """
        self._validate_container(container)
        self._validate_object(name)
        hdrs = metadata_headers(metadata)
        hdrs["Content-Type"] = content_type or "application/octet-stream"
        if etag:
            hdrs["ETag"] = etag

        if isinstance(source, str):
            source = source.encode("utf-8")
        if isinstance(source, (bytes, bytearray)):
            content_length = len(source)
            source = io.BytesIO(source)
        elif not hasattr(source, "read"):
            raise ValidationError("Source must be bytes, str or a readable file object", field="source")

        if content_length is None:
            hdrs["Transfer-Encoding"] = "chunked"
            body = self._chunked_body(source)
        else:
            if content_length < 0:
                raise ValidationError("Content length cannot be negative", field="content_length")
            hdrs["Content-Length"] = str(content_length)
            body = _ProgressReader(source, content_length, self._read_progress_callback)

        response = self._send_request(
            RequestShape.PUT_OBJ,
            self._storage_path(container, name),
            headers=hdrs,
            method="PUT",
            data=body,
        )
        self._check(response, (201,), {412: "Missing Content-Type header"})
        return parse_response_headers(response.headers).etag

    def _chunked_body(self, source: BinaryIO) -> Iterator[bytes]:
        for chunk in chunk_file(source, self.chunk_size):
            if self._read_progress_callback:
                self._read_progress_callback(len(chunk))
            yield chunk

    def update_object_metadata(self, container: str, name: str, metadata: Mapping[str, Any]):
        """
        Replace an object's metadata without re-uploading it.

        Raises:
            ValidationError: If metadata is empty or invalid
        """
        self._validate_container(container)
        self._validate_object(name)
        if not metadata:
            raise ValidationError("Metadata is empty", field="metadata")

        response = self._send_request(
            RequestShape.DEL_POST,
            self._storage_path(container, name),
            headers=metadata_headers(metadata),
            method="POST",
        )
        self._check(response, (202,), {404: "Account, Container, or Object not found"})

    def head_object(self, container: str, name: str) -> StorageObject:
        """
        Get an object's attributes and metadata.

        A missing object yields a StorageObject whose attributes are all None
        and whose metadata is empty (see StorageObject.exists).
        """
        self._validate_container(container)
        self._validate_object(name)
        response = self._send_request(RequestShape.HEAD, self._storage_path(container, name), method="HEAD")
        if response.status_code == 404:
            return StorageObject(name=name, container=container)
        self._check(response, (200, 204))
        return StorageObject.from_headers(container, name, parse_response_headers(response.headers))

    def delete_object(self, container: str, name: str):
        """Delete an object."""
        self._validate_container(container)
        self._validate_object(name)
        response = self._send_request(RequestShape.DEL_POST, self._storage_path(container, name), method="DELETE")
        self._check(response, (204,), {404: "Object not found"})

    # ------------------------------------------------------------------
    # CDN
    # ------------------------------------------------------------------

    def list_cdn_containers(self) -> List[str]:
        """List names of containers known to the CDN."""
        return self._get_text_list(self._cdn_path(), {404: "Account not found"})

    def enable_cdn(self, name: str, ttl: int = DEFAULT_CDN_TTL) -> Optional[str]:
        """
        Publish a container on the CDN.

        Returns:
            Public CDN URI of the container
        """
        self._validate_container(name)
        response = self._send_request(
            RequestShape.PUT_CONT,
            self._cdn_path(name),
            headers={CDN_ENABLED: "True", CDN_TTL: int(ttl), "Content-Length": "0"},
            method="PUT",
        )
        self._check(response, (201, 202))
        uri = parse_response_headers(response.headers).cdn_uri
        logger.info(f"CDN enabled for {name} (ttl={ttl}): {uri}")
        return uri

    def update_cdn(self, name: str, ttl: int = DEFAULT_CDN_TTL) -> Optional[str]:
        """Change the TTL of an already published container; returns the CDN URI."""
        self._validate_container(name)
        response = self._send_request(
            RequestShape.DEL_POST,
            self._cdn_path(name),
            headers={CDN_ENABLED: "True", CDN_TTL: int(ttl)},
            method="POST",
        )
        self._check(response, (202,), {404: "Container not found"})
        return parse_response_headers(response.headers).cdn_uri

    def disable_cdn(self, name: str):
        """Stop publishing a container on the CDN."""
        self._validate_container(name)
        response = self._send_request(
            RequestShape.DEL_POST,
            self._cdn_path(name),
            headers={CDN_ENABLED: "False"},
            method="POST",
        )
        self._check(response, (202,), {404: "Container not found"})
        logger.info(f"CDN disabled for {name}")

    def head_cdn_container(self, name: str) -> CdnSettings:
        """Get the CDN state of a container."""
        self._validate_container(name)
        response = self._send_request(RequestShape.HEAD, self._cdn_path(name), method="HEAD")
        self._check(response, (200, 204), {404: "Container not found"})
        return CdnSettings.from_headers(name, parse_response_headers(response.headers))

    # ------------------------------------------------------------------

    def close(self):
        """Close all pooled connections."""
        self.pool.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
