"""
Authentication for the Cloud Files SDK.

This module exchanges a username and API key for a session: the storage
URL, the CDN-management URL and the auth token every later request uses.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import requests

from .exceptions import AuthenticationError, TransportError, ValidationError
from .headers import (
    AUTH_KEY_HEADER,
    AUTH_KEY_HEADER_LEGACY,
    AUTH_USER_HEADER,
    AUTH_USER_HEADER_LEGACY,
    USER_AGENT,
    encode_header_value,
    parse_response_headers,
)

logger = logging.getLogger(__name__)

DEFAULT_AUTH_HOST = "https://api.mosso.com"
DEFAULT_API_VERSION = 1


@dataclass(frozen=True)
class Credentials:
    """Username and API key, plus the optional legacy account/host."""

    username: str
    api_key: str
    account: Optional[str] = None
    host: Optional[str] = None

    @property
    def is_legacy(self) -> bool:
        return bool(self.account or self.host)

    def __repr__(self):
        return f"Credentials(username={self.username!r}, account={self.account!r}, host={self.host!r})"


@dataclass(frozen=True)
class Session:
    """Endpoints and token produced by a successful authentication."""

    storage_url: str
    cdn_management_url: Optional[str]
    auth_token: str

    def __repr__(self):
        return f"Session(storage_url={self.storage_url!r}, cdn_management_url={self.cdn_management_url!r})"


class AuthManager:
    """
    Performs the authentication request.

    The modern form sends X-Auth-User/X-Auth-Key to the default auth host.
    When an account or host is given the legacy form is used instead:
    X-Storage-User/X-Storage-Pass sent to {host}/v{version}/{account}/auth.
    """

    def __init__(self, api_version: int = DEFAULT_API_VERSION, default_host: str = DEFAULT_AUTH_HOST):
        self.api_version = api_version
        self.default_host = default_host.rstrip("/")

    def auth_url(self, credentials: Credentials) -> str:
        """Build the auth endpoint URL for a set of credentials."""
        if credentials.is_legacy:
            path = [
                (credentials.host or self.default_host).rstrip("/"),
                quote(f"v{self.api_version}", safe=""),
                quote(credentials.account or "", safe=""),
            ]
        else:
            path = [self.default_host]
        path.append("auth")
        return "/".join(path)

    def auth_headers(self, credentials: Credentials) -> dict:
        if credentials.is_legacy:
            return {
                AUTH_USER_HEADER_LEGACY: encode_header_value(credentials.username),
                AUTH_KEY_HEADER_LEGACY: encode_header_value(credentials.api_key),
                "User-Agent": USER_AGENT,
            }
        return {
            AUTH_USER_HEADER: encode_header_value(credentials.username),
            AUTH_KEY_HEADER: encode_header_value(credentials.api_key),
            "User-Agent": USER_AGENT,
        }

    def authenticate(
        self,
        http: requests.Session,
        credentials: Credentials,
        timeout: Optional[float] = None,
    ) -> Session:
        """
        Authenticate and return the resulting session.

        Args:
            http: Session used to send the request (redirects are followed)
            credentials: Username and key to authenticate with
            timeout: Request timeout in seconds, None for the transport default

        Returns:
            Session with storage URL, CDN-management URL and token

        Raises:
            ValidationError: If username or key is missing
            TransportError: If no response was obtained
            AuthenticationError: On a non-2xx response or incomplete headers
        """
        if not credentials.username or not credentials.api_key:
            raise ValidationError("Username and API key are required", field="credentials")

        url = self.auth_url(credentials)
        logger.info(f"Authenticating {credentials.username} against {url}")

        try:
            response = http.request(
                method="GET",
                url=url,
                headers=self.auth_headers(credentials),
                allow_redirects=True,
                timeout=timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Authentication request failed: {e}")

        if not 200 <= response.status_code < 300:
            raise AuthenticationError(
                f"Authentication failed: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        parsed = parse_response_headers(response.headers)
        if not parsed.storage_url or not parsed.auth_token:
            raise AuthenticationError(
                "Authentication response is missing the storage URL or auth token",
                status_code=response.status_code,
            )

        logger.info(f"Authenticated {credentials.username}, storage at {parsed.storage_url}")
        return Session(
            storage_url=parsed.storage_url,
            cdn_management_url=parsed.cdn_management_url,
            auth_token=parsed.auth_token,
        )
