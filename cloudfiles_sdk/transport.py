"""
Reusable HTTP transports for the Cloud Files SDK.

The client keeps one requests session per request shape. A session is
created on first use of its shape and reused for every later request of
that shape, so keep-alive connections are shared between calls.
"""

import logging
import os
from enum import Enum
from typing import Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from requests.certs import where as default_ca_bundle
from urllib3.util.retry import Retry

from .exceptions import ConfigurationError
from .headers import USER_AGENT

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 4


class RequestShape(Enum):
    """Categories of requests that each get their own session."""

    AUTH = "auth"
    GET_CALL = "get_call"    # GET objects, containers and listings
    PUT_OBJ = "put_obj"      # PUT object
    HEAD = "head"            # HEAD requests
    PUT_CONT = "put_cont"    # PUT container, CDN enable
    DEL_POST = "del_post"    # DELETE containers/objects, POST metadata/CDN


class ConnectionPool:
    """
    Lazily created requests sessions keyed by RequestShape.

    Not thread safe: the sessions are shared mutable state.
    """

    def __init__(self, ca_bundle: Optional[str] = None):
        self._sessions: Dict[RequestShape, requests.Session] = {}
        self._verify: Union[bool, str] = True
        if ca_bundle:
            self.use_ca_bundle(ca_bundle)

    @property
    def verify(self) -> Union[bool, str]:
        return self._verify

    def use_ca_bundle(self, path: Optional[str] = None) -> str:
        """
        Verify TLS peers against a CA bundle file.

        Args:
            path: Bundle path; defaults to the bundle shipped with requests

        Returns:
            The bundle path in use

        Raises:
            ConfigurationError: If the bundle file does not exist
        """
        if not path:
            path = default_ca_bundle()
        if not os.path.isfile(path):
            raise ConfigurationError(f"Could not use CA bundle: {path}", config_key="ca_bundle")

        self._verify = path
        for session in self._sessions.values():
            session.verify = path
        logger.debug(f"Using CA bundle {path}")
        return path

    def get(self, shape: RequestShape) -> requests.Session:
        """Return the session for a shape, creating it on first use."""
        session = self._sessions.get(shape)
        if session is None:
            session = self._create_session()
            self._sessions[shape] = session
            logger.debug(f"Opened {shape.value} session")
        return session

    def _create_session(self) -> requests.Session:
        session = requests.Session()

        # Single attempt; failures are reported, never retried
        adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False))
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.max_redirects = MAX_REDIRECTS
        session.verify = self._verify
        session.headers.update({"User-Agent": USER_AGENT})
        return session

    def __contains__(self, shape: RequestShape) -> bool:
        return shape in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def close(self):
        """Close every open session."""
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
