"""
Shared fixtures for the Cloud Files SDK tests.

HTTP is never touched: the client's connection pool hands out a MagicMock
session whose request() returns prebuilt requests.Response objects.
"""

from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from cloudfiles_sdk import CloudFilesClient, Session

STORAGE_URL = "https://storage.example.com/v1/MossoCloudFS_abc"
CDN_URL = "https://cdn.example.com/v1/MossoCloudFS_abc"
TOKEN = "tok-123"

REASONS = {
    200: "OK",
    201: "Created",
    202: "Accepted",
    204: "No Content",
    304: "Not Modified",
    401: "Unauthorized",
    404: "Not Found",
    409: "Conflict",
    412: "Precondition Failed",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}


def make_response(status_code=200, headers=None, body=b"", url=STORAGE_URL):
    """Build a fully read requests.Response."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = REASONS.get(status_code, "")
    response.headers = CaseInsensitiveDict(headers or {})
    response._content = body
    response._content_consumed = True
    response.encoding = "utf-8"
    response.url = url
    return response


def last_request(http):
    """Keyword arguments of the most recent http.request call."""
    return http.request.call_args.kwargs


@pytest.fixture
def session():
    return Session(storage_url=STORAGE_URL, cdn_management_url=CDN_URL, auth_token=TOKEN)


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def client(http, session):
    client = CloudFilesClient(session=session)
    client.pool.get = MagicMock(return_value=http)
    return client


@pytest.fixture
def anonymous_client(http):
    client = CloudFilesClient()
    client.pool.get = MagicMock(return_value=http)
    return client
