"""
Tests for response header parsing and request header building.
"""

import pytest

from cloudfiles_sdk import ValidationError
from cloudfiles_sdk.headers import USER_AGENT, metadata_headers, parse_response_headers, request_headers


def test_parse_recognized_headers_in_any_case():
    parsed = parse_response_headers({
        "x-container-object-count": "12",
        "X-CONTAINER-BYTES-USED": "4096",
        "X-Account-Container-Count": "3",
        "X-Account-Bytes-Used": "8192",
        "etag": " abc ",
        "Content-Length": "10",
        "X-Something-Else": "ignored",
    })

    assert parsed.container_object_count == 12
    assert parsed.container_bytes_used == 4096
    assert parsed.account_container_count == 3
    assert parsed.account_bytes_used == 8192
    assert parsed.etag == "abc"
    assert parsed.content_length == 10
    assert parsed.metadata == {}


def test_defaults_when_headers_absent():
    parsed = parse_response_headers({})

    assert parsed.container_object_count == 0
    assert parsed.etag is None
    assert parsed.content_length is None
    assert parsed.cdn_enabled is None


@pytest.mark.parametrize("value,expected", [
    ("True", True),
    ("true", True),
    ("FALSE", False),
    ("maybe", None),
])
def test_cdn_enabled_values(value, expected):
    assert parse_response_headers({"X-CDN-Enabled": value}).cdn_enabled is expected


def test_non_numeric_count_parses_as_zero():
    assert parse_response_headers({"X-Container-Object-Count": "lots"}).container_object_count == 0


def test_metadata_keys_are_lowercased():
    parsed = parse_response_headers({
        "X-Object-Meta-Author": " Jane ",
        "x-object-meta-Camera-Model": "X100",
    })
    assert parsed.metadata == {"author": "Jane", "camera-model": "X100"}


def test_metadata_headers_are_built_lowercased_and_trimmed():
    assert metadata_headers({" Author ": " Jane "}) == {"X-Object-Meta-author": "Jane"}


def test_metadata_headers_accept_maximum_lengths():
    hdrs = metadata_headers({"k" * 128: "v" * 256})
    assert hdrs == {"X-Object-Meta-" + "k" * 128: "v" * 256}


def test_empty_metadata_builds_no_headers():
    assert metadata_headers(None) == {}
    assert metadata_headers({}) == {}


@pytest.mark.parametrize("metadata", [
    {"a:b": "value"},
    {"key": "12:30"},
    {"k" * 129: "value"},
    {"key": "v" * 257},
    {"": "value"},
    {"Author": "a", "author": "b"},
])
def test_invalid_metadata_rejected(metadata):
    with pytest.raises(ValidationError) as exc_info:
        metadata_headers(metadata)
    assert exc_info.value.field == "metadata"


def test_request_headers_add_token_and_user_agent():
    headers = request_headers("tok", {"Range": "bytes=0-1"})
    assert headers == {"Range": "bytes=0-1", "X-Auth-Token": "tok", "User-Agent": USER_AGENT}


def test_request_headers_keep_caller_values():
    headers = request_headers("tok", {"x-auth-token": "other", "user-agent": "custom/1.0"})
    assert headers == {"x-auth-token": "other", "user-agent": "custom/1.0"}


def test_non_ascii_metadata_value_is_sent_as_utf8():
    assert metadata_headers({"city": "東京"}) == {"X-Object-Meta-city": "東京".encode("utf-8")}


def test_non_ascii_metadata_key_rejected():
    with pytest.raises(ValidationError):
        metadata_headers({"stadt": "x", "größe": "10"})


def test_utf8_metadata_value_is_decoded():
    # http.client hands header values over decoded as latin-1
    raw = "東京".encode("utf-8").decode("latin-1")
    parsed = parse_response_headers({"X-Object-Meta-City": raw, "X-Object-Meta-Town": "Z\xfcrich"})

    assert parsed.metadata == {"city": "東京", "town": "Zürich"}


def test_request_headers_encode_non_ascii_values():
    headers = request_headers("tok", {"If-Match": "caf\xe9", "X-Raw": b"raw "})

    assert headers["If-Match"] == "café".encode("utf-8")
    assert headers["X-Raw"] == b"raw"
    assert headers["X-Auth-Token"] == "tok"
