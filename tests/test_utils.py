"""
Tests for URL building and parsing helpers.
"""

import io
from datetime import datetime, timezone

import pytest

from cloudfiles_sdk.utils import (
    build_query,
    chunk_file,
    format_file_size,
    make_path,
    parse_text_list,
    parse_timestamp,
)

BASE = "https://storage.example.com/v1/acct"


class TestMakePath:

    def test_endpoint_only(self):
        assert make_path(BASE + "/") == BASE

    def test_container_is_fully_encoded(self):
        assert make_path(BASE, "a b/c") == f"{BASE}/a%20b%2Fc"

    def test_object_keeps_slashes(self):
        assert make_path(BASE, "photos", "2009/summer/beach #1.jpg") == (
            f"{BASE}/photos/2009/summer/beach%20%231.jpg"
        )

    def test_unicode_names(self):
        assert make_path(BASE, "fotos", "café.jpg") == f"{BASE}/fotos/caf%C3%A9.jpg"


class TestBuildQuery:

    def test_no_parameters(self):
        assert build_query() == ""
        assert build_query(limit=0) == ""
        assert build_query(limit=-5) == ""

    def test_all_parameters(self):
        assert build_query(limit=10, marker="m&n", prefix="a/", path="p q") == (
            "?limit=10&marker=m%26n&prefix=a%2F&path=p%20q"
        )

    def test_json_format_comes_first(self):
        assert build_query(limit=3, json_format=True) == "?format=json&limit=3"


def test_parse_text_list():
    assert parse_text_list("one\r\ntwo \n\nthree\x0b\n") == ["one", "two ", "three"]
    assert parse_text_list("") == []


@pytest.mark.parametrize("value,expected", [
    ("Tue, 03 Feb 2009 05:26:32 GMT", datetime(2009, 2, 3, 5, 26, 32, tzinfo=timezone.utc)),
    ("2009-02-03T05:26:32.612278", datetime(2009, 2, 3, 5, 26, 32, 612278)),
    ("not a date", None),
    (None, None),
    ("", None),
])
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value) == expected


def test_chunk_file():
    assert list(chunk_file(io.BytesIO(b"abcdefg"), chunk_size=3)) == [b"abc", b"def", b"g"]


@pytest.mark.parametrize("size,expected", [
    (0, "0 B"),
    (None, "0 B"),
    (512, "512.0 B"),
    (1536, "1.5 KB"),
    (5 * 1024 ** 3, "5.0 GB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected
