"""
Tests for the command-line interface.
"""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from cloudfiles_sdk import Container, NotFoundError, StorageObject, ValidationError
from cloudfiles_sdk.cli import cli, parse_metadata
from cloudfiles_sdk.config import ENV_VARS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_var in ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def client_cls():
    with patch("cloudfiles_sdk.cli.CloudFilesClient") as client_cls:
        yield client_cls


@pytest.fixture
def base_args(tmp_path):
    return ["--config", str(tmp_path / "none.json"), "-u", "jdoe", "-k", "secret"]


def test_parse_metadata():
    assert parse_metadata(("author=Jane", "note=a=b")) == {"author": "Jane", "note": "a=b"}

    with pytest.raises(ValidationError):
        parse_metadata(("novalue",))


def test_missing_credentials(runner, client_cls, tmp_path):
    result = runner.invoke(cli, ["--config", str(tmp_path / "none.json"), "containers"])

    assert result.exit_code == 1
    assert "Failed to list containers" in result.output
    client_cls.assert_not_called()


def test_containers(runner, client_cls, base_args):
    client = client_cls.return_value
    client.list_containers_info.return_value = [Container("photos", 3, 2048)]

    result = runner.invoke(cli, base_args + ["containers", "--limit", "5"])

    assert result.exit_code == 0, result.output
    assert "photos" in result.output
    client.authenticate.assert_called_once_with("jdoe", "secret", account=None, host=None)
    client.list_containers_info.assert_called_once_with(limit=5, marker=None)
    client.close.assert_called_once()


def test_create_existing_container(runner, client_cls, base_args):
    client_cls.return_value.create_container.return_value = False

    result = runner.invoke(cli, base_args + ["create", "photos"])

    assert result.exit_code == 0
    assert "already exists" in result.output


def test_upload(runner, client_cls, base_args, tmp_path):
    source = tmp_path / "beach.jpg"
    source.write_bytes(b"x" * 10)
    client = client_cls.return_value
    client.put_object.return_value = "etag-1"

    result = runner.invoke(cli, base_args + ["upload", "photos", str(source), "--meta", "author=Jane"])

    assert result.exit_code == 0, result.output
    args, kwargs = client.put_object.call_args
    assert args[:2] == ("photos", "beach.jpg")
    assert kwargs["content_length"] == 10
    assert kwargs["content_type"] == "image/jpeg"
    assert kwargs["metadata"] == {"author": "Jane"}
    assert "etag-1" in result.output


def test_download_missing_object(runner, client_cls, base_args, tmp_path):
    client = client_cls.return_value
    client.head_object.return_value = StorageObject(name="nope.jpg", container="photos")

    result = runner.invoke(cli, base_args + ["download", "photos", "nope.jpg", "-o", str(tmp_path)])

    assert result.exit_code == 1
    client.get_object_to_stream.assert_not_called()


def test_meta(runner, client_cls, base_args):
    client = client_cls.return_value

    result = runner.invoke(cli, base_args + ["meta", "photos", "beach.jpg", "author=Jane", "year=2009"])

    assert result.exit_code == 0, result.output
    client.update_object_metadata.assert_called_once_with(
        "photos", "beach.jpg", {"author": "Jane", "year": "2009"}
    )


def test_rm_failure(runner, client_cls, base_args):
    client_cls.return_value.delete_object.side_effect = NotFoundError("Object not found")

    result = runner.invoke(cli, base_args + ["rm", "photos", "beach.jpg"])

    assert result.exit_code == 1
    assert "Delete failed" in result.output


def test_cdn_enable(runner, client_cls, base_args):
    client = client_cls.return_value
    client.enable_cdn.return_value = "http://c0001.cdn.example.com"

    result = runner.invoke(cli, base_args + ["cdn", "enable", "photos", "--ttl", "3600"])

    assert result.exit_code == 0, result.output
    client.enable_cdn.assert_called_once_with("photos", ttl=3600)
    assert "http://c0001.cdn.example.com" in result.output
