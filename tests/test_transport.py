"""
Tests for the per-shape session pool.
"""

import pytest

from cloudfiles_sdk import ConfigurationError
from cloudfiles_sdk.headers import USER_AGENT
from cloudfiles_sdk.transport import MAX_REDIRECTS, ConnectionPool, RequestShape


@pytest.fixture
def pool():
    pool = ConnectionPool()
    yield pool
    pool.close()


def test_sessions_are_created_lazily_and_reused(pool):
    assert len(pool) == 0

    first = pool.get(RequestShape.GET_CALL)
    again = pool.get(RequestShape.GET_CALL)

    assert first is again
    assert RequestShape.GET_CALL in pool
    assert RequestShape.HEAD not in pool
    assert len(pool) == 1


def test_each_shape_gets_its_own_session(pool):
    sessions = {shape: pool.get(shape) for shape in RequestShape}

    assert len(pool) == len(RequestShape)
    assert len({id(s) for s in sessions.values()}) == len(RequestShape)


def test_session_configuration(pool):
    session = pool.get(RequestShape.PUT_OBJ)

    assert session.max_redirects == MAX_REDIRECTS == 4
    assert session.headers["User-Agent"] == USER_AGENT
    assert session.verify is True
    assert session.get_adapter("https://storage.example.com").max_retries.total == 0


def test_missing_ca_bundle_is_rejected(pool, tmp_path):
    with pytest.raises(ConfigurationError) as exc_info:
        pool.use_ca_bundle(str(tmp_path / "missing.pem"))

    assert exc_info.value.config_key == "ca_bundle"
    assert pool.verify is True


def test_ca_bundle_applies_to_existing_and_new_sessions(pool, tmp_path):
    bundle = tmp_path / "bundle.pem"
    bundle.write_text("-----BEGIN CERTIFICATE-----\n")
    existing = pool.get(RequestShape.HEAD)

    assert pool.use_ca_bundle(str(bundle)) == str(bundle)

    assert existing.verify == str(bundle)
    assert pool.get(RequestShape.DEL_POST).verify == str(bundle)


def test_default_ca_bundle(pool):
    path = pool.use_ca_bundle()
    assert path.endswith(".pem")
    assert pool.verify == path


def test_close_drops_sessions(pool):
    first = pool.get(RequestShape.AUTH)
    pool.close()

    assert len(pool) == 0
    assert pool.get(RequestShape.AUTH) is not first
