import pytest

from charity_api.errors import CommonErrorCode
from charity_api.utils import rate_limit


@pytest.fixture
def limited(app):
    app.config.update(RATE_LIMIT_ENABLED=True, RATE_LIMIT_AUTH_PER_MINUTE=2)
    rate_limit.reset()
    yield app.test_client()
    rate_limit.reset()


def test_is_rate_limited_counts_per_key():
    rate_limit.reset()
    assert not rate_limit.is_rate_limited("k", 2)
    assert not rate_limit.is_rate_limited("k", 2)
    assert rate_limit.is_rate_limited("k", 2)
    assert not rate_limit.is_rate_limited("other", 2)
    rate_limit.reset()


def test_zero_limit_disables_check():
    assert not rate_limit.is_rate_limited("k", 0)


def test_auth_endpoints_return_429_after_limit(limited):
    # empty bodies fail validation but still count against the window
    for _ in range(2):
        assert limited.post("/api/auth/login", json={}).status_code == 400

    resp = limited.post("/api/auth/login", json={})
    assert resp.status_code == 429
    body = resp.get_json()
    assert body["error_code"] == CommonErrorCode.TOO_MANY_REQUESTS
    assert body["success"] is False


def test_limit_is_keyed_by_forwarded_client(limited):
    for _ in range(2):
        limited.post("/api/auth/login", json={}, headers={"X-Forwarded-For": "10.0.0.1"})

    resp = limited.post("/api/auth/login", json={}, headers={"X-Forwarded-For": "10.0.0.2"})
    assert resp.status_code == 400


def test_disabled_limiter_never_blocks(client):
    rate_limit.reset()
    for _ in range(15):
        assert client.post("/api/auth/login", json={}).status_code == 400
