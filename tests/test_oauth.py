import pytest
import requests

from charity_api.errors import AuthErrorCode, BusinessError
from charity_api.services import oauth_service

APP_ID = "1234"


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


@pytest.fixture
def facebook(app, monkeypatch):
    app.config.update(FACEBOOK_CLIENT_ID=APP_ID, FACEBOOK_CLIENT_SECRET="shh")
    graph = {
        "me": FakeResponse(
            {
                "id": "fb-1",
                "name": "Lan",
                "email": "lan@example.com",
                "picture": {"data": {"url": "https://cdn.example.com/lan.png"}},
            }
        ),
        "debug_token": FakeResponse({"data": {"is_valid": True, "app_id": APP_ID}}),
    }
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params))
        return graph[url.rsplit("/", 1)[-1]]

    monkeypatch.setattr(oauth_service.requests, "get", fake_get)
    return graph, calls


def test_facebook_token_yields_profile(facebook):
    _, calls = facebook

    info = oauth_service.verify_facebook_token("user-token")

    assert info == {
        "id": "fb-1",
        "email": "lan@example.com",
        "name": "Lan",
        "picture": "https://cdn.example.com/lan.png",
    }
    debug_params = calls[1][1]
    assert debug_params["input_token"] == "user-token"
    assert debug_params["access_token"] == f"{APP_ID}|shh"


def test_facebook_token_for_another_app_is_refused(facebook):
    graph, _ = facebook
    graph["debug_token"] = FakeResponse({"data": {"is_valid": True, "app_id": "999"}})

    with pytest.raises(BusinessError) as exc:
        oauth_service.verify_facebook_token("user-token")
    assert exc.value.error_code == AuthErrorCode.OAUTH_FAILED
    assert exc.value.status == 401


def test_facebook_graph_error_becomes_oauth_failure(facebook):
    graph, _ = facebook
    graph["me"] = FakeResponse({"error": {"message": "bad token"}}, status=400)

    with pytest.raises(BusinessError) as exc:
        oauth_service.verify_facebook_token("user-token")
    assert exc.value.error_code == AuthErrorCode.OAUTH_FAILED


def test_facebook_requires_credentials(app):
    app.config.update(FACEBOOK_CLIENT_ID=None, FACEBOOK_CLIENT_SECRET=None)

    with pytest.raises(BusinessError) as exc:
        oauth_service.verify_facebook_token("user-token")
    assert exc.value.error_code == AuthErrorCode.OAUTH_FAILED


@pytest.fixture
def google(app, monkeypatch):
    app.config.update(GOOGLE_CLIENT_ID="client.apps.googleusercontent.com")
    payload = {
        "iss": "https://accounts.google.com",
        "sub": "g-42",
        "email": "minh@example.com",
        "email_verified": True,
        "name": "Minh",
        "picture": None,
        "nonce": "n-1",
    }
    monkeypatch.setattr(
        oauth_service.id_token,
        "verify_oauth2_token",
        lambda token, request, audience=None: dict(payload),
    )
    return payload


def test_google_id_token_yields_profile(google):
    info = oauth_service.verify_google_id_token("id-token", nonce="n-1")

    assert info == {
        "sub": "g-42",
        "email": "minh@example.com",
        "name": "Minh",
        "picture": None,
    }


def test_google_nonce_mismatch_is_refused(google):
    with pytest.raises(BusinessError) as exc:
        oauth_service.verify_google_id_token("id-token", nonce="other")
    assert exc.value.error_code == AuthErrorCode.OAUTH_FAILED


def test_google_unverified_email_is_refused(google):
    google["email_verified"] = False

    with pytest.raises(BusinessError):
        oauth_service.verify_google_id_token("id-token")


def test_google_bad_signature_is_refused(app, monkeypatch):
    app.config.update(GOOGLE_CLIENT_ID="client.apps.googleusercontent.com")

    def reject(token, request, audience=None):
        raise ValueError("Token used too late")

    monkeypatch.setattr(oauth_service.id_token, "verify_oauth2_token", reject)

    with pytest.raises(BusinessError) as exc:
        oauth_service.verify_google_id_token("id-token")
    assert "Token used too late" in exc.value.message
