import pytest

from charity_api.errors import AuthErrorCode, BusinessError, UserErrorCode
from charity_api.services import auth_service
from tests.conftest import make_user


@pytest.fixture
def accounts(app, monkeypatch, no_db):
    """Users by email plus the stored refresh-token hash per user id."""
    no_db(auth_service)
    state = {"users": {}, "tokens": {}}

    def by_token(cur, token_hash):
        for user_id, stored in state["tokens"].items():
            if stored == token_hash:
                return next(u for u in state["users"].values() if u["id"] == user_id)
        return None

    def clear(token_hash):
        for user_id, stored in list(state["tokens"].items()):
            if stored == token_hash:
                del state["tokens"][user_id]
                return True
        return False

    def create(fields):
        user = make_user(**fields)
        state["users"][user["email"]] = user
        return user

    def by_provider(field, provider_id):
        key = {"google_provider": "google_sub", "facebook_provider": "facebook_id"}[field]
        return next(
            (u for u in state["users"].values() if (u.get(field) or {}).get(key) == provider_id),
            None,
        )

    monkeypatch.setattr(auth_service, "get_user_by_email", lambda email: state["users"].get(email))
    monkeypatch.setattr(auth_service, "get_user_by_provider", by_provider)
    monkeypatch.setattr(auth_service, "create_user", create)
    monkeypatch.setattr(
        auth_service,
        "store_refresh_token",
        lambda cur, uid, token_hash, expires_at: state["tokens"].__setitem__(uid, token_hash),
    )
    monkeypatch.setattr(auth_service, "get_user_by_refresh_token_for_update", by_token)
    monkeypatch.setattr(auth_service, "clear_refresh_token", clear)
    monkeypatch.setattr(auth_service, "touch_last_login", lambda cur, uid: None)
    return state


def test_register_returns_token_pair_without_secrets(accounts):
    result = auth_service.register_user(
        {"name": "Binh", "email": " Binh@Example.com ", "password": "longenough"}
    )

    assert result["access_token"]
    assert len(result["refresh_token"]) == 128
    assert result["user"]["email"] == "binh@example.com"
    assert "password_hash" not in result["user"]
    stored = accounts["tokens"][result["user"]["id"]]
    assert stored == auth_service.hash_refresh_token(result["refresh_token"])
    assert stored != result["refresh_token"]


def test_register_duplicate_email(accounts):
    auth_service.register_user({"name": "A", "email": "a@example.com", "password": "longenough"})

    with pytest.raises(BusinessError) as exc:
        auth_service.register_user({"name": "A", "email": "a@example.com", "password": "longenough"})
    assert exc.value.error_code == AuthErrorCode.EMAIL_ALREADY_EXISTS
    assert exc.value.status == 409


def test_login_checks_password(accounts):
    auth_service.register_user({"name": "C", "email": "c@example.com", "password": "correct-horse"})

    assert auth_service.login_user({"email": "c@example.com", "password": "correct-horse"})
    with pytest.raises(BusinessError) as exc:
        auth_service.login_user({"email": "c@example.com", "password": "wrong-horse"})
    assert exc.value.error_code == AuthErrorCode.INVALID_CREDENTIALS
    assert exc.value.status == 401


def test_login_unknown_email(accounts):
    with pytest.raises(BusinessError) as exc:
        auth_service.login_user({"email": "nobody@example.com", "password": "whatever1"})
    assert exc.value.error_code == AuthErrorCode.INVALID_CREDENTIALS


def test_login_refuses_suspended_account(accounts):
    auth_service.register_user({"name": "D", "email": "d@example.com", "password": "longenough"})
    accounts["users"]["d@example.com"]["status"] = "suspended"

    with pytest.raises(BusinessError) as exc:
        auth_service.login_user({"email": "d@example.com", "password": "longenough"})
    assert exc.value.error_code == UserErrorCode.BANNED
    assert exc.value.status == 403


def test_refresh_rotates_and_old_token_stops_working(accounts):
    first = auth_service.register_user(
        {"name": "E", "email": "e@example.com", "password": "longenough"}
    )

    second = auth_service.refresh_tokens(first["refresh_token"])
    assert second["refresh_token"] != first["refresh_token"]

    with pytest.raises(BusinessError) as exc:
        auth_service.refresh_tokens(first["refresh_token"])
    assert exc.value.error_code == AuthErrorCode.INVALID_TOKEN
    assert auth_service.refresh_tokens(second["refresh_token"])


def test_logout_revokes_refresh_token(accounts):
    tokens = auth_service.register_user(
        {"name": "F", "email": "f@example.com", "password": "longenough"}
    )

    assert auth_service.logout_user(tokens["refresh_token"]) == {
        "logged_out": True,
        "token_revoked": True,
    }
    with pytest.raises(BusinessError):
        auth_service.refresh_tokens(tokens["refresh_token"])


def test_google_login_creates_then_links(accounts, monkeypatch):
    monkeypatch.setattr(
        auth_service,
        "verify_google_id_token",
        lambda token, nonce=None: {
            "sub": "g-1",
            "email": "g@example.com",
            "name": "Gia",
            "picture": None,
        },
    )
    monkeypatch.setattr(auth_service, "update_user", lambda cur, uid, fields: None)

    result = auth_service.google_login("id-token")

    user = accounts["users"]["g@example.com"]
    assert result["user"]["id"] == user["id"]
    assert user["google_provider"]["google_sub"] == "g-1"
    assert user["is_verified"] is True


def test_facebook_login_follows_linked_id_after_email_change(accounts, monkeypatch):
    linked = make_user(
        email="old@example.com",
        facebook_provider={"facebook_id": "fb-7", "email": "old@example.com", "name": "Lan"},
    )
    accounts["users"][linked["email"]] = linked
    monkeypatch.setattr(
        auth_service,
        "verify_facebook_token",
        lambda token: {"id": "fb-7", "email": "new@example.com", "name": "Lan", "picture": None},
    )
    relinked = []
    monkeypatch.setattr(
        auth_service,
        "update_user",
        lambda cur, uid, fields: relinked.append(uid) or {**linked, **fields},
    )

    result = auth_service.facebook_login("access-token")

    assert result["user"]["id"] == linked["id"]
    assert relinked == [linked["id"]]
    assert list(accounts["users"]) == ["old@example.com"]


def test_register_endpoint_sets_cookie(client, accounts):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Hoa", "email": "hoa@example.com", "password": "longenough"},
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["message"] == "Created successfully"
    assert body["data"]["accessToken"]
    assert body["data"]["refreshToken"]
    assert "accessToken=" in resp.headers.get("Set-Cookie", "")


def test_register_endpoint_validates_body(client):
    resp = client.post("/api/auth/register", json={"email": "not-an-email", "password": "x"})

    body = resp.get_json()
    assert resp.status_code == 400
    assert body["error_code"] == "COMMON_VALIDATION_ERROR"
    fields = {e["field"] for e in body["errors"]}
    assert fields == {"name", "email", "password"}
