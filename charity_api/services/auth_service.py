import hashlib
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict

import bcrypt
from flask import current_app
from flask_jwt_extended import create_access_token
from psycopg2.errors import UniqueViolation

from charity_api.enums import UserStatus
from charity_api.errors import AuthErrorCode, BusinessError, UserErrorCode
from charity_api.models.user import (
    clear_refresh_token,
    create_user,
    get_user_by_email,
    get_user_by_provider,
    get_user_by_refresh_token_for_update,
    store_refresh_token,
    touch_last_login,
    update_user,
)
from charity_api.services.oauth_service import (
    verify_facebook_token,
    verify_google_id_token,
)
from charity_api.utils.db import db_cursor

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def _verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def hash_refresh_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(user["id"]),
        "name": user["name"],
        "email": user["email"],
        "avatar": user.get("avatar"),
        "role": user["role"],
        "created_at": user.get("created_at"),
    }


def _ensure_active(user: Dict[str, Any]) -> None:
    if user["status"] != UserStatus.ACTIVE:
        raise BusinessError(
            UserErrorCode.BANNED,
            f"User account {user['id']} is not active. Status: {user['status']}",
            403,
        )


def _issue_tokens(cur, user: Dict[str, Any]) -> Dict[str, Any]:
    """New access token plus a rotated refresh token (previous one overwritten)."""
    access = create_access_token(
        identity=str(user["id"]),
        additional_claims={"email": user["email"], "role": user["role"]},
    )
    refresh = secrets.token_hex(64)
    expires_at = datetime.now(timezone.utc) + current_app.config["REFRESH_TOKEN_EXPIRES"]
    store_refresh_token(cur, user["id"], hash_refresh_token(refresh), expires_at)
    return {
        "access_token": access,
        "refresh_token": refresh,
        "user": _public_user(user),
    }


def register_user(data: dict) -> dict:
    email = _normalize_email(data["email"])
    if get_user_by_email(email):
        raise BusinessError(
            AuthErrorCode.EMAIL_ALREADY_EXISTS,
            f"User with email {email} already exists",
            409,
        )
    try:
        user = create_user(
            {
                "name": data["name"],
                "email": email,
                "password_hash": hash_password(data["password"]),
            }
        )
    except UniqueViolation as e:
        raise BusinessError(
            AuthErrorCode.EMAIL_ALREADY_EXISTS,
            f"User with email {email} already exists",
            409,
        ) from e

    with db_cursor() as cur:
        return _issue_tokens(cur, user)


def login_user(data: dict) -> dict:
    email = _normalize_email(data["email"])
    user = get_user_by_email(email)
    if not user:
        raise BusinessError(
            AuthErrorCode.INVALID_CREDENTIALS,
            f"Invalid login credentials for email: {email}",
            401,
        )
    if not user["password_hash"] and user.get("google_provider"):
        raise BusinessError(
            AuthErrorCode.INVALID_CREDENTIALS,
            f"Account {email} is linked with Google OAuth and has no password",
            401,
        )
    if not user["password_hash"] or not _verify_password(
        data["password"], user["password_hash"]
    ):
        raise BusinessError(
            AuthErrorCode.INVALID_CREDENTIALS,
            f"Invalid password for email: {email}",
            401,
        )
    _ensure_active(user)

    with db_cursor() as cur:
        touch_last_login(cur, user["id"])
        return _issue_tokens(cur, user)


def refresh_tokens(refresh_token: str) -> dict:
    """Exchange a valid refresh token for a new pair; the old token stops working."""
    with db_cursor() as cur:
        user = get_user_by_refresh_token_for_update(cur, hash_refresh_token(refresh_token))
        if not user:
            raise BusinessError(
                AuthErrorCode.INVALID_TOKEN, "Invalid or expired refresh token", 401
            )
        _ensure_active(user)
        return _issue_tokens(cur, user)


def logout_user(refresh_token: str) -> dict:
    cleared = clear_refresh_token(hash_refresh_token(refresh_token))
    return {"logged_out": True, "token_revoked": cleared}


def _oauth_login(
    provider_field: str, provider_id: str, email: str, profile: Dict[str, Any]
) -> dict:
    """Sign in the account linked to this provider identity, else the one owning the email."""
    email = _normalize_email(email)
    user = get_user_by_provider(provider_field, provider_id) or get_user_by_email(email)
    if user is None:
        try:
            user = create_user(
                {
                    "name": profile["name"],
                    "email": email,
                    "avatar": profile.get("picture"),
                    "is_verified": True,
                    provider_field: profile,
                }
            )
            logger.info("created %s user %s via OAuth", provider_field, user["id"])
        except UniqueViolation:
            # registered concurrently; link instead
            user = get_user_by_provider(provider_field, provider_id) or get_user_by_email(email)

    with db_cursor() as cur:
        if user.get(provider_field) != profile:
            user = update_user(cur, user["id"], {provider_field: profile})
        _ensure_active(user)
        touch_last_login(cur, user["id"])
        return _issue_tokens(cur, user)


def google_login(token: str, nonce: str | None = None) -> dict:
    info = verify_google_id_token(token, nonce)
    profile = {
        "google_sub": info["sub"],
        "email": info["email"],
        "name": info["name"],
        "picture": info.get("picture"),
    }
    return _oauth_login("google_provider", info["sub"], info["email"], profile)


def facebook_login(access_token: str) -> dict:
    info = verify_facebook_token(access_token)
    profile = {
        "facebook_id": info["id"],
        "email": info["email"],
        "name": info["name"],
        "picture": info.get("picture"),
    }
    return _oauth_login("facebook_provider", info["id"], info["email"], profile)
