from flask import Blueprint, request
from flask_jwt_extended import set_access_cookies, unset_access_cookies

from charity_api.services.auth_service import (
    facebook_login,
    google_login,
    login_user,
    logout_user,
    refresh_tokens,
    register_user,
)
from charity_api.utils.authz import auth_required
from charity_api.utils.rate_limit import rate_limit
from charity_api.utils.responses import respond
from charity_api.validators.auth import (
    validate_facebook,
    validate_google,
    validate_login,
    validate_refresh,
    validate_register,
)

auth_bp = Blueprint("auth", __name__)


def _with_cookie(tokens: dict, status: int = 200):
    resp, status = respond(tokens, status)
    set_access_cookies(resp, tokens["access_token"])
    return resp, status


@auth_bp.post("/register")
@rate_limit(key_prefix="auth")
def register():
    data = validate_register(request.get_json(force=True, silent=True) or {})
    return _with_cookie(register_user(data), 201)


@auth_bp.post("/login")
@rate_limit(key_prefix="auth")
def login():
    data = validate_login(request.get_json(force=True, silent=True) or {})
    return _with_cookie(login_user(data))


@auth_bp.post("/refresh")
@rate_limit(key_prefix="auth")
def refresh():
    data = validate_refresh(request.get_json(force=True, silent=True) or {})
    return _with_cookie(refresh_tokens(data["refresh_token"]))


@auth_bp.post("/logout")
def logout():
    data = validate_refresh(request.get_json(force=True, silent=True) or {})
    resp, status = respond(logout_user(data["refresh_token"]))
    unset_access_cookies(resp)
    return resp, status


@auth_bp.post("/oauth/google")
@rate_limit(key_prefix="auth")
def oauth_google():
    data = validate_google(request.get_json(force=True, silent=True) or {})
    return _with_cookie(google_login(data["id_token"], data.get("nonce")))


@auth_bp.post("/oauth/facebook")
@rate_limit(key_prefix="auth")
def oauth_facebook():
    data = validate_facebook(request.get_json(force=True, silent=True) or {})
    return _with_cookie(facebook_login(data["access_token"]))


@auth_bp.get("/profile")
@auth_required()
def profile(viewer):
    return respond(viewer)
