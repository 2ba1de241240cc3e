"""Identity verification against Google and Facebook."""

import logging

import requests
from flask import current_app
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from charity_api.errors import AuthErrorCode, BusinessError

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")
GRAPH_URL = "https://graph.facebook.com"
HTTP_TIMEOUT = 10


def _fail(provider: str, reason: str) -> BusinessError:
    logger.warning("%s OAuth verification failed: %s", provider, reason)
    return BusinessError(
        AuthErrorCode.OAUTH_FAILED,
        f"{provider} OAuth authentication failed: {reason}",
        401,
    )


def verify_google_id_token(token: str, nonce: str | None = None) -> dict:
    """Returns {sub, email, name, picture} from a verified Google ID token."""
    client_id = current_app.config.get("GOOGLE_CLIENT_ID")
    if not client_id:
        raise _fail("Google", "GOOGLE_CLIENT_ID is not configured")
    try:
        payload = id_token.verify_oauth2_token(
            token, google_requests.Request(), audience=client_id
        )
    except (ValueError, google_exceptions.GoogleAuthError) as e:
        raise _fail("Google", str(e)) from e

    if payload.get("iss") not in GOOGLE_ISSUERS:
        raise _fail("Google", "invalid token issuer")
    if nonce and payload.get("nonce") != nonce:
        raise _fail("Google", "invalid nonce")
    if not payload.get("email_verified"):
        raise _fail("Google", "email not verified")
    if not payload.get("email"):
        raise _fail("Google", "token carries no email")
    return {
        "sub": payload["sub"],
        "email": payload["email"],
        "name": payload.get("name") or payload["email"].split("@", 1)[0],
        "picture": payload.get("picture"),
    }


def verify_facebook_token(access_token: str) -> dict:
    """Returns {id, email, name, picture} after checking the token belongs to our app."""
    app_id = current_app.config.get("FACEBOOK_CLIENT_ID")
    app_secret = current_app.config.get("FACEBOOK_CLIENT_SECRET")
    if not app_id or not app_secret:
        raise _fail("Facebook", "Facebook app credentials are not configured")
    try:
        me = requests.get(
            f"{GRAPH_URL}/me",
            params={"fields": "id,name,email,picture", "access_token": access_token},
            timeout=HTTP_TIMEOUT,
        )
        me.raise_for_status()
        info = me.json()
        debug = requests.get(
            f"{GRAPH_URL}/debug_token",
            params={"input_token": access_token, "access_token": f"{app_id}|{app_secret}"},
            timeout=HTTP_TIMEOUT,
        )
        debug.raise_for_status()
        debug_data = debug.json().get("data") or {}
    except (requests.RequestException, ValueError) as e:
        raise _fail("Facebook", str(e)) from e

    if not info.get("id"):
        raise _fail("Facebook", "invalid access token")
    if not debug_data.get("is_valid") or str(debug_data.get("app_id")) != str(app_id):
        raise _fail("Facebook", "token was not issued for this app")
    if not info.get("email"):
        raise _fail("Facebook", "account has no email permission")
    picture = ((info.get("picture") or {}).get("data") or {}).get("url")
    return {
        "id": info["id"],
        "email": info["email"],
        "name": info.get("name") or info["email"].split("@", 1)[0],
        "picture": picture,
    }
