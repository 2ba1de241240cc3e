from __future__ import annotations

from typing import Any, Dict, Optional

from psycopg2.extras import Json

from charity_api.utils.db import db_cursor, fetch_all, fetch_one

USER_COLS = (
    "id",
    "name",
    "email",
    "password_hash",
    "phone",
    "address",
    "avatar",
    "bio",
    "date_of_birth",
    "wallet_address",
    "role",
    "status",
    "is_verified",
    "reputation",
    "total_donated",
    "total_campaigns_created",
    "successful_campaigns",
    "google_provider",
    "facebook_provider",
    "refresh_token_hash",
    "refresh_token_expires_at",
    "last_login_at",
    "created_at",
    "updated_at",
)
_SELECT = "SELECT " + ", ".join(USER_COLS) + " FROM users"
_RETURNING = "RETURNING " + ", ".join(USER_COLS)

_JSON_COLS = {"google_provider", "facebook_provider"}
UPDATABLE = {
    "name",
    "phone",
    "address",
    "avatar",
    "bio",
    "date_of_birth",
    "wallet_address",
    "role",
    "status",
    "is_verified",
    "reputation",
    "google_provider",
    "facebook_provider",
    "last_login_at",
}


def _param(col: str, value):
    return Json(value) if col in _JSON_COLS and value is not None else value


def get_user(user_id: str) -> Optional[Dict[str, Any]]:
    with db_cursor() as cur:
        cur.execute(_SELECT + " WHERE id = %s", (user_id,))
        return fetch_one(cur, USER_COLS)


def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    with db_cursor() as cur:
        cur.execute(_SELECT + " WHERE email = %s", (email,))
        return fetch_one(cur, USER_COLS)


# JSONB column -> key holding the provider's stable account id
PROVIDER_ID_KEYS = {"google_provider": "google_sub", "facebook_provider": "facebook_id"}


def get_user_by_provider(provider_field: str, provider_id: str) -> Optional[Dict[str, Any]]:
    if provider_field not in PROVIDER_ID_KEYS:
        raise ValueError(f"not an OAuth provider column: {provider_field}")
    with db_cursor() as cur:
        cur.execute(
            _SELECT + f" WHERE {provider_field}->>%s = %s",
            (PROVIDER_ID_KEYS[provider_field], provider_id),
        )
        return fetch_one(cur, USER_COLS)


def get_user_for_update(cur, user_id: str) -> Optional[Dict[str, Any]]:
    cur.execute(_SELECT + " WHERE id = %s FOR UPDATE", (user_id,))
    return fetch_one(cur, USER_COLS)


def create_user(data: Dict[str, Any]) -> Dict[str, Any]:
    cols = [c for c in ("name", "email", "password_hash", *sorted(UPDATABLE)) if c in data]
    sql = f"""
    INSERT INTO users ({", ".join(cols)})
    VALUES ({", ".join(["%s"] * len(cols))})
    {_RETURNING}
    """
    with db_cursor() as cur:
        cur.execute(sql, [_param(c, data[c]) for c in cols])
        row = fetch_one(cur, USER_COLS)
        return row


def update_user(cur, user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    sets, params = [], []
    for k, v in fields.items():
        if k in UPDATABLE:
            sets.append(f"{k} = %s")
            params.append(_param(k, v))
    if not sets:
        cur.execute(_SELECT + " WHERE id = %s", (user_id,))
        return fetch_one(cur, USER_COLS)
    sets.append("updated_at = now()")
    params.append(user_id)
    cur.execute(
        f"UPDATE users SET {', '.join(sets)} WHERE id = %s {_RETURNING}", params
    )
    return fetch_one(cur, USER_COLS)


def delete_user(cur, user_id: str) -> bool:
    cur.execute("DELETE FROM users WHERE id = %s", (user_id,))
    return cur.rowcount > 0


def list_users(
    search: str | None = None,
    role: str | None = None,
    status: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[dict], int]:
    where, params = [], []
    if search:
        where.append("(name ILIKE %s OR email ILIKE %s)")
        params += [f"%{search}%", f"%{search}%"]
    if role:
        where.append("role = %s")
        params.append(role)
    if status:
        where.append("status = %s")
        params.append(status)
    clause = (" WHERE " + " AND ".join(where)) if where else ""
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM users" + clause, params)
        total = cur.fetchone()[0]
        cur.execute(
            _SELECT + clause + " ORDER BY created_at DESC LIMIT %s OFFSET %s",
            params + [limit, offset],
        )
        return fetch_all(cur, USER_COLS), total


# --- refresh tokens (only the SHA-256 hash is stored) ---


def store_refresh_token(cur, user_id: str, token_hash: str, expires_at) -> None:
    cur.execute(
        """
        UPDATE users
        SET refresh_token_hash = %s, refresh_token_expires_at = %s, updated_at = now()
        WHERE id = %s
        """,
        (token_hash, expires_at, user_id),
    )


def get_user_by_refresh_token_for_update(cur, token_hash: str) -> Optional[Dict[str, Any]]:
    cur.execute(
        _SELECT
        + " WHERE refresh_token_hash = %s AND refresh_token_expires_at > now() FOR UPDATE",
        (token_hash,),
    )
    return fetch_one(cur, USER_COLS)


def clear_refresh_token(token_hash: str) -> bool:
    with db_cursor() as cur:
        cur.execute(
            """
            UPDATE users
            SET refresh_token_hash = NULL, refresh_token_expires_at = NULL, updated_at = now()
            WHERE refresh_token_hash = %s
            """,
            (token_hash,),
        )
        return cur.rowcount > 0


def touch_last_login(cur, user_id: str) -> None:
    cur.execute("UPDATE users SET last_login_at = now() WHERE id = %s", (user_id,))


def adjust_campaign_stats(
    cur, user_id: str, created: int = 0, successful: int = 0
) -> None:
    cur.execute(
        """
        UPDATE users
        SET total_campaigns_created = GREATEST(total_campaigns_created + %s, 0),
            successful_campaigns = GREATEST(successful_campaigns + %s, 0),
            updated_at = now()
        WHERE id = %s
        """,
        (created, successful, user_id),
    )
