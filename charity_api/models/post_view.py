from __future__ import annotations

from typing import Any

from charity_api.utils.db import db_cursor, fetch_all, fetch_one

VIEW_COLS = (
    "id",
    "post_id",
    "user_id",
    "session_id",
    "ip_address",
    "user_agent",
    "referrer",
    "source",
    "duration",
    "viewed_at",
)
_SELECT = "SELECT " + ", ".join(VIEW_COLS) + " FROM post_views"
_RETURNING = "RETURNING " + ", ".join(VIEW_COLS)


def insert_view(cur, data: dict[str, Any]) -> dict[str, Any] | None:
    """
    None when this user (or anonymous session) already has a view of the post.
    Anonymous views without a session are never deduplicated.
    """
    cur.execute(
        f"""
        INSERT INTO post_views (post_id, user_id, session_id, ip_address, user_agent, referrer, source)
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        ON CONFLICT DO NOTHING
        {_RETURNING}
        """,
        (
            data["post_id"],
            data.get("user_id"),
            data.get("session_id"),
            data.get("ip_address"),
            data.get("user_agent"),
            data.get("referrer"),
            data.get("source") or "web",
        ),
    )
    return fetch_one(cur, VIEW_COLS)


def _identity_clause(user_id: str | None, session_id: str | None):
    if user_id:
        return "user_id = %s", user_id
    return "user_id IS NULL AND session_id = %s", session_id


def touch_view(
    cur, post_id: str, user_id: str | None, session_id: str | None, referrer: str | None
) -> dict[str, Any] | None:
    clause, ident = _identity_clause(user_id, session_id)
    cur.execute(
        f"""
        UPDATE post_views
        SET viewed_at = now(), referrer = COALESCE(%s, referrer)
        WHERE post_id = %s AND {clause}
        {_RETURNING}
        """,
        (referrer, post_id, ident),
    )
    return fetch_one(cur, VIEW_COLS)


def update_duration(
    post_id: str, user_id: str | None, session_id: str | None, duration: int
) -> dict[str, Any] | None:
    clause, ident = _identity_clause(user_id, session_id)
    with db_cursor() as cur:
        cur.execute(
            f"""
            UPDATE post_views SET duration = %s
            WHERE id = (
              SELECT id FROM post_views WHERE post_id = %s AND {clause}
              ORDER BY viewed_at DESC LIMIT 1
            )
            {_RETURNING}
            """,
            (duration, post_id, ident),
        )
        return fetch_one(cur, VIEW_COLS)


def count_views(post_id: str) -> int:
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM post_views WHERE post_id = %s", (post_id,))
        return cur.fetchone()[0]


def count_unique_viewers(post_id: str) -> int:
    with db_cursor() as cur:
        cur.execute(
            """
            SELECT count(DISTINCT COALESCE(user_id::text, session_id))
            FROM post_views WHERE post_id = %s
            """,
            (post_id,),
        )
        return cur.fetchone()[0]


def list_views(post_id: str, limit: int, offset: int) -> tuple[list[dict], int]:
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM post_views WHERE post_id = %s", (post_id,))
        total = cur.fetchone()[0]
        cur.execute(
            _SELECT + " WHERE post_id = %s ORDER BY viewed_at DESC LIMIT %s OFFSET %s",
            (post_id, limit, offset),
        )
        return fetch_all(cur, VIEW_COLS), total


def list_user_views(user_id: str, limit: int, offset: int) -> tuple[list[dict], int]:
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM post_views WHERE user_id = %s", (user_id,))
        total = cur.fetchone()[0]
        cur.execute(
            _SELECT + " WHERE user_id = %s ORDER BY viewed_at DESC LIMIT %s OFFSET %s",
            (user_id, limit, offset),
        )
        return fetch_all(cur, VIEW_COLS), total
