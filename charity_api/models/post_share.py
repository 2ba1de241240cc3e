from __future__ import annotations

from typing import Any

from charity_api.utils.db import db_cursor, fetch_all, fetch_one

SHARE_COLS = (
    "id",
    "post_id",
    "user_id",
    "share_type",
    "share_text",
    "visibility",
    "source",
    "shared_at",
)
_SELECT = "SELECT " + ", ".join(SHARE_COLS) + " FROM post_shares"


def insert_share(cur, data: dict[str, Any]) -> dict[str, Any] | None:
    """None when the user already shared the post."""
    cur.execute(
        f"""
        INSERT INTO post_shares (post_id, user_id, share_type, share_text, visibility, source)
        VALUES (%s, %s, %s, %s, %s, %s)
        ON CONFLICT (post_id, user_id) DO NOTHING
        RETURNING {", ".join(SHARE_COLS)}
        """,
        (
            data["post_id"],
            data["user_id"],
            data["share_type"],
            data.get("share_text"),
            data["visibility"],
            data["source"],
        ),
    )
    return fetch_one(cur, SHARE_COLS)


def delete_share(cur, post_id: str, user_id: str) -> bool:
    cur.execute(
        "DELETE FROM post_shares WHERE post_id = %s AND user_id = %s", (post_id, user_id)
    )
    return cur.rowcount > 0


def get_share(post_id: str, user_id: str) -> dict[str, Any] | None:
    with db_cursor() as cur:
        cur.execute(_SELECT + " WHERE post_id = %s AND user_id = %s", (post_id, user_id))
        return fetch_one(cur, SHARE_COLS)


def count_shares(post_id: str) -> int:
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM post_shares WHERE post_id = %s", (post_id,))
        return cur.fetchone()[0]


def list_shares(post_id: str, limit: int, offset: int) -> tuple[list[dict], int]:
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM post_shares WHERE post_id = %s", (post_id,))
        total = cur.fetchone()[0]
        cur.execute(
            f"""
            SELECT {", ".join("s." + c for c in SHARE_COLS)}, u.name, u.avatar
            FROM post_shares s JOIN users u ON u.id = s.user_id
            WHERE s.post_id = %s
            ORDER BY s.shared_at DESC
            LIMIT %s OFFSET %s
            """,
            (post_id, limit, offset),
        )
        return fetch_all(cur, SHARE_COLS + ("user_name", "user_avatar")), total


def list_user_shares(user_id: str, limit: int, offset: int) -> tuple[list[dict], int]:
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM post_shares WHERE user_id = %s", (user_id,))
        total = cur.fetchone()[0]
        cur.execute(
            _SELECT + " WHERE user_id = %s ORDER BY shared_at DESC LIMIT %s OFFSET %s",
            (user_id, limit, offset),
        )
        return fetch_all(cur, SHARE_COLS), total


def count_user_shares_by_post(cur, user_id: str) -> list[dict]:
    cur.execute(
        "SELECT post_id, count(*) FROM post_shares WHERE user_id = %s GROUP BY post_id",
        (user_id,),
    )
    return fetch_all(cur, ("post_id", "count"))
