from __future__ import annotations

from typing import Any

from charity_api.utils.db import db_cursor, fetch_all, fetch_one

LIKE_COLS = ("id", "post_id", "user_id", "liked_at")
_USER_COLS = ("user_name", "user_avatar")


def insert_like(cur, post_id: str, user_id: str) -> dict[str, Any] | None:
    """None when the user already likes the post."""
    cur.execute(
        """
        INSERT INTO post_likes (post_id, user_id) VALUES (%s, %s)
        ON CONFLICT (post_id, user_id) DO NOTHING
        RETURNING id, post_id, user_id, liked_at
        """,
        (post_id, user_id),
    )
    return fetch_one(cur, LIKE_COLS)


def delete_like(cur, post_id: str, user_id: str) -> bool:
    cur.execute(
        "DELETE FROM post_likes WHERE post_id = %s AND user_id = %s", (post_id, user_id)
    )
    return cur.rowcount > 0


def get_like(post_id: str, user_id: str) -> dict[str, Any] | None:
    with db_cursor() as cur:
        cur.execute(
            "SELECT id, post_id, user_id, liked_at FROM post_likes"
            " WHERE post_id = %s AND user_id = %s",
            (post_id, user_id),
        )
        return fetch_one(cur, LIKE_COLS)


def count_likes(post_id: str) -> int:
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM post_likes WHERE post_id = %s", (post_id,))
        return cur.fetchone()[0]


def list_likes(post_id: str, limit: int, offset: int) -> tuple[list[dict], int]:
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM post_likes WHERE post_id = %s", (post_id,))
        total = cur.fetchone()[0]
        cur.execute(
            """
            SELECT l.id, l.post_id, l.user_id, l.liked_at, u.name, u.avatar
            FROM post_likes l JOIN users u ON u.id = l.user_id
            WHERE l.post_id = %s
            ORDER BY l.liked_at DESC
            LIMIT %s OFFSET %s
            """,
            (post_id, limit, offset),
        )
        return fetch_all(cur, LIKE_COLS + _USER_COLS), total


def list_likers(post_id: str, limit: int) -> list[dict]:
    with db_cursor() as cur:
        cur.execute(
            """
            SELECT u.id, u.name, u.avatar, l.liked_at
            FROM post_likes l JOIN users u ON u.id = l.user_id
            WHERE l.post_id = %s
            ORDER BY l.liked_at DESC
            LIMIT %s
            """,
            (post_id, limit),
        )
        return fetch_all(cur, ("id", "name", "avatar", "liked_at"))


def list_user_likes(user_id: str, limit: int, offset: int) -> tuple[list[dict], int]:
    with db_cursor() as cur:
        cur.execute(
            """
            SELECT count(*) FROM post_likes l JOIN posts p ON p.id = l.post_id
            WHERE l.user_id = %s AND NOT p.is_deleted
            """,
            (user_id,),
        )
        total = cur.fetchone()[0]
        cur.execute(
            """
            SELECT l.id, l.post_id, l.user_id, l.liked_at, p.content->>'text', p.creator->>'name'
            FROM post_likes l JOIN posts p ON p.id = l.post_id
            WHERE l.user_id = %s AND NOT p.is_deleted
            ORDER BY l.liked_at DESC
            LIMIT %s OFFSET %s
            """,
            (user_id, limit, offset),
        )
        return fetch_all(cur, LIKE_COLS + ("post_text", "post_creator_name")), total


def count_user_likes_by_post(cur, user_id: str) -> list[dict]:
    cur.execute(
        "SELECT post_id, count(*) FROM post_likes WHERE user_id = %s GROUP BY post_id",
        (user_id,),
    )
    return fetch_all(cur, ("post_id", "count"))
