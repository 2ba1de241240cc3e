from __future__ import annotations

from typing import Any

from charity_api.utils.db import db_cursor, fetch_all, fetch_one

COMMENT_COLS = (
    "id",
    "post_id",
    "user_id",
    "parent_comment_id",
    "content",
    "mentions",
    "likes_count",
    "replies_count",
    "is_edited",
    "edited_at",
    "is_deleted",
    "deleted_at",
    "created_at",
    "updated_at",
)
_COLS_SQL = ", ".join("c." + col for col in COMMENT_COLS)
# comment joined with its author
_SELECT = (
    f"SELECT {_COLS_SQL}, u.name, u.avatar"
    " FROM post_comments c JOIN users u ON u.id = c.user_id"
)
_VIEW_COLS = COMMENT_COLS + ("user_name", "user_avatar")
_RETURNING = "RETURNING " + ", ".join(COMMENT_COLS)


def insert_comment(cur, data: dict[str, Any]) -> dict[str, Any]:
    cur.execute(
        f"""
        INSERT INTO post_comments (post_id, user_id, parent_comment_id, content, mentions)
        VALUES (%s, %s, %s, %s, %s)
        {_RETURNING}
        """,
        (
            data["post_id"],
            data["user_id"],
            data.get("parent_comment_id"),
            data["content"],
            data.get("mentions") or [],
        ),
    )
    return fetch_one(cur, COMMENT_COLS)


def get_comment(comment_id: str) -> dict[str, Any] | None:
    """Live (not soft-deleted) comment with author name/avatar."""
    with db_cursor() as cur:
        cur.execute(_SELECT + " WHERE c.id = %s AND NOT c.is_deleted", (comment_id,))
        return fetch_one(cur, _VIEW_COLS)


def get_comment_for_update(cur, comment_id: str) -> dict[str, Any] | None:
    cur.execute(
        "SELECT " + ", ".join(COMMENT_COLS) + " FROM post_comments"
        " WHERE id = %s AND NOT is_deleted FOR UPDATE",
        (comment_id,),
    )
    return fetch_one(cur, COMMENT_COLS)


def update_comment(
    comment_id: str, content: str, mentions: list[str] | None = None
) -> dict[str, Any] | None:
    sets = ["content = %s", "is_edited = true", "edited_at = now()", "updated_at = now()"]
    params: list[Any] = [content]
    if mentions is not None:
        sets.append("mentions = %s")
        params.append(mentions)
    params.append(comment_id)
    with db_cursor() as cur:
        cur.execute(
            f"UPDATE post_comments SET {', '.join(sets)}"
            f" WHERE id = %s AND NOT is_deleted {_RETURNING}",
            params,
        )
        return fetch_one(cur, COMMENT_COLS)


def soft_delete_comment(cur, comment_id: str) -> bool:
    cur.execute(
        """
        UPDATE post_comments SET is_deleted = true, deleted_at = now(), updated_at = now()
        WHERE id = %s AND NOT is_deleted
        """,
        (comment_id,),
    )
    return cur.rowcount > 0


def adjust_replies(cur, comment_id: str, delta: int) -> None:
    cur.execute(
        """
        UPDATE post_comments SET replies_count = GREATEST(replies_count + %s, 0)
        WHERE id = %s
        """,
        (delta, comment_id),
    )


def _page(where: str, params: list, limit: int, offset: int, order: str = "DESC"):
    with db_cursor() as cur:
        cur.execute(
            "SELECT count(*) FROM post_comments c WHERE " + where, params
        )
        total = cur.fetchone()[0]
        cur.execute(
            f"{_SELECT} WHERE {where} ORDER BY c.created_at {order} LIMIT %s OFFSET %s",
            params + [limit, offset],
        )
        return fetch_all(cur, _VIEW_COLS), total


def list_comments(
    post_id: str, include_replies: bool, limit: int, offset: int
) -> tuple[list[dict], int]:
    where = "c.post_id = %s AND NOT c.is_deleted"
    if not include_replies:
        where += " AND c.parent_comment_id IS NULL"
    return _page(where, [post_id], limit, offset)


def list_replies(comment_id: str, limit: int, offset: int) -> tuple[list[dict], int]:
    return _page(
        "c.parent_comment_id = %s AND NOT c.is_deleted",
        [comment_id],
        limit,
        offset,
        order="ASC",
    )


def list_user_comments(user_id: str, limit: int, offset: int) -> tuple[list[dict], int]:
    return _page("c.user_id = %s AND NOT c.is_deleted", [user_id], limit, offset)


def count_comments(post_id: str) -> int:
    with db_cursor() as cur:
        cur.execute(
            "SELECT count(*) FROM post_comments WHERE post_id = %s AND NOT is_deleted",
            (post_id,),
        )
        return cur.fetchone()[0]


# a user's comments plus every reply beneath them, all removed by the cascade
_CASCADED = """
    WITH RECURSIVE doomed AS (
        SELECT id, post_id, parent_comment_id, is_deleted
        FROM post_comments WHERE user_id = %s
        UNION
        SELECT c.id, c.post_id, c.parent_comment_id, c.is_deleted
        FROM post_comments c JOIN doomed d ON c.parent_comment_id = d.id
    )
"""


def count_cascaded_by_post(cur, user_id: str) -> list[dict]:
    cur.execute(
        _CASCADED
        + "SELECT post_id, count(*) FROM doomed WHERE NOT is_deleted GROUP BY post_id",
        (user_id,),
    )
    return fetch_all(cur, ("post_id", "count"))


def count_cascaded_by_surviving_parent(cur, user_id: str) -> list[dict]:
    cur.execute(
        _CASCADED
        + """
        SELECT parent_comment_id, count(*) FROM doomed
        WHERE NOT is_deleted AND parent_comment_id IS NOT NULL
          AND parent_comment_id NOT IN (SELECT id FROM doomed)
        GROUP BY parent_comment_id
        """,
        (user_id,),
    )
    return fetch_all(cur, ("comment_id", "count"))
