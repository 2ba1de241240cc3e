from __future__ import annotations

from typing import Any

from psycopg2.extras import Json

from charity_api.utils.db import db_cursor, fetch_all, fetch_one

POST_COLS = (
    "id",
    "creator_id",
    "creator",
    "campaign_id",
    "type",
    "content",
    "visibility",
    "hashtags",
    "mentions",
    "location",
    "likes_count",
    "comments_count",
    "shares_count",
    "views_count",
    "is_edited",
    "edited_at",
    "is_deleted",
    "deleted_at",
    "created_at",
    "updated_at",
)
_SELECT = "SELECT " + ", ".join(POST_COLS) + " FROM posts"
_RETURNING = "RETURNING " + ", ".join(POST_COLS)

_JSON_COLS = {"creator", "content", "location"}
WRITABLE = {
    "creator_id",
    "creator",
    "campaign_id",
    "type",
    "content",
    "visibility",
    "hashtags",
    "mentions",
    "location",
}
COUNTERS = {"likes_count", "comments_count", "shares_count", "views_count"}

SORT_COLUMNS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "likesCount": "likes_count",
    "commentsCount": "comments_count",
    "sharesCount": "shares_count",
    "viewsCount": "views_count",
}


def _param(col: str, value):
    return Json(value) if col in _JSON_COLS and value is not None else value


def insert_post(data: dict[str, Any]) -> dict[str, Any]:
    cols = [c for c in sorted(WRITABLE) if c in data]
    sql = f"""
    INSERT INTO posts ({", ".join(cols)})
    VALUES ({", ".join(["%s"] * len(cols))})
    {_RETURNING}
    """
    with db_cursor() as cur:
        cur.execute(sql, [_param(c, data[c]) for c in cols])
        return fetch_one(cur, POST_COLS)


def get_post(post_id: str) -> dict[str, Any] | None:
    """Live (not soft-deleted) post."""
    with db_cursor() as cur:
        cur.execute(_SELECT + " WHERE id = %s AND NOT is_deleted", (post_id,))
        return fetch_one(cur, POST_COLS)


def get_post_for_update(cur, post_id: str) -> dict[str, Any] | None:
    cur.execute(_SELECT + " WHERE id = %s AND NOT is_deleted FOR UPDATE", (post_id,))
    return fetch_one(cur, POST_COLS)


def update_post(post_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
    sets, params = [], []
    for k, v in fields.items():
        if k in WRITABLE:
            sets.append(f"{k} = %s")
            params.append(_param(k, v))
    sets += ["is_edited = true", "edited_at = now()", "updated_at = now()"]
    params.append(post_id)
    with db_cursor() as cur:
        cur.execute(
            f"UPDATE posts SET {', '.join(sets)} WHERE id = %s AND NOT is_deleted {_RETURNING}",
            params,
        )
        return fetch_one(cur, POST_COLS)


def soft_delete_post(post_id: str) -> bool:
    with db_cursor() as cur:
        cur.execute(
            """
            UPDATE posts SET is_deleted = true, deleted_at = now(), updated_at = now()
            WHERE id = %s AND NOT is_deleted
            """,
            (post_id,),
        )
        return cur.rowcount > 0


def adjust_counter(cur, post_id: str, column: str, delta: int) -> None:
    if column not in COUNTERS:
        raise ValueError(f"not a post counter: {column}")
    cur.execute(
        f"UPDATE posts SET {column} = GREATEST({column} + %s, 0) WHERE id = %s",
        (delta, post_id),
    )


def set_creator_profile(cur, creator_id: str, name: str, avatar: str | None) -> None:
    cur.execute(
        """
        UPDATE posts
        SET creator = creator || jsonb_build_object('name', %s::text, 'avatar', %s::text)
        WHERE creator_id = %s
        """,
        (name, avatar, creator_id),
    )


def list_posts(
    filters: dict[str, Any],
    viewer_id: str | None = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[dict], int]:
    # private posts are only listed for their creator
    where = ["NOT is_deleted", "(visibility <> 'private' OR creator_id = %s)"]
    params: list[Any] = [viewer_id]
    if filters.get("search"):
        where.append("content->>'text' ILIKE %s")
        params.append(f"%{filters['search']}%")
    for key in ("creator_id", "campaign_id", "type", "visibility"):
        if filters.get(key):
            where.append(f"{key} = %s")
            params.append(filters[key])
    if filters.get("hashtags"):
        where.append("hashtags && %s")
        params.append(list(filters["hashtags"]))
    if filters.get("start_date"):
        where.append("created_at >= %s")
        params.append(filters["start_date"])
    if filters.get("end_date"):
        where.append("created_at <= %s")
        params.append(filters["end_date"])
    if filters.get("has_campaign"):
        where.append("campaign_id IS NOT NULL")

    clause = " WHERE " + " AND ".join(where)
    column = SORT_COLUMNS.get(sort_by, "created_at")
    direction = "ASC" if sort_order == "asc" else "DESC"
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM posts" + clause, params)
        total = cur.fetchone()[0]
        cur.execute(
            f"{_SELECT}{clause} ORDER BY {column} {direction}, created_at DESC"
            " LIMIT %s OFFSET %s",
            params + [limit, offset],
        )
        return fetch_all(cur, POST_COLS), total
