from typing import Any

from psycopg2.extras import Json

from charity_api.utils.db import db_cursor, fetch_all, fetch_one

MEDIA_COLS = (
    "id",
    "user_id",
    "original_name",
    "filename",
    "mimetype",
    "size",
    "type",
    "provider",
    "url",
    "cloud_path",
    "status",
    "thumbnail_url",
    "metadata",
    "tags",
    "is_public",
    "description",
    "alt_text",
    "download_count",
    "view_count",
    "uploaded_at",
    "processed_at",
    "deleted_at",
    "created_at",
    "updated_at",
)
_SELECT = "SELECT " + ", ".join(MEDIA_COLS) + " FROM media"
_RETURNING = "RETURNING " + ", ".join(MEDIA_COLS)

UPDATABLE = {
    "url",
    "status",
    "metadata",
    "tags",
    "is_public",
    "description",
    "alt_text",
    "uploaded_at",
    "processed_at",
}


def create_media(
    *,
    user_id: str,
    original_name: str,
    filename: str,
    mimetype: str,
    size: int,
    type: str,
    provider: str,
    cloud_path: str,
    tags: list[str] | None = None,
    is_public: bool = False,
    description: str | None = None,
    alt_text: str | None = None,
) -> dict[str, Any]:
    sql = f"""
    INSERT INTO media (user_id, original_name, filename, mimetype, size, type, provider,
                       cloud_path, tags, is_public, description, alt_text)
    VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
    {_RETURNING}
    """
    with db_cursor() as cur:
        cur.execute(
            sql,
            (
                user_id,
                original_name,
                filename,
                mimetype,
                size,
                type,
                provider,
                cloud_path,
                tags or [],
                is_public,
                description,
                alt_text,
            ),
        )
        return fetch_one(cur, MEDIA_COLS)


def get_media(media_id: str) -> dict[str, Any] | None:
    """Media row unless it was deleted."""
    with db_cursor() as cur:
        cur.execute(_SELECT + " WHERE id = %s AND status <> 'deleted'", (media_id,))
        return fetch_one(cur, MEDIA_COLS)


def update_media(media_id: str, **fields) -> dict[str, Any] | None:
    sets, params = [], []
    for k, v in fields.items():
        if k in UPDATABLE:
            sets.append(f"{k} = %s")
            params.append(Json(v) if k == "metadata" else v)
    if not sets:
        return get_media(media_id)
    sets.append("updated_at = now()")
    params.append(media_id)
    with db_cursor() as cur:
        cur.execute(
            f"UPDATE media SET {', '.join(sets)} WHERE id = %s {_RETURNING}", params
        )
        return fetch_one(cur, MEDIA_COLS)


def mark_deleted(media_id: str) -> bool:
    with db_cursor() as cur:
        cur.execute(
            """
            UPDATE media SET status = 'deleted', deleted_at = now(), updated_at = now()
            WHERE id = %s AND status <> 'deleted'
            """,
            (media_id,),
        )
        return cur.rowcount > 0


def increment_counter(media_id: str, column: str) -> None:
    if column not in ("view_count", "download_count"):
        raise ValueError(f"not a media counter: {column}")
    with db_cursor() as cur:
        cur.execute(
            f"UPDATE media SET {column} = {column} + 1 WHERE id = %s", (media_id,)
        )


def list_media(
    viewer_id: str, filters: dict[str, Any], limit: int, offset: int
) -> tuple[list[dict], int]:
    """The viewer's own files plus everything public."""
    where = ["status <> 'deleted'", "(user_id = %s OR is_public)"]
    params: list[Any] = [viewer_id]
    for key in ("type", "provider", "status", "is_public", "user_id"):
        if filters.get(key) is not None:
            where.append(f"{key} = %s")
            params.append(filters[key])
    if filters.get("tags"):
        where.append("tags && %s")
        params.append(list(filters["tags"]))
    clause = " WHERE " + " AND ".join(where)
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM media" + clause, params)
        total = cur.fetchone()[0]
        cur.execute(
            _SELECT + clause + " ORDER BY created_at DESC LIMIT %s OFFSET %s",
            params + [limit, offset],
        )
        return fetch_all(cur, MEDIA_COLS), total
