from __future__ import annotations

from typing import Any

from psycopg2.extras import Json

from charity_api.utils.db import db_cursor, fetch_all, fetch_one

PROGRESS_COLS = (
    "id",
    "campaign_id",
    "campaign_title",
    "milestone_index",
    "milestone_title",
    "updated_by",
    "updated_by_name",
    "description",
    "progress_percentage",
    "images",
    "metadata",
    "is_visible",
    "created_at",
    "updated_at",
)
_SELECT = "SELECT " + ", ".join(PROGRESS_COLS) + " FROM progress_updates"
_RETURNING = "RETURNING " + ", ".join(PROGRESS_COLS)

SORT_COLUMNS = {
    "createdAt": "created_at",
    "progressPercentage": "progress_percentage",
    "milestoneIndex": "milestone_index",
}


def insert_progress(cur, data: dict[str, Any]) -> dict[str, Any]:
    cur.execute(
        f"""
        INSERT INTO progress_updates (
          campaign_id, campaign_title, milestone_index, milestone_title,
          updated_by, updated_by_name, description, progress_percentage,
          images, metadata, is_visible
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        {_RETURNING}
        """,
        (
            data["campaign_id"],
            data["campaign_title"],
            data["milestone_index"],
            data["milestone_title"],
            data["updated_by"],
            data["updated_by_name"],
            data["description"],
            data["progress_percentage"],
            data.get("images") or [],
            Json(data.get("metadata") or {}),
            data.get("is_visible", True),
        ),
    )
    return fetch_one(cur, PROGRESS_COLS)


def get_progress(progress_id: str) -> dict[str, Any] | None:
    with db_cursor() as cur:
        cur.execute(_SELECT + " WHERE id = %s", (progress_id,))
        return fetch_one(cur, PROGRESS_COLS)


def delete_progress(progress_id: str) -> bool:
    with db_cursor() as cur:
        cur.execute("DELETE FROM progress_updates WHERE id = %s", (progress_id,))
        return cur.rowcount > 0


def list_progress(
    filters: dict[str, Any],
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[dict], int]:
    where, params = [], []
    for key in ("campaign_id", "milestone_index", "updated_by", "is_visible"):
        if filters.get(key) is not None:
            where.append(f"{key} = %s")
            params.append(filters[key])
    clause = (" WHERE " + " AND ".join(where)) if where else ""
    column = SORT_COLUMNS.get(sort_by, "created_at")
    direction = "ASC" if sort_order == "asc" else "DESC"
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM progress_updates" + clause, params)
        total = cur.fetchone()[0]
        cur.execute(
            f"{_SELECT}{clause} ORDER BY {column} {direction}, id LIMIT %s OFFSET %s",
            params + [limit, offset],
        )
        return fetch_all(cur, PROGRESS_COLS), total


def list_for_milestone(
    campaign_id: str,
    milestone_index: int | None = None,
    ascending: bool = False,
    limit: int | None = None,
) -> list[dict]:
    sql = _SELECT + " WHERE campaign_id = %s"
    params: list[Any] = [campaign_id]
    if milestone_index is not None:
        sql += " AND milestone_index = %s"
        params.append(milestone_index)
    sql += " ORDER BY created_at " + ("ASC" if ascending else "DESC")
    if limit:
        sql += " LIMIT %s"
        params.append(limit)
    with db_cursor() as cur:
        cur.execute(sql, params)
        return fetch_all(cur, PROGRESS_COLS)


def set_campaign_title(cur, campaign_id: str, title: str) -> None:
    cur.execute(
        "UPDATE progress_updates SET campaign_title = %s WHERE campaign_id = %s",
        (title, campaign_id),
    )


def set_updater_name(cur, user_id: str, name: str) -> None:
    cur.execute(
        "UPDATE progress_updates SET updated_by_name = %s WHERE updated_by = %s",
        (name, user_id),
    )
