from __future__ import annotations

from typing import Any

from psycopg2.extras import Json

from charity_api.utils.db import db_cursor, fetch_all, fetch_one

CAMPAIGN_COLS = (
    "id",
    "title",
    "description",
    "type",
    "funding_type",
    "status",
    "creator_id",
    "creator_name",
    "target_amount",
    "current_amount",
    "donor_count",
    "review_fee",
    "category",
    "tags",
    "milestones",
    "review",
    "start_date",
    "end_date",
    "approved_at",
    "completed_at",
    "rejection_reason",
    "cover_image",
    "gallery",
    "is_featured",
    "view_count",
    "share_count",
    "followers_count",
    "created_at",
    "updated_at",
)
_SELECT = "SELECT " + ", ".join(CAMPAIGN_COLS) + " FROM campaigns"
_RETURNING = "RETURNING " + ", ".join(CAMPAIGN_COLS)

_JSON_COLS = {"milestones", "review"}
WRITABLE = {
    "title",
    "description",
    "type",
    "funding_type",
    "status",
    "creator_id",
    "creator_name",
    "target_amount",
    "review_fee",
    "category",
    "tags",
    "milestones",
    "review",
    "start_date",
    "end_date",
    "approved_at",
    "completed_at",
    "rejection_reason",
    "cover_image",
    "gallery",
    "is_featured",
}

# API sort key -> column
SORT_COLUMNS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
    "targetAmount": "target_amount",
    "currentAmount": "current_amount",
    "reviewFee": "review_fee",
    "viewCount": "view_count",
    "followersCount": "followers_count",
    "startDate": "start_date",
    "endDate": "end_date",
}


def _param(col: str, value):
    return Json(value) if col in _JSON_COLS and value is not None else value


def get_campaign(campaign_id: str) -> dict[str, Any] | None:
    with db_cursor() as cur:
        cur.execute(_SELECT + " WHERE id = %s", (campaign_id,))
        return fetch_one(cur, CAMPAIGN_COLS)


def get_campaign_for_update(cur, campaign_id: str) -> dict[str, Any] | None:
    cur.execute(_SELECT + " WHERE id = %s FOR UPDATE", (campaign_id,))
    return fetch_one(cur, CAMPAIGN_COLS)


def get_campaign_and_count_view(campaign_id: str) -> dict[str, Any] | None:
    with db_cursor() as cur:
        cur.execute(
            f"UPDATE campaigns SET view_count = view_count + 1 WHERE id = %s {_RETURNING}",
            (campaign_id,),
        )
        return fetch_one(cur, CAMPAIGN_COLS)


def insert_campaign(cur, data: dict[str, Any]) -> dict[str, Any]:
    cols = [c for c in sorted(WRITABLE) if c in data]
    sql = f"""
    INSERT INTO campaigns ({", ".join(cols)})
    VALUES ({", ".join(["%s"] * len(cols))})
    {_RETURNING}
    """
    cur.execute(sql, [_param(c, data[c]) for c in cols])
    return fetch_one(cur, CAMPAIGN_COLS)


def update_campaign(cur, campaign_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
    sets, params = [], []
    for k, v in fields.items():
        if k in WRITABLE:
            sets.append(f"{k} = %s")
            params.append(_param(k, v))
    if not sets:
        cur.execute(_SELECT + " WHERE id = %s", (campaign_id,))
        return fetch_one(cur, CAMPAIGN_COLS)
    sets.append("updated_at = now()")
    params.append(campaign_id)
    cur.execute(
        f"UPDATE campaigns SET {', '.join(sets)} WHERE id = %s {_RETURNING}", params
    )
    return fetch_one(cur, CAMPAIGN_COLS)


def delete_campaign(cur, campaign_id: str) -> bool:
    cur.execute("DELETE FROM campaigns WHERE id = %s", (campaign_id,))
    return cur.rowcount > 0


def count_creator_campaigns(cur, creator_id: str, statuses) -> int:
    cur.execute(
        "SELECT count(*) FROM campaigns WHERE creator_id = %s AND status = ANY(%s)",
        (creator_id, list(statuses)),
    )
    return cur.fetchone()[0]


def adjust_followers(cur, campaign_id: str, delta: int) -> None:
    cur.execute(
        """
        UPDATE campaigns
        SET followers_count = GREATEST(followers_count + %s, 0)
        WHERE id = %s
        """,
        (delta, campaign_id),
    )


def set_creator_name(cur, creator_id: str, name: str) -> None:
    cur.execute(
        "UPDATE campaigns SET creator_name = %s WHERE creator_id = %s",
        (name, creator_id),
    )


def list_campaigns(
    filters: dict[str, Any],
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[dict], int]:
    where, params = [], []
    if filters.get("search"):
        where.append("(title ILIKE %s OR description ILIKE %s OR creator_name ILIKE %s)")
        params += [f"%{filters['search']}%"] * 3
    for key in ("type", "funding_type", "status", "category", "creator_id", "is_featured"):
        if filters.get(key) is not None:
            where.append(f"{key} = %s")
            params.append(filters[key])
    if filters.get("min_target_amount") is not None:
        where.append("target_amount >= %s")
        params.append(filters["min_target_amount"])
    if filters.get("max_target_amount") is not None:
        where.append("target_amount <= %s")
        params.append(filters["max_target_amount"])
    if filters.get("start_date_from") is not None:
        where.append("start_date >= %s")
        params.append(filters["start_date_from"])
    if filters.get("start_date_to") is not None:
        where.append("start_date <= %s")
        params.append(filters["start_date_to"])
    if filters.get("tag"):
        where.append("%s = ANY(tags)")
        params.append(filters["tag"])
    if filters.get("pending_review"):
        where.append("status = 'pending_review'")
    if filters.get("followed_by"):
        where.append(
            "id IN (SELECT campaign_id FROM campaign_follows"
            " WHERE user_id = %s AND is_following)"
        )
        params.append(filters["followed_by"])

    clause = (" WHERE " + " AND ".join(where)) if where else ""
    column = SORT_COLUMNS.get(sort_by, "created_at")
    direction = "ASC" if sort_order == "asc" else "DESC"
    with db_cursor() as cur:
        cur.execute("SELECT count(*) FROM campaigns" + clause, params)
        total = cur.fetchone()[0]
        cur.execute(
            f"{_SELECT}{clause} ORDER BY {column} {direction}, id LIMIT %s OFFSET %s",
            params + [limit, offset],
        )
        return fetch_all(cur, CAMPAIGN_COLS), total


def list_for_review(limit: int = 20) -> list[dict]:
    with db_cursor() as cur:
        cur.execute(
            _SELECT
            + " WHERE status = 'pending_review'"
            " ORDER BY review_fee DESC, created_at ASC LIMIT %s",
            (limit,),
        )
        return fetch_all(cur, CAMPAIGN_COLS)


def list_by_creator(creator_id: str) -> list[dict]:
    with db_cursor() as cur:
        cur.execute(
            _SELECT + " WHERE creator_id = %s ORDER BY created_at DESC", (creator_id,)
        )
        return fetch_all(cur, CAMPAIGN_COLS)


def campaign_stats() -> dict[str, int]:
    sql = """
    SELECT
      count(*),
      count(*) FILTER (WHERE status IN ('fundraising','implementation','active')),
      count(*) FILTER (WHERE status = 'completed'),
      COALESCE(sum(current_amount), 0),
      count(*) FILTER (WHERE status = 'pending_review')
    FROM campaigns
    """
    with db_cursor() as cur:
        cur.execute(sql)
        row = cur.fetchone()
    cols = (
        "total_campaigns",
        "active_campaigns",
        "completed_campaigns",
        "total_funds_raised",
        "pending_review",
    )
    return {c: int(v) for c, v in zip(cols, row)}
