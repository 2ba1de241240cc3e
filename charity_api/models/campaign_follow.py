from __future__ import annotations

from typing import Any

from charity_api.utils.db import db_cursor, fetch_all, fetch_one

FOLLOW_COLS = (
    "id",
    "campaign_id",
    "user_id",
    "campaign_title",
    "user_name",
    "is_following",
    "followed_at",
    "unfollowed_at",
    "created_at",
    "updated_at",
)
_SELECT = "SELECT " + ", ".join(FOLLOW_COLS) + " FROM campaign_follows"
_RETURNING = "RETURNING " + ", ".join(FOLLOW_COLS)


def get_follow(campaign_id: str, user_id: str) -> dict[str, Any] | None:
    with db_cursor() as cur:
        cur.execute(
            _SELECT + " WHERE campaign_id = %s AND user_id = %s", (campaign_id, user_id)
        )
        return fetch_one(cur, FOLLOW_COLS)


def get_follow_for_update(cur, campaign_id: str, user_id: str) -> dict[str, Any] | None:
    cur.execute(
        _SELECT + " WHERE campaign_id = %s AND user_id = %s FOR UPDATE",
        (campaign_id, user_id),
    )
    return fetch_one(cur, FOLLOW_COLS)


def upsert_follow(
    cur, campaign_id: str, user_id: str, campaign_title: str, user_name: str
) -> dict[str, Any]:
    sql = f"""
    INSERT INTO campaign_follows (campaign_id, user_id, campaign_title, user_name)
    VALUES (%s, %s, %s, %s)
    ON CONFLICT (campaign_id, user_id) DO UPDATE
      SET is_following = true,
          followed_at = now(),
          unfollowed_at = NULL,
          campaign_title = EXCLUDED.campaign_title,
          user_name = EXCLUDED.user_name,
          updated_at = now()
    {_RETURNING}
    """
    cur.execute(sql, (campaign_id, user_id, campaign_title, user_name))
    return fetch_one(cur, FOLLOW_COLS)


def mark_unfollowed(cur, campaign_id: str, user_id: str) -> dict[str, Any] | None:
    cur.execute(
        f"""
        UPDATE campaign_follows
        SET is_following = false, unfollowed_at = now(), updated_at = now()
        WHERE campaign_id = %s AND user_id = %s AND is_following
        {_RETURNING}
        """,
        (campaign_id, user_id),
    )
    return fetch_one(cur, FOLLOW_COLS)


def list_followed(user_id: str, limit: int, offset: int) -> tuple[list[dict], int]:
    """Active follows of a user, each with a short summary of the campaign."""
    with db_cursor() as cur:
        cur.execute(
            "SELECT count(*) FROM campaign_follows WHERE user_id = %s AND is_following",
            (user_id,),
        )
        total = cur.fetchone()[0]
        cur.execute(
            """
            SELECT f.id, f.campaign_id, f.user_id, f.campaign_title, f.user_name,
                   f.is_following, f.followed_at, f.unfollowed_at, f.created_at, f.updated_at,
                   c.status, c.target_amount, c.current_amount, c.cover_image, c.creator_name
            FROM campaign_follows f
            JOIN campaigns c ON c.id = f.campaign_id
            WHERE f.user_id = %s AND f.is_following
            ORDER BY f.followed_at DESC
            LIMIT %s OFFSET %s
            """,
            (user_id, limit, offset),
        )
        items = []
        n = len(FOLLOW_COLS)
        for row in cur.fetchall():
            item = dict(zip(FOLLOW_COLS, row[:n]))
            item["campaign"] = dict(
                zip(
                    (
                        "status",
                        "target_amount",
                        "current_amount",
                        "cover_image",
                        "creator_name",
                    ),
                    row[n:],
                )
            )
            items.append(item)
        return items, total


def list_followers(campaign_id: str, limit: int, offset: int) -> tuple[list[dict], int]:
    with db_cursor() as cur:
        cur.execute(
            "SELECT count(*) FROM campaign_follows WHERE campaign_id = %s AND is_following",
            (campaign_id,),
        )
        total = cur.fetchone()[0]
        cur.execute(
            _SELECT
            + " WHERE campaign_id = %s AND is_following"
            " ORDER BY followed_at DESC LIMIT %s OFFSET %s",
            (campaign_id, limit, offset),
        )
        return fetch_all(cur, FOLLOW_COLS), total


def set_campaign_title(cur, campaign_id: str, title: str) -> None:
    cur.execute(
        "UPDATE campaign_follows SET campaign_title = %s WHERE campaign_id = %s",
        (title, campaign_id),
    )


def set_user_name(cur, user_id: str, name: str) -> None:
    cur.execute(
        "UPDATE campaign_follows SET user_name = %s WHERE user_id = %s", (name, user_id)
    )


def followed_campaign_ids(cur, user_id: str) -> list:
    cur.execute(
        "SELECT campaign_id FROM campaign_follows WHERE user_id = %s AND is_following",
        (user_id,),
    )
    return [row[0] for row in cur.fetchall()]
