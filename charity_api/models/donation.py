from typing import Any

from charity_api.utils.db import db_cursor, fetch_all

DONATION_COLS = (
    "id",
    "campaign_id",
    "campaign_title",
    "donor_id",
    "donor_name",
    "amount",
    "net_amount",
    "payment_method",
    "status",
    "message",
    "is_anonymous",
    "processed_at",
    "created_at",
)


def count_campaign_donations(cur, campaign_id: str) -> int:
    """Donation records of any status referencing the campaign."""
    cur.execute("SELECT count(*) FROM donations WHERE campaign_id = %s", (campaign_id,))
    return cur.fetchone()[0]


def recent_completed_for_campaign(campaign_id: str, limit: int = 10) -> list[dict[str, Any]]:
    sql = (
        "SELECT "
        + ", ".join(DONATION_COLS)
        + """
        FROM donations
        WHERE campaign_id = %s AND status = 'completed'
        ORDER BY processed_at DESC NULLS LAST, created_at DESC
        LIMIT %s
        """
    )
    with db_cursor() as cur:
        cur.execute(sql, (campaign_id, limit))
        rows = fetch_all(cur, DONATION_COLS)
    for row in rows:
        if row["is_anonymous"]:
            row["donor_id"] = None
            row["donor_name"] = None
    return rows
