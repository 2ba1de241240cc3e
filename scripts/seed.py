#!/usr/bin/env python3
"""
Seed database with test data.

Usage: python scripts/seed.py [--force]
Requires: migrations applied (alembic upgrade head)
"""
import os
import sys

# Ensure charity_api is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import bcrypt
from psycopg2.extras import Json

from charity_api.utils.db import get_db_connection

DEMO_EMAILS = ("demo@example.com", "admin@example.com")


def _hash(pw: str) -> str:
    return bcrypt.hashpw(pw.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def _milestone(title: str, budget: int, days: int, status: str = "pending") -> dict:
    return {
        "title": title,
        "description": "",
        "budget": budget,
        "duration_days": days,
        "status": status,
        "due_date": None,
        "started_at": None,
        "completed_at": None,
        "verified_at": None,
        "disbursed_amount": 0,
        "actual_spending": 0,
        "progress_percentage": 0,
        "progress_updates_count": 0,
        "documents": [],
    }


def seed():
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("SELECT COUNT(*) FROM users WHERE email = 'demo@example.com'")
        if cur.fetchone()[0] > 0:
            print("Already seeded (demo@example.com exists). Use --force to re-seed.")
            return

        # 1. Demo creator + admin reviewer
        cur.execute(
            """
            INSERT INTO users (email, password_hash, name, reputation, total_campaigns_created)
            VALUES ('demo@example.com', %s, 'Demo User', 70, 3)
            RETURNING id
            """,
            (_hash("demo123456"),),
        )
        user_id = cur.fetchone()[0]
        cur.execute(
            """
            INSERT INTO users (email, password_hash, name, role, reputation)
            VALUES ('admin@example.com', %s, 'Admin User', 'admin', 100)
            RETURNING id
            """,
            (_hash("admin123456"),),
        )
        admin_id = cur.fetchone()[0]

        # 2. Campaigns: one awaiting review, one fundraising, one in implementation
        campaigns = [
            (
                "Help Build the School",
                "normal",
                "pending_review",
                10_000_000,
                "education",
                [_milestone("Foundation", 4_000_000, 30), _milestone("Walls and roof", 6_000_000, 60)],
            ),
            (
                "Community Garden",
                "normal",
                "fundraising",
                5_000_000,
                "environment",
                [_milestone("Land preparation", 5_000_000, 45)],
            ),
            (
                "Emergency Flood Relief",
                "emergency",
                "implementation",
                25_000_000,
                "disaster_relief",
                [_milestone("Full disbursement", 25_000_000, 30, status="active")],
            ),
        ]
        ids = []
        for title, ctype, status, target, category, milestones in campaigns:
            cur.execute(
                """
                INSERT INTO campaigns (title, description, type, status, creator_id, creator_name,
                                       target_amount, category, milestones, start_date, end_date,
                                       approved_at)
                VALUES (%s, %s, %s, %s, %s, 'Demo User', %s, %s, %s, now(), now() + interval '90 days',
                        CASE WHEN %s = 'pending_review' THEN NULL ELSE now() END)
                RETURNING id
                """,
                (title, f"{title}: seeded campaign", ctype, status, user_id, target, category,
                 Json(milestones), status),
            )
            ids.append(cur.fetchone()[0])

        # 3. Donations on the fundraising campaign
        cur.execute(
            """
            INSERT INTO donations (campaign_id, campaign_title, donor_id, donor_name, donor_email,
                                   amount, net_amount, payment_method, status, is_anonymous)
            VALUES
                (%s, 'Community Garden', %s, 'Admin User', 'admin@example.com', 250000, 250000,
                 'credit_card', 'completed', false),
                (%s, 'Community Garden', NULL, NULL, 'donor2@example.com', 500000, 500000,
                 'bank_transfer', 'completed', true)
            """,
            (ids[1], admin_id, ids[1]),
        )
        cur.execute(
            "UPDATE campaigns SET current_amount = 750000, donor_count = 2 WHERE id = %s",
            (ids[1],),
        )

        # 4. A post about the relief campaign
        cur.execute(
            """
            INSERT INTO posts (creator_id, creator, campaign_id, type, content, hashtags)
            VALUES (%s, %s, %s, 'text', %s, '{relief,flood}')
            """,
            (
                user_id,
                Json({"name": "Demo User", "email": "demo@example.com", "avatar": None, "reputation": 70}),
                ids[2],
                Json({"text": "Supplies are on their way. Thank you all!"}),
            ),
        )

        conn.commit()
        print("Seeded successfully.")
        print("  Demo user:  demo@example.com / demo123456")
        print("  Admin user: admin@example.com / admin123456")
        print("  Campaigns: 3 (pending_review, fundraising, implementation)")
        print("  Donations: 2 on the fundraising campaign")


def force_seed():
    """Clear test data and re-seed. Use with caution."""
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            "SELECT id FROM users WHERE email = ANY(%s)", (list(DEMO_EMAILS),)
        )
        user_ids = [r[0] for r in cur.fetchall()]
        if user_ids:
            cur.execute(
                "DELETE FROM donations WHERE campaign_id IN "
                "(SELECT id FROM campaigns WHERE creator_id = ANY(%s::uuid[]))",
                (user_ids,),
            )
            cur.execute("DELETE FROM posts WHERE creator_id = ANY(%s::uuid[])", (user_ids,))
            cur.execute(
                "DELETE FROM progress_updates WHERE campaign_id IN "
                "(SELECT id FROM campaigns WHERE creator_id = ANY(%s::uuid[]))",
                (user_ids,),
            )
            cur.execute("DELETE FROM campaigns WHERE creator_id = ANY(%s::uuid[])", (user_ids,))
            cur.execute("DELETE FROM users WHERE id = ANY(%s::uuid[])", (user_ids,))
        conn.commit()
    print("Cleared test data. Seeding...")
    seed()


if __name__ == "__main__":
    if "--force" in sys.argv:
        force_seed()
    else:
        seed()
