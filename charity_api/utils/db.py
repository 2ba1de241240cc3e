import os
from contextlib import contextmanager

import psycopg2
from dotenv import load_dotenv

load_dotenv()


def get_db_connection():
    """
    Connect to PostgreSQL. Uses DATABASE_URL if set (e.g. for AWS RDS);
    otherwise falls back to DB_HOST, DB_NAME, DB_USER, DB_PASSWORD, DB_PORT.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return psycopg2.connect(url)
    return psycopg2.connect(
        host=os.getenv("DB_HOST", "127.0.0.1"),
        database=os.getenv("DB_NAME", "charity_dev"),
        user=os.getenv("DB_USER", "dev"),
        password=os.getenv("DB_PASSWORD", "dev"),
        port=os.getenv("DB_PORT", "65432"),
    )


@contextmanager
def db_cursor():
    """
    One transaction: commits when the block exits cleanly, rolls back on any
    exception, always closes the connection.
    """
    conn = get_db_connection()
    try:
        with conn, conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def fetch_one(cur, cols) -> dict | None:
    row = cur.fetchone()
    return dict(zip(cols, row)) if row else None


def fetch_all(cur, cols) -> list[dict]:
    return [dict(zip(cols, row)) for row in cur.fetchall()]
