import logging

import psycopg2
from flask import Blueprint, current_app

from charity_api.utils.db import db_cursor
from charity_api.utils.responses import respond

logger = logging.getLogger(__name__)

core_bp = Blueprint("core", __name__)


@core_bp.get("/")
def root():
    prefix = "/" + current_app.config["API_PREFIX"]
    return respond(
        {
            "service": "charity-api",
            "ok": True,
            "endpoints": {
                "auth": f"{prefix}/auth",
                "users": f"{prefix}/users",
                "campaigns": f"{prefix}/campaigns",
                "progress": f"{prefix}/progress",
                "posts": f"{prefix}/posts",
                "media": f"{prefix}/media",
            },
        }
    )


@core_bp.get("/health")
def health():
    try:
        with db_cursor() as cur:
            cur.execute("SELECT 1")
        database = "ok"
    except psycopg2.Error as e:
        logger.error("health check: database unreachable: %s", e)
        database = "unavailable"
    status = 200 if database == "ok" else 503
    return respond({"status": "ok" if status == 200 else "degraded", "database": database}, status)
