"""
Application settings, read from the environment once at app creation.

`.env` is loaded by the package on import; every key below can be overridden
there or in the process environment.
"""

import os
from datetime import timedelta

MB = 1024 * 1024


def _bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_config() -> dict:
    return {
        "API_PREFIX": os.getenv("API_PREFIX", "api").strip("/"),
        "PORT": int(os.getenv("PORT", 5050)),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
        "URL_CLIENT": os.getenv("URL_CLIENT", "http://localhost:3000"),
        # JWT
        "JWT_SECRET_KEY": os.getenv("JWT_SECRET", "dev-secret"),
        "JWT_TOKEN_LOCATION": ["headers", "cookies"],
        "JWT_HEADER_NAME": "Authorization",
        "JWT_HEADER_TYPE": "Bearer",
        "JWT_ACCESS_COOKIE_NAME": "accessToken",
        "JWT_COOKIE_CSRF_PROTECT": False,
        "JWT_COOKIE_SECURE": _bool("JWT_COOKIE_SECURE"),
        "JWT_ACCESS_TOKEN_EXPIRES": timedelta(
            minutes=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_MINUTES", 15))
        ),
        "REFRESH_TOKEN_EXPIRES": timedelta(
            days=int(os.getenv("REFRESH_TOKEN_EXPIRES_DAYS", 30))
        ),
        # OAuth
        "GOOGLE_CLIENT_ID": os.getenv("GOOGLE_CLIENT_ID"),
        "FACEBOOK_CLIENT_ID": os.getenv("FACEBOOK_CLIENT_ID"),
        "FACEBOOK_CLIENT_SECRET": os.getenv("FACEBOOK_CLIENT_SECRET"),
        # Media storage
        "DEFAULT_STORAGE_PROVIDER": os.getenv("DEFAULT_STORAGE_PROVIDER", "s3"),
        "MAX_IMAGE_SIZE": int(os.getenv("MAX_IMAGE_SIZE", 10 * MB)),
        "MAX_VIDEO_SIZE": int(os.getenv("MAX_VIDEO_SIZE", 50 * MB)),
        "MAX_AUDIO_SIZE": int(os.getenv("MAX_AUDIO_SIZE", 20 * MB)),
        "MAX_DOCUMENT_SIZE": int(os.getenv("MAX_DOCUMENT_SIZE", 10 * MB)),
        "MAX_CONTENT_LENGTH": int(os.getenv("MAX_VIDEO_SIZE", 50 * MB)) + MB,
        # Cache / limits
        "STATS_CACHE_TTL": int(os.getenv("STATS_CACHE_TTL", 60)),
        "RATE_LIMIT_ENABLED": _bool("RATE_LIMIT_ENABLED", "1"),
        "RATE_LIMIT_AUTH_PER_MINUTE": int(os.getenv("RATE_LIMIT_AUTH_PER_MINUTE", 10)),
    }
