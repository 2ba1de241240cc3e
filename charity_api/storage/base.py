"""Blob storage contract shared by every provider."""

import re
import unicodedata
import uuid
from datetime import datetime, timezone

_unsafe_re = re.compile(r"[^a-z0-9]+")


class StorageError(Exception):
    pass


class Storage:
    provider = ""

    def upload(
        self,
        data: bytes,
        path: str,
        content_type: str,
        is_public: bool = True,
        metadata: dict | None = None,
    ) -> dict:
        """Store `data` at `path`; returns {url, path, size}."""
        raise NotImplementedError

    def delete(self, path: str) -> bool:
        raise NotImplementedError

    def signed_url(self, path: str, expires_in: int = 3600) -> str:
        raise NotImplementedError


def safe_name(name: str) -> str:
    """Lowercase ASCII slug of a filename stem, diacritics stripped."""
    folded = unicodedata.normalize("NFKD", name)
    folded = "".join(c for c in folded if not unicodedata.combining(c))
    folded = folded.replace("đ", "d").replace("Đ", "D")
    base = _unsafe_re.sub("-", folded.strip().lower()).strip("-")
    return base[:80] or "file"


def build_path(provider: str, media_type: str, filename: str, now: datetime | None = None) -> str:
    """media/{provider}/{type}s/{YYYY}/{MM}/{DD}/{hex}_{name}.{ext}"""
    now = now or datetime.now(timezone.utc)
    stem, ext = filename, ""
    if "." in filename:
        stem, ext = filename.rsplit(".", 1)
        ext = "." + ext.lower()
    return (
        f"media/{provider}/{media_type}s/{now:%Y}/{now:%m}/{now:%d}/"
        f"{uuid.uuid4().hex}_{safe_name(stem)}{ext}"
    )
