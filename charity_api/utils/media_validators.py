"""
Media validation: allowed content types, file extensions and size per media type.
"""

import re
from typing import Tuple

ALLOWED_IMAGE_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
        "image/gif",
    }
)
ALLOWED_VIDEO_TYPES = frozenset(
    {
        "video/mp4",
        "video/webm",
        "video/ogg",
    }
)
ALLOWED_AUDIO_TYPES = frozenset(
    {
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/ogg",
    }
)
ALLOWED_DOCUMENT_TYPES = frozenset(
    {
        "application/pdf",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)

TYPE_TO_CONTENT_TYPES = {
    "image": ALLOWED_IMAGE_TYPES,
    "video": ALLOWED_VIDEO_TYPES,
    "audio": ALLOWED_AUDIO_TYPES,
    "document": ALLOWED_DOCUMENT_TYPES,
}

EXT_BY_TYPE = {
    "image": {".jpg", ".jpeg", ".png", ".webp", ".gif"},
    "video": {".mp4", ".webm", ".ogv", ".ogg"},
    "audio": {".mp3", ".wav", ".ogg", ".oga"},
    "document": {".pdf", ".txt", ".doc", ".docx"},
}

# Config key holding the max size (bytes) for each type
MAX_SIZE_CONFIG_KEY = {
    "image": "MAX_IMAGE_SIZE",
    "video": "MAX_VIDEO_SIZE",
    "audio": "MAX_AUDIO_SIZE",
    "document": "MAX_DOCUMENT_SIZE",
}

# Reject path separators and control characters; unicode names are allowed
_BAD_FILENAME_RE = re.compile(r"[\\/\x00-\x1f]")


def _base_type(content_type: str | None) -> str:
    return (content_type or "").strip().lower().split(";")[0].strip()


def validate_content_type(
    content_type: str | None, media_type: str
) -> Tuple[bool, str | None]:
    """
    Validate content_type for uploads. Returns (valid, error_message).
    """
    ct = _base_type(content_type)
    if not ct:
        return False, "content type required"
    allowed = TYPE_TO_CONTENT_TYPES.get(media_type)
    if allowed is None:
        return False, f"unknown media type '{media_type}'"
    if ct not in allowed:
        return (
            False,
            f"content type '{ct}' not allowed for type '{media_type}'. "
            f"Allowed: {', '.join(sorted(allowed))}",
        )
    return True, None


def validate_filename(filename: str | None, media_type: str) -> Tuple[bool, str | None]:
    """
    Validate filename extension and format. Returns (valid, error_message).
    """
    if not filename or not filename.strip():
        return False, "filename required"
    fn = filename.strip()
    if ".." in fn or _BAD_FILENAME_RE.search(fn) or len(fn) > 255:
        return False, "invalid filename"
    if "." not in fn:
        return False, "filename must have an extension"
    ext = "." + fn.rsplit(".", 1)[-1].lower()
    if ext not in EXT_BY_TYPE.get(media_type, set()):
        return False, f"extension {ext} not allowed for type '{media_type}'"
    return True, None


def validate_size(
    size_bytes: int | None, media_type: str, max_size: int
) -> Tuple[bool, str | None]:
    """
    Validate file size against the configured maximum. Returns (valid, error_message).
    """
    if not size_bytes:
        return False, "file is empty"
    if size_bytes > max_size:
        return (
            False,
            f"file too large (max {max_size // (1024 * 1024)}MB for {media_type})",
        )
    return True, None


def infer_media_type_from_content_type(content_type: str | None) -> str | None:
    """
    Infer media type from content_type, None when unsupported.
    """
    ct = _base_type(content_type)
    for media_type, allowed in TYPE_TO_CONTENT_TYPES.items():
        if ct in allowed:
            return media_type
    return None
