import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import current_app

from charity_api.enums import MediaProvider, MediaStatus
from charity_api.errors import BusinessError, CommonErrorCode, MediaErrorCode
from charity_api.models.media import (
    create_media,
    get_media,
    increment_counter,
    list_media,
    mark_deleted,
    update_media,
)
from charity_api.storage import StorageError, build_path, get_storage
from charity_api.utils.media_validators import (
    MAX_SIZE_CONFIG_KEY,
    infer_media_type_from_content_type,
    validate_content_type,
    validate_filename,
    validate_size,
)
from charity_api.utils.pagination import paginate

logger = logging.getLogger(__name__)

PRIVATE_URL_TTL = 24 * 3600


def _not_found(media_id) -> BusinessError:
    return BusinessError(MediaErrorCode.NOT_FOUND, f"Media {media_id} not found", 404)


def upload_media(
    *,
    user_id: str,
    data: bytes,
    filename: str,
    content_type: str,
    media_type: Optional[str] = None,
    provider: Optional[str] = None,
    tags=None,
    description: Optional[str] = None,
    alt_text: Optional[str] = None,
    is_public: bool = False,
) -> Dict[str, Any]:
    media_type = media_type or infer_media_type_from_content_type(content_type)
    if not media_type:
        raise BusinessError(
            MediaErrorCode.INVALID_FILE_TYPE, f"Unsupported content type: {content_type}"
        )
    for ok, err in (
        validate_content_type(content_type, media_type),
        validate_filename(filename, media_type),
    ):
        if not ok:
            raise BusinessError(MediaErrorCode.INVALID_FILE_TYPE, err)
    max_size = current_app.config[MAX_SIZE_CONFIG_KEY[media_type]]
    ok, err = validate_size(len(data), media_type, max_size)
    if not ok:
        code = MediaErrorCode.FILE_TOO_LARGE if data else MediaErrorCode.UPLOAD_FAILED
        raise BusinessError(code, err, 413 if data else 400)

    provider = provider or current_app.config["DEFAULT_STORAGE_PROVIDER"]
    if provider not in MediaProvider.ALL:
        raise BusinessError(
            MediaErrorCode.UPLOAD_FAILED, f"Unknown storage provider: {provider}"
        )
    path = build_path(provider, media_type, filename)
    row = create_media(
        user_id=user_id,
        original_name=filename,
        filename=path.rsplit("/", 1)[-1],
        mimetype=content_type,
        size=len(data),
        type=media_type,
        provider=provider,
        cloud_path=path,
        tags=tags,
        is_public=is_public,
        description=description,
        alt_text=alt_text,
    )

    try:
        stored = get_storage(provider).upload(
            data,
            path,
            content_type,
            is_public=is_public,
            metadata={"media-id": str(row["id"]), "uploaded-by": str(user_id)},
        )
    except StorageError as e:
        logger.error("upload of media %s to %s failed: %s", row["id"], provider, e)
        update_media(row["id"], status=MediaStatus.FAILED)
        raise BusinessError(
            MediaErrorCode.UPLOAD_FAILED, f"Upload to {provider} failed", 502
        ) from e

    now = datetime.now(timezone.utc)
    media = update_media(
        row["id"],
        url=stored["url"],
        status=MediaStatus.READY,
        uploaded_at=now,
        processed_at=now,
    )
    logger.info("media %s uploaded by %s to %s (%s bytes)", row["id"], user_id, provider, len(data))
    return media


def search_media(viewer_id: str, filters: Dict[str, Any], page: int, limit: int, offset: int):
    items, total = list_media(viewer_id, filters, limit, offset)
    return paginate(items, total, page, limit)


def _visible(media_id: str, viewer_id: str) -> Dict[str, Any]:
    media = get_media(media_id)
    if not media or (not media["is_public"] and str(media["user_id"]) != str(viewer_id)):
        raise _not_found(media_id)
    return media


def _owned(media_id: str, viewer_id: str) -> Dict[str, Any]:
    media = get_media(media_id)
    if not media:
        raise _not_found(media_id)
    if str(media["user_id"]) != str(viewer_id):
        raise BusinessError(
            CommonErrorCode.FORBIDDEN, f"Media {media_id} does not belong to you", 403
        )
    return media


def get_media_for_viewer(media_id: str, viewer_id: str) -> Dict[str, Any]:
    media = _visible(media_id, viewer_id)
    increment_counter(media_id, "view_count")
    media["view_count"] += 1
    return media


def update_media_details(media_id: str, viewer_id: str, changes: Dict[str, Any]):
    _owned(media_id, viewer_id)
    return update_media(media_id, **changes)


def delete_media(media_id: str, viewer_id: str) -> Dict[str, Any]:
    media = _owned(media_id, viewer_id)
    removed = get_storage(media["provider"]).delete(media["cloud_path"])
    if not removed:
        logger.warning("blob %s was not removed from %s", media["cloud_path"], media["provider"])
    mark_deleted(media_id)
    logger.info("media %s deleted by %s", media_id, viewer_id)
    return {"id": media_id, "deleted": True}


def _signed(media: Dict[str, Any], expires_in: int) -> str:
    try:
        return get_storage(media["provider"]).signed_url(media["cloud_path"], expires_in)
    except StorageError as e:
        raise BusinessError(
            MediaErrorCode.PROCESSING_FAILED,
            f"Could not sign URL for media {media['id']}",
            502,
        ) from e


def download_url(media_id: str, viewer_id: str, expires_in: int = 3600) -> Dict[str, Any]:
    media = _visible(media_id, viewer_id)
    url = _signed(media, expires_in)
    increment_counter(media_id, "download_count")
    return {
        "url": url,
        "filename": media["original_name"],
        "mimetype": media["mimetype"],
        "expires_in": expires_in,
    }


def view_url(media_id: str, viewer_id: str) -> Dict[str, Any]:
    media = _visible(media_id, viewer_id)
    if media["is_public"] and media["url"]:
        return {"url": media["url"], "expires_in": None}
    return {"url": _signed(media, PRIVATE_URL_TTL), "expires_in": PRIVATE_URL_TTL}
