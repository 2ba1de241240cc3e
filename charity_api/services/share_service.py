from typing import Any, Dict, Optional

from charity_api.enums import PostVisibility, ShareType
from charity_api.errors import BusinessError, PostErrorCode
from charity_api.models.post import adjust_counter, get_post, get_post_for_update
from charity_api.models.post_share import (
    count_shares,
    delete_share,
    get_share,
    insert_share,
    list_shares,
    list_user_shares,
)
from charity_api.utils.db import db_cursor
from charity_api.utils.pagination import paginate

MAX_SHARE_TEXT = 1000


def _post_not_found(post_id) -> BusinessError:
    return BusinessError(PostErrorCode.NOT_FOUND, f"Post with ID {post_id} not found", 404)


def share_post(
    post_id: str,
    user_id: str,
    share_type: str = ShareType.REPOST,
    share_text: Optional[str] = None,
    visibility: str = PostVisibility.PUBLIC,
    source: str = "web",
) -> Dict[str, Any]:
    share_text = (share_text or "").strip() or None
    if share_type == ShareType.QUOTE and not share_text:
        raise BusinessError(
            PostErrorCode.CONTENT_REQUIRED, "Quote shares must include share text"
        )
    if share_text and len(share_text) > MAX_SHARE_TEXT:
        raise BusinessError(
            PostErrorCode.CONTENT_TOO_LONG,
            f"Share text is too long (max {MAX_SHARE_TEXT} characters)",
        )

    with db_cursor() as cur:
        if not get_post_for_update(cur, post_id):
            raise _post_not_found(post_id)
        share = insert_share(
            cur,
            {
                "post_id": post_id,
                "user_id": user_id,
                "share_type": share_type,
                "share_text": share_text,
                "visibility": visibility,
                "source": source,
            },
        )
        if share is None:
            raise BusinessError(
                PostErrorCode.ALREADY_SHARED, "You have already shared this post", 409
            )
        adjust_counter(cur, post_id, "shares_count", 1)
    return share


def unshare_post(post_id: str, user_id: str) -> Dict[str, Any]:
    with db_cursor() as cur:
        if not get_post_for_update(cur, post_id):
            raise _post_not_found(post_id)
        if not delete_share(cur, post_id, user_id):
            raise BusinessError(PostErrorCode.NOT_SHARED, "You have not shared this post")
        adjust_counter(cur, post_id, "shares_count", -1)
    return {"post_id": post_id, "shared": False}


def post_shares(post_id: str, page: int, limit: int, offset: int) -> dict:
    if not get_post(post_id):
        raise _post_not_found(post_id)
    items, total = list_shares(post_id, limit, offset)
    return paginate(items, total, page, limit)


def shares_count(post_id: str) -> Dict[str, int]:
    if not get_post(post_id):
        raise _post_not_found(post_id)
    return {"count": count_shares(post_id)}


def share_status(post_id: str, user_id: str) -> Dict[str, Any]:
    if not get_post(post_id):
        raise _post_not_found(post_id)
    share = get_share(post_id, user_id)
    return {"is_shared": share is not None, "shared_at": share["shared_at"] if share else None}


def user_shares(user_id: str, page: int, limit: int, offset: int) -> dict:
    items, total = list_user_shares(user_id, limit, offset)
    return paginate(items, total, page, limit)
