from typing import Any, Dict, Optional

from charity_api.errors import BusinessError, CommonErrorCode, PostErrorCode
from charity_api.models.post import adjust_counter, get_post, get_post_for_update
from charity_api.models.post_view import (
    count_unique_viewers,
    count_views,
    insert_view,
    list_user_views,
    list_views,
    touch_view,
    update_duration,
)
from charity_api.utils.db import db_cursor
from charity_api.utils.pagination import paginate


def _post_not_found(post_id) -> BusinessError:
    return BusinessError(PostErrorCode.NOT_FOUND, f"Post with ID {post_id} not found", 404)


def record_view(
    post_id: str,
    user_id: Optional[str] = None,
    session_id: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    referrer: Optional[str] = None,
    source: Optional[str] = None,
) -> Dict[str, Any]:
    """
    First view by a user (or anonymous session) inserts a row and bumps
    views_count in one transaction; repeats only refresh viewed_at.
    """
    with db_cursor() as cur:
        if not get_post_for_update(cur, post_id):
            raise _post_not_found(post_id)
        view = insert_view(
            cur,
            {
                "post_id": post_id,
                "user_id": user_id,
                "session_id": session_id,
                "ip_address": ip_address,
                "user_agent": user_agent,
                "referrer": referrer,
                "source": source,
            },
        )
        if view is not None:
            adjust_counter(cur, post_id, "views_count", 1)
            return {**view, "is_new_view": True}
        view = touch_view(cur, post_id, user_id, session_id, referrer)
    return {**(view or {}), "is_new_view": False}


def record_duration(
    post_id: str, duration: int, user_id: Optional[str] = None, session_id: Optional[str] = None
) -> Dict[str, Any]:
    if not user_id and not session_id:
        raise BusinessError(
            CommonErrorCode.BAD_REQUEST, "sessionId is required for anonymous viewers"
        )
    view = update_duration(post_id, user_id, session_id, duration)
    if not view:
        raise BusinessError(
            CommonErrorCode.NOT_FOUND, f"No view of post {post_id} to update", 404
        )
    return view


def post_views(post_id: str, page: int, limit: int, offset: int) -> dict:
    if not get_post(post_id):
        raise _post_not_found(post_id)
    items, total = list_views(post_id, limit, offset)
    return paginate(items, total, page, limit)


def views_count(post_id: str) -> Dict[str, int]:
    if not get_post(post_id):
        raise _post_not_found(post_id)
    return {"count": count_views(post_id)}


def unique_viewers_count(post_id: str) -> Dict[str, int]:
    if not get_post(post_id):
        raise _post_not_found(post_id)
    return {"count": count_unique_viewers(post_id)}


def user_views(user_id: str, page: int, limit: int, offset: int) -> dict:
    items, total = list_user_views(user_id, limit, offset)
    return paginate(items, total, page, limit)
