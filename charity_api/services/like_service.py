from typing import Any, Dict

from charity_api.errors import BusinessError, PostErrorCode
from charity_api.models.post import adjust_counter, get_post, get_post_for_update
from charity_api.models.post_like import (
    count_likes,
    delete_like,
    get_like,
    insert_like,
    list_likers,
    list_likes,
    list_user_likes,
)
from charity_api.utils.db import db_cursor
from charity_api.utils.pagination import paginate


def _post_not_found(post_id) -> BusinessError:
    return BusinessError(PostErrorCode.NOT_FOUND, f"Post with ID {post_id} not found", 404)


def _require_post(post_id: str) -> Dict[str, Any]:
    post = get_post(post_id)
    if not post:
        raise _post_not_found(post_id)
    return post


def like_post(post_id: str, user_id: str) -> Dict[str, Any]:
    """The like row and likes_count change together or not at all."""
    with db_cursor() as cur:
        if not get_post_for_update(cur, post_id):
            raise _post_not_found(post_id)
        like = insert_like(cur, post_id, user_id)
        if like is None:
            raise BusinessError(
                PostErrorCode.ALREADY_LIKED, "You have already liked this post", 409
            )
        adjust_counter(cur, post_id, "likes_count", 1)
    return like


def unlike_post(post_id: str, user_id: str) -> Dict[str, Any]:
    with db_cursor() as cur:
        if not get_post_for_update(cur, post_id):
            raise _post_not_found(post_id)
        if not delete_like(cur, post_id, user_id):
            raise BusinessError(PostErrorCode.NOT_LIKED, "You have not liked this post")
        adjust_counter(cur, post_id, "likes_count", -1)
    return {"post_id": post_id, "liked": False}


def post_likes(post_id: str, page: int, limit: int, offset: int) -> dict:
    _require_post(post_id)
    items, total = list_likes(post_id, limit, offset)
    return paginate(items, total, page, limit)


def likes_count(post_id: str) -> Dict[str, int]:
    _require_post(post_id)
    return {"count": count_likes(post_id)}


def like_status(post_id: str, user_id: str) -> Dict[str, Any]:
    _require_post(post_id)
    like = get_like(post_id, user_id)
    return {"is_liked": like is not None, "liked_at": like["liked_at"] if like else None}


def post_likers(post_id: str, limit: int = 10):
    _require_post(post_id)
    return list_likers(post_id, limit)


def user_likes(user_id: str, page: int, limit: int, offset: int) -> dict:
    items, total = list_user_likes(user_id, limit, offset)
    return paginate(items, total, page, limit)
