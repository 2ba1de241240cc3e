import logging
from typing import Any, Dict, List, Optional

from charity_api.errors import BusinessError, PostErrorCode
from charity_api.models.post import adjust_counter, get_post, get_post_for_update
from charity_api.models.post_comment import (
    adjust_replies,
    count_comments,
    get_comment,
    get_comment_for_update,
    insert_comment,
    list_comments,
    list_replies,
    list_user_comments,
    soft_delete_comment,
    update_comment,
)
from charity_api.utils.db import db_cursor
from charity_api.utils.pagination import paginate

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2000


def _clean_content(content: Optional[str]) -> str:
    content = (content or "").strip()
    if not content:
        raise BusinessError(PostErrorCode.CONTENT_REQUIRED, "Comment content is required")
    if len(content) > MAX_COMMENT_LENGTH:
        raise BusinessError(
            PostErrorCode.CONTENT_TOO_LONG,
            f"Comment content is too long (max {MAX_COMMENT_LENGTH} characters)",
        )
    return content


def _comment_not_found(comment_id) -> BusinessError:
    return BusinessError(
        PostErrorCode.COMMENT_NOT_FOUND, f"Comment with ID {comment_id} not found", 404
    )


def add_comment(
    post_id: str,
    user_id: str,
    content: str,
    parent_comment_id: Optional[str] = None,
    mentions: Optional[List[str]] = None,
) -> Dict[str, Any]:
    content = _clean_content(content)
    with db_cursor() as cur:
        if not get_post_for_update(cur, post_id):
            raise BusinessError(
                PostErrorCode.NOT_FOUND, f"Post with ID {post_id} not found", 404
            )
        if parent_comment_id:
            parent = get_comment_for_update(cur, parent_comment_id)
            if not parent or str(parent["post_id"]) != str(post_id):
                raise BusinessError(
                    PostErrorCode.COMMENT_NOT_FOUND,
                    "Parent comment not found or belongs to another post",
                    404,
                )
        comment = insert_comment(
            cur,
            {
                "post_id": post_id,
                "user_id": user_id,
                "parent_comment_id": parent_comment_id,
                "content": content,
                "mentions": mentions,
            },
        )
        adjust_counter(cur, post_id, "comments_count", 1)
        if parent_comment_id:
            adjust_replies(cur, parent_comment_id, 1)
    return comment


def post_comments(
    post_id: str, include_replies: bool, page: int, limit: int, offset: int
) -> dict:
    if not get_post(post_id):
        raise BusinessError(PostErrorCode.NOT_FOUND, f"Post with ID {post_id} not found", 404)
    items, total = list_comments(post_id, include_replies, limit, offset)
    return paginate(items, total, page, limit)


def comment_replies(comment_id: str, page: int, limit: int, offset: int) -> dict:
    if not get_comment(comment_id):
        raise _comment_not_found(comment_id)
    items, total = list_replies(comment_id, limit, offset)
    return paginate(items, total, page, limit)


def edit_comment(
    comment_id: str, user_id: str, content: str, mentions: Optional[List[str]] = None
) -> Dict[str, Any]:
    content = _clean_content(content)
    comment = get_comment(comment_id)
    if not comment:
        raise _comment_not_found(comment_id)
    if str(comment["user_id"]) != str(user_id):
        raise BusinessError(
            PostErrorCode.NOT_OWNER, "You can only edit your own comments", 403
        )
    updated = update_comment(comment_id, content, mentions)
    if not updated:
        raise _comment_not_found(comment_id)
    return updated


def delete_comment(comment_id: str, user_id: str) -> Dict[str, Any]:
    with db_cursor() as cur:
        comment = get_comment_for_update(cur, comment_id)
        if not comment:
            raise _comment_not_found(comment_id)
        if str(comment["user_id"]) != str(user_id):
            raise BusinessError(
                PostErrorCode.NOT_OWNER, "You can only delete your own comments", 403
            )
        soft_delete_comment(cur, comment_id)
        adjust_counter(cur, comment["post_id"], "comments_count", -1)
        if comment["parent_comment_id"]:
            adjust_replies(cur, comment["parent_comment_id"], -1)
    logger.info("comment %s deleted by %s", comment_id, user_id)
    return {"id": comment_id, "deleted": True}


def comments_count(post_id: str) -> Dict[str, int]:
    if not get_post(post_id):
        raise BusinessError(PostErrorCode.NOT_FOUND, f"Post with ID {post_id} not found", 404)
    return {"count": count_comments(post_id)}


def user_comments(user_id: str, page: int, limit: int, offset: int) -> dict:
    items, total = list_user_comments(user_id, limit, offset)
    return paginate(items, total, page, limit)
