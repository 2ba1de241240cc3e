import logging
from typing import Any, Dict, Optional

from charity_api.enums import PostType, PostVisibility
from charity_api.errors import BusinessError, PostErrorCode
from charity_api.models.campaign import get_campaign
from charity_api.models.post import get_post, insert_post, list_posts, soft_delete_post, update_post
from charity_api.models.user import get_user
from charity_api.utils.pagination import paginate

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 2000


def determine_post_type(content: Dict[str, Any]) -> str:
    images = bool(content.get("images"))
    videos = bool(content.get("videos"))
    if images and videos:
        return PostType.MIXED
    if images:
        return PostType.IMAGE
    if videos:
        return PostType.VIDEO
    if content.get("links"):
        return PostType.LINK
    return PostType.TEXT


def _check_content(content: Dict[str, Any]) -> None:
    if not any(content.get(k) for k in ("text", "images", "videos", "links")):
        raise BusinessError(
            PostErrorCode.CONTENT_REQUIRED,
            "Post must contain text, images, videos, or links",
        )
    if len(content.get("text") or "") > MAX_TEXT_LENGTH:
        raise BusinessError(
            PostErrorCode.CONTENT_TOO_LONG,
            f"Post text must be at most {MAX_TEXT_LENGTH} characters",
        )


def _check_campaign(campaign_id: Optional[str]) -> None:
    if campaign_id and not get_campaign(campaign_id):
        raise BusinessError(
            PostErrorCode.CAMPAIGN_NOT_FOUND, f"Campaign {campaign_id} not found", 404
        )


def _not_found(post_id) -> BusinessError:
    return BusinessError(PostErrorCode.NOT_FOUND, f"Post with ID {post_id} not found", 404)


def create_post(data: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    creator = get_user(user_id)
    if not creator:
        raise BusinessError(
            PostErrorCode.NOT_FOUND, f"Creator with ID {user_id} not found", 404
        )
    content = data["content"]
    _check_content(content)
    _check_campaign(data.get("campaign_id"))

    post = insert_post(
        {
            "creator_id": creator["id"],
            "creator": {
                "name": creator["name"],
                "email": creator["email"],
                "avatar": creator.get("avatar"),
                "reputation": creator.get("reputation") or 0,
            },
            "campaign_id": data.get("campaign_id"),
            "type": determine_post_type(content),
            "content": content,
            "visibility": data.get("visibility") or PostVisibility.PUBLIC,
            "hashtags": data.get("hashtags") or [],
            "mentions": data.get("mentions") or [],
            "location": data.get("location"),
        }
    )
    logger.info("post %s created by %s", post["id"], user_id)
    return post


def search_posts(
    query: Dict[str, Any], viewer_id: Optional[str], page: int, limit: int, offset: int
) -> dict:
    filters = {k: v for k, v in query.items() if k not in ("sort_by", "sort_order")}
    items, total = list_posts(
        filters,
        viewer_id=viewer_id,
        sort_by=query.get("sort_by") or "createdAt",
        sort_order=query.get("sort_order") or "desc",
        limit=limit,
        offset=offset,
    )
    return paginate(items, total, page, limit)


def trending_posts(query: Dict[str, Any], viewer_id: str, page: int, limit: int, offset: int):
    return search_posts(
        {**query, "sort_by": "likesCount", "sort_order": "desc"}, viewer_id, page, limit, offset
    )


def campaign_posts(query: Dict[str, Any], viewer_id: str, page: int, limit: int, offset: int):
    return search_posts({**query, "has_campaign": True}, viewer_id, page, limit, offset)


def get_visible_post(post_id: str, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    post = get_post(post_id)
    if not post:
        raise _not_found(post_id)
    if post["visibility"] == PostVisibility.PRIVATE and str(post["creator_id"]) != str(
        viewer_id
    ):
        raise BusinessError(PostErrorCode.PRIVATE_POST, "This post is private", 403)
    return post


def _owned_post(post_id: str, user_id: str, action: str) -> Dict[str, Any]:
    post = get_post(post_id)
    if not post:
        raise _not_found(post_id)
    if str(post["creator_id"]) != str(user_id):
        raise BusinessError(
            PostErrorCode.NOT_OWNER, f"You can only {action} your own posts", 403
        )
    return post


def update_post_details(post_id: str, changes: Dict[str, Any], user_id: str):
    post = _owned_post(post_id, user_id, "edit")
    fields = dict(changes)
    if "content" in fields:
        content = {**(post["content"] or {}), **fields["content"]}
        _check_content(content)
        fields["content"] = content
        fields["type"] = determine_post_type(content)
    if "campaign_id" in fields:
        _check_campaign(fields["campaign_id"])
    updated = update_post(post_id, fields)
    if not updated:
        raise _not_found(post_id)
    return updated


def remove_post(post_id: str, user_id: str) -> Dict[str, Any]:
    _owned_post(post_id, user_id, "delete")
    if not soft_delete_post(post_id):
        raise _not_found(post_id)
    logger.info("post %s deleted by %s", post_id, user_id)
    return {"id": post_id, "deleted": True}
