"""Likes, comments, shares and views on posts."""

from flask import Blueprint, request

from charity_api.enums import PostVisibility, ShareType
from charity_api.errors import PostErrorCode, UserErrorCode
from charity_api.services import comment_service, like_service, share_service, view_service
from charity_api.utils.authz import auth_required
from charity_api.utils.pagination import parse_pagination
from charity_api.utils.rate_limit import rate_limit_key
from charity_api.utils.responses import respond
from charity_api.utils.validation import Payload, require_uuid
from charity_api.validators.post import (
    validate_comment,
    validate_share,
    validate_view,
    validate_view_duration,
)

interaction_bp = Blueprint("interactions", __name__)


def _post_id(post_id: str) -> str:
    return require_uuid(post_id, PostErrorCode.NOT_FOUND, "post id")


def _user_id(user_id: str) -> str:
    return require_uuid(user_id, UserErrorCode.NOT_FOUND, "user id")


def _comment_id(comment_id: str) -> str:
    return require_uuid(comment_id, PostErrorCode.COMMENT_NOT_FOUND, "comment id")


def _page(default_limit: int = 10):
    p = Payload(request.args.to_dict(), coerce=True)
    page, limit, offset = parse_pagination(p, default_limit=default_limit)
    p.raise_if_invalid()
    return page, limit, offset


# likes


@interaction_bp.post("/posts/<post_id>/likes")
@auth_required()
def like(post_id, viewer):
    return respond(like_service.like_post(_post_id(post_id), viewer["id"]), 201)


@interaction_bp.delete("/posts/<post_id>/likes")
@auth_required()
def unlike(post_id, viewer):
    return respond(like_service.unlike_post(_post_id(post_id), viewer["id"]))


@interaction_bp.get("/posts/<post_id>/likes")
def likes(post_id):
    return respond(like_service.post_likes(_post_id(post_id), *_page()))


@interaction_bp.get("/posts/<post_id>/likes/count")
def likes_count(post_id):
    return respond(like_service.likes_count(_post_id(post_id)))


@interaction_bp.get("/posts/<post_id>/likes/check")
@auth_required()
def like_check(post_id, viewer):
    return respond(like_service.like_status(_post_id(post_id), viewer["id"]))


@interaction_bp.get("/posts/<post_id>/likes/users")
def likers(post_id):
    p = Payload(request.args.to_dict(), coerce=True)
    limit = p.number("limit", min_value=1, max_value=100) or 10
    p.raise_if_invalid()
    return respond(like_service.post_likers(_post_id(post_id), limit))


@interaction_bp.get("/users/<user_id>/likes")
def user_likes(user_id):
    return respond(like_service.user_likes(_user_id(user_id), *_page()))


# comments


@interaction_bp.post("/posts/<post_id>/comments")
@auth_required()
def comment(post_id, viewer):
    data = validate_comment(request.get_json(force=True, silent=True) or {})
    created = comment_service.add_comment(
        _post_id(post_id),
        viewer["id"],
        data["content"],
        parent_comment_id=data.get("parent_comment_id"),
        mentions=data.get("mentions"),
    )
    return respond(created, 201)


@interaction_bp.get("/posts/<post_id>/comments")
def comments(post_id):
    p = Payload(request.args.to_dict(), coerce=True)
    include_replies = p.boolean("includeReplies") or False
    page, limit, offset = parse_pagination(p)
    p.raise_if_invalid()
    return respond(
        comment_service.post_comments(_post_id(post_id), include_replies, page, limit, offset)
    )


@interaction_bp.get("/posts/<post_id>/comments/count")
def comments_count(post_id):
    return respond(comment_service.comments_count(_post_id(post_id)))


@interaction_bp.put("/comments/<comment_id>")
@auth_required()
def edit_comment(comment_id, viewer):
    data = validate_comment(request.get_json(force=True, silent=True) or {}, creating=False)
    return respond(
        comment_service.edit_comment(
            _comment_id(comment_id), viewer["id"], data["content"], data.get("mentions")
        )
    )


@interaction_bp.delete("/comments/<comment_id>")
@auth_required()
def delete_comment(comment_id, viewer):
    return respond(comment_service.delete_comment(_comment_id(comment_id), viewer["id"]))


@interaction_bp.get("/comments/<comment_id>/replies")
def replies(comment_id):
    return respond(comment_service.comment_replies(_comment_id(comment_id), *_page()))


@interaction_bp.get("/users/<user_id>/comments")
def user_comments(user_id):
    return respond(comment_service.user_comments(_user_id(user_id), *_page()))


# shares


@interaction_bp.post("/posts/<post_id>/shares")
@auth_required()
def share(post_id, viewer):
    data = validate_share(request.get_json(force=True, silent=True) or {})
    created = share_service.share_post(
        _post_id(post_id),
        viewer["id"],
        share_type=data.get("share_type") or ShareType.REPOST,
        share_text=data.get("share_text"),
        visibility=data.get("visibility") or PostVisibility.PUBLIC,
        source=data.get("source") or "web",
    )
    return respond(created, 201)


@interaction_bp.delete("/posts/<post_id>/shares")
@auth_required()
def unshare(post_id, viewer):
    return respond(share_service.unshare_post(_post_id(post_id), viewer["id"]))


@interaction_bp.get("/posts/<post_id>/shares")
def shares(post_id):
    return respond(share_service.post_shares(_post_id(post_id), *_page()))


@interaction_bp.get("/posts/<post_id>/shares/count")
def shares_count(post_id):
    return respond(share_service.shares_count(_post_id(post_id)))


@interaction_bp.get("/posts/<post_id>/shares/check")
@auth_required()
def share_check(post_id, viewer):
    return respond(share_service.share_status(_post_id(post_id), viewer["id"]))


@interaction_bp.get("/users/<user_id>/shares")
def user_shares(user_id):
    return respond(share_service.user_shares(_user_id(user_id), *_page()))


# views


@interaction_bp.post("/posts/<post_id>/views")
@auth_required(optional=True)
def view(post_id, viewer):
    data = validate_view(request.get_json(force=True, silent=True) or {})
    recorded = view_service.record_view(
        _post_id(post_id),
        user_id=viewer["id"] if viewer else None,
        session_id=data.get("session_id"),
        ip_address=rate_limit_key(),
        user_agent=request.headers.get("User-Agent"),
        referrer=data.get("referrer"),
        source=data.get("source"),
    )
    return respond(recorded, 201 if recorded["is_new_view"] else 200)


@interaction_bp.put("/posts/<post_id>/views/duration")
@auth_required(optional=True)
def view_duration(post_id, viewer):
    data = validate_view_duration(request.get_json(force=True, silent=True) or {})
    return respond(
        view_service.record_duration(
            _post_id(post_id),
            data["duration"],
            user_id=viewer["id"] if viewer else None,
            session_id=data.get("session_id"),
        )
    )


@interaction_bp.get("/posts/<post_id>/views")
def views(post_id):
    return respond(view_service.post_views(_post_id(post_id), *_page()))


@interaction_bp.get("/posts/<post_id>/views/count")
def views_count(post_id):
    return respond(view_service.views_count(_post_id(post_id)))


@interaction_bp.get("/posts/<post_id>/views/unique-count")
def unique_views_count(post_id):
    return respond(view_service.unique_viewers_count(_post_id(post_id)))


@interaction_bp.get("/users/<user_id>/views")
def user_views(user_id):
    return respond(view_service.user_views(_user_id(user_id), *_page()))
