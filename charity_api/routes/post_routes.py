from flask import Blueprint, request

from charity_api.errors import PostErrorCode
from charity_api.services.post_service import (
    campaign_posts,
    create_post,
    get_visible_post,
    remove_post,
    search_posts,
    trending_posts,
    update_post_details,
)
from charity_api.utils.authz import auth_required
from charity_api.utils.pagination import parse_pagination
from charity_api.utils.responses import respond
from charity_api.utils.validation import require_uuid
from charity_api.validators.post import (
    validate_post_create,
    validate_post_query,
    validate_post_update,
)

post_bp = Blueprint("posts", __name__)


def _post_id(post_id: str) -> str:
    return require_uuid(post_id, PostErrorCode.NOT_FOUND, "post id")


def _query():
    p = validate_post_query(request.args.to_dict())
    page, limit, offset = parse_pagination(p)
    return p.raise_if_invalid(), page, limit, offset


@post_bp.post("/")
@auth_required()
def create(viewer):
    data = validate_post_create(request.get_json(force=True, silent=True) or {})
    return respond(create_post(data, viewer["id"]), 201)


@post_bp.get("/")
@auth_required(optional=True)
def list_all(viewer):
    query, page, limit, offset = _query()
    viewer_id = viewer["id"] if viewer else None
    return respond(search_posts(query, viewer_id, page, limit, offset))


@post_bp.get("/feed/timeline")
@auth_required()
def timeline(viewer):
    query, page, limit, offset = _query()
    return respond(search_posts(query, viewer["id"], page, limit, offset))


@post_bp.get("/feed/trending")
@auth_required()
def trending(viewer):
    query, page, limit, offset = _query()
    return respond(trending_posts(query, viewer["id"], page, limit, offset))


@post_bp.get("/feed/campaigns")
@auth_required()
def campaigns(viewer):
    query, page, limit, offset = _query()
    return respond(campaign_posts(query, viewer["id"], page, limit, offset))


@post_bp.get("/<post_id>")
@auth_required(optional=True)
def get_one(post_id, viewer):
    return respond(get_visible_post(_post_id(post_id), viewer["id"] if viewer else None))


@post_bp.patch("/<post_id>")
@auth_required()
def update(post_id, viewer):
    changes = validate_post_update(request.get_json(force=True, silent=True) or {})
    return respond(update_post_details(_post_id(post_id), changes, viewer["id"]))


@post_bp.delete("/<post_id>")
@auth_required()
def delete(post_id, viewer):
    return respond(remove_post(_post_id(post_id), viewer["id"]))
