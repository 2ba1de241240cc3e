from flask import Blueprint, request

from charity_api.errors import CampaignErrorCode
from charity_api.services.follow_service import (
    campaign_followers,
    follow_campaign,
    follow_status,
    followed_campaigns,
    unfollow_campaign,
)
from charity_api.utils.authz import auth_required
from charity_api.utils.pagination import parse_pagination
from charity_api.utils.responses import respond
from charity_api.utils.validation import Payload, require_uuid
from charity_api.validators.campaign import validate_follow

follow_bp = Blueprint("campaign_follows", __name__)


def _campaign_id(campaign_id: str) -> str:
    return require_uuid(campaign_id, CampaignErrorCode.NOT_FOUND, "campaign id")


def _page():
    p = Payload(request.args.to_dict(), coerce=True)
    page, limit, offset = parse_pagination(p)
    p.raise_if_invalid()
    return page, limit, offset


@follow_bp.post("/")
@auth_required()
def follow(viewer):
    data = validate_follow(request.get_json(force=True, silent=True) or {})
    return respond(follow_campaign(data["campaign_id"], viewer), 201)


@follow_bp.delete("/<campaign_id>")
@auth_required()
def unfollow(campaign_id, viewer):
    return respond(unfollow_campaign(_campaign_id(campaign_id), viewer["id"]))


@follow_bp.get("/my-followed")
@auth_required()
def my_followed(viewer):
    return respond(followed_campaigns(viewer["id"], *_page()))


@follow_bp.get("/<campaign_id>/followers")
def followers(campaign_id):
    return respond(campaign_followers(_campaign_id(campaign_id), *_page()))


@follow_bp.get("/<campaign_id>/status")
@auth_required()
def status(campaign_id, viewer):
    return respond(follow_status(_campaign_id(campaign_id), viewer["id"]))
