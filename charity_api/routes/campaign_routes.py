from flask import Blueprint, request

from charity_api.enums import UserRole
from charity_api.errors import CampaignErrorCode
from charity_api.services import campaign_service as svc
from charity_api.utils.authz import auth_required
from charity_api.utils.pagination import parse_pagination
from charity_api.utils.responses import respond
from charity_api.utils.validation import Payload, require_uuid
from charity_api.validators.campaign import (
    validate_approve,
    validate_campaign_create,
    validate_campaign_query,
    validate_campaign_update,
    validate_milestone_status,
    validate_reject,
    validate_status_change,
)

campaign_bp = Blueprint("campaigns", __name__)


def _campaign_id(campaign_id: str) -> str:
    return require_uuid(campaign_id, CampaignErrorCode.NOT_FOUND, "campaign id")


@campaign_bp.post("/")
@auth_required()
def create(viewer):
    data = validate_campaign_create(request.get_json(force=True, silent=True) or {})
    return respond(svc.create_campaign(data, viewer["id"]), 201)


@campaign_bp.get("/")
def list_all():
    p = validate_campaign_query(request.args.to_dict())
    page, limit, offset = parse_pagination(p)
    query = p.raise_if_invalid()
    return respond(svc.search_campaigns(query, page, limit, offset))


@campaign_bp.get("/for-review")
@auth_required(UserRole.ADMIN)
def for_review(viewer):
    p = Payload(request.args.to_dict(), coerce=True)
    limit = p.number("limit", min_value=1, max_value=100) or 20
    p.raise_if_invalid()
    return respond(svc.campaigns_for_review(limit))


@campaign_bp.get("/my-campaigns")
@auth_required()
def mine(viewer):
    return respond(svc.my_campaigns(viewer["id"]))


@campaign_bp.get("/stats/overview")
@auth_required(UserRole.ADMIN)
def stats(viewer):
    return respond(svc.statistics())


@campaign_bp.get("/categories/list")
def categories():
    return respond(svc.categories())


@campaign_bp.get("/<campaign_id>")
def get_one(campaign_id):
    return respond(svc.view_campaign(_campaign_id(campaign_id)))


@campaign_bp.patch("/<campaign_id>")
@auth_required()
def update(campaign_id, viewer):
    changes = validate_campaign_update(request.get_json(force=True, silent=True) or {})
    return respond(svc.update_campaign_details(_campaign_id(campaign_id), changes, viewer))


@campaign_bp.delete("/<campaign_id>")
@auth_required()
def delete(campaign_id, viewer):
    return respond(svc.remove_campaign(_campaign_id(campaign_id), viewer))


@campaign_bp.put("/<campaign_id>/approve")
@auth_required(UserRole.ADMIN)
def approve(campaign_id, viewer):
    data = validate_approve(request.get_json(force=True, silent=True) or {})
    return respond(
        svc.approve_campaign(_campaign_id(campaign_id), viewer["id"], data.get("comments"))
    )


@campaign_bp.put("/<campaign_id>/reject")
@auth_required(UserRole.ADMIN)
def reject(campaign_id, viewer):
    data = validate_reject(request.get_json(force=True, silent=True) or {})
    return respond(svc.reject_campaign(_campaign_id(campaign_id), viewer["id"], data["reason"]))


@campaign_bp.put("/<campaign_id>/status")
@auth_required()
def change_status(campaign_id, viewer):
    data = validate_status_change(request.get_json(force=True, silent=True) or {})
    return respond(svc.change_status(_campaign_id(campaign_id), data["status"], viewer))


@campaign_bp.put("/<campaign_id>/milestones/<int:index>/status")
@auth_required(UserRole.ADMIN)
def milestone_status(campaign_id, index, viewer):
    data = validate_milestone_status(request.get_json(force=True, silent=True) or {})
    return respond(
        svc.change_milestone_status(_campaign_id(campaign_id), index, data["status"])
    )


@campaign_bp.get("/<campaign_id>/donations/recent")
def recent_donations(campaign_id):
    p = Payload(request.args.to_dict(), coerce=True)
    limit = p.number("limit", min_value=1, max_value=50) or 10
    p.raise_if_invalid()
    return respond(svc.recent_donations(_campaign_id(campaign_id), limit))
