from flask import Blueprint, request

from charity_api.errors import CampaignErrorCode, ProgressErrorCode
from charity_api.services.progress_service import (
    campaign_progress,
    get_progress_or_404,
    milestone_summary,
    record_progress,
    remove_progress,
    search_progress,
)
from charity_api.utils.authz import auth_required
from charity_api.utils.pagination import parse_pagination
from charity_api.utils.responses import respond
from charity_api.utils.validation import Payload, require_uuid
from charity_api.validators.progress import validate_progress_create, validate_progress_query

progress_bp = Blueprint("progress", __name__)


@progress_bp.post("/updates")
@auth_required()
def create(viewer):
    data = validate_progress_create(request.get_json(force=True, silent=True) or {})
    return respond(record_progress(data, viewer), 201)


@progress_bp.get("/updates")
def list_all():
    p = validate_progress_query(request.args.to_dict())
    page, limit, offset = parse_pagination(p, max_limit=50)
    query = p.raise_if_invalid()
    return respond(search_progress(query, page, limit, offset))


@progress_bp.get("/campaigns/<campaign_id>/updates")
def by_campaign(campaign_id):
    require_uuid(campaign_id, CampaignErrorCode.NOT_FOUND, "campaign id")
    p = Payload(request.args.to_dict(), coerce=True)
    index = p.number("milestoneIndex", min_value=0)
    p.raise_if_invalid()
    return respond(campaign_progress(campaign_id, index))


@progress_bp.get("/campaigns/<campaign_id>/milestones/<int:index>/summary")
def summary(campaign_id, index):
    require_uuid(campaign_id, CampaignErrorCode.NOT_FOUND, "campaign id")
    return respond(milestone_summary(campaign_id, index))


@progress_bp.get("/updates/<progress_id>")
def get_one(progress_id):
    require_uuid(progress_id, ProgressErrorCode.NOT_FOUND, "progress update id")
    return respond(get_progress_or_404(progress_id))


@progress_bp.delete("/updates/<progress_id>")
@auth_required()
def delete(progress_id, viewer):
    require_uuid(progress_id, ProgressErrorCode.NOT_FOUND, "progress update id")
    return respond(remove_progress(progress_id, viewer))
