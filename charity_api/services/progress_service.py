import logging
from typing import Any, Dict, List

from charity_api.enums import CampaignStatus, MilestoneStatus
from charity_api.errors import BusinessError, CampaignErrorCode, ProgressErrorCode
from charity_api.models.campaign import get_campaign, get_campaign_for_update, update_campaign
from charity_api.models.progress_update import (
    delete_progress,
    get_progress,
    insert_progress,
    list_for_milestone,
    list_progress,
)
from charity_api.utils.authz import is_admin
from charity_api.utils.db import db_cursor
from charity_api.utils.pagination import paginate

logger = logging.getLogger(__name__)

METADATA_FIELDS = ("work_completed", "challenges_faced", "next_steps", "resources_used")
RECENT_UPDATES = 5


def _campaign_not_found(campaign_id) -> BusinessError:
    return BusinessError(
        CampaignErrorCode.NOT_FOUND, f"Campaign {campaign_id} not found", 404
    )


def record_progress(data: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Append a progress update to an active milestone and, in the same
    transaction, copy its percentage onto the milestone and bump its count.
    """
    campaign_id = data["campaign_id"]
    index = data["milestone_index"]
    with db_cursor() as cur:
        campaign = get_campaign_for_update(cur, campaign_id)
        if not campaign:
            raise _campaign_not_found(campaign_id)
        if str(campaign["creator_id"]) != str(user["id"]):
            raise BusinessError(
                ProgressErrorCode.NOT_ALLOWED,
                "Only the campaign creator can record progress",
                403,
            )
        if campaign["status"] != CampaignStatus.IMPLEMENTATION:
            raise BusinessError(
                ProgressErrorCode.CAMPAIGN_NOT_IN_IMPLEMENTATION,
                f"Campaign {campaign_id} is {campaign['status']}, "
                "progress can only be recorded during implementation",
            )
        milestones = [dict(m) for m in campaign["milestones"] or []]
        if not 0 <= index < len(milestones):
            raise BusinessError(
                CampaignErrorCode.MILESTONE_NOT_FOUND,
                f"Campaign {campaign_id} has no milestone {index}",
            )
        milestone = milestones[index]
        if milestone["status"] != MilestoneStatus.ACTIVE:
            raise BusinessError(
                ProgressErrorCode.MILESTONE_NOT_ACTIVE,
                f"Milestone {index} is {milestone['status']}, not active",
            )

        update = insert_progress(
            cur,
            {
                "campaign_id": campaign_id,
                "campaign_title": campaign["title"],
                "milestone_index": index,
                "milestone_title": milestone["title"],
                "updated_by": user["id"],
                "updated_by_name": user["name"],
                "description": data["description"],
                "progress_percentage": data["progress_percentage"],
                "images": data.get("images"),
                "metadata": {f: data[f] for f in METADATA_FIELDS if data.get(f)},
                "is_visible": data.get("is_visible", True),
            },
        )
        milestone["progress_percentage"] = data["progress_percentage"]
        milestone["progress_updates_count"] = milestone.get("progress_updates_count", 0) + 1
        update_campaign(cur, campaign_id, {"milestones": milestones})

    logger.info(
        "progress %s%% recorded on campaign %s milestone %s",
        data["progress_percentage"],
        campaign_id,
        index,
    )
    return update


def search_progress(query: Dict[str, Any], page: int, limit: int, offset: int) -> dict:
    items, total = list_progress(
        {k: query.get(k) for k in ("campaign_id", "milestone_index", "updated_by", "is_visible")},
        sort_by=query.get("sort_by") or "createdAt",
        sort_order=query.get("sort_order") or "desc",
        limit=limit,
        offset=offset,
    )
    return paginate(items, total, page, limit)


def campaign_progress(campaign_id: str, milestone_index: int | None = None) -> List[dict]:
    return list_for_milestone(campaign_id, milestone_index)


def get_progress_or_404(progress_id: str) -> Dict[str, Any]:
    update = get_progress(progress_id)
    if not update:
        raise BusinessError(
            ProgressErrorCode.NOT_FOUND, f"Progress update {progress_id} not found", 404
        )
    return update


def remove_progress(progress_id: str, viewer: Dict[str, Any]) -> Dict[str, Any]:
    update = get_progress_or_404(progress_id)
    allowed = str(update["updated_by"]) == str(viewer["id"]) or is_admin(viewer)
    if not allowed:
        campaign = get_campaign(update["campaign_id"])
        allowed = bool(campaign) and str(campaign["creator_id"]) == str(viewer["id"])
    if not allowed:
        raise BusinessError(
            ProgressErrorCode.NOT_ALLOWED,
            f"You cannot delete progress update {progress_id}",
            403,
        )
    delete_progress(progress_id)
    return {"id": progress_id, "deleted": True}


def milestone_summary(campaign_id: str, index: int) -> Dict[str, Any]:
    campaign = get_campaign(campaign_id)
    if not campaign:
        raise _campaign_not_found(campaign_id)
    milestones = campaign["milestones"] or []
    if not 0 <= index < len(milestones):
        raise BusinessError(
            CampaignErrorCode.MILESTONE_NOT_FOUND,
            f"Campaign {campaign_id} has no milestone {index}",
            404,
        )
    m = milestones[index]
    history = list_for_milestone(campaign_id, index, ascending=True)
    return {
        "milestone": {
            "title": m["title"],
            "description": m.get("description"),
            "status": m["status"],
            "progress_percentage": m.get("progress_percentage", 0),
            "progress_updates_count": m.get("progress_updates_count", 0),
            "budget": m["budget"],
            "disbursed_amount": m.get("disbursed_amount", 0),
            "due_date": m.get("due_date"),
        },
        "recent_updates": list_for_milestone(campaign_id, index, limit=RECENT_UPDATES),
        "progress_history": [
            {
                "progress_percentage": u["progress_percentage"],
                "created_at": u["created_at"],
                "updated_by_name": u["updated_by_name"],
            }
            for u in history
        ],
    }
