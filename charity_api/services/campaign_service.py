import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from flask import current_app

from charity_api.enums import (
    CampaignStatus,
    CampaignType,
    MilestoneStatus,
    ReviewPriority,
    ReviewStatus,
    UserRole,
    category_list,
)
from charity_api.errors import BusinessError, CampaignErrorCode
from charity_api.models.campaign import (
    campaign_stats,
    count_creator_campaigns,
    delete_campaign,
    get_campaign,
    get_campaign_and_count_view,
    get_campaign_for_update,
    insert_campaign,
    list_by_creator,
    list_campaigns,
    list_for_review,
    update_campaign,
)
from charity_api.models.campaign_follow import set_campaign_title
from charity_api.models.donation import (
    count_campaign_donations,
    recent_completed_for_campaign,
)
from charity_api.models.progress_update import (
    set_campaign_title as set_progress_campaign_title,
)
from charity_api.models.user import adjust_campaign_stats, get_user, get_user_for_update
from charity_api.utils.authz import is_admin
from charity_api.utils.cache import cached_json, invalidate
from charity_api.utils.db import db_cursor
from charity_api.utils.pagination import paginate

logger = logging.getLogger(__name__)

STATS_CACHE_KEY = "campaigns:stats:v1"
EMERGENCY_MIN_REPUTATION = 60
MIN_DURATION_DAYS = 1
MAX_DURATION_DAYS = 365
DEFAULT_EMERGENCY_DAYS = 30

# from -> allowed targets, outside approve/reject
ALLOWED_TRANSITIONS = {
    CampaignStatus.PENDING_REVIEW: (CampaignStatus.CANCELLED,),
    CampaignStatus.APPROVED: (CampaignStatus.FUNDRAISING, CampaignStatus.CANCELLED),
    CampaignStatus.FUNDRAISING: (CampaignStatus.IMPLEMENTATION,),
    CampaignStatus.IMPLEMENTATION: (CampaignStatus.COMPLETED,),
    CampaignStatus.ACTIVE: (CampaignStatus.COMPLETED,),
}

MILESTONE_TRANSITIONS = {
    MilestoneStatus.PENDING: (MilestoneStatus.ACTIVE, "started_at"),
    MilestoneStatus.ACTIVE: (MilestoneStatus.COMPLETED, "completed_at"),
    MilestoneStatus.COMPLETED: (MilestoneStatus.VERIFIED, "verified_at"),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def max_active_campaigns(reputation: int) -> int:
    if reputation >= 80:
        return 5
    if reputation >= 60:
        return 3
    return 2


def review_priority(review_fee) -> tuple[int, str]:
    fee = float(review_fee or 0)
    if fee >= 500000:
        return 4, ReviewPriority.URGENT
    if fee >= 200000:
        return 3, ReviewPriority.HIGH
    if fee >= 50000:
        return 2, ReviewPriority.MEDIUM
    return 1, ReviewPriority.LOW


def _iso(value):
    return value.isoformat() if isinstance(value, datetime) else value


def _not_found(campaign_id) -> BusinessError:
    return BusinessError(
        CampaignErrorCode.NOT_FOUND, f"Campaign {campaign_id} not found", 404
    )


def _build_milestone(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "title": data["title"],
        "description": data.get("description") or "",
        "budget": data["budget"],
        "duration_days": data.get("duration_days") or DEFAULT_EMERGENCY_DAYS,
        "status": MilestoneStatus.PENDING,
        "due_date": _iso(data.get("due_date")),
        "started_at": None,
        "completed_at": None,
        "verified_at": None,
        "disbursed_amount": 0,
        "actual_spending": 0,
        "progress_percentage": 0,
        "progress_updates_count": 0,
        "documents": data.get("documents") or [],
    }


def _emergency_milestone(data: Dict[str, Any], provided: List[dict]) -> Dict[str, Any]:
    """The single full-budget milestone every emergency campaign runs on."""
    days = DEFAULT_EMERGENCY_DAYS
    start, end = data.get("start_date"), data.get("end_date")
    if start and end:
        days = min(max((end - start).days, MIN_DURATION_DAYS), MAX_DURATION_DAYS)
    base = provided[0] if provided else {}
    return _build_milestone(
        {
            "title": base.get("title") or "Full disbursement",
            "description": base.get("description")
            or "Release of the full amount raised by this emergency campaign",
            "budget": data["target_amount"],
            "duration_days": base.get("duration_days") or days,
        }
    )


def _check_rules(data: Dict[str, Any], reputation: int | None = None) -> None:
    """Shape rules that hold for every write; quota is checked only on create."""
    milestones = data.get("milestones") or []
    if data.get("type") == CampaignType.EMERGENCY:
        if reputation is not None and reputation < EMERGENCY_MIN_REPUTATION:
            raise BusinessError(
                CampaignErrorCode.EMERGENCY_REPUTATION_TOO_LOW,
                f"Emergency campaigns require reputation {EMERGENCY_MIN_REPUTATION}. "
                f"Current reputation: {reputation}",
                403,
            )
        if len(milestones) > 1:
            raise BusinessError(
                CampaignErrorCode.EMERGENCY_MULTIPLE_MILESTONES,
                "Emergency campaigns can only have one milestone",
            )

    if milestones:
        total = sum(float(m["budget"]) for m in milestones)
        if total != float(data["target_amount"]):
            raise BusinessError(
                CampaignErrorCode.MILESTONE_BUDGET_MISMATCH,
                f"Milestone budgets add up to {total:g}, "
                f"target amount is {float(data['target_amount']):g}",
            )
        for i, m in enumerate(milestones):
            days = m.get("duration_days")
            if days is not None and not MIN_DURATION_DAYS <= days <= MAX_DURATION_DAYS:
                raise BusinessError(
                    CampaignErrorCode.MILESTONE_DURATION_INVALID,
                    f"Milestone {i} duration must be between "
                    f"{MIN_DURATION_DAYS} and {MAX_DURATION_DAYS} days",
                )

    start, end = data.get("start_date"), data.get("end_date")
    if start and end and start >= end:
        raise BusinessError(
            CampaignErrorCode.END_DATE_BEFORE_START, "Start date must be before end date"
        )


def _check_quota(cur, creator: Dict[str, Any]) -> None:
    active = count_creator_campaigns(cur, creator["id"], CampaignStatus.QUOTA)
    limit = max_active_campaigns(creator["reputation"])
    if active >= limit:
        raise BusinessError(
            CampaignErrorCode.ACTIVE_LIMIT_EXCEEDED,
            f"You have reached the limit of {limit} active campaigns. "
            "Finish a current campaign before creating a new one",
            403,
        )


def _ensure_owner_or_admin(campaign: Dict[str, Any], viewer: Dict[str, Any], action: str):
    if str(campaign["creator_id"]) != str(viewer["id"]) and not is_admin(viewer):
        raise BusinessError(
            CampaignErrorCode.NOT_OWNER,
            f"You do not have permission to {action} campaign {campaign['id']}",
            403,
        )


def create_campaign(data: Dict[str, Any], creator_id: str) -> Dict[str, Any]:
    with db_cursor() as cur:
        creator = get_user_for_update(cur, creator_id)
        if not creator:
            raise BusinessError(
                CampaignErrorCode.CREATOR_NOT_FOUND,
                f"Campaign creator {creator_id} not found",
                404,
            )
        _check_rules(data, creator["reputation"])
        _check_quota(cur, creator)

        provided = data.get("milestones") or []
        if data["type"] == CampaignType.EMERGENCY:
            milestones = [_emergency_milestone(data, provided)]
        else:
            milestones = [_build_milestone(m) for m in provided]

        row = dict(data)
        row.update(
            creator_id=creator["id"],
            creator_name=creator["name"],
            status=CampaignStatus.PENDING_REVIEW,
            milestones=milestones,
        )
        campaign = insert_campaign(cur, row)
        adjust_campaign_stats(cur, creator["id"], created=1)

    invalidate(STATS_CACHE_KEY)
    logger.info(
        "campaign %s created by %s (%s)", campaign["id"], creator_id, campaign["type"]
    )
    return campaign


def get_campaign_or_404(campaign_id: str) -> Dict[str, Any]:
    campaign = get_campaign(campaign_id)
    if not campaign:
        raise _not_found(campaign_id)
    return campaign


def view_campaign(campaign_id: str) -> Dict[str, Any]:
    """Detail read; every call counts as a view."""
    campaign = get_campaign_and_count_view(campaign_id)
    if not campaign:
        raise _not_found(campaign_id)
    return campaign


def search_campaigns(query: Dict[str, Any], page: int, limit: int, offset: int) -> dict:
    filters = {k: v for k, v in query.items() if k not in ("sort_by", "sort_order")}
    items, total = list_campaigns(
        filters,
        sort_by=query.get("sort_by") or "createdAt",
        sort_order=query.get("sort_order") or "desc",
        limit=limit,
        offset=offset,
    )
    return paginate(items, total, page, limit)


def my_campaigns(user_id: str) -> List[Dict[str, Any]]:
    return list_by_creator(user_id)


def update_campaign_details(
    campaign_id: str, changes: Dict[str, Any], viewer: Dict[str, Any]
) -> Dict[str, Any]:
    with db_cursor() as cur:
        campaign = get_campaign_for_update(cur, campaign_id)
        if not campaign:
            raise _not_found(campaign_id)
        _ensure_owner_or_admin(campaign, viewer, "edit")
        if campaign["status"] in CampaignStatus.LOCKED:
            raise BusinessError(
                CampaignErrorCode.CANNOT_EDIT,
                f"Campaign {campaign_id} cannot be edited in status {campaign['status']}",
            )

        fields = dict(changes)
        emergency = fields.get("type", campaign["type"]) == CampaignType.EMERGENCY
        if "milestones" in fields:
            fields["milestones"] = [_build_milestone(m) for m in fields["milestones"] or []]
        elif emergency and "target_amount" in fields and campaign["milestones"]:
            # the single emergency milestone always carries the full target
            fields["milestones"] = [
                {**campaign["milestones"][0], "budget": fields["target_amount"]}
            ]
        merged = {**campaign, **fields}

        reputation = None
        if emergency and campaign["type"] != CampaignType.EMERGENCY:
            owner = get_user(campaign["creator_id"])
            reputation = owner["reputation"] if owner else 0
        _check_rules(merged, reputation)

        updated = update_campaign(cur, campaign_id, fields)
        if "title" in fields and fields["title"] != campaign["title"]:
            set_campaign_title(cur, campaign_id, updated["title"])
            set_progress_campaign_title(cur, campaign_id, updated["title"])
    return updated


def remove_campaign(campaign_id: str, viewer: Dict[str, Any]) -> Dict[str, Any]:
    with db_cursor() as cur:
        campaign = get_campaign_for_update(cur, campaign_id)
        if not campaign:
            raise _not_found(campaign_id)
        _ensure_owner_or_admin(campaign, viewer, "delete")
        if campaign["current_amount"] > 0 or count_campaign_donations(cur, campaign_id):
            raise BusinessError(
                CampaignErrorCode.HAS_DONATIONS,
                f"Campaign {campaign_id} has donations and cannot be deleted",
            )
        delete_campaign(cur, campaign_id)
        adjust_campaign_stats(cur, campaign["creator_id"], created=-1)

    invalidate(STATS_CACHE_KEY)
    logger.info("campaign %s deleted by %s", campaign_id, viewer["id"])
    return {"id": campaign_id, "deleted": True}


def _review(reviewer: Dict[str, Any], status: str, comments, fee) -> Dict[str, Any]:
    score, label = review_priority(fee)
    return {
        "reviewer_id": str(reviewer["id"]),
        "reviewer_name": reviewer["name"],
        "status": status,
        "comments": comments,
        "reviewed_at": _now().isoformat(),
        "priority": score,
        "priority_label": label,
    }


def _load_pending(cur, campaign_id: str, reviewer_id: str, action: str):
    campaign = get_campaign_for_update(cur, campaign_id)
    if not campaign:
        raise _not_found(campaign_id)
    if campaign["status"] != CampaignStatus.PENDING_REVIEW:
        raise BusinessError(
            CampaignErrorCode.CANNOT_EDIT,
            f"Only campaigns pending review can be {action}. "
            f"Campaign {campaign_id} is {campaign['status']}",
        )
    reviewer = get_user(reviewer_id)
    if not reviewer:
        raise BusinessError(
            CampaignErrorCode.REVIEWER_NOT_FOUND, f"Reviewer {reviewer_id} not found", 404
        )
    return campaign, reviewer


def approve_campaign(campaign_id: str, reviewer_id: str, comments: str | None = None):
    with db_cursor() as cur:
        campaign, reviewer = _load_pending(cur, campaign_id, reviewer_id, "approved")
        approved_at = _now()
        due = approved_at
        milestones = []
        for m in campaign["milestones"] or []:
            due = due + timedelta(days=m.get("duration_days") or DEFAULT_EMERGENCY_DAYS)
            milestones.append({**m, "due_date": due.isoformat()})
        updated = update_campaign(
            cur,
            campaign_id,
            {
                "status": CampaignStatus.APPROVED,
                "approved_at": approved_at,
                "milestones": milestones,
                "review": _review(
                    reviewer, ReviewStatus.APPROVED, comments, campaign["review_fee"]
                ),
            },
        )
    invalidate(STATS_CACHE_KEY)
    logger.info("campaign %s approved by %s", campaign_id, reviewer_id)
    return updated


def reject_campaign(campaign_id: str, reviewer_id: str, reason: str):
    with db_cursor() as cur:
        campaign, reviewer = _load_pending(cur, campaign_id, reviewer_id, "rejected")
        updated = update_campaign(
            cur,
            campaign_id,
            {
                "status": CampaignStatus.REJECTED,
                "rejection_reason": reason,
                "review": _review(
                    reviewer, ReviewStatus.REJECTED, reason, campaign["review_fee"]
                ),
            },
        )
    invalidate(STATS_CACHE_KEY)
    logger.info("campaign %s rejected by %s", campaign_id, reviewer_id)
    return updated


def campaigns_for_review(limit: int = 20) -> List[Dict[str, Any]]:
    return list_for_review(limit)


def change_status(campaign_id: str, new_status: str, viewer: Dict[str, Any]):
    with db_cursor() as cur:
        campaign = get_campaign_for_update(cur, campaign_id)
        if not campaign:
            raise _not_found(campaign_id)
        current = campaign["status"]
        if new_status not in ALLOWED_TRANSITIONS.get(current, ()):
            raise BusinessError(
                CampaignErrorCode.INVALID_STATUS_TRANSITION,
                f"Cannot move campaign {campaign_id} from {current} to {new_status}",
            )

        if new_status == CampaignStatus.CANCELLED:
            _ensure_owner_or_admin(campaign, viewer, "cancel")
            if campaign["current_amount"] > 0:
                raise BusinessError(
                    CampaignErrorCode.HAS_DONATIONS,
                    f"Campaign {campaign_id} has donations and cannot be cancelled",
                )
        elif viewer["role"] != UserRole.ADMIN:
            raise BusinessError(
                CampaignErrorCode.NOT_OWNER,
                f"Only admins can move campaigns to {new_status}",
                403,
            )

        fields: Dict[str, Any] = {"status": new_status}
        now = _now()
        if new_status == CampaignStatus.IMPLEMENTATION:
            milestones = [dict(m) for m in campaign["milestones"] or []]
            for m in milestones:
                if m["status"] == MilestoneStatus.PENDING:
                    m["status"] = MilestoneStatus.ACTIVE
                    m["started_at"] = now.isoformat()
                    break
            fields["milestones"] = milestones
        elif new_status == CampaignStatus.COMPLETED:
            fields["completed_at"] = now
            adjust_campaign_stats(cur, campaign["creator_id"], successful=1)

        updated = update_campaign(cur, campaign_id, fields)

    invalidate(STATS_CACHE_KEY)
    logger.info(
        "campaign %s status %s -> %s by %s", campaign_id, current, new_status, viewer["id"]
    )
    return updated


def change_milestone_status(campaign_id: str, index: int, new_status: str):
    with db_cursor() as cur:
        campaign = get_campaign_for_update(cur, campaign_id)
        if not campaign:
            raise _not_found(campaign_id)
        milestones = [dict(m) for m in campaign["milestones"] or []]
        if not 0 <= index < len(milestones):
            raise BusinessError(
                CampaignErrorCode.MILESTONE_NOT_FOUND,
                f"Campaign {campaign_id} has no milestone {index}",
                404,
            )
        if campaign["status"] != CampaignStatus.IMPLEMENTATION:
            raise BusinessError(
                CampaignErrorCode.MILESTONE_INVALID_STATUS_TRANSITION,
                f"Milestones can only change while the campaign is in implementation; "
                f"campaign {campaign_id} is {campaign['status']}",
            )
        milestone = milestones[index]
        target, stamp = MILESTONE_TRANSITIONS.get(milestone["status"], (None, None))
        if target != new_status:
            raise BusinessError(
                CampaignErrorCode.MILESTONE_INVALID_STATUS_TRANSITION,
                f"Cannot move milestone {index} from {milestone['status']} to {new_status}",
            )
        milestone["status"] = new_status
        milestone[stamp] = _now().isoformat()
        return update_campaign(cur, campaign_id, {"milestones": milestones})


def statistics() -> Dict[str, int]:
    ttl = current_app.config["STATS_CACHE_TTL"]
    return cached_json(STATS_CACHE_KEY, ttl, campaign_stats)


def categories() -> List[Dict[str, Any]]:
    return category_list()


def recent_donations(campaign_id: str, limit: int = 10) -> List[Dict[str, Any]]:
    get_campaign_or_404(campaign_id)
    return recent_completed_for_campaign(campaign_id, limit)
