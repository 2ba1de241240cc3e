from charity_api.enums import (
    CATEGORIES,
    CampaignStatus,
    CampaignType,
    FundingType,
    MilestoneStatus,
)
from charity_api.models.campaign import SORT_COLUMNS
from charity_api.utils.validation import Payload

MIN_TARGET = 1000
MAX_TARGET = 10_000_000_000
MAX_REVIEW_FEE = 1_000_000


def _milestones(p: Payload, raw: list | None) -> None:
    if raw is None:
        return
    cleaned = []
    for i, item in enumerate(raw):
        m = Payload(item)
        m.string("title", required=True, max_len=100)
        m.string("description", max_len=500, allow_empty=True)
        # older clients send targetAmount
        m.number("budget" if m.has("budget") else "targetAmount", required=True, min_value=1)
        m.number("durationDays")
        m.datetime("dueDate")
        m.string_list("documents", max_items=20)
        for err in m.errors:
            p.fail(f"milestones[{i}].{err['field']}", err["message"])
        values = m.values
        if "target_amount" in values:
            values["budget"] = values.pop("target_amount")
        cleaned.append(values)
    p.values["milestones"] = cleaned


def _campaign_fields(p: Payload, creating: bool) -> None:
    p.string("title", required=creating, max_len=200)
    p.string("description", required=creating, max_len=5000)
    p.choice("type", CampaignType.ALL, required=creating)
    p.choice("fundingType", FundingType.ALL, required=creating)
    p.number("targetAmount", required=creating, min_value=MIN_TARGET, max_value=MAX_TARGET)
    p.number("reviewFee", min_value=0, max_value=MAX_REVIEW_FEE)
    p.choice("category", CATEGORIES)
    p.string_list("tags", max_items=20, max_len=50)
    p.datetime("startDate")
    p.datetime("endDate")
    p.string("coverImage", max_len=1000)
    p.string_list("gallery", max_items=20, max_len=1000)
    _milestones(p, p.object_list("milestones"))


def validate_campaign_create(body: dict) -> dict:
    p = Payload(body)
    if "image" in p.data and "coverImage" not in p.data:
        p.data = {**p.data, "coverImage": p.data["image"]}
    _campaign_fields(p, creating=True)
    values = p.raise_if_invalid()
    values.setdefault("review_fee", 0)
    return values


def validate_campaign_update(body: dict) -> dict:
    p = Payload(body)
    _campaign_fields(p, creating=False)
    p.boolean("isFeatured")
    values = p.raise_if_invalid()
    if not values:
        p.fail("body", "at least one field is required")
        p.raise_if_invalid()
    return values


def validate_campaign_query(args: dict) -> Payload:
    p = Payload(args, coerce=True)
    p.string("search", max_len=100)
    p.choice("type", CampaignType.ALL)
    p.choice("fundingType", FundingType.ALL)
    p.choice("status", CampaignStatus.ALL)
    p.choice("category", CATEGORIES)
    p.uuid("creatorId")
    p.number("minTargetAmount", min_value=0)
    p.number("maxTargetAmount", min_value=0)
    p.datetime("startDateFrom")
    p.datetime("startDateTo")
    p.boolean("isFeatured")
    p.string("tag", max_len=50)
    p.boolean("pendingReview")
    p.uuid("followedBy")
    p.choice("sortBy", tuple(SORT_COLUMNS))
    p.choice("sortOrder", ("asc", "desc"))
    return p


def validate_approve(body: dict) -> dict:
    p = Payload(body)
    p.string("comments", max_len=1000)
    return p.raise_if_invalid()


def validate_reject(body: dict) -> dict:
    p = Payload(body)
    p.string("reason", required=True, max_len=1000)
    return p.raise_if_invalid()


def validate_status_change(body: dict) -> dict:
    p = Payload(body)
    p.choice("status", CampaignStatus.ALL, required=True)
    return p.raise_if_invalid()


def validate_milestone_status(body: dict) -> dict:
    p = Payload(body)
    p.choice("status", MilestoneStatus.ALL, required=True)
    return p.raise_if_invalid()


def validate_follow(body: dict) -> dict:
    p = Payload(body)
    p.uuid("campaignId", required=True)
    return p.raise_if_invalid()
