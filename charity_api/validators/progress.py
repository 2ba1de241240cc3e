from charity_api.models.progress_update import SORT_COLUMNS
from charity_api.utils.validation import Payload


def validate_progress_create(body: dict) -> dict:
    p = Payload(body)
    p.uuid("campaignId", required=True)
    p.number("milestoneIndex", required=True, min_value=0)
    p.string("description", required=True, max_len=2000)
    p.number("progressPercentage", required=True, min_value=0, max_value=100)
    p.string_list("images", max_items=20, max_len=1000)
    for field in ("workCompleted", "challengesFaced", "nextSteps", "resourcesUsed"):
        p.string(field, max_len=500)
    p.boolean("isVisible")
    return p.raise_if_invalid()


def validate_progress_query(args: dict) -> Payload:
    p = Payload(args, coerce=True)
    p.uuid("campaignId")
    p.number("milestoneIndex", min_value=0)
    p.uuid("updatedBy")
    p.boolean("isVisible")
    p.choice("sortBy", tuple(SORT_COLUMNS))
    p.choice("sortOrder", ("asc", "desc"))
    return p
