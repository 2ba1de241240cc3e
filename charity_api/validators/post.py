from charity_api.enums import PostType, PostVisibility, ShareType
from charity_api.models.post import SORT_COLUMNS
from charity_api.utils.validation import Payload

MAX_TEXT = 2000


def _content(p: Payload, required: bool) -> None:
    raw = p.object("content", required=required)
    if raw is None:
        return
    c = Payload(raw)
    c.string("text", max_len=MAX_TEXT, allow_empty=True)
    c.object_list("images")
    c.object_list("videos")
    c.object_list("links")
    for err in c.errors:
        p.fail(f"content.{err['field']}", err["message"])
    p.values["content"] = {k: v for k, v in c.values.items() if v}


def _hashtags(p: Payload) -> None:
    tags = p.string_list("hashtags", max_items=30, max_len=50)
    if tags is not None:
        p.values["hashtags"] = [t.lstrip("#") for t in tags if t.lstrip("#")]


def validate_post_create(body: dict) -> dict:
    p = Payload(body)
    _content(p, required=True)
    p.uuid("campaignId")
    p.choice("visibility", PostVisibility.ALL)
    _hashtags(p)
    p.uuid_list("mentions")
    p.object("location")
    return p.raise_if_invalid()


def validate_post_update(body: dict) -> dict:
    p = Payload(body)
    _content(p, required=False)
    p.uuid("campaignId")
    p.choice("visibility", PostVisibility.ALL)
    _hashtags(p)
    p.uuid_list("mentions")
    p.object("location")
    values = p.raise_if_invalid()
    if not values:
        p.fail("body", "at least one field is required")
        p.raise_if_invalid()
    return values


def validate_post_query(args: dict) -> Payload:
    p = Payload(args, coerce=True)
    p.string("search", max_len=100)
    p.uuid("creatorId")
    p.uuid("campaignId")
    p.choice("type", PostType.ALL)
    p.choice("visibility", PostVisibility.ALL)
    _hashtags(p)
    p.datetime("startDate")
    p.datetime("endDate")
    p.choice("sortBy", tuple(SORT_COLUMNS))
    p.choice("sortOrder", ("asc", "desc"))
    return p


def validate_comment(body: dict, creating: bool = True) -> dict:
    p = Payload(body)
    p.string("content", required=True, max_len=MAX_TEXT)
    if creating:
        p.uuid("parentCommentId")
    p.uuid_list("mentions")
    return p.raise_if_invalid()


def validate_share(body: dict) -> dict:
    p = Payload(body)
    p.choice("shareType", ShareType.ALL)
    p.string("shareText", max_len=1000)
    p.choice("visibility", PostVisibility.ALL)
    p.string("source", max_len=50)
    return p.raise_if_invalid()


def validate_view(body: dict) -> dict:
    p = Payload(body)
    p.string("sessionId", max_len=128)
    p.string("referrer", max_len=1000)
    p.string("source", max_len=50)
    return p.raise_if_invalid()


def validate_view_duration(body: dict) -> dict:
    p = Payload(body)
    p.number("duration", required=True, min_value=0, max_value=24 * 3600)
    p.string("sessionId", max_len=128)
    return p.raise_if_invalid()
