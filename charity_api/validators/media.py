from charity_api.enums import MediaProvider, MediaStatus, MediaType
from charity_api.utils.validation import Payload


def validate_upload_form(form: dict) -> dict:
    p = Payload(form, coerce=True)
    p.choice("type", MediaType.ALL)
    p.choice("provider", MediaProvider.ALL)
    p.string_list("tags", max_items=20, max_len=50)
    p.string("description", max_len=1000)
    p.string("altText", max_len=255)
    p.boolean("isPublic")
    return p.raise_if_invalid()


def validate_media_update(body: dict) -> dict:
    p = Payload(body)
    p.string_list("tags", max_items=20, max_len=50)
    p.string("description", max_len=1000, allow_empty=True)
    p.string("altText", max_len=255, allow_empty=True)
    p.boolean("isPublic")
    values = p.raise_if_invalid()
    if not values:
        p.fail("body", "at least one field is required")
        p.raise_if_invalid()
    return values


def validate_media_query(args: dict) -> Payload:
    p = Payload(args, coerce=True)
    p.choice("type", MediaType.ALL)
    p.choice("provider", MediaProvider.ALL)
    p.choice("status", MediaStatus.ALL)
    p.boolean("isPublic")
    p.string_list("tags", max_items=20)
    return p


def validate_download(args: dict) -> dict:
    p = Payload(args, coerce=True)
    p.number("expiresIn", min_value=60, max_value=7 * 24 * 3600)
    return p.raise_if_invalid()
