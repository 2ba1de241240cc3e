from charity_api.enums import UserRole, UserStatus
from charity_api.utils.validation import Payload


def _profile_fields(p: Payload, creating: bool) -> None:
    p.string("name", required=creating, min_len=2, max_len=100)
    p.string("phone", max_len=20)
    p.string("address", max_len=255)
    p.string("bio", max_len=1000, allow_empty=True)
    p.string("avatar", max_len=1000)
    p.datetime("dateOfBirth")
    p.string("walletAddress", max_len=100)
    p.choice("role", UserRole.ALL)
    p.choice("status", UserStatus.ALL)
    p.number("reputation", min_value=0, max_value=100)
    p.boolean("isVerified")


def validate_user_create(body: dict) -> dict:
    p = Payload(body)
    p.email("email", required=True)
    p.string("password", min_len=8, max_len=128)
    _profile_fields(p, creating=True)
    return p.raise_if_invalid()


def validate_user_update(body: dict) -> dict:
    p = Payload(body)
    _profile_fields(p, creating=False)
    values = p.raise_if_invalid()
    if not values:
        p.fail("body", "at least one field is required")
        p.raise_if_invalid()
    return values


def validate_user_query(args: dict) -> Payload:
    p = Payload(args, coerce=True)
    p.string("search", max_len=100)
    p.choice("role", UserRole.ALL)
    p.choice("status", UserStatus.ALL)
    return p
