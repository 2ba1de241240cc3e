import logging

from psycopg2.errors import ForeignKeyViolation, UniqueViolation

from charity_api.errors import (
    AuthErrorCode,
    BusinessError,
    CommonErrorCode,
    UserErrorCode,
)
from charity_api.models.campaign import adjust_followers, set_creator_name
from charity_api.models.campaign_follow import followed_campaign_ids, set_user_name
from charity_api.models.post import adjust_counter, set_creator_profile
from charity_api.models.post_comment import (
    adjust_replies,
    count_cascaded_by_post,
    count_cascaded_by_surviving_parent,
)
from charity_api.models.post_like import count_user_likes_by_post
from charity_api.models.post_share import count_user_shares_by_post
from charity_api.models.progress_update import set_updater_name
from charity_api.models.user import (
    create_user,
    delete_user,
    get_user,
    get_user_by_email,
    get_user_for_update,
    list_users,
    update_user,
)
from charity_api.services.auth_service import hash_password
from charity_api.utils.authz import is_admin
from charity_api.utils.db import db_cursor
from charity_api.utils.pagination import paginate

logger = logging.getLogger(__name__)

ADMIN_ONLY_FIELDS = ("role", "status", "reputation", "is_verified")


def _not_found(user_id) -> BusinessError:
    return BusinessError(UserErrorCode.NOT_FOUND, f"User {user_id} not found", 404)


def create_user_account(data: dict) -> dict:
    email = data["email"]
    if get_user_by_email(email):
        raise BusinessError(
            AuthErrorCode.EMAIL_ALREADY_EXISTS,
            f"User with email {email} already exists",
            409,
        )
    fields = dict(data)
    password = fields.pop("password", None)
    if password:
        fields["password_hash"] = hash_password(password)
    try:
        return create_user(fields)
    except UniqueViolation as e:
        raise BusinessError(
            AuthErrorCode.EMAIL_ALREADY_EXISTS,
            f"User with email {email} already exists",
            409,
        ) from e


def get_user_or_404(user_id: str) -> dict:
    user = get_user(user_id)
    if not user:
        raise _not_found(user_id)
    return user


def search_users(query: dict, page: int, limit: int, offset: int) -> dict:
    items, total = list_users(
        search=query.get("search"),
        role=query.get("role"),
        status=query.get("status"),
        limit=limit,
        offset=offset,
    )
    return paginate(items, total, page, limit)


def update_user_profile(user_id: str, changes: dict, viewer: dict) -> dict:
    """
    Self-service or admin profile update. A new name or avatar is copied into
    every denormalized snapshot of this user in the same transaction.
    """
    admin = is_admin(viewer)
    if str(viewer["id"]) != str(user_id) and not admin:
        raise BusinessError(
            CommonErrorCode.FORBIDDEN, "You can only update your own profile", 403
        )
    restricted = [f for f in ADMIN_ONLY_FIELDS if f in changes]
    if restricted and not admin:
        raise BusinessError(
            CommonErrorCode.FORBIDDEN,
            f"Only admins can change: {', '.join(restricted)}",
            403,
        )

    with db_cursor() as cur:
        current = get_user_for_update(cur, user_id)
        if not current:
            raise _not_found(user_id)
        updated = update_user(cur, user_id, changes)

        name_changed = updated["name"] != current["name"]
        if name_changed or updated["avatar"] != current["avatar"]:
            set_creator_profile(cur, user_id, updated["name"], updated["avatar"])
        if name_changed:
            set_creator_name(cur, user_id, updated["name"])
            set_user_name(cur, user_id, updated["name"])
            set_updater_name(cur, user_id, updated["name"])
    return updated


def _release_engagement(cur, user_id: str) -> None:
    """Take the user's rows out of the counters before the cascade drops them."""
    for row in count_user_likes_by_post(cur, user_id):
        adjust_counter(cur, row["post_id"], "likes_count", -row["count"])
    for row in count_user_shares_by_post(cur, user_id):
        adjust_counter(cur, row["post_id"], "shares_count", -row["count"])
    for row in count_cascaded_by_post(cur, user_id):
        adjust_counter(cur, row["post_id"], "comments_count", -row["count"])
    for row in count_cascaded_by_surviving_parent(cur, user_id):
        adjust_replies(cur, row["comment_id"], -row["count"])
    for campaign_id in followed_campaign_ids(cur, user_id):
        adjust_followers(cur, campaign_id, -1)


def remove_user(user_id: str) -> dict:
    try:
        with db_cursor() as cur:
            if not get_user_for_update(cur, user_id):
                raise _not_found(user_id)
            _release_engagement(cur, user_id)
            delete_user(cur, user_id)
    except ForeignKeyViolation as e:
        raise BusinessError(
            CommonErrorCode.BAD_REQUEST,
            f"User {user_id} still owns campaigns and cannot be deleted",
            409,
        ) from e
    logger.info("deleted user %s", user_id)
    return {"id": user_id, "deleted": True}
