from flask import Blueprint, request

from charity_api.enums import UserRole
from charity_api.errors import UserErrorCode
from charity_api.services.user_service import (
    create_user_account,
    get_user_or_404,
    remove_user,
    search_users,
    update_user_profile,
)
from charity_api.utils.authz import auth_required
from charity_api.utils.pagination import parse_pagination
from charity_api.utils.responses import respond
from charity_api.utils.validation import require_uuid
from charity_api.validators.user import (
    validate_user_create,
    validate_user_query,
    validate_user_update,
)

user_bp = Blueprint("users", __name__)


@user_bp.post("/")
@auth_required(UserRole.ADMIN)
def create(viewer):
    data = validate_user_create(request.get_json(force=True, silent=True) or {})
    return respond(create_user_account(data), 201)


@user_bp.get("/")
@auth_required()
def list_all(viewer):
    p = validate_user_query(request.args.to_dict())
    page, limit, offset = parse_pagination(p)
    query = p.raise_if_invalid()
    return respond(search_users(query, page, limit, offset))


@user_bp.get("/<user_id>")
@auth_required()
def get_one(user_id, viewer):
    require_uuid(user_id, UserErrorCode.NOT_FOUND, "user id")
    return respond(get_user_or_404(user_id))


@user_bp.patch("/<user_id>")
@auth_required()
def update(user_id, viewer):
    require_uuid(user_id, UserErrorCode.NOT_FOUND, "user id")
    changes = validate_user_update(request.get_json(force=True, silent=True) or {})
    return respond(update_user_profile(user_id, changes, viewer))


@user_bp.delete("/<user_id>")
@auth_required(UserRole.ADMIN)
def delete(user_id, viewer):
    require_uuid(user_id, UserErrorCode.NOT_FOUND, "user id")
    return respond(remove_user(user_id))
