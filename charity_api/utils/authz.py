from functools import wraps

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from charity_api.enums import UserRole, UserStatus
from charity_api.errors import BusinessError, CommonErrorCode, UserErrorCode
from charity_api.models.user import get_user


def auth_required(*allowed, optional: bool = False):
    """
    Verify the access token, load the caller and hand it to the view as the
    `viewer` keyword argument. With `optional=True` anonymous callers get
    `viewer=None`; with roles given, other roles are refused.
    """

    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request(optional=optional)
            user_id = get_jwt_identity()
            if user_id is None:
                return fn(*args, viewer=None, **kwargs)

            user = get_user(user_id)
            if user is None:
                raise BusinessError(
                    CommonErrorCode.UNAUTHORIZED, "User no longer exists", 401
                )
            if user["status"] != UserStatus.ACTIVE:
                raise BusinessError(
                    UserErrorCode.BANNED,
                    f"User account {user['id']} is not active. Status: {user['status']}",
                    403,
                )
            if allowed and user["role"] not in allowed:
                raise BusinessError(
                    CommonErrorCode.FORBIDDEN,
                    f"Requires role: {', '.join(allowed)}",
                    403,
                )
            return fn(*args, viewer=user, **kwargs)

        return wrapper

    return deco


def is_admin(viewer) -> bool:
    return bool(viewer) and viewer.get("role") == UserRole.ADMIN
