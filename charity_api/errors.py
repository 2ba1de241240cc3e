"""
Error codes and the JSON error envelope.

Clients map `error_code` to a localized message; `message` is for developers.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class CommonErrorCode:
    INTERNAL_SERVER_ERROR = "COMMON_INTERNAL_SERVER_ERROR"
    VALIDATION_ERROR = "COMMON_VALIDATION_ERROR"
    UNAUTHORIZED = "COMMON_UNAUTHORIZED"
    FORBIDDEN = "COMMON_FORBIDDEN"
    NOT_FOUND = "COMMON_NOT_FOUND"
    BAD_REQUEST = "COMMON_BAD_REQUEST"
    TIMEOUT = "COMMON_TIMEOUT"
    TOO_MANY_REQUESTS = "COMMON_TOO_MANY_REQUESTS"


class CampaignErrorCode:
    NOT_FOUND = "CAMPAIGN_NOT_FOUND"
    NOT_OWNER = "CAMPAIGN_NOT_OWNER"
    CANNOT_EDIT = "CAMPAIGN_CANNOT_EDIT"
    CANNOT_DELETE = "CAMPAIGN_CANNOT_DELETE"
    INVALID_STATUS_TRANSITION = "CAMPAIGN_INVALID_STATUS_TRANSITION"
    ACTIVE_LIMIT_EXCEEDED = "CAMPAIGN_ACTIVE_LIMIT_EXCEEDED"
    CREATOR_NOT_FOUND = "CAMPAIGN_CREATOR_NOT_FOUND"
    EMERGENCY_REPUTATION_TOO_LOW = "CAMPAIGN_EMERGENCY_REPUTATION_TOO_LOW"
    EMERGENCY_MULTIPLE_MILESTONES = "CAMPAIGN_EMERGENCY_MULTIPLE_MILESTONES"
    MILESTONE_BUDGET_MISMATCH = "CAMPAIGN_MILESTONE_BUDGET_MISMATCH"
    MILESTONE_DURATION_INVALID = "CAMPAIGN_MILESTONE_DURATION_INVALID"
    MILESTONE_NOT_FOUND = "CAMPAIGN_MILESTONE_NOT_FOUND"
    MILESTONE_INVALID_STATUS_TRANSITION = "CAMPAIGN_MILESTONE_INVALID_STATUS_TRANSITION"
    END_DATE_BEFORE_START = "CAMPAIGN_END_DATE_BEFORE_START"
    REVIEWER_NOT_FOUND = "CAMPAIGN_REVIEWER_NOT_FOUND"
    HAS_DONATIONS = "CAMPAIGN_HAS_DONATIONS"
    ALREADY_FOLLOWING = "CAMPAIGN_ALREADY_FOLLOWING"
    NOT_FOLLOWING = "CAMPAIGN_NOT_FOLLOWING"


class ProgressErrorCode:
    NOT_FOUND = "PROGRESS_NOT_FOUND"
    NOT_ALLOWED = "PROGRESS_NOT_ALLOWED"
    CAMPAIGN_NOT_IN_IMPLEMENTATION = "PROGRESS_CAMPAIGN_NOT_IN_IMPLEMENTATION"
    MILESTONE_NOT_ACTIVE = "PROGRESS_MILESTONE_NOT_ACTIVE"


class MediaErrorCode:
    NOT_FOUND = "MEDIA_NOT_FOUND"
    UPLOAD_FAILED = "MEDIA_UPLOAD_FAILED"
    FILE_TOO_LARGE = "MEDIA_FILE_TOO_LARGE"
    INVALID_FILE_TYPE = "MEDIA_INVALID_FILE_TYPE"
    PROCESSING_FAILED = "MEDIA_PROCESSING_FAILED"
    UPLOAD_LIMIT_EXCEEDED = "MEDIA_UPLOAD_LIMIT_EXCEEDED"


class AuthErrorCode:
    INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    EMAIL_ALREADY_EXISTS = "AUTH_EMAIL_ALREADY_EXISTS"
    INVALID_TOKEN = "AUTH_INVALID_TOKEN"
    OAUTH_FAILED = "AUTH_OAUTH_FAILED"


class UserErrorCode:
    NOT_FOUND = "USER_NOT_FOUND"
    BANNED = "USER_BANNED"
    INSUFFICIENT_REPUTATION = "USER_INSUFFICIENT_REPUTATION"


class PaymentErrorCode:
    FAILED = "PAYMENT_FAILED"
    INSUFFICIENT_BALANCE = "PAYMENT_INSUFFICIENT_BALANCE"
    INVALID_AMOUNT = "PAYMENT_INVALID_AMOUNT"
    TRANSACTION_NOT_FOUND = "PAYMENT_TRANSACTION_NOT_FOUND"
    ALREADY_PROCESSED = "PAYMENT_ALREADY_PROCESSED"


class DonationErrorCode:
    FAILED = "DONATION_FAILED"
    AMOUNT_TOO_LOW = "DONATION_AMOUNT_TOO_LOW"
    CAMPAIGN_ENDED = "DONATION_CAMPAIGN_ENDED"
    CAMPAIGN_NOT_ACTIVE = "DONATION_CAMPAIGN_NOT_ACTIVE"


class ReviewErrorCode:
    ALREADY_SUBMITTED = "REVIEW_ALREADY_SUBMITTED"
    DOCUMENTS_INCOMPLETE = "REVIEW_DOCUMENTS_INCOMPLETE"
    IDENTITY_VERIFICATION_FAILED = "REVIEW_IDENTITY_VERIFICATION_FAILED"
    FEE_PAYMENT_FAILED = "REVIEW_FEE_PAYMENT_FAILED"


class PostErrorCode:
    NOT_FOUND = "POST_NOT_FOUND"
    NOT_OWNER = "POST_NOT_OWNER"
    CONTENT_REQUIRED = "POST_CONTENT_REQUIRED"
    CONTENT_TOO_LONG = "POST_CONTENT_TOO_LONG"
    INVALID_MEDIA_TYPE = "POST_INVALID_MEDIA_TYPE"
    ALREADY_LIKED = "POST_ALREADY_LIKED"
    NOT_LIKED = "POST_NOT_LIKED"
    ALREADY_SHARED = "POST_ALREADY_SHARED"
    NOT_SHARED = "POST_NOT_SHARED"
    COMMENT_NOT_FOUND = "POST_COMMENT_NOT_FOUND"
    CANNOT_EDIT = "POST_CANNOT_EDIT"
    CANNOT_DELETE = "POST_CANNOT_DELETE"
    PRIVATE_POST = "POST_PRIVATE_POST"
    POST_LIMIT_EXCEEDED = "POST_POST_LIMIT_EXCEEDED"
    INTERACTION_LIMIT_EXCEEDED = "POST_INTERACTION_LIMIT_EXCEEDED"
    CAMPAIGN_NOT_FOUND = "POST_CAMPAIGN_NOT_FOUND"
    CAMPAIGN_NOT_ACTIVE = "POST_CAMPAIGN_NOT_ACTIVE"


class BusinessError(Exception):
    """A rule violation the caller can act on: stable code, HTTP status, debug message."""

    def __init__(
        self,
        error_code: str,
        message: str,
        status: int = 400,
        errors: list[dict] | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.status = status
        self.errors = errors


class ValidationError(BusinessError):
    def __init__(self, errors: list[dict], message: str = "Validation failed"):
        super().__init__(CommonErrorCode.VALIDATION_ERROR, message, 400, errors)


_STATUS_TO_CODE = {
    400: CommonErrorCode.BAD_REQUEST,
    401: CommonErrorCode.UNAUTHORIZED,
    403: CommonErrorCode.FORBIDDEN,
    404: CommonErrorCode.NOT_FOUND,
    408: CommonErrorCode.TIMEOUT,
    429: CommonErrorCode.TOO_MANY_REQUESTS,
}


def error_response(
    status: int, error_code: str, message: str, errors: list[dict] | None = None
):
    body = {
        "success": False,
        "statusCode": status,
        "error_code": error_code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.path,
        "method": request.method,
    }
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def register_error_handlers(app) -> None:
    @app.errorhandler(BusinessError)
    def _business(e: BusinessError):
        logger.warning(
            "%s %s -> %s %s: %s",
            request.method,
            request.path,
            e.status,
            e.error_code,
            e.message,
        )
        return error_response(e.status, e.error_code, e.message, e.errors)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        status = e.code or 500
        code = _STATUS_TO_CODE.get(status, CommonErrorCode.INTERNAL_SERVER_ERROR)
        if status >= 500:
            logger.error("%s %s -> %s", request.method, request.path, status)
        else:
            logger.warning("%s %s -> %s", request.method, request.path, status)
        return error_response(status, code, e.description or e.name)

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response(
            500, CommonErrorCode.INTERNAL_SERVER_ERROR, "Internal server error"
        )
