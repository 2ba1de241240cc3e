"""Success envelope and JSON encoding for API responses."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

from flask import jsonify, request
from flask.json.provider import DefaultJSONProvider

# never serialized, whatever the resource
HIDDEN_FIELDS = frozenset({"password_hash", "refresh_token_hash", "refresh_token_expires_at"})


class ApiJSONProvider(DefaultJSONProvider):
    sort_keys = False

    @staticmethod
    def default(o):
        if isinstance(o, datetime):
            if o.tzinfo is None:
                o = o.replace(tzinfo=timezone.utc)
            return o.isoformat()
        if isinstance(o, date):
            return o.isoformat()
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, Decimal):
            return int(o) if o == o.to_integral_value() else float(o)
        return DefaultJSONProvider.default(o)


def camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def camelize(value):
    """Recursively rename snake_case dict keys to camelCase."""
    if isinstance(value, dict):
        return {
            camel(k) if isinstance(k, str) else k: camelize(v)
            for k, v in value.items()
            if k not in HIDDEN_FIELDS
        }
    if isinstance(value, (list, tuple)):
        return [camelize(v) for v in value]
    return value


def _message(method: str, status: int) -> str:
    if method == "POST":
        return "Created successfully" if status == 201 else "Success"
    if method in ("PUT", "PATCH"):
        return "Updated successfully"
    if method == "DELETE":
        return "Deleted successfully"
    return "Fetched successfully"


def respond(data=None, status: int = 200):
    body = {
        "data": camelize(data),
        "statusCode": status,
        "message": _message(request.method, status),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return jsonify(body), status
