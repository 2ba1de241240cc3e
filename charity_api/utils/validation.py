"""
Field-by-field request validation.

A `Payload` wraps a JSON body (or query args), checks each declared field and
collects every problem; `raise_if_invalid()` turns them into a single
COMMON_VALIDATION_ERROR. Values are stored under snake_case names.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from uuid import UUID

from charity_api.errors import BusinessError, ValidationError

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")
_MISSING = object()


def snake(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


def is_uuid(v) -> bool:
    try:
        UUID(str(v))
        return True
    except (TypeError, ValueError):
        return False


def require_uuid(value: str, error_code: str, label: str = "id") -> str:
    if not is_uuid(value):
        raise BusinessError(error_code, f"Invalid {label}: {value}", 400)
    return str(value)


def parse_datetime(value) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class Payload:
    def __init__(self, data: dict | None, coerce: bool = False):
        # query strings arrive as text; coerce numbers/booleans from them
        self.data = data or {}
        self.coerce = coerce
        self.errors: list[dict] = []
        self.values: dict = {}

    def has(self, field: str) -> bool:
        return self._raw(field) is not _MISSING

    def _raw(self, field: str):
        if field not in self.data:
            return _MISSING
        v = self.data.get(field)
        if v is None or (self.coerce and v == ""):
            return _MISSING
        return v

    def fail(self, field: str, message: str) -> None:
        self.errors.append({"field": field, "message": message})

    def _missing(self, field: str, required: bool):
        if required:
            self.fail(field, f"{field} is required")
        return None

    def _store(self, field: str, value):
        self.values[snake(field)] = value
        return value

    def string(
        self,
        field: str,
        required: bool = False,
        min_len: int | None = None,
        max_len: int | None = None,
        allow_empty: bool = False,
    ):
        v = self._raw(field)
        if v is _MISSING:
            return self._missing(field, required)
        if not isinstance(v, str):
            self.fail(field, f"{field} must be a string")
            return None
        v = v.strip()
        if not v and not allow_empty:
            if required:
                self.fail(field, f"{field} must not be empty")
                return None
            return self._store(field, None)
        if min_len is not None and len(v) < min_len:
            self.fail(field, f"{field} must be at least {min_len} characters")
            return None
        if max_len is not None and len(v) > max_len:
            self.fail(field, f"{field} must be at most {max_len} characters")
            return None
        return self._store(field, v)

    def email(self, field: str, required: bool = False):
        v = self.string(field, required=required, max_len=254)
        if v is None:
            return None
        if not EMAIL_RE.match(v):
            self.values.pop(snake(field), None)
            self.fail(field, f"{field} must be a valid email")
            return None
        return self._store(field, v.lower())

    def number(
        self,
        field: str,
        required: bool = False,
        min_value: float | None = None,
        max_value: float | None = None,
        integer: bool = True,
    ):
        v = self._raw(field)
        if v is _MISSING:
            return self._missing(field, required)
        if isinstance(v, str) and self.coerce:
            try:
                v = float(v)
            except ValueError:
                self.fail(field, f"{field} must be a number")
                return None
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            self.fail(field, f"{field} must be a number")
            return None
        if isinstance(v, float) and not math.isfinite(v):
            self.fail(field, f"{field} must be a finite number")
            return None
        if integer:
            if v != int(v):
                self.fail(field, f"{field} must be an integer")
                return None
            v = int(v)
        if min_value is not None and v < min_value:
            self.fail(field, f"{field} must be >= {min_value}")
            return None
        if max_value is not None and v > max_value:
            self.fail(field, f"{field} must be <= {max_value}")
            return None
        return self._store(field, v)

    def boolean(self, field: str, required: bool = False):
        v = self._raw(field)
        if v is _MISSING:
            return self._missing(field, required)
        if isinstance(v, str) and self.coerce:
            low = v.strip().lower()
            if low in ("true", "1", "yes"):
                v = True
            elif low in ("false", "0", "no"):
                v = False
        if not isinstance(v, bool):
            self.fail(field, f"{field} must be a boolean")
            return None
        return self._store(field, v)

    def choice(self, field: str, options, required: bool = False):
        v = self._raw(field)
        if v is _MISSING:
            return self._missing(field, required)
        if v not in options:
            self.fail(field, f"{field} must be one of: {', '.join(options)}")
            return None
        return self._store(field, v)

    def string_list(
        self,
        field: str,
        required: bool = False,
        max_items: int | None = None,
        max_len: int | None = None,
    ):
        v = self._raw(field)
        if v is _MISSING:
            return self._missing(field, required)
        if isinstance(v, str):
            v = [s for s in (p.strip() for p in v.split(",")) if s]
        if not isinstance(v, list) or not all(isinstance(s, str) for s in v):
            self.fail(field, f"{field} must be a list of strings")
            return None
        v = [s.strip() for s in v if s.strip()]
        if max_items is not None and len(v) > max_items:
            self.fail(field, f"{field} must have at most {max_items} items")
            return None
        if max_len is not None and any(len(s) > max_len for s in v):
            self.fail(field, f"each {field} item must be at most {max_len} characters")
            return None
        return self._store(field, v)

    def uuid(self, field: str, required: bool = False):
        v = self._raw(field)
        if v is _MISSING:
            return self._missing(field, required)
        if not is_uuid(v):
            self.fail(field, f"{field} must be a valid id")
            return None
        return self._store(field, str(v))

    def uuid_list(self, field: str, required: bool = False):
        v = self.string_list(field, required=required)
        if v is None:
            return None
        if not all(is_uuid(s) for s in v):
            self.values.pop(snake(field), None)
            self.fail(field, f"{field} must contain valid ids")
            return None
        return v

    def datetime(self, field: str, required: bool = False):
        v = self._raw(field)
        if v is _MISSING:
            return self._missing(field, required)
        dt = parse_datetime(v)
        if dt is None:
            self.fail(field, f"{field} must be an ISO-8601 date")
            return None
        return self._store(field, dt)

    def object(self, field: str, required: bool = False):
        v = self._raw(field)
        if v is _MISSING:
            return self._missing(field, required)
        if not isinstance(v, dict):
            self.fail(field, f"{field} must be an object")
            return None
        return self._store(field, v)

    def object_list(self, field: str, required: bool = False):
        v = self._raw(field)
        if v is _MISSING:
            return self._missing(field, required)
        if not isinstance(v, list) or not all(isinstance(i, dict) for i in v):
            self.fail(field, f"{field} must be a list of objects")
            return None
        return self._store(field, v)

    def raise_if_invalid(self) -> dict:
        if self.errors:
            raise ValidationError(self.errors)
        return self.values


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
