import math

from charity_api.utils.validation import Payload


def parse_pagination(p: Payload, default_limit: int = 10, max_limit: int = 100):
    """Read page/limit from a query Payload; returns (page, limit, offset)."""
    page = p.number("page", min_value=1) or 1
    limit = p.number("limit", min_value=1, max_value=max_limit) or default_limit
    return page, limit, (page - 1) * limit


def paginate(items: list, total: int, page: int, limit: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "items": items,
        "pagination": {
            "current": page,
            "page_size": limit,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }
