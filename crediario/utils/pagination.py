"""Pagination helpers shared by list endpoints."""
import math
from typing import Dict, Optional, Tuple


def parse_positive_int(raw: Optional[str], default: int) -> int:
    """Parse a query-string integer, falling back to default when missing, invalid or < 1."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def resolve_page(raw_page: Optional[str], raw_limit: Optional[str],
                 default_limit: int = 10, max_limit: int = 100) -> Tuple[int, int]:
    """Return (page, limit) from raw query values."""
    page = parse_positive_int(raw_page, 1)
    limit = min(parse_positive_int(raw_limit, default_limit), max_limit)
    return page, limit


def page_offset(page: int, limit: int) -> int:
    """Offset of the first row of a page."""
    return (page - 1) * limit


def pagination_meta(total: int, page: int, limit: int) -> Dict[str, int]:
    """
    Pagination block returned next to list results.

    Example:
        pagination_meta(25, 3, 10) -> {'total': 25, 'pages': 3, 'currentPage': 3, 'perPage': 10}
    """
    return {
        'total': total,
        'pages': math.ceil(total / limit) if limit else 0,
        'currentPage': page,
        'perPage': limit,
    }
