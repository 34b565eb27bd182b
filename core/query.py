from typing import Any, Mapping, Optional

from core import config
from core.models import CATEGORIES, DATE_FILTERS, QueryParams


def _to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def clamp_page_size(value: Any) -> int:
    size = _to_int(value)
    if size is None or size < 1:
        return config.DEFAULT_PAGE_SIZE
    return min(size, config.MAX_PAGE_SIZE)


def normalize_page(value: Any) -> int:
    page = _to_int(value)
    if page is None or page < 1:
        return 1
    return page


def normalize_category(value: Any) -> str:
    c = (value or "").strip().lower() if isinstance(value, str) else ""
    return c if c in CATEGORIES else "all"


def normalize_date_filter(value: Any) -> str:
    d = (value or "").strip().lower() if isinstance(value, str) else ""
    return d if d in DATE_FILTERS else "all"


def build_query_params(query: Optional[str] = None, category: Any = None, date_filter: Any = None,
                       page: Any = None, page_size: Any = None) -> QueryParams:
    return QueryParams(
        query=(query or "").strip(),
        category=normalize_category(category),
        date_filter=normalize_date_filter(date_filter),
        page=normalize_page(page),
        page_size=clamp_page_size(page_size),
    )


def params_from_request(args: Mapping[str, str]) -> QueryParams:
    """Build QueryParams from ``/api/news`` query-string arguments."""
    return build_query_params(
        query=args.get("q"),
        category=args.get("category"),
        date_filter=args.get("date"),
        page=args.get("page"),
        page_size=args.get("size"),
    )


def is_demo_requested(args: Mapping[str, str]) -> bool:
    return args.get("demo") == "true"
