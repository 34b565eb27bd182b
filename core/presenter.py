import math
from typing import Optional

from core.models import NewsResult, QueryParams, ViewModel
from core.utils import category_label


def total_pages(total_results: int, page_size: int) -> int:
    if page_size < 1:
        page_size = 1
    return max(1, math.ceil(max(0, total_results) / page_size))


def view_title(params: Optional[QueryParams]) -> str:
    if params is not None and params.query:
        return f'Поиск: "{params.query}"'
    if params is not None and params.category != "all":
        return category_label(params.category)
    return "Последние новости"


def present(result: NewsResult, page_size_used: int, params: Optional[QueryParams] = None) -> ViewModel:
    """Derive pagination metadata for ``result``. Pure."""
    pages = total_pages(result.total_results, page_size_used)
    return ViewModel(
        result=result,
        total_pages=pages,
        title=view_title(params),
        has_prev=result.page > 1,
        has_next=result.page < pages,
        category=params.category if params is not None else "all",
    )
