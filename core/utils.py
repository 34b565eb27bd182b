import re
import html
import calendar
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

from bs4 import BeautifulSoup

from core.models import Article

CATEGORY_LABELS = {
    "business": "Бизнес",
    "technology": "Технологии",
    "sports": "Спорт",
    "science": "Наука",
    "health": "Здоровье",
    "entertainment": "Развлечения",
    "general": "Общее",
}

# Keyword stems used to label an article when no category filter is active.
_CATEGORY_HINTS = {
    "business": ["бизнес", "финанс", "рынок", "экономик"],
    "technology": ["технолог", "ии", "компьютер", "гаджет"],
    "sports": ["спорт", "футбол", "матч", "соревнован"],
    "science": ["наук", "исследован", "космос", "учен"],
    "health": ["медицин", "здоров", "лечен", "врач"],
    "entertainment": ["кино", "музык", "шоу", "развлечен"],
}

_MONTHS_RU = [
    "января", "февраля", "марта", "апреля", "мая", "июня",
    "июля", "августа", "сентября", "октября", "ноября", "декабря",
]


def truncate_text(text: str, limit: int) -> str:
    text = text or ""
    if len(text) > limit:
        return text[: max(0, limit - 3)] + "..."
    return text


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    t = (text or "").lower()
    return any(k.lower() in t for k in keywords)


def strip_html_to_text(raw_html: str) -> str:
    raw_html = raw_html or ""
    if "<" not in raw_html:
        return html.unescape(raw_html).strip()
    text = BeautifulSoup(raw_html, "html.parser").get_text("\n")
    text = html.unescape(text)
    text = re.sub(r"\n{3,}", "\n\n", text).strip()
    return text


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp (``Z`` suffix allowed) into an aware UTC datetime."""
    if not value or not isinstance(value, str):
        return None
    s = value.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _months_back(now: datetime, months: int) -> datetime:
    month_index = now.month - 1 - months
    year = now.year + month_index // 12
    month = month_index % 12 + 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def date_lower_bound(date_filter: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Instant before which articles are filtered out, or None for "all"/unknown.

    today -> 24 hours back, week -> 7 days back, month -> 1 calendar month back.
    """
    now = now or datetime.now(timezone.utc)
    if date_filter == "today":
        return now - timedelta(days=1)
    if date_filter == "week":
        return now - timedelta(days=7)
    if date_filter == "month":
        return _months_back(now, 1)
    return None


def format_date_param(bound: datetime) -> str:
    """UTC date-only form (YYYY-MM-DD) used for the upstream ``from`` parameter."""
    return bound.astimezone(timezone.utc).date().isoformat()


def filter_by_date(articles: Sequence[Article], date_filter: str,
                   now: Optional[datetime] = None) -> List[Article]:
    bound = date_lower_bound(date_filter, now)
    if bound is None:
        return list(articles)
    return [a for a in articles if a.published_at is not None and a.published_at >= bound]


def guess_category(article: Article) -> str:
    text = f"{article.title} {article.description or ''}".lower()
    for category, stems in _CATEGORY_HINTS.items():
        if any(stem in text for stem in stems):
            return category
    return "general"


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, CATEGORY_LABELS["general"])


def format_date_ru(dt: Optional[datetime]) -> str:
    if not dt:
        return ""
    return f"{dt.day} {_MONTHS_RU[dt.month - 1]} {dt.year}"
