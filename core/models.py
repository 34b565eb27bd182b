from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Tuple

CATEGORIES: Tuple[str, ...] = (
    "all", "business", "technology", "sports", "science", "health", "entertainment",
)
DATE_FILTERS: Tuple[str, ...] = ("all", "today", "week", "month")

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"

ORIGIN_UPSTREAM = "upstream"
ORIGIN_DEMO = "demo"

# Wire value of the "source" field for each origin.
WIRE_ORIGINS: Dict[str, str] = {ORIGIN_UPSTREAM: "newsapi", ORIGIN_DEMO: "demo"}


@dataclass(frozen=True)
class QueryParams:
    query: str = ""
    category: str = "all"
    date_filter: str = "all"
    page: int = 1
    page_size: int = 12


@dataclass(frozen=True)
class Article:
    title: str
    source_name: str
    description: Optional[str] = None
    url: Optional[str] = None
    image_url: Optional[str] = None
    published_at: Optional[datetime] = None  # UTC

    def to_dict(self) -> Dict[str, Any]:
        published = None
        if self.published_at:
            published = self.published_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
        return {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "urlToImage": self.image_url,
            "publishedAt": published,
            "source": {"name": self.source_name},
        }


@dataclass(frozen=True)
class NewsResult:
    status: str
    origin: str
    total_results: int
    articles: List[Article] = field(default_factory=list)
    page: int = 1
    page_size: int = 12
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "status": self.status,
            "source": WIRE_ORIGINS.get(self.origin, self.origin),
            "totalResults": self.total_results,
            "articles": [a.to_dict() for a in self.articles],
            "page": self.page,
            "pageSize": self.page_size,
        }
        if self.message:
            out["message"] = self.message
        return out


@dataclass(frozen=True)
class ViewModel:
    result: NewsResult
    total_pages: int
    title: str
    has_prev: bool
    has_next: bool
    category: str = "all"

    @property
    def articles(self) -> List[Article]:
        return self.result.articles

    @property
    def is_empty(self) -> bool:
        return not self.result.articles

    @property
    def api_status(self) -> str:
        return "offline" if self.result.origin == ORIGIN_DEMO else "online"
