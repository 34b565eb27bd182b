import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp

from core import config
from core.exceptions import UpstreamHTTPError, UpstreamPayloadError
from core.models import Article, QueryParams
from core.utils import date_lower_bound, format_date_param, parse_timestamp, strip_html_to_text

log = logging.getLogger("newsportal.newsapi")

VARIANT_SEARCH = "everything"
VARIANT_TOP_HEADLINES = "top-headlines"


@dataclass(frozen=True)
class UpstreamRequest:
    variant: str
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def is_search(self) -> bool:
        return self.variant == VARIANT_SEARCH


def build_upstream_request(params: QueryParams, now: Optional[datetime] = None) -> UpstreamRequest:
    """Pick the endpoint variant for ``params`` and build its query arguments."""
    if params.query:
        args = {
            "q": params.query,
            "language": config.NEWS_LANGUAGE,
            "page": str(params.page),
            "pageSize": str(params.page_size),
        }
        bound = date_lower_bound(params.date_filter, now)
        if bound is not None:
            args["from"] = format_date_param(bound)
        return UpstreamRequest(VARIANT_SEARCH, args)

    args = {
        "country": config.NEWS_COUNTRY,
        "page": str(params.page),
        "pageSize": str(params.page_size),
    }
    if params.category != "all":
        args["category"] = params.category
    return UpstreamRequest(VARIANT_TOP_HEADLINES, args)


def _source_name(raw: Dict[str, Any]) -> str:
    src = raw.get("source") or {}
    if isinstance(src, dict):
        name = src.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
    return "Неизвестно"


def _optional_str(raw: Dict[str, Any], key: str) -> Optional[str]:
    v = raw.get(key)
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def article_from_payload(raw: Dict[str, Any]) -> Article:
    description = _optional_str(raw, "description")
    if description:
        description = strip_html_to_text(description)
    return Article(
        title=str(raw.get("title") or "Без заголовка"),
        description=description,
        url=_optional_str(raw, "url"),
        image_url=_optional_str(raw, "urlToImage"),
        published_at=parse_timestamp(raw.get("publishedAt")),
        source_name=_source_name(raw),
    )


def articles_from_payload(payload: Dict[str, Any]) -> List[Article]:
    raw_articles = payload.get("articles") or []
    if not isinstance(raw_articles, list):
        raise UpstreamPayloadError("NewsAPI returned a malformed article list")
    out: List[Article] = []
    for raw in raw_articles:
        if not isinstance(raw, dict):
            log.debug("Skipping malformed article entry: %r", raw)
            continue
        out.append(article_from_payload(raw))
    return out


class NewsApiClient:
    """Thin async client for the NewsAPI ``everything`` and ``top-headlines`` endpoints."""

    def __init__(self, api_key: str, base_url: str = "https://newsapi.org/v2",
                 session: Optional[aiohttp.ClientSession] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def url_for(self, request: UpstreamRequest) -> str:
        return f"{self.base_url}/{request.variant}"

    async def fetch(self, request: UpstreamRequest) -> Dict[str, Any]:
        """
        Issue one GET for ``request`` and return the decoded payload.

        Raises UpstreamHTTPError on a non-2xx status and UpstreamPayloadError
        when the payload reports ``status: "error"``. Transport errors propagate.
        """
        sess = await self._ensure_session()
        url = self.url_for(request)
        headers = {"X-Api-Key": self.api_key, "User-Agent": "NewsPortal/1.0"}
        log.info("Fetching from: %s %s", url, request.params)

        async with sess.get(url, params=request.params, headers=headers) as resp:
            if not 200 <= resp.status < 300:
                body = await resp.text()
                log.warning("NewsAPI status=%s body=%s", resp.status, body[:600])
                raise UpstreamHTTPError(resp.status, body)
            payload = await resp.json(content_type=None)

        if not isinstance(payload, dict):
            raise UpstreamPayloadError("NewsAPI returned an unexpected payload")
        if payload.get("status") == "error":
            code = payload.get("code")
            reason = payload.get("message") or code or "NewsAPI returned an error"
            raise UpstreamPayloadError(str(reason), code=code)
        return payload
