"""
Query resolution: QueryParams in, NewsResult out.

The resolver issues at most one upstream call per invocation and never
raises: upstream errors and exceptions are downgraded to demo data with a
message naming the reason.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Tuple

import aiohttp

from core.demo import DEMO_MESSAGE, build_demo_result
from core.exceptions import UpstreamError
from core.models import Article, NewsResult, QueryParams, ORIGIN_UPSTREAM, STATUS_SUCCESS
from core.monitoring import UpstreamHealth
from core.newsapi import UpstreamRequest, articles_from_payload, build_upstream_request
from core.utils import filter_by_date

log = logging.getLogger("newsportal.resolver")

UNAVAILABLE_REASON = "upstream unavailable"


class Upstream(Protocol):
    async def fetch(self, request: UpstreamRequest) -> Dict[str, Any]:  # pragma: no cover - interface
        ...


def fallback_message(reason: str) -> str:
    return f"{reason}. Показаны демо-данные."


class QueryResolver:
    def __init__(self, upstream: Upstream, health: Optional[UpstreamHealth] = None):
        self.upstream = upstream
        self.health = health

    def _fallback(self, params: QueryParams, reason: str, now: datetime) -> NewsResult:
        if self.health is not None:
            self.health.record_failure(reason)
        return build_demo_result(params.category, params.page_size,
                                 message=fallback_message(reason), now=now)

    async def resolve(self, params: QueryParams, demo: bool = False,
                      now: Optional[datetime] = None) -> NewsResult:
        now = now or datetime.now(timezone.utc)

        if demo:
            log.info("Demo mode requested (category=%s).", params.category)
            return build_demo_result(params.category, params.page_size, message=DEMO_MESSAGE, now=now)

        request = build_upstream_request(params, now)
        try:
            payload = await self.upstream.fetch(request)
            articles, total = self._normalise(payload, request, params, now)
        except UpstreamError as e:
            log.warning("NewsAPI error, serving demo data: %s", e.reason)
            return self._fallback(params, e.reason, now)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            log.warning("NewsAPI unreachable, serving demo data: %s", e)
            return self._fallback(params, f"{UNAVAILABLE_REASON} ({e.__class__.__name__})", now)
        except ValueError as e:
            log.warning("NewsAPI returned invalid JSON, serving demo data: %s", e)
            return self._fallback(params, f"{UNAVAILABLE_REASON} (invalid JSON)", now)
        except Exception as e:
            log.exception("Unexpected error while querying NewsAPI")
            return self._fallback(params, f"{UNAVAILABLE_REASON} ({e.__class__.__name__})", now)

        if self.health is not None:
            self.health.record_success()

        return NewsResult(
            status=STATUS_SUCCESS,
            origin=ORIGIN_UPSTREAM,
            total_results=total,
            articles=articles,
            page=params.page,
            page_size=params.page_size,
        )

    @staticmethod
    def _normalise(payload: Dict[str, Any], request: UpstreamRequest, params: QueryParams,
                   now: datetime) -> Tuple[List[Article], int]:
        articles = articles_from_payload(payload)
        if params.date_filter != "all" and not request.is_search:
            articles = filter_by_date(articles, params.date_filter, now)

        total = payload.get("totalResults")
        if not isinstance(total, int) or isinstance(total, bool) or total < 0:
            total = len(articles)
        return articles, total
