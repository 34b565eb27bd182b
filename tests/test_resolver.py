import asyncio
from datetime import timedelta

import aiohttp
import pytest

from conftest import NOW, FakeUpstream, make_payload, raw_article
from core.demo import DEMO_MESSAGE
from core.exceptions import UpstreamHTTPError, UpstreamPayloadError
from core.models import ORIGIN_DEMO, ORIGIN_UPSTREAM, QueryParams, STATUS_SUCCESS
from core.monitoring import UpstreamHealth
from core.newsapi import VARIANT_SEARCH, VARIANT_TOP_HEADLINES
from core.resolver import QueryResolver


def _iso(dt) -> str:
    return dt.isoformat().replace("+00:00", "Z")


# ── demo mode ─────────────────────────────────────────────────

class TestDemoMode:
    @pytest.mark.asyncio
    async def test_skips_upstream(self):
        upstream = FakeUpstream()
        result = await QueryResolver(upstream).resolve(QueryParams(category="business"), demo=True, now=NOW)
        assert upstream.requests == []
        assert result.origin == ORIGIN_DEMO
        assert result.message == DEMO_MESSAGE
        assert [a.title for a in result.articles] == ["Криптовалюты показывают рекордный рост"]

    @pytest.mark.asyncio
    async def test_truncation(self):
        result = await QueryResolver(FakeUpstream()).resolve(QueryParams(page_size=4), demo=True, now=NOW)
        assert len(result.articles) == 4
        assert result.total_results == 4


# ── endpoint selection ────────────────────────────────────────

class TestEndpointSelection:
    @pytest.mark.asyncio
    async def test_query_uses_search(self):
        upstream = FakeUpstream()
        await QueryResolver(upstream).resolve(QueryParams(query="нефть", date_filter="today"), now=NOW)
        req = upstream.requests[0]
        assert req.variant == VARIANT_SEARCH
        assert req.params["from"] == "2026-10-18"

    @pytest.mark.asyncio
    async def test_no_query_uses_top_headlines(self):
        upstream = FakeUpstream()
        await QueryResolver(upstream).resolve(QueryParams(category="sports"), now=NOW)
        req = upstream.requests[0]
        assert req.variant == VARIANT_TOP_HEADLINES
        assert req.params["category"] == "sports"

    @pytest.mark.asyncio
    async def test_exactly_one_call(self):
        upstream = FakeUpstream(error=UpstreamHTTPError(503))
        await QueryResolver(upstream).resolve(QueryParams(), now=NOW)
        assert len(upstream.requests) == 1


# ── success ───────────────────────────────────────────────────

class TestSuccess:
    @pytest.mark.asyncio
    async def test_upstream_result(self):
        upstream = FakeUpstream(make_payload([raw_article(), raw_article("Вторая")], total=57))
        result = await QueryResolver(upstream).resolve(QueryParams(page=3, page_size=2), now=NOW)
        assert result.status == STATUS_SUCCESS
        assert result.origin == ORIGIN_UPSTREAM
        assert result.total_results == 57
        assert result.page == 3
        assert result.page_size == 2
        assert result.message is None
        assert [a.title for a in result.articles] == ["Главная новость", "Вторая"]

    @pytest.mark.asyncio
    async def test_total_falls_back_to_count(self):
        upstream = FakeUpstream(make_payload([raw_article(), raw_article()]))
        result = await QueryResolver(upstream).resolve(QueryParams(), now=NOW)
        assert result.total_results == 2

    @pytest.mark.asyncio
    async def test_empty_is_not_an_error(self):
        upstream = FakeUpstream(make_payload([], total=0))
        result = await QueryResolver(upstream).resolve(QueryParams(), now=NOW)
        assert result.origin == ORIGIN_UPSTREAM
        assert result.articles == []
        assert result.total_results == 0

    @pytest.mark.asyncio
    async def test_top_headlines_date_filter(self):
        articles = [
            raw_article("fresh", _iso(NOW - timedelta(hours=23))),
            raw_article("stale", _iso(NOW - timedelta(hours=25))),
            raw_article("undated", None),
        ]
        upstream = FakeUpstream(make_payload(articles))
        result = await QueryResolver(upstream).resolve(QueryParams(date_filter="today"), now=NOW)
        assert [a.title for a in result.articles] == ["fresh"]
        assert result.total_results == 1

    @pytest.mark.asyncio
    async def test_search_trusts_server_side_bound(self):
        articles = [raw_article("stale", _iso(NOW - timedelta(hours=25)))]
        upstream = FakeUpstream(make_payload(articles))
        result = await QueryResolver(upstream).resolve(QueryParams(query="x", date_filter="today"), now=NOW)
        assert [a.title for a in result.articles] == ["stale"]

    @pytest.mark.asyncio
    async def test_idempotent(self):
        resolver = QueryResolver(FakeUpstream(make_payload(total=1)))
        params = QueryParams(query="x", category="science", page=2)
        assert await resolver.resolve(params, now=NOW) == await resolver.resolve(params, now=NOW)


# ── fallback ──────────────────────────────────────────────────

class TestFallback:
    @pytest.mark.asyncio
    async def test_http_500(self):
        upstream = FakeUpstream(error=UpstreamHTTPError(500))
        result = await QueryResolver(upstream).resolve(QueryParams(), now=NOW)
        assert result.origin == ORIGIN_DEMO
        assert result.status == STATUS_SUCCESS
        assert "500" in result.message

    @pytest.mark.asyncio
    async def test_payload_error(self):
        upstream = FakeUpstream(error=UpstreamPayloadError("rate limited", code="rateLimited"))
        result = await QueryResolver(upstream).resolve(QueryParams(), now=NOW)
        assert result.origin == ORIGIN_DEMO
        assert "rate limited" in result.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        aiohttp.ClientConnectionError("dns"),
        asyncio.TimeoutError(),
        ValueError("bad json"),
        RuntimeError("boom"),
    ])
    async def test_exceptions_never_escape(self, error):
        result = await QueryResolver(FakeUpstream(error=error)).resolve(QueryParams(), now=NOW)
        assert result.origin == ORIGIN_DEMO
        assert "upstream unavailable" in result.message

    @pytest.mark.asyncio
    async def test_malformed_article_list(self):
        health = UpstreamHealth()
        upstream = FakeUpstream({"status": "ok", "totalResults": 1, "articles": 5})
        result = await QueryResolver(upstream, health=health).resolve(QueryParams(), now=NOW)
        assert result.origin == ORIGIN_DEMO
        assert "malformed" in result.message
        assert health.failures == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_without_message(self):
        result = await QueryResolver(FakeUpstream(error=RuntimeError())).resolve(QueryParams(), now=NOW)
        assert result.message.startswith("upstream unavailable (RuntimeError)")

    @pytest.mark.asyncio
    async def test_fallback_uses_requested_category_and_size(self):
        upstream = FakeUpstream(error=UpstreamHTTPError(502))
        result = await QueryResolver(upstream).resolve(QueryParams(category="science", page_size=2), now=NOW)
        assert len(result.articles) == 2
        assert result.articles[0].title == "Новые технологии в медицине: прорыв в лечении рака"

    @pytest.mark.asyncio
    async def test_fallback_caps_at_20(self):
        upstream = FakeUpstream(error=UpstreamHTTPError(502))
        result = await QueryResolver(upstream).resolve(QueryParams(page_size=100), now=NOW)
        assert len(result.articles) == 6


# ── health tracking ───────────────────────────────────────────

class TestHealth:
    @pytest.mark.asyncio
    async def test_failure_then_recovery(self):
        health = UpstreamHealth(alert_threshold=3)
        upstream = FakeUpstream(error=UpstreamHTTPError(500))
        resolver = QueryResolver(upstream, health=health)
        await resolver.resolve(QueryParams(), now=NOW)
        assert health.failures == 1
        assert not health.is_online

        upstream.error = None
        await resolver.resolve(QueryParams(), now=NOW)
        assert health.is_online

    @pytest.mark.asyncio
    async def test_demo_request_does_not_touch_health(self):
        health = UpstreamHealth()
        await QueryResolver(FakeUpstream(), health=health).resolve(QueryParams(), demo=True, now=NOW)
        assert health.get_status() == {"status": "online", "consecutiveFailures": 0}
