"""
HTTP surface: ``GET /api/news`` proxies NewsAPI with a demo fallback.

Upstream failures never surface as non-200: the resolver downgrades them to
demo data with an explanatory message.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Optional

from aiohttp import web

from core import config
from core.monitoring import UpstreamHealth
from core.newsapi import NewsApiClient
from core.query import is_demo_requested, params_from_request
from core.resolver import QueryResolver, Upstream

log = logging.getLogger("newsportal.api")

RESOLVER_KEY = web.AppKey("resolver", QueryResolver)
HEALTH_KEY = web.AppKey("health", UpstreamHealth)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False)


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    try:
        resp = await handler(request)
    except web.HTTPException as ex:
        ex.headers.update(CORS_HEADERS)
        raise
    resp.headers.update(CORS_HEADERS)
    return resp


def _preflight_or_reject(request: web.Request) -> Optional[web.Response]:
    if request.method == "OPTIONS":
        return web.Response(status=200)
    if request.method != "GET":
        return web.json_response({"error": "Method not allowed"}, status=405)
    return None


async def handle_news(request: web.Request) -> web.Response:
    early = _preflight_or_reject(request)
    if early is not None:
        return early

    args = request.query
    params = params_from_request(args)
    demo = is_demo_requested(args)
    log.info("GET /api/news q=%r category=%s date=%s page=%d size=%d demo=%s",
             params.query, params.category, params.date_filter, params.page, params.page_size, demo)

    result = await request.app[RESOLVER_KEY].resolve(params, demo=demo)
    return web.json_response(result.to_dict(), dumps=_dumps)


async def handle_health(request: web.Request) -> web.Response:
    early = _preflight_or_reject(request)
    if early is not None:
        return early
    return web.json_response(request.app[HEALTH_KEY].get_status())


def create_app(upstream: Optional[Upstream] = None, health: Optional[UpstreamHealth] = None) -> web.Application:
    """Build the proxy application. Without ``upstream`` a NewsAPI client is created and closed with the app."""
    health = health or UpstreamHealth(alert_threshold=config.HEALTH_ALERT_THRESHOLD)
    app = web.Application(middlewares=[cors_middleware])

    if upstream is None:
        client = NewsApiClient(config.NEWS_API_KEY, config.NEWS_API_BASE_URL)

        async def _close_client(_app: web.Application) -> None:
            await client.close()

        app.on_cleanup.append(_close_client)
        upstream = client

    app[RESOLVER_KEY] = QueryResolver(upstream, health=health)
    app[HEALTH_KEY] = health
    app.router.add_route("*", "/api/news", handle_news)
    app.router.add_route("*", "/api/health", handle_health)
    return app
