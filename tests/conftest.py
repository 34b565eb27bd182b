from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_payload(articles: Optional[List[Dict[str, Any]]] = None, total: Optional[int] = None) -> Dict[str, Any]:
    articles = articles if articles is not None else [raw_article()]
    payload: Dict[str, Any] = {"status": "ok", "articles": articles}
    if total is not None:
        payload["totalResults"] = total
    return payload


def raw_article(title: str = "Главная новость", published_at: Optional[str] = "2026-10-19T08:00:00Z",
                **overrides: Any) -> Dict[str, Any]:
    raw = {
        "title": title,
        "description": "Описание новости",
        "url": "https://example.com/news",
        "urlToImage": "https://example.com/news.jpg",
        "publishedAt": published_at,
        "source": {"id": None, "name": "РИА"},
    }
    raw.update(overrides)
    return raw


class FakeNewsApi:
    """Records requests and answers with a configurable status/body."""

    def __init__(self) -> None:
        self.requests: List[web.Request] = []
        self.status = 200
        self.body: Any = make_payload(total=1)

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append(request)
        if isinstance(self.body, str):
            return web.Response(status=self.status, text=self.body, content_type="application/json")
        return web.json_response(self.body, status=self.status)


@pytest.fixture
def fake_newsapi() -> FakeNewsApi:
    return FakeNewsApi()


@pytest_asyncio.fixture
async def newsapi_server(fake_newsapi):
    app = web.Application()
    app.router.add_get("/v2/everything", fake_newsapi.handle)
    app.router.add_get("/v2/top-headlines", fake_newsapi.handle)
    server = TestServer(app)
    await server.start_server()
    yield server
    await server.close()


class FakeUpstream:
    """In-memory stand-in for NewsApiClient."""

    def __init__(self, payload: Any = None, error: Optional[Exception] = None):
        self.payload = payload if payload is not None else make_payload(total=1)
        self.error = error
        self.requests: List[Any] = []

    async def fetch(self, request: Any) -> Dict[str, Any]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.payload
