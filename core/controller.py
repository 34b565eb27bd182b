"""
Caller-side driver for the resolver/presenter pair.

State machine: idle -> loading -> rendered | empty | error, re-entered on every
page or filter change. At most one load is in flight; a trigger arriving while
busy is dropped, not queued. Search text is debounced.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import aiohttp

from core import config
from core.models import NewsResult, QueryParams, ViewModel, ORIGIN_DEMO, STATUS_SUCCESS, WIRE_ORIGINS
from core.newsapi import articles_from_payload
from core.presenter import present
from core.query import build_query_params, normalize_category, normalize_date_filter
from core.resolver import QueryResolver
from renderers.base import Renderer

log = logging.getLogger("newsportal.controller")

PHASE_IDLE = "idle"
PHASE_LOADING = "loading"
PHASE_RENDERED = "rendered"
PHASE_EMPTY = "empty"
PHASE_ERROR = "error"

VIEW_MODES = ("grid", "list")


class NewsSource(Protocol):
    async def get(self, params: QueryParams, demo: bool = False) -> NewsResult:  # pragma: no cover - interface
        ...


class ResolverSource:
    """In-process source: calls the resolver directly."""

    def __init__(self, resolver: QueryResolver):
        self.resolver = resolver

    async def get(self, params: QueryParams, demo: bool = False) -> NewsResult:
        return await self.resolver.resolve(params, demo=demo)


def result_from_wire(data: Dict[str, Any]) -> NewsResult:
    """Rebuild a NewsResult from the ``/api/news`` JSON body."""
    wire_to_origin = {v: k for k, v in WIRE_ORIGINS.items()}
    articles = articles_from_payload(data)
    return NewsResult(
        status=str(data.get("status") or "error"),
        origin=wire_to_origin.get(data.get("source"), ORIGIN_DEMO),
        total_results=int(data.get("totalResults") or 0),
        articles=articles,
        page=int(data.get("page") or 1),
        page_size=int(data.get("pageSize") or 1),
        message=data.get("message"),
    )


class HttpNewsSource:
    """Remote source: GETs the proxy endpoint."""

    def __init__(self, url: str = config.NEWS_PROXY_URL, session: Optional[aiohttp.ClientSession] = None):
        self.url = url
        self._session = session

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def get(self, params: QueryParams, demo: bool = False) -> NewsResult:
        query = {"page": str(params.page), "size": str(params.page_size)}
        if params.query:
            query["q"] = params.query
        if params.category != "all":
            query["category"] = params.category
        if params.date_filter != "all":
            query["date"] = params.date_filter
        if demo:
            query["demo"] = "true"

        sess = await self._ensure_session()
        async with sess.get(self.url, params=query) as resp:
            data = await resp.json(content_type=None)
        if not isinstance(data, dict):
            raise ValueError("proxy returned a non-object body")
        return result_from_wire(data)


@dataclass
class ControllerState:
    query: str = ""
    category: str = "all"
    date_filter: str = "all"
    page: int = 1
    page_size: int = 12
    view_mode: str = "grid"
    demo: bool = False
    api_status: str = "loading"
    phase: str = PHASE_IDLE
    total_results: int = 0
    total_pages: int = 1


class NewsController:
    def __init__(self, source: NewsSource, renderer: Renderer,
                 page_size: int = config.DEFAULT_PAGE_SIZE,
                 debounce_seconds: float = config.SEARCH_DEBOUNCE_SECONDS):
        self.source = source
        self.renderer = renderer
        self.debounce_seconds = debounce_seconds
        self.state = ControllerState(page_size=page_size)
        self.view: Optional[ViewModel] = None
        self.last_task: Optional["asyncio.Future[bool]"] = None
        self._busy = False
        self._debounce_handle: Optional[asyncio.TimerHandle] = None

    @property
    def busy(self) -> bool:
        return self._busy

    def snapshot(self) -> QueryParams:
        s = self.state
        return build_query_params(s.query, s.category, s.date_filter, s.page, s.page_size)

    async def load(self) -> bool:
        """Run one load cycle. Returns False when dropped because another load is in flight."""
        if self._busy:
            log.debug("Load dropped: a request is already in flight.")
            return False

        self._busy = True
        self.state.phase = PHASE_LOADING
        params = self.snapshot()
        try:
            try:
                result = await self.source.get(params, demo=self.state.demo)
            except Exception as e:
                log.warning("News loading failed: %s", e)
                self.state.phase = PHASE_ERROR
                await self.renderer.notify("Ошибка загрузки новостей", "error")
                await self.renderer.render_empty(None)
                return True
            await self._handle_result(result, params)
            return True
        finally:
            self._busy = False

    async def _handle_result(self, result: NewsResult, params: QueryParams) -> None:
        view = present(result, params.page_size, params)
        self.state.api_status = view.api_status

        if result.status == STATUS_SUCCESS and result.articles:
            self.view = view
            self.state.total_results = result.total_results
            self.state.total_pages = view.total_pages
            self.state.phase = PHASE_RENDERED
            await self.renderer.render(view, self.state.view_mode)
            if result.message:
                level = "warning" if result.origin == ORIGIN_DEMO else "info"
                await self.renderer.notify(result.message, level)
        else:
            self.view = None
            self.state.phase = PHASE_EMPTY
            await self.renderer.render_empty(view)

    # ── triggers ───────────────────────────────────────────────

    def search(self, text: str) -> None:
        """Debounced search: only the last text typed within the quiet period is loaded."""
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(self.debounce_seconds, self._fire_search, text)

    def _fire_search(self, text: str) -> None:
        self._debounce_handle = None
        self.state.query = (text or "").strip()
        self.state.page = 1
        self.last_task = asyncio.ensure_future(self.load())

    async def clear_search(self) -> bool:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None
        self.state.query = ""
        self.state.page = 1
        return await self.load()

    async def set_category(self, category: str) -> bool:
        self.state.category = normalize_category(category)
        self.state.page = 1
        return await self.load()

    async def set_date_filter(self, date_filter: str) -> bool:
        self.state.date_filter = normalize_date_filter(date_filter)
        self.state.page = 1
        return await self.load()

    async def refresh(self) -> bool:
        self.state.page = 1
        loaded = await self.load()
        if loaded:
            await self.renderer.notify("Новости обновлены", "success")
        return loaded

    async def next_page(self) -> bool:
        if self._busy or self.state.page >= self.state.total_pages:
            return False
        self.state.page += 1
        return await self.load()

    async def prev_page(self) -> bool:
        if self._busy or self.state.page <= 1:
            return False
        self.state.page -= 1
        return await self.load()

    async def set_view_mode(self, mode: str) -> None:
        if mode not in VIEW_MODES:
            raise ValueError(f"unknown view mode: {mode}")
        self.state.view_mode = mode
        if self.view is not None and self.state.phase == PHASE_RENDERED:
            await self.renderer.render(self.view, mode)
