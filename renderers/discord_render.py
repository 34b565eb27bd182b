import asyncio
import logging
from typing import List, Optional

import discord

from core import config
from core.models import Article, ViewModel
from core.utils import category_label, format_date_ru, guess_category, truncate_text
from renderers.base import Renderer

log = logging.getLogger("newsportal.discord")

EMBEDS_PER_MESSAGE = 10

NOTIFY_ICONS = {
    "success": "✅",
    "error": "❗",
    "warning": "⚠️",
    "info": "ℹ️",
}


def article_category(article: Article, category: str) -> str:
    if category != "all":
        return category
    return guess_category(article)


def build_article_embed(article: Article, category: str = "all") -> discord.Embed:
    label = category_label(article_category(article, category))
    embed = discord.Embed(
        title=truncate_text(article.title, 256),
        url=article.url or None,
        description=truncate_text(article.description or "", 2000),
        color=config.DISCORD_EMBED_COLOR,
    )
    embed.set_author(name=label)

    meta_bits = [article.source_name]
    if article.published_at:
        meta_bits.append(format_date_ru(article.published_at))
    embed.set_footer(text=" • ".join(meta_bits))

    if article.image_url:
        embed.set_image(url=article.image_url)
    if article.published_at:
        embed.timestamp = article.published_at
    return embed


def build_list_embed(view: ViewModel) -> discord.Embed:
    lines = []
    start = (view.result.page - 1) * view.result.page_size
    for i, a in enumerate(view.articles, start=start + 1):
        title = truncate_text(a.title, 200)
        head = f"[{title}]({a.url})" if a.url else title
        date = format_date_ru(a.published_at)
        tail = f"{a.source_name} • {date}" if date else a.source_name
        lines.append(f"**{i}.** {head}\n{tail}")
    return discord.Embed(
        title=truncate_text(view.title, 256),
        description=truncate_text("\n\n".join(lines), 4096),
        color=config.DISCORD_EMBED_COLOR,
    )


def pagination_line(view: ViewModel) -> str:
    return f"Страница {view.result.page} из {view.total_pages} • Найдено: {view.result.total_results}"


def status_line(view: ViewModel) -> str:
    return "🔴 Демо-режим" if view.api_status == "offline" else "🟢 API активен"


def build_embeds(view: ViewModel, view_mode: str, category: str = "all") -> List[discord.Embed]:
    if view_mode == "list":
        return [build_list_embed(view)]
    return [build_article_embed(a, category) for a in view.articles]


def format_notification(message: str, level: str = "info") -> str:
    return f"{NOTIFY_ICONS.get(level, NOTIFY_ICONS['info'])} {message}"


class DiscordRenderer(Renderer):
    name = "discord"

    def __init__(self, channel: discord.abc.Messageable, send_delay: float = 0.2):
        self.channel = channel
        self.send_delay = send_delay

    async def render(self, view: ViewModel, view_mode: str) -> None:
        embeds = build_embeds(view, view_mode, view.category)
        header = f"**{view.title}**\n{status_line(view)} • {pagination_line(view)}"
        for i in range(0, len(embeds), EMBEDS_PER_MESSAGE):
            chunk = embeds[i:i + EMBEDS_PER_MESSAGE]
            content = header if i == 0 else None
            try:
                await self.channel.send(content=content, embeds=chunk)
            except discord.HTTPException as e:
                log.warning("Discord send failed: %s", e)
                return
            await asyncio.sleep(self.send_delay)

    async def _send_text(self, content: str) -> None:
        try:
            await self.channel.send(content=content)
        except discord.HTTPException as e:
            log.warning("Discord send failed: %s", e)

    async def render_empty(self, view: Optional[ViewModel]) -> None:
        await self._send_text("📭 Новости не найдены. Попробуйте изменить запрос или фильтры.")

    async def notify(self, message: str, level: str = "info") -> None:
        await self._send_text(format_notification(message, level))
