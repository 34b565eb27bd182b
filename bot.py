"""Discord front-end: one NewsController per channel, rendered as embeds."""

import logging
from typing import Dict

import discord
from discord.ext import commands

from core import config
from core.controller import HttpNewsSource, NewsController, VIEW_MODES
from core.models import CATEGORIES, DATE_FILTERS
from renderers.discord_render import DiscordRenderer

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
log = logging.getLogger("newsportal.bot")


source = HttpNewsSource(config.NEWS_PROXY_URL)


class NewsBot(commands.Bot):
    async def close(self) -> None:
        await source.close()
        await super().close()


intents = discord.Intents.default()
intents.message_content = True
bot = NewsBot(command_prefix="!", intents=intents)
controllers: Dict[int, NewsController] = {}


def controller_for(channel: discord.abc.Messageable) -> NewsController:
    cid = channel.id
    ctrl = controllers.get(cid)
    if ctrl is None:
        ctrl = NewsController(source, DiscordRenderer(channel))
        controllers[cid] = ctrl
    return ctrl


async def _report_dropped(ctx: commands.Context, loaded: bool) -> None:
    if not loaded:
        await ctx.send("⏳ Загрузка уже идёт, подождите.")


@bot.event
async def on_ready():
    log.info("Connected: %s", bot.user)


@bot.command(name="news")
async def news(ctx: commands.Context, *, text: str = ""):
    ctrl = controller_for(ctx.channel)
    if text:
        ctrl.search(text)
        return
    await _report_dropped(ctx, await ctrl.clear_search())


@bot.command(name="category")
async def category(ctx: commands.Context, value: str = "all"):
    if value not in CATEGORIES:
        await ctx.send(f"Категории: {', '.join(CATEGORIES)}")
        return
    await _report_dropped(ctx, await controller_for(ctx.channel).set_category(value))


@bot.command(name="date")
async def date(ctx: commands.Context, value: str = "all"):
    if value not in DATE_FILTERS:
        await ctx.send(f"Периоды: {', '.join(DATE_FILTERS)}")
        return
    await _report_dropped(ctx, await controller_for(ctx.channel).set_date_filter(value))


@bot.command(name="next")
async def next_page(ctx: commands.Context):
    ctrl = controller_for(ctx.channel)
    if ctrl.busy:
        await _report_dropped(ctx, False)
    elif not await ctrl.next_page():
        await ctx.send("Это последняя страница.")


@bot.command(name="prev")
async def prev_page(ctx: commands.Context):
    ctrl = controller_for(ctx.channel)
    if ctrl.busy:
        await _report_dropped(ctx, False)
    elif not await ctrl.prev_page():
        await ctx.send("Это первая страница.")


@bot.command(name="refresh")
async def refresh(ctx: commands.Context):
    await _report_dropped(ctx, await controller_for(ctx.channel).refresh())


@bot.command(name="view")
async def view(ctx: commands.Context, mode: str = "grid"):
    if mode not in VIEW_MODES:
        await ctx.send(f"Режимы: {', '.join(VIEW_MODES)}")
        return
    await controller_for(ctx.channel).set_view_mode(mode)


@bot.command(name="demo")
async def demo(ctx: commands.Context, value: str = "on"):
    ctrl = controller_for(ctx.channel)
    ctrl.state.demo = value.lower() in ("on", "true", "1")
    ctrl.state.page = 1
    await _report_dropped(ctx, await ctrl.load())


if __name__ == "__main__":
    config.validate_bot_env()
    bot.run(config.DISCORD_TOKEN)
