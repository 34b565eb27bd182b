"""Centralized configuration for NewsPortal."""

import os
import logging

log = logging.getLogger("newsportal.config")

# =========================
# Upstream (NewsAPI)
# =========================
NEWS_API_KEY: str = os.environ.get("NEWS_API_KEY", "")
NEWS_API_BASE_URL: str = os.getenv("NEWS_API_BASE_URL", "https://newsapi.org/v2")
NEWS_COUNTRY: str = os.getenv("NEWS_COUNTRY", "ru")
NEWS_LANGUAGE: str = os.getenv("NEWS_LANGUAGE", "ru")

# =========================
# Proxy server
# =========================
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8080"))

# =========================
# Paging
# =========================
DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "12"))
MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))
DEMO_MAX_ARTICLES: int = int(os.getenv("DEMO_MAX_ARTICLES", "20"))

# =========================
# Controller
# =========================
SEARCH_DEBOUNCE_SECONDS: float = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.5"))
NEWS_PROXY_URL: str = os.getenv("NEWS_PROXY_URL", "http://localhost:8080/api/news")

# =========================
# Monitoring
# =========================
HEALTH_ALERT_THRESHOLD: int = int(os.getenv("HEALTH_ALERT_THRESHOLD", "5"))

# =========================
# Discord front-end
# =========================
DISCORD_TOKEN: str = os.environ.get("DISCORD_TOKEN", "")
DISCORD_EMBED_COLOR: int = 0x1F6FEB


def validate_required_env() -> None:
    """Warn about missing settings. Call at startup."""
    if not NEWS_API_KEY:
        log.warning("NEWS_API_KEY is not set: upstream calls will fail and demo data will be served.")


def validate_bot_env() -> None:
    """Validate that the Discord front-end can start."""
    if not DISCORD_TOKEN:
        raise EnvironmentError("Missing required environment variable: DISCORD_TOKEN")
