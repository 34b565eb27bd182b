"""Built-in article catalog served when the news API is unavailable or demo mode is asked for."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from core import config
from core.models import Article, NewsResult, ORIGIN_DEMO, STATUS_SUCCESS
from core.utils import contains_any

DEMO_MESSAGE = "Демо-данные (NewsAPI может быть недоступен)"

# (title, description, url, image, age in days, source)
_CATALOG = [
    (
        "Новые технологии в медицине: прорыв в лечении рака",
        "Ученые разработали инновационный метод лечения онкологических заболеваний с использованием наночастиц.",
        "https://example.com/tech-medicine",
        "https://images.unsplash.com/photo-1559757148-5c350d0d3c56?w=600&h=400&fit=crop",
        0,
        "Медицинские новости",
    ),
    (
        "Криптовалюты показывают рекордный рост",
        "Рынок цифровых активов вырос на 30% за последнюю неделю, Bitcoin обновил исторический максимум.",
        "https://example.com/crypto-growth",
        "https://images.unsplash.com/photo-1620336655055-bd87c5d1d73f?w=600&h=400&fit=crop",
        1,
        "Финансовый вестник",
    ),
    (
        "Запуск новой космической миссии к Марсу",
        "Ракета-носитель успешно вывела на орбиту исследовательский зонд для изучения поверхности Марса.",
        "https://example.com/space-mission",
        "https://images.unsplash.com/photo-1446776653964-20c1d3a81b06?w=600&h=400&fit=crop",
        2,
        "Космические исследования",
    ),
    (
        "Российские спортсмены завоевали золото на чемпионате мира",
        "Наши атлеты показали лучший результат в финальных соревнованиях по легкой атлетике.",
        "https://example.com/sports-gold",
        "https://images.unsplash.com/photo-1461896836934-ffe607ba8211?w=600&h=400&fit=crop",
        3,
        "Спортивные новости",
    ),
    (
        "Искусственный интеллект создает реалистичные изображения",
        "Новая нейросеть способна генерировать фотореалистичные изображения по текстовому описанию.",
        "https://example.com/ai-images",
        "https://images.unsplash.com/photo-1677442136019-21780ecad995?w=600&h=400&fit=crop",
        4,
        "Технологии будущего",
    ),
    (
        "Экологи бьют тревогу: уровень океана продолжает расти",
        "Новые исследования показывают ускорение темпов подъема уровня мирового океана.",
        "https://example.com/climate-change",
        "https://images.unsplash.com/photo-1505142468610-359e7d316be0?w=600&h=400&fit=crop",
        5,
        "Экологический мониторинг",
    ),
]

CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "business": ["Криптовалюты", "рынок", "финанс"],
    "technology": ["технологии", "искусственный", "нейросеть"],
    "sports": ["спортсмены", "чемпионат", "золото"],
    "science": ["космической", "исследован", "ученые"],
    "health": ["медицине", "лечении", "заболеван"],
    "entertainment": ["кино", "музык", "культура"],
}


def demo_catalog(now: Optional[datetime] = None) -> List[Article]:
    now = now or datetime.now(timezone.utc)
    return [
        Article(
            title=title,
            description=description,
            url=url,
            image_url=image,
            published_at=now - timedelta(days=age),
            source_name=source,
        )
        for title, description, url, image, age, source in _CATALOG
    ]


def filter_demo_articles(category: str, size: int, now: Optional[datetime] = None) -> List[Article]:
    """Keep catalog entries matching the category keywords, then cap at ``min(size, DEMO_MAX_ARTICLES)``."""
    articles = demo_catalog(now)
    keywords = CATEGORY_KEYWORDS.get(category or "all", [])
    if keywords:
        articles = [
            a for a in articles
            if contains_any(a.title, keywords) or contains_any(a.description or "", keywords)
        ]
    limit = max(0, min(size, config.DEMO_MAX_ARTICLES))
    return articles[:limit]


def build_demo_result(category: str, size: int, message: str = DEMO_MESSAGE,
                      now: Optional[datetime] = None) -> NewsResult:
    articles = filter_demo_articles(category, size, now)
    return NewsResult(
        status=STATUS_SUCCESS,
        origin=ORIGIN_DEMO,
        total_results=len(articles),
        articles=articles,
        page=1,
        page_size=max(1, len(articles)),
        message=message,
    )
