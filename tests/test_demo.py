import pytest
from datetime import datetime, timedelta, timezone

from core.demo import (
    CATEGORY_KEYWORDS,
    DEMO_MESSAGE,
    build_demo_result,
    demo_catalog,
    filter_demo_articles,
)
from core.models import ORIGIN_DEMO, STATUS_SUCCESS

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _matching_count(category):
    keywords = CATEGORY_KEYWORDS.get(category, [])
    if not keywords:
        return len(demo_catalog(NOW))
    return sum(
        1 for a in demo_catalog(NOW)
        if any(k.lower() in a.title.lower() or k.lower() in (a.description or "").lower() for k in keywords)
    )


# ── catalog ───────────────────────────────────────────────────

class TestDemoCatalog:
    def test_six_articles(self):
        assert len(demo_catalog(NOW)) == 6

    def test_timestamps_relative_to_now(self):
        dates = [a.published_at for a in demo_catalog(NOW)]
        assert dates == [NOW - timedelta(days=i) for i in range(6)]


# ── filtering ─────────────────────────────────────────────────

class TestFilterDemoArticles:
    def test_all_keeps_catalog_order(self):
        titles = [a.title for a in filter_demo_articles("all", 12, NOW)]
        assert titles == [a.title for a in demo_catalog(NOW)]

    def test_unknown_category_same_as_all(self):
        assert filter_demo_articles("politics", 12, NOW) == filter_demo_articles("all", 12, NOW)

    def test_business_keyword_case_insensitive(self):
        titles = [a.title for a in filter_demo_articles("business", 12, NOW)]
        assert titles == ["Криптовалюты показывают рекордный рост"]

    def test_science_matches_description(self):
        titles = [a.title for a in filter_demo_articles("science", 12, NOW)]
        assert "Запуск новой космической миссии к Марсу" in titles
        # "Ученые" appears only in the medicine article's description
        assert "Новые технологии в медицине: прорыв в лечении рака" in titles

    def test_entertainment_has_no_match(self):
        assert filter_demo_articles("entertainment", 12, NOW) == []

    @pytest.mark.parametrize("category", ["all", "business", "technology", "sports", "science", "health"])
    @pytest.mark.parametrize("size", [1, 2, 5, 12, 50, 100])
    def test_truncation(self, category, size):
        result = filter_demo_articles(category, size, NOW)
        assert len(result) == min(size, 20, _matching_count(category))


# ── result ────────────────────────────────────────────────────

class TestBuildDemoResult:
    def test_shape(self):
        result = build_demo_result("all", 3, now=NOW)
        assert result.status == STATUS_SUCCESS
        assert result.origin == ORIGIN_DEMO
        assert result.total_results == 3
        assert len(result.articles) == 3
        assert result.page == 1
        assert result.page_size == 3
        assert result.message == DEMO_MESSAGE

    def test_custom_message(self):
        assert build_demo_result("all", 3, message="boom", now=NOW).message == "boom"

    def test_empty_match_keeps_positive_page_size(self):
        result = build_demo_result("entertainment", 12, now=NOW)
        assert result.total_results == 0
        assert result.page_size == 1

    def test_wire_form(self):
        data = build_demo_result("sports", 12, now=NOW).to_dict()
        assert data["source"] == "demo"
        assert data["totalResults"] == 1
        article = data["articles"][0]
        assert article["source"] == {"name": "Спортивные новости"}
        assert article["publishedAt"] == "2026-10-16T12:00:00Z"
        assert article["urlToImage"].startswith("https://images.unsplash.com/")
