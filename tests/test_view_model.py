import itertools

import pytest

from app.catalog.store import FALLBACK_RESOURCES, normalize_record
from app.catalog.view_model import (
    ALL_LABEL_KEY,
    CATEGORIES,
    build_catalog_view,
    catalog_stats,
    category_counts,
    featured_resources,
    filter_resources,
    sort_resources,
)

from .conftest import make_record


@pytest.fixture
def resources():
    return [r.model_copy(deep=True) for r in FALLBACK_RESOURCES]


def titles(items):
    return [r.title for r in items]


def test_default_view_sorts_by_stars(resources):
    view = build_catalog_view(resources)
    stars = [r.stars for r in view.items]
    assert all(a >= b for a, b in zip(stars, stars[1:]))
    assert view.items[0].title == "Tailwind CSS"
    assert view.total == 8
    assert view.sort == "stars"


def test_query_matches_title_case_insensitively():
    pair = [r for r in FALLBACK_RESOURCES if r.title in ("NextAuth.js", "Tailwind CSS")]
    view = build_catalog_view(pair, query="auth")
    assert titles(view.items) == ["NextAuth.js"]


def test_query_matches_description_and_tags(resources):
    assert titles(build_catalog_view(resources, query="SHOPIFY").items) == ["Next.js Commerce"]
    assert titles(build_catalog_view(resources, query="radix").items) == ["Shadcn/ui"]


def test_blank_query_matches_everything(resources):
    assert build_catalog_view(resources, query="   ").total == 8


def test_category_and_featured_filters_combine(resources):
    view = build_catalog_view(resources, category="Database", featured_only=True)
    assert titles(view.items) == ["Prisma"]


def test_category_all_disables_filter(resources):
    assert build_catalog_view(resources, category="All").total == 8
    assert titles(build_catalog_view(resources, category="UI Components", sort="name").items) == [
        "React Hook Form",
        "Shadcn/ui",
    ]


def test_featured_only(resources):
    view = build_catalog_view(resources, featured_only=True)
    assert view.total == 5
    assert all(r.featured for r in view.items)


def test_no_match_is_an_empty_view(resources):
    view = build_catalog_view(resources, query="zzz-nonexistent")
    assert view.items == []
    assert view.total == 0
    assert view.category_counts["All"] == 8


def test_name_sort_is_non_decreasing(resources):
    items = build_catalog_view(resources, sort="name").items
    keys = [r.title.casefold() for r in items]
    assert keys == sorted(keys)
    assert items[0].title == "Framer Motion"


def test_newest_and_oldest(resources):
    newest = build_catalog_view(resources, sort="newest").items
    oldest = build_catalog_view(resources, sort="oldest").items
    assert newest[0].title == "Zustand"
    assert oldest[0].title == "NextAuth.js"
    assert [r.id for r in newest] == [r.id for r in reversed(oldest)]


def test_newest_and_oldest_with_mixed_timestamp_formats():
    mixed = [
        normalize_record(make_record("a", "A", created="2024-03-01T00:00:00Z")),
        normalize_record(make_record("b", "B", created="2024-03-02")),
        normalize_record(make_record("c", "C", created="2024-03-03T00:00:00")),
    ]
    assert all(r.created_at.tzinfo is not None for r in mixed)
    assert [r.id for r in build_catalog_view(mixed, sort="newest").items] == ["c", "b", "a"]
    assert [r.id for r in build_catalog_view(mixed, sort="oldest").items] == ["a", "b", "c"]


def test_sort_ties_keep_incoming_order():
    same = [normalize_record(make_record(str(i), f"Tool {i}", stars=10)) for i in range(5)]
    assert [r.id for r in sort_resources(same, "stars")] == ["0", "1", "2", "3", "4"]
    assert [r.id for r in sort_resources(list(reversed(same)), "stars")] == ["4", "3", "2", "1", "0"]


def test_unknown_sort_key_is_rejected(resources):
    with pytest.raises(ValueError):
        build_catalog_view(resources, sort="popularity")


def test_filter_order_does_not_change_result(resources):
    combined = filter_resources(resources, query="react", category="UI Components", featured_only=False)
    stepwise = filter_resources(filter_resources(resources, category="UI Components"), query="react")
    assert [r.id for r in combined] == [r.id for r in stepwise]


def test_views_are_subsets_and_deterministic(resources):
    ids = {r.id for r in resources}
    before = [r.id for r in resources]
    combos = itertools.product(
        ["", "auth", "css", "zzz"],
        ["All", "Database", "UI Components", "Nope"],
        ["stars", "name", "newest", "oldest"],
        [False, True],
    )
    for query, category, sort, featured in combos:
        first = build_catalog_view(resources, query, category, sort, featured)
        again = build_catalog_view(resources, query, category, sort, featured)
        assert {r.id for r in first.items} <= ids
        assert first == again
    assert [r.id for r in resources] == before


def test_category_counts_cover_unfiltered_input(resources):
    view = build_catalog_view(resources, query="prisma")
    counts = view.category_counts
    assert counts["All"] == 8
    assert counts["UI Components"] == 2
    assert counts["Testing"] == 0
    assert list(counts)[: len(CATEGORIES) + 1] == ["All"] + CATEGORIES
    assert sum(v for k, v in counts.items() if k != "All") == counts["All"]


def test_category_counts_append_unknown_labels():
    items = [
        normalize_record(make_record("1", "A", category="Zebra")),
        normalize_record(make_record("2", "B", category="Templates")),
        normalize_record(make_record("3", "C", category="Database")),
    ]
    counts = category_counts(items)
    assert list(counts)[-2:] == ["Templates", "Zebra"]
    assert counts["Database"] == 1
    assert sum(v for k, v in counts.items() if k != "All") == 3


def test_literal_all_label_does_not_shadow_total(caplog):
    items = [
        normalize_record(make_record("1", "A", category="All")),
        normalize_record(make_record("2", "B", category="Database")),
    ]
    with caplog.at_level("WARNING", logger="app.catalog.view_model"):
        counts = category_counts(items)
    assert counts["All"] == 2
    assert counts[ALL_LABEL_KEY] == 1
    assert sum(v for k, v in counts.items() if k != "All") == counts["All"]
    assert any(ALL_LABEL_KEY in rec.getMessage() for rec in caplog.records)


def test_empty_input():
    view = build_catalog_view([])
    assert view.items == [] and view.total == 0
    assert view.category_counts["All"] == 0


def test_featured_resources_limit(resources):
    top = featured_resources(resources, limit=3)
    assert titles(top) == ["Tailwind CSS", "Prisma", "Framer Motion"]
    assert featured_resources(resources, limit=0) == []


def test_catalog_stats(resources):
    stats = catalog_stats(resources)
    assert stats.resources == 8
    assert stats.categories == 7
    assert stats.featured == 5
    assert stats.stars == sum(r.stars for r in resources)
