"""
Filtering, sorting and counting for catalogue views.

Every page that lists resources (browse, category sidebar, home page)
goes through ``build_catalog_view()``. It is a pure function of its
inputs: the same resources and selections always give the same view,
and the input list is never mutated.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from .schemas import ALL_CATEGORIES, CatalogStats, CatalogView, Resource

logger = logging.getLogger(__name__)

# Count key for resources whose category label is literally "All".
ALL_LABEL_KEY = "All (label)"

# Categories listed in the browse sidebar, in display order.
CATEGORIES = [
    "UI Components",
    "Authentication",
    "Database",
    "E-commerce",
    "Analytics",
    "Styling",
    "Animation",
    "Backend",
    "Testing",
    "Deployment",
]

SORT_KEYS = ("stars", "name", "newest", "oldest")


def _normalize(s: Optional[str]) -> str:
    return (s or "").strip().casefold()


def _matches_query(resource: Resource, needle: str) -> bool:
    if needle in resource.title.casefold() or needle in resource.description.casefold():
        return True
    return any(needle in tag.casefold() for tag in resource.tags)


def _title_key(resource: Resource):
    # Casefold first so "shadcn" and "Shadcn" sit together; the raw title
    # breaks ties between them deterministically.
    return (resource.title.casefold(), resource.title)


_SORTERS: Dict[str, Callable[[List[Resource]], None]] = {
    "stars": lambda items: items.sort(key=lambda r: r.stars, reverse=True),
    "name": lambda items: items.sort(key=_title_key),
    "newest": lambda items: items.sort(key=lambda r: r.created_at, reverse=True),
    "oldest": lambda items: items.sort(key=lambda r: r.created_at),
}


def filter_resources(
    resources: Sequence[Resource],
    query: str = "",
    category: str = ALL_CATEGORIES,
    featured_only: bool = False,
) -> List[Resource]:
    """Apply the text, category and featured filters (logical AND)."""
    items = list(resources)
    needle = _normalize(query)
    if needle:
        items = [r for r in items if _matches_query(r, needle)]
    if category and category != ALL_CATEGORIES:
        items = [r for r in items if r.category == category]
    if featured_only:
        items = [r for r in items if r.featured]
    return items


def sort_resources(resources: Sequence[Resource], sort: str = "stars") -> List[Resource]:
    """Return a sorted copy; ties keep their incoming order."""
    try:
        sorter = _SORTERS[sort]
    except KeyError:
        raise ValueError(f"Unknown sort key {sort!r}; expected one of {', '.join(SORT_KEYS)}") from None
    items = list(resources)
    sorter(items)
    return items


def category_counts(resources: Sequence[Resource]) -> Dict[str, int]:
    """Count resources per category.

    The ``"All"`` entry carries the total. Known categories come first in
    sidebar order (zero counts included), any other label follows
    alphabetically.
    """
    per_category: Dict[str, int] = {}
    for r in resources:
        per_category[r.category] = per_category.get(r.category, 0) + 1
    counts: Dict[str, int] = {ALL_CATEGORIES: len(resources)}
    for name in CATEGORIES:
        counts[name] = per_category.pop(name, 0)
    stray = per_category.pop(ALL_CATEGORIES, 0)
    if stray:
        # A literal "All" label cannot shadow the total.
        logger.warning("%d resource(s) labelled %r counted under %r", stray, ALL_CATEGORIES, ALL_LABEL_KEY)
        per_category[ALL_LABEL_KEY] = per_category.get(ALL_LABEL_KEY, 0) + stray
    for name in sorted(per_category, key=_normalize):
        counts[name] = per_category[name]
    return counts


def build_catalog_view(
    resources: Sequence[Resource],
    query: str = "",
    category: str = ALL_CATEGORIES,
    sort: str = "stars",
    featured_only: bool = False,
) -> CatalogView:
    """Derive the list to render plus the counts shown around it.

    Parameters
    ----------
    resources : Sequence[Resource]
        Everything currently loaded; an empty sequence before the first
        load completes.
    query : str
        Case-insensitive substring matched against title, description
        and tags. Blank matches everything.
    category : str
        Exact category label, or ``"All"`` to disable the filter.
    sort : str
        One of ``stars`` (default), ``name``, ``newest``, ``oldest``.
    featured_only : bool
        Keep only featured resources.

    Returns
    -------
    CatalogView
        ``items`` filtered then sorted, ``total`` equal to
        ``len(items)``, and ``category_counts`` over the unfiltered input.
    """
    items = sort_resources(filter_resources(resources, query, category, featured_only), sort)
    return CatalogView(
        items=items,
        total=len(items),
        category_counts=category_counts(resources),
        query=query or "",
        category=category or ALL_CATEGORIES,
        sort=sort,
        featured_only=featured_only,
    )


def featured_resources(resources: Sequence[Resource], limit: int = 6) -> List[Resource]:
    """Featured resources for the home page, most starred first."""
    return build_catalog_view(resources, featured_only=True).items[: max(0, limit)]


def catalog_stats(resources: Sequence[Resource]) -> CatalogStats:
    return CatalogStats(
        resources=len(resources),
        categories=len({r.category for r in resources}),
        featured=sum(1 for r in resources if r.featured),
        stars=sum(r.stars for r in resources),
    )
