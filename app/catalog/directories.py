"""
User-managed directories (named category groupings).

Directories are kept in memory per registry; the app creates one at
startup seeded with the default set. Resource counts start from the
seed values and can be refreshed from live catalogue counts with
``sync_counts()``. All mutations go through a lock since FastAPI runs
plain ``def`` routes in a thread pool.
"""

from __future__ import annotations

import itertools
import threading
from datetime import date
from typing import Dict, List, Optional

from .errors import DirectoryError, DirectoryNotFound
from .schemas import Directory, DirectoryForm, DirectoryStats

COLOR_OPTIONS = [
    {"value": "#3b82f6", "label": "Blue"},
    {"value": "#10b981", "label": "Green"},
    {"value": "#f59e0b", "label": "Yellow"},
    {"value": "#ef4444", "label": "Red"},
    {"value": "#8b5cf6", "label": "Purple"},
    {"value": "#06b6d4", "label": "Cyan"},
    {"value": "#f97316", "label": "Orange"},
    {"value": "#84cc16", "label": "Lime"},
]

ICON_OPTIONS = [
    "🎨", "🔐", "🗄️", "🛒", "📊", "🚀", "🧪", "✨",
    "⚡", "🔧", "📱", "💻", "🌐", "📝", "🎯", "🔍",
    "📦", "🎪", "🎭", "🎵", "🎮", "🏆", "💎",
]

DEFAULT_DIRECTORIES = [
    Directory(
        id="1",
        name="UI Components",
        description="Reusable UI components and component libraries",
        icon="🎨",
        color="#3b82f6",
        resource_count=245,
        created_by="Admin",
        created_at=date(2024, 1, 1),
    ),
    Directory(
        id="2",
        name="Authentication",
        description="Authentication libraries and solutions",
        icon="🔐",
        color="#10b981",
        resource_count=89,
        created_by="Admin",
        created_at=date(2024, 1, 1),
    ),
    Directory(
        id="3",
        name="Database",
        description="Database tools, ORMs, and data management",
        icon="🗄️",
        color="#f59e0b",
        resource_count=156,
        created_by="Admin",
        created_at=date(2024, 1, 1),
    ),
    Directory(
        id="4",
        name="E-commerce",
        description="E-commerce platforms and shopping solutions",
        icon="🛒",
        color="#ef4444",
        resource_count=78,
        created_by="Admin",
        created_at=date(2024, 1, 1),
    ),
]


def _require_name(form: DirectoryForm) -> str:
    name = (form.name or "").strip()
    if not name:
        raise DirectoryError("Directory name is required")
    return name


class DirectoryRegistry:
    def __init__(self, directories: Optional[List[Directory]] = None) -> None:
        seed = DEFAULT_DIRECTORIES if directories is None else directories
        self._items: List[Directory] = [d.model_copy() for d in seed]
        numeric = [int(d.id) for d in self._items if d.id.isdigit()]
        self._ids = itertools.count(max(numeric, default=0) + 1)
        self._lock = threading.Lock()

    def all(self) -> List[Directory]:
        return list(self._items)

    def get(self, directory_id: str) -> Directory:
        for d in self._items:
            if d.id == directory_id:
                return d
        raise DirectoryNotFound(f"Directory {directory_id} not found")

    def search(self, query: Optional[str] = None) -> List[Directory]:
        """Directories whose name or description contains ``query``."""
        needle = (query or "").strip().lower()
        if not needle:
            return self.all()
        return [
            d for d in self._items
            if needle in d.name.lower() or needle in d.description.lower()
        ]

    def create(self, form: DirectoryForm, created_by: str = "You", today: Optional[date] = None) -> Directory:
        name = _require_name(form)
        with self._lock:
            directory = Directory(
                id=str(next(self._ids)),
                name=name,
                description=form.description,
                icon=form.icon,
                color=form.color,
                resource_count=0,
                created_by=created_by,
                created_at=today or date.today(),
                is_public=form.is_public,
            )
            self._items.append(directory)
        return directory

    def update(self, directory_id: str, form: DirectoryForm) -> Directory:
        name = _require_name(form)
        with self._lock:
            current = self.get(directory_id)
            updated = current.model_copy(
                update={
                    "name": name,
                    "description": form.description,
                    "icon": form.icon,
                    "color": form.color,
                    "is_public": form.is_public,
                }
            )
            self._items[self._items.index(current)] = updated
        return updated

    def delete(self, directory_id: str) -> None:
        with self._lock:
            self._items.remove(self.get(directory_id))

    def sync_counts(self, category_counts: Dict[str, int]) -> None:
        """Take resource counts from the catalogue's per-category counts."""
        with self._lock:
            self._items = [
                d.model_copy(update={"resource_count": category_counts.get(d.name, 0)})
                for d in self._items
            ]

    def stats(self, owner: str = "You") -> DirectoryStats:
        items = self._items
        return DirectoryStats(
            total_directories=len(items),
            total_resources=sum(d.resource_count for d in items),
            public_directories=sum(1 for d in items if d.is_public),
            owned_directories=sum(1 for d in items if d.created_by == owner),
        )
