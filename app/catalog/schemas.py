"""
Pydantic schema definitions for the catalog module.

``Resource`` is the single catalogue entity: one curated tool, library
or template. It is the normalised, in-memory shape; the record store
keeps a slightly different wire shape (camelCase keys, tags as a JSON
string) which ``store.py`` converts at the boundary. The remaining
models wrap the outputs of the repository and the view model so that
routes and tests can assert on them directly.
"""

from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Literal

ResourceStatus = Literal["pending", "approved", "rejected"]
CatalogSource = Literal["live", "fallback"]
SortKey = Literal["stars", "name", "newest", "oldest"]

# Sentinel category that disables the category filter.
ALL_CATEGORIES = "All"


class Resource(BaseModel):
    """A single catalogue entry.

    ``tags`` is always a clean list of strings by the time a resource
    reaches this model; the JSON encoding used by the record store never
    leaks past the repository. ``featured`` only affects highlighting
    and sorting, never visibility, which is governed by ``status``.
    """

    id: str
    title: str
    description: str = ""
    url: str
    category: str
    tags: List[str] = Field(default_factory=list)
    author: str = ""
    author_url: Optional[str] = None
    github_url: Optional[str] = None
    documentation: Optional[str] = None
    license: Optional[str] = None
    featured: bool = False
    user_id: str = ""
    status: ResourceStatus = "pending"
    stars: int = Field(default=0, ge=0)
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # The store mixes "2024-03-02" and "...Z"; naive values are UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_timestamps(self) -> "Resource":
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not be earlier than created_at")
        return self


class CatalogResult(BaseModel):
    """Outcome of a catalogue fetch.

    ``source`` tells live data apart from the built-in fallback set so
    callers never have to guess whether the store was reachable.
    """

    resources: List[Resource] = Field(default_factory=list)
    source: CatalogSource = "live"
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


class CatalogView(BaseModel):
    """Render-ready result of filtering and sorting a resource set."""

    items: List[Resource] = Field(default_factory=list)
    total: int = 0
    # Counts over the unfiltered input; the "All" key holds the grand total.
    category_counts: Dict[str, int] = Field(default_factory=dict)
    query: str = ""
    category: str = ALL_CATEGORIES
    sort: SortKey = "stars"
    featured_only: bool = False


class CatalogPage(CatalogView):
    """A ``CatalogView`` annotated with where its data came from."""

    source: CatalogSource = "live"


class CatalogStats(BaseModel):
    resources: int = 0
    categories: int = 0
    featured: int = 0
    stars: int = 0


class ResourceSubmission(BaseModel):
    """Fields a user fills in on the submission form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    author: str = ""
    author_url: str = ""
    github_url: str = ""
    documentation: str = ""
    license: str = ""


class SubmissionOutcome(BaseModel):
    """What the submitter is told after a submission attempt.

    ``persisted`` is False when the store rejected the write and the user
    was shown the soft "received" message instead of an error.
    """

    persisted: bool
    title: str
    message: str
    record_id: Optional[str] = None


class User(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class SessionState(BaseModel):
    user: Optional[User] = None
    is_loading: bool = False


class DirectoryForm(BaseModel):
    """Editable fields of a directory."""

    name: str = ""
    description: str = ""
    icon: str = "📁"
    color: str = "#3b82f6"
    is_public: bool = True


class Directory(BaseModel):
    id: str
    name: str
    description: str = ""
    icon: str = "📁"
    color: str = "#3b82f6"
    resource_count: int = Field(default=0, ge=0)
    created_by: str = "Admin"
    created_at: date
    is_public: bool = True


class DirectoryStats(BaseModel):
    total_directories: int = 0
    total_resources: int = 0
    public_directories: int = 0
    owned_directories: int = 0
