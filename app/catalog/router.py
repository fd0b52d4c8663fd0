"""
Route definitions for the catalogue API.

Endpoints under /api/catalog:
- GET    /resources              : browse approved resources (filter + sort)
- GET    /resources/{id}         : one approved resource
- POST   /resources              : submit a resource for review
- GET    /categories             : per-category counts for the sidebar
- GET    /featured               : featured resources for the home page
- GET    /stats                  : home page totals
- POST   /login                  : begin login with the auth provider
- GET    /directories            : list/search directories
- GET    /directories/stats      : directory totals
- POST   /directories            : create a directory
- PUT    /directories/{id}       : edit a directory
- DELETE /directories/{id}       : delete a directory
- GET    /debug/fallback         : inspect the built-in fallback dataset
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from .backend_client import RecordStore
from .directories import DirectoryRegistry
from .errors import AuthenticationRequired, DirectoryError, DirectoryNotFound
from .schemas import (
    ALL_CATEGORIES,
    CatalogPage,
    CatalogStats,
    Directory,
    DirectoryForm,
    DirectoryStats,
    Resource,
    ResourceSubmission,
    SessionState,
    SortKey,
    SubmissionOutcome,
)
from .session import AuthProvider, LocalAuthProvider, SessionScope
from .store import FALLBACK_RESOURCES, fetch_approved_resources, get_resource, submit_resource
from .view_model import build_catalog_view, catalog_stats, category_counts, featured_resources

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


# ---------------------------------------------------------------------------
# Dependencies
#
# Collaborators live on ``app.state`` (see ``app.main``). A bare app that
# only includes this router still works: no store means fallback data, and
# a fresh signed-out provider and default directory set are created lazily.

def get_record_store(request: Request) -> Optional[RecordStore]:
    return getattr(request.app.state, "record_store", None)


def get_auth_provider(request: Request) -> AuthProvider:
    state = request.app.state
    if getattr(state, "auth", None) is None:
        state.auth = LocalAuthProvider()
    return state.auth


def get_session(auth: AuthProvider = Depends(get_auth_provider)) -> Iterator[SessionState]:
    # The subscription lives exactly as long as the request.
    with SessionScope(auth) as scope:
        yield scope.state


def get_directories(request: Request) -> DirectoryRegistry:
    state = request.app.state
    if getattr(state, "directories", None) is None:
        state.directories = DirectoryRegistry()
    return state.directories


# ---------------------------------------------------------------------------
# Resources

@router.get("/resources", response_model=CatalogPage)
def list_resources(
    q: str = Query(default="", description="Search title, description and tags"),
    category: str = Query(default=ALL_CATEGORIES, description="Category filter ('All' disables it)"),
    sort: SortKey = Query(default="stars", description="stars, name, newest or oldest"),
    featured: bool = Query(default=False, description="Featured resources only"),
    store: Optional[RecordStore] = Depends(get_record_store),
) -> CatalogPage:
    result = fetch_approved_resources(store)
    view = build_catalog_view(result.resources, query=q, category=category, sort=sort, featured_only=featured)
    return CatalogPage(**view.model_dump(), source=result.source)


@router.get("/resources/{resource_id}", response_model=Resource)
def read_resource(resource_id: str, store: Optional[RecordStore] = Depends(get_record_store)) -> Resource:
    resource = get_resource(store, resource_id)
    if resource is None:
        raise HTTPException(status_code=404, detail="Resource not found")
    return resource


@router.post("/resources", response_model=SubmissionOutcome, status_code=201)
def create_resource(
    submission: ResourceSubmission,
    store: Optional[RecordStore] = Depends(get_record_store),
    session: SessionState = Depends(get_session),
) -> SubmissionOutcome:
    try:
        return submit_resource(store, session, submission)
    except AuthenticationRequired as exc:
        raise HTTPException(status_code=401, detail=str(exc))


@router.get("/categories", response_model=Dict[str, int])
def list_categories(store: Optional[RecordStore] = Depends(get_record_store)) -> Dict[str, int]:
    return category_counts(fetch_approved_resources(store).resources)


@router.get("/featured", response_model=List[Resource])
def list_featured(
    limit: int = Query(default=6, ge=1, le=50),
    store: Optional[RecordStore] = Depends(get_record_store),
) -> List[Resource]:
    return featured_resources(fetch_approved_resources(store).resources, limit=limit)


@router.get("/stats", response_model=CatalogStats)
def read_stats(store: Optional[RecordStore] = Depends(get_record_store)) -> CatalogStats:
    return catalog_stats(fetch_approved_resources(store).resources)


@router.post("/login", status_code=202)
def begin_login(auth: AuthProvider = Depends(get_auth_provider)):
    auth.begin_login()
    return {"status": "login_started"}


# ---------------------------------------------------------------------------
# Directories

@router.get("/directories", response_model=List[Directory])
def list_directories(
    q: Optional[str] = Query(default=None, description="Search name and description"),
    live_counts: bool = Query(default=False, description="Refresh counts from the catalogue"),
    registry: DirectoryRegistry = Depends(get_directories),
    store: Optional[RecordStore] = Depends(get_record_store),
) -> List[Directory]:
    if live_counts:
        registry.sync_counts(category_counts(fetch_approved_resources(store).resources))
    return registry.search(q)


@router.get("/directories/stats", response_model=DirectoryStats)
def directory_stats(registry: DirectoryRegistry = Depends(get_directories)) -> DirectoryStats:
    return registry.stats()


@router.post("/directories", response_model=Directory, status_code=201)
def create_directory(form: DirectoryForm, registry: DirectoryRegistry = Depends(get_directories)) -> Directory:
    try:
        return registry.create(form)
    except DirectoryError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.put("/directories/{directory_id}", response_model=Directory)
def update_directory(
    directory_id: str,
    form: DirectoryForm,
    registry: DirectoryRegistry = Depends(get_directories),
) -> Directory:
    try:
        return registry.update(directory_id, form)
    except DirectoryNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except DirectoryError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/directories/{directory_id}")
def delete_directory(directory_id: str, registry: DirectoryRegistry = Depends(get_directories)):
    try:
        registry.delete(directory_id)
    except DirectoryNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"status": "ok"}


@router.get("/debug/fallback")
def debug_fallback():
    """
    Debug endpoint to verify the fallback dataset is loaded.
    Visit: http://127.0.0.1:8000/api/catalog/debug/fallback
    """
    return {
        "count": len(FALLBACK_RESOURCES),
        "sample": [
            {"id": r.id, "title": r.title, "category": r.category}
            for r in FALLBACK_RESOURCES[:5]
        ],
    }
