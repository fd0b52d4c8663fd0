# app/main.py
import logging
from typing import Optional

from fastapi import FastAPI

from .catalog import catalog_router
from .catalog.backend_client import HttpRecordStore, RecordStore
from .catalog.directories import DirectoryRegistry
from .catalog.session import AuthProvider, LocalAuthProvider
from .config import Settings
from .storage import InMemoryRecordStore


def build_record_store(settings: Settings) -> RecordStore:
    if settings.record_store_url:
        return HttpRecordStore(
            settings.record_store_url,
            token=settings.record_store_token,
            timeout=settings.record_store_timeout,
        )
    return InMemoryRecordStore()


def create_app(
    settings: Optional[Settings] = None,
    record_store: Optional[RecordStore] = None,
    auth: Optional[AuthProvider] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Resource Directory",
        description=(
            "Browse, filter and submit curated web-framework resources, "
            "organised into directories."
        ),
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.record_store = record_store if record_store is not None else build_record_store(settings)
    app.state.auth = auth if auth is not None else LocalAuthProvider()
    app.state.directories = DirectoryRegistry()

    # Base route to check the service quickly
    @app.get("/")
    def health_check():
        return {"status": "ok", "message": "Resource directory live"}

    app.include_router(catalog_router)
    return app


app = create_app()
