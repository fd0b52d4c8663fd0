import pytest
from fastapi.testclient import TestClient

from app.catalog.errors import RecordStoreError
from app.catalog.session import LocalAuthProvider
from app.config import Settings
from app.main import create_app
from app.storage import InMemoryRecordStore


def make_record(id, title, category="Tools", stars=0, featured=False, created="2024-02-01T00:00:00Z",
                tags='["cli"]', status="approved", **extra):
    record = {
        "id": id,
        "title": title,
        "description": f"{title} description",
        "url": f"https://example.com/{id}",
        "category": category,
        "tags": tags,
        "author": "Someone",
        "featured": featured,
        "userId": "user_1",
        "status": status,
        "stars": stars,
        "createdAt": created,
        "updatedAt": created,
    }
    record.update(extra)
    return record


class FailingStore:
    """Record store whose every call fails like an unreachable backend."""

    def __init__(self):
        self.calls = 0

    def list(self, collection, where=None, order_by=None):
        self.calls += 1
        raise RecordStoreError("connection refused")

    def create(self, collection, payload):
        self.calls += 1
        raise RecordStoreError("connection refused")


@pytest.fixture
def live_records():
    return [
        make_record("r1", "Remix Auth", category="Authentication", stars=900, featured="1",
                    created="2024-03-01T00:00:00Z", tags='["auth", "remix"]'),
        make_record("r2", "Drizzle ORM", category="Database", stars=2100, featured=0,
                    created="2024-03-05T00:00:00Z", tags='["orm", "sql"]'),
        make_record("r3", "Pending Thing", stars=5, created="2024-03-07T00:00:00Z", status="pending"),
    ]


@pytest.fixture
def memory_store(live_records):
    return InMemoryRecordStore({"resources": live_records})


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def auth():
    return LocalAuthProvider()


@pytest.fixture
def client(memory_store, auth):
    app = create_app(settings=Settings(), record_store=memory_store, auth=auth)
    return TestClient(app)


@pytest.fixture
def offline_client(failing_store, auth):
    app = create_app(settings=Settings(), record_store=failing_store, auth=auth)
    return TestClient(app)
