"""
Catalogue repository.

Approved resources are read from the record store on every call; there
is no cache. Records come back in the store's wire shape (camelCase
keys, ``tags`` as a JSON-encoded list, ``featured`` as whatever truthy
encoding the store uses) and are converted into ``Resource`` instances
here, so nothing downstream ever sees the wire encoding.

When the store is unreachable or returns something that cannot be
turned into resources, the built-in ``FALLBACK_RESOURCES`` are returned
instead and the result is tagged ``source="fallback"``.

Submissions go the other way: ``submit_resource()`` serialises the form
into the wire shape and creates a ``pending`` record.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from .backend_client import RecordStore
from .errors import AuthenticationRequired
from .schemas import CatalogResult, Resource, ResourceSubmission, SessionState, SubmissionOutcome

logger = logging.getLogger(__name__)

RESOURCES_COLLECTION = "resources"

# Built-in catalogue served when the record store is unavailable.
DATA_FILE = Path(__file__).resolve().parents[1] / "data" / "fallback_resources.json"

# Categories offered on the submission form.
SUGGESTED_CATEGORIES = [
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
    "Tools",
    "Templates",
]

POPULAR_TAGS = [
    "react", "typescript", "tailwind", "prisma", "supabase", "vercel",
    "auth", "ui", "components", "api", "database", "styling", "animation",
    "testing", "deployment", "e-commerce", "analytics", "tools",
]

SUBMITTED_MESSAGE = "Your resource has been submitted for review. We'll notify you once it's approved."
RECEIVED_MESSAGE = (
    "Your resource submission has been captured. "
    "Due to high volume, it may take longer to process."
)


def parse_tags(raw: Any) -> List[str]:
    """Decode the wire encoding of a tag list.

    Accepts the JSON string the store keeps as well as an already-decoded
    list. Anything missing, unparseable or not a list yields ``[]``; the
    record itself is kept.
    """
    if raw is None or raw == "":
        return []
    value = raw
    if isinstance(raw, (str, bytes)):
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed tags value %r", raw)
            return []
    if not isinstance(value, list):
        return []
    return [str(tag) for tag in value if tag is not None]


def serialize_tags(tags: Iterable[str]) -> str:
    return json.dumps(list(tags))


def coerce_featured(raw: Any) -> bool:
    """Turn the store's encoding of the featured flag into a bool.

    Numbers and numeric strings are featured when greater than zero;
    the words ``"true"``/``"false"`` are honoured as well.
    """
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw > 0
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text == "true":
            return True
        try:
            return float(text) > 0
        except ValueError:
            return False
    return False


def _optional(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def normalize_record(record: Dict[str, Any]) -> Resource:
    """Convert one wire record into a ``Resource``.

    Raises ``pydantic.ValidationError`` when a required field is missing
    or malformed; a bad ``tags`` value never does.
    """
    created_at = record.get("createdAt")
    return Resource(
        id=str(record.get("id") or ""),
        title=str(record.get("title") or ""),
        description=str(record.get("description") or ""),
        url=str(record.get("url") or ""),
        category=str(record.get("category") or ""),
        tags=parse_tags(record.get("tags")),
        author=str(record.get("author") or ""),
        author_url=_optional(record.get("authorUrl")),
        github_url=_optional(record.get("githubUrl")),
        documentation=_optional(record.get("documentation")),
        license=_optional(record.get("license")),
        featured=coerce_featured(record.get("featured")),
        user_id=str(record.get("userId") or ""),
        status=record.get("status") or "pending",
        stars=int(record.get("stars") or 0),
        created_at=created_at,
        updated_at=record.get("updatedAt") or created_at,
    )


def _load_fallback_resources(path: Path = DATA_FILE) -> List[Resource]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    return [normalize_record(entry) for entry in raw]


FALLBACK_RESOURCES: List[Resource] = _load_fallback_resources()


def fallback_result(error: Optional[str] = None) -> CatalogResult:
    return CatalogResult(
        resources=[r.model_copy(deep=True) for r in FALLBACK_RESOURCES],
        source="fallback",
        error=error,
    )


def fetch_approved_resources(store: Optional[RecordStore]) -> CatalogResult:
    """Return the approved catalogue, newest first.

    A single attempt is made against ``store``. Any failure, whether in
    the query or while normalising a record, is logged and answered with
    the fallback dataset; this function does not raise.
    """
    if store is None:
        logger.error("No record store configured, using fallback data")
        return fallback_result("no record store configured")
    try:
        records = store.list(
            RESOURCES_COLLECTION,
            where={"status": "approved"},
            order_by={"createdAt": "desc"},
        )
        resources = [normalize_record(r) for r in records]
    except ValidationError as exc:
        logger.error("Record store returned unusable resources, using fallback data: %s", exc)
        return fallback_result(str(exc))
    except Exception as exc:
        logger.error("Record store unavailable, using fallback data: %s", exc)
        return fallback_result(str(exc))
    # The query already filters on status; drop anything that slipped through.
    return CatalogResult(resources=[r for r in resources if r.status == "approved"], source="live")


def get_resource(store: Optional[RecordStore], resource_id: str) -> Optional[Resource]:
    result = fetch_approved_resources(store)
    return next((r for r in result.resources if r.id == str(resource_id)), None)


def _clean_tags(tags: Iterable[str]) -> List[str]:
    cleaned: List[str] = []
    for tag in tags:
        tag = (tag or "").strip().lower()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def build_submission_payload(
    submission: ResourceSubmission, session: SessionState, now: Optional[datetime] = None
) -> Dict[str, Any]:
    """Serialise a submission into the record store's wire shape."""
    user = session.user
    if user is None:
        raise AuthenticationRequired()
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    return {
        "title": submission.title,
        "description": submission.description,
        "url": submission.url,
        "category": submission.category,
        "tags": serialize_tags(_clean_tags(submission.tags)),
        "author": submission.author or user.email or "Anonymous",
        "authorUrl": submission.author_url,
        "githubUrl": submission.github_url,
        "documentation": submission.documentation,
        "license": submission.license,
        "featured": False,
        "userId": user.id,
        "status": "pending",
        "stars": 0,
        "createdAt": timestamp,
        "updatedAt": timestamp,
    }


def submit_resource(
    store: Optional[RecordStore],
    session: SessionState,
    submission: ResourceSubmission,
    now: Optional[datetime] = None,
) -> SubmissionOutcome:
    """Create a pending resource for review.

    Raises ``AuthenticationRequired`` when nobody is signed in. A failed
    write is not raised: the submitter gets the soft "received" message
    and the outcome carries ``persisted=False``.
    """
    payload = build_submission_payload(submission, session, now=now)
    try:
        if store is None:
            raise RuntimeError("no record store configured")
        created = store.create(RESOURCES_COLLECTION, payload)
    except Exception as exc:
        logger.warning("Resource submission %r was not persisted: %s", submission.title, exc)
        return SubmissionOutcome(persisted=False, title="Submission Received!", message=RECEIVED_MESSAGE)
    record_id = created.get("id") if isinstance(created, dict) else None
    logger.info("Resource %r submitted for review as %s", submission.title, record_id)
    return SubmissionOutcome(
        persisted=True,
        title="Success!",
        message=SUBMITTED_MESSAGE,
        record_id=str(record_id) if record_id is not None else None,
    )
