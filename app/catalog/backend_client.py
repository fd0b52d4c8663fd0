"""
Record store integration for the catalogue.

The catalogue never talks to a database directly: all records live in a
hosted backend-as-a-service that exposes collections over a small REST
API. This module defines the ``RecordStore`` interface the rest of the
package depends on and ``HttpRecordStore``, the client for the hosted
service. It exposes two operations:

* ``list()``: list records of a collection, narrowed by an equality
  filter and ordered by a single field.

* ``create()``: persist a new record; the service assigns ``id``,
  ``createdAt`` and ``updatedAt`` when the payload leaves them out.

Only the Python standard library is used for HTTP requests. Failures are
logged and raised as ``RecordStoreError`` so that callers (the
repository in ``store.py``) can decide how to degrade.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional

from typing_extensions import Protocol

from .errors import RecordStoreError


logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

Record = Dict[str, Any]


class RecordStore(Protocol):
    def list(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[Dict[str, str]] = None,
    ) -> List[Record]:
        ...

    def create(self, collection: str, payload: Record) -> Record:
        ...


class HttpRecordStore:
    """Client for a hosted record store.

    ``base_url`` points at the collections root, e.g.
    ``https://api.example.com/v1/db``; collections are addressed as
    ``{base_url}/{collection}``. Filters and ordering travel as JSON in
    the ``where`` and ``orderBy`` query parameters.
    """

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "resource-directory/0.1",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request_json(self, method: str, url: str, body: Optional[Record] = None) -> Any:
        """Perform a request and return the decoded JSON body.

        Transport errors, non-2xx statuses and undecodable bodies are
        logged and re-raised as ``RecordStoreError``.
        """
        data = json.dumps(body).encode("utf-8") if body is not None else None
        request = urllib.request.Request(url, data=data, method=method, headers=self._headers())
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                if not 200 <= response.status < 300:
                    logger.warning(
                        "Record store %s %s returned status %s", method, url, response.status
                    )
                    raise RecordStoreError(f"{method} {url} returned status {response.status}")
                raw = response.read().decode("utf-8", errors="ignore")
        except urllib.error.HTTPError as exc:
            logger.error("Record store %s %s failed with status %s", method, url, exc.code)
            raise RecordStoreError(f"{method} {url} failed with status {exc.code}") from exc
        except (urllib.error.URLError, OSError) as exc:
            logger.error("Error calling record store %s %s: %s", method, url, exc)
            raise RecordStoreError(f"{method} {url} failed: {exc}") from exc
        try:
            return json.loads(raw) if raw else None
        except ValueError as exc:
            raise RecordStoreError(f"{method} {url} returned invalid JSON") from exc

    def list(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[Dict[str, str]] = None,
    ) -> List[Record]:
        params = {}
        if where:
            params["where"] = json.dumps(where, separators=(",", ":"))
        if order_by:
            params["orderBy"] = json.dumps(order_by, separators=(",", ":"))
        url = f"{self.base_url}/{urllib.parse.quote(collection)}"
        if params:
            url = f"{url}?{urllib.parse.urlencode(params)}"
        data = self._request_json("GET", url)
        # Some deployments wrap the rows in an envelope.
        if isinstance(data, dict):
            data = data.get("data")
        if not isinstance(data, list):
            raise RecordStoreError(f"Unexpected list response for collection {collection!r}")
        return [row for row in data if isinstance(row, dict)]

    def create(self, collection: str, payload: Record) -> Record:
        url = f"{self.base_url}/{urllib.parse.quote(collection)}"
        data = self._request_json("POST", url, body=payload)
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict):
            raise RecordStoreError(f"Unexpected create response for collection {collection!r}")
        return data
