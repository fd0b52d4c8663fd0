# app/storage.py
import itertools
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class InMemoryRecordStore:
    """Process-local stand-in for the hosted record store.

    Used when no store URL is configured and throughout the tests. Rows
    are kept per collection in insertion order; ``id``, ``createdAt``
    and ``updatedAt`` are filled in on create when the payload omits
    them, like the hosted service does.
    """

    def __init__(self, collections: Optional[Dict[str, List[Record]]] = None) -> None:
        self.collections: Dict[str, List[Record]] = {
            name: [dict(row) for row in rows] for name, rows in (collections or {}).items()
        }
        self._ids = itertools.count(1)

    def list(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[Dict[str, str]] = None,
    ) -> List[Record]:
        rows = [dict(r) for r in self.collections.get(collection, [])]
        for field, value in (where or {}).items():
            rows = [r for r in rows if r.get(field) == value]
        for field, direction in reversed(list((order_by or {}).items())):
            rows.sort(key=lambda r: (r.get(field) is None, r.get(field) or ""),
                      reverse=str(direction).lower() == "desc")
        return rows

    def create(self, collection: str, payload: Record) -> Record:
        record = dict(payload)
        now = _now_iso()
        record.setdefault("id", f"{collection}_{next(self._ids)}")
        record.setdefault("createdAt", now)
        record.setdefault("updatedAt", record["createdAt"])
        self.collections.setdefault(collection, []).append(record)
        return dict(record)
