from __future__ import annotations

import threading
from typing import Iterable, List, Optional

from .models import LocationRecord


FIXTURE_LOCATIONS = (
    LocationRecord(user_id="1", latitude=37.7749, longitude=-122.4194, timestamp="2025-02-21T10:00:00Z"),
    LocationRecord(user_id="2", latitude=34.0522, longitude=-118.2437, timestamp="2025-02-21T11:00:00Z"),
)


class LocationStore:
    """In-memory, append-only store of location records.

    Every operation holds the store lock, so concurrent appends from the
    request threadpool are never lost or duplicated.
    """

    def __init__(self, records: Iterable[LocationRecord] = ()) -> None:
        self._lock = threading.Lock()
        self._records: List[LocationRecord] = list(records)

    @classmethod
    def with_fixtures(cls) -> "LocationStore":
        return cls(FIXTURE_LOCATIONS)

    def list(self, user_id: Optional[str] = None) -> List[LocationRecord]:
        """Return a snapshot of the records in insertion order.

        With ``user_id`` only that subject's records are returned.
        """
        with self._lock:
            if user_id is None:
                return list(self._records)
            return [r for r in self._records if r.user_id == user_id]

    def append(self, record: LocationRecord) -> LocationRecord:
        with self._lock:
            self._records.append(record)
        return record

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
