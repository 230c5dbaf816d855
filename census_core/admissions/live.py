# census_core/admissions/live.py
from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional, Set

from census_core.admissions.constants import MORTALITY_RECORDS, PATIENTS
from census_core.admissions.los import live_length_of_stay
from census_core.admissions.serials import (
    next_mortality_serial,
    next_serial,
    parse_live_serial,
    parse_mortality_serial,
)
from census_core.admissions.store import DocumentStore, Subscription, default_store


class LiveCensus:
    """
    Working set for one unit, fed by a store subscription.

    Every snapshot replaces the rows wholesale and re-derives counts, the
    next serial and the ids that appeared since the previous snapshot.

        with LiveCensus(unit="ICU") as census:
            census.rows, census.counts, census.next_serial
    """

    def __init__(
        self,
        *,
        unit: str,
        collection: str = PATIENTS,
        store: DocumentStore | None = None,
        today: Optional[date] = None,
    ):
        self.unit = unit
        self.collection = collection
        self.store = store or default_store()
        self.today = today

        self.rows: List[Dict[str, Any]] = []
        self.counts: Counter = Counter()
        self.next_serial: str = ""
        self.new_ids: Set[Any] = set()
        self.snapshots_seen = 0

        self._known_ids: Optional[Set[Any]] = None
        self._subscription: Optional[Subscription] = None

    @property
    def is_mortality(self) -> bool:
        return self.collection == MORTALITY_RECORDS

    def start(self) -> "LiveCensus":
        if self._subscription is None:
            self._subscription = self.store.subscribe(self.collection, self.apply_snapshot, unit=self.unit)
        return self

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def __enter__(self) -> "LiveCensus":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _serial_key(self, row) -> int:
        value = row.get("serial_number")
        if self.is_mortality:
            return parse_mortality_serial(value)
        return parse_live_serial(value) or 0

    def apply_snapshot(self, documents: List[Dict[str, Any]]) -> None:
        ids = {doc["id"] for doc in documents}
        # first snapshot is the baseline, nothing is "new" yet
        self.new_ids = set() if self._known_ids is None else ids - self._known_ids
        self._known_ids = ids

        rows = [{**doc, "live_length_of_stay": live_length_of_stay(doc, self.today)} for doc in documents]
        rows.sort(key=self._serial_key, reverse=True)
        self.rows = rows

        self.counts = Counter(doc.get("status") for doc in documents)
        self.next_serial = next_mortality_serial(documents) if self.is_mortality else next_serial(documents)
        self.snapshots_seen += 1
