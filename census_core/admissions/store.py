# census_core/admissions/store.py
"""
Document-style persistence over the admissions tables.

Collections are addressed by name ("patients", "mortality_records") and
records travel as plain dicts. subscribe() pushes the full filtered result
set on every save/delete, never a diff.
"""
from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from census_core.admissions.constants import MORTALITY_RECORDS, PATIENTS
from census_core.admissions.models import CensusRecord, MortalityRecord

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
SnapshotCallback = Callable[[List[Document]], None]

COLLECTION_MODELS = {
    PATIENTS: CensusRecord,
    MORTALITY_RECORDS: MortalityRecord,
}

_stores: "weakref.WeakSet[DocumentStore]" = weakref.WeakSet()


class StoreError(Exception):
    pass


def collection_for_model(model) -> Optional[str]:
    for name, candidate in COLLECTION_MODELS.items():
        if candidate is model:
            return name
    return None


@dataclass(eq=False)
class Subscription:
    store: "DocumentStore"
    collection: str
    on_snapshot: SnapshotCallback
    filters: Dict[str, Any] = field(default_factory=dict)
    active: bool = True

    def deliver(self) -> None:
        if self.active:
            self.on_snapshot(self.store.snapshot(self.collection, **self.filters))

    def close(self) -> None:
        self.active = False
        self.store._discard(self)


class DocumentStore:
    def __init__(self):
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()
        _stores.add(self)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def model_for(collection: str):
        try:
            return COLLECTION_MODELS[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}") from None

    @staticmethod
    def _fields(model, document: Document) -> Document:
        return {k: v for k, v in document.items() if k in model.DOCUMENT_FIELDS}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def create(self, collection: str, document: Document) -> UUID:
        model = self.model_for(collection)
        obj = model(**self._fields(model, document))
        obj.save()
        return obj.id

    def create_with_id(self, collection: str, record_id: UUID, document: Document) -> None:
        """Upsert under a caller-chosen id; an existing row is overwritten."""
        model = self.model_for(collection)
        model.objects.update_or_create(id=record_id, defaults=self._fields(model, document))

    def update(self, collection: str, record_id: UUID, document: Document) -> None:
        model = self.model_for(collection)
        obj = model.objects.filter(id=record_id).first()
        if obj is None:
            raise StoreError(f"{collection}/{record_id} does not exist")

        for key, value in self._fields(model, document).items():
            setattr(obj, key, value)
        obj.save()

    def delete(self, collection: str, record_id: UUID) -> None:
        model = self.model_for(collection)
        model.objects.filter(id=record_id).delete()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def fetch(self, collection: str, record_id: UUID) -> Optional[Document]:
        model = self.model_for(collection)
        obj = model.objects.filter(id=record_id).first()
        return obj.to_document() if obj is not None else None

    def snapshot(self, collection: str, **equals) -> List[Document]:
        model = self.model_for(collection)
        qs = model.objects.filter(**equals).order_by("created_at")
        return [obj.to_document() for obj in qs]

    def subscribe(self, collection: str, on_snapshot: SnapshotCallback, **equals) -> Subscription:
        self.model_for(collection)
        sub = Subscription(store=self, collection=collection, on_snapshot=on_snapshot, filters=equals)
        with self._lock:
            self._subscriptions.append(sub)
        sub.deliver()
        return sub

    def notify(self, collection: str) -> None:
        with self._lock:
            subs = [s for s in self._subscriptions if s.collection == collection and s.active]
        for sub in subs:
            try:
                sub.deliver()
            except Exception:
                # listener failures never propagate into the triggering save
                logger.exception("Snapshot delivery failed for %s subscriber", collection)

    def _discard(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)


def on_record_changed(sender, **kwargs) -> None:
    """post_save / post_delete receiver; fans out to every live store."""
    collection = collection_for_model(sender)
    if collection is None:
        return
    for store in list(_stores):
        store.notify(collection)


def connect_signals() -> None:
    from django.db.models.signals import post_delete, post_save

    for model in COLLECTION_MODELS.values():
        post_save.connect(on_record_changed, sender=model, dispatch_uid=f"census-store-save-{model.__name__}")
        post_delete.connect(on_record_changed, sender=model, dispatch_uid=f"census-store-delete-{model.__name__}")


@lru_cache(maxsize=None)
def default_store() -> DocumentStore:
    return DocumentStore()
