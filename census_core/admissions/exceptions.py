# census_core/admissions/exceptions.py
from __future__ import annotations

from uuid import UUID


class AdmissionError(Exception):
    """Base for lifecycle failures raised to callers."""


class NotPermitted(AdmissionError):
    def __init__(self, action: str, role=None):
        super().__init__(f"Role {role!s} may not {action} census records.")
        self.action = action
        self.role = role


class RecordNotFound(AdmissionError):
    def __init__(self, collection: str, record_id):
        super().__init__(f"{collection}/{record_id} does not exist.")
        self.collection = collection
        self.record_id = record_id


class InvalidTransition(AdmissionError):
    def __init__(self, status: str, action: str):
        super().__init__(f"Cannot {action} a record in status {status}.")
        self.status = status
        self.action = action


class PersistenceError(AdmissionError):
    """A store call failed. Nothing is retried."""


class PartialArchiveError(PersistenceError):
    """
    The archive copy was written but the live record could not be removed.
    The episode is now present in both collections.
    """

    def __init__(self, record_id: UUID):
        super().__init__(f"Record {record_id} archived but still present in the live census.")
        self.record_id = record_id
