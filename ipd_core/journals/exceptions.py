# ipd_core/journals/exceptions.py
from __future__ import annotations


class JournalError(Exception):
    """Base class for every failure a journal operation reports to its caller."""


class UnknownCategory(JournalError):
    def __init__(self, category):
        super().__init__(f"Unknown journal category: {category!r}.")
        self.category = category


class PayloadValidationError(JournalError):
    """
    Payload failed local constraints. Raised before any storage read.
    `errors` mirrors DRF's serializer.errors shape.
    """

    def __init__(self, errors):
        super().__init__("Invalid journal entry payload.")
        self.errors = errors


class ReferenceNotFound(JournalError):
    def __init__(self, admission_id):
        super().__init__(f"Admission {admission_id} was not found.")
        self.admission_id = admission_id


class NotFound(JournalError):
    """Record or entry absent. Normal control flow, not a failure of the system."""


class RecordNotFound(NotFound):
    def __init__(self, admission_id, category):
        super().__init__(f"No {category} record exists for admission {admission_id}.")
        self.admission_id = admission_id
        self.category = category


class EntryNotFound(NotFound):
    def __init__(self, entry_id):
        super().__init__(f"Entry {entry_id} was not found.")
        self.entry_id = entry_id


class CategoryNotEditable(JournalError):
    def __init__(self, category):
        super().__init__(f"Entries in {category} cannot be edited.")
        self.category = category


class StorageError(JournalError):
    """Backend read/write failure. Never retried automatically."""


class ConcurrentWriteError(JournalError):
    """The stored version moved between read and write (or a concurrent first insert won)."""
