# ipd_core/journals/selectors.py
"""
Read-side projections over an already fetched JournalRecord.
No storage access here apart from the thin `get_record` wrapper.
"""
from __future__ import annotations

import math
from typing import List, Optional

from ipd_core.journals import store
from ipd_core.journals.categories import get_category
from ipd_core.journals.entries import Entry, is_deleted
from ipd_core.journals.models import JournalRecord

ENTRY_KEYS = {"entry_id", "author_id", "created_at", "deleted_by", "deleted_at"}


def get_record(*, admission_id: int, category: str) -> Optional[JournalRecord]:
    spec = get_category(category)
    return store.fetch(admission_id, spec.code)


def _sort_value(entry: Entry, key: str):
    if key in ENTRY_KEYS:
        return entry.get(key)
    return (entry.get("payload") or {}).get(key)


def _comparable(value):
    # numeric readings ("95", "100.5") compare as numbers, everything else as text;
    # numbers sort ahead of text in ascending order
    text = str(value).strip()
    try:
        number = float(text)
    except ValueError:
        return (1, 0.0, text)
    if not math.isfinite(number):
        return (1, 0.0, text)
    return (0, number, "")


def sort_entries(entries: List[Entry], order_by: Optional[str]) -> List[Entry]:
    """
    order_by: entry key ("created_at") or payload key ("date_time"),
    "-" prefix for descending. Entries without the key go last either way.
    Values that parse as numbers are ordered numerically.
    """
    items = list(entries)
    if not order_by:
        return items

    descending = order_by.startswith("-")
    key = order_by.lstrip("-")

    present = [e for e in items if _sort_value(e, key) not in (None, "")]
    missing = [e for e in items if _sort_value(e, key) in (None, "")]
    present.sort(key=lambda e: _comparable(_sort_value(e, key)), reverse=descending)
    return present + missing


def list_active(record: Optional[JournalRecord], order_by: Optional[str] = None) -> List[Entry]:
    if record is None:
        return []
    if order_by is None:
        order_by = get_category(record.category).active_ordering
    return sort_entries([e for e in record.entries or [] if not is_deleted(e)], order_by)


def list_deleted(record: Optional[JournalRecord], order_by: Optional[str] = None) -> List[Entry]:
    if record is None:
        return []
    if order_by is None:
        order_by = get_category(record.category).deleted_ordering
    return sort_entries([e for e in record.entries or [] if is_deleted(e)], order_by)


def latest_active(record: Optional[JournalRecord]) -> Optional[Entry]:
    """Most recently created active entry (the current form for single-form categories)."""
    items = list_active(record, order_by="-created_at")
    return items[0] if items else None
