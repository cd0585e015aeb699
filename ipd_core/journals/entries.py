# ipd_core/journals/entries.py
"""
Pure helpers over the JSON entry dicts held in JournalRecord.entries.

Entry shape:
    {
      "entry_id": str,
      "payload": {...},
      "author_id": str,
      "created_at": iso str,
      "deleted_by": str,        # soft delete marker, optional
      "deleted_at": iso str,    # soft delete marker, optional
      "edit_history": [...],    # drug chart only
      "signatures": [...],      # drug chart only
    }
"""
from __future__ import annotations

import copy
import uuid
from typing import Any, Dict, Iterable, List, Optional

from django.utils import timezone

Entry = Dict[str, Any]


def now_iso() -> str:
    return timezone.now().isoformat()


def new_entry_id(existing_ids: Iterable[str] = ()) -> str:
    taken = set(existing_ids)
    while True:
        candidate = uuid.uuid4().hex
        if candidate not in taken:
            return candidate


def build_entry(*, payload: dict, actor: str, entry_id: str, with_chart_fields: bool = False) -> Entry:
    entry: Entry = {
        "entry_id": entry_id,
        "payload": dict(payload),
        "author_id": actor,
        "created_at": now_iso(),
    }
    if with_chart_fields:
        entry["edit_history"] = []
        entry["signatures"] = []
    return entry


def copy_entries(entries) -> List[Entry]:
    """Deep copy so a failed write never leaks mutations into the fetched record."""
    return copy.deepcopy(list(entries or []))


def find_entry(entries: List[Entry], entry_id: str) -> Optional[Entry]:
    for e in entries:
        if str(e.get("entry_id")) == str(entry_id):
            return e
    return None


def is_deleted(entry: Entry) -> bool:
    return bool(entry.get("deleted_by") or entry.get("deleted_at"))


def mark_deleted(entry: Entry, *, actor: str) -> Entry:
    # re-deleting overwrites the marker; payload is left untouched
    entry["deleted_by"] = actor
    entry["deleted_at"] = now_iso()
    return entry


def apply_edit(entry: Entry, *, new_payload: dict, actor: str) -> Entry:
    """
    Overwrite payload fields, keeping the full pre-edit payload in edit_history.
    """
    previous = dict(entry.get("payload") or {})
    changed = sorted(k for k, v in new_payload.items() if previous.get(k) != v)

    history = list(entry.get("edit_history") or [])
    history.append(
        {
            "edited_by": actor,
            "edited_at": now_iso(),
            "previous_values": previous,
            "changed_fields": changed,
        }
    )

    entry["payload"] = {**previous, **new_payload}
    entry["edit_history"] = history
    return entry


def apply_status(entry: Entry, *, status: str, actor: str) -> Entry:
    payload = dict(entry.get("payload") or {})

    history = list(entry.get("edit_history") or [])
    history.append(
        {
            "edited_by": actor,
            "edited_at": now_iso(),
            "previous_values": {"status": payload.get("status")},
            "changed_fields": ["status"],
        }
    )

    payload["status"] = status
    entry["payload"] = payload
    entry["edit_history"] = history
    return entry


def add_signature(entry: Entry, *, date_time: str, actor: str) -> Entry:
    signatures = list(entry.get("signatures") or [])
    signatures.append({"date_time": date_time, "by": actor, "signed_at": now_iso()})
    entry["signatures"] = signatures
    return entry


def normalize_contributors(value) -> List[str]:
    """
    Contributors are a list of distinct actor ids in first-seen order.
    Older rows stored a single string.
    """
    if not value:
        return []
    if isinstance(value, str):
        return [value]

    out: List[str] = []
    for v in value:
        if v and v not in out:
            out.append(str(v))
    return out


def add_contributor(contributors, actor: str) -> List[str]:
    out = normalize_contributors(contributors)
    if actor not in out:
        out.append(actor)
    return out
