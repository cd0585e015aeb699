# ipd_core/journals/services.py
"""
Journal mutations (append / soft delete / drug chart edits).

Every operation is a read-modify-write of the whole entry array:
fetch -> change a private copy -> store.upsert(expected_version=...).
A version mismatch re-runs the whole attempt (fresh read), up to
JOURNAL_MAX_WRITE_ATTEMPTS. StorageError is never retried here.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple, TypeVar

from django.conf import settings
from django.db import transaction

from ipd_core.admissions.selectors import resolve_cross_reference
from ipd_core.audit.services import AuditService
from ipd_core.journals import entries as entry_ops
from ipd_core.journals import store
from ipd_core.journals.categories import CategorySpec, get_category, validate_payload
from ipd_core.journals.exceptions import (
    CategoryNotEditable,
    ConcurrentWriteError,
    EntryNotFound,
    PayloadValidationError,
    RecordNotFound,
    ReferenceNotFound,
)
from ipd_core.journals.models import JournalRecord
from ipd_core.journals.notifier import publish_change
from ipd_core.journals.payloads import DrugStatusSerializer, SignaturePayloadSerializer

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _max_attempts() -> int:
    return max(1, int(getattr(settings, "JOURNAL_MAX_WRITE_ATTEMPTS", 3)))


def _run_with_retries(op: str, attempt: Callable[[], T]) -> T:
    max_attempts = _max_attempts()
    for n in range(1, max_attempts + 1):
        try:
            with transaction.atomic():
                return attempt()
        except ConcurrentWriteError:
            if n >= max_attempts:
                logger.warning("journal %s gave up after %s conflicting attempts", op, n)
                raise
            logger.warning("journal %s hit a write conflict (attempt %s/%s), retrying", op, n, max_attempts)
    raise AssertionError("unreachable")


def _require_record(admission_id: int, spec: CategorySpec) -> JournalRecord:
    record = store.fetch(admission_id, spec.code)
    if record is None:
        raise RecordNotFound(admission_id, spec.code)
    return record


def _save(record: JournalRecord, *, actor: str, event_code: str, entry_id: str, metadata: Optional[dict] = None):
    created = record._state.adding
    expected = None if created else record.version
    record = store.upsert(record, expected_version=expected)

    AuditService.log(
        event_code=event_code,
        entity_type="JournalRecord",
        entity_id=str(record.id),
        actor=actor,
        metadata={
            "admission_id": record.admission_id,
            "category": record.category,
            "entry_id": entry_id,
            "version": record.version,
            **(metadata or {}),
        },
    )
    publish_change(record, event="created" if created else "updated")
    return record


def _editable_spec(category: str) -> CategorySpec:
    spec = get_category(category)
    if not spec.editable:
        raise CategoryNotEditable(spec.code)
    return spec


class JournalService:
    @staticmethod
    def append_entry(
        *,
        admission_id: int,
        category: str,
        payload: dict,
        actor: str,
        entry_id: Optional[str] = None,
    ) -> Tuple[dict, bool]:
        """
        Append one entry to the (admission, category) journal, creating the record
        on first write. A client supplied entry_id that already exists is a replay:
        the stored entry comes back with created=False and nothing is written.
        """
        spec = get_category(category)
        clean = validate_payload(spec, payload)
        if entry_id is not None:
            entry_id = str(entry_id).strip()
            if not entry_id:
                raise PayloadValidationError({"entry_id": ["Must not be blank."]})

        def _attempt():
            uhid = resolve_cross_reference(admission_id)
            if uhid is None:
                raise ReferenceNotFound(admission_id)

            record = store.fetch(admission_id, spec.code)
            if record is None:
                record = JournalRecord(
                    admission_id=admission_id,
                    category=spec.code,
                    uhid=uhid,
                    entries=[],
                    contributors=[],
                )

            current = entry_ops.copy_entries(record.entries)
            if entry_id is not None:
                existing = entry_ops.find_entry(current, entry_id)
                if existing is not None:
                    return existing, False

            new_id = entry_id or entry_ops.new_entry_id(e.get("entry_id") for e in current)
            entry = entry_ops.build_entry(
                payload=clean,
                actor=actor,
                entry_id=new_id,
                with_chart_fields=spec.editable,
            )
            current.append(entry)

            record.entries = current
            record.contributors = entry_ops.add_contributor(record.contributors, actor)
            _save(record, actor=actor, event_code="journal.entry_appended", entry_id=new_id)
            return entry, True

        entry, created = _run_with_retries("append", _attempt)
        if created:
            logger.info(
                "journal entry appended (admission=%s category=%s entry=%s actor=%s)",
                admission_id, spec.code, entry["entry_id"], actor,
            )
        return entry, created

    @staticmethod
    def soft_delete_entry(*, admission_id: int, category: str, entry_id: str, actor: str) -> dict:
        spec = get_category(category)

        def _attempt():
            record = _require_record(admission_id, spec)
            current = entry_ops.copy_entries(record.entries)
            entry = entry_ops.find_entry(current, entry_id)
            if entry is None:
                raise EntryNotFound(entry_id)

            entry_ops.mark_deleted(entry, actor=actor)
            record.entries = current
            record.contributors = entry_ops.add_contributor(record.contributors, actor)
            _save(record, actor=actor, event_code="journal.entry_deleted", entry_id=entry["entry_id"])
            return entry

        entry = _run_with_retries("soft delete", _attempt)
        logger.info(
            "journal entry soft-deleted (admission=%s category=%s entry=%s actor=%s)",
            admission_id, spec.code, entry_id, actor,
        )
        return entry

    @staticmethod
    def edit_entry(
        *,
        admission_id: int,
        category: str,
        entry_id: str,
        new_payload: dict,
        actor: str,
    ) -> dict:
        """
        Overwrite payload fields of a drug chart entry. The full pre-edit payload
        is kept in the entry's edit_history.
        """
        spec = _editable_spec(category)
        changes = validate_payload(spec, new_payload, partial=True)
        if not changes:
            raise PayloadValidationError({"non_field_errors": ["No editable fields supplied."]})

        def _attempt():
            record = _require_record(admission_id, spec)
            current = entry_ops.copy_entries(record.entries)
            entry = entry_ops.find_entry(current, entry_id)
            if entry is None:
                raise EntryNotFound(entry_id)

            previous = dict(entry.get("payload") or {})
            if all(previous.get(k) == v for k, v in changes.items()):
                return entry

            # merged payload must still satisfy the full schema
            merged = validate_payload(spec, {**previous, **changes})
            entry_ops.apply_edit(
                entry,
                new_payload={k: merged[k] for k in changes},
                actor=actor,
            )
            record.entries = current
            record.contributors = entry_ops.add_contributor(record.contributors, actor)
            _save(
                record,
                actor=actor,
                event_code="journal.entry_edited",
                entry_id=entry["entry_id"],
                metadata={"changed_fields": entry["edit_history"][-1]["changed_fields"]},
            )
            return entry

        entry = _run_with_retries("edit", _attempt)
        logger.info(
            "journal entry edited (admission=%s category=%s entry=%s actor=%s)",
            admission_id, spec.code, entry_id, actor,
        )
        return entry

    @staticmethod
    def change_status(*, admission_id: int, category: str, entry_id: str, status: str, actor: str) -> dict:
        spec = _editable_spec(category)

        ser = DrugStatusSerializer(data={"status": status})
        if not ser.is_valid():
            raise PayloadValidationError(ser.errors)
        new_status = ser.validated_data["status"]

        def _attempt():
            record = _require_record(admission_id, spec)
            current = entry_ops.copy_entries(record.entries)
            entry = entry_ops.find_entry(current, entry_id)
            if entry is None:
                raise EntryNotFound(entry_id)

            old_status = (entry.get("payload") or {}).get("status")
            if old_status == new_status:
                return entry

            entry_ops.apply_status(entry, status=new_status, actor=actor)
            record.entries = current
            record.contributors = entry_ops.add_contributor(record.contributors, actor)
            _save(
                record,
                actor=actor,
                event_code="journal.entry_status_changed",
                entry_id=entry["entry_id"],
                metadata={"from": old_status, "to": new_status},
            )
            return entry

        entry = _run_with_retries("status change", _attempt)
        logger.info(
            "drug chart status set to %s (admission=%s entry=%s actor=%s)",
            new_status, admission_id, entry_id, actor,
        )
        return entry

    @staticmethod
    def sign_entry(*, admission_id: int, category: str, entry_id: str, actor: str, date_time=None) -> dict:
        """Record an administration signature on a drug chart entry."""
        spec = _editable_spec(category)

        data = {} if date_time is None else {"date_time": date_time}
        ser = SignaturePayloadSerializer(data=data)
        if not ser.is_valid():
            raise PayloadValidationError(ser.errors)
        signed_for = ser.data["date_time"]

        def _attempt():
            record = _require_record(admission_id, spec)
            current = entry_ops.copy_entries(record.entries)
            entry = entry_ops.find_entry(current, entry_id)
            if entry is None:
                raise EntryNotFound(entry_id)

            entry_ops.add_signature(entry, date_time=signed_for, actor=actor)
            record.entries = current
            record.contributors = entry_ops.add_contributor(record.contributors, actor)
            _save(record, actor=actor, event_code="journal.entry_signed", entry_id=entry["entry_id"])
            return entry

        entry = _run_with_retries("sign", _attempt)
        logger.info("drug chart entry signed (admission=%s entry=%s actor=%s)", admission_id, entry_id, actor)
        return entry
