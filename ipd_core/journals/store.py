# ipd_core/journals/store.py
"""
Journal Store: durable storage of one JournalRecord per (admission, category).

`fetch` separates "no record yet" (None) from storage failures (StorageError).
`upsert` writes the whole entry array back; with `expected_version` it is a
compare-and-swap on `version`, without it the last writer wins.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from ipd_core.journals.entries import normalize_contributors
from ipd_core.journals.exceptions import ConcurrentWriteError, StorageError
from ipd_core.journals.models import JournalRecord

logger = logging.getLogger(__name__)


def fetch(admission_id: int, category: str) -> Optional[JournalRecord]:
    try:
        record = (
            JournalRecord.objects.filter(
                admission_id=admission_id,
                category=category,
                deleted_data__isnull=True,
            )
            .first()
        )
    except DatabaseError as e:
        logger.exception("journal fetch failed (admission=%s category=%s)", admission_id, category)
        raise StorageError(str(e)) from e

    if record is not None:
        record.contributors = normalize_contributors(record.contributors)
        record.entries = list(record.entries or [])
    return record


def upsert(record: JournalRecord, *, expected_version: Optional[int] = None) -> JournalRecord:
    """
    Create the row if it was never saved, otherwise replace entries/contributors
    and bump version + updated_at. Returns the record with its new version.
    """
    contributors = normalize_contributors(record.contributors)
    entries = list(record.entries or [])

    try:
        if record._state.adding:
            return _insert(record, entries=entries, contributors=contributors)
        return _update(record, entries=entries, contributors=contributors, expected_version=expected_version)
    except ConcurrentWriteError:
        raise
    except DatabaseError as e:
        logger.exception("journal upsert failed (record=%s)", record.id)
        raise StorageError(str(e)) from e


def _insert(record: JournalRecord, *, entries, contributors) -> JournalRecord:
    record.entries = entries
    record.contributors = contributors
    record.version = 1
    try:
        with transaction.atomic():
            record.save(force_insert=True)
    except IntegrityError as e:
        # another writer created the (admission, category) row first
        record._state.adding = True
        raise ConcurrentWriteError(
            f"{record.category} record for admission {record.admission_id} was created concurrently."
        ) from e
    return record


def _update(record: JournalRecord, *, entries, contributors, expected_version) -> JournalRecord:
    qs = JournalRecord.objects.filter(pk=record.pk)
    if expected_version is not None:
        qs = qs.filter(version=expected_version)

    updated_at = timezone.now()
    with transaction.atomic():
        rows = qs.update(
            entries=entries,
            contributors=contributors,
            version=F("version") + 1,
            updated_at=updated_at,
        )
        if rows == 0:
            raise ConcurrentWriteError(
                f"{record.category} record {record.pk} changed since version {expected_version}."
            )
        record.version = JournalRecord.objects.values_list("version", flat=True).get(pk=record.pk)

    record.entries = entries
    record.contributors = contributors
    record.updated_at = updated_at
    return record
