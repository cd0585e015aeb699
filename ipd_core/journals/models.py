# ipd_core/journals/models.py
from __future__ import annotations

import uuid

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from ipd_core.admissions.models import Admission


class JournalCategory(models.TextChoices):
    VITALS = "vitals", "Vital observations"
    NURSE_NOTES = "nurse_notes", "Nurse notes"
    PROGRESS_NOTES = "progress_notes", "Progress notes"
    DOCTOR_VISITS = "doctor_visits", "Doctor visits"
    GLUCOSE = "glucose", "Glucose monitoring"
    DRUG_CHART = "drug_chart", "Drug chart"
    INVESTIGATIONS = "investigations", "Investigation sheet"
    CLINIC_NOTES = "clinic_notes", "Clinic note"
    ADMISSION_ASSESSMENT = "admission_assessment", "Admission assessment"


class JournalRecord(models.Model):
    """
    The single row per (admission, category) holding an append-only JSON array
    of entries. Entries are never removed; deletion is a marker on the entry.

    `version` is bumped on every write and is the optimistic concurrency token.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    admission = models.ForeignKey(Admission, on_delete=models.PROTECT, related_name="journals")
    category = models.CharField(max_length=32, choices=JournalCategory.choices, db_index=True)

    # patient cross-reference, stamped at first write
    uhid = models.CharField(max_length=64, db_index=True)

    entries = models.JSONField(default=list, encoder=DjangoJSONEncoder)
    contributors = models.JSONField(default=list, encoder=DjangoJSONEncoder)

    version = models.PositiveIntegerField(default=0)

    # Record-level soft delete marker ({"deleted_by", "deleted_at"}).
    # Honoured by reads; nothing in the write path sets it.
    deleted_data = models.JSONField(null=True, blank=True, default=None, encoder=DjangoJSONEncoder)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "journals_journal_record"
        constraints = [
            models.UniqueConstraint(
                fields=["admission", "category"],
                name="uq_journal_admission_category",
            ),
        ]
        indexes = [
            models.Index(fields=["uhid", "category"]),
            models.Index(fields=["category", "updated_at"]),
        ]

    @property
    def etag(self) -> str:
        return f'"{self.id}:{self.version}"'

    def __str__(self) -> str:
        return f"{self.category} for IPD {self.admission_id} v{self.version}"
