# ipd_core/admissions/models.py
from django.db import models
from django.db.models import Q
from django.utils import timezone

from ipd_core.common.models import TimeStampedModel
from ipd_core.patients.models import Patient


class Admission(TimeStampedModel):
    """
    One in-patient stay (the parent case of every clinical journal).
    The integer ipd_id is the admission id used in URLs and journal keys.
    Never deleted by the journal subsystem.
    """
    ipd_id = models.BigAutoField(primary_key=True)

    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name="admissions")

    admitted_at = models.DateTimeField(default=timezone.now, db_index=True)
    discharged_at = models.DateTimeField(null=True, blank=True)

    ward = models.CharField(max_length=64, blank=True)
    bed = models.CharField(max_length=32, blank=True)
    attending_doctor = models.CharField(max_length=255, blank=True)
    reason = models.CharField(max_length=255, blank=True)

    admitted_by = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = "admissions_admission"
        indexes = [
            models.Index(fields=["patient", "admitted_at"]),
            models.Index(fields=["ward", "bed"]),
        ]
        constraints = [
            # A patient can only occupy one open admission at a time.
            models.UniqueConstraint(
                fields=["patient"],
                condition=Q(discharged_at__isnull=True),
                name="uq_open_admission_per_patient",
            ),
        ]

    @property
    def uhid(self) -> str:
        return self.patient.uhid

    @property
    def is_open(self) -> bool:
        return self.discharged_at is None

    def __str__(self) -> str:
        return f"IPD {self.ipd_id} ({self.patient_id})"
