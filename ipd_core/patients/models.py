# ipd_core/patients/models.py
import uuid

from django.db import models

from ipd_core.common.models import TimeStampedModel


class Patient(TimeStampedModel):
    """
    Patient directory entry.
    The UHID is the stable cross-reference id stamped onto every clinical journal.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    uhid = models.CharField(max_length=64, unique=True)
    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True)
    gender = models.CharField(max_length=32, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["full_name"]),
            models.Index(fields=["phone"]),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.uhid})"
