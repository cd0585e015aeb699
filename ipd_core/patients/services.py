# ipd_core/patients/services.py
from __future__ import annotations

from django.db import IntegrityError, transaction

from ipd_core.audit.services import AuditService
from ipd_core.patients.models import Patient


class PatientService:
    @staticmethod
    @transaction.atomic
    def register_patient(
        *,
        actor: str,
        uhid: str,
        full_name: str,
        phone: str = "",
        gender: str = "",
        date_of_birth=None,
    ) -> Patient:
        try:
            with transaction.atomic():
                patient = Patient.objects.create(
                    uhid=uhid,
                    full_name=full_name,
                    phone=phone or "",
                    gender=gender or "",
                    date_of_birth=date_of_birth,
                )
        except IntegrityError:
            # UHID uniqueness is enforced by constraint; surface readable error.
            raise ValueError("UHID already exists.")

        AuditService.log(
            event_code="patient.registered",
            entity_type="Patient",
            entity_id=str(patient.id),
            actor=actor,
            metadata={"uhid": uhid},
        )
        return patient
