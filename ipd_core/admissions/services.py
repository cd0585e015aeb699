# ipd_core/admissions/services.py
from __future__ import annotations

from django.db import IntegrityError, transaction
from django.utils import timezone

from ipd_core.admissions.models import Admission
from ipd_core.audit.services import AuditService
from ipd_core.patients.models import Patient


class AdmissionService:
    @staticmethod
    @transaction.atomic
    def admit(
        *,
        actor: str,
        patient_id,
        ward: str = "",
        bed: str = "",
        attending_doctor: str = "",
        reason: str = "",
        admitted_at=None,
    ) -> Admission:
        patient = Patient.objects.get(id=patient_id)

        try:
            with transaction.atomic():
                admission = Admission.objects.create(
                    patient=patient,
                    ward=ward or "",
                    bed=bed or "",
                    attending_doctor=attending_doctor or "",
                    reason=reason or "",
                    admitted_at=admitted_at or timezone.now(),
                    admitted_by=actor,
                )
        except IntegrityError:
            raise ValueError("Patient already has an open admission.")

        AuditService.log(
            event_code="admission.created",
            entity_type="Admission",
            entity_id=str(admission.ipd_id),
            actor=actor,
            metadata={"uhid": patient.uhid, "ward": admission.ward, "bed": admission.bed},
        )
        return admission

    @staticmethod
    @transaction.atomic
    def discharge(*, actor: str, admission_id: int, discharged_at=None) -> Admission:
        admission = Admission.objects.select_for_update().get(ipd_id=admission_id)
        if admission.discharged_at is not None:
            raise ValueError("Admission is already discharged.")

        admission.discharged_at = discharged_at or timezone.now()
        admission.save(update_fields=["discharged_at", "updated_at"])

        AuditService.log(
            event_code="admission.discharged",
            entity_type="Admission",
            entity_id=str(admission.ipd_id),
            actor=actor,
            metadata={},
        )
        return admission
