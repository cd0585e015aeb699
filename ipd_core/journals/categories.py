# ipd_core/journals/categories.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Type

from rest_framework import serializers

from ipd_core.journals import payloads
from ipd_core.journals.exceptions import PayloadValidationError, UnknownCategory
from ipd_core.journals.models import JournalCategory


@dataclass(frozen=True)
class CategorySpec:
    """
    Everything that differs between two journal categories.
    The journal mechanics themselves are shared.
    """
    code: str
    label: str
    payload_serializer: Type[serializers.Serializer]
    active_ordering: str = "-created_at"
    deleted_ordering: str = "-deleted_at"
    editable: bool = False

    @property
    def field_names(self) -> list[str]:
        return list(self.payload_serializer().fields.keys())


def _spec(category: JournalCategory, serializer, **kwargs) -> CategorySpec:
    return CategorySpec(code=category.value, label=category.label, payload_serializer=serializer, **kwargs)


REGISTRY: Dict[str, CategorySpec] = {
    s.code: s
    for s in (
        _spec(JournalCategory.VITALS, payloads.VitalsPayloadSerializer, active_ordering="-date_time"),
        _spec(JournalCategory.NURSE_NOTES, payloads.NotePayloadSerializer),
        _spec(JournalCategory.PROGRESS_NOTES, payloads.NotePayloadSerializer),
        _spec(JournalCategory.DOCTOR_VISITS, payloads.DoctorVisitPayloadSerializer, active_ordering="-date_time"),
        _spec(JournalCategory.GLUCOSE, payloads.GlucosePayloadSerializer),
        _spec(
            JournalCategory.DRUG_CHART,
            payloads.DrugChartPayloadSerializer,
            active_ordering="-date_time",
            editable=True,
        ),
        _spec(JournalCategory.INVESTIGATIONS, payloads.InvestigationPayloadSerializer, active_ordering="date_time"),
        _spec(JournalCategory.CLINIC_NOTES, payloads.ClinicNotePayloadSerializer),
        _spec(JournalCategory.ADMISSION_ASSESSMENT, payloads.AdmissionAssessmentPayloadSerializer),
    )
}


def get_category(code) -> CategorySpec:
    spec = REGISTRY.get(str(code))
    if spec is None:
        raise UnknownCategory(code)
    return spec


def validate_payload(spec: CategorySpec, payload, *, partial: bool = False) -> dict:
    """
    Run the category schema and return JSON-ready primitives
    (datetimes rendered as ISO strings).
    """
    if not isinstance(payload, dict):
        raise PayloadValidationError({"non_field_errors": ["Payload must be a JSON object."]})

    ser = spec.payload_serializer(data=payload, partial=partial)
    if not ser.is_valid():
        raise PayloadValidationError(ser.errors)

    # only the keys that were supplied (or defaulted); ser.data would
    # trip over missing required fields on partial validation
    return {
        name: ser.fields[name].to_representation(value)
        for name, value in ser.validated_data.items()
    }
