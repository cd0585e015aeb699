# ipd_core/journals/payloads.py
"""
Payload schemas for each journal category.

Readings are kept as free text (units and formats vary by ward); only the
fields a clinician cannot omit are required.
"""
from __future__ import annotations

from django.utils import timezone
from rest_framework import serializers


def _text(max_length: int = 255, **kwargs):
    return serializers.CharField(
        max_length=max_length,
        required=False,
        allow_blank=True,
        **kwargs,
    )


class VitalsPayloadSerializer(serializers.Serializer):
    date_time = serializers.DateTimeField(default=timezone.now)
    temperature = _text(32)
    pulse = _text(32)
    respiratory_rate = _text(32)
    blood_pressure = _text(32)
    intake_oral = _text(64)
    intake_iv = _text(64)
    output_urine = _text(64)
    output_stool = _text(64)
    output_aspiration = _text(64)

    READING_FIELDS = (
        "temperature",
        "pulse",
        "respiratory_rate",
        "blood_pressure",
        "intake_oral",
        "intake_iv",
        "output_urine",
        "output_stool",
        "output_aspiration",
    )

    def validate(self, attrs):
        if not any((attrs.get(f) or "").strip() for f in self.READING_FIELDS):
            raise serializers.ValidationError("At least one vital reading is required.")
        return attrs


class NotePayloadSerializer(serializers.Serializer):
    """Nurse notes and progress notes share the same shape."""
    note_text = serializers.CharField(max_length=5000, allow_blank=False, trim_whitespace=True)


class DoctorVisitPayloadSerializer(serializers.Serializer):
    doctor_name = serializers.CharField(max_length=255, allow_blank=False)
    date_time = serializers.DateTimeField()


class GlucosePayloadSerializer(serializers.Serializer):
    blood_sugar = serializers.CharField(max_length=32, allow_blank=False)
    urine_sugar_ketone = _text(64)
    medication = _text()
    dose = _text(64)
    ordered_by = _text()
    staff_or_nurse = _text()


DRUG_STATUS_CHOICES = ("active", "hold", "omit")


class DrugChartPayloadSerializer(serializers.Serializer):
    date_time = serializers.DateTimeField(default=timezone.now)
    drug_name = serializers.CharField(max_length=255, allow_blank=False)
    duration = _text(64)
    dosage = _text(64)
    dose = _text(64)
    route = _text(64)
    frequency = _text(64)
    special_instruction = _text(1000)
    stat = _text(64)
    status = serializers.ChoiceField(choices=DRUG_STATUS_CHOICES, default="active")


class DrugStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=DRUG_STATUS_CHOICES)


class SignaturePayloadSerializer(serializers.Serializer):
    date_time = serializers.DateTimeField(default=timezone.now)


CUSTOM_TEST = "Custom"


class InvestigationPayloadSerializer(serializers.Serializer):
    test_name = serializers.CharField(max_length=128, allow_blank=False)
    custom_test_name = _text(128)
    date_time = serializers.DateTimeField(default=timezone.now)
    value = serializers.CharField(max_length=5000, allow_blank=False)
    value_type = serializers.ChoiceField(choices=("text", "image"), default="text")

    def validate(self, attrs):
        if attrs.get("test_name") == CUSTOM_TEST and not (attrs.get("custom_test_name") or "").strip():
            raise serializers.ValidationError({"custom_test_name": "Required when test_name is Custom."})

        if attrs.get("value_type") == "image":
            # image values are links to the uploaded file
            try:
                serializers.URLField().run_validation(attrs.get("value"))
            except serializers.ValidationError:
                raise serializers.ValidationError({"value": "Image entries must be a valid URL."})
        return attrs


class ClinicNotePayloadSerializer(serializers.Serializer):
    main_complaints_and_duration = _text(5000)
    past_history = _text(5000)
    family_social_history = _text(5000)
    general_physical_examination = _text(5000)
    systemic_cardiovascular = _text(5000)
    systemic_respiratory = _text(5000)
    systemic_per_abdomen = _text(5000)
    systemic_neurology = _text(5000)
    systemic_skeletal = _text(5000)
    systemic_other = _text(5000)
    summary = _text(5000)
    provisional_diagnosis = _text(5000)
    additional_notes = _text(5000)

    def validate(self, attrs):
        if not any((v or "").strip() for v in attrs.values()):
            raise serializers.ValidationError("At least one clinic note field is required.")
        return attrs


class AdmissionAssessmentPayloadSerializer(serializers.Serializer):
    SECTIONS = (
        "cardiovascular_assessments",
        "respiratory_assessment",
        "urinary_system",
        "gastrointestinal_system",
        "musculoskeletal_assessment",
        "integumentary_system",
        "neurological_assessment",
        "pain_assessment",
        "fall_risk_assessment",
        "nutritional_assessment",
    )

    cardiovascular_assessments = serializers.DictField(required=False)
    respiratory_assessment = serializers.DictField(required=False)
    urinary_system = serializers.DictField(required=False)
    gastrointestinal_system = serializers.DictField(required=False)
    musculoskeletal_assessment = serializers.DictField(required=False)
    integumentary_system = serializers.DictField(required=False)
    neurological_assessment = serializers.DictField(required=False)
    pain_assessment = serializers.DictField(required=False)
    fall_risk_assessment = serializers.DictField(required=False)
    nutritional_assessment = serializers.DictField(required=False)
    remarks = _text(5000)

    def validate(self, attrs):
        if not any(attrs.get(s) for s in self.SECTIONS):
            raise serializers.ValidationError("At least one assessment section is required.")
        return attrs
