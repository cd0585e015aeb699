# ipd_core/admissions/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from ipd_core.admissions.models import Admission


class AdmissionCreateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    ward = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    bed = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    attending_doctor = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    admitted_at = serializers.DateTimeField(required=False, allow_null=True)


class AdmissionSerializer(serializers.ModelSerializer):
    uhid = serializers.CharField(source="patient.uhid", read_only=True)
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)

    class Meta:
        model = Admission
        fields = [
            "ipd_id",
            "patient_id",
            "uhid",
            "patient_name",
            "ward",
            "bed",
            "attending_doctor",
            "reason",
            "admitted_at",
            "discharged_at",
            "admitted_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
