# ipd_core/patients/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.exceptions import NotFound, ValidationError as DRFValidationError
from rest_framework.response import Response

from ipd_core.common.actors import current_actor
from ipd_core.patients.api.serializers import PatientCreateSerializer, PatientSerializer
from ipd_core.patients.models import Patient
from ipd_core.patients.selectors import get_patient_by_uhid, search_patients
from ipd_core.patients.services import PatientService


class PatientViewSet(viewsets.ViewSet):
    serializer_class = PatientSerializer
    queryset = Patient.objects.none()

    def list(self, request):
        q = request.query_params.get("q", "").strip()
        qs = search_patients(q=q)

        data = PatientSerializer(qs[:200], many=True).data
        return Response(data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = PatientCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            patient = PatientService.register_patient(
                actor=current_actor(request),
                **ser.validated_data,
            )
        except ValueError as e:
            raise DRFValidationError({"detail": str(e)})

        return Response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        # patients are addressed by UHID, the id every admission and journal carries
        patient = get_patient_by_uhid(uhid=pk)
        if patient is None:
            raise NotFound("Patient not found.")
        return Response(PatientSerializer(patient).data)
