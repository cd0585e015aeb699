# ipd_core/admissions/api/views.py
from __future__ import annotations

from django.core.exceptions import ObjectDoesNotExist
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError as DRFValidationError
from rest_framework.response import Response

from ipd_core.admissions.api.serializers import AdmissionCreateSerializer, AdmissionSerializer
from ipd_core.admissions.models import Admission
from ipd_core.admissions.selectors import list_admissions
from ipd_core.admissions.services import AdmissionService
from ipd_core.common.actors import current_actor


def _parse_bool(v) -> bool:
    if v is None:
        return False
    return str(v).strip().lower() in {"1", "true", "yes", "y", "on"}


class AdmissionViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Admission directory. Listing supports ?open=true, ?ward=, ?bed=,
    ?patient__uhid=, ?search= and ?ordering=.
    """
    serializer_class = AdmissionSerializer
    queryset = Admission.objects.select_related("patient").order_by("-admitted_at")
    lookup_field = "ipd_id"

    filterset_fields = ["ward", "bed", "patient__uhid", "attending_doctor"]
    search_fields = ["patient__full_name", "patient__uhid", "attending_doctor"]
    ordering_fields = ["admitted_at", "ipd_id", "ward"]

    def get_queryset(self):
        open_only = _parse_bool(self.request.query_params.get("open"))
        return list_admissions(open_only=open_only)

    def create(self, request):
        ser = AdmissionCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            admission = AdmissionService.admit(actor=current_actor(request), **ser.validated_data)
        except ObjectDoesNotExist:
            raise NotFound("Patient not found.")
        except ValueError as e:
            raise DRFValidationError({"detail": str(e)})

        return Response(AdmissionSerializer(admission).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="discharge")
    def discharge(self, request, ipd_id=None):
        try:
            admission = AdmissionService.discharge(actor=current_actor(request), admission_id=ipd_id)
        except ObjectDoesNotExist:
            raise NotFound("Admission not found.")
        except ValueError as e:
            raise DRFValidationError({"detail": str(e)})

        return Response(AdmissionSerializer(admission).data)
