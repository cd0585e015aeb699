# ipd_core/journals/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.exceptions import NotFound as DRFNotFound
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ipd_core.admissions.models import Admission
from ipd_core.common.actors import current_actor
from ipd_core.common.api.exceptions import (
    ConflictError,
    ReferenceNotFoundError,
    StorageUnavailableError,
    WriteConflictError,
)
from ipd_core.journals import selectors
from ipd_core.journals.api.serializers import (
    AppendEntrySerializer,
    CategorySerializer,
    EditEntrySerializer,
    EntryResponseSerializer,
    ExtractRequestSerializer,
    JournalRecordSerializer,
    RecordQuerySerializer,
    SignEntrySerializer,
    StatusChangeSerializer,
)
from ipd_core.journals.categories import REGISTRY, get_category
from ipd_core.journals.exceptions import (
    CategoryNotEditable,
    ConcurrentWriteError,
    JournalError,
    NotFound,
    PayloadValidationError,
    RecordNotFound,
    ReferenceNotFound,
    StorageError,
    UnknownCategory,
)
from ipd_core.journals.extraction import suggest_payload
from ipd_core.journals.read_models import build_admission_snapshot
from ipd_core.journals.services import JournalService

TAG = "Journals"


def to_api_error(exc: JournalError) -> APIException:
    """Map domain failures onto the API error envelope."""
    if isinstance(exc, PayloadValidationError):
        return DRFValidationError(exc.errors)
    if isinstance(exc, ReferenceNotFound):
        return ReferenceNotFoundError(str(exc))
    if isinstance(exc, (NotFound, UnknownCategory)):
        return DRFNotFound(str(exc))
    if isinstance(exc, CategoryNotEditable):
        return ConflictError(str(exc))
    if isinstance(exc, ConcurrentWriteError):
        return WriteConflictError()
    if isinstance(exc, StorageError):
        return StorageUnavailableError()
    return APIException(str(exc))


def _entry_response(entry: dict, detail: str, http_status=status.HTTP_200_OK) -> Response:
    return Response({"detail": detail, "entry": entry}, status=http_status)


class CategoryListView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=[TAG], responses={200: CategorySerializer(many=True)})
    def get(self, request):
        return Response(CategorySerializer(list(REGISTRY.values()), many=True).data)


class JournalRecordView(APIView):
    """
    Current record for one (admission, category).
    Responds with an ETag; a matching If-None-Match gets 304 so clients can poll cheaply.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=[TAG],
        parameters=[
            OpenApiParameter("view", OpenApiTypes.STR, OpenApiParameter.QUERY, enum=["active", "deleted", "all"]),
            OpenApiParameter("ordering", OpenApiTypes.STR, OpenApiParameter.QUERY),
        ],
        responses={200: JournalRecordSerializer, 304: None, 404: OpenApiTypes.OBJECT},
    )
    def get(self, request, ipd_id: int, category: str):
        q = RecordQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        view = q.validated_data["view"]
        ordering = q.validated_data.get("ordering") or None

        try:
            spec = get_category(category)
            if not Admission.objects.filter(ipd_id=ipd_id).exists():
                raise ReferenceNotFound(ipd_id)
            record = selectors.get_record(admission_id=ipd_id, category=spec.code)
        except JournalError as e:
            raise to_api_error(e)

        if record is None:
            raise to_api_error(RecordNotFound(ipd_id, spec.code))

        if request.headers.get("If-None-Match") == record.etag:
            return Response(status=status.HTTP_304_NOT_MODIFIED, headers={"ETag": record.etag})

        if view == "active":
            entries = selectors.list_active(record, order_by=ordering)
        elif view == "deleted":
            entries = selectors.list_deleted(record, order_by=ordering)
        else:
            entries = selectors.sort_entries(record.entries, ordering)

        data = JournalRecordSerializer(record, context={"entries": entries}).data
        return Response(data, headers={"ETag": record.etag})


class EntryListView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=[TAG],
        request=AppendEntrySerializer,
        responses={201: EntryResponseSerializer, 200: EntryResponseSerializer},
    )
    def post(self, request, ipd_id: int, category: str):
        ser = AppendEntrySerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            entry, created = JournalService.append_entry(
                admission_id=ipd_id,
                category=category,
                payload=ser.validated_data["payload"],
                actor=current_actor(request),
                entry_id=ser.validated_data.get("entry_id"),
            )
        except JournalError as e:
            raise to_api_error(e)

        if created:
            return _entry_response(entry, "Entry added successfully.", status.HTTP_201_CREATED)
        return _entry_response(entry, "Entry already recorded.")


class EntryDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=[TAG], request=None, responses={200: EntryResponseSerializer})
    def delete(self, request, ipd_id: int, category: str, entry_id: str):
        try:
            entry = JournalService.soft_delete_entry(
                admission_id=ipd_id,
                category=category,
                entry_id=entry_id,
                actor=current_actor(request),
            )
        except JournalError as e:
            raise to_api_error(e)
        return _entry_response(entry, "Entry deleted successfully.")

    @extend_schema(tags=[TAG], request=EditEntrySerializer, responses={200: EntryResponseSerializer})
    def patch(self, request, ipd_id: int, category: str, entry_id: str):
        ser = EditEntrySerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            entry = JournalService.edit_entry(
                admission_id=ipd_id,
                category=category,
                entry_id=entry_id,
                new_payload=ser.validated_data["payload"],
                actor=current_actor(request),
            )
        except JournalError as e:
            raise to_api_error(e)
        return _entry_response(entry, "Entry updated successfully.")


class EntryStatusView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=[TAG], request=StatusChangeSerializer, responses={200: EntryResponseSerializer})
    def post(self, request, ipd_id: int, category: str, entry_id: str):
        ser = StatusChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            entry = JournalService.change_status(
                admission_id=ipd_id,
                category=category,
                entry_id=entry_id,
                status=ser.validated_data["status"],
                actor=current_actor(request),
            )
        except JournalError as e:
            raise to_api_error(e)
        return _entry_response(entry, f"Status set to {entry['payload'].get('status')}.")


class EntrySignatureView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=[TAG], request=SignEntrySerializer, responses={200: EntryResponseSerializer})
    def post(self, request, ipd_id: int, category: str, entry_id: str):
        ser = SignEntrySerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            entry = JournalService.sign_entry(
                admission_id=ipd_id,
                category=category,
                entry_id=entry_id,
                date_time=ser.validated_data.get("date_time"),
                actor=current_actor(request),
            )
        except JournalError as e:
            raise to_api_error(e)
        return _entry_response(entry, "Signature recorded.")


class ExtractView(APIView):
    """Suggest a payload from dictated text. Never fails because the provider did."""
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=[TAG], request=ExtractRequestSerializer, responses={200: OpenApiTypes.OBJECT})
    def post(self, request, ipd_id: int, category: str):
        ser = ExtractRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            spec = get_category(category)
        except JournalError as e:
            raise to_api_error(e)

        suggestion = suggest_payload(spec, ser.validated_data["transcript"])
        detail = "Suggestion ready, please review." if suggestion else "No suggestion available."
        return Response({"detail": detail, "suggestion": suggestion})


class AdmissionSnapshotView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=[TAG], responses={200: OpenApiTypes.OBJECT})
    def get(self, request, ipd_id: int):
        try:
            snapshot = build_admission_snapshot(admission_id=ipd_id)
        except JournalError as e:
            raise to_api_error(e)
        return Response(snapshot.as_dict())
