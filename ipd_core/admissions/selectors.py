# ipd_core/admissions/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from ipd_core.admissions.models import Admission


def get_admission(*, admission_id: int) -> Admission | None:
    return Admission.objects.select_related("patient").filter(ipd_id=admission_id).first()


def resolve_cross_reference(admission_id: int) -> str | None:
    """
    ParentCase directory lookup: admission id -> patient UHID.
    Returns None when the admission does not exist.
    """
    return (
        Admission.objects.filter(ipd_id=admission_id)
        .values_list("patient__uhid", flat=True)
        .first()
    )


def list_admissions(*, open_only: bool = False) -> QuerySet[Admission]:
    qs = Admission.objects.select_related("patient")
    if open_only:
        qs = qs.filter(discharged_at__isnull=True)
    return qs.order_by("-admitted_at")
