# ipd_core/patients/selectors.py
from __future__ import annotations

from django.db.models import Q, QuerySet

from ipd_core.patients.models import Patient


def get_patient_by_uhid(*, uhid: str) -> Patient | None:
    return Patient.objects.filter(uhid=uhid).first()


def search_patients(*, q: str | None = None) -> QuerySet[Patient]:
    qs = Patient.objects.all()

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(
            Q(full_name__icontains=qv)
            | Q(uhid__icontains=qv)
            | Q(phone__icontains=qv)
        )

    return qs.order_by("-created_at")
