# ipd_core/journals/read_models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ipd_core.admissions.selectors import get_admission
from ipd_core.journals.categories import REGISTRY
from ipd_core.journals.entries import normalize_contributors
from ipd_core.journals.exceptions import ReferenceNotFound
from ipd_core.journals.models import JournalRecord
from ipd_core.journals.selectors import list_active


@dataclass(frozen=True)
class JournalSnapshot:
    category: str
    label: str
    record_id: Optional[str]
    version: int
    entries: Tuple[dict, ...]
    contributors: Tuple[str, ...]


@dataclass(frozen=True)
class AdmissionSnapshot:
    """
    Read-model handed to document renderers (admission letter, patient file).
    Only active entries; every category is present, empty when never written.
    """
    ipd_id: int
    uhid: str
    patient_name: str
    admitted_at_iso: str
    discharged_at_iso: Optional[str]
    ward: str
    bed: str
    attending_doctor: str
    journals: Tuple[JournalSnapshot, ...]

    def journal(self, category: str) -> Optional[JournalSnapshot]:
        for j in self.journals:
            if j.category == category:
                return j
        return None

    def as_dict(self) -> Dict:
        return {
            "ipd_id": self.ipd_id,
            "uhid": self.uhid,
            "patient_name": self.patient_name,
            "admitted_at": self.admitted_at_iso,
            "discharged_at": self.discharged_at_iso,
            "ward": self.ward,
            "bed": self.bed,
            "attending_doctor": self.attending_doctor,
            "journals": {
                j.category: {
                    "label": j.label,
                    "record_id": j.record_id,
                    "version": j.version,
                    "entries": list(j.entries),
                    "contributors": list(j.contributors),
                }
                for j in self.journals
            },
        }


def build_admission_snapshot(*, admission_id: int) -> AdmissionSnapshot:
    admission = get_admission(admission_id=admission_id)
    if admission is None:
        raise ReferenceNotFound(admission_id)

    records: Dict[str, JournalRecord] = {
        r.category: r
        for r in JournalRecord.objects.filter(admission_id=admission_id, deleted_data__isnull=True)
    }

    journals: List[JournalSnapshot] = []
    for code, spec in REGISTRY.items():
        record = records.get(code)
        journals.append(
            JournalSnapshot(
                category=code,
                label=spec.label,
                record_id=str(record.id) if record else None,
                version=record.version if record else 0,
                entries=tuple(list_active(record)),
                contributors=tuple(normalize_contributors(record.contributors)) if record else (),
            )
        )

    return AdmissionSnapshot(
        ipd_id=admission.ipd_id,
        uhid=admission.patient.uhid,
        patient_name=admission.patient.full_name,
        admitted_at_iso=admission.admitted_at.isoformat(),
        discharged_at_iso=admission.discharged_at.isoformat() if admission.discharged_at else None,
        ward=admission.ward,
        bed=admission.bed,
        attending_doctor=admission.attending_doctor,
        journals=tuple(journals),
    )
