# ipd_core/journals/api/urls.py
from __future__ import annotations

from django.urls import path

from ipd_core.journals.api.views import (
    AdmissionSnapshotView,
    CategoryListView,
    EntryDetailView,
    EntryListView,
    EntrySignatureView,
    EntryStatusView,
    ExtractView,
    JournalRecordView,
)

app_name = "journals"

_base = "admissions/<int:ipd_id>/journals/<str:category>/"

urlpatterns = [
    path("journals/categories/", CategoryListView.as_view(), name="journal-categories"),
    path(_base, JournalRecordView.as_view(), name="journal-record"),
    path(_base + "entries/", EntryListView.as_view(), name="journal-entries"),
    path(_base + "entries/<str:entry_id>/", EntryDetailView.as_view(), name="journal-entry"),
    path(_base + "entries/<str:entry_id>/status/", EntryStatusView.as_view(), name="journal-entry-status"),
    path(_base + "entries/<str:entry_id>/signatures/", EntrySignatureView.as_view(), name="journal-entry-sign"),
    path(_base + "extract/", ExtractView.as_view(), name="journal-extract"),
    path("admissions/<int:ipd_id>/snapshot/", AdmissionSnapshotView.as_view(), name="admission-snapshot"),
]
