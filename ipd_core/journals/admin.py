# ipd_core/journals/admin.py
from __future__ import annotations

from django.contrib import admin

from ipd_core.journals.models import JournalRecord


@admin.register(JournalRecord)
class JournalRecordAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "admission",
        "category",
        "uhid",
        "version",
        "entry_count",
        "updated_at",
    )
    list_filter = ("category",)
    search_fields = ("id", "uhid", "admission__ipd_id")
    # entries are only changed through JournalService
    readonly_fields = ("id", "admission", "category", "uhid", "entries", "contributors", "version", "created_at", "updated_at")
    ordering = ("-updated_at",)

    @admin.display(description="Entries")
    def entry_count(self, obj):
        return len(obj.entries or [])
