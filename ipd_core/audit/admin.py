# ipd_core/audit/admin.py
from django.contrib import admin

from ipd_core.audit.models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ("event_code", "entity_type", "entity_id", "actor", "occurred_at")
    list_filter = ("event_code", "entity_type")
    search_fields = ("entity_id", "actor")
    readonly_fields = ("id", "event_code", "entity_type", "entity_id", "actor", "occurred_at", "metadata")
    ordering = ("-occurred_at",)
