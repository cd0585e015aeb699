# ipd_core/audit/models.py
import uuid

from django.db import models


class AuditEvent(models.Model):
    """
    Immutable audit record.
    Every journal mutation writes one of these next to the JSON entry itself.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "journal.entry_deleted"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "JournalRecord"
    entity_id = models.CharField(max_length=64, db_index=True)

    # contributor identifier (email / username / "unknown")
    actor = models.CharField(max_length=255, db_index=True)

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["event_code", "occurred_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_code} {self.entity_type}:{self.entity_id}"
