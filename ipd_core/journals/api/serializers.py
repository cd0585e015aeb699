# ipd_core/journals/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

VIEW_CHOICES = ("active", "deleted", "all")


class CategorySerializer(serializers.Serializer):
    code = serializers.CharField()
    label = serializers.CharField()
    field_names = serializers.ListField(child=serializers.CharField())
    editable = serializers.BooleanField()
    active_ordering = serializers.CharField()
    deleted_ordering = serializers.CharField()


class RecordQuerySerializer(serializers.Serializer):
    view = serializers.ChoiceField(choices=VIEW_CHOICES, default="active")
    ordering = serializers.CharField(required=False, allow_blank=True, max_length=64)


class JournalRecordSerializer(serializers.Serializer):
    """
    Renders a JournalRecord. Pass the already filtered/sorted entries in
    context["entries"]; otherwise the stored order is returned.
    """
    id = serializers.UUIDField()
    admission_id = serializers.IntegerField()
    category = serializers.CharField()
    uhid = serializers.CharField()
    version = serializers.IntegerField()
    contributors = serializers.ListField(child=serializers.CharField())
    entries = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()

    def get_entries(self, obj):
        entries = self.context.get("entries")
        return list(obj.entries or []) if entries is None else entries


class AppendEntrySerializer(serializers.Serializer):
    payload = serializers.DictField()
    # client generated id: resubmitting it returns the stored entry
    entry_id = serializers.CharField(required=False, max_length=64)


class EditEntrySerializer(serializers.Serializer):
    payload = serializers.DictField()


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=16)


class SignEntrySerializer(serializers.Serializer):
    date_time = serializers.CharField(required=False, max_length=64)


class ExtractRequestSerializer(serializers.Serializer):
    transcript = serializers.CharField(max_length=10000, allow_blank=True)


class EntryResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()
    entry = serializers.DictField()
