# ipd_core/patients/admin.py
from django.contrib import admin

from ipd_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ("uhid", "full_name", "phone", "gender", "created_at")
    search_fields = ("uhid", "full_name", "phone")
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("-created_at",)
