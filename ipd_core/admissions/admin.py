# ipd_core/admissions/admin.py
from django.contrib import admin

from ipd_core.admissions.models import Admission


@admin.register(Admission)
class AdmissionAdmin(admin.ModelAdmin):
    list_display = ("ipd_id", "patient", "ward", "bed", "attending_doctor", "admitted_at", "discharged_at")
    list_filter = ("ward",)
    search_fields = ("ipd_id", "patient__uhid", "patient__full_name")
    readonly_fields = ("ipd_id", "created_at", "updated_at")
    ordering = ("-admitted_at",)
