# ipd_core/api/urls.py
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from ipd_core.admissions.api.views import AdmissionViewSet
from ipd_core.patients.api.views import PatientViewSet

router = DefaultRouter()

router.register(r"patients", PatientViewSet, basename="patients")
router.register(r"admissions", AdmissionViewSet, basename="admissions")

urlpatterns = [
    # Bearer tokens for API clients (session auth also works for the admin/browsable API)
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    # Journals (namespaced so tests can reverse("journals:..."))
    path(
        "",
        include(("ipd_core.journals.api.urls", "journals"), namespace="journals"),
    ),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
