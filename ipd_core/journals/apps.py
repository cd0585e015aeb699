# ipd_core/journals/apps.py
from django.apps import AppConfig


class JournalsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ipd_core.journals"
    verbose_name = "Clinical journals"
