"""Cases app configuration."""

from django.apps import AppConfig


class CasesConfig(AppConfig):
    """Django app configuration for pipelines, persons and cases."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.cases"
    verbose_name = "Cases"
