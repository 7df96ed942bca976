"""Documents app configuration."""

from django.apps import AppConfig


class DocumentsConfig(AppConfig):
    """Django app configuration for client documents."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.documents"
    verbose_name = "Client documents"
