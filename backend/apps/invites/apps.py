"""Invites app configuration."""

from django.apps import AppConfig


class InvitesConfig(AppConfig):
    """Django app configuration for portal invites and registration checks."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.invites"
    verbose_name = "Invites"
