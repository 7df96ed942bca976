"""
Custom type definitions for the application.

These types help mypy understand custom attributes added by middleware.
"""

from django.http import HttpRequest

from apps.core.auth import AuthContext


class AuthenticatedHttpRequest(HttpRequest):
    """
    HttpRequest with the authentication context added by StytchAuthMiddleware.

    Use this type for portal endpoints that require a signed-in client.
    """

    auth: AuthContext
