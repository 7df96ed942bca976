"""
Django Ninja API configuration.
"""

from django.http import HttpRequest, HttpResponse
from ninja import NinjaAPI
from ninja.errors import ValidationError

from apps.cases.api import router as portal_router
from apps.core.logging import get_logger
from apps.documents.api import router as documents_router
from apps.invites.api import registration_router
from apps.invites.api import router as invites_router
from apps.sync.api import router as sync_router
from apps.sync.exceptions import SyncError

logger = get_logger(__name__)

api = NinjaAPI(
    title="Client Case Portal API",
    version="1.0.0",
    description=(
        "Case tracking for credentialing clients. Portal endpoints use Stytch "
        "sessions; command centre endpoints use a shared API key."
    ),
    openapi_extra={
        "info": {
            "contact": {"name": "API Support"},
        },
        "tags": [
            {
                "name": "portal",
                "description": "Signed-in client's cases, summaries and documents",
            },
            {
                "name": "sync",
                "description": "Command centre case sync",
            },
            {
                "name": "documents",
                "description": "Command centre document review",
            },
            {
                "name": "invites",
                "description": "Portal invitations",
            },
            {
                "name": "registration",
                "description": "Pre-registration case checks",
            },
            {
                "name": "health",
                "description": "Service health and readiness checks",
            },
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT",
                    "description": "Stytch session JWT. Include as: Authorization: Bearer <session_jwt>",
                }
            }
        },
    },
)

# Register routers
api.add_router("/portal", portal_router)
api.add_router("/sync", sync_router)
api.add_router("/documents", documents_router)
api.add_router("/invites", invites_router)
api.add_router("/registration", registration_router)


@api.exception_handler(ValidationError)
def validation_error_handler(request: HttpRequest, exc: ValidationError) -> HttpResponse:
    """Malformed payloads and bad enum values are 400s, not 422s."""
    logger.info("request_validation_failed", error_count=len(exc.errors))
    return api.create_response(
        request,
        {
            "success": False,
            "error": "Invalid request payload",
            "step": "validation",
            "details": exc.errors,
        },
        status=400,
    )


@api.exception_handler(SyncError)
def sync_error_handler(request: HttpRequest, exc: SyncError) -> HttpResponse:
    return api.create_response(
        request,
        {"success": False, "error": exc.message, "step": exc.step, "details": exc.details},
        status=exc.status_code,
    )


@api.get("/health", tags=["health"], operation_id="healthCheck", summary="Health check")
def health_check(request: HttpRequest) -> dict:
    """Health check endpoint for load balancer."""
    return {"status": "ok"}
