# FILE: medvanta/backend/core/middleware.py

"""
CUSTOM MIDDLEWARE

Request/response processing middleware for:
- Request tracing and timing
- Security headers
- Maintenance mode
"""

import time
import uuid
import logging
from django.conf import settings
from django.utils.deprecation import MiddlewareMixin
from django.http import JsonResponse

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 1000


class RequestLoggingMiddleware(MiddlewareMixin):
    """
    Log every request with its status and duration.

    The request id is echoed back in X-Request-ID so client errors
    can be matched to server log lines.
    """

    def process_request(self, request):
        request.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request.start_time = time.monotonic()

    def process_response(self, request, response):
        request_id = getattr(request, "request_id", None)

        if hasattr(request, "start_time"):
            duration_ms = (time.monotonic() - request.start_time) * 1000
            response["X-Request-Duration-Ms"] = f"{duration_ms:.2f}"

            # DRF authenticates inside the view, so the user is only known here
            user = getattr(request, "user", None)
            user_id = user.pk if user is not None and user.is_authenticated else "anonymous"

            logger.info(
                f"[{request_id}] {request.method} {request.path} "
                f"{response.status_code} ({duration_ms:.2f}ms) user={user_id}"
            )

            if duration_ms > SLOW_REQUEST_MS:
                logger.warning(
                    f"[{request_id}] Slow request: {request.method} {request.path} "
                    f"took {duration_ms:.2f}ms"
                )

        if request_id:
            response["X-Request-ID"] = request_id

        return response


class SecurityHeadersMiddleware(MiddlewareMixin):
    """
    Add security headers to all responses.
    """

    def process_response(self, request, response):
        response["X-Content-Type-Options"] = "nosniff"
        response["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Patient records must never land in shared caches
        if request.path.startswith("/api/"):
            response["Cache-Control"] = "no-store"

        response["Permissions-Policy"] = (
            "accelerometer=(), camera=(), geolocation=(), "
            "gyroscope=(), magnetometer=(), microphone=(), "
            "payment=(), usb=()"
        )

        return response


class MaintenanceModeMiddleware(MiddlewareMixin):
    """
    Maintenance mode middleware.

    When enabled, returns 503 for all requests except health checks.
    """

    ALLOWED_PREFIX = "/health/"

    def process_request(self, request):
        if getattr(settings, "MAINTENANCE_MODE", False) and not request.path.startswith(self.ALLOWED_PREFIX):
            return JsonResponse(
                {
                    "success": False,
                    "error_code": "maintenance",
                    "message": "The service is under maintenance. Please try again later.",
                },
                status=503
            )
        return None
