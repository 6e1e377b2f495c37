# FILE: medvanta/backend/core/views.py

"""
CORE VIEWS

System-level views: health checks and JSON error handlers.
"""

import logging
from django.http import JsonResponse
from django.db import connection, DatabaseError
from django.core.cache import cache
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

logger = logging.getLogger(__name__)


def _database_ok():
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        return True, None
    except DatabaseError as e:
        logger.error(f"Database check failed: {e}")
        return False, str(e)


class HealthCheckView(APIView):
    """
    Health check endpoint.

    Checks:
    - Database connectivity
    - Cache round trip
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        health_status = {
            "status": "healthy",
            "checks": {}
        }

        db_ok, db_error = _database_ok()
        health_status["checks"]["database"] = "ok" if db_ok else f"error: {db_error}"
        if not db_ok:
            health_status["status"] = "unhealthy"

        cache.set("health_check", "ok", 10)
        if cache.get("health_check") == "ok":
            health_status["checks"]["cache"] = "ok"
        else:
            health_status["checks"]["cache"] = "error: cache read failed"
            if health_status["status"] == "healthy":
                health_status["status"] = "degraded"

        status_code = 200 if health_status["status"] == "healthy" else 503
        return Response(health_status, status=status_code)


class ReadinessCheckView(APIView):
    """
    Readiness check: 200 once the database answers.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        db_ok, db_error = _database_ok()
        if db_ok:
            return Response({"status": "ready"})
        return Response({"status": "not ready", "error": db_error}, status=503)


class LivenessCheckView(APIView):
    """
    Liveness check.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"status": "alive"})


def custom_404(request, exception=None):
    """Custom 404 error handler"""
    return JsonResponse(
        {
            "success": False,
            "error_code": "not_found",
            "message": "The requested page was not found.",
        },
        status=404
    )


def custom_500(request):
    """Custom 500 error handler"""
    return JsonResponse(
        {
            "success": False,
            "error_code": "server_error",
            "message": "Server error. Please try again later.",
        },
        status=500
    )
