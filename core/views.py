import logging
import time

from django.db import connection
from django.http import JsonResponse
from django.views.decorators.http import require_GET

logger = logging.getLogger(__name__)


@require_GET
def health_check(request):
    """
    Liveness probe that verifies database connectivity.
    Returns 200 if healthy, 503 if the database is down.
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "services": {},
    }

    try:
        start_time = time.time()
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["services"]["database"] = {
            "status": "healthy",
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        health_status["services"]["database"] = {
            "status": "unhealthy",
            "error": str(e),
        }
        health_status["status"] = "unhealthy"

    code = 200 if health_status["status"] == "healthy" else 503
    return JsonResponse(health_status, status=code)
