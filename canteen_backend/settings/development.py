# canteen_backend/settings/development.py
from .base import *  # noqa: F401,F403

# -----------------------------------------------------------------------------
# Development Settings
# -----------------------------------------------------------------------------
DEBUG = True

ALLOWED_HOSTS = ["*"]

# CORS - Allow all origins in development
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOWED_ORIGINS = []

CSRF_TRUSTED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]

# -----------------------------------------------------------------------------
# Security Settings (Relaxed for Development)
# -----------------------------------------------------------------------------
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False
SECURE_HSTS_SECONDS = 0
SECURE_HSTS_INCLUDE_SUBDOMAINS = False
X_FRAME_OPTIONS = "SAMEORIGIN"

# -----------------------------------------------------------------------------
# Push notifications (Development)
# -----------------------------------------------------------------------------
# Print pushes instead of calling FCM unless explicitly configured
if not os.getenv("PUSH_BACKEND"):  # noqa: F405
    PUSH_BACKEND = "notifications.push.console.ConsolePushBackend"

# Run Celery tasks inline when no broker is configured
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "1") == "1"  # noqa: F405
CELERY_TASK_EAGER_PROPAGATES = False

# -----------------------------------------------------------------------------
# Logging Configuration (Development)
# -----------------------------------------------------------------------------
LOGGING["root"]["level"] = "INFO"  # noqa: F405
for _name in ("django", "orders", "notifications", "accounts"):
    LOGGING["loggers"][_name]["handlers"] = ["console"]  # noqa: F405
LOGGING["loggers"]["orders"]["level"] = "DEBUG"  # noqa: F405
LOGGING["loggers"]["notifications"]["level"] = "DEBUG"  # noqa: F405

LOGGING["loggers"]["django.db.backends"] = {  # noqa: F405
    "handlers": ["console"],
    "level": "DEBUG" if os.getenv("DEBUG_SQL", "0") == "1" else "INFO",  # noqa: F405
    "propagate": False,
}

# -----------------------------------------------------------------------------
# DRF Configuration (Development)
# -----------------------------------------------------------------------------
REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = [  # noqa: F405
    "rest_framework.renderers.JSONRenderer",
    "rest_framework.renderers.BrowsableAPIRenderer",
]

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {  # noqa: F405
    "anon": "1000/hour",
    "user": "10000/hour",
    "login": "100/minute",
}

# Longer token lifetime for development convenience
SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"] = timedelta(hours=1)  # noqa: F405
SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"] = timedelta(days=30)  # noqa: F405

DEBUG_PROPAGATE_EXCEPTIONS = False
