# canteen_backend/settings/production.py
from .base import *  # noqa: F401,F403
from .base import _split_csv
import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration
from sentry_sdk.integrations.celery import CeleryIntegration
from sentry_sdk.integrations.redis import RedisIntegration

# -----------------------------------------------------------------------------
# Production Settings
# -----------------------------------------------------------------------------
DEBUG = False

# Strict host validation
ALLOWED_HOSTS = _split_csv("DJANGO_ALLOWED_HOSTS")
if not ALLOWED_HOSTS:
    raise ValueError("DJANGO_ALLOWED_HOSTS must be set in production")

# -----------------------------------------------------------------------------
# Security Settings (Enhanced for Production)
# -----------------------------------------------------------------------------
SECURE_SSL_REDIRECT = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

# -----------------------------------------------------------------------------
# Database Configuration (Production)
# -----------------------------------------------------------------------------
if not os.getenv("DATABASE_URL"):  # noqa: F405
    raise ValueError("DATABASE_URL is required in production")

DATABASES["default"]["CONN_MAX_AGE"] = 600  # noqa: F405
DATABASES["default"]["OPTIONS"] = {  # noqa: F405
    "sslmode": "require",
    "options": "-c default_transaction_isolation=read_committed",
}

# -----------------------------------------------------------------------------
# Channels / Celery (Production)
# -----------------------------------------------------------------------------
# Cross-process fan-out needs the Redis channel layer
if not os.getenv("REDIS_URL"):  # noqa: F405
    raise ValueError("REDIS_URL must be set in production")

CELERY_TASK_ALWAYS_EAGER = False

if PUSH_BACKEND.endswith("FCMPushBackend") and not FCM_PROJECT_ID:  # noqa: F405
    raise ValueError("FCM_PROJECT_ID must be set when the FCM push backend is enabled")

# -----------------------------------------------------------------------------
# Logging Configuration (Production)
# -----------------------------------------------------------------------------
LOGGING["handlers"]["console"]["formatter"] = "json"  # noqa: F405
for _name in ("orders", "notifications", "accounts"):
    LOGGING["loggers"][_name]["handlers"] = ["console", "file", "error_file"]  # noqa: F405

# -----------------------------------------------------------------------------
# Sentry Configuration
# -----------------------------------------------------------------------------
SENTRY_DSN = os.getenv("SENTRY_DSN", "")  # noqa: F405
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[
            DjangoIntegration(transaction_style="url"),
            CeleryIntegration(monitor_beat_tasks=False),
            RedisIntegration(),
        ],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),  # noqa: F405
        send_default_pii=False,
        environment="production",
        release=os.getenv("APP_VERSION", "unknown"),  # noqa: F405
    )

# -----------------------------------------------------------------------------
# DRF Configuration (Production)
# -----------------------------------------------------------------------------
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {  # noqa: F405
    "anon": "60/hour",
    "user": "1000/hour",
    "login": "10/minute",
}
