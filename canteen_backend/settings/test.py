# canteen_backend/settings/test.py
from .development import *  # noqa: F401,F403

# -----------------------------------------------------------------------------
# Test Settings
# -----------------------------------------------------------------------------
ENVIRONMENT = "test"
DEBUG = False

SECRET_KEY = "django-insecure-test-key"
SIMPLE_JWT["SIGNING_KEY"] = SECRET_KEY  # noqa: F405

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CHANNEL_LAYERS = {
    "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Pushes land in an in-process outbox that tests can inspect
PUSH_BACKEND = "notifications.push.locmem.LocMemPushBackend"
PUSH_RETRY_BACKOFF = 0
FCM_PROJECT_ID = "test-project"
FCM_ACCESS_TOKEN = "test-access-token"

CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False

ORDER_ADMIN_ROLES = ["Manager", "Kitchen", "Cashier"]

REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []  # noqa: F405
REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = [  # noqa: F405
    "rest_framework.renderers.JSONRenderer",
]

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": "core.middleware.request_id.RequestIDFilter"},
    },
    "formatters": {
        "simple": {"format": "{levelname} {name} {request_id} {message}", "style": "{"},
    },
    "handlers": {
        "console": {
            "level": "WARNING",
            "class": "logging.StreamHandler",
            "formatter": "simple",
            "filters": ["request_id"],
        },
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
}
