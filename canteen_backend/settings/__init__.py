# canteen_backend/settings/__init__.py
"""
Django settings package for the canteen orders backend.

This package provides environment-specific settings:
- development: Local development with debug enabled
- production: Production environment with security hardening
- test: Used by the pytest suite (in-memory channel layer, eager Celery)

Settings are loaded based on the ENVIRONMENT variable and default to
development.
"""

import os
import sys

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()

VALID_ENVIRONMENTS = ["development", "production", "test"]
if ENVIRONMENT not in VALID_ENVIRONMENTS:
    raise ValueError(
        f"Invalid ENVIRONMENT '{ENVIRONMENT}'. "
        f"Must be one of: {', '.join(VALID_ENVIRONMENTS)}"
    )

if ENVIRONMENT == "production":
    from .production import *  # noqa: F401,F403
elif ENVIRONMENT == "test":
    from .test import *  # noqa: F401,F403
else:
    from .development import *  # noqa: F401,F403

ENVIRONMENT_INFO = {
    "name": ENVIRONMENT,
    "debug": DEBUG,  # noqa: F405
    "allowed_hosts": ALLOWED_HOSTS,  # noqa: F405
    "database_engine": DATABASES["default"]["ENGINE"],  # noqa: F405
    "channel_layer": CHANNEL_LAYERS["default"]["BACKEND"],  # noqa: F405
    "push_backend": PUSH_BACKEND,  # noqa: F405
}


def validate_settings():
    """Validate critical settings are properly configured."""
    errors = []

    if not SECRET_KEY or SECRET_KEY.startswith("django-insecure"):  # noqa: F405
        if ENVIRONMENT == "production":
            errors.append("SECRET_KEY must be set to a secure random value")

    if not DATABASES.get("default"):  # noqa: F405
        errors.append("Database configuration is missing")

    if ENVIRONMENT == "production" and not ALLOWED_HOSTS:  # noqa: F405
        errors.append("ALLOWED_HOSTS must be configured for production")

    if ENVIRONMENT == "production" and globals().get("CORS_ALLOW_ALL_ORIGINS", False):
        errors.append("CORS_ALLOW_ALL_ORIGINS should not be True in production")

    if ENVIRONMENT == "production" and DEBUG:  # noqa: F405
        errors.append("DEBUG should be False in production")

    if errors:
        error_msg = "\n".join([f"  - {error}" for error in errors])
        raise ValueError(f"Settings validation failed:\n{error_msg}")


if "migrate" not in sys.argv and "collectstatic" not in sys.argv:
    try:
        validate_settings()
    except ValueError as e:
        print(f"Settings validation warning: {e}")
        if ENVIRONMENT == "production":
            raise
