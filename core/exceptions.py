from __future__ import annotations

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

from .middleware.request_id import get_request_id

logger = logging.getLogger(__name__)


class DownstreamFailure(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "A backing service failed. Please try again later."
    default_code = "downstream_failure"


def api_exception_handler(exc, context):
    """
    DRF exception handler: storage errors become a 500 with a stable body, and
    every error response carries the request id for log correlation.
    """
    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception("Database error in %s", view.__class__.__name__ if view else "unknown view")
        exc = DownstreamFailure()

    response = exception_handler(exc, context)
    if response is None:
        return None

    request_id = get_request_id()
    if request_id and isinstance(response.data, dict):
        response.data.setdefault("request_id", request_id)
    return response
