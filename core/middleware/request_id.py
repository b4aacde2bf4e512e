import uuid
import logging
from contextvars import ContextVar

from django.utils.deprecation import MiddlewareMixin

# Context-local so the id survives sync_to_async hops under ASGI
_request_id: ContextVar = ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "HTTP_X_REQUEST_ID"


class RequestIDMiddleware(MiddlewareMixin):
    """
    Middleware that adds a unique request ID to each request and makes it available
    to logging throughout the request lifecycle.

    An incoming ``X-Request-ID`` header is reused so ids can be traced across
    a proxy; otherwise a fresh uuid4 is generated.
    """

    def process_request(self, request):
        request_id = request.META.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.request_id = request_id
        request._request_id_token = _request_id.set(request_id)
        return None

    def process_response(self, request, response):
        if hasattr(request, "request_id"):
            response["X-Request-ID"] = request.request_id
        token = getattr(request, "_request_id_token", None)
        if token is not None:
            _request_id.reset(token)
            request._request_id_token = None
        return response


def get_request_id():
    """
    Current request id, or None outside a request.
    """
    return _request_id.get()


class RequestIDFilter(logging.Filter):
    """
    Logging filter that adds request ID to log records.
    """

    def filter(self, record):
        record.request_id = get_request_id() or "no-request-id"
        return True
