"""
Firebase Cloud Messaging (HTTP v1) push backend.

Sends a single attempt per call; retry and backoff belong to the Celery task
that drives it. ``FCM_ACCESS_TOKEN`` is an OAuth2 bearer token for the
project's service account (minted and rotated outside this process).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from .base import BasePushBackend, PushMessage, PushResult

logger = logging.getLogger(__name__)

FCM_BASE_URL = "https://fcm.googleapis.com/v1"

# FCM error statuses meaning the registration token will never work again
UNREGISTERED_STATUSES = {"UNREGISTERED", "NOT_FOUND"}


@dataclass
class APIResponse:
    ok: bool
    status: int
    data: Any
    error: Optional[str] = None


class FCMClient:
    def __init__(self, project_id: str, access_token: str, timeout: float = 10.0, base_url: str = FCM_BASE_URL):
        self.base_url = base_url.rstrip("/")
        self.project_id = project_id
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json; UTF-8",
        })

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> APIResponse:
        url = self._url(path)
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("Network error calling %s %s: %s", method, url, e)
            return APIResponse(False, 0, None, error=str(e))
        try:
            data = resp.json()
        except ValueError:
            data = resp.text
        if resp.status_code >= 400:
            return APIResponse(False, resp.status_code, data, error=str(data))
        return APIResponse(True, resp.status_code, data)

    def send(self, message: Dict[str, Any]) -> APIResponse:
        return self._request("POST", f"projects/{self.project_id}/messages:send", json={"message": message})


def _error_status(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    error = data.get("error") or {}
    for detail in error.get("details") or []:
        code = detail.get("errorCode")
        if code:
            return code
    return error.get("status") or ""


class FCMPushBackend(BasePushBackend):
    def __init__(self, client: Optional[FCMClient] = None):
        self.client = client or FCMClient(
            project_id=settings.FCM_PROJECT_ID,
            access_token=settings.FCM_ACCESS_TOKEN,
            timeout=getattr(settings, "PUSH_TIMEOUT", 10.0),
        )

    def send(self, message: PushMessage) -> PushResult:
        payload = {
            "token": message.device_token,
            "notification": {"title": message.title, "body": message.body},
        }
        if message.data:
            payload["data"] = message.data

        res = self.client.send(payload)
        if res.ok:
            name = res.data.get("name") if isinstance(res.data, dict) else None
            return PushResult(ok=True, status=res.status, message_id=name)

        code = _error_status(res.data)
        unregistered = code in UNREGISTERED_STATUSES or (res.status == 404)
        retriable = res.status == 0 or res.status == 429 or res.status >= 500
        logger.warning("FCM send failed: status=%s code=%s error=%s", res.status, code or "-", res.error)
        return PushResult(
            ok=False,
            status=res.status,
            error=code or res.error,
            unregistered=unregistered,
            retriable=retriable,
        )
