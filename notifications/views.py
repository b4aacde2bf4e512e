from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.directory import find_user_by_email
from core.permissions import IsOrderAdmin

from .serializers import NotifyUserSerializer
from .tasks import send_push_notification_task

logger = logging.getLogger(__name__)


class NotifyUserView(APIView):
    """Send an ad-hoc push to a customer's registered device."""

    permission_classes = [IsOrderAdmin]

    @extend_schema(request=NotifyUserSerializer)
    def post(self, request):
        serializer = NotifyUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        record = find_user_by_email(data["email"])
        if record is None or not record.device_token:
            raise NotFound("No device token registered for this user.")

        send_push_notification_task.delay(data["email"], record.device_token, data["title"], data["body"], {})
        logger.info("Ad-hoc push queued for %s by %s", data["email"], request.user.pk)
        return Response({"message": "Notification queued"}, status=status.HTTP_202_ACCEPTED)
