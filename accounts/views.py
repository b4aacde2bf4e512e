from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core.permissions import IsOrderAdmin
from .directory import normalize_email
from .serializers import (
    DeviceTokenSerializer,
    DeviceTokenStatusSerializer,
    EmailOrUsernameTokenObtainPairSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()

TOKEN_PREVIEW_LENGTH = 20


class LoginRateThrottle(AnonRateThrottle):
    scope = "login"


class LoginView(TokenObtainPairView):
    """Issue an access/refresh pair for username-or-email + password."""

    serializer_class = EmailOrUsernameTokenObtainPairSerializer
    permission_classes = [AllowAny]
    throttle_classes = [LoginRateThrottle]


class RefreshView(TokenRefreshView):
    permission_classes = [AllowAny]


class DeviceTokenView(APIView):
    """
    Register (PUT) or clear (DELETE) the push token for the current user.
    """

    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = DeviceTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        request.user.set_device_token(serializer.validated_data["deviceToken"])
        logger.info("Device token registered for user %s", request.user.pk)
        return Response({"message": "Device token saved"})

    def delete(self, request):
        request.user.clear_device_token()
        logger.info("Device token cleared for user %s", request.user.pk)
        return Response({"message": "Device token removed"})


class DeviceTokenStatusView(APIView):
    """Admin diagnostic: is a push token registered for this email?"""

    permission_classes = [IsOrderAdmin]

    def get(self, request, email: str):
        user = User.objects.filter(email__iexact=normalize_email(email)).first()
        if user is None:
            raise NotFound("User not found")
        token = user.device_token or ""
        payload = {
            "email": user.email,
            "hasToken": bool(token),
            "tokenPreview": f"{token[:TOKEN_PREVIEW_LENGTH]}..." if token else None,
            "updatedAt": user.device_token_updated_at,
        }
        return Response(DeviceTokenStatusSerializer(payload).data, status=status.HTTP_200_OK)
