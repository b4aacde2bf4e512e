from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()


class EmailOrUsernameTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Allow login with username OR email."""

    @classmethod
    def get_token(cls, user):
        tok = super().get_token(user)
        tok["username"] = user.get_username()
        tok["email"] = user.email or ""
        return tok

    def validate(self, attrs):
        supplied = (attrs.get("username") or "").strip()
        lookup = {"email__iexact": supplied} if "@" in supplied else {f"{User.USERNAME_FIELD}__iexact": supplied}
        user = User.objects.filter(**lookup).first()
        if user is not None:
            attrs["username"] = getattr(user, User.USERNAME_FIELD)

        data = super().validate(attrs)
        data["user"] = {
            "id": self.user.id,
            "username": self.user.get_username(),
            "email": self.user.email or "",
            "name": self.user.display_name,
        }
        return data


class DeviceTokenSerializer(serializers.Serializer):
    deviceToken = serializers.CharField(max_length=512, trim_whitespace=True)


class DeviceTokenStatusSerializer(serializers.Serializer):
    email = serializers.EmailField()
    hasToken = serializers.BooleanField()
    tokenPreview = serializers.CharField(allow_null=True)
    updatedAt = serializers.DateTimeField(allow_null=True)
