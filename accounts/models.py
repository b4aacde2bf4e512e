from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class User(AbstractUser):
    """
    Custom user model. Email identifies the order owner, so it is unique and
    compared case-insensitively by the directory helpers.
    """

    email = models.EmailField(
        "email address",
        unique=True,
        help_text="Order owner identity and notification room key",
    )

    device_token = models.CharField(
        max_length=512,
        blank=True,
        default="",
        help_text="Push registration token for the user's device",
    )

    device_token_updated_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the push registration token was last changed",
    )

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return self.email or self.get_username()

    @property
    def display_name(self) -> str:
        full = self.get_full_name().strip()
        return full or self.get_username()

    def set_device_token(self, token: str, save: bool = True) -> None:
        self.device_token = (token or "").strip()
        self.device_token_updated_at = timezone.now()
        if save:
            self.save(update_fields=["device_token", "device_token_updated_at"])

    def clear_device_token(self, save: bool = True) -> None:
        self.set_device_token("", save=save)
