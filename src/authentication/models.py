"""Custom User model using bcrypt-hashed passwords and a two-role scheme.

Note: Django's built-in groups/permissions (PermissionsMixin) are not used.
Authorization is decided by ``access_control.policy`` from ``role``,
``approved`` and ``enabled`` alone.
"""

from typing import ClassVar, Optional

from django.contrib.auth.models import AbstractBaseUser
from django.db import models

from .managers import UserManager


class Role(models.TextChoices):
    ADMIN = "ADMIN", "Admin"
    CONTRIBUTOR = "CONTRIBUTOR", "Contributor"

    @classmethod
    def from_string(cls, value) -> "Role":
        """Parse a role name; unknown or empty input falls back to CONTRIBUTOR."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.CONTRIBUTOR
        name = str(value).strip().upper()
        if name.startswith("ROLE_"):
            name = name[len("ROLE_"):]
        try:
            return cls(name)
        except ValueError:
            return cls.CONTRIBUTOR


class User(AbstractBaseUser):
    """Platform principal identified by email with bcrypt password hashes."""

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=100)
    password_hash = models.CharField(max_length=128)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.CONTRIBUTOR)
    approved = models.BooleanField(default=False)
    enabled = models.BooleanField(default=True)
    bio = models.TextField(blank=True)
    profile_picture_url = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = ["name"]

    objects = UserManager()

    class Meta:
        """Default ordering shows newest users first."""
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["role"], name="user_role_idx"),
            models.Index(fields=["approved"], name="user_approved_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.email

    @property
    def is_active(self) -> bool:  # type: ignore[override]
        return self.enabled

    @property
    def roles(self) -> list[str]:
        """Role claims as carried in session tokens."""
        return [f"ROLE_{self.role}"]

    def set_password(self, raw_password: Optional[str]) -> None:  # type: ignore[override]
        """Override to ensure bcrypt hashing via manager utility."""

        if raw_password is None:
            self.password_hash = ""
        else:
            self.password_hash = UserManager.hash_password(raw_password)

    def check_password(self, raw_password: Optional[str]) -> bool:  # type: ignore[override]
        """Delegate to bcrypt verification helper."""

        if raw_password is None:
            return False
        return UserManager.verify_password(self, raw_password)


__all__ = ["Role", "User"]
