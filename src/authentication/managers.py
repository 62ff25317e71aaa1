"""Custom user manager handling bcrypt hashing and verification."""

import bcrypt
from django.conf import settings
from django.contrib.auth.base_user import BaseUserManager
from django.db import transaction

from core.clock import system_clock


def hash_secret(plaintext: str) -> str:
    """Return a salted bcrypt hash of ``plaintext`` as a utf-8 string."""
    salt = bcrypt.gensalt(rounds=getattr(settings, "BCRYPT_ROUNDS", 12))
    return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")


def verify_secret(plaintext: str, hashed: str) -> bool:
    """Check ``plaintext`` against a stored bcrypt hash."""
    if not hashed or plaintext is None:
        return False
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


class UserManager(BaseUserManager):
    """Manager to create users with bcrypt password hashes."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str, now=None, **extra_fields):
        if not email:
            raise ValueError("The Email must be set")
        email = self.normalize_email(email).lower()
        now = now or system_clock.now()
        extra_fields.setdefault("created_at", now)
        extra_fields.setdefault("updated_at", now)
        user = self.model(email=email, **extra_fields)
        user.password_hash = self.hash_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields):
        """Create a contributor awaiting approval."""
        extra_fields.setdefault("role", "CONTRIBUTOR")
        extra_fields.setdefault("approved", False)
        extra_fields.setdefault("enabled", True)
        if password is None:
            raise ValueError("Password must be provided")
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str, **extra_fields):
        """Create the pre-approved admin; refused once any admin exists."""
        extra_fields.setdefault("role", "ADMIN")
        extra_fields.setdefault("approved", True)
        extra_fields.setdefault("enabled", True)
        if extra_fields.get("role") != "ADMIN":
            raise ValueError("Superuser must have role=ADMIN.")
        with transaction.atomic(using=self._db):
            if self.filter(role="ADMIN").exists():
                raise ValueError("Admin user already exists in the system")
            return self._create_user(email, password, **extra_fields)

    @staticmethod
    def hash_password(raw_password: str) -> str:
        """Hash a raw password using bcrypt and return the utf-8 string."""
        return hash_secret(raw_password)

    @staticmethod
    def verify_password(user, raw_password: str) -> bool:
        """Verify raw password against stored bcrypt hash."""
        return verify_secret(raw_password, user.password_hash)


__all__ = ["UserManager", "hash_secret", "verify_secret"]
