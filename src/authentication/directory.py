"""User directory: account lifecycle, login, and directory reads.

Every operation takes the acting principal or target id explicitly; nothing
reads the current request. Admin-only gates are enforced at the boundary by
``CapabilityPermission`` before these methods are called.
"""

import logging
import re
from dataclasses import dataclass

from django.db import IntegrityError, transaction
from django.db.models import Count, Q

from core.clock import system_clock, window_start
from core.errors import (
    AuthenticationError,
    ConflictError,
    LoginRejectedError,
    LoginRejectionReason,
    NotFoundError,
    ValidationFailedError,
)
from core.logging_safety import masked_email
from core.pagination import Page, PageRequest, bounded_limit, paginate
from .managers import hash_secret, verify_secret
from .models import Role, User
from .services import TokenService

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8
# bcrypt only accepts secrets up to 72 bytes.
MAX_PASSWORD_BYTES = 72
MAX_NAME_LENGTH = 100


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


@dataclass(frozen=True)
class BootstrapResult:
    token: str
    user: User


def _normalize_email(email) -> str:
    return (email or "").strip().lower()


def _password_error(password) -> str | None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
    return None


def _validate_identity(email: str, name: str, password: str) -> None:
    errors: dict[str, str] = {}
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_RE.match(email) or len(email) > 254:
        errors["email"] = "Email should be valid"
    name = (name or "").strip()
    if not name:
        errors["name"] = "Name is required"
    elif len(name) > MAX_NAME_LENGTH:
        errors["name"] = f"Name must be at most {MAX_NAME_LENGTH} characters"
    password_error = _password_error(password)
    if password_error:
        errors["password"] = password_error
    if errors:
        raise ValidationFailedError(errors)


class UserDirectory:
    """Owns registration, approval, role changes and profile edits."""

    def __init__(self, clock=None):
        self.clock = clock or system_clock

    # Lifecycle

    def register(self, email: str, name: str, password: str) -> User:
        """Create a CONTRIBUTOR account awaiting admin approval."""
        email = _normalize_email(email)
        _validate_identity(email, name, password)
        if User.objects.filter(email__iexact=email).exists():
            raise ConflictError("User already exists with this email")

        user = self._create(email, name, password, role=Role.CONTRIBUTOR, approved=False)
        logger.info(
            "directory.registered user_id=%s email=%s",
            user.id,
            masked_email(email),
        )
        return user

    def bootstrap_admin(self, email: str, name: str, password: str) -> BootstrapResult:
        """Create the first ADMIN account; refused once any admin exists."""
        email = _normalize_email(email)
        _validate_identity(email, name, password)
        with transaction.atomic():
            if User.objects.filter(email__iexact=email).exists():
                raise ConflictError("User already exists with this email")
            if User.objects.filter(role=Role.ADMIN).exists():
                raise ConflictError("Admin user already exists in the system")
            user = self._create(email, name, password, role=Role.ADMIN, approved=True)

        logger.info("directory.admin_bootstrapped user_id=%s", user.id)
        return BootstrapResult(token=TokenService.issue_for(user, now=self.clock.now()), user=user)

    def _create(self, email: str, name: str, password: str, role: Role, approved: bool) -> User:
        now = self.clock.now()
        try:
            return User.objects.create(
                email=email,
                name=name.strip(),
                password_hash=hash_secret(password),
                role=role,
                approved=approved,
                enabled=True,
                created_at=now,
                updated_at=now,
            )
        except IntegrityError as exc:
            raise ConflictError("User already exists with this email") from exc

    def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and account status, then issue a token.

        Unknown email and wrong password share one reason so the response
        does not reveal which was wrong.
        """
        email = _normalize_email(email)
        safe_email = masked_email(email)
        user = User.objects.filter(email__iexact=email).first()
        if user is None or not verify_secret(password or "", user.password_hash):
            logger.info("directory.login_rejected email=%s reason=invalid_credentials", safe_email)
            raise LoginRejectedError(LoginRejectionReason.INVALID_CREDENTIALS)
        if not user.approved:
            logger.info("directory.login_rejected user_id=%s reason=pending_approval", user.id)
            raise LoginRejectedError(LoginRejectionReason.PENDING_APPROVAL)
        if not user.enabled:
            logger.info("directory.login_rejected user_id=%s reason=disabled", user.id)
            raise LoginRejectedError(LoginRejectionReason.DISABLED)

        logger.info("directory.login user_id=%s", user.id)
        return LoginResult(token=TokenService.issue_for(user, now=self.clock.now()), user=user)

    # Admin mutations

    def get(self, user_id) -> User:
        try:
            return User.objects.get(id=user_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"User not found with id: {user_id}")

    def _set_fields(self, user_id, **fields) -> User:
        user = self.get(user_id)
        for field, value in fields.items():
            setattr(user, field, value)
        user.updated_at = self.clock.now()
        user.save(update_fields=[*fields.keys(), "updated_at"])
        return user

    def approve(self, user_id) -> User:
        user = self._set_fields(user_id, approved=True)
        logger.info("directory.approved user_id=%s", user.id)
        return user

    def disable(self, user_id) -> User:
        user = self._set_fields(user_id, enabled=False)
        logger.info("directory.disabled user_id=%s", user.id)
        return user

    def enable(self, user_id) -> User:
        user = self._set_fields(user_id, enabled=True)
        logger.info("directory.enabled user_id=%s", user.id)
        return user

    def change_role(self, user_id, role) -> User:
        """Assign a role; malformed role names become CONTRIBUTOR."""
        new_role = Role.from_string(role)
        user = self._set_fields(user_id, role=new_role)
        logger.info("directory.role_changed user_id=%s role=%s", user.id, new_role.value)
        return user

    # Self-service

    def update_profile(self, user_id, fields: dict) -> User:
        """Replace name, email, bio and profile picture url when present."""
        user = self.get(user_id)
        changed: list[str] = []

        name = fields.get("name")
        if name is not None and name.strip():
            if len(name.strip()) > MAX_NAME_LENGTH:
                raise ValidationFailedError(
                    {"name": f"Name must be at most {MAX_NAME_LENGTH} characters"}
                )
            user.name = name.strip()
            changed.append("name")

        email = fields.get("email")
        if email is not None and _normalize_email(email):
            email = _normalize_email(email)
            if not EMAIL_RE.match(email):
                raise ValidationFailedError({"email": "Email should be valid"})
            if email != user.email:
                taken = User.objects.filter(email__iexact=email).exclude(id=user.id).exists()
                if taken:
                    raise ConflictError("Email already in use")
                user.email = email
                changed.append("email")

        if fields.get("bio") is not None:
            user.bio = fields["bio"]
            changed.append("bio")

        if fields.get("profile_picture_url") is not None:
            user.profile_picture_url = fields["profile_picture_url"]
            changed.append("profile_picture_url")

        if changed:
            user.updated_at = self.clock.now()
            try:
                user.save(update_fields=[*changed, "updated_at"])
            except IntegrityError as exc:
                raise ConflictError("Email already in use") from exc
        return user

    def change_password(self, user_id, current_password: str, new_password: str) -> None:
        user = self.get(user_id)
        if not verify_secret(current_password or "", user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        password_error = _password_error(new_password)
        if password_error:
            raise ValidationFailedError({"new_password": password_error})
        user.password_hash = hash_secret(new_password)
        user.updated_at = self.clock.now()
        user.save(update_fields=["password_hash", "updated_at"])
        logger.info("directory.password_changed user_id=%s", user.id)

    # Directory reads

    @staticmethod
    def _ordered():
        return User.objects.order_by("-created_at", "-id")

    def list_all(self, page: PageRequest) -> Page:
        return paginate(self._ordered(), page)

    def by_role(self, role, page: PageRequest) -> Page:
        return paginate(self._ordered().filter(role=Role.from_string(role)), page)

    def by_approval(self, approved: bool, page: PageRequest) -> Page:
        return paginate(self._ordered().filter(approved=approved), page)

    def search(self, term: str, page: PageRequest) -> Page:
        """Case-insensitive substring match on name or email."""
        term = (term or "").strip()
        queryset = self._ordered()
        if term:
            queryset = queryset.filter(Q(name__icontains=term) | Q(email__icontains=term))
        return paginate(queryset, page)

    def top_contributors(self, limit: int = 10) -> list[User]:
        """Approved, enabled users ordered by number of articles written."""
        return list(
            User.objects.filter(approved=True, enabled=True)
            .annotate(article_count=Count("articles"))
            .order_by("-article_count", "id")[: bounded_limit(limit)]
        )

    def recent(self, days: int = 7) -> list[User]:
        since = window_start(self.clock, days)
        return list(self._ordered().filter(created_at__gte=since))

    @staticmethod
    def statistics() -> dict[str, int]:
        return User.objects.aggregate(
            total=Count("id"),
            approved=Count("id", filter=Q(approved=True)),
            pending_approval=Count("id", filter=Q(approved=False)),
            enabled=Count("id", filter=Q(enabled=True)),
            admins=Count("id", filter=Q(role=Role.ADMIN)),
            contributors=Count("id", filter=Q(role=Role.CONTRIBUTOR)),
        )


__all__ = ["UserDirectory", "LoginResult", "BootstrapResult"]
