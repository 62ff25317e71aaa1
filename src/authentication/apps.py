"""App configuration for accounts, session tokens and the user directory."""

from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """Holds the email-based User model, TokenService and UserDirectory."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"
