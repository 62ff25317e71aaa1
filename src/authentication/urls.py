"""URL patterns for authentication endpoints."""

from django.urls import path

from .views import ChangePasswordView, CreateAdminView, LoginView, MeView, RegisterView

urlpatterns = [
    path("register/", RegisterView.as_view(), name="auth-register"),
    path("create-admin/", CreateAdminView.as_view(), name="auth-create-admin"),
    path("login/", LoginView.as_view(), name="auth-login"),
    path("me/", MeView.as_view(), name="auth-me"),
    path("change-password/", ChangePasswordView.as_view(), name="auth-change-password"),
]
