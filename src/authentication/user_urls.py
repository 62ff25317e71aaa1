"""Routing for admin user management."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import UserAdminViewSet

router = SimpleRouter()
router.register(r"users", UserAdminViewSet, basename="user")

urlpatterns = [
    path("", include(router.urls)),
]
