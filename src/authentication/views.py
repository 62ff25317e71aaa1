"""Authentication endpoints and admin user management."""

from typing import Any

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from access_control.permissions import CapabilityPermission
from access_control.policy import Capability
from core.pagination import PageRequest
from core.params import bool_param, int_param
from core.response import BaseAPIView, BaseViewSet, api_response, page_response
from .directory import UserDirectory
from .serializers import (
    ChangePasswordSerializer,
    ContributorSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    RoleChangeSerializer,
    UserDetailSerializer,
)
from .services import TokenService

USER_PAGE_SIZE = 20


def _validated(serializer_class, request) -> dict[str, Any]:
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return dict(serializer.validated_data)


def _token_payload(token: str, user) -> dict[str, Any]:
    return {
        "token": token,
        "token_type": "Bearer",
        "expires_in": int(TokenService.ttl().total_seconds()),
        "user": UserDetailSerializer(user).data,
    }


class RegisterView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Register a contributor; the account waits for admin approval."""
        data = _validated(RegisterSerializer, request)
        user = UserDirectory().register(data["email"], data["name"], data["password"])
        return api_response(
            {
                "user": UserDetailSerializer(user).data,
                "message": "Registration successful. Awaiting admin approval.",
            },
            status=status.HTTP_201_CREATED,
        )


class CreateAdminView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Create the first admin; refused once an admin exists."""
        data = _validated(RegisterSerializer, request)
        result = UserDirectory().bootstrap_admin(data["email"], data["name"], data["password"])
        return api_response(_token_payload(result.token, result.user), status=status.HTTP_201_CREATED)


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Authenticate and issue a session token."""
        data = _validated(LoginSerializer, request)
        result = UserDirectory().login(data["email"], data["password"])
        return api_response(_token_payload(result.token, result.user))


class MeView(BaseAPIView):
    permission_classes = [CapabilityPermission]
    required_capabilities = {"*": Capability.AUTHENTICATED}

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the current user's profile."""
        return api_response(UserDetailSerializer(request.user).data)

    # noinspection PyMethodMayBeStatic
    def put(self, request):
        """Update profile fields for the current user."""
        data = _validated(ProfileUpdateSerializer, request)
        user = UserDirectory().update_profile(request.user.id, data)
        return api_response(UserDetailSerializer(user).data)

    def patch(self, request):
        return self.put(request)


class ChangePasswordView(BaseAPIView):
    permission_classes = [CapabilityPermission]
    required_capabilities = {"*": Capability.AUTHENTICATED}

    # noinspection PyMethodMayBeStatic
    def put(self, request):
        """Replace the password after verifying the current one."""
        data = _validated(ChangePasswordSerializer, request)
        UserDirectory().change_password(
            request.user.id, data["current_password"], data["new_password"]
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    def post(self, request):
        return self.put(request)


class UserAdminViewSet(BaseViewSet):
    """Admin-only user directory reads and account status changes."""

    permission_classes = [CapabilityPermission]
    lookup_value_regex = r"\d+"
    required_capabilities = {"*": Capability.ADMIN}

    @property
    def directory(self) -> UserDirectory:
        return UserDirectory()

    @staticmethod
    def _page(request) -> PageRequest:
        return PageRequest.from_params(request.query_params, default_size=USER_PAGE_SIZE)

    def list(self, request):
        return page_response(self.directory.list_all(self._page(request)), UserDetailSerializer)

    def retrieve(self, request, pk=None):
        return api_response(UserDetailSerializer(self.directory.get(pk)).data)

    @action(detail=False, methods=["get"])
    def search(self, request):
        page = self.directory.search(request.query_params.get("q", ""), self._page(request))
        return page_response(page, UserDetailSerializer)

    @action(detail=False, methods=["get"], url_path=r"role/(?P<role>[^/.]+)")
    def by_role(self, request, role=None):
        return page_response(self.directory.by_role(role, self._page(request)), UserDetailSerializer)

    @action(detail=False, methods=["get"])
    def approval(self, request):
        page = self.directory.by_approval(bool_param(request, "approved", required=True), self._page(request))
        return page_response(page, UserDetailSerializer)

    @action(detail=False, methods=["get"])
    def statistics(self, request):
        return api_response(self.directory.statistics())

    @action(detail=False, methods=["get"], url_path="top-contributors")
    def top_contributors(self, request):
        users = self.directory.top_contributors(limit=int_param(request, "limit", 10))
        return api_response(ContributorSerializer(users, many=True).data)

    @action(detail=False, methods=["get"])
    def recent(self, request):
        users = self.directory.recent(days=int_param(request, "days", 7))
        return api_response(UserDetailSerializer(users, many=True).data)

    @action(detail=True, methods=["patch"])
    def approve(self, request, pk=None):
        return api_response(UserDetailSerializer(self.directory.approve(pk)).data)

    @action(detail=True, methods=["patch"])
    def disable(self, request, pk=None):
        return api_response(UserDetailSerializer(self.directory.disable(pk)).data)

    @action(detail=True, methods=["patch"])
    def enable(self, request, pk=None):
        return api_response(UserDetailSerializer(self.directory.enable(pk)).data)

    @action(detail=True, methods=["patch"])
    def role(self, request, pk=None):
        data = _validated(RoleChangeSerializer, request)
        return api_response(UserDetailSerializer(self.directory.change_role(pk, data["role"])).data)


__all__ = [
    "RegisterView",
    "CreateAdminView",
    "LoginView",
    "MeView",
    "ChangePasswordView",
    "UserAdminViewSet",
]
