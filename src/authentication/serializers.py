"""Serializers for authentication flows (register, login, profile) and users."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class RegisterSerializer(serializers.Serializer):
    """Registration and admin bootstrap input; rules are applied by UserDirectory."""

    email = serializers.CharField()
    name = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class ProfileUpdateSerializer(serializers.Serializer):
    """Self-service profile fields; absent or null leaves a field unchanged."""

    name = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    email = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    bio = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    profile_picture_url = serializers.URLField(
        required=False, allow_null=True, allow_blank=True, max_length=500
    )


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)


class RoleChangeSerializer(serializers.Serializer):
    """Any string is accepted; unknown role names fall back to CONTRIBUTOR."""

    role = serializers.CharField(allow_blank=True)


class UserDetailSerializer(serializers.ModelSerializer):
    """Public user projection; the password hash is never exposed."""

    class Meta:
        """Expose identity and account status fields."""
        model = User
        fields = [
            "id",
            "email",
            "name",
            "role",
            "approved",
            "enabled",
            "bio",
            "profile_picture_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ContributorSerializer(UserDetailSerializer):
    article_count = serializers.IntegerField(read_only=True)

    class Meta(UserDetailSerializer.Meta):
        fields = UserDetailSerializer.Meta.fields + ["article_count"]
        read_only_fields = fields


__all__ = [
    "RegisterSerializer",
    "LoginSerializer",
    "ProfileUpdateSerializer",
    "ChangePasswordSerializer",
    "RoleChangeSerializer",
    "UserDetailSerializer",
    "ContributorSerializer",
]
