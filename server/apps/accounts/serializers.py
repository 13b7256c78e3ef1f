"""Serializers for accounts API requests and responses."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from server.apps.files.infrastructure.metadata import validate_namespace


class CredentialsSerializer(serializers.Serializer):
    """Username and password sent to register or log in."""

    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class RegistrationSerializer(CredentialsSerializer):
    """Credentials for a new account.

    The username also names the user's storage namespace.
    """

    username = serializers.CharField(
        max_length=150,
        validators=[validate_namespace],
    )


class UserSerializer(serializers.ModelSerializer):
    """Public representation of a user with storage accounting in bytes."""

    storage_limit = serializers.IntegerField(
        source='quota.storage_limit',
        read_only=True,
    )
    storage_used = serializers.IntegerField(
        source='quota.storage_used',
        read_only=True,
    )
    created_at = serializers.DateTimeField(source='date_joined', read_only=True)
    updated_at = serializers.DateTimeField(
        source='quota.updated_at',
        read_only=True,
    )

    class Meta:
        """Serializer metadata."""

        model = get_user_model()
        fields = [
            'id',
            'username',
            'storage_limit',
            'storage_used',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
