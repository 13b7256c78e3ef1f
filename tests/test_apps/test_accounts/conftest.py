"""Shared fixtures for accounts app tests."""

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

User = get_user_model()


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
    )


@pytest.fixture
def api_client():
    """Anonymous API client.

    Returns:
        APIClient instance.
    """
    return APIClient()
