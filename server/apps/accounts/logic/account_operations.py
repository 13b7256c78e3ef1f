"""Business logic for registration and login."""

import logging

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.models import AbstractBaseUser
from django.db import IntegrityError, transaction
from rest_framework.authtoken.models import Token

from server.apps.accounts.exceptions import (
    InvalidCredentialsError,
    UserExistsError,
)
from server.apps.files.infrastructure.metadata import validate_namespace

logger = logging.getLogger(__name__)


def register_user(username: str, password: str) -> AbstractBaseUser:
    """Create a user account.

    The storage quota is created alongside the user by the files app's
    ``post_save`` handler, in the same transaction.

    Args:
        username: Unique username, also the user's storage namespace.
        password: Raw password. Stored hashed.

    Returns:
        Created user.

    Raises:
        ValidationError: If the username cannot name a storage namespace.
        UserExistsError: If the username is taken.
    """
    validate_namespace(username)
    user_model = get_user_model()

    if user_model.objects.filter(username=username).exists():
        raise UserExistsError(f'Username taken: {username}')

    try:
        with transaction.atomic():
            user = user_model.objects.create_user(
                username=username,
                password=password,
            )
    except IntegrityError as error:
        # Lost a race with a concurrent registration
        raise UserExistsError(f'Username taken: {username}') from error

    logger.info('Registered user %s (ID: %d)', username, user.pk)
    return user


def login(username: str, password: str) -> tuple[str, AbstractBaseUser]:
    """Check credentials and issue an API token.

    The same token is returned on every login until it is deleted.

    Args:
        username: Username.
        password: Raw password.

    Returns:
        Tuple of (token key, user).

    Raises:
        InvalidCredentialsError: If the credentials do not match a user.
    """
    user = authenticate(username=username, password=password)
    if user is None:
        logger.warning('Failed login for username %s', username)
        raise InvalidCredentialsError

    token, created = Token.objects.get_or_create(user=user)
    if created:
        logger.info('Issued API token for user ID=%d', user.pk)

    return token.key, user
