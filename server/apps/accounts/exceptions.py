"""Exceptions for accounts app."""

from typing import ClassVar


class AccountError(Exception):
    """Base class for registration and login failures."""

    message: ClassVar[str] = 'Account operation failed'

    def __init__(self, detail: str | None = None) -> None:
        """Initialize AccountError.

        Args:
            detail: Optional log-oriented detail. Defaults to ``message``.
        """
        super().__init__(detail or self.message)


class UserExistsError(AccountError):
    """Raised when registering a username that is already taken."""

    message = 'User already exists'


class InvalidCredentialsError(AccountError):
    """Raised when the username is unknown or the password is wrong."""

    message = 'Invalid username or password'
