"""API views for accounts.

Endpoints:
    POST /api/register - Create an account (public)
    POST /api/login    - Exchange credentials for a bearer token (public)
    GET  /api/me       - Current user with storage accounting
"""

from typing import Final

from rest_framework import status
from rest_framework.exceptions import ParseError
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from server.apps.accounts.exceptions import (
    InvalidCredentialsError,
    UserExistsError,
)
from server.apps.accounts.logic.account_operations import login, register_user
from server.apps.accounts.serializers import (
    CredentialsSerializer,
    RegistrationSerializer,
    UserSerializer,
)

MESSAGE_USER_CREATED: Final = 'User created successfully'
MESSAGE_INVALID_REQUEST: Final = 'Invalid request format'


def _read_credentials(
    request: Request,
    serializer_class: type[CredentialsSerializer] = CredentialsSerializer,
) -> dict[str, str] | None:
    """Parse and validate the credentials body.

    Args:
        request: Incoming request.
        serializer_class: Serializer that validates the body.

    Returns:
        Validated credentials, or None if the body is malformed.
    """
    try:
        serializer = serializer_class(data=request.data)
    except ParseError:
        return None
    if not serializer.is_valid():
        return None
    return serializer.validated_data


def _invalid_request() -> Response:
    return Response(
        {'error': MESSAGE_INVALID_REQUEST},
        status=status.HTTP_400_BAD_REQUEST,
    )


class RegisterView(APIView):
    """Create a user account with the default storage quota."""

    authentication_classes = []
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]

    def post(self, request: Request) -> Response:
        """Register a new user."""
        credentials = _read_credentials(request, RegistrationSerializer)
        if credentials is None:
            return _invalid_request()

        try:
            user = register_user(
                credentials['username'],
                credentials['password'],
            )
        except UserExistsError as error:
            return Response(
                {'error': error.message},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(
            {
                'message': MESSAGE_USER_CREATED,
                'user': UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    """Issue a bearer token for valid credentials."""

    authentication_classes = []
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]

    def post(self, request: Request) -> Response:
        """Log in and return the token."""
        credentials = _read_credentials(request)
        if credentials is None:
            return _invalid_request()

        try:
            token, user = login(
                credentials['username'],
                credentials['password'],
            )
        except InvalidCredentialsError as error:
            return Response(
                {'error': error.message},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        return Response({'token': token, 'user': UserSerializer(user).data})


class MeView(APIView):
    """Show the authenticated user."""

    def get(self, request: Request) -> Response:
        """Get the current user."""
        return Response({'user': UserSerializer(request.user).data})
