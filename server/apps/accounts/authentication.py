"""Token authentication for the API."""

from typing import final

from rest_framework.authentication import TokenAuthentication


@final
class BearerTokenAuthentication(TokenAuthentication):
    """Accept ``Authorization: Bearer <token>`` instead of ``Token``."""

    keyword = 'Bearer'
