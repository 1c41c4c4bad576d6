from rest_framework.authentication import TokenAuthentication


class BearerTokenAuthentication(TokenAuthentication):
    """DRF token authentication that also accepts `Authorization: Bearer <key>`."""

    keyword = "Bearer"
