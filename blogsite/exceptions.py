import logging

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def _messages(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            yield from _messages(value)
    elif isinstance(detail, (list, tuple)):
        for value in detail:
            yield from _messages(value)
    else:
        yield str(detail)


def exception_handler(exc, context):
    """Render every API error as {"status": "error", "message": ...}."""
    response = drf_exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception("Unexpected error in %s", getattr(view, "__name__", view), exc_info=exc)
        message = str(exc) if settings.DEBUG else "Internal server error"
        return Response(
            {"status": "error", "message": message},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    detail = response.data
    body = {"status": "error", "message": ", ".join(_messages(detail)) or "Request failed"}
    if isinstance(detail, dict) and set(detail) != {"detail"}:
        body["errors"] = detail
    response.data = body
    return response
