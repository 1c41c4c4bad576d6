import logging

from django.http import FileResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from accounts.serializers import UserSerializer
from blogsite.permissions import IsAdmin

from . import services

logger = logging.getLogger(__name__)


def _translate(exc: services.BackupError):
    if isinstance(exc, services.BackupNotFound):
        return NotFound(str(exc))
    return ValidationError({"backup": str(exc)})


@api_view(["GET", "POST"])
@permission_classes([IsAdmin])
def backup_collection(request):
    if request.method == "GET":
        return Response({"data": services.list_backups()})

    description = request.data.get("description") or ""
    if not isinstance(description, str) or len(description) > 500:
        raise ValidationError({"description": "Descriptions are text of at most 500 characters."})
    result = services.create_backup(description)
    return Response({"data": result}, status=status.HTTP_201_CREATED)


@api_view(["GET", "DELETE"])
@permission_classes([IsAdmin])
def backup_detail(request, name: str):
    try:
        if request.method == "DELETE":
            services.delete_backup(name)
            return Response(status=status.HTTP_204_NO_CONTENT)
        services.read_backup(name)
    except services.BackupError as exc:
        raise _translate(exc)

    return FileResponse(
        services.backup_storage().open(name, "rb"),
        as_attachment=True,
        filename=name,
        content_type="application/json",
    )


@api_view(["GET"])
@permission_classes([IsAdmin])
def backup_info(request, name: str):
    try:
        return Response({"data": services.backup_info(name)})
    except services.BackupError as exc:
        raise _translate(exc)


@api_view(["POST"])
@permission_classes([IsAdmin])
def restore_backup(request, name: str):
    try:
        payload = services.read_backup(name)
        result = services.restore_backup(payload, keep_admin=request.user)
    except services.BackupError as exc:
        raise _translate(exc)

    logger.warning("Backup %s restored by %s", name, result["user"].email)
    result["user"] = UserSerializer(result["user"]).data
    return Response({"data": result})
