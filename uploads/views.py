import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from blogsite.conf import settings
from blogsite.permissions import IsAdmin

from . import services, storage
from .models import Image
from .serializers import ImageSerializer

logger = logging.getLogger(__name__)

FOLDERS = {"post": "posts", "cover": "posts", "avatar": "avatars"}


@api_view(["POST"])
@permission_classes([IsAdmin])
def upload_image(request):
    upload_type = request.query_params.get("type") or "post"
    if upload_type not in FOLDERS:
        raise ValidationError({"type": f"Must be one of {', '.join(FOLDERS)}."})
    folder = FOLDERS[upload_type]

    upload = request.FILES.get("file")
    if upload is None:
        raise ValidationError({"file": "No file was uploaded."})
    if upload.content_type not in settings.BLOG_UPLOAD_ALLOWED_TYPES:
        raise ValidationError({"file": "Only JPEG, PNG, GIF, WebP and SVG images can be uploaded."})
    if upload.size > settings.BLOG_UPLOAD_MAX_BYTES:
        raise ValidationError({"file": f"Files are limited to {settings.BLOG_UPLOAD_MAX_BYTES} bytes."})

    object_name, url = storage.save_file(folder, upload)
    logger.info("Stored %s upload %s (%d bytes)", upload_type, object_name, upload.size)

    image = None
    if folder == "posts":
        image = Image.objects.create(
            url=url,
            object_name=object_name,
            filename=upload.name,
            size=upload.size,
            mimetype=upload.content_type,
            folder=folder,
        )

    return Response(
        {
            "data": {
                "id": image.pk if image else None,
                "url": url,
                "object_name": object_name,
                "filename": upload.name,
                "size": upload.size,
                "mimetype": upload.content_type,
                "folder": folder,
            }
        },
        status=status.HTTP_201_CREATED,
    )


@api_view(["GET", "DELETE"])
@permission_classes([IsAdmin])
def orphan_images(request):
    if request.method == "DELETE":
        return Response({"data": services.delete_orphans()})

    report = services.orphan_report()
    report["orphans"] = ImageSerializer(report["orphans"], many=True).data
    return Response({"data": report})
