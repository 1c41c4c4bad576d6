"""Draft endpoints (admin only)."""

import logging

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from blogsite.permissions import IsAdmin

from . import content, services
from .models import Draft, Post
from .serializers import DraftPublishSerializer, DraftSerializer, PostDetailSerializer

logger = logging.getLogger(__name__)


def _draft(pk) -> Draft:
    try:
        return Draft.objects.select_related("category").prefetch_related("tags").get(pk=pk)
    except Draft.DoesNotExist:
        raise NotFound("Draft not found.")


@api_view(["GET", "POST"])
@permission_classes([IsAdmin])
def draft_collection(request):
    if request.method == "GET":
        drafts = (
            Draft.objects.filter(author=request.user)
            .select_related("category")
            .prefetch_related("tags")
            .order_by("-updated_at", "-id")
        )
        return Response({"data": DraftSerializer(drafts, many=True).data})

    s = DraftSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    draft = s.save(author=request.user)
    return Response({"data": DraftSerializer(draft).data}, status=status.HTTP_201_CREATED)


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAdmin])
def draft_detail(request, pk: int):
    draft = _draft(pk)

    if request.method == "GET":
        return Response({"data": DraftSerializer(draft).data})

    if request.method == "PUT":
        s = DraftSerializer(draft, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        draft = s.save()
        return Response({"data": DraftSerializer(draft).data})

    draft.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["POST"])
@permission_classes([IsAdmin])
def publish_draft(request, pk: int):
    """Turn a draft into a post, then drop the draft."""
    draft = _draft(pk)
    s = DraftPublishSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    options = s.validated_data

    if not draft.title.strip():
        raise ValidationError({"title": "A title is required to publish."})
    if content.is_empty_body(draft.content):
        raise ValidationError({"content": "Content is required to publish."})
    category = options.get("category") or draft.category
    if category is None:
        raise ValidationError({"category_id": "Choose a category before publishing."})
    tags = options["tags"] if "tags" in options else list(draft.tags.all())

    with transaction.atomic():
        post = services.create_post(
            request.user,
            title=draft.title,
            content_html=draft.content,
            category=category,
            excerpt=draft.excerpt or content.make_excerpt(draft.content),
            cover_image=draft.cover_image,
            status=options.get("status") or Post.Status.PUBLIC,
            published_at=options.get("published_at"),
            tags=tags,
        )
        draft.delete()

    logger.info("Published draft %s as post %s", pk, post.pk)
    return Response({"data": PostDetailSerializer(post).data}, status=status.HTTP_201_CREATED)
