from __future__ import annotations

import logging

from django.db.models import Count, Q
from django.utils import timezone
from django.utils.text import slugify
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from blog.services import register_view
from blogsite.net import client_ip_hash
from blogsite.pagination import paginate
from blogsite.permissions import IsAdmin, is_admin, require_admin

from .models import Page, PageView
from .serializers import NoticeLinkSerializer, PageSerializer, PageWriteSerializer

logger = logging.getLogger(__name__)


def _pages():
    return Page.objects.select_related("author")


def _page_by_id(pk) -> Page:
    try:
        return _pages().get(pk=pk)
    except Page.DoesNotExist:
        raise NotFound("Page not found.")


def _choice(request, name: str, choices) -> str | None:
    value = (request.query_params.get(name) or "").upper()
    if not value:
        return None
    if value not in choices:
        raise ValidationError({name: f"Must be one of {', '.join(choices)}."})
    return value


def _page_slug(data, instance: Page | None = None) -> str:
    slug = data.get("slug") or slugify(data["title"])[:100]
    if not slug:
        slug = f"page-{int(timezone.now().timestamp() * 1000)}"
    taken = Page.objects.filter(slug=slug)
    if instance is not None:
        taken = taken.exclude(pk=instance.pk)
    if taken.exists():
        raise ValidationError({"slug": "A page with this slug already exists."})
    return slug


def _published_list(request, **filters):
    qs = _pages().filter(status=Page.Status.PUBLISHED, **filters).order_by(
        "-is_pinned", "-published_at", "-id"
    )
    pages, meta = paginate(request, qs)
    return Response({"data": PageSerializer(pages, many=True).data, "meta": meta})


@api_view(["GET", "POST"])
def page_collection(request):
    if request.method == "GET":
        page_type = _choice(request, "type", Page.Type.values)
        return _published_list(request, **({"type": page_type} if page_type else {}))

    require_admin(request)
    s = PageWriteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    data["slug"] = _page_slug(data)

    page_status = data.setdefault("status", Page.Status.DRAFT)
    page = Page.objects.create(
        author=request.user,
        published_at=timezone.now() if page_status == Page.Status.PUBLISHED else None,
        **data,
    )
    logger.info("Created page %s (%s)", page.pk, page.slug)
    return Response({"data": PageSerializer(page).data}, status=status.HTTP_201_CREATED)


@api_view(["GET"])
def notice_list(request):
    return _published_list(request, type=Page.Type.NOTICE)


@api_view(["GET"])
def page_by_slug(request, slug: str):
    try:
        page = _pages().get(slug=slug)
    except Page.DoesNotExist:
        raise NotFound("Page not found.")
    if not page.is_published and not is_admin(request.user):
        raise NotFound("Page not found.")

    register_view(page, PageView, client_ip_hash(request))
    return Response({"data": PageSerializer(page).data})


@api_view(["GET"])
def adjacent_notices(request, slug: str):
    notice = Page.objects.filter(slug=slug, type=Page.Type.NOTICE).first()
    if notice is None or (not notice.is_published and not is_admin(request.user)):
        raise NotFound("Notice not found.")

    pivot = notice.published_at or notice.created_at
    notices = Page.objects.filter(type=Page.Type.NOTICE, status=Page.Status.PUBLISHED)
    prev_notice = (
        notices.filter(Q(published_at__lt=pivot) | Q(published_at=pivot, id__lt=notice.pk))
        .order_by("-published_at", "-id")
        .first()
    )
    next_notice = (
        notices.filter(Q(published_at__gt=pivot) | Q(published_at=pivot, id__gt=notice.pk))
        .order_by("published_at", "id")
        .first()
    )
    return Response(
        {
            "data": {
                "prev": NoticeLinkSerializer(prev_notice).data if prev_notice else None,
                "next": NoticeLinkSerializer(next_notice).data if next_notice else None,
            }
        }
    )


@api_view(["GET"])
@permission_classes([IsAdmin])
def admin_page_list(request):
    qs = _pages().order_by("-is_pinned", "-updated_at", "-id")
    page_type = _choice(request, "type", Page.Type.values)
    if page_type:
        qs = qs.filter(type=page_type)
    page_status = _choice(request, "status", Page.Status.values)
    if page_status:
        qs = qs.filter(status=page_status)
    pages, meta = paginate(request, qs, default_limit=20)
    return Response({"data": PageSerializer(pages, many=True).data, "meta": meta})


@api_view(["GET"])
@permission_classes([IsAdmin])
def admin_page_stats(request):
    counts = Page.objects.aggregate(
        total=Count("id"),
        published=Count("id", filter=Q(status=Page.Status.PUBLISHED)),
        drafts=Count("id", filter=Q(status=Page.Status.DRAFT)),
        notices=Count("id", filter=Q(type=Page.Type.NOTICE)),
        static_pages=Count("id", filter=Q(type=Page.Type.STATIC)),
    )
    return Response({"data": counts})


@api_view(["GET"])
@permission_classes([IsAdmin])
def admin_page_detail(request, pk: int):
    return Response({"data": PageSerializer(_page_by_id(pk)).data})


@api_view(["PUT", "DELETE"])
@permission_classes([IsAdmin])
def page_detail(request, pk: int):
    page = _page_by_id(pk)

    if request.method == "DELETE":
        page.delete()
        logger.info("Deleted page %s", pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    s = PageWriteSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)

    if data.get("slug") or ("title" in data and data["title"] != page.title):
        data["slug"] = _page_slug({"title": page.title, **data}, instance=page)
    if data.get("status") == Page.Status.PUBLISHED and page.published_at is None:
        page.published_at = timezone.now()

    for field, value in data.items():
        setattr(page, field, value)
    page.save()
    return Response({"data": PageSerializer(page).data})
