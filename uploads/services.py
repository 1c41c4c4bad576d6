"""Orphan image detection and cleanup."""

from __future__ import annotations

import logging
from datetime import timedelta

from django.db.models import Sum
from django.utils import timezone

from blog.content import extract_image_urls
from blog.models import Draft
from blogsite.conf import settings

from . import storage
from .models import Image

logger = logging.getLogger(__name__)


def draft_image_urls() -> set[str]:
    urls = set()
    for html, cover in Draft.objects.values_list("content", "cover_image"):
        urls.update(extract_image_urls(html, cover))
    return urls


def find_orphans(now=None) -> list[Image]:
    """Unlinked images past the grace period that no draft refers to."""
    now = now or timezone.now()
    cutoff = now - timedelta(hours=settings.BLOG_ORPHAN_GRACE_HOURS)
    in_drafts = draft_image_urls()
    candidates = Image.objects.filter(post__isnull=True, created_at__lt=cutoff).order_by("-created_at")
    return [image for image in candidates if image.url not in in_drafts]


def orphan_report() -> dict:
    orphans = find_orphans()
    in_drafts = draft_image_urls()
    unlinked_urls = Image.objects.filter(post__isnull=True).values_list("url", flat=True)
    return {
        "orphans": orphans,
        "stats": {
            "total": Image.objects.count(),
            "linked": Image.objects.filter(post__isnull=False).count(),
            "used_in_drafts": sum(1 for url in unlinked_urls if url in in_drafts),
            "orphaned": len(orphans),
            "total_size": Image.objects.aggregate(total=Sum("size"))["total"] or 0,
            "orphan_size": sum(image.size for image in orphans),
        },
    }


def delete_orphans() -> dict:
    """Delete orphan files, then the records of those that went away."""
    deleted_ids, errors = [], []
    freed = 0
    for image in find_orphans():
        try:
            storage.delete_object(image.object_name)
        except OSError:
            logger.exception("Failed to delete orphan image %s", image.object_name)
            errors.append(image.object_name)
            continue
        deleted_ids.append(image.pk)
        freed += image.size

    if deleted_ids:
        Image.objects.filter(pk__in=deleted_ids).delete()
    logger.info("Orphan cleanup removed %d images (%d bytes), %d failures", len(deleted_ids), freed, len(errors))

    result = {"deleted": len(deleted_ids), "freed_space": freed}
    if errors:
        result["errors"] = errors
    return result
