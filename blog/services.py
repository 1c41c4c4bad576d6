"""Write paths shared by the post, draft, like and page views."""

from __future__ import annotations

import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import F
from django.utils import timezone
from django.utils.text import slugify

from blogsite.conf import settings
from uploads import storage
from uploads.models import Image

from . import content
from .models import Like, Post

logger = logging.getLogger(__name__)


def _timestamp_ms() -> int:
    return int(timezone.now().timestamp() * 1000)


def unique_slug(model, text: str, fallback_prefix: str, exclude_pk=None) -> str:
    """Slugify ``text``; fall back to ``<prefix>-<ms>`` and suffix duplicates with a timestamp."""
    slug = slugify(text or "")[:200]
    if not slug:
        slug = f"{fallback_prefix}-{_timestamp_ms()}"

    taken = model.objects.filter(slug=slug)
    if exclude_pk is not None:
        taken = taken.exclude(pk=exclude_pk)
    if taken.exists():
        slug = f"{slug}-{_timestamp_ms()}"
    return slug


def refresh_featured_post() -> Post | None:
    """Feature exactly the public post with the most likes, then views."""
    with transaction.atomic():
        top = (
            Post.objects.filter(status=Post.Status.PUBLIC)
            .order_by("-like_count", "-view_count", "-id")
            .first()
        )
        stale = Post.objects.filter(featured=True)
        if top is not None:
            stale = stale.exclude(pk=top.pk)
        stale.update(featured=False)
        if top is not None and not top.featured:
            Post.objects.filter(pk=top.pk).update(featured=True)
            top.featured = True
    return top


def register_view(obj, view_model, ip_hash: str) -> bool:
    """Count a visit to ``obj`` once per IP hash within the view window.

    ``view_model`` is the per-visitor table keyed by ``(obj, ip_hash)``.
    Returns True and bumps ``obj.view_count`` in place when the visit counted.
    """
    now = timezone.now()
    window = timedelta(hours=settings.BLOG_VIEW_WINDOW_HOURS)
    owner_field = obj._meta.model_name

    with transaction.atomic():
        view, created = view_model.objects.get_or_create(
            **{owner_field: obj, "ip_hash": ip_hash}, defaults={"created_at": now}
        )
        if not created:
            if view.created_at > now - window:
                return False
            view.created_at = now
            view.save(update_fields=["created_at"])
        type(obj).objects.filter(pk=obj.pk).update(view_count=F("view_count") + 1)

    obj.view_count += 1
    return True


def link_images(post: Post, html: str, cover_image: str | None = None) -> int:
    """Point every uploaded image referenced by the post at it; unlink the rest."""
    urls = content.extract_image_urls(html, cover_image)
    Image.objects.filter(post=post).exclude(url__in=urls).update(post=None)
    if not urls:
        return 0
    return Image.objects.filter(url__in=urls).update(post=post)


def create_post(author, *, title, content_html, category, excerpt="", cover_image="",
                status=Post.Status.PUBLIC, published_at=None, tags=None) -> Post:
    with transaction.atomic():
        post = Post.objects.create(
            slug=unique_slug(Post, title, "post"),
            title=title,
            excerpt=excerpt or "",
            content=content_html,
            cover_image=cover_image or "",
            reading_time=content.reading_time(content_html),
            status=status or Post.Status.PUBLIC,
            published_at=published_at or timezone.now(),
            author=author,
            category=category,
        )
        if tags:
            post.tags.set(tags)
        link_images(post, content_html, cover_image)

    refresh_featured_post()
    post.refresh_from_db()
    logger.info("Created post %s (%s)", post.pk, post.slug)
    return post


def delete_post_images(post: Post) -> None:
    for image in Image.objects.filter(post=post):
        try:
            storage.delete_object(image.object_name)
        except OSError:
            logger.warning("Could not delete image file %s", image.object_name, exc_info=True)
    Image.objects.filter(post=post).delete()


def delete_post(post: Post) -> None:
    pk = post.pk
    with transaction.atomic():
        delete_post_images(post)
        post.delete()
    refresh_featured_post()
    logger.info("Deleted post %s", pk)


def toggle_like(post: Post, user=None, ip_hash: str | None = None) -> tuple[bool, int]:
    """Add or remove the like of ``user`` (or of ``ip_hash`` when anonymous)."""
    owner = {"user": user} if user is not None else {"ip_hash": ip_hash}

    with transaction.atomic():
        deleted, _ = Like.objects.filter(post=post, **owner).delete()
        if deleted:
            Post.objects.filter(pk=post.pk, like_count__gt=0).update(like_count=F("like_count") - 1)
            liked = False
        else:
            Like.objects.create(post=post, **owner)
            Post.objects.filter(pk=post.pk).update(like_count=F("like_count") + 1)
            liked = True
        like_count = Like.objects.filter(post=post).count()

    refresh_featured_post()
    return liked, like_count


def has_liked(post: Post, user=None, ip_hash: str | None = None) -> bool:
    owner = {"user": user} if user is not None else {"ip_hash": ip_hash}
    return Like.objects.filter(post=post, **owner).exists()
