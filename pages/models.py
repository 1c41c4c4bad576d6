from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone


class Page(models.Model):
    class Type(models.TextChoices):
        STATIC = "STATIC", "Static"
        NOTICE = "NOTICE", "Notice"

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PUBLISHED = "PUBLISHED", "Published"

    slug = models.SlugField(max_length=100, unique=True)
    title = models.CharField(max_length=200)
    type = models.CharField(max_length=10, choices=Type.choices, default=Type.NOTICE, db_index=True)
    content = models.TextField()
    excerpt = models.TextField(blank=True, default="")
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.DRAFT, db_index=True)

    badge = models.CharField(max_length=20, blank=True, default="")
    badge_color = models.CharField(max_length=20, blank=True, default="")
    is_pinned = models.BooleanField(default=False)
    template = models.CharField(max_length=50, blank=True, default="")
    view_count = models.PositiveIntegerField(default=0)

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="pages"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    published_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        ordering = ["-is_pinned", "-published_at", "-id"]

    def __str__(self) -> str:
        return self.title

    @property
    def is_published(self) -> bool:
        return self.status == self.Status.PUBLISHED


class PageView(models.Model):
    page = models.ForeignKey(Page, on_delete=models.CASCADE, related_name="views")
    ip_hash = models.CharField(max_length=64)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["page", "ip_hash"], name="unique_page_view"),
        ]
