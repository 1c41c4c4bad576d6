from __future__ import annotations

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.db import models


class Comment(models.Model):
    content = models.TextField(blank=True, default="")
    post = models.ForeignKey("blog.Post", on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="comments",
        null=True,
        blank=True,
    )
    guest_name = models.CharField(max_length=50, blank=True, default="")
    guest_password = models.CharField(max_length=128, blank=True, default="")
    parent = models.ForeignKey(
        "self", on_delete=models.CASCADE, related_name="replies", null=True, blank=True
    )
    is_private = models.BooleanField(default=False)
    is_deleted = models.BooleanField(default=False, db_index=True)
    ip_hash = models.CharField(max_length=64, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"Comment {self.pk} on post {self.post_id}"

    @property
    def is_guest(self) -> bool:
        return self.author_id is None and bool(self.guest_password)

    def set_guest_password(self, raw_password: str) -> None:
        self.guest_password = make_password(raw_password)

    def check_guest_password(self, raw_password: str) -> bool:
        return bool(self.guest_password) and check_password(raw_password, self.guest_password)

    def soft_delete(self) -> None:
        self.content = ""
        self.guest_name = ""
        self.guest_password = ""
        self.is_deleted = True
        self.save(update_fields=["content", "guest_name", "guest_password", "is_deleted", "updated_at"])
