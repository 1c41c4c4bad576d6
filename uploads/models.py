from __future__ import annotations

from django.db import models


class Image(models.Model):
    url = models.CharField(max_length=500, db_index=True)
    object_name = models.CharField(max_length=500)
    filename = models.CharField(max_length=255)
    size = models.PositiveIntegerField(default=0)
    mimetype = models.CharField(max_length=100)
    folder = models.CharField(max_length=50, default="posts")
    post = models.ForeignKey(
        "blog.Post", on_delete=models.SET_NULL, related_name="images", null=True, blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return self.object_name
