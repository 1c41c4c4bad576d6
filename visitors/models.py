from django.db import models
from django.utils import timezone


class SiteVisitor(models.Model):
    """One row per hashed IP per UTC day."""

    ip_hash = models.CharField(max_length=64)
    date = models.DateField(db_index=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["ip_hash", "date"], name="unique_site_visitor"),
        ]

    def __str__(self):
        return f"{self.ip_hash[:8]} on {self.date}"
