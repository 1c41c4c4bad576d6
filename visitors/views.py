import logging
from datetime import timedelta, timezone as dt_timezone

from django.utils import timezone
from rest_framework.decorators import api_view
from rest_framework.response import Response

from blogsite.net import client_ip_hash

from .models import SiteVisitor

logger = logging.getLogger(__name__)


def _today():
    return timezone.now().astimezone(dt_timezone.utc).date()


@api_view(["POST"])
def track_visitor(request):
    visitor, created = SiteVisitor.objects.get_or_create(ip_hash=client_ip_hash(request), date=_today())
    if created:
        logger.debug("Tracked visitor %s", visitor.pk)
    return Response({"data": {"tracked": created}})


@api_view(["GET"])
def visitor_stats(request):
    today = _today()
    visitors = SiteVisitor.objects.all()
    return Response(
        {
            "data": {
                "total": visitors.count(),
                "today": visitors.filter(date=today).count(),
                "yesterday": visitors.filter(date=today - timedelta(days=1)).count(),
            }
        }
    )
