"""Signup statistics for the admin user dashboard.

Day, week and month boundaries are taken in the active time zone; weeks start
on Monday.
"""

from __future__ import annotations

import math
from datetime import timedelta

from django.utils import timezone

from .models import User

TREND_PERIODS = ("daily", "weekly", "monthly")
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _today_start(now):
    return timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)


def _month_start(day, months_back: int = 0):
    year, month = day.year, day.month - months_back
    while month < 1:
        month += 12
        year -= 1
    return day.replace(year=year, month=month, day=1)


def _count(**lookups) -> int:
    return User.objects.filter(**lookups).count()


def user_stats(now=None) -> dict:
    now = now or timezone.now()
    today = _today_start(now)
    yesterday = today - timedelta(days=1)
    this_week = today - timedelta(days=today.weekday())
    last_week = this_week - timedelta(days=7)
    this_month = _month_start(today)
    last_month = _month_start(today, 1)

    total = User.objects.count()
    suspended = _count(status=User.Status.SUSPENDED)
    return {
        "total_users": total,
        "suspended_users": suspended,
        "active_users": total - suspended,
        "today_new_users": _count(created_at__gte=today),
        "yesterday_new_users": _count(created_at__gte=yesterday, created_at__lt=today),
        "this_week_new_users": _count(created_at__gte=this_week),
        "last_week_new_users": _count(created_at__gte=last_week, created_at__lt=this_week),
        "this_month_new_users": _count(created_at__gte=this_month),
        "last_month_new_users": _count(created_at__gte=last_month, created_at__lt=this_month),
    }


def signup_trend(period: str = "daily", now=None) -> dict:
    now = now or timezone.now()
    today = _today_start(now)
    buckets = []

    if period == "daily":
        for offset in range(13, -1, -1):
            start = today - timedelta(days=offset)
            buckets.append((start.date().isoformat(), start, start + timedelta(days=1)))
    elif period == "weekly":
        this_week = today - timedelta(days=today.weekday())
        for offset in range(7, -1, -1):
            start = this_week - timedelta(weeks=offset)
            buckets.append((f"{start.month}/{start.day}", start, start + timedelta(weeks=1)))
    elif period == "monthly":
        for offset in range(5, -1, -1):
            start = _month_start(today, offset)
            end = _month_start(today, offset - 1) if offset else None
            buckets.append((start.strftime("%Y-%m"), start, end))
    else:
        raise ValueError(f"Unknown period: {period}")

    trend = []
    for label, start, end in buckets:
        lookups = {"created_at__gte": start}
        if end is not None:
            lookups["created_at__lt"] = end
        trend.append({"date": label, "count": _count(**lookups)})

    total = sum(point["count"] for point in trend)
    peak = {"date": "", "count": 0}
    for point in trend:
        if point["count"] > peak["count"]:
            peak = dict(point)

    return {
        "trend": trend,
        "summary": {
            "total": total,
            "average": round(total / len(trend), 1),
            "max": peak,
        },
    }


def signup_pattern(now=None) -> dict:
    """Signups per weekday over the last three calendar months."""
    now = now or timezone.now()
    start = _month_start(_today_start(now), 3)

    occurrences = [0] * 7
    span_days = math.ceil((now - start).total_seconds() / 86400)
    for offset in range(span_days):
        occurrences[(start + timedelta(days=offset)).weekday()] += 1

    counts = [0] * 7
    for created_at in User.objects.filter(created_at__gte=start).values_list("created_at", flat=True):
        counts[timezone.localtime(created_at).weekday()] += 1

    pattern = []
    peak_day, peak_average = "", 0
    for index, day in enumerate(WEEKDAYS):
        average = round(counts[index] / occurrences[index], 1) if occurrences[index] else 0
        pattern.append({"day": day, "count": counts[index], "average": average})
        if average > peak_average:
            peak_day, peak_average = day, average

    return {"pattern": pattern, "peak_day": peak_day}
