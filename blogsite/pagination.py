import math

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def page_params(request, default_limit: int = DEFAULT_LIMIT):
    page = _positive_int(request.query_params.get("page"), 1)
    limit = min(_positive_int(request.query_params.get("limit"), default_limit), MAX_LIMIT)
    return page, limit


def paginate(request, queryset, default_limit: int = DEFAULT_LIMIT):
    """Slice ``queryset`` by the ``page``/``limit`` query params.

    Returns the page of objects and the ``meta`` block for the response envelope.
    """
    page, limit = page_params(request, default_limit)
    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset : offset + limit])
    meta = {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }
    return items, meta
