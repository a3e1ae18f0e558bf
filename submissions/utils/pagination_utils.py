from typing import Any, Dict, Tuple

from django.core.paginator import EmptyPage, Paginator
from django.db.models import QuerySet

from submissions.errors import ValidationError
from user_customizable_configs.gateway.loader import get_gateway_config


def _parse(name: str, value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid {name}: {value}")


def validate_pagination(page: str | None, per_page: str | None) -> Tuple[int, int]:
    """
    Validate `page` (>= 1) and `per_page` (>= 0, 0 meaning the default page size).
    Values are never clamped.
    """
    page_number = _parse("page", page, 1)
    page_size = _parse("per_page", per_page, 0)

    if page_number <= 0:
        raise ValidationError(f"invalid page: {page_number}")
    if page_size < 0:
        raise ValidationError(f"invalid per_page: {page_size}")

    return page_number, page_size


def paginate(queryset: QuerySet, page_number: int, page_size: int) -> Tuple[list, Dict[str, Any]]:
    """Return the items of one page and its pagination metadata."""
    page_size = page_size or get_gateway_config().pagination.default_per_page
    paginator = Paginator(queryset, page_size)

    try:
        items = list(paginator.page(page_number).object_list)
    except EmptyPage:
        items = []

    total_pages = paginator.num_pages if paginator.count else 0
    meta = {
        "current_page": page_number,
        "next_page": page_number + 1 if page_number < total_pages else None,
        "prev_page": page_number - 1 if page_number > 1 else None,
        "total_pages": total_pages,
        "total_count": paginator.count,
    }
    return items, meta
