"""Translate list settings into a content fetch specification"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from catposts.core.models import QuerySpec, SortField, SortOrder
from catposts.core.settings import ListSettings


logger = logging.getLogger(__name__)

VALID_STATUSES = (
    "publish",
    "future",
    "publish,future",
    "private",
    "private,publish",
    "private,publish,future",
)


def _sort_field(value: str) -> SortField:
    try:
        return SortField(value)
    except ValueError:
        return SortField.date


def _statuses(value: str) -> Optional[tuple[str, ...]]:
    """Split a recognized status value; anything else defers to the platform default."""
    if value in VALID_STATUSES:
        return tuple(value.split(","))
    return None


def _date_bounds(settings: ListSettings, now: datetime) -> tuple[Optional[str], Optional[str]]:
    """Return inclusive (after, before) bounds for the configured date range mode."""
    if settings.date_range == "days_ago":
        if settings.days_ago == 0:
            return None, None
        return (now - timedelta(days=settings.days_ago)).strftime("%Y-%m-%d"), None
    if settings.date_range == "between_dates":
        # Bounds are forwarded unvalidated; repositories ignore values they cannot parse.
        return settings.start_date, settings.end_date
    return None, None


def build_query(
    settings: ListSettings,
    current_item_id: Optional[int] = None,
    now: Optional[datetime] = None,
    ) -> QuerySpec:
    """Build the QuerySpec for a list; current_item_id is set only on single-item pages."""
    after, before = _date_bounds(settings, now or datetime.now())
    exclude = ()
    if settings.exclude_current_post and current_item_id is not None:
        exclude = (current_item_id,)

    spec = QuerySpec(
        category_id=settings.category_id,
        include_children=not settings.exclude_child_categories,
        statuses=_statuses(settings.status),
        order_by=_sort_field(settings.sort_by),
        order=SortOrder.asc if settings.asc_sort_order else SortOrder.desc,
        ignore_sticky=not settings.sticky,
        exclude_ids=exclude,
        require_thumbnail=settings.hide_no_thumb,
        date_after=after,
        date_before=before,
        offset=settings.offset - 1 if settings.offset > 1 else 0,
        limit=settings.num,
    )
    logger.debug("Built query %s", spec)
    return spec
