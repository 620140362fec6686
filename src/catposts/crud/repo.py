from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime, time, timezone
from typing import Iterator, Optional

from catposts.core.models import ContentItem, Image, QuerySpec, Term


logger = logging.getLogger(__name__)

DEFAULT_STATUSES = ("publish",)


def parse_bound(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """Parse an inclusive date bound; unparseable values are ignored with a warning."""
    if value is None or not value.strip():
        return None
    text = value.strip()
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            dt = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            dt = datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Ignoring unparseable date bound %r", value)
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class ContentRepository(ABC):
    """Read access to the content store used by the renderer."""

    current_item: Optional[ContentItem] = None

    @abstractmethod
    def fetch(self, spec: QuerySpec) -> list[ContentItem]:
        """Return matching items in order; sticky items may precede the bounded page."""
        raise NotImplementedError

    @abstractmethod
    def count(self, spec: QuerySpec) -> int:
        """Return the number of items matching spec, ignoring pagination."""
        raise NotImplementedError

    @abstractmethod
    def get_category(self, category_id: int) -> Term | None:
        raise NotImplementedError

    @abstractmethod
    def get_image(self, image_id: int) -> Image | None:
        raise NotImplementedError

    @contextmanager
    def preserve_cursor(self) -> Iterator[None]:
        """Restore current_item after a nested iteration moved it."""
        saved = self.current_item
        try:
            yield
        finally:
            self.current_item = saved
