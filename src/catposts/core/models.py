"""Content, query and render-state models shared by the rendering pipeline"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catposts.config import Settings
from catposts.core.settings import ListSettings


class SortField(str, Enum):
    """Sort keys a list may be ordered by"""
    date = "date"
    title = "title"
    comment_count = "comment_count"
    rand = "rand"


class SortOrder(str, Enum):
    asc = "ASC"
    desc = "DESC"


class Term(BaseModel):
    """A category or tag; categories form a tree through parent_id."""
    model_config = ConfigDict(frozen=True)
    id:        int
    name:      str
    slug:      str = ""
    url:       str = ""
    parent_id: int = 0


class Author(BaseModel):
    model_config = ConfigDict(frozen=True)
    id:   int = 0
    name: str
    url:  str = ""


class ImageRendition(BaseModel):
    """One sized representation of an image (a thumbnail candidate)."""
    model_config = ConfigDict(frozen=True)
    name:   str
    url:    str
    width:  int
    height: int
    attrs:  dict[str, str] = {}     # extra markup attributes as stored (may include style)


class Image(BaseModel):
    """An image attachment; renditions are ordered smallest first, full size last."""
    model_config = ConfigDict(frozen=True)
    id:         int
    alt:        str = ""
    renditions: tuple[ImageRendition, ...]

    @property
    def full(self) -> ImageRendition:
        return self.renditions[-1]


class ContentItem(BaseModel):
    """A post as seen by the renderer; owned by the repository and never mutated."""
    model_config = ConfigDict(frozen=True)
    id:             int
    title:          str
    slug:           str = ""
    permalink:      str = ""
    published:      datetime
    author:         Author
    content:        str = ""        # markdown source, may contain [shortcode] tags
    excerpt:        str = ""        # manual excerpt; empty means derive from content
    thumbnail:      Optional[Image] = None
    categories:     tuple[Term, ...] = ()
    tags:           tuple[Term, ...] = ()
    comment_count:  int = 0
    comments_url:   str = ""
    sticky:         bool = False
    status:         str = "publish"
    post_format:    str = "standard"

    @field_validator("published")
    @classmethod
    def _aware(cls, v: datetime) -> datetime:
        """Naive timestamps are taken to be UTC."""
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class QuerySpec(BaseModel):
    """Immutable fetch specification built from list settings."""
    model_config = ConfigDict(frozen=True)
    category_id:      int = 0                    # 0 means all categories
    include_children: bool = True
    statuses:         Optional[tuple[str, ...]] = None   # None: platform default (publish)
    order_by:         SortField = SortField.date
    order:            SortOrder = SortOrder.desc
    ignore_sticky:    bool = True
    exclude_ids:      tuple[int, ...] = ()
    require_thumbnail: bool = False
    date_after:       Optional[str] = None       # inclusive bound, forwarded verbatim
    date_before:      Optional[str] = None       # inclusive bound, forwarded verbatim
    offset:           int = Field(default=0, ge=0)
    limit:            Optional[int] = None       # None: unbounded
    count_only:       bool = False

    @property
    def has_date_filter(self) -> bool:
        return self.date_after is not None or self.date_before is not None

    def for_count(self) -> "QuerySpec":
        """Same filters with pagination removed, for learning the total match size."""
        return self.model_copy(update={"offset": 0, "limit": None, "count_only": True})


@dataclass
class RenderContext:
    """Per-item render state; created for one item and discarded after its markup is produced."""
    item:                ContentItem
    settings:            ListSettings
    site:                Settings
    now:                 datetime
    everything_is_link:  bool = False
    is_current:          bool = False
    default_thumbnail:   Optional[Image] = None
    excerpt_more:        str = ""               # externally supplied "more" default


@dataclass(frozen=True)
class PaginationState:
    """Counts driving the load-more control for one list render."""
    requested: int
    returned:  int
    total:     Optional[int] = None             # None when load-more is disabled
    offset:    int = 1                          # 1-based start setting the page was fetched from

    @property
    def might_have_more(self) -> bool:
        """Heuristic: a full page may be followed by more items."""
        return self.returned == self.requested

    @property
    def next_start(self) -> int:
        return self.offset + self.requested

    @property
    def show_load_more(self) -> bool:
        return self.total is not None and self.might_have_more and self.total > self.requested
