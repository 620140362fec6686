"""List settings schema and resolution of raw, partially populated settings maps"""

import logging
from datetime import date
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from catposts.config import Settings


logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "%title%\n\n%thumb%"

HeadingLevel = Literal["H1", "H2", "H3", "H4", "H5", "H6"]

_TEXT_FIELDS = (
    "title", "title_link_url", "status", "date_range", "start_date", "end_date", "sort_by",
    "template", "excerpt_more_text", "date_format", "no_match_text", "loadmore_text",
    "loading_text", "footer_link", "footer_link_text",
)
_COUNT_FIELDS = (
    "category_id", "offset", "days_ago", "excerpt_length", "date_past_time",
    "thumb_w", "thumb_h", "default_thumbnail",
)


class ListSettings(BaseModel):
    """Canonical, fully defaulted configuration of one post list."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    # title block
    title:              str = ""
    hide_title:         bool = False
    title_link:         bool = False
    title_link_url:     str = ""
    title_level:        Literal["Initial"] | HeadingLevel = "Initial"

    # filter
    category_id:        int = 0
    exclude_child_categories: bool = False
    status:             str = ""
    num:                int = Field(default=5, ge=1, description="Number of items to show")
    offset:             int = Field(default=1, description="1-based position of the first item")
    date_range:         str = "off"
    days_ago:           int = 30
    start_date:         str = ""
    end_date:           str = ""
    sort_by:            str = "date"
    asc_sort_order:     bool = False
    exclude_current_post: bool = False
    hide_no_thumb:      bool = False
    sticky:             bool = False

    # item template and fields
    template:           str = DEFAULT_TEMPLATE
    everything_is_link: bool = False
    item_title_level:   Literal["Inline"] | HeadingLevel = "Inline"
    excerpt_length:     int = 55
    excerpt_more_text:  str = ""
    excerpt_filters:    bool = False
    preset_date_format: Literal[
        "sitedateandtime", "sitedate", "localsitedateandtime", "localsitedate", "other"
    ] = "sitedateandtime"
    date_format:        str = ""
    date_past_time:     int = Field(default=0, description="Show 'time since' for items up to N days old")
    thumb_w:            int = 150
    thumb_h:            int = 150
    thumb_hover:        Literal["none", "dark", "white", "scale", "blur", "icon"] = "none"
    show_post_format:   Literal[
        "none", "topleft", "bottomleft", "ceter", "topright", "bottomright", "nocss"
    ] = "none"
    default_thumbnail:  int = Field(default=0, description="Image id used when an item has no thumbnail")

    # styling
    disable_css:          bool = False
    disable_theme_styles: bool = False

    # empty lists, load more and footer
    no_match_handling:  Literal["nothing", "hide", "text"] = "nothing"
    no_match_text:      str = ""
    enable_loadmore:    bool = False
    loadmore_text:      str = ""
    loading_text:       str = ""
    loadmore_scroll_to: bool = False
    footer_link:        str = ""
    footer_link_text:   str = ""

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> Any:
        """YAML hands back dates and numbers for values that are strings here."""
        if isinstance(v, date):
            return v.isoformat()
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator(*_COUNT_FIELDS, "num", mode="before")
    @classmethod
    def _reject_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("expected a number")
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator(*_COUNT_FIELDS)
    @classmethod
    def _non_negative(cls, v: int) -> int:
        return max(0, v)

    @property
    def thumb_size(self) -> tuple[int, int]:
        return self.thumb_w, self.thumb_h


def site_defaults(site: Settings) -> dict[str, Any]:
    """Defaults that depend on site configuration rather than on the schema."""
    return {
        "num": site.posts_per_page,
        "thumb_w": site.thumbnail_size_w,
        "thumb_h": site.thumbnail_size_h,
    }


def resolve_settings(raw: Optional[Mapping[str, Any]] = None, site: Optional[Settings] = None) -> ListSettings:
    """Normalize a raw settings map into a ListSettings record.

    Unknown keys are dropped. A recognized key whose value fails validation falls
    back to its default, one field at a time, so a single bad value never
    invalidates the rest of the record.
    """
    site = site or Settings()
    defaults = site_defaults(site)
    data = dict(defaults)
    data.update({
        k: v for k, v in (raw or {}).items()
        if k in ListSettings.model_fields and v is not None
    })

    for _ in range(len(ListSettings.model_fields) + 1):
        try:
            return ListSettings.model_validate(data)
        except ValidationError as e:
            bad = {err["loc"][0] for err in e.errors() if err["loc"]}
            for key in bad:
                logger.debug("Setting %r has invalid value %r; using default", key, data.get(key))
                if key in defaults and data.get(key) != defaults[key]:
                    data[key] = defaults[key]
                else:
                    data.pop(key, None)
    return ListSettings()
