"""Render one content item through a compiled template"""

from datetime import datetime, timezone
from typing import Optional

from catposts.config import Settings
from catposts.core.fields import FIELD_RENDERERS
from catposts.core.models import ContentItem, Image, RenderContext
from catposts.core.sanitize import esc_html, sanitize
from catposts.core.settings import ListSettings
from catposts.core.template import LiteralText, Template


def _normalize_lines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\n\r", "\n").replace("\r", "\n")


def apply_line_conventions(body: str) -> str:
    """A blank line closes and reopens the block; other newlines collapse to a space."""
    body = _normalize_lines(body.strip())
    body = body.replace("\n\n", "</div><div>")
    body = body.replace("\n", " ")
    return f"<div>{body}</div>"


def render_item(
    item: ContentItem,
    settings: ListSettings,
    template: Template,
    current_item_id: Optional[int] = None,
    *,
    site: Optional[Settings] = None,
    now: Optional[datetime] = None,
    default_thumbnail: Optional[Image] = None,
    excerpt_more: str = "",
    ) -> str:
    """Return the sanitized <li> markup of one item.

    Placeholders are filled by their field renderers, literal text is kept as is.
    The item is marked current when its id equals current_item_id.
    """
    site = site or Settings()
    ctx = RenderContext(
        item=item,
        settings=settings,
        site=site,
        now=now or datetime.now(timezone.utc),
        everything_is_link=settings.everything_is_link,
        is_current=current_item_id is not None and item.id == current_item_id,
        default_thumbnail=default_thumbnail,
        excerpt_more=excerpt_more or site.excerpt_more,
    )

    body = "".join(
        seg.text if isinstance(seg, LiteralText) else FIELD_RENDERERS[seg](item, settings, ctx)
        for seg in template.segments
    )
    body = apply_line_conventions(body)
    if ctx.everything_is_link:
        body = f'<a class="cat-post-everything-is-link" href="{esc_html(item.permalink)}" title="">{body}</a>'

    css = "cat-post-item cat-post-current" if ctx.is_current else "cat-post-item"
    return sanitize(f'<li class="{css}">{body}</li>')
