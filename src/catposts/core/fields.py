"""Per-placeholder field renderers and their dispatch table"""

from typing import Callable

from catposts.config import site_zone
from catposts.core.dates import format_date, human_time_diff
from catposts.core.excerpt import DEFAULT_MORE_TEXT, render_excerpt
from catposts.core.models import ContentItem, RenderContext, Term
from catposts.core.sanitize import esc_html
from catposts.core.settings import ListSettings
from catposts.core.template import Placeholder
from catposts.core.thumbnail import resolve_thumbnail


FieldRenderer = Callable[[ContentItem, ListSettings, RenderContext], str]

DEFAULT_CUSTOM_DATE_FORMAT = "j M Y"
HEADING_LEVELS = ("H1", "H2", "H3", "H4", "H5", "H6")


def add_heading_level(html: str, level: str, settings: ListSettings) -> str:
    """Wrap html in an <hN> element when level is one of H1-H6."""
    if level not in HEADING_LEVELS:
        return html
    tag = level.lower()
    css = "" if settings.disable_theme_styles else ' class="widget-title"'
    return f"<{tag}{css}>{html}</{tag}>"


def _theme_class(settings: ListSettings, classes: str) -> str:
    return "" if settings.disable_theme_styles else f" {classes}"


def render_title(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    title = esc_html(item.title)
    if ctx.everything_is_link:
        html = f'<span class="cat-post-title">{title}</span>'
    else:
        html = f'<a class="cat-post-title" href="{esc_html(item.permalink)}" rel="bookmark">{title}</a>'
    return add_heading_level(html, settings.item_title_level, settings)


def render_author(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    name = esc_html(item.author.name)
    if ctx.everything_is_link or not item.author.url:
        inner = name
    else:
        inner = (
            f'<a href="{esc_html(item.author.url)}" title="{esc_html("Posts by " + item.author.name)}"'
            f' rel="author">{name}</a>'
        )
    return f'<span class="cat-post-author{_theme_class(settings, "post-author")}">{inner}</span>'


def render_comment_num(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    n = item.comment_count
    if ctx.everything_is_link:
        inner = f"({n})"
    else:
        title = esc_html(f"({n}) comments to this post")
        inner = f'<a href="{esc_html(item.comments_url)}" title="{title}">({n})</a>'
    return f'<span class="cat-post-comment-num comment-meta">{inner}</span>'


def render_date(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    """Publish date in the preset format, or time since publishing for recent items."""
    site = ctx.site
    local = item.published.astimezone(site_zone(site.timezone))
    preset = settings.preset_date_format
    attr = ""
    if preset == "sitedateandtime":
        text = format_date(local, f"{site.date_format} {site.time_format}")
    elif preset == "localsitedateandtime":
        text = format_date(local, f"{site.date_format} {site.time_format}") + " GMT"
        attr = f' data-publishtime="{int(item.published.timestamp())}" data-format="time"'
    elif preset == "sitedate":
        text = format_date(local, site.date_format)
    elif preset == "localsitedate":
        text = format_date(local, site.date_format) + " GMT"
        attr = f' data-publishtime="{int(item.published.timestamp())}" data-format="date"'
    else:
        fmt = settings.date_format if settings.date_format.strip() else DEFAULT_CUSTOM_DATE_FORMAT
        text = format_date(local, fmt)

    if settings.date_past_time > 0:
        past_days = int(abs((ctx.now - item.published).total_seconds()) // 86400)
        if past_days <= settings.date_past_time:
            text = human_time_diff(item.published, ctx.now)
            attr = ' data-publishtime="" data-format="sincepublished"'

    css = f"cat-post-date{_theme_class(settings, 'post-date')}"
    return f'<span class="{css}"{attr}>{esc_html(text)}</span>'


def render_thumb(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    """Thumbnail wrapped in a crop span and a link, or empty when there is no image."""
    image = item.thumbnail or ctx.default_thumbnail
    resolved = resolve_thumbnail(
        image, settings.thumb_w, settings.thumb_h, (ctx.site.large_size_w, ctx.site.large_size_h),
    )
    if resolved is None:
        return ""

    crop = "cat-post-crop"
    if settings.show_post_format != "none" or settings.thumb_hover != "none":
        crop += f" cat-post-format cat-post-format-{item.post_format or 'standard'}"
    img = f'<span class="{crop}">{resolved.to_html()}</span>'

    css = "cat-post-thumbnail"
    if not settings.disable_css:
        css += f" cat-post-{settings.thumb_hover}"
    if ctx.everything_is_link:
        return f'<span class="{css}">{img}</span>'
    return f'<a class="{css}" href="{esc_html(item.permalink)}" title="{esc_html(item.title)}">{img}</a>'


def _terms(terms: tuple[Term, ...], ctx: RenderContext) -> str:
    if ctx.everything_is_link:
        return "".join(f" {esc_html(t.name)}" for t in terms)
    return "".join(f' <a href="{esc_html(t.url)}">{esc_html(t.name)}</a>' for t in terms)


def render_tags(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    css = f"cat-post-tax-tag{_theme_class(settings, 'widget_tag_cloud tagcloud post-tags')}"
    return f'<span class="{css}">{_terms(item.tags, ctx)}</span>'


def render_categories(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    css = f"cat-post-tax-category{_theme_class(settings, 'entry-categories post-categories')}"
    return f'<span class="{css}">{_terms(item.categories, ctx)}</span>'


def render_more_link(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    """Configured 'more' text linking to the item; empty text defers to an external default."""
    if settings.excerpt_more_text == "" and ctx.excerpt_more:
        return ctx.excerpt_more
    more_text = esc_html(settings.excerpt_more_text.strip()) or DEFAULT_MORE_TEXT
    css = f"cat-post-excerpt-more{_theme_class(settings, 'more-link')}"
    if ctx.everything_is_link:
        return f' <span class="{css}">{more_text}</span>'
    return f' <a class="{css}" href="{esc_html(item.permalink)}">{more_text}</a>'


FIELD_RENDERERS: dict[Placeholder, FieldRenderer] = {
    Placeholder.title: render_title,
    Placeholder.author: render_author,
    Placeholder.commentnum: render_comment_num,
    Placeholder.date: render_date,
    Placeholder.thumb: render_thumb,
    Placeholder.post_tag: render_tags,
    Placeholder.category: render_categories,
    Placeholder.excerpt: render_excerpt,
    Placeholder.more_link: render_more_link,
}

_missing = set(Placeholder) - FIELD_RENDERERS.keys()
if _missing:
    raise RuntimeError(f"No field renderer for placeholders: {sorted(p.value for p in _missing)}")
