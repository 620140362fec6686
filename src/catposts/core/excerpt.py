"""Excerpt construction from manual excerpts or markdown content"""

import re
from functools import lru_cache
from html import unescape

import bleach
from markdown_it import MarkdownIt

from catposts.config import DEFAULT_SHORTCODE_TAGS
from catposts.core.models import ContentItem, RenderContext
from catposts.core.sanitize import esc_html
from catposts.core.settings import ListSettings


EXCERPT_SENTINEL = 999              # configured length <= 0: use the platform default
DEFAULT_MORE_TEXT = "[&hellip;]"
PLATFORM_MORE = " [&hellip;]"

_SHORTCODE_PATTERN = r"\[(?P<tag>{tags})(?=[\s\/\]])(?:\s[^\]]*)?/?\](?!\()(?:.*?\[/(?P=tag)\])?"
PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")

SMILIES = {
    ":)": "\U0001F642", ":-)": "\U0001F642", ":smile:": "\U0001F642",
    ":(": "\U0001F641", ":-(": "\U0001F641", ":sad:": "\U0001F641",
    ":D": "\U0001F600", ":-D": "\U0001F600", ":grin:": "\U0001F600",
    ";)": "\U0001F609", ";-)": "\U0001F609", ":wink:": "\U0001F609",
    ":P": "\U0001F61B", ":-P": "\U0001F61B", ":razz:": "\U0001F61B",
    ":o": "\U0001F62E", ":-o": "\U0001F62E", ":eek:": "\U0001F62E",
    ":?:": "❓", ":!:": "❗", ":idea:": "\U0001F4A1",
}
_SMILEY_RE = re.compile(
    r"(?<!\S)(" + "|".join(re.escape(s) for s in sorted(SMILIES, key=len, reverse=True)) + r")(?!\S)"
)

_content_md = MarkdownIt("commonmark")
_excerpt_md = MarkdownIt("commonmark", {"typographer": True}).enable(["replacements", "smartquotes"])
_text_md = MarkdownIt("zero", {"typographer": True}).enable(["replacements", "smartquotes"])


def effective_length(configured: int) -> int:
    """Configured word count, or the sentinel when it is not a positive number."""
    return configured if configured > 0 else EXCERPT_SENTINEL


@lru_cache(maxsize=16)
def shortcode_regex(tags: tuple[str, ...]) -> re.Pattern:
    """Match [tag ...], [tag /] and [tag]...[/tag] for the registered tags only."""
    alternatives = "|".join(re.escape(t) for t in sorted(tags, key=len, reverse=True))
    return re.compile(_SHORTCODE_PATTERN.format(tags=alternatives), re.DOTALL)


def strip_shortcodes(text: str, tags: tuple[str, ...] = DEFAULT_SHORTCODE_TAGS) -> str:
    """Remove registered shortcodes, enclosed content included; other bracketed text is kept."""
    if not tags:
        return text
    return shortcode_regex(tuple(tags)).sub("", text)


def convert_smilies(text: str) -> str:
    return _SMILEY_RE.sub(lambda m: SMILIES[m.group(1)], text)


def plain_text(source: str) -> str:
    """Render markdown source and drop every tag, returning unescaped text."""
    html = _content_md.render(source)
    return unescape(bleach.clean(html, tags=set(), strip=True))


def trim_words(text: str, length: int) -> tuple[str, bool]:
    """First `length` whitespace separated words, and whether anything was cut."""
    words = text.split()
    if len(words) > length:
        return " ".join(words[:length]), True
    return " ".join(words), False


def typeset(text: str) -> str:
    """Smart quotes, dashes and ellipses, smilies and escaping for plain text."""
    if not text:
        return ""
    return _text_md.renderInline(convert_smilies(text))


def autop(html: str) -> str:
    """Wrap blank-line separated blocks in <p>; single newlines become <br />."""
    blocks = [b.strip() for b in PARAGRAPH_BREAK_RE.split(html.strip()) if b.strip()]
    return "\n".join("<p>" + b.replace("\n", "<br />\n") + "</p>" for b in blocks)


def _tag_paragraphs(html: str) -> str:
    return html.replace("<p>", '<p class="cpwp-excerpt-text">')


def _more_marker(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    """'More' marker appended by direct excerpt construction."""
    more_text = esc_html(settings.excerpt_more_text.lstrip()) or DEFAULT_MORE_TEXT
    if ctx.everything_is_link:
        return f' <span class="cat-post-excerpt-more">{more_text}</span>'
    title = esc_html(f"Continue reading {item.title}")
    return f' <a class="cat-post-excerpt-more" href="{esc_html(item.permalink)}" title="{title}">{more_text}</a>'


def _more_filter(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    """'More' marker used by the platform excerpt pipeline."""
    if not settings.excerpt_more_text.strip():
        return ctx.excerpt_more or PLATFORM_MORE
    text = esc_html(settings.excerpt_more_text)
    if ctx.everything_is_link:
        return f' <span class="cat-post-excerpt-more more-link">{text}</span>'
    return f' <a class="cat-post-excerpt-more more-link" href="{esc_html(item.permalink)}">{text}</a>'


def _platform_excerpt(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    if item.excerpt:
        return _excerpt_md.render(convert_smilies(item.excerpt)).strip()

    length = effective_length(settings.excerpt_length)
    if length == EXCERPT_SENTINEL:
        length = ctx.site.excerpt_length
    words, cut = trim_words(plain_text(strip_shortcodes(item.content, ctx.site.shortcode_tags)), length)
    return autop(typeset(words) + (_more_filter(item, settings, ctx) if cut else ""))


def _direct_excerpt(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    source = item.excerpt or strip_shortcodes(item.content, ctx.site.shortcode_tags)
    words, cut = trim_words(plain_text(source), effective_length(settings.excerpt_length))
    return autop(typeset(words) + (_more_marker(item, settings, ctx) if cut else ""))


def render_excerpt(item: ContentItem, settings: ListSettings, ctx: RenderContext) -> str:
    """Excerpt markup for an item, paragraphs tagged with the cpwp-excerpt-text class.

    With excerpt_filters on, the platform pipeline is used: a manual excerpt is
    shown whole, otherwise the content is cut to the configured length (the site
    default when unset). With filters off the excerpt is built directly and the
    sentinel length keeps practically the whole text.
    """
    if settings.excerpt_filters:
        html = _platform_excerpt(item, settings, ctx)
    else:
        html = _direct_excerpt(item, settings, ctx)
    return _tag_paragraphs(html)
