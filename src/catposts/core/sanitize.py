"""Allow-list sanitization of rendered list markup"""

import re

import bleach


ALLOWED_TAGS = frozenset({
    "a", "span", "div", "p", "ul", "ol", "li",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "img", "button", "strong", "em", "b", "i", "br", "small", "code",
})

ALLOWED_ATTRIBUTES = frozenset({
    "class", "id", "href", "title", "rel", "src", "srcset", "sizes", "alt",
    "width", "height", "loading", "type",
})

_BARE_AMP_RE = re.compile(r"&(?!#?\w+;)")


def _allow_attribute(tag: str, name: str, value: str) -> bool:
    return name in ALLOWED_ATTRIBUTES or name.startswith("data-")


def sanitize(html: str) -> str:
    """Drop every tag and attribute outside the allow-list, keeping their text."""
    return bleach.clean(html, tags=ALLOWED_TAGS, attributes=_allow_attribute, strip=True)


def esc_html(text: str) -> str:
    """Escape text for markup without double-encoding existing entities."""
    text = _BARE_AMP_RE.sub("&amp;", str(text))
    return text.replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;").replace("'", "&#039;")
