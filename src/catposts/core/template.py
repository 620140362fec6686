"""Item template tokenization into literal and placeholder segments"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Union


class Placeholder(str, Enum):
    """The closed set of %name% tokens an item template may contain"""
    title = "title"
    author = "author"
    commentnum = "commentnum"
    date = "date"
    thumb = "thumb"
    post_tag = "post_tag"
    category = "category"
    excerpt = "excerpt"
    more_link = "more-link"

    @property
    def token(self) -> str:
        return f"%{self.value}%"


PLACEHOLDER_RE = re.compile("|".join(re.escape(p.token) for p in Placeholder))


@dataclass(frozen=True)
class LiteralText:
    text: str


Segment = Union[LiteralText, Placeholder]


@dataclass(frozen=True)
class Template:
    """Compiled template: segments in source order; immutable once compiled."""
    source:   str
    segments: tuple[Segment, ...]

    @property
    def placeholders(self) -> frozenset[Placeholder]:
        return frozenset(s for s in self.segments if isinstance(s, Placeholder))

    def uses(self, placeholder: Placeholder) -> bool:
        return placeholder in self.placeholders


@lru_cache(maxsize=128)
def compile_template(raw: str) -> Template:
    """Split raw into literal and placeholder segments with one left-to-right scan.

    Text that is not one of the known tokens, including other %...% shapes,
    is kept verbatim as literal text.
    """
    segments: list[Segment] = []
    pos = 0
    for m in PLACEHOLDER_RE.finditer(raw):
        if m.start() > pos:
            segments.append(LiteralText(raw[pos:m.start()]))
        segments.append(Placeholder(m.group(0)[1:-1]))
        pos = m.end()
    if pos < len(raw):
        segments.append(LiteralText(raw[pos:]))
    return Template(source=raw, segments=tuple(segments))
