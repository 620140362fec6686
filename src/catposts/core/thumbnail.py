"""Thumbnail size negotiation: pick the best-fit rendition and size its markup"""

from dataclasses import dataclass, field
from typing import Optional

from catposts.core.models import Image, ImageRendition
from catposts.core.sanitize import esc_html


# Inline style is never carried over; the rest are owned by ImageMarkup fields.
_DROPPED_ATTRS = ("style", "width", "height", "src", "class", "alt", "srcset", "sizes")


@dataclass
class ImageMarkup:
    """Structured <img> element; sizing is changed by assigning fields, never by text substitution."""
    src:       str
    width:     Optional[int] = None         # None: attribute omitted (intrinsic/auto sizing)
    height:    Optional[int] = None
    alt:       str = ""
    css_class: str = ""
    srcset:    str = ""
    sizes:     str = ""
    attrs:     dict[str, str] = field(default_factory=dict)

    def to_html(self) -> str:
        parts = []
        if self.width is not None:
            parts.append(f'width="{self.width}"')
        if self.height is not None:
            parts.append(f'height="{self.height}"')
        parts.append(f'src="{esc_html(self.src)}"')
        if self.css_class:
            parts.append(f'class="{esc_html(self.css_class)}"')
        parts.append(f'alt="{esc_html(self.alt)}"')
        if self.srcset:
            parts.append(f'srcset="{esc_html(self.srcset)}"')
        if self.sizes:
            parts.append(f'sizes="{esc_html(self.sizes)}"')
        parts.extend(f'{name}="{esc_html(str(value))}"' for name, value in self.attrs.items())
        return f"<img {' '.join(parts)} />"


@dataclass(frozen=True)
class ResolvedThumbnail:
    markup:    ImageMarkup
    width:     int                          # effective rendering width
    height:    int
    candidate: ImageRendition

    def to_html(self) -> str:
        return self.markup.to_html()


def candidates(image: Image) -> list[ImageRendition]:
    """Renditions from smallest to largest, always ending with the full size."""
    sized = sorted(image.renditions[:-1], key=lambda r: (r.width * r.height, r.width, r.height))
    return sized + [image.full]


def select_candidate(image: Image, width: int, height: int) -> ImageRendition:
    """First rendition covering width x height; full size when both are 0 or nothing fits."""
    if not (width == 0 and height == 0):
        for r in candidates(image)[:-1]:
            if r.width >= width and r.height >= height:
                return r
    return image.full


def effective_size(width: int, height: int, full: ImageRendition, large_size: tuple[int, int]) -> tuple[int, int]:
    """Infer the missing dimension(s) of a thumbnail request."""
    if width == 0 and height == 0:
        return large_size
    if width == 0:
        return full.width, height
    if height == 0:
        if not full.width or not full.height:
            return width, 0
        return width, int(width / (full.width / full.height))
    return width, height


def resolve_thumbnail(
    image: Optional[Image],
    width: int,
    height: int,
    large_size: tuple[int, int] = (1024, 1024),
    ) -> Optional[ResolvedThumbnail]:
    """Select and size the rendition to show for a width x height request (0 = auto).

    Returns None when there is no image to show.
    """
    if image is None or not image.renditions:
        return None

    eff_w, eff_h = effective_size(width, height, image.full, large_size)
    chosen = select_candidate(image, width, height)

    markup = ImageMarkup(
        src=chosen.url,
        width=chosen.width,
        height=chosen.height,
        alt=image.alt,
        css_class=f"attachment-{chosen.name} size-{chosen.name}",
        srcset=", ".join(f"{r.url} {r.width}w" for r in candidates(image)),
        sizes=f"(max-width: {eff_w}px) 100vw, {eff_w}px",
        attrs=dict(chosen.attrs),
    )
    for name in _DROPPED_ATTRS:
        markup.attrs.pop(name, None)
    markup.attrs["data-cat-posts-width"] = str(width)
    markup.attrs["data-cat-posts-height"] = str(height)
    markup.width = eff_w if width else None
    markup.height = eff_h if height else None

    return ResolvedThumbnail(markup=markup, width=eff_w, height=eff_h, candidate=chosen)
