"""List rendering: query, item loop, title, load-more control and footer"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from catposts.config import Settings
from catposts.core.errors import RepositoryError
from catposts.core.item import render_item
from catposts.core.models import Image, PaginationState, Term
from catposts.core.query import build_query
from catposts.core.sanitize import esc_html, sanitize
from catposts.core.settings import ListSettings
from catposts.core.template import Placeholder, compile_template
from catposts.crud.repo import ContentRepository


logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Category Posts"
DEFAULT_LOADMORE_TEXT = "Load More (%step%/%all%)"
DEFAULT_LOADING_TEXT = "Loading..."


class ListRenderer:
    """Render category post lists from a ContentRepository."""

    def __init__(
        self,
        repo: ContentRepository,
        site: Optional[Settings] = None,
        now: Optional[datetime] = None,
        before_title: str = '<h3 class="widget-title">',
        after_title: str = "</h3>",
        ):
        self.repo = repo
        self.site = site or Settings()
        self.now = now
        self.before_title = before_title
        self.after_title = after_title

    # --- repository access ---

    def _call(self, op: Callable[..., Any], *args: Any) -> Any:
        """Run a repository operation, surfacing any failure as RepositoryError."""
        try:
            return op(*args)
        except RepositoryError:
            raise
        except Exception as e:
            logger.error("Repository %s failed: %s", op.__name__, e)
            raise RepositoryError(f"{op.__name__} failed: {e}") from e

    def _resolve_category(self, settings: ListSettings) -> tuple[ListSettings, Optional[Term]]:
        """Look up the list category; an unknown one is treated as all categories."""
        if not settings.category_id:
            return settings, None
        term = self._call(self.repo.get_category, settings.category_id)
        if term is None:
            logger.info("Category %d not found; listing all categories", settings.category_id)
            return settings.model_copy(update={"category_id": 0}), None
        return settings, term

    # --- items ---

    def render_items(
        self,
        settings: ListSettings,
        current_item_id: Optional[int] = None,
        start: int = 0,
        number: int = 0,
        ) -> tuple[list[str], PaginationState]:
        """Render the <li> fragments of one page; start and number override the settings when > 0."""
        settings, _ = self._resolve_category(settings)
        return self._render_items(settings, current_item_id, start, number)

    def _render_items(
        self,
        settings: ListSettings,
        current_item_id: Optional[int],
        start: int = 0,
        number: int = 0,
        ) -> tuple[list[str], PaginationState]:
        overrides = {}
        if start > 0:
            overrides["offset"] = start
        if number > 0:
            overrides["num"] = number
        if overrides:
            settings = settings.model_copy(update=overrides)

        now = self.now or datetime.now(timezone.utc)
        spec = build_query(settings, current_item_id, now)
        template = compile_template(settings.template)
        default_thumbnail: Optional[Image] = None
        if settings.default_thumbnail and template.uses(Placeholder.thumb):
            default_thumbnail = self._call(self.repo.get_image, settings.default_thumbnail)

        items = self._call(self.repo.fetch, spec)
        total = self._call(self.repo.count, spec.for_count()) if settings.enable_loadmore else None

        rendered: list[str] = []
        with self.repo.preserve_cursor():
            for item in items:
                # Sticky items come ahead of the page, so stop at the requested count.
                if not spec.ignore_sticky and len(rendered) >= settings.num:
                    break
                self.repo.current_item = item
                rendered.append(render_item(
                    item, settings, template, current_item_id,
                    site=self.site, now=now, default_thumbnail=default_thumbnail,
                ))

        state = PaginationState(requested=settings.num, returned=len(rendered), total=total, offset=settings.offset)
        logger.debug("Rendered %d of %d requested items (total=%s)", state.returned, state.requested, total)
        return rendered, state

    # --- blocks ---

    def title_html(self, settings: ListSettings, category: Optional[Term]) -> str:
        if settings.hide_title:
            return ""
        title = settings.title or (category.name if category else DEFAULT_TITLE)
        title = esc_html(title)

        if settings.title_link:
            if category:
                url = category.url
            elif settings.title_link_url:
                url = settings.title_link_url
            else:
                url = self.site.posts_page_url
            title = f'<a href="{esc_html(url)}">{title}</a>'

        if settings.title_level == "Initial":
            return f"{self.before_title}{title}{self.after_title}"
        tag = settings.title_level.lower()
        css = "" if settings.disable_theme_styles else ' class="widget-title"'
        return f"<{tag}{css}>{title}</{tag}>"

    def footer_html(self, settings: ListSettings, category: Optional[Term]) -> str:
        """Footer link; text without a URL links to the category archive or the blog page."""
        url, text = settings.footer_link, settings.footer_link_text
        if not text and url:
            text = url
        if text and not url:
            url = category.url if category else self.site.posts_page_url
        if not url:
            return ""
        return f'<a class="cat-post-footer-link" href="{esc_html(url)}">{esc_html(text)}</a>'

    def load_more_html(
        self,
        settings: ListSettings,
        state: PaginationState,
        list_id: str,
        current_item_id: Optional[int] = None,
        ) -> str:
        if not settings.enable_loadmore or not state.show_load_more:
            return ""
        placeholder = settings.loadmore_text or DEFAULT_LOADMORE_TEXT
        label = placeholder.replace("%step%", str(state.requested)).replace("%all%", str(state.total))
        loading = settings.loading_text or DEFAULT_LOADING_TEXT
        attrs = {
            "data-loading": loading,
            "data-id": list_id,
            "data-start": state.next_start,
            "data-context": current_item_id or 0,
            "data-number": state.requested,
            "data-post-count": state.total,
            "data-placeholder": placeholder,
            "data-scrollto": "1" if settings.loadmore_scroll_to else "",
        }
        attr_html = " ".join(f'{k}="{esc_html(str(v))}"' for k, v in attrs.items())
        return f'<div class="categoryPosts-loadmore"><button type="button" {attr_html}>{esc_html(label)}</button></div>'

    # --- list ---

    def render(
        self,
        settings: ListSettings,
        current_item_id: Optional[int] = None,
        list_id: str = "category-posts",
        ) -> str:
        """Render the whole list; returns an empty string when it should be hidden."""
        settings, category = self._resolve_category(settings)
        items, state = self._render_items(settings, current_item_id)

        if not items and settings.no_match_handling == "hide":
            return ""

        parts = [f'<div id="{esc_html(list_id)}" class="cat-post-widget">']
        parts.append(self.title_html(settings, category))
        if not items and settings.no_match_handling == "text":
            parts.append(esc_html(settings.no_match_text))
        else:
            parts.append(f'<ul id="{esc_html(list_id)}-internal" class="category-posts-internal">\n')
            parts.extend(items)
            parts.append("</ul>\n")
            if state.might_have_more:
                parts.append(self.load_more_html(settings, state, list_id, current_item_id))
        parts.append(self.footer_html(settings, category))
        parts.append("</div>")
        return sanitize("".join(parts))
