"""Unit tests for core/listing.py"""

import pytest

from catposts.core.errors import RepositoryError
from catposts.core.listing import ListRenderer
from catposts.core.settings import resolve_settings
from catposts.crud.memory_repo import MemoryRepo


class FailingRepo(MemoryRepo):
    """MemoryRepo whose fetch or count blows up."""

    def __init__(self, fail_on: str, error: Exception, **kwargs):
        super().__init__(**kwargs)
        self.fail_on = fail_on
        self.error = error

    def fetch(self, spec):
        if self.fail_on == "fetch":
            raise self.error
        return super().fetch(spec)

    def count(self, spec):
        if self.fail_on == "count":
            raise self.error
        return super().count(spec)


@pytest.fixture(name="repo")
def repo_fixture(make_item):
    """23 published items in News, newest first by id."""
    repo = MemoryRepo()
    for i in range(1, 24):
        repo.add(make_item(i))
    return repo


@pytest.fixture(name="renderer")
def renderer_fixture(repo, site, now):
    return ListRenderer(repo, site, now=now)


def _settings(site, **raw):
    return resolve_settings({"template": "%title%", **raw}, site)


# --- load more ---

def test_load_more_scenario(renderer, site):
    settings = _settings(site, category_id=3, num=5, enable_loadmore=True)
    items, state = renderer.render_items(settings)
    assert len(items) == 5
    assert (state.requested, state.returned, state.total) == (5, 5, 23)

    html = renderer.render(settings, list_id="cats")
    assert 'data-start="6"' in html
    assert 'data-number="5"' in html
    assert 'data-post-count="23"' in html
    assert 'data-placeholder="Load More (%step%/%all%)"' in html
    assert 'data-loading="Loading..."' in html
    assert 'data-id="cats"' in html
    assert 'data-context="0"' in html
    assert ">Load More (5/23)</button>" in html


def test_load_more_start_follows_offset(renderer, site):
    settings = _settings(site, num=5, offset=3, enable_loadmore=True, loadmore_text="%step% of %all%")
    html = renderer.render(settings, current_item_id=40)
    assert 'data-start="8"' in html
    assert 'data-context="40"' in html
    assert ">5 of 23</button>" in html


def test_no_load_more_when_page_not_full(renderer, site):
    settings = _settings(site, num=5, offset=20, enable_loadmore=True)
    items, state = renderer.render_items(settings)
    assert len(items) == 4
    assert "categoryPosts-loadmore" not in renderer.render(settings)


def test_no_load_more_when_everything_shown(make_item, site, now):
    repo = MemoryRepo(items=[make_item(i) for i in range(1, 6)])
    html = ListRenderer(repo, site, now=now).render(_settings(site, num=5, enable_loadmore=True))
    assert "categoryPosts-loadmore" not in html


def test_count_not_queried_without_load_more(make_item, site, now):
    repo = FailingRepo("count", RuntimeError("count should not run"), items=[make_item(1)])
    items, state = ListRenderer(repo, site, now=now).render_items(_settings(site))
    assert len(items) == 1
    assert state.total is None


# --- no matches ---

def test_no_match_text_mode(site, now):
    settings = _settings(site, title="Cats", no_match_handling="text", no_match_text="Nothing here", footer_link_text="All cats")
    html = ListRenderer(MemoryRepo(), site, now=now).render(settings)
    assert "Cats" in html
    assert "Nothing here" in html
    assert 'class="cat-post-footer-link"' in html
    assert "<ul" not in html
    assert "cat-post-item" not in html


def test_no_match_hide_mode(site, now):
    settings = _settings(site, no_match_handling="hide")
    assert ListRenderer(MemoryRepo(), site, now=now).render(settings) == ""


def test_no_match_nothing_mode_renders_empty_list(site, now):
    html = ListRenderer(MemoryRepo(), site, now=now).render(_settings(site), list_id="cats")
    assert '<ul id="cats-internal" class="category-posts-internal">' in html
    assert "cat-post-item" not in html


# --- title, category and footer ---

def test_title_falls_back_to_category_name(renderer, site):
    html = renderer.render(_settings(site, category_id=3, title_link=True))
    assert '<h3 class="widget-title"><a href="https://example.com/category/news/">News</a></h3>' in html


def test_deleted_category_lists_everything_with_generic_title(make_item, site, now, local):
    repo = MemoryRepo()
    repo.add(make_item(1))
    repo.add(make_item(2, categories=(local,)))
    repo.add(make_item(3, categories=()))
    settings = _settings(site, category_id=99, num=10, footer_link_text="More")
    html = ListRenderer(repo, site, now=now).render(settings)
    assert ">Category Posts</h3>" in html
    assert html.count("cat-post-item") == 3
    assert 'href="https://example.com/">More</a>' in html


def test_title_heading_level_and_link_fallbacks(renderer, site):
    html = renderer.render(_settings(site, title="Latest", title_level="H2", title_link=True))
    assert '<h2 class="widget-title"><a href="https://example.com/">Latest</a></h2>' in html

    html = renderer.render(_settings(site, title="Latest", title_link=True, title_link_url="https://cats.test/"))
    assert '<a href="https://cats.test/">Latest</a>' in html


def test_hidden_title(renderer, site):
    assert "widget-title" not in renderer.render(_settings(site, hide_title=True))


def test_footer_variants(renderer, site):
    html = renderer.render(_settings(site, category_id=3, footer_link_text="More news"))
    assert '<a class="cat-post-footer-link" href="https://example.com/category/news/">More news</a>' in html

    html = renderer.render(_settings(site, footer_link="https://cats.test/all"))
    assert '<a class="cat-post-footer-link" href="https://cats.test/all">https://cats.test/all</a>' in html

    assert "cat-post-footer-link" not in renderer.render(_settings(site))


def test_footer_text_uses_blog_page(repo, site, now):
    site = site.model_copy(update={"blog_url": "https://example.com/blog/"})
    html = ListRenderer(repo, site, now=now).render(_settings(site, footer_link_text="Blog"))
    assert 'href="https://example.com/blog/">Blog</a>' in html


# --- item loop ---

def test_sticky_items_first_and_capped(make_item, site, now):
    repo = MemoryRepo()
    for i in range(1, 8):
        repo.add(make_item(i, sticky=i in (5, 6)))
    items, state = ListRenderer(repo, site, now=now).render_items(_settings(site, num=3, sticky=True))
    assert len(items) == 3
    assert state.returned == 3
    assert "Post 5" in items[0]
    assert "Post 6" in items[1]
    assert "Post 1" in items[2]


def test_overrides_take_precedence(renderer, site):
    items, state = renderer.render_items(_settings(site, num=5), start=3, number=2)
    assert len(items) == 2
    assert state.requested == 2
    assert "Post 3<" in items[0]
    assert "Post 4<" in items[1]


def test_current_item_marked_or_excluded(renderer, site):
    items, _ = renderer.render_items(_settings(site, num=3), current_item_id=2)
    assert "cat-post-current" in items[1]

    items, _ = renderer.render_items(_settings(site, num=3, exclude_current_post=True), current_item_id=2)
    assert not any("Post 2<" in i for i in items)


def test_cursor_is_restored(repo, renderer, site, make_item):
    outer = make_item(99)
    repo.current_item = outer
    renderer.render(_settings(site))
    assert repo.current_item is outer


def test_default_thumbnail_is_resolved_once(make_item, site, now, image):
    repo = MemoryRepo(images={10: image})
    repo.add(make_item(1))
    html = ListRenderer(repo, site, now=now).render(_settings(site, template="%thumb%", default_thumbnail=10))
    assert "cat-150x150.jpg" in html


# --- failures ---

def test_repository_failure_is_surfaced(make_item, site, now):
    repo = FailingRepo("fetch", RuntimeError("db down"), items=[make_item(1)])
    with pytest.raises(RepositoryError, match="db down"):
        ListRenderer(repo, site, now=now).render(_settings(site))


def test_count_failure_is_surfaced(make_item, site, now):
    repo = FailingRepo("count", RepositoryError("count failed"), items=[make_item(1)])
    with pytest.raises(RepositoryError, match="count failed"):
        ListRenderer(repo, site, now=now).render_items(_settings(site, enable_loadmore=True))
