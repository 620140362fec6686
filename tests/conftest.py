"""Root test configuration: shared content factories and session-level cleanup"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from catposts.config import Settings
from catposts.core.models import Author, ContentItem, Image, ImageRendition, Term


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["catposts.db", "test.db"]

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
BASE = "https://example.com"


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()


@pytest.fixture(name="now")
def now_fixture():
    return NOW


@pytest.fixture(name="site")
def site_fixture():
    return Settings(site_url=BASE, timezone="UTC", date_format="F j, Y", time_format="g:i a")


@pytest.fixture(name="news")
def news_fixture():
    return Term(id=3, name="News", slug="news", url=f"{BASE}/category/news/")


@pytest.fixture(name="local")
def local_fixture():
    """Child category of News."""
    return Term(id=4, name="Local", slug="local", url=f"{BASE}/category/local/", parent_id=3)


@pytest.fixture(name="image")
def image_fixture():
    """Four renditions of a 3:2 image, the full size last."""
    return Image(id=10, alt="A cat", renditions=(
        ImageRendition(
            name="thumbnail", url=f"{BASE}/cat-150x150.jpg", width=150, height=150,
            attrs={"style": "float: left", "loading": "lazy"},
        ),
        ImageRendition(name="medium", url=f"{BASE}/cat-300x200.jpg", width=300, height=200),
        ImageRendition(name="large", url=f"{BASE}/cat-1024x683.jpg", width=1024, height=683),
        ImageRendition(name="full", url=f"{BASE}/cat.jpg", width=1200, height=800),
    ))


@pytest.fixture(name="make_item")
def make_item_fixture(news):
    """Factory for ContentItems; item n is published n days before NOW."""
    def _make(item_id: int = 1, **overrides) -> ContentItem:
        permalink = f"{BASE}/post-{item_id}/"
        data = dict(
            id=item_id,
            title=f"Post {item_id}",
            slug=f"post-{item_id}",
            permalink=permalink,
            published=NOW - timedelta(days=item_id),
            author=Author(id=1, name="Ada", url=f"{BASE}/author/ada/"),
            content="Some *content* here.",
            comments_url=f"{permalink}#comments",
            categories=(news,),
        )
        data.update(overrides)
        return ContentItem(**data)
    return _make
