"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from catposts.crud.content import load_content
from catposts.crud.database import init_db


BASE = "https://example.com"


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="content")
def content_fixture():
    """Five posts over three categories; Local is a child of News, Delta is a draft, Charlie is sticky."""
    return {
        "authors": [{"id": 1, "name": "Ada", "slug": "ada"}],
        "categories": [
            {"id": 3, "name": "News", "slug": "news"},
            {"id": 4, "name": "Local", "slug": "local", "parent": 3},
            {"id": 5, "name": "Sports", "slug": "sports"},
        ],
        "tags": [{"id": 8, "name": "cute", "slug": "cute"}],
        "images": [{
            "id": 10,
            "alt": "A cat",
            "renditions": [
                {"name": "thumbnail", "url": f"{BASE}/cat-150x150.jpg", "width": 150, "height": 150,
                 "attrs": {"loading": "lazy"}},
                {"name": "full", "url": f"{BASE}/cat.jpg", "width": 1200, "height": 800},
            ],
        }],
        "posts": [
            {"id": 1, "title": "Alpha", "slug": "alpha", "published": "2024-06-14T10:00:00+00:00", "author": 1,
             "content": "First *post*", "categories": [3], "tags": [8], "thumbnail": 10, "comment_count": 2},
            {"id": 2, "title": "Bravo", "slug": "bravo", "published": "2024-06-13T10:00:00+00:00", "author": 1,
             "categories": [4], "comment_count": 7},
            {"id": 3, "title": "Charlie", "slug": "charlie", "published": "2024-06-12T10:00:00+00:00", "author": 1,
             "categories": [5], "sticky": True},
            {"id": 4, "title": "Delta", "slug": "delta", "published": "2024-06-11T10:00:00+00:00", "author": 1,
             "categories": [3], "status": "draft"},
            {"id": 5, "title": "Echo", "slug": "echo", "published": "2024-06-10T10:00:00+00:00", "author": 1,
             "categories": [5, 3], "comment_count": 1},
        ],
    }


@pytest.fixture(name="seeded")
def seeded_fixture(session, content):
    """Session with the content fixture loaded and flushed."""
    load_content(session, content)
    return session
