"""Shared fixtures for core unit tests"""

import pytest

from catposts.core.models import RenderContext
from catposts.core.settings import resolve_settings


@pytest.fixture(name="make_ctx")
def make_ctx_fixture(site, now):
    """Build (settings, RenderContext) for an item from raw list settings."""
    def _make(item, raw=None, **ctx_fields):
        settings = resolve_settings(raw or {}, site)
        ctx = RenderContext(
            item=item,
            settings=settings,
            site=site,
            now=now,
            everything_is_link=settings.everything_is_link,
            **ctx_fields,
        )
        return settings, ctx
    return _make
