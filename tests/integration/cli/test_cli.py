"""Integration tests for the init, load and render commands"""

import pytest
from typer.testing import CliRunner

from catposts.cli.cli import app


POSTS_YAML = """\
authors:
  - {id: 1, name: Ada, slug: ada}
categories:
  - {id: 3, name: News, slug: news}
posts:
  - id: 1
    title: Alpha
    slug: alpha
    published: 2024-06-14 10:00:00
    author: 1
    content: First post
    categories: [3]
  - id: 2
    title: Bravo
    slug: bravo
    published: 2024-06-13 10:00:00
    author: 1
    content: Second post
    categories: [3]
"""

LIST_YAML = """\
title: Cats
category_id: 3
template: "%title%"
"""


@pytest.fixture(name="runner")
def runner_fixture(tmp_path, monkeypatch):
    """CliRunner working inside tmp_path with its own database."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CATPOSTS_DB_URL", f"sqlite:///{tmp_path}/test.db")
    monkeypatch.setenv("CATPOSTS_SITE_URL", "https://example.com")
    return CliRunner()


@pytest.fixture(name="loaded")
def loaded_fixture(runner, tmp_path):
    (tmp_path / "posts.yaml").write_text(POSTS_YAML)
    (tmp_path / "list.yaml").write_text(LIST_YAML)
    result = runner.invoke(app, ["load", "posts.yaml"])
    assert result.exit_code == 0, result.output
    return runner


def test_init_creates_database(runner, tmp_path):
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    assert "Database initialized at:" in result.output
    assert (tmp_path / "test.db").exists()


def test_init_reset(runner):
    result = runner.invoke(app, ["init", "--reset"])
    assert result.exit_code == 0, result.output
    assert "Existing data cleared." in result.output


def test_load_reports_counts(runner, tmp_path):
    (tmp_path / "posts.yaml").write_text(POSTS_YAML)
    result = runner.invoke(app, ["load", "posts.yaml"])
    assert result.exit_code == 0, result.output
    assert "Load complete - 2 created, 0 updated, 0 unchanged" in result.output

    result = runner.invoke(app, ["load", "posts.yaml"])
    assert "Load complete - 0 created, 0 updated, 2 unchanged" in result.output


def test_load_missing_file(runner):
    result = runner.invoke(app, ["load", "missing.yaml"])
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_load_rejects_non_mapping(runner, tmp_path):
    (tmp_path / "posts.yaml").write_text("- just\n- a list\n")
    result = runner.invoke(app, ["load", "posts.yaml"])
    assert result.exit_code == 1
    assert "expected a mapping" in result.output


def test_render_list(loaded):
    result = loaded.invoke(app, ["render", "--settings", "list.yaml", "--list-id", "cats"])
    assert result.exit_code == 0, result.output
    assert '<div id="cats" class="cat-post-widget">' in result.output
    assert '<h3 class="widget-title">Cats</h3>' in result.output
    assert result.output.index("Alpha") < result.output.index("Bravo")


def test_render_items_only(loaded):
    result = loaded.invoke(app, ["render", "--settings", "list.yaml", "--start", "2", "--number", "1"])
    assert result.exit_code == 0, result.output
    assert "cat-post-widget" not in result.output
    assert "Bravo" in result.output
    assert "Alpha" not in result.output


def test_render_hidden_empty_list(runner, tmp_path):
    (tmp_path / "list.yaml").write_text("category_id: 3\nno_match_handling: hide\n")
    result = runner.invoke(app, ["render", "--settings", "list.yaml"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == ""


def test_invalid_config_yaml(runner, tmp_path):
    (tmp_path / "config.yaml").write_text("site_url: [unclosed\n")
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 1
    assert "Invalid config.yaml" in result.output


def test_render_unknown_timezone(runner, monkeypatch):
    monkeypatch.setenv("CATPOSTS_TIMEZONE", "Mars/Olympus")
    result = runner.invoke(app, ["render"])
    assert result.exit_code == 1
    assert "Unknown timezone" in result.output
