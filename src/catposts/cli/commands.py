"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
import yaml
from sqlmodel import Session

from catposts.config import Settings, load_config, load_list_settings
from catposts.core.errors import RepositoryError
from catposts.core.listing import ListRenderer
from catposts.core.settings import resolve_settings
from catposts.crud.content import load_content
from catposts.crud.database import init_db, make_engine, reset_db
from catposts.crud.sql_repo import SQLRepo


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    ):
    """Render configurable category post lists."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def load_cmd(
    path: Annotated[Path, typer.Argument(help="YAML file with authors, categories, tags, images and posts")],
    ):
    """Import content from a YAML file into the database."""
    settings = _settings()
    if not path.exists():
        _fail(f"File not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        _fail(f"Invalid {path.name}", e)
    if not isinstance(data, dict):
        _fail(f"Invalid {path.name}: expected a mapping, got {type(data).__name__}")

    engine = make_engine(settings.db_url)
    init_db(engine)
    try:
        with Session(engine) as session:
            counts = load_content(session, data)
            session.commit()
    except Exception as e:
        _fail("Load failed", e)
    typer.echo(
        f"Load complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged"
    )


def render_cmd(
    list_file: Annotated[Optional[str], typer.Option("--settings", help="List settings YAML file")] = None,
    current: Annotated[Optional[int], typer.Option("--current", help="Id of the item the list is rendered on")] = None,
    start: Annotated[int, typer.Option("--start", help="1-based start position; renders items only")] = 0,
    number: Annotated[int, typer.Option("--number", help="Number of items; renders items only")] = 0,
    list_id: Annotated[str, typer.Option("--list-id", help="Element id of the list container")] = "category-posts",
    ):
    """Render a post list to stdout."""
    settings = _settings(overrides={"list_settings": list_file})
    try:
        raw = load_list_settings(settings.list_settings)
    except ValueError as e:
        _fail(str(e))
    list_settings = resolve_settings(raw, settings)

    engine = make_engine(settings.db_url)
    init_db(engine)
    try:
        with Session(engine) as session:
            renderer = ListRenderer(SQLRepo(session, settings.site_url), settings)
            if start > 0 or number > 0:
                items, _ = renderer.render_items(list_settings, current, start, number)
                html = "\n".join(items)
            else:
                html = renderer.render(list_settings, current, list_id)
    except RepositoryError as e:
        _fail("Render failed", e)
    if html:
        typer.echo(html)
