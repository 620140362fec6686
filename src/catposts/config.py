"""Site configuration: settings schema, config.yaml loader and list settings files"""

import os
from datetime import timezone, tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "CATPOSTS_"

# Shortcodes registered by the platform core; only these are stripped from excerpts.
DEFAULT_SHORTCODE_TAGS = ("audio", "caption", "wp_caption", "embed", "gallery", "playlist", "video")


def site_zone(name: str) -> tzinfo:
    """Resolve a site timezone name; raises ValueError for an unknown zone."""
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name!r}") from e


class Settings(BaseModel):
    app_name:          str = "catposts"
    db_url:            str = "sqlite:///catposts.db"
    site_url:          str = Field(default="http://localhost", description="Base URL used to build permalinks")
    blog_url:          str = Field(default="",      description="Posts page URL; empty falls back to site_url")
    timezone:          str = Field(default="UTC",   description="IANA zone used for site-local dates")
    date_format:       str = Field(default="F j, Y", description="PHP-style site date format")
    time_format:       str = Field(default="g:i a",  description="PHP-style site time format")
    posts_per_page:    int = Field(default=5,   ge=1, description="Default item count for a list")
    thumbnail_size_w:  int = Field(default=150, ge=0)
    thumbnail_size_h:  int = Field(default=150, ge=0)
    large_size_w:      int = Field(default=1024, ge=0, description="Box used when both thumb dimensions are 0")
    large_size_h:      int = Field(default=1024, ge=0)
    excerpt_length:    int = Field(default=55,  ge=1, description="Platform default excerpt length in words")
    excerpt_more:      str = Field(default="",  description="External 'more' markup; empty means none")
    list_settings:     str = Field(default="list.yaml", description="YAML file with the list settings")
    shortcode_tags:    tuple[str, ...] = Field(default=DEFAULT_SHORTCODE_TAGS, description="Shortcode tags stripped from excerpts")

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, v: str) -> str:
        site_zone(v)
        return v

    @field_validator("shortcode_tags", mode="before")
    @classmethod
    def _split_tags(cls, v: Any) -> Any:
        """Env vars hand back a comma separated string."""
        if isinstance(v, str):
            return tuple(t.strip() for t in v.split(",") if t.strip())
        return v

    @property
    def home_url(self) -> str:
        return self.site_url.rstrip("/") + "/"

    @property
    def posts_page_url(self) -> str:
        """Blog page URL, or the home page when no explicit blog page is configured."""
        return self.blog_url or self.home_url


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping, got {type(data).__name__}")
    return data


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then CATPOSTS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        data = _read_yaml(Path(CONFIG_FILE))

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)


def load_list_settings(path: str | Path) -> dict[str, Any]:
    """Return the raw list settings mapping stored in a YAML file ({} when missing)."""
    path = Path(path)
    if not path.exists():
        return {}
    return _read_yaml(path)
