"""Database table definitions for posts, authors, taxonomy terms and images"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlmodel import Field, SQLModel


class TaxonomyEnum(str, Enum):
    """Restrict terms to the two taxonomies a list can render"""
    category = "category"
    post_tag = "post_tag"


class Author(SQLModel, table=True):
    __tablename__ = "authors"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(..., nullable=False)
    slug: str = Field(..., index=True, nullable=False)


class Term(SQLModel, table=True):
    """A category or tag; categories nest through parent_id (0 for top level)"""
    __tablename__ = "terms"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(..., nullable=False)
    slug: str = Field(..., index=True, nullable=False)
    taxonomy: TaxonomyEnum = Field(..., nullable=False)
    parent_id: int = Field(default=0, nullable=False)


class Image(SQLModel, table=True):
    __tablename__ = "images"
    id: Optional[int] = Field(default=None, primary_key=True)
    alt: str = Field(default="", nullable=False)


class ImageRendition(SQLModel, table=True):
    """One stored size of an image; position orders renditions, the full size last"""
    __tablename__ = "image_renditions"
    id: Optional[int] = Field(default=None, primary_key=True)
    image_id: int = Field(..., foreign_key="images.id", index=True, nullable=False)
    name: str = Field(..., sa_column=Column(String(32), nullable=False))
    url: str = Field(..., sa_column=Column(Text, nullable=False))
    width: int = Field(..., nullable=False)
    height: int = Field(..., nullable=False)
    position: int = Field(default=0, nullable=False)
    attrs: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))


class Post(SQLModel, table=True):
    """A content item; published_at is stored as naive UTC"""
    __tablename__ = "posts"
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    slug: str = Field(..., index=True, unique=True, nullable=False)
    status: str = Field(default="publish", index=True, nullable=False)
    published_at: datetime = Field(..., sa_column=Column(DateTime(timezone=False), nullable=False))
    author_id: int = Field(..., foreign_key="authors.id", nullable=False)
    content: str = Field(default="", sa_column=Column(Text, nullable=False))
    excerpt: str = Field(default="", sa_column=Column(Text, nullable=False))
    comment_count: int = Field(default=0, nullable=False)
    sticky: bool = Field(default=False, nullable=False)
    post_format: str = Field(default="standard", nullable=False)
    thumbnail_id: Optional[int] = Field(default=None, foreign_key="images.id", nullable=True)


class PostTerm(SQLModel, table=True):
    """Many-to-many relationship between posts and terms, in the post's own term order"""
    __tablename__ = "post_terms"
    post_id: int = Field(foreign_key="posts.id", primary_key=True)
    term_id: int = Field(foreign_key="terms.id", primary_key=True)
    position: int = Field(default=0, nullable=False)
