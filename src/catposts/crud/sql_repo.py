from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from catposts.core.errors import RepositoryError
from catposts.core.models import (
    Author, ContentItem, Image, ImageRendition, QuerySpec, SortField, SortOrder, Term,
)
from catposts.crud import tables
from catposts.crud.repo import DEFAULT_STATUSES, ContentRepository, parse_bound


logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    SortField.date: tables.Post.published_at,
    SortField.title: tables.Post.title,
    SortField.comment_count: tables.Post.comment_count,
}


def _naive_utc(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


class SQLRepo(ContentRepository):
    """ContentRepository backed by the sqlmodel tables."""

    def __init__(self, session: Session, site_url: str = "http://localhost"):
        self.session = session
        self.base = site_url.rstrip("/")

    # --- urls ---

    def _term_url(self, row: tables.Term) -> str:
        prefix = "category" if row.taxonomy == tables.TaxonomyEnum.category else "tag"
        return f"{self.base}/{prefix}/{row.slug}/"

    def _to_term(self, row: tables.Term) -> Term:
        return Term(id=row.id, name=row.name, slug=row.slug, url=self._term_url(row), parent_id=row.parent_id)

    # --- lookups ---

    def get_category(self, category_id: int) -> Term | None:
        try:
            row = self.session.get(tables.Term, category_id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Category lookup failed: {e}") from e
        if row is None or row.taxonomy != tables.TaxonomyEnum.category:
            return None
        return self._to_term(row)

    def get_image(self, image_id: int) -> Image | None:
        try:
            return self._load_image(image_id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Image lookup failed: {e}") from e

    def _load_image(self, image_id: int | None) -> Image | None:
        if not image_id:
            return None
        row = self.session.get(tables.Image, image_id)
        if row is None:
            return None
        renditions = self.session.exec(
            select(tables.ImageRendition)
            .where(tables.ImageRendition.image_id == image_id)
            .order_by(tables.ImageRendition.position.asc())
        ).all()
        if not renditions:
            return None
        return Image(
            id=row.id,
            alt=row.alt,
            renditions=tuple(
                ImageRendition(name=r.name, url=r.url, width=r.width, height=r.height, attrs=r.attrs or {})
                for r in renditions
            ),
        )

    def _terms(self, post_id: int) -> list[tables.Term]:
        return list(self.session.exec(
            select(tables.Term)
            .join(tables.PostTerm, tables.PostTerm.term_id == tables.Term.id)
            .where(tables.PostTerm.post_id == post_id)
            .order_by(tables.PostTerm.position.asc())
        ).all())

    def _to_item(self, row: tables.Post) -> ContentItem:
        author = self.session.get(tables.Author, row.author_id)
        terms = self._terms(row.id)
        permalink = f"{self.base}/{row.slug}/"
        return ContentItem(
            id=row.id,
            title=row.title,
            slug=row.slug,
            permalink=permalink,
            published=row.published_at.replace(tzinfo=timezone.utc),
            author=Author(
                id=author.id, name=author.name, url=f"{self.base}/author/{author.slug}/",
            ) if author else Author(name=""),
            content=row.content,
            excerpt=row.excerpt,
            thumbnail=self._load_image(row.thumbnail_id),
            categories=tuple(self._to_term(t) for t in terms if t.taxonomy == tables.TaxonomyEnum.category),
            tags=tuple(self._to_term(t) for t in terms if t.taxonomy == tables.TaxonomyEnum.post_tag),
            comment_count=row.comment_count,
            comments_url=f"{permalink}#comments",
            sticky=row.sticky,
            status=row.status,
            post_format=row.post_format,
        )

    # --- queries ---

    def _category_ids(self, spec: QuerySpec) -> set[int]:
        ids = {spec.category_id}
        if not spec.include_children:
            return ids
        rows = self.session.exec(
            select(tables.Term.id, tables.Term.parent_id)
            .where(tables.Term.taxonomy == tables.TaxonomyEnum.category)
        ).all()
        grew = True
        while grew:
            children = {tid for tid, parent in rows if parent in ids}
            grew = not children <= ids
            ids |= children
        return ids

    def _conditions(self, spec: QuerySpec) -> list:
        """WHERE clauses shared by fetch and count."""
        Post = tables.Post
        conds = [Post.status.in_(spec.statuses or DEFAULT_STATUSES)]
        if spec.exclude_ids:
            conds.append(Post.id.not_in(spec.exclude_ids))
        if spec.require_thumbnail:
            conds.append(Post.thumbnail_id.is_not(None))
        if spec.category_id:
            conds.append(Post.id.in_(
                select(tables.PostTerm.post_id)
                .where(tables.PostTerm.term_id.in_(self._category_ids(spec)))
            ))
        after = parse_bound(spec.date_after)
        before = parse_bound(spec.date_before, end_of_day=True)
        if after:
            conds.append(Post.published_at >= _naive_utc(after))
        if before:
            conds.append(Post.published_at <= _naive_utc(before))
        return conds

    def _ordered(self, stmt, spec: QuerySpec):
        if spec.order_by == SortField.rand:
            return stmt.order_by(func.random())
        column = _SORT_COLUMNS[spec.order_by]
        if spec.order == SortOrder.asc:
            return stmt.order_by(column.asc(), tables.Post.id.asc())
        return stmt.order_by(column.desc(), tables.Post.id.desc())

    def _select(self, spec: QuerySpec, sticky: bool | None = None, paged: bool = True):
        stmt = select(tables.Post).where(*self._conditions(spec))
        if sticky is not None:
            stmt = stmt.where(tables.Post.sticky == sticky)
        stmt = self._ordered(stmt, spec)
        if paged:
            if spec.offset:
                stmt = stmt.offset(spec.offset)
            if spec.limit is not None:
                stmt = stmt.limit(spec.limit)
        return stmt

    def fetch(self, spec: QuerySpec) -> list[ContentItem]:
        try:
            if spec.ignore_sticky:
                rows = list(self.session.exec(self._select(spec)).all())
            else:
                rows = list(self.session.exec(self._select(spec, sticky=False)).all())
                if spec.offset == 0:
                    stuck = self.session.exec(self._select(spec, sticky=True, paged=False)).all()
                    rows = list(stuck) + rows
            return [self._to_item(r) for r in rows]
        except SQLAlchemyError as e:
            logger.error("Fetch failed for %s: %s", spec, e)
            raise RepositoryError(f"Fetch failed: {e}") from e

    def count(self, spec: QuerySpec) -> int:
        try:
            stmt = select(func.count(tables.Post.id)).where(*self._conditions(spec))
            return int(self.session.exec(stmt).one())
        except SQLAlchemyError as e:
            logger.error("Count failed for %s: %s", spec, e)
            raise RepositoryError(f"Count failed: {e}") from e
