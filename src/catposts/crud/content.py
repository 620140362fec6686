"""Content persistence: upsert authors, terms, images and posts from a loaded mapping"""

from datetime import datetime, timezone

from sqlmodel import Session, select

from catposts.crud.tables import (
    Author, Image, ImageRendition, Post, PostTerm, TaxonomyEnum, Term,
)


def _as_datetime(value) -> datetime:
    """Accept datetimes or ISO strings; aware values are normalized to naive UTC."""
    dt = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if dt.tzinfo:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _upsert(session: Session, model, row_id: int, fields: dict) -> str:
    """Insert or update one row by primary key. Returns 'created', 'updated' or 'unchanged'."""
    row = session.get(model, row_id)
    if row is None:
        session.add(model(id=row_id, **fields))
        return "created"
    if all(getattr(row, k) == v for k, v in fields.items()):
        return "unchanged"
    for k, v in fields.items():
        setattr(row, k, v)
    session.add(row)
    return "updated"


def _replace_renditions(session: Session, image_id: int, renditions: list[dict]) -> None:
    for row in session.exec(select(ImageRendition).where(ImageRendition.image_id == image_id)).all():
        session.delete(row)
    session.flush()
    for position, r in enumerate(renditions):
        session.add(ImageRendition(
            image_id=image_id,
            name=r.get("name", "full"),
            url=r["url"],
            width=int(r["width"]),
            height=int(r["height"]),
            position=position,
            attrs=r.get("attrs") or None,
        ))


def _replace_terms(session: Session, post_id: int, term_ids: list[int]) -> None:
    """Delete a post's term links and insert the new ones in the given order."""
    for row in session.exec(select(PostTerm).where(PostTerm.post_id == post_id)).all():
        session.delete(row)
    session.flush()
    for position, term_id in enumerate(term_ids):
        session.add(PostTerm(post_id=post_id, term_id=term_id, position=position))


def load_content(session: Session, data: dict) -> dict[str, int]:
    """Upsert every record in data and return per-status post counts.

    data holds 'authors', 'categories', 'tags', 'images' and 'posts' lists.
    Flushes but does not commit; caller controls the transaction.
    """
    for a in data.get("authors", []):
        _upsert(session, Author, a["id"], {"name": a["name"], "slug": a.get("slug") or str(a["id"])})

    for taxonomy, key in ((TaxonomyEnum.category, "categories"), (TaxonomyEnum.post_tag, "tags")):
        for t in data.get(key, []):
            _upsert(session, Term, t["id"], {
                "name": t["name"],
                "slug": t.get("slug") or str(t["id"]),
                "taxonomy": taxonomy,
                "parent_id": int(t.get("parent", 0)),
            })

    for img in data.get("images", []):
        _upsert(session, Image, img["id"], {"alt": img.get("alt", "")})
        session.flush()
        _replace_renditions(session, img["id"], img.get("renditions", []))
    session.flush()

    counts = {"created": 0, "updated": 0, "unchanged": 0}
    for p in data.get("posts", []):
        status = _upsert(session, Post, p["id"], {
            "title": p["title"],
            "slug": p.get("slug") or str(p["id"]),
            "status": p.get("status", "publish"),
            "published_at": _as_datetime(p["published"]),
            "author_id": p["author"],
            "content": p.get("content", ""),
            "excerpt": p.get("excerpt", ""),
            "comment_count": int(p.get("comment_count", 0)),
            "sticky": bool(p.get("sticky", False)),
            "post_format": p.get("format", "standard"),
            "thumbnail_id": p.get("thumbnail"),
        })
        session.flush()
        _replace_terms(session, p["id"], list(p.get("categories", [])) + list(p.get("tags", [])))
        counts[status] += 1

    session.flush()
    return counts
