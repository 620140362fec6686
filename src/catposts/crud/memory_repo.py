import random
from dataclasses import dataclass, field

from catposts.core.models import ContentItem, Image, QuerySpec, SortField, SortOrder, Term
from catposts.crud.repo import DEFAULT_STATUSES, ContentRepository, parse_bound


@dataclass
class MemoryRepo(ContentRepository):
    """In-process repository over a list of items, categories and images."""
    items: list[ContentItem] = field(default_factory=list)
    categories: dict[int, Term] = field(default_factory=dict)
    images: dict[int, Image] = field(default_factory=dict)
    seed: int | None = None

    def add(self, item: ContentItem) -> ContentItem:
        self.items.append(item)
        for term in item.categories:
            self.categories.setdefault(term.id, term)
        return item

    def get_category(self, category_id: int) -> Term | None:
        return self.categories.get(category_id)

    def get_image(self, image_id: int) -> Image | None:
        return self.images.get(image_id)

    def _category_ids(self, spec: QuerySpec) -> set[int]:
        """The filter category plus, unless exact matching is requested, all descendants."""
        ids = {spec.category_id}
        if not spec.include_children:
            return ids
        grew = True
        while grew:
            children = {t.id for t in self.categories.values() if t.parent_id in ids}
            grew = not children <= ids
            ids |= children
        return ids

    def _matches(self, item: ContentItem, spec: QuerySpec, cats: set[int] | None) -> bool:
        if item.status not in (spec.statuses or DEFAULT_STATUSES):
            return False
        if item.id in spec.exclude_ids:
            return False
        if spec.require_thumbnail and item.thumbnail is None:
            return False
        if cats is not None and not cats & {t.id for t in item.categories}:
            return False
        after = parse_bound(spec.date_after)
        before = parse_bound(spec.date_before, end_of_day=True)
        if after and item.published < after:
            return False
        if before and item.published > before:
            return False
        return True

    def _ordered(self, items: list[ContentItem], spec: QuerySpec) -> list[ContentItem]:
        if spec.order_by == SortField.rand:
            shuffled = list(items)
            random.Random(self.seed).shuffle(shuffled)
            return shuffled
        key = {
            SortField.date: lambda i: (i.published, i.id),
            SortField.title: lambda i: (i.title.lower(), i.id),
            SortField.comment_count: lambda i: (i.comment_count, i.id),
        }[spec.order_by]
        return sorted(items, key=key, reverse=spec.order == SortOrder.desc)

    def _matching(self, spec: QuerySpec) -> list[ContentItem]:
        cats = self._category_ids(spec) if spec.category_id else None
        return [i for i in self.items if self._matches(i, spec, cats)]

    def fetch(self, spec: QuerySpec) -> list[ContentItem]:
        matching = self._ordered(self._matching(spec), spec)
        if spec.ignore_sticky:
            return _page(matching, spec)
        sticky = [i for i in matching if i.sticky]
        normal = [i for i in matching if not i.sticky]
        page = _page(normal, spec)
        return (sticky + page) if spec.offset == 0 else page

    def count(self, spec: QuerySpec) -> int:
        return len(self._matching(spec))


def _page(items: list[ContentItem], spec: QuerySpec) -> list[ContentItem]:
    end = None if spec.limit is None else spec.offset + spec.limit
    return items[spec.offset:end]
