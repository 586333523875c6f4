"""Image source resolution with ancestor fallback.

Invariants:
- An item that carries its own image of a kind is always its own source.
- Ancestor chains are walked from the immediate parent outward; first match wins.
- Resolved item ids are rendered as lowercase hex without separators.
"""

from __future__ import annotations

from typing import Callable, Iterable

from searchhints.models.media import ImageKind, ItemCategory, LibraryItem

ItemPredicate = Callable[[LibraryItem], bool]


def find_ancestor(ancestors: Iterable[LibraryItem], predicate: ItemPredicate) -> LibraryItem | None:
    """Return the first ancestor satisfying ``predicate``."""
    for ancestor in ancestors:
        if predicate(ancestor):
            return ancestor
    return None


def has_image(kind: ImageKind) -> ItemPredicate:
    return lambda candidate: candidate.has_image(kind)


def is_series_with_image(kind: ImageKind) -> ItemPredicate:
    return lambda candidate: candidate.category is ItemCategory.SERIES and candidate.has_image(kind)


def resolve_thumb_source(item: LibraryItem, ancestors: Iterable[LibraryItem]) -> LibraryItem | None:
    """Pick the item whose thumbnail represents ``item``.

    Order: the item itself, then for episodes the nearest series ancestor with
    a thumb, then the nearest ancestor of any category with a thumb.
    """
    if item.has_image(ImageKind.THUMB):
        return item
    chain = list(ancestors)
    if item.category is ItemCategory.EPISODE:
        series = find_ancestor(chain, is_series_with_image(ImageKind.THUMB))
        if series is not None:
            return series
    return find_ancestor(chain, has_image(ImageKind.THUMB))


def resolve_backdrop_source(item: LibraryItem, ancestors: Iterable[LibraryItem]) -> LibraryItem | None:
    """Pick the item whose backdrop represents ``item``: itself, else nearest ancestor."""
    if item.has_image(ImageKind.BACKDROP):
        return item
    return find_ancestor(ancestors, has_image(ImageKind.BACKDROP))


def needs_ancestors(item: LibraryItem) -> bool:
    """Return True when thumb or backdrop resolution has to look above the item."""
    return not (item.has_image(ImageKind.THUMB) and item.has_image(ImageKind.BACKDROP))


def image_item_id(item: LibraryItem) -> str:
    return item.id.hex
