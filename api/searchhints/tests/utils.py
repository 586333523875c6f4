"""Shared helpers and collaborator fakes for tests."""

from __future__ import annotations

import asyncio
import uuid
from collections import Counter
from typing import Any

from searchhints.library.memory import InMemoryLibrary
from searchhints.models.media import ImageKind, ItemCategory, LibraryItem, SearchHintInfo
from searchhints.schema.search import SearchQuery


def make_item(
    name: str,
    category: ItemCategory = ItemCategory.MOVIE,
    *,
    parent: LibraryItem | None = None,
    images: tuple[ImageKind, ...] = (),
    **fields: Any,
) -> LibraryItem:
    return LibraryItem(
        id=fields.pop("id", None) or uuid.uuid4(),
        name=name,
        category=category,
        parent_id=parent.id if parent else None,
        image_kinds=frozenset(images),
        **fields,
    )


def build_library(*items: LibraryItem, aspect_ratios: dict[uuid.UUID, float] | None = None) -> InMemoryLibrary:
    """Register items with a ``<name>-<kind>`` tag for every image they carry."""
    library = InMemoryLibrary()
    for item in items:
        library.add(
            item,
            image_tags={kind: f"{item.name.lower().replace(' ', '-')}-{kind.value.lower()}" for kind in item.image_kinds},
            aspect_ratio=(aspect_ratios or {}).get(item.id),
        )
    return library


class RecordingLibrary(InMemoryLibrary):
    """In-memory library that counts collaborator calls."""

    def __init__(self, source: InMemoryLibrary) -> None:
        super().__init__(
            items=source.items,
            order=source.order,
            image_tags=source.image_tags,
            aspect_ratios=source.aspect_ratios,
            attributes=source.attributes,
        )
        self.calls: Counter[str] = Counter()

    async def search(self, query: SearchQuery) -> tuple[list[SearchHintInfo], int]:
        self.calls["search"] += 1
        return await super().search(query)

    async def tag(self, item: LibraryItem, kind: ImageKind) -> str | None:
        self.calls[f"tag:{kind.value}"] += 1
        return await super().tag(item, kind)

    async def primary_aspect_ratio(self, item: LibraryItem) -> float | None:
        self.calls["primary_aspect_ratio"] += 1
        return await super().primary_aspect_ratio(item)

    async def ancestors_of(self, item: LibraryItem) -> list[LibraryItem]:
        self.calls["ancestors_of"] += 1
        return await super().ancestors_of(item)

    async def by_id(self, item_id: uuid.UUID) -> LibraryItem | None:
        self.calls["by_id"] += 1
        return await super().by_id(item_id)


class StaticIndex:
    """Search index that returns a fixed ranking regardless of the query."""

    def __init__(self, items: list[LibraryItem], total: int | None = None) -> None:
        self.items = items
        self.total = len(items) if total is None else total
        self.queries: list[SearchQuery] = []

    async def search(self, query: SearchQuery) -> tuple[list[SearchHintInfo], int]:
        self.queries.append(query)
        return [SearchHintInfo(item=item, matched_term=query.search_term) for item in self.items], self.total


class FailingIndex:
    def __init__(self) -> None:
        self.calls = 0

    async def search(self, query: SearchQuery) -> tuple[list[SearchHintInfo], int]:
        self.calls += 1
        raise RuntimeError("index offline")


class FailingImageCache:
    async def tag(self, item: LibraryItem, kind: ImageKind) -> str | None:
        raise RuntimeError("image cache offline")

    async def primary_aspect_ratio(self, item: LibraryItem) -> float | None:
        raise AssertionError("aspect ratio should not be requested without a primary tag")


class PartiallyFailingImageCache:
    """Raises for the given items and delegates the rest to a library."""

    def __init__(self, library: InMemoryLibrary, failing: set[uuid.UUID]) -> None:
        self.library = library
        self.failing = failing

    async def tag(self, item: LibraryItem, kind: ImageKind) -> str | None:
        if item.id in self.failing:
            raise RuntimeError(f"image cache error for {item.name}")
        return await self.library.tag(item, kind)

    async def primary_aspect_ratio(self, item: LibraryItem) -> float | None:
        return await self.library.primary_aspect_ratio(item)


class SlowImageCache:
    """Delegates to a library after a per-item delay."""

    def __init__(self, library: InMemoryLibrary, delays: dict[uuid.UUID, float]) -> None:
        self.library = library
        self.delays = delays

    async def tag(self, item: LibraryItem, kind: ImageKind) -> str | None:
        await asyncio.sleep(self.delays.get(item.id, 0.0))
        return await self.library.tag(item, kind)

    async def primary_aspect_ratio(self, item: LibraryItem) -> float | None:
        return await self.library.primary_aspect_ratio(item)
