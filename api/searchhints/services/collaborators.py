"""Contracts for the external collaborators consumed by the hint layer."""

from __future__ import annotations

import uuid
from typing import Protocol

from searchhints.models.media import ImageKind, LibraryItem, SearchHintInfo
from searchhints.schema.search import SearchQuery


class SearchIndex(Protocol):
    """Term matching, ranking and pagination live behind this call."""

    async def search(self, query: SearchQuery) -> tuple[list[SearchHintInfo], int]:
        ...


class ImageCache(Protocol):
    async def tag(self, item: LibraryItem, kind: ImageKind) -> str | None:
        ...

    async def primary_aspect_ratio(self, item: LibraryItem) -> float | None:
        ...


class ItemStore(Protocol):
    async def ancestors_of(self, item: LibraryItem) -> list[LibraryItem]:
        """Return the ownership chain, immediate parent first."""
        ...

    async def by_id(self, item_id: uuid.UUID) -> LibraryItem | None:
        ...
