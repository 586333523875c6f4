"""In-memory library implementing the search index, image cache and item store.

Matching is a case-insensitive substring filter in catalog order; there is no
ranking. Intended for local development, demos and tests.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from searchhints.library.catalog import CatalogItem, CatalogManifest
from searchhints.models.media import (
    AlbumDetails,
    ImageKind,
    ItemCategory,
    ItemDetails,
    LibraryItem,
    ProgramDetails,
    SearchHintInfo,
    SeriesDetails,
    SeriesLink,
    SongDetails,
)
from searchhints.schema.search import SearchQuery

logger = logging.getLogger("searchhints.library")

# Include flags select category groups; everything not listed is "media".
_FLAG_CATEGORIES: dict[str, frozenset[ItemCategory]] = {
    "include_people": frozenset({ItemCategory.PERSON}),
    "include_genres": frozenset({ItemCategory.GENRE, ItemCategory.MUSIC_GENRE}),
    "include_studios": frozenset({ItemCategory.STUDIO}),
    "include_artists": frozenset({ItemCategory.MUSIC_ARTIST}),
}

_ATTRIBUTE_FLAGS = {
    "is_movie": "movie",
    "is_series": "series",
    "is_news": "news",
    "is_kids": "kids",
    "is_sports": "sports",
}


def catalog_item_id(library: str, key: str) -> uuid.UUID:
    """Deterministic id for catalog items without an explicit one."""
    return uuid.uuid5(uuid.NAMESPACE_URL, f"searchhints:{library}:{key}")


def _details_for(entry: CatalogItem, album: LibraryItem | None) -> ItemDetails | None:
    category = entry.category
    if category in (ItemCategory.EPISODE, ItemCategory.SEASON):
        return SeriesLink(series_name=entry.series_name)
    if category is ItemCategory.PROGRAM:
        return ProgramDetails(start_date=entry.start_date)
    if category is ItemCategory.SERIES:
        return SeriesDetails(status=entry.status)
    if category is ItemCategory.MUSIC_ALBUM:
        return AlbumDetails(artists=tuple(entry.artists), album_artist=entry.album_artist)
    if category is ItemCategory.AUDIO:
        return SongDetails(
            artists=tuple(entry.artists),
            album_artists=tuple(entry.album_artists),
            album=entry.album,
            album_entity=album,
        )
    return None


@dataclass
class InMemoryLibrary:
    """Library items held in process memory."""

    items: dict[uuid.UUID, LibraryItem] = field(default_factory=dict)
    order: list[uuid.UUID] = field(default_factory=list)
    image_tags: dict[uuid.UUID, dict[ImageKind, str]] = field(default_factory=dict)
    aspect_ratios: dict[uuid.UUID, float] = field(default_factory=dict)
    attributes: dict[uuid.UUID, frozenset[str]] = field(default_factory=dict)

    @classmethod
    def from_manifest(cls, manifest: CatalogManifest) -> "InMemoryLibrary":
        library = cls()
        ids = {
            entry.key: entry.id or catalog_item_id(manifest.library, entry.key) for entry in manifest.items
        }
        built: dict[str, LibraryItem] = {}
        # Songs reference album items, so albums and everything else are built first.
        for entry in sorted(manifest.items, key=lambda e: e.category is ItemCategory.AUDIO):
            album = built.get(entry.album_key) if entry.album_key else None
            built[entry.key] = LibraryItem(
                id=ids[entry.key],
                name=entry.name,
                category=entry.category,
                media_type=entry.media_type,
                parent_id=ids[entry.parent] if entry.parent else None,
                index_number=entry.index_number,
                parent_index_number=entry.parent_index_number,
                run_time_ticks=entry.run_time_ticks,
                production_year=entry.production_year,
                end_date=entry.end_date,
                channel_id=ids[entry.channel] if entry.channel else None,
                image_kinds=frozenset(entry.images),
                details=_details_for(entry, album),
            )
        for entry in manifest.items:
            item = built[entry.key]
            library.add(
                item,
                image_tags={kind: image.tag for kind, image in entry.images.items()},
                aspect_ratio=entry.images[ImageKind.PRIMARY].aspect_ratio
                if ImageKind.PRIMARY in entry.images
                else None,
                attributes=frozenset(entry.attributes),
            )
        logger.info("Loaded %d items from library catalog %s", len(library.items), manifest.library)
        return library

    def add(
        self,
        item: LibraryItem,
        *,
        image_tags: dict[ImageKind, str] | None = None,
        aspect_ratio: float | None = None,
        attributes: frozenset[str] = frozenset(),
    ) -> LibraryItem:
        if item.id not in self.items:
            self.order.append(item.id)
        self.items[item.id] = item
        self.image_tags[item.id] = dict(image_tags or {})
        if aspect_ratio is not None:
            self.aspect_ratios[item.id] = aspect_ratio
        self.attributes[item.id] = attributes
        return item

    # ItemStore

    async def ancestors_of(self, item: LibraryItem) -> list[LibraryItem]:
        return self._ancestors(item)

    async def by_id(self, item_id: uuid.UUID) -> LibraryItem | None:
        return self.items.get(item_id)

    def _ancestors(self, item: LibraryItem) -> list[LibraryItem]:
        chain: list[LibraryItem] = []
        seen = {item.id}
        parent_id = item.parent_id
        while parent_id is not None and parent_id not in seen:
            parent = self.items.get(parent_id)
            if parent is None:
                break
            chain.append(parent)
            seen.add(parent_id)
            parent_id = parent.parent_id
        return chain

    # ImageCache

    async def tag(self, item: LibraryItem, kind: ImageKind) -> str | None:
        return self.image_tags.get(item.id, {}).get(kind)

    async def primary_aspect_ratio(self, item: LibraryItem) -> float | None:
        return self.aspect_ratios.get(item.id)

    # SearchIndex

    async def search(self, query: SearchQuery) -> tuple[list[SearchHintInfo], int]:
        term = query.search_term.strip()
        needle = term.casefold()
        matches = [
            SearchHintInfo(item=item, matched_term=term)
            for item in (self.items[item_id] for item_id in self.order)
            if needle in item.name.casefold() and self._passes_filters(item, query)
        ]
        total = len(matches)
        start = query.start_index or 0
        end = None if query.limit is None else start + query.limit
        return matches[start:end], total

    def _passes_filters(self, item: LibraryItem, query: SearchQuery) -> bool:
        category = item.category.value.casefold()
        if query.include_item_types:
            if category not in {name.casefold() for name in query.include_item_types}:
                return False
        elif not self._category_enabled(item.category, query):
            return False
        if category in {name.casefold() for name in query.exclude_item_types}:
            return False
        if query.media_types:
            media_type = (item.media_type or "").casefold()
            if media_type not in {name.casefold() for name in query.media_types}:
                return False
        if query.parent_id is not None:
            if query.parent_id not in {ancestor.id for ancestor in self._ancestors(item)}:
                return False
        attributes = self.attributes.get(item.id, frozenset())
        for flag, attribute in _ATTRIBUTE_FLAGS.items():
            wanted = getattr(query, flag)
            if wanted is not None and (attribute in attributes) != wanted:
                return False
        return True

    @staticmethod
    def _category_enabled(category: ItemCategory, query: SearchQuery) -> bool:
        """Apply include_* flags; with none set every category is searchable."""
        enabled = {flag for flag in (*_FLAG_CATEGORIES, "include_media") if getattr(query, flag)}
        if not enabled:
            return True
        for flag, categories in _FLAG_CATEGORIES.items():
            if category in categories:
                return flag in enabled
        return "include_media" in enabled
