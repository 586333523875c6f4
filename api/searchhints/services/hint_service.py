"""Search hint enrichment: identity, images, category fields and channel names.

Invariants:
- Missing optional data (images, aspect ratio, ancestors, channel) leaves the
  field unset; collaborator failures are degraded per field, never raised.
- Hints are returned in the order the index ranked them.
- ``item_id`` always mirrors ``id``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from searchhints.models.media import (
    AlbumDetails,
    ImageKind,
    LibraryItem,
    ProgramDetails,
    SearchHintInfo,
    SeriesDetails,
    SeriesLink,
    SongDetails,
)
from searchhints.schema.search import SearchHint, SearchHintResult, SearchQuery
from searchhints.services import image_service
from searchhints.services.collaborators import ImageCache, ItemStore, SearchIndex
from searchhints.services.observability import CollaboratorMonitor

SEARCH_INDEX = "search_index"
IMAGE_CACHE = "image_cache"
ITEM_STORE = "item_store"

logger = logging.getLogger("searchhints.services.hints")


class SearchIndexUnavailableError(Exception):
    """Raised when the search index call fails or its circuit is open."""


def apply_category_fields(hint: SearchHint, item: LibraryItem) -> None:
    """Populate fields that only exist for some item categories."""
    details = item.details
    if isinstance(details, SeriesLink):
        hint.series = details.series_name
    elif isinstance(details, ProgramDetails):
        hint.start_date = details.start_date
    elif isinstance(details, SeriesDetails):
        if details.status is not None:
            hint.status = details.status.value
    elif isinstance(details, AlbumDetails):
        hint.artists = list(details.artists)
        hint.album_artist = details.album_artist
    elif isinstance(details, SongDetails):
        hint.album_artist = details.album_artists[0] if details.album_artists else None
        hint.artists = list(details.artists)
        if details.album_entity is not None:
            hint.album = details.album_entity.name
            hint.album_id = details.album_entity.id
        else:
            hint.album = details.album


def build_identity(info: SearchHintInfo) -> SearchHint:
    item = info.item
    hint = SearchHint(
        id=item.id,
        item_id=item.id,
        name=item.name,
        type=item.client_type_name,
        media_type=item.media_type,
        matched_term=info.matched_term,
        index_number=item.index_number,
        parent_index_number=item.parent_index_number,
        run_time_ticks=item.run_time_ticks,
        production_year=item.production_year,
        channel_id=item.channel_id if item.has_channel else None,
        end_date=item.end_date,
    )
    if item.is_folder:
        hint.is_folder = True
    return hint


@dataclass(slots=True)
class HintEnricher:
    """Map matched items to hints using the image cache and item store."""

    image_cache: ImageCache
    item_store: ItemStore
    monitor: CollaboratorMonitor
    timeout: float | None = None

    async def _call(
        self,
        provider: str,
        operation: str,
        func: Callable[[], Awaitable[Any]],
        item: LibraryItem,
        *,
        default: Any = None,
    ) -> Any:
        return await self.monitor.guard(
            provider,
            operation,
            func,
            default=default,
            timeout=self.timeout,
            context={"item_id": str(item.id)},
        )

    async def enrich(self, info: SearchHintInfo) -> SearchHint:
        item = info.item
        hint = build_identity(info)

        await self._apply_primary_image(hint, item)
        ancestors: list[LibraryItem] = []
        if image_service.needs_ancestors(item):
            ancestors = await self._call(
                ITEM_STORE, "ancestors_of", lambda: self.item_store.ancestors_of(item), item, default=[]
            )
        thumb = await self._image_reference(image_service.resolve_thumb_source(item, ancestors), ImageKind.THUMB)
        if thumb:
            hint.thumb_image_tag, hint.thumb_image_item_id = thumb
        backdrop = await self._image_reference(
            image_service.resolve_backdrop_source(item, ancestors), ImageKind.BACKDROP
        )
        if backdrop:
            hint.backdrop_image_tag, hint.backdrop_image_item_id = backdrop

        apply_category_fields(hint, item)
        await self._apply_channel_name(hint, item)
        return hint

    async def _apply_primary_image(self, hint: SearchHint, item: LibraryItem) -> None:
        tag = await self._call(IMAGE_CACHE, "tag", lambda: self.image_cache.tag(item, ImageKind.PRIMARY), item)
        if not tag:
            return
        hint.primary_image_tag = tag
        hint.primary_image_aspect_ratio = await self._call(
            IMAGE_CACHE, "primary_aspect_ratio", lambda: self.image_cache.primary_aspect_ratio(item), item
        )

    async def _image_reference(self, source: LibraryItem | None, kind: ImageKind) -> tuple[str, str] | None:
        """Return ``(tag, source item id)`` when the resolved source has a usable tag."""
        if source is None:
            return None
        tag = await self._call(IMAGE_CACHE, "tag", lambda: self.image_cache.tag(source, kind), source)
        if not tag:
            return None
        return tag, image_service.image_item_id(source)

    async def _apply_channel_name(self, hint: SearchHint, item: LibraryItem) -> None:
        if not item.has_channel:
            return
        channel_id = item.channel_id
        channel = await self._call(ITEM_STORE, "by_id", lambda: self.item_store.by_id(channel_id), item)
        if channel is not None:
            hint.channel_name = channel.name


async def get_search_hints(
    query: SearchQuery,
    *,
    search_index: SearchIndex,
    image_cache: ImageCache,
    item_store: ItemStore,
    monitor: CollaboratorMonitor,
    concurrency: int = 8,
    timeout: float | None = None,
) -> SearchHintResult:
    """Run the query against the index and enrich every matched item.

    Implementation notes:
    - Index failures and open circuits surface as ``SearchIndexUnavailableError``.
    - Enrichment fans out under a semaphore bounded by the page size.
    """
    try:
        items, total = await monitor.track(
            SEARCH_INDEX,
            "search",
            lambda: search_index.search(query),
            context={"search_term": query.search_term},
        )
    except Exception as exc:
        raise SearchIndexUnavailableError(str(exc)) from exc
    if query.limit is not None and len(items) > query.limit:
        logger.warning("Search index returned %d items for limit %d", len(items), query.limit)
    if not items:
        return SearchHintResult(total_record_count=total, search_hints=[])

    enricher = HintEnricher(image_cache=image_cache, item_store=item_store, monitor=monitor, timeout=timeout)
    semaphore = asyncio.Semaphore(max(1, min(len(items), concurrency)))

    async def _enrich_bounded(info: SearchHintInfo) -> SearchHint:
        async with semaphore:
            return await enricher.enrich(info)

    hints = await asyncio.gather(*(_enrich_bounded(info) for info in items))
    logger.info("Built %d search hints for %r (total=%d)", len(hints), query.search_term, total)
    return SearchHintResult(total_record_count=total, search_hints=list(hints))
