from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from searchhints.api.deps import get_image_cache, get_item_store, get_monitor, get_search_index
from searchhints.core.config import settings
from searchhints.schema.search import SearchHintResult
from searchhints.services import hint_service, query_service
from searchhints.services.collaborators import ImageCache, ItemStore, SearchIndex
from searchhints.services.observability import CollaboratorMonitor

router = APIRouter()


@router.get("/hints", response_model=SearchHintResult, response_model_exclude_none=True)
async def get_search_hints(
    search_term: str | None = Query(default=None, alias="searchTerm"),
    start_index: int | None = Query(default=None, alias="startIndex", ge=0),
    limit: int | None = Query(default=None, ge=0),
    user_id: UUID | None = Query(default=None, alias="userId"),
    parent_id: UUID | None = Query(default=None, alias="parentId"),
    include_item_types: str | None = Query(default=None, alias="includeItemTypes"),
    exclude_item_types: str | None = Query(default=None, alias="excludeItemTypes"),
    media_types: str | None = Query(default=None, alias="mediaTypes"),
    include_people: bool = Query(default=False, alias="includePeople"),
    include_media: bool = Query(default=False, alias="includeMedia"),
    include_genres: bool = Query(default=False, alias="includeGenres"),
    include_studios: bool = Query(default=False, alias="includeStudios"),
    include_artists: bool = Query(default=False, alias="includeArtists"),
    is_movie: bool | None = Query(default=None, alias="isMovie"),
    is_series: bool | None = Query(default=None, alias="isSeries"),
    is_news: bool | None = Query(default=None, alias="isNews"),
    is_kids: bool | None = Query(default=None, alias="isKids"),
    is_sports: bool | None = Query(default=None, alias="isSports"),
    search_index: SearchIndex = Depends(get_search_index),
    image_cache: ImageCache = Depends(get_image_cache),
    item_store: ItemStore = Depends(get_item_store),
    monitor: CollaboratorMonitor = Depends(get_monitor),
) -> SearchHintResult:
    """Search the library and return enriched hints for the requested page."""
    try:
        query = query_service.build_search_query(
            search_term,
            start_index=start_index,
            limit=limit,
            user_id=user_id,
            parent_id=parent_id,
            include_item_types=include_item_types,
            exclude_item_types=exclude_item_types,
            media_types=media_types,
            include_people=include_people,
            include_media=include_media,
            include_genres=include_genres,
            include_studios=include_studios,
            include_artists=include_artists,
            is_movie=is_movie,
            is_series=is_series,
            is_news=is_news,
            is_kids=is_kids,
            is_sports=is_sports,
        )
    except query_service.InvalidSearchQueryError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    try:
        return await hint_service.get_search_hints(
            query,
            search_index=search_index,
            image_cache=image_cache,
            item_store=item_store,
            monitor=monitor,
            concurrency=settings.hint_enrichment_concurrency,
            timeout=settings.collaborator_timeout_seconds,
        )
    except hint_service.SearchIndexUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search index unavailable",
        ) from exc
