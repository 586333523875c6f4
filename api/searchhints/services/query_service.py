"""Normalize raw search filter inputs into a SearchQuery."""

from __future__ import annotations

from uuid import UUID

from searchhints.schema.search import SearchQuery


class InvalidSearchQueryError(ValueError):
    """Raised when the raw inputs cannot form a search query."""


def split_delimited(value: str | None, separator: str = ",") -> list[str]:
    """Split a delimited string, trimming segments and dropping empty ones.

    Case is preserved; matching rules belong to the index.
    """
    if not value:
        return []
    return [segment.strip() for segment in value.split(separator) if segment.strip()]


def build_search_query(
    search_term: str | None,
    *,
    start_index: int | None = None,
    limit: int | None = None,
    user_id: UUID | None = None,
    parent_id: UUID | None = None,
    include_item_types: str | None = None,
    exclude_item_types: str | None = None,
    media_types: str | None = None,
    include_people: bool = False,
    include_media: bool = False,
    include_genres: bool = False,
    include_studios: bool = False,
    include_artists: bool = False,
    is_movie: bool | None = None,
    is_series: bool | None = None,
    is_news: bool | None = None,
    is_kids: bool | None = None,
    is_sports: bool | None = None,
) -> SearchQuery:
    """Build a validated query; tri-state flags and bounds pass through untouched."""
    if search_term is None or not search_term.strip():
        raise InvalidSearchQueryError("searchTerm is required")
    if start_index is not None and start_index < 0:
        raise InvalidSearchQueryError("startIndex must be non-negative")
    if limit is not None and limit < 0:
        raise InvalidSearchQueryError("limit must be non-negative")

    return SearchQuery(
        search_term=search_term,
        start_index=start_index,
        limit=limit,
        user_id=user_id,
        parent_id=parent_id,
        include_item_types=split_delimited(include_item_types),
        exclude_item_types=split_delimited(exclude_item_types),
        media_types=split_delimited(media_types),
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
