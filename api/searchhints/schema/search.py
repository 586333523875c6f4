"""Search query and search hint response schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class SearchQuery(BaseModel):
    """Normalized query handed to the search index."""

    search_term: str
    start_index: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=0)
    user_id: UUID | None = None
    parent_id: UUID | None = None

    include_item_types: list[str] = Field(default_factory=list)
    exclude_item_types: list[str] = Field(default_factory=list)
    media_types: list[str] = Field(default_factory=list)

    include_people: bool = False
    include_media: bool = False
    include_genres: bool = False
    include_studios: bool = False
    include_artists: bool = False

    is_movie: bool | None = None
    is_series: bool | None = None
    is_news: bool | None = None
    is_kids: bool | None = None
    is_sports: bool | None = None

    model_config = {"frozen": True}

    @field_validator("search_term")
    @classmethod
    def _validate_search_term(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("search_term must be non-empty")
        return value


class SearchHint(BaseModel):
    """Client-facing search hint; unset optional fields are omitted from responses."""

    id: UUID
    # Legacy alias kept for older clients; always equal to ``id``.
    item_id: UUID
    name: str
    type: str
    media_type: str | None = None
    matched_term: str | None = None

    index_number: int | None = None
    parent_index_number: int | None = None
    run_time_ticks: int | None = None
    production_year: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    primary_image_tag: str | None = None
    primary_image_aspect_ratio: float | None = None
    thumb_image_tag: str | None = None
    thumb_image_item_id: str | None = None
    backdrop_image_tag: str | None = None
    backdrop_image_item_id: str | None = None

    is_folder: bool | None = None
    # Omitted when the item has no channel, including the all-zero nil id.
    channel_id: UUID | None = None
    channel_name: str | None = None

    series: str | None = None
    status: str | None = None
    album: str | None = None
    album_id: UUID | None = None
    album_artist: str | None = None
    artists: list[str] | None = None


class SearchHintResult(BaseModel):
    """Page of search hints plus the index-reported total."""

    total_record_count: int
    search_hints: list[SearchHint]
