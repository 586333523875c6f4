"""Schema validation for YAML library catalogs used by the in-memory library."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Iterable
from uuid import UUID

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from searchhints.models.media import ImageKind, ItemCategory, SeriesStatus

_SERIES_BEARING = {ItemCategory.EPISODE, ItemCategory.SEASON}

# Category-specific catalog fields and the categories allowed to carry them.
_CATEGORY_FIELDS: dict[str, set[ItemCategory]] = {
    "series_name": _SERIES_BEARING,
    "start_date": {ItemCategory.PROGRAM},
    "status": {ItemCategory.SERIES},
    "album_artist": {ItemCategory.MUSIC_ALBUM},
    "artists": {ItemCategory.MUSIC_ALBUM, ItemCategory.AUDIO},
    "album_artists": {ItemCategory.AUDIO},
    "album": {ItemCategory.AUDIO},
    "album_key": {ItemCategory.AUDIO},
}

SEARCH_ATTRIBUTES = {"movie", "series", "news", "kids", "sports"}


class CatalogImage(BaseModel):
    """Cache tag and optional aspect ratio for one image kind."""

    tag: str
    aspect_ratio: float | None = Field(default=None, gt=0)

    model_config = {"extra": "forbid"}


class CatalogItem(BaseModel):
    """One library item entry."""

    key: str
    id: UUID | None = None
    name: str
    category: ItemCategory
    media_type: str | None = None
    parent: str | None = None
    channel: str | None = None
    index_number: int | None = None
    parent_index_number: int | None = None
    run_time_ticks: int | None = Field(default=None, ge=0)
    production_year: int | None = None
    end_date: datetime | None = None
    images: dict[ImageKind, CatalogImage] = Field(default_factory=dict)
    attributes: list[str] = Field(default_factory=list)

    series_name: str | None = None
    start_date: datetime | None = None
    status: SeriesStatus | None = None
    album_artist: str | None = None
    artists: list[str] = Field(default_factory=list)
    album_artists: list[str] = Field(default_factory=list)
    album: str | None = None
    album_key: str | None = None

    model_config = {"extra": "forbid"}

    @field_validator("key", "name")
    @classmethod
    def _validate_required_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be non-empty")
        return value

    @field_validator("attributes")
    @classmethod
    def _validate_attributes(cls, value: list[str]) -> list[str]:
        unknown = sorted(set(value) - SEARCH_ATTRIBUTES)
        if unknown:
            raise ValueError(f"unknown attributes: {', '.join(unknown)}")
        return value

    @model_validator(mode="after")
    def _validate_category_fields(self) -> "CatalogItem":
        for field_name, categories in _CATEGORY_FIELDS.items():
            if getattr(self, field_name) and self.category not in categories:
                raise ValueError(f"{field_name} is not valid for {self.category.value} items")
        return self


class CatalogManifest(BaseModel):
    """Top-level library catalog."""

    library: str
    items: list[CatalogItem] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @field_validator("library")
    @classmethod
    def _validate_library(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("library must be non-empty")
        return value

    @model_validator(mode="after")
    def _validate_references(self) -> "CatalogManifest":
        by_key: dict[str, CatalogItem] = {}
        for item in self.items:
            if item.key in by_key:
                raise ValueError(f"duplicate item key '{item.key}'")
            by_key[item.key] = item
        explicit_ids = [item.id for item in self.items if item.id is not None]
        if len(explicit_ids) != len(set(explicit_ids)):
            raise ValueError("duplicate item ids")

        for item in self.items:
            if item.parent is not None and item.parent not in by_key:
                raise ValueError(f"{item.key}: unknown parent '{item.parent}'")
            if item.channel is not None and item.channel not in by_key:
                raise ValueError(f"{item.key}: unknown channel '{item.channel}'")
            if item.album_key is not None:
                album = by_key.get(item.album_key)
                if album is None or album.category is not ItemCategory.MUSIC_ALBUM:
                    raise ValueError(f"{item.key}: album_key '{item.album_key}' is not a MusicAlbum")

        for item in self.items:
            seen = {item.key}
            parent = item.parent
            while parent is not None:
                if parent in seen:
                    raise ValueError(f"{item.key}: parent chain contains a cycle")
                seen.add(parent)
                parent = by_key[parent].parent
        return self


def parse_catalog(data: Any) -> CatalogManifest:
    if not isinstance(data, dict):
        raise ValueError("library catalog must be a YAML mapping")
    return CatalogManifest.model_validate(data)


def load_catalog(path: Path) -> CatalogManifest:
    """Load and validate a library catalog from YAML."""
    return parse_catalog(yaml.safe_load(path.read_text(encoding="utf-8")))


def validate_catalog_file(path: Path) -> list[str]:
    """Validate a single catalog file and return any errors."""
    try:
        load_catalog(path)
    except (ValidationError, ValueError, yaml.YAMLError) as exc:
        return [f"{path}: {exc}"]
    return []


def validate_catalog_paths(paths: Iterable[Path]) -> list[str]:
    errors: list[str] = []
    for path in paths:
        errors.extend(validate_catalog_file(path))
    return errors
