"""Library item models, category variants, and index match records."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeAlias

NIL_ID = uuid.UUID(int=0)


class ItemCategory(str, enum.Enum):
    """Concrete item categories; values are the client-facing type names."""
    MOVIE = "Movie"
    VIDEO = "Video"
    TRAILER = "Trailer"
    MUSIC_VIDEO = "MusicVideo"
    SERIES = "Series"
    SEASON = "Season"
    EPISODE = "Episode"
    MUSIC_ALBUM = "MusicAlbum"
    MUSIC_ARTIST = "MusicArtist"
    AUDIO = "Audio"
    AUDIO_BOOK = "AudioBook"
    BOOK = "Book"
    PHOTO = "Photo"
    PHOTO_ALBUM = "PhotoAlbum"
    PLAYLIST = "Playlist"
    BOX_SET = "BoxSet"
    FOLDER = "Folder"
    COLLECTION_FOLDER = "CollectionFolder"
    CHANNEL = "Channel"
    TV_CHANNEL = "TvChannel"
    PROGRAM = "Program"
    PERSON = "Person"
    GENRE = "Genre"
    MUSIC_GENRE = "MusicGenre"
    STUDIO = "Studio"


FOLDER_CATEGORIES = frozenset(
    {
        ItemCategory.SERIES,
        ItemCategory.SEASON,
        ItemCategory.MUSIC_ALBUM,
        ItemCategory.MUSIC_ARTIST,
        ItemCategory.PHOTO_ALBUM,
        ItemCategory.PLAYLIST,
        ItemCategory.BOX_SET,
        ItemCategory.FOLDER,
        ItemCategory.COLLECTION_FOLDER,
        ItemCategory.CHANNEL,
    }
)


class ImageKind(str, enum.Enum):
    """Artwork kinds attached to library items."""
    PRIMARY = "Primary"
    THUMB = "Thumb"
    BACKDROP = "Backdrop"


class SeriesStatus(str, enum.Enum):
    """Airing status reported for a series."""
    CONTINUING = "Continuing"
    ENDED = "Ended"
    UNRELEASED = "Unreleased"


@dataclass(frozen=True, slots=True)
class SeriesLink:
    """Details for items that belong to a series (episodes, seasons)."""
    series_name: str | None = None


@dataclass(frozen=True, slots=True)
class ProgramDetails:
    """Live TV program schedule details."""
    start_date: datetime | None = None


@dataclass(frozen=True, slots=True)
class SeriesDetails:
    """Series-level details."""
    status: SeriesStatus | None = None


@dataclass(frozen=True, slots=True)
class AlbumDetails:
    """Music album credits."""
    artists: tuple[str, ...] = ()
    album_artist: str | None = None


@dataclass(frozen=True, slots=True)
class SongDetails:
    """Song credits plus both the album entity reference and the free-text album tag."""
    artists: tuple[str, ...] = ()
    album_artists: tuple[str, ...] = ()
    album: str | None = None
    album_entity: LibraryItem | None = None


ItemDetails: TypeAlias = SeriesLink | ProgramDetails | SeriesDetails | AlbumDetails | SongDetails

# Each variant is only valid on the categories listed here.
DETAILS_BY_CATEGORY: dict[ItemCategory, type] = {
    ItemCategory.EPISODE: SeriesLink,
    ItemCategory.SEASON: SeriesLink,
    ItemCategory.PROGRAM: ProgramDetails,
    ItemCategory.SERIES: SeriesDetails,
    ItemCategory.MUSIC_ALBUM: AlbumDetails,
    ItemCategory.AUDIO: SongDetails,
}


@dataclass(slots=True)
class LibraryItem:
    """An item from the hierarchical item store."""
    id: uuid.UUID
    name: str
    category: ItemCategory
    media_type: str | None = None
    parent_id: uuid.UUID | None = None
    index_number: int | None = None
    parent_index_number: int | None = None
    run_time_ticks: int | None = None
    production_year: int | None = None
    end_date: datetime | None = None
    channel_id: uuid.UUID | None = None
    image_kinds: frozenset[ImageKind] = field(default_factory=frozenset)
    details: ItemDetails | None = None

    def __post_init__(self) -> None:
        if self.details is None:
            return
        expected = DETAILS_BY_CATEGORY.get(self.category)
        if expected is None or not isinstance(self.details, expected):
            msg = f"{type(self.details).__name__} details are not valid for {self.category.value} items"
            raise ValueError(msg)

    @property
    def client_type_name(self) -> str:
        return self.category.value

    @property
    def is_folder(self) -> bool:
        return self.category in FOLDER_CATEGORIES

    @property
    def has_channel(self) -> bool:
        return self.channel_id is not None and self.channel_id != NIL_ID

    def has_image(self, kind: ImageKind) -> bool:
        return kind in self.image_kinds


@dataclass(frozen=True, slots=True)
class SearchHintInfo:
    """A matched item as returned by the search index."""
    item: LibraryItem
    matched_term: str | None = None
