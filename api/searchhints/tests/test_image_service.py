from __future__ import annotations

from searchhints.models.media import ImageKind, ItemCategory
from searchhints.services import image_service
from searchhints.tests.utils import make_item

THUMB = ImageKind.THUMB
BACKDROP = ImageKind.BACKDROP


def test_item_with_own_image_is_its_own_source():
    library_root = make_item("Shows", ItemCategory.COLLECTION_FOLDER, images=(THUMB, BACKDROP))
    episode = make_item("Pilot", ItemCategory.EPISODE, parent=library_root, images=(THUMB, BACKDROP))

    assert image_service.resolve_thumb_source(episode, [library_root]) is episode
    assert image_service.resolve_backdrop_source(episode, [library_root]) is episode
    assert image_service.needs_ancestors(episode) is False


def test_episode_thumb_prefers_series_ancestor_over_nearer_folder():
    series = make_item("The Expanse", ItemCategory.SERIES, images=(THUMB,))
    season = make_item("Season 1", ItemCategory.SEASON, parent=series, images=(THUMB,))
    episode = make_item("Dulcinea", ItemCategory.EPISODE, parent=season)

    assert image_service.resolve_thumb_source(episode, [season, series]) is series


def test_non_episode_thumb_uses_nearest_ancestor():
    series = make_item("The Expanse", ItemCategory.SERIES, images=(THUMB,))
    season = make_item("Season 1", ItemCategory.SEASON, parent=series, images=(THUMB,))
    movie = make_item("Extras", ItemCategory.VIDEO, parent=season)

    assert image_service.resolve_thumb_source(movie, [season, series]) is season


def test_episode_thumb_falls_back_to_any_ancestor_when_series_has_none():
    grandparent = make_item("Shows", ItemCategory.COLLECTION_FOLDER, images=(THUMB,))
    series = make_item("No Art", ItemCategory.SERIES, parent=grandparent)
    episode = make_item("Pilot", ItemCategory.EPISODE, parent=series)

    assert image_service.resolve_thumb_source(episode, [series, grandparent]) is grandparent


def test_backdrop_ignores_series_preference():
    series = make_item("The Expanse", ItemCategory.SERIES, images=(BACKDROP,))
    season = make_item("Season 1", ItemCategory.SEASON, parent=series, images=(BACKDROP,))
    episode = make_item("Dulcinea", ItemCategory.EPISODE, parent=season)

    assert image_service.resolve_backdrop_source(episode, [season, series]) is season


def test_no_source_when_nothing_in_chain_has_image():
    root = make_item("Root", ItemCategory.FOLDER)
    movie = make_item("Movie", parent=root)

    assert image_service.resolve_thumb_source(movie, [root]) is None
    assert image_service.resolve_backdrop_source(movie, []) is None


def test_find_ancestor_returns_first_match_in_chain_order():
    first = make_item("A", ItemCategory.FOLDER, images=(THUMB,))
    second = make_item("B", ItemCategory.FOLDER, images=(THUMB,))

    assert image_service.find_ancestor([first, second], image_service.has_image(THUMB)) is first
    assert image_service.find_ancestor([], image_service.has_image(THUMB)) is None


def test_image_item_id_is_lowercase_hex_without_separators():
    item = make_item("Movie")
    rendered = image_service.image_item_id(item)

    assert rendered == item.id.hex
    assert "-" not in rendered
    assert rendered == rendered.lower()
    assert len(rendered) == 32
