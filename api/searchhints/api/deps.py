from searchhints.library import get_library
from searchhints.services.collaborators import ImageCache, ItemStore, SearchIndex
from searchhints.services.observability import CollaboratorMonitor, collaborator_monitor


def get_search_index() -> SearchIndex:
    return get_library()


def get_image_cache() -> ImageCache:
    return get_library()


def get_item_store() -> ItemStore:
    return get_library()


def get_monitor() -> CollaboratorMonitor:
    return collaborator_monitor
