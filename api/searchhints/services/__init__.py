from . import hint_service, image_service, query_service

__all__ = [
    "hint_service",
    "image_service",
    "query_service",
]
