"""Bundled library collaborators and catalog loading."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from searchhints.core.config import settings
from searchhints.library.catalog import load_catalog, parse_catalog
from searchhints.library.memory import InMemoryLibrary
from searchhints.samples import load_library_sample

DEFAULT_SAMPLE = "demo_library"


def load_library(path: str | None = None) -> InMemoryLibrary:
    """Build an in-memory library from a catalog file or the packaged demo sample."""
    if path:
        return InMemoryLibrary.from_manifest(load_catalog(Path(path)))
    return InMemoryLibrary.from_manifest(parse_catalog(load_library_sample(DEFAULT_SAMPLE)))


@lru_cache
def get_library() -> InMemoryLibrary:
    """Return the process-wide library configured by LIBRARY_CATALOG_PATH."""
    return load_library(settings.library_catalog_path)


__all__ = ["InMemoryLibrary", "get_library", "load_library"]
