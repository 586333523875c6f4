from __future__ import annotations

from importlib import resources
from typing import Any

import yaml


def load_library_sample(name: str) -> dict[str, Any]:
    """Return the parsed YAML library catalog sample."""
    resource = resources.files(__name__).joinpath("library", f"{name}.yaml")
    if not resource.is_file():
        raise FileNotFoundError(f"No library sample named {name}")
    return yaml.safe_load(resource.read_text(encoding="utf-8"))
