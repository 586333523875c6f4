"""Validate YAML library catalogs."""

from __future__ import annotations

import argparse
from pathlib import Path

from searchhints.library.catalog import validate_catalog_paths


def _collect_catalog_files(target: Path) -> list[Path]:
    if target.is_dir():
        return sorted(target.glob("*.yaml")) + sorted(target.glob("*.yml"))
    if target.is_file():
        return [target]
    raise FileNotFoundError(f"Path not found: {target}")


def main(argv: list[str] | None = None) -> int:
    default_path = Path(__file__).resolve().parents[1] / "samples" / "library"

    parser = argparse.ArgumentParser(description="Validate library catalogs")
    parser.add_argument(
        "--path",
        default=str(default_path),
        help="Path to a catalog file or directory (default: packaged samples)",
    )
    args = parser.parse_args(argv)
    target = Path(args.path).resolve()

    paths = _collect_catalog_files(target)
    errors = validate_catalog_paths(paths)
    if errors:
        for error in errors:
            print(error)
        return 1

    print(f"Validated {len(paths)} catalog file(s).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
