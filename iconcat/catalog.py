"""Catalog loading, icon file resolution and search."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Iterator

from iconcat.config import CatalogSpec
from iconcat.errors import CatalogLoadError, CatalogStructureError


@dataclass
class Catalog:
    """A loaded catalog. Entries are kept as raw mappings, in document order."""

    spec: CatalogSpec
    entries: list[Any] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.spec.name


@dataclass
class CatalogQuery:
    """Filter applied by ``search_catalog``."""

    text: str = ""
    category: str = ""
    supports: list[str] = field(default_factory=list)


def load_catalog(spec: CatalogSpec) -> Catalog:
    """Read a catalog database.

    Raises:
        CatalogLoadError: the file is unreadable or not valid JSON.
        CatalogStructureError: the root has no ``icons`` array.
    """
    try:
        with open(spec.database, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise CatalogLoadError(f"Cannot read {spec.name} database {spec.database}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CatalogLoadError(f"Invalid JSON in {spec.name} database: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("icons"), list):
        raise CatalogStructureError(
            f'Invalid {spec.name} database structure: missing or invalid "icons" array'
        )

    return Catalog(spec=spec, entries=data["icons"])


def entry_label(entry: Any) -> str:
    """Human-readable label for an entry: its name, else its id."""
    if isinstance(entry, dict):
        return str(entry.get("name") or entry.get("id") or "unknown")
    return "unknown"


def resolve_icon_file(icons_dir: str | Path, icon_path: str) -> Path:
    """Map an entry's ``icon_path`` to a file in the catalog's icon directory.

    Only the basename is used; any directories inside ``icon_path`` are ignored.
    """
    return Path(icons_dir) / PurePosixPath(str(icon_path)).name


def missing_icon_dirs(specs: list[CatalogSpec]) -> list[str]:
    """Messages for every catalog whose icon directory does not exist."""
    return [
        f"{spec.name} icons directory not found: {spec.icons_dir}"
        for spec in specs
        if not Path(spec.icons_dir).is_dir()
    ]


def iter_icon_files(catalog: Catalog) -> Iterator[tuple[dict, Path]]:
    """Yield ``(entry, file_path)`` for every entry that references an icon."""
    for entry in catalog.entries:
        if not isinstance(entry, dict) or not entry.get("icon_path"):
            continue
        yield entry, resolve_icon_file(catalog.spec.icons_dir, entry["icon_path"])


def categories(catalog: Catalog) -> list[str]:
    """Sorted distinct categories used in the catalog."""
    found = {
        e["category"]
        for e in catalog.entries
        if isinstance(e, dict) and isinstance(e.get("category"), str) and e["category"]
    }
    return sorted(found)


def search_catalog(catalog: Catalog, query: CatalogQuery) -> list[dict]:
    """Filter entries by text, category and capability support."""
    results = []
    needle = query.text.lower()
    cap_field = catalog.spec.capability_field

    for entry in catalog.entries:
        if not isinstance(entry, dict):
            continue

        if needle:
            haystack = [str(entry.get("name") or ""), str(entry.get("description") or "")]
            if not any(needle in h.lower() for h in haystack):
                continue

        if query.category and entry.get("category") != query.category:
            continue

        if query.supports:
            caps = entry.get(cap_field)
            if not isinstance(caps, dict) or not any(caps.get(k) is True for k in query.supports):
                continue

        results.append(entry)

    return results
