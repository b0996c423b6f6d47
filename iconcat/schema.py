"""JSON Schema for catalog databases.

This is the published shape of a catalog document. The validator in
``iconcat.validator`` enforces the same rules procedurally; the schema is
exported for editors and for other readers of the catalogs (the static
catalog page, third-party tooling).
"""

from __future__ import annotations

from iconcat import __version__
from iconcat.config import ICON_PATH_PREFIX, ID_PATTERN, CatalogSpec


def get_schema(spec: CatalogSpec) -> dict:
    """Return the JSON Schema of *spec*'s database document."""
    capability_map = {
        "type": "object",
        "required": list(spec.capability_keys),
        "properties": {key: {"type": "boolean"} for key in spec.capability_keys},
    }

    entry = {
        "type": "object",
        "required": ["id", "name", "category", "icon_path", spec.capability_field],
        "properties": {
            "id": {
                "type": "string",
                "pattern": f"^{ID_PATTERN}$",
                "description": "Unique lowercase identifier, hyphens for spaces.",
            },
            "name": {"type": "string", "minLength": 1},
            "category": {"type": "string", "minLength": 1},
            "icon_path": {
                "type": "string",
                "pattern": f"^{ICON_PATH_PREFIX}",
                "description": "File under the catalog's icon directory.",
            },
            spec.capability_field: capability_map,
            "description": {"type": "string"},
        },
    }

    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "$id": f"iconcat:{spec.name.lower()}-database/v{__version__}",
        "title": f"{spec.name} icon database",
        "type": "object",
        "required": ["icons"],
        "properties": {
            "icons": {"type": "array", "items": entry},
        },
    }
