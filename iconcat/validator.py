"""Schema validator for catalog databases.

Checks every entry against the field schema of its catalog and collects
duplicate ids. Issues are gathered, never raised; only a malformed document
root (``CatalogStructureError``) stops the run.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterator

from iconcat.catalog import Catalog, entry_label, load_catalog
from iconcat.config import ICON_PATH_PREFIX, ID_PATTERN, CatalogSpec
from iconcat.errors import CatalogLoadError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "name", "category", "icon_path")

_ID_RE = re.compile(ID_PATTERN)


@dataclass
class EntryIssues:
    """Issues found on a single entry."""

    index: int  # 1-based position in the catalog
    label: str
    issues: list[str] = field(default_factory=list)


@dataclass
class CatalogValidationResult:
    """Result of validating one catalog database."""

    catalog_name: str
    entry_count: int = 0
    entries: list[EntryIssues] = field(default_factory=list)
    duplicate_ids: list[str] = field(default_factory=list)
    load_error: str = ""

    @property
    def total_errors(self) -> int:
        count = sum(len(e.issues) for e in self.entries) + len(self.duplicate_ids)
        return count + (1 if self.load_error else 0)

    @property
    def passed(self) -> bool:
        return self.total_errors == 0

    def summary(self) -> str:
        if self.load_error:
            return f"{self.catalog_name} database could not be loaded"
        if self.passed:
            return f"{self.catalog_name} database validation passed ({self.entry_count} icons)"
        return f"{self.catalog_name} database validation failed with {self.total_errors} errors"


def _is_blank(value: Any) -> bool:
    # Empty objects and arrays still count as present.
    return not value and not isinstance(value, (dict, list))


def _id_text(value: Any) -> str:
    # JSON spelling: true/false, and 1.0 reads as 1.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _id_key(value: Any) -> tuple[str, Any]:
    if isinstance(value, bool):
        return ("boolean", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    return ("string", value)


def validate_entry(entry: Any, spec: CatalogSpec) -> list[str]:
    """Validate one catalog entry. Returns a list of issue messages."""
    if not isinstance(entry, dict):
        return ["entry is not an object"]

    issues: list[str] = []
    label = entry.get("name") or entry.get("id") or "unknown icon"

    for name in REQUIRED_FIELDS:
        if _is_blank(entry.get(name)):
            suffix = "" if name == "id" else f" for {label}"
            issues.append(f"Missing '{name}' field{suffix}")

    cap_field = spec.capability_field
    caps = entry.get(cap_field)
    if _is_blank(caps):
        issues.append(f"Missing '{cap_field}' field for {label}")
    else:
        caps_map = caps if isinstance(caps, dict) else {}
        for key in spec.capability_keys:
            if not isinstance(caps_map.get(key), bool):
                issues.append(f"'{cap_field}.{key}' must be a boolean for {label}")

    entry_id = entry.get("id")
    if not _is_blank(entry_id) and not _ID_RE.fullmatch(_id_text(entry_id)):
        issues.append(f"'id' must be lowercase with hyphens for spaces: {_id_text(entry_id)}")

    icon_path = entry.get("icon_path")
    if not _is_blank(icon_path) and not str(icon_path).startswith(ICON_PATH_PREFIX):
        issues.append(f"'icon_path' must start with '{ICON_PATH_PREFIX}': {icon_path}")

    return issues


def find_duplicate_ids(entries: list[Any]) -> list[str]:
    """Ids seen more than once. The first occurrence is accepted; every later
    occurrence is listed, so an id used three times appears twice."""
    seen: set[tuple[str, Any]] = set()
    duplicates: list[str] = []
    for entry in entries:
        if not isinstance(entry, dict) or _is_blank(entry.get("id")):
            continue
        entry_id = entry["id"]
        if not isinstance(entry_id, (str, int, float)):
            continue
        key = _id_key(entry_id)
        if key in seen:
            duplicates.append(_id_text(entry_id))
        else:
            seen.add(key)
    return duplicates


def validate_catalog(catalog: Catalog) -> CatalogValidationResult:
    """Validate every entry of a loaded catalog."""
    result = CatalogValidationResult(
        catalog_name=catalog.name, entry_count=len(catalog.entries)
    )

    for i, entry in enumerate(catalog.entries):
        issues = validate_entry(entry, catalog.spec)
        if issues:
            result.entries.append(EntryIssues(index=i + 1, label=entry_label(entry), issues=issues))

    result.duplicate_ids = find_duplicate_ids(catalog.entries)
    return result


def validate_catalogs(specs: list[CatalogSpec]) -> Iterator[CatalogValidationResult]:
    """Load and validate each catalog in order, yielding one result per catalog.

    A catalog that cannot be read or parsed fails on its own and the run moves
    on. ``CatalogStructureError`` propagates to the caller, after the results
    of the catalogs before it have been yielded.
    """
    for spec in specs:
        logger.info("Validating %s database...", spec.name)
        try:
            catalog = load_catalog(spec)
        except CatalogLoadError as e:
            yield CatalogValidationResult(catalog_name=spec.name, load_error=str(e))
            continue
        yield validate_catalog(catalog)
