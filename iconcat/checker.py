"""Existence/format checker for catalog icons.

For every entry with an ``icon_path`` the referenced file must exist in the
catalog's icon directory and carry a ``.png`` extension. When a geometry
probe is available, existing files must also be square and within
[MIN_ICON_SIZE, MAX_ICON_SIZE].
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from iconcat.catalog import entry_label, iter_icon_files, load_catalog, missing_icon_dirs
from iconcat.config import ICON_SUFFIX, CatalogSpec
from iconcat.errors import CatalogLoadError, GeometryProbeError
from iconcat.geometry import GeometryProbe, check_geometry

logger = logging.getLogger(__name__)


@dataclass
class CatalogCheckResult:
    """Errors found for one catalog."""

    catalog_name: str
    checked: int = 0
    missing: list[str] = field(default_factory=list)
    format_errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.missing and not self.format_errors


@dataclass
class CheckReport:
    """Aggregate result of the existence/format checker."""

    catalogs: list[CatalogCheckResult] = field(default_factory=list)
    setup_errors: list[str] = field(default_factory=list)
    geometry_checked: bool = False

    @property
    def missing(self) -> list[str]:
        return [m for c in self.catalogs for m in c.missing]

    @property
    def format_errors(self) -> list[str]:
        return [e for c in self.catalogs for e in c.format_errors]

    @property
    def warnings(self) -> list[str]:
        return [w for c in self.catalogs for w in c.warnings]

    @property
    def error_count(self) -> int:
        return len(self.setup_errors) + len(self.missing) + len(self.format_errors)

    @property
    def passed(self) -> bool:
        return self.error_count == 0


def check_catalog(spec: CatalogSpec, probe: GeometryProbe) -> CatalogCheckResult:
    """Check every icon referenced by one catalog."""
    catalog = load_catalog(spec)
    result = CatalogCheckResult(catalog_name=spec.name)
    existing = []

    logger.info("Checking %s icons...", spec.name)
    for entry, path in iter_icon_files(catalog):
        result.checked += 1
        label = entry_label(entry)

        if not path.exists():
            result.missing.append(f"{spec.name}: {label} ({path})")
            continue
        existing.append((label, path))

        if path.suffix.lower() != ICON_SUFFIX:
            result.format_errors.append(f"{spec.name}: {label} - Icon must be PNG format")

    if not probe.available:
        return result

    for label, path in existing:
        try:
            width, height = probe.measure(path)
        except GeometryProbeError as e:
            logger.warning("Could not check dimensions for %s: %s", path, e)
            result.warnings.append(f"Could not check dimensions for {path}")
            continue

        violation = check_geometry(width, height)
        if violation:
            result.format_errors.append(f"{spec.name}: {label} - {violation}")

    return result


def check_icons(specs: list[CatalogSpec], probe: GeometryProbe) -> CheckReport:
    """Run the checker over all catalogs, in order.

    *probe* is resolved once by the caller; its availability decides whether
    geometry checks run at all. ``CatalogStructureError`` propagates.
    """
    report = CheckReport(geometry_checked=probe.available)

    report.setup_errors = missing_icon_dirs(specs)
    if report.setup_errors:
        return report

    if probe.available:
        logger.info("%s found, checking icon dimensions", probe.command)
    else:
        logger.info("Geometry-inspection tool not found, skipping dimension checks")

    for spec in specs:
        try:
            report.catalogs.append(check_catalog(spec, probe))
        except CatalogLoadError as e:
            report.setup_errors.append(str(e))

    return report
