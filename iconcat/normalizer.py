"""Icon normalizer. Repairs icon geometry in place.

Non-square icons are centered on a transparent square canvas; icons whose
side is then outside [MIN_ICON_SIZE, MAX_ICON_SIZE] are scaled to the target
size. Files that are already valid are left byte-for-byte untouched.

Replacement writes ``<icon>.tmp``, deletes the original and renames the
temporary file into place. Nothing guards against concurrent runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from PIL import Image, ImageOps

from iconcat.catalog import entry_label, iter_icon_files, load_catalog, missing_icon_dirs
from iconcat.config import (
    DEFAULT_TARGET_SIZE,
    ICON_SUFFIX,
    MAX_ICON_SIZE,
    MIN_ICON_SIZE,
    CatalogSpec,
)
from iconcat.errors import CatalogLoadError

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


class NormalizeStatus(Enum):
    ALREADY_VALID = "already_valid"
    RESIZED = "resized"
    FAILED = "failed"


@dataclass
class NormalizeReport:
    """Outcome counts for a normalizer run."""

    already_valid: int = 0
    resized: int = 0
    error_count: int = 0
    missing: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    setup_errors: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """Lenient pass policy.

        Missing files alone never fail the run, and any successful resize
        passes it even when other files failed.
        """
        if self.setup_errors:
            return False
        if self.error_count == len(self.missing):
            return True
        if self.resized > 0:
            return True
        return self.already_valid > 0 and self.error_count == 0

    def record(self, status: NormalizeStatus) -> None:
        if status is NormalizeStatus.ALREADY_VALID:
            self.already_valid += 1
        elif status is NormalizeStatus.RESIZED:
            self.resized += 1
        else:
            self.error_count += 1


def _in_range(side: int) -> bool:
    return MIN_ICON_SIZE <= side <= MAX_ICON_SIZE


def _replace(path: Path, image: Image.Image) -> None:
    tmp = path.with_name(path.name + ".tmp")
    try:
        image.save(tmp, format="PNG")
    except (OSError, ValueError):
        tmp.unlink(missing_ok=True)
        raise
    path.unlink()
    tmp.rename(path)


def make_square(image: Image.Image) -> Image.Image:
    """Center *image* on a transparent square canvas of its larger side."""
    width, height = image.size
    side = max(width, height)
    canvas = Image.new("RGBA", (side, side), TRANSPARENT)
    canvas.alpha_composite(image.convert("RGBA"), ((side - width) // 2, (side - height) // 2))
    return canvas


def fit_contain(image: Image.Image, size: int) -> Image.Image:
    """Scale *image* to fit a ``size`` square, padding with transparency."""
    scaled = ImageOps.contain(image.convert("RGBA"), (size, size), Image.Resampling.LANCZOS)
    canvas = Image.new("RGBA", (size, size), TRANSPARENT)
    canvas.alpha_composite(scaled, ((size - scaled.width) // 2, (size - scaled.height) // 2))
    return canvas


def normalize_icon(path: str | Path, target_size: int = DEFAULT_TARGET_SIZE) -> NormalizeStatus:
    """Make one icon square and within range. Errors are logged, not raised."""
    path = Path(path)
    logger.info("Resizing icon: %s to %dx%d", path, target_size, target_size)

    try:
        with Image.open(path) as img:
            width, height = img.size
            if width == height and _in_range(width):
                logger.info("%s already valid (%dx%d)", path.name, width, height)
                return NormalizeStatus.ALREADY_VALID

            if width != height:
                squared = make_square(img)
            else:
                squared = None

        if squared is not None:
            _replace(path, squared)
            logger.info("Made %s square (%dx%d)", path.name, squared.width, squared.height)

        with Image.open(path) as img:
            if not _in_range(img.width):
                resized = fit_contain(img, target_size)
            else:
                resized = None

        if resized is not None:
            _replace(path, resized)
            logger.info("Resized %s to %dx%d", path.name, target_size, target_size)

    except (OSError, ValueError) as e:
        logger.error("Error resizing %s: %s", path, e)
        return NormalizeStatus.FAILED

    return NormalizeStatus.RESIZED


def normalize_catalogs(
    specs: list[CatalogSpec], target_size: int = DEFAULT_TARGET_SIZE
) -> NormalizeReport:
    """Validate and normalize every referenced icon, catalog by catalog.

    ``CatalogStructureError`` propagates.
    """
    report = NormalizeReport()
    logger.info("Validating and resizing icon files to %dx%d...", target_size, target_size)

    report.setup_errors = missing_icon_dirs(specs)
    if report.setup_errors:
        return report

    for spec in specs:
        try:
            catalog = load_catalog(spec)
        except CatalogLoadError as e:
            report.setup_errors.append(str(e))
            continue

        logger.info("Processing %s icons", spec.name)
        for entry, path in iter_icon_files(catalog):
            label = entry_label(entry)

            if not path.exists():
                report.missing.append(f"{spec.name}: {label} ({path})")
                report.error_count += 1
                continue

            if path.suffix.lower() != ICON_SUFFIX:
                report.errors.append(f"{spec.name}: {label} - Icon must be PNG format")
                report.error_count += 1
                continue

            status = normalize_icon(path, target_size)
            if status is NormalizeStatus.FAILED:
                report.errors.append(f"{spec.name}: {label} - could not normalize {path.name}")
            report.record(status)

    return report
