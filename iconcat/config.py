"""Catalog configuration: where the databases and icon directories live.

The built-in layout mirrors the repository: each catalog keeps its JSON
database and its ``icons/`` directory side by side under ``data/<name>/``.
A repository can override the list with an ``iconcat.yaml`` file at its root::

    catalogs:
      - name: STIR
        database: data/stir/stir-database.json
        icons_dir: data/stir/icons
        capability_field: platforms
        capability_keys: [windows, mac, linux]
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from iconcat.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "iconcat.yaml"

ICON_PATH_PREFIX = "icons/"
ICON_SUFFIX = ".png"
ID_PATTERN = r"[a-z0-9-]+"

MIN_ICON_SIZE = 32
MAX_ICON_SIZE = 256
DEFAULT_TARGET_SIZE = 128

# Optional external tool used by the existence/format checker.
GEOMETRY_TOOL = "identify"


class CatalogSpec(BaseModel):
    """One catalog: its database, its icon directory and its capability map."""

    name: str
    database: Path
    icons_dir: Path
    capability_field: str
    capability_keys: list[str] = Field(min_length=1)

    def resolve(self, root: str | Path) -> "CatalogSpec":
        """Return a copy with relative paths anchored at *root*."""
        root = Path(root)
        return self.model_copy(
            update={
                "database": root / self.database,
                "icons_dir": root / self.icons_dir,
            }
        )


class CatalogConfig(BaseModel):
    """Top-level shape of ``iconcat.yaml``."""

    catalogs: list[CatalogSpec] = Field(min_length=1)


DEFAULT_CATALOGS: list[CatalogSpec] = [
    CatalogSpec(
        name="STIR",
        database=Path("data/stir/stir-database.json"),
        icons_dir=Path("data/stir/icons"),
        capability_field="platforms",
        capability_keys=["windows", "mac", "linux"],
    ),
    CatalogSpec(
        name="BEIR",
        database=Path("data/beir/beir-database.json"),
        icons_dir=Path("data/beir/icons"),
        capability_field="browsers",
        capability_keys=["chrome", "firefox"],
    ),
]


def load_catalog_specs(
    root: str | Path = ".", config_path: str | Path | None = None
) -> list[CatalogSpec]:
    """Resolve the catalogs to process.

    Uses *config_path* when given, else ``iconcat.yaml`` under *root* if it
    exists, else the built-in STIR/BEIR layout. All returned paths are
    anchored at *root*.
    """
    root = Path(root)
    path = Path(config_path) if config_path else root / CONFIG_FILENAME

    if config_path is None and not path.exists():
        return [spec.resolve(root) for spec in DEFAULT_CATALOGS]

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    try:
        config = CatalogConfig.model_validate(raw or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid catalog config in {path}:\n{e}") from e

    logger.debug("Loaded %d catalog(s) from %s", len(config.catalogs), path)
    return [spec.resolve(root) for spec in config.catalogs]


def find_spec(specs: list[CatalogSpec], name: str) -> CatalogSpec:
    """Look up a catalog by name, case-insensitively."""
    for spec in specs:
        if spec.name.lower() == name.lower():
            return spec
    known = ", ".join(s.name for s in specs)
    raise ConfigError(f"Unknown catalog '{name}'. Known catalogs: {known}")


def parse_target_size(raw: str | int | None) -> int:
    """Parse the normalizer's ``--size`` value.

    Anything that is not an integer in [MIN_ICON_SIZE, MAX_ICON_SIZE] falls
    back to DEFAULT_TARGET_SIZE with a warning. Parsing is strict: values such
    as ``"64.5"`` or ``"64abc"`` are rejected rather than read as 64.
    """
    if raw is None:
        return DEFAULT_TARGET_SIZE
    try:
        size = int(str(raw).strip())
    except ValueError:
        size = None
    if size is None or not MIN_ICON_SIZE <= size <= MAX_ICON_SIZE:
        logger.warning(
            "Invalid size specified. Using default size of %dpx", DEFAULT_TARGET_SIZE
        )
        return DEFAULT_TARGET_SIZE
    return size
