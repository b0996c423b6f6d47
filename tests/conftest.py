"""Shared fixtures: a throwaway repository with STIR/BEIR catalogs."""

import json
from pathlib import Path

import pytest
from PIL import Image

from iconcat.config import load_catalog_specs


def write_png(path: Path, size: tuple[int, int], color=(200, 30, 30, 255)) -> Path:
    """Write a solid RGBA PNG of the given size."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, color).save(path, format="PNG")
    return path


class RepoBuilder:
    """Builds ``data/{stir,beir}`` with databases and icons under a root."""

    def __init__(self, root: Path):
        self.root = root
        self.icons = {"STIR": [], "BEIR": []}
        for name in ("stir", "beir"):
            (root / "data" / name / "icons").mkdir(parents=True, exist_ok=True)

    def icons_dir(self, catalog: str) -> Path:
        return self.root / "data" / catalog.lower() / "icons"

    def database(self, catalog: str) -> Path:
        name = catalog.lower()
        return self.root / "data" / name / f"{name}-database.json"

    def stir_entry(self, icon_id: str, **overrides) -> dict:
        entry = {
            "id": icon_id,
            "name": icon_id.replace("-", " ").title(),
            "category": "Utilities",
            "icon_path": f"icons/{icon_id}.png",
            "platforms": {"windows": True, "mac": True, "linux": False},
            "description": f"The {icon_id} app",
        }
        entry.update(overrides)
        return entry

    def beir_entry(self, icon_id: str, **overrides) -> dict:
        entry = {
            "id": icon_id,
            "name": icon_id.replace("-", " ").title(),
            "category": "Privacy",
            "icon_path": f"icons/{icon_id}.png",
            "browsers": {"chrome": True, "firefox": True},
        }
        entry.update(overrides)
        return entry

    def add(self, catalog: str, entry, size: tuple[int, int] | None = (64, 64)):
        """Add an entry and, unless *size* is None, write its icon file."""
        self.icons[catalog].append(entry)
        if size is not None and isinstance(entry, dict) and entry.get("icon_path"):
            write_png(self.icons_dir(catalog) / Path(entry["icon_path"]).name, size)
        return entry

    def write(self, **raw_documents) -> "RepoBuilder":
        """Write both databases. ``STIR=...`` / ``BEIR=...`` override a document."""
        for catalog, icons in self.icons.items():
            document = raw_documents.get(catalog, {"icons": icons})
            with open(self.database(catalog), "w", encoding="utf-8") as f:
                if isinstance(document, str):
                    f.write(document)
                else:
                    json.dump(document, f, indent=2)
        return self

    def specs(self):
        return load_catalog_specs(self.root)


@pytest.fixture
def repo(tmp_path) -> RepoBuilder:
    return RepoBuilder(tmp_path)


@pytest.fixture
def no_geometry_tool(monkeypatch):
    """Pretend ImageMagick is not installed."""
    monkeypatch.setattr("iconcat.geometry.shutil.which", lambda tool: None)


@pytest.fixture
def png():
    """The ``write_png`` helper, for tests that build images directly."""
    return write_png
