"""Optional geometry inspection through an external image tool.

The tool (ImageMagick ``identify`` by default) is looked up once at startup.
When it is not installed, geometry checks are skipped rather than failed.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from iconcat.config import GEOMETRY_TOOL, MAX_ICON_SIZE, MIN_ICON_SIZE
from iconcat.errors import GeometryProbeError


@dataclass(frozen=True)
class GeometryProbe:
    """Handle on the geometry-inspection command, if one was found."""

    command: str | None = None
    timeout: int = 30

    @classmethod
    def detect(cls, tool: str = GEOMETRY_TOOL) -> "GeometryProbe":
        """Probe ``PATH`` for *tool* the way ``which`` would."""
        return cls(command=shutil.which(tool))

    @property
    def available(self) -> bool:
        return self.command is not None

    def measure(self, path: str | Path) -> tuple[int, int]:
        """Return ``(width, height)`` of the first frame of *path*."""
        if not self.command:
            raise GeometryProbeError("No geometry-inspection tool available")

        try:
            proc = subprocess.run(
                [self.command, "-format", "%wx%h", f"{path}[0]"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise GeometryProbeError(f"Could not run {self.command}: {e}") from e

        if proc.returncode != 0:
            raise GeometryProbeError(proc.stderr.strip() or f"exit code {proc.returncode}")

        return parse_dimensions(proc.stdout)


def parse_dimensions(output: str) -> tuple[int, int]:
    """Parse ``WIDTHxHEIGHT`` as printed by ``identify -format %wx%h``."""
    try:
        width, height = (int(part) for part in output.strip().split("x"))
    except ValueError as e:
        raise GeometryProbeError(f"Unexpected geometry output: {output.strip()!r}") from e
    return width, height


def check_geometry(width: int, height: int) -> str | None:
    """Return a violation message for non-square or out-of-range icons."""
    if width != height:
        return f"Icon should be square (is {width}x{height})"
    if width < MIN_ICON_SIZE or width > MAX_ICON_SIZE:
        return (
            f"Icon should be between {MIN_ICON_SIZE}px and {MAX_ICON_SIZE}px "
            f"(is {width}x{height})"
        )
    return None
