"""Exception types raised by the catalog tooling."""

from __future__ import annotations


class IconcatError(Exception):
    """Base class for all iconcat errors."""


class ConfigError(IconcatError):
    """The catalog configuration file is unreadable or invalid."""


class CatalogLoadError(IconcatError):
    """A catalog database could not be read or parsed as JSON."""


class CatalogStructureError(IconcatError):
    """A catalog document does not have an ``icons`` array at its root.

    This is fatal: callers abort the whole run rather than moving on to the
    next catalog.
    """


class GeometryProbeError(IconcatError):
    """The geometry-inspection tool failed to report an image's dimensions."""
