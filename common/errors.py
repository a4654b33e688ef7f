"""
Error taxonomy shared by the fetch, resample and render stages.

MetadataFetchError aborts a render before any tile is requested. Tile level
failures (TileFetchError / TileDecodeError) are collected per grid cell and
surfaced together as a TileGridError once every fetch has settled.
"""
from __future__ import annotations

from typing import Sequence


class PlanetError(Exception):
    """Base class for all render failures."""


class MetadataFetchError(PlanetError):
    """Panorama details could not be fetched or parsed."""


class TileError(PlanetError):
    """A single grid cell could not be turned into a pixel source."""

    def __init__(self, x: int, y: int, reason: str):
        self.x = int(x)
        self.y = int(y)
        self.reason = reason
        super().__init__(f"tile ({self.x},{self.y}): {reason}")


class TileFetchError(TileError):
    """Transport or HTTP failure for one tile."""


class TileDecodeError(TileError):
    """Tile bytes arrived but are not a decodable image."""


class TileGridError(PlanetError):
    """One or more tiles failed; the composite cannot be built."""

    def __init__(self, failures: Sequence[TileError], total: int):
        self.failures = list(failures)
        self.total = int(total)
        first = "; ".join(str(f) for f in self.failures[:3])
        more = "" if len(self.failures) <= 3 else f" (+{len(self.failures) - 3} more)"
        super().__init__(f"{len(self.failures)}/{self.total} tiles failed: {first}{more}")


class OutOfBoundsAccess(PlanetError, IndexError):
    """A pixel source was queried outside its valid domain."""


class ZoomOutOfRange(PlanetError, ValueError):
    """Requested tile pyramid level is not served for this panorama."""

    def __init__(self, zoom: int, max_zoom: int):
        self.zoom = int(zoom)
        self.max_zoom = int(max_zoom)
        super().__init__(f"zoom {self.zoom} outside [0, {self.max_zoom}]")
