from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from common.errors import OutOfBoundsAccess
from common.types import Color
from resample.source import PixelSource, check_in_bounds


class CompositeImage:
    """
    A grid of tiles addressable as one image.

    Tiles are stored column-major: tile (tx, ty) lives at index tx * num_y + ty.
    The last row/column of tiles may be smaller than the nominal tile size, so
    local coordinates are rescaled onto each tile's actual resolution.

    Args:
        tiles: num_x * num_y decoded tiles, none missing
        width, height: dimensions of the whole image
        tile_width, tile_height: nominal dimensions of every tile
        num_x, num_y: number of tiles in the grid
    """

    def __init__(
        self,
        tiles: Sequence[PixelSource],
        width: int,
        height: int,
        tile_width: int,
        tile_height: int,
        num_x: int,
        num_y: int,
    ):
        if num_x * num_y != len(tiles):
            raise ValueError(f"expected {num_x}x{num_y}={num_x * num_y} tiles, got {len(tiles)}")
        missing = [i for i, t in enumerate(tiles) if t is None]
        if missing:
            raise ValueError(f"composite has missing tiles at indices {missing}")
        if width <= 0 or height <= 0 or tile_width <= 0 or tile_height <= 0:
            raise ValueError("composite and tile dimensions must be positive")
        # All tiles must share the same channel encoding.
        channels = {getattr(t, "channels", 4) for t in tiles}
        if len(channels) > 1:
            raise ValueError(f"tiles disagree on channel count: {sorted(channels)}")

        self.tiles = list(tiles)
        self.width = int(width)
        self.height = int(height)
        self.tile_width = int(tile_width)
        self.tile_height = int(tile_height)
        self.num_x = int(num_x)
        self.num_y = int(num_y)

    @property
    def bounds(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def channels(self) -> int:
        # Representative; uniform across tiles (checked in __init__).
        return getattr(self.tiles[0], "channels", 4)

    def _rescale(self, local: np.ndarray, nominal: int, actual: int) -> np.ndarray:
        if nominal == 1:
            return np.zeros_like(local)
        u = local.astype(np.float64) / (nominal - 1) * (actual - 1)
        return np.floor(u + 0.5).astype(np.int64)

    def take(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        xs = np.asarray(xs, dtype=np.int64).ravel()
        ys = np.asarray(ys, dtype=np.int64).ravel()
        check_in_bounds(xs, ys, self.width, self.height)

        tx, lx = np.divmod(xs, self.tile_width)
        ty, ly = np.divmod(ys, self.tile_height)
        index = tx * self.num_y + ty
        if index.size and index.max() >= len(self.tiles):
            # width/height claim more pixels than the grid covers
            raise OutOfBoundsAccess(f"tile index {int(index.max())} outside grid {self.num_x}x{self.num_y}")

        out = np.empty((xs.size, 4), dtype=np.uint16)
        for i in np.unique(index):
            sel = index == i
            tile = self.tiles[int(i)]
            tw, th = tile.bounds
            u = self._rescale(lx[sel], self.tile_width, tw)
            v = self._rescale(ly[sel], self.tile_height, th)
            out[sel] = tile.take(u, v)
        return out

    def at(self, x: int, y: int) -> Color:
        c = self.take(np.array([x]), np.array([y]))[0]
        return Color(*(int(v) for v in c))
