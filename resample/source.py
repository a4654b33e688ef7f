from __future__ import annotations

from typing import Protocol, Tuple, runtime_checkable

import numpy as np

from common.errors import OutOfBoundsAccess
from common.types import Color


@runtime_checkable
class PixelSource(Protocol):
    """Anything answering integer-coordinate color queries."""

    @property
    def bounds(self) -> Tuple[int, int]:
        """(width, height) in pixels."""
        ...

    def take(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Vectorized lookup; returns an (N, 4) uint16 array of RGBA colors."""
        ...

    def at(self, x: int, y: int) -> Color:
        ...


def check_in_bounds(xs: np.ndarray, ys: np.ndarray, width: int, height: int) -> None:
    if xs.size == 0:
        return
    if xs.min() < 0 or ys.min() < 0 or xs.max() >= width or ys.max() >= height:
        bad = np.flatnonzero((xs < 0) | (ys < 0) | (xs >= width) | (ys >= height))[0]
        raise OutOfBoundsAccess(
            f"pixel ({int(xs[bad])},{int(ys[bad])}) outside {width}x{height}"
        )


class ArrayImage:
    """
    A decoded image held as an (H, W, 4) uint16 RGBA array.

    Used for single tiles as well as whole decoded images.
    """

    def __init__(self, pixels: np.ndarray):
        if not isinstance(pixels, np.ndarray):
            raise TypeError("pixels must be a numpy ndarray")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError("pixels must have shape (H, W, 4)")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError("image must not be empty")
        self.pixels = pixels.astype(np.uint16, copy=False)

    @classmethod
    def from_rgb8(cls, rgb: np.ndarray) -> "ArrayImage":
        """Widen an (H, W, 3|4) uint8 RGB(A) array onto the 16-bit scale."""
        rgb = np.asarray(rgb, dtype=np.uint8)
        if rgb.ndim != 3 or rgb.shape[2] not in (3, 4):
            raise ValueError("expected (H, W, 3) or (H, W, 4) uint8 array")
        if rgb.shape[2] == 3:
            alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
            rgb = np.concatenate([rgb, alpha], axis=-1)
        return cls(rgb.astype(np.uint16) * 257)

    @classmethod
    def solid(cls, width: int, height: int, color: Color) -> "ArrayImage":
        pixels = np.empty((height, width, 4), dtype=np.uint16)
        pixels[...] = np.asarray(color, dtype=np.uint16)
        return cls(pixels)

    @property
    def bounds(self) -> Tuple[int, int]:
        return (int(self.pixels.shape[1]), int(self.pixels.shape[0]))

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2])

    def take(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        xs = np.asarray(xs, dtype=np.int64)
        ys = np.asarray(ys, dtype=np.int64)
        w, h = self.bounds
        check_in_bounds(xs, ys, w, h)
        return self.pixels[ys, xs]

    def at(self, x: int, y: int) -> Color:
        c = self.take(np.array([x]), np.array([y]))[0]
        return Color(*(int(v) for v in c))
