from __future__ import annotations

import abc
from typing import Tuple

import numpy as np

from common.types import CHANNEL_MAX, Color
from resample.source import PixelSource


EDGE_MODES = ("clamp", "wrap")


def mix(a: np.ndarray, b: np.ndarray, theta: np.ndarray) -> np.ndarray:
    """
    Blend colors channel-wise: (1 - theta) * a + theta * b, in float64.

    Written as a + theta * (b - a) so theta == 0 gives a, theta == 1 gives b
    and a color blended with itself is returned unchanged.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    theta = np.asarray(theta, dtype=np.float64)
    if theta.ndim == 1 and a.ndim == 2:
        theta = theta[:, None]
    return a + theta * (b - a)


def quantize(c: np.ndarray) -> np.ndarray:
    """Truncate float channels back to uint16."""
    return np.clip(c, 0, CHANNEL_MAX).astype(np.uint16)


def mix_colors(a: Color, b: Color, theta: float) -> Color:
    c = quantize(mix(np.asarray(a), np.asarray(b), theta))
    return Color(*(int(v) for v in c))


def _apply_edge(v: np.ndarray, size: int, mode: str) -> np.ndarray:
    if mode == "clamp":
        return np.clip(v, 0, size - 1)
    return np.mod(v, size)


def _as_coords(xs, ys) -> Tuple[np.ndarray, np.ndarray]:
    xs = np.asarray(xs, dtype=np.float64).ravel()
    ys = np.asarray(ys, dtype=np.float64).ravel()
    if xs.shape != ys.shape:
        raise ValueError("xs and ys must have the same length")
    if not (np.all(np.isfinite(xs)) and np.all(np.isfinite(ys))):
        raise ValueError("sample coordinates must be finite")
    return xs, ys


class _Interpolator(abc.ABC):
    def __init__(self, image: PixelSource, edge: str = "clamp"):
        if edge not in EDGE_MODES:
            raise ValueError(f"edge must be one of {EDGE_MODES}, got {edge!r}")
        self.image = image
        self.edge = edge

    @property
    def bounds(self) -> Tuple[int, int]:
        return self.image.bounds

    def _lookup(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        w, h = self.image.bounds
        xs = _apply_edge(xs, w, self.edge)
        ys = _apply_edge(ys, h, self.edge)
        return self.image.take(xs, ys)

    @abc.abstractmethod
    def sample(self, xs, ys) -> np.ndarray:
        """Colors at the continuous points (xs[i], ys[i]), shape (N, 4) uint16."""

    def at(self, x: float, y: float) -> Color:
        c = self.sample(np.array([x]), np.array([y]))[0]
        return Color(*(int(v) for v in c))


class Nearest(_Interpolator):
    """Nearest-pixel lookup: rounds with floor(v + 0.5)."""

    def sample(self, xs, ys) -> np.ndarray:
        xs, ys = _as_coords(xs, ys)
        u = np.floor(xs + 0.5).astype(np.int64)
        v = np.floor(ys + 0.5).astype(np.int64)
        return self._lookup(u, v)


class Bilinear(_Interpolator):
    """
    Bilinear blend of the four pixels around (x, y).

    The two horizontal pairs are blended by dx first, then the results by dy.
    Intermediate values stay float and are truncated once on store.
    """

    def sample(self, xs, ys) -> np.ndarray:
        xs, ys = _as_coords(xs, ys)
        fx = np.floor(xs)
        fy = np.floor(ys)
        dx = xs - fx
        dy = ys - fy
        x1 = fx.astype(np.int64)
        y1 = fy.astype(np.int64)
        x2 = x1 + 1
        y2 = y1 + 1

        bottom_left = self._lookup(x1, y1)
        bottom_right = self._lookup(x2, y1)
        top_left = self._lookup(x1, y2)
        top_right = self._lookup(x2, y2)

        top = mix(top_left, top_right, dx)
        bottom = mix(bottom_left, bottom_right, dx)
        return quantize(mix(bottom, top, dy))


INTERPOLATORS = {"nearest": Nearest, "bilinear": Bilinear}


def make_interpolator(name: str, image: PixelSource, edge: str = "clamp") -> _Interpolator:
    try:
        cls = INTERPOLATORS[name.lower()]
    except KeyError:
        raise ValueError(f"unknown interpolation {name!r}; expected one of {sorted(INTERPOLATORS)}") from None
    return cls(image, edge=edge)
