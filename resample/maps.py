from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Tuple

import numpy as np


# (dst_x, dst_y) -> (src_x, src_y); evaluated elementwise on numpy arrays.
CoordinateMap = Callable[[np.ndarray, np.ndarray], Tuple[np.ndarray, np.ndarray]]


@dataclass(frozen=True)
class LogPolarMap:
    """
    Inverse log-polar map producing the "tiny planet" projection.

    The destination canvas (dst_width x dst_height) is treated as a disc: the
    angle around the canvas center sweeps the full panorama width, and the
    distance from the center maps logarithmically onto the panorama height,
    horizon at the rim, ground at the center.

    Args:
        dst_width, dst_height: output canvas size (m, n)
        src_width, src_height: panorama size (w, h)
        zoom: scales the maximum radius R linearly
    """
    dst_width: int
    dst_height: int
    src_width: int
    src_height: int
    zoom: float = 2.0
    radius: float = field(init=False)
    scale: float = field(init=False)

    def __post_init__(self) -> None:
        if min(self.dst_width, self.dst_height, self.src_width, self.src_height) <= 0:
            raise ValueError("dimensions must be positive")
        if not self.zoom > 0:
            raise ValueError("zoom must be > 0")
        m, n = float(self.dst_width), float(self.dst_height)
        w, h = float(self.src_width), float(self.src_height)
        R = math.sqrt(m * m + n * n) / 2 * self.zoom
        A = R / (math.exp((2 * math.pi * h) / w) - 1)
        object.__setattr__(self, "radius", R)
        object.__setattr__(self, "scale", A)

    def __call__(self, x, y) -> Tuple[np.ndarray, np.ndarray]:
        m, n = float(self.dst_width), float(self.dst_height)
        w, h = float(self.src_width), float(self.src_height)

        # Relative to canvas center
        i = np.asarray(x, dtype=np.float64) - (m - 1) / 2
        j = np.asarray(y, dtype=np.float64) - (n - 1) / 2

        r = np.sqrt(i * i + j * j)
        theta = np.arctan2(i, j)
        theta = np.where(theta < 0, theta + 2 * np.pi, theta)

        p = w / (2 * np.pi) * np.log(r / self.scale + 1)
        q = w / (2 * np.pi) * theta
        # Invert both axes
        p = (h - 1) - p
        q = (w - 1) - q

        return q, p
