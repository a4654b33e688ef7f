from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from common.types import Color


class Raster:
    """
    Dense (height, width, 4) uint16 RGBA output buffer.

    Owned by the warp executor while rendering; handed to the caller for
    encoding afterwards.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError("raster size must be positive")
        self.pixels = np.zeros((height, width, 4), dtype=np.uint16)

    @property
    def bounds(self) -> Tuple[int, int]:
        return (int(self.pixels.shape[1]), int(self.pixels.shape[0]))

    def at(self, x: int, y: int) -> Color:
        return Color(*(int(v) for v in self.pixels[y, x]))

    def set(self, x: int, y: int, c: Color) -> None:
        self.pixels[y, x] = c

    def to_bgr8(self) -> np.ndarray:
        """8-bit BGR view for OpenCV (alpha dropped)."""
        rgb8 = (self.pixels[..., :3] >> 8).astype(np.uint8)
        return cv2.cvtColor(rgb8, cv2.COLOR_RGB2BGR)

    def encode_jpeg(self, quality: int = 75) -> bytes:
        if not 1 <= int(quality) <= 100:
            raise ValueError("JPEG quality must be in [1, 100]")
        ok, buf = cv2.imencode(".jpg", self.to_bgr8(), [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
        if not ok:
            raise RuntimeError("JPEG encoding failed")
        return buf.tobytes()
