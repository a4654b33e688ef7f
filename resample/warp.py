from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Protocol, Tuple

import numpy as np

from common.logging_setup import get_logger
from resample.maps import CoordinateMap
from resample.raster import Raster


log = get_logger("resample.warp")


class ContinuousSource(Protocol):
    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        ...


def _bands(height: int, band_rows: int) -> List[Tuple[int, int]]:
    return [(y0, min(height, y0 + band_rows)) for y0 in range(0, height, band_rows)]


def _render_band(src: ContinuousSource, out: Raster, width: int, y0: int, y1: int, fmap: CoordinateMap) -> None:
    ys, xs = np.mgrid[y0:y1, 0:width]
    u, v = fmap(xs, ys)
    u = np.broadcast_to(np.asarray(u, dtype=np.float64), xs.shape)
    v = np.broadcast_to(np.asarray(v, dtype=np.float64), xs.shape)
    colors = src.sample(u.ravel(), v.ravel())
    # Each band owns a disjoint slice of the raster
    out.pixels[y0:y1] = colors.reshape(y1 - y0, width, 4)


def warp(
    src: ContinuousSource,
    width: int,
    height: int,
    fmap: CoordinateMap,
    *,
    workers: int = 1,
    band_rows: Optional[int] = None,
) -> Raster:
    """
    Inverse warp: for every destination pixel (x, y) sample src at fmap(x, y).

    The canvas is split into horizontal bands that are rendered independently;
    with workers > 1 the bands run on a thread pool. No pixel depends on any
    other, so the result does not depend on `workers` or `band_rows`.
    Errors raised by the source propagate to the caller.
    """
    out = Raster(width, height)
    workers = max(1, int(workers))
    if band_rows is None:
        band_rows = max(1, -(-height // (workers * 4)))
    elif int(band_rows) < 1:
        raise ValueError(f"band_rows must be at least 1, got {band_rows}")
    bands = _bands(height, int(band_rows))

    log.debug("warp start", extra={"extra": {"width": width, "height": height, "bands": len(bands), "workers": workers}})
    if workers == 1 or len(bands) == 1:
        for y0, y1 in bands:
            _render_band(src, out, width, y0, y1, fmap)
        return out

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="warp") as ex:
        futures = [ex.submit(_render_band, src, out, width, y0, y1, fmap) for y0, y1 in bands]
        for fut in futures:
            fut.result()
    return out
