from __future__ import annotations

import enum
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Protocol

import cv2
import numpy as np

from common.errors import TileDecodeError, TileError, TileFetchError, TileGridError
from common.logging_setup import get_logger
from resample.source import ArrayImage
from streetview.composite import CompositeImage
from streetview.details import Details


log = get_logger("streetview.tiles")


class TileClient(Protocol):
    def get_tile(self, pano_id: str, zoom: int, x: int, y: int) -> bytes:
        ...


class TileState(str, enum.Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    DECODED = "decoded"
    FAILED = "failed"


@dataclass
class TileResult:
    """Outcome of one grid cell: a decoded image or the error that stopped it."""
    index: int
    x: int
    y: int
    state: TileState = TileState.PENDING
    image: Optional[ArrayImage] = None
    error: Optional[TileError] = None

    @property
    def ok(self) -> bool:
        return self.state is TileState.DECODED and self.image is not None


def decode_tile(data: bytes, x: int = 0, y: int = 0) -> ArrayImage:
    """Decode JPEG/PNG bytes into a 16-bit RGBA ArrayImage."""
    arr = np.frombuffer(data, dtype=np.uint8)
    bgr = cv2.imdecode(arr, cv2.IMREAD_COLOR) if arr.size else None
    if bgr is None:
        raise TileDecodeError(x, y, f"undecodable image ({len(data)} bytes)")
    rgba = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA)
    return ArrayImage.from_rgb8(rgba)


def _fetch_one(client: TileClient, pano_id: str, zoom: int, result: TileResult) -> TileResult:
    result.state = TileState.FETCHING
    log.debug("tile fetching", extra={"extra": {"x": result.x, "y": result.y, "zoom": zoom}})
    try:
        data = client.get_tile(pano_id, zoom, result.x, result.y)
        result.image = decode_tile(data, result.x, result.y)
        result.state = TileState.DECODED
    except TileError as e:
        result.error = e
        result.state = TileState.FAILED
    except Exception as e:  # any other client error still marks the slot failed
        result.error = TileFetchError(result.x, result.y, repr(e))
        result.state = TileState.FAILED
    if result.state is TileState.FAILED:
        log.warning("tile failed", extra={"extra": {"x": result.x, "y": result.y, "error": str(result.error)}})
    else:
        log.debug("tile decoded", extra={"extra": {"x": result.x, "y": result.y, "size": list(result.image.bounds)}})
    return result


def fetch_tiles(details: Details, client: TileClient, zoom: int, *, max_workers: int = 8) -> List[TileResult]:
    """
    Fetch and decode every tile of the grid at `zoom`.

    One task per grid cell runs on a pool of at most `max_workers` threads.
    Returns once every task has settled, ordered by index x * ny + y.
    """
    nx, ny = details.grid_at_zoom(zoom)
    results = [TileResult(index=x * ny + y, x=x, y=y) for x in range(nx) for y in range(ny)]
    workers = max(1, min(int(max_workers), len(results)))

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tile") as ex:
        futures = [ex.submit(_fetch_one, client, details.pano_id, zoom, r) for r in results]
        for fut in as_completed(futures):
            fut.result()
    return results


def fetch_panorama(details: Details, client: TileClient, zoom: int, *, max_workers: int = 8) -> CompositeImage:
    """
    Download the panorama at `zoom` and stitch it into a CompositeImage.

    Raises TileGridError if any tile failed; the error lists every failure.
    """
    width, height = details.size_at_zoom(zoom)
    nx, ny = details.grid_at_zoom(zoom)
    log.info(
        "fetching panorama tiles",
        extra={"extra": {"pano_id": details.pano_id, "zoom": zoom, "grid": [nx, ny], "size": [width, height]}},
    )
    results = fetch_tiles(details, client, zoom, max_workers=max_workers)

    failures = [r.error for r in results if not r.ok]
    if failures:
        raise TileGridError([f for f in failures if f is not None], total=len(results))

    tiles = [r.image for r in results]
    return CompositeImage(tiles, width, height, details.tile_width, details.tile_height, nx, ny)
