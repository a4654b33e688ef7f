from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple, Union

from common.errors import MetadataFetchError, ZoomOutOfRange
from common.utils import ceil_divide


@dataclass(frozen=True)
class Details:
    """
    Panorama details which need to be known to download the tiles.

    Attributes:
        image_width, image_height: full-resolution panorama size (pixels)
        tile_width, tile_height: nominal tile size (pixels)
        pano_id: Street View panorama ID
    """
    image_width: int
    image_height: int
    tile_width: int
    tile_height: int
    pano_id: str

    def __post_init__(self) -> None:
        if min(self.image_width, self.image_height, self.tile_width, self.tile_height) <= 0:
            raise ValueError("image and tile dimensions must be positive")

    def max_zoom(self) -> int:
        # The whole image must fit in a single tile at zoom 0; an image
        # smaller than one tile is served whole at zoom 0.
        x = math.log2(self.image_width / self.tile_width)
        y = math.log2(self.image_height / self.tile_height)
        return max(0, int(math.ceil(max(x, y))))

    def size_at_zoom(self, zoom: int) -> Tuple[int, int]:
        """Image dimensions divided by 2^n, n being the distance from max zoom."""
        n = self.max_zoom() - int(zoom)
        if n < 0 or zoom < 0:
            raise ZoomOutOfRange(zoom, self.max_zoom())
        return self.image_width >> n, self.image_height >> n

    def grid_at_zoom(self, zoom: int) -> Tuple[int, int]:
        """Number of tiles (nx, ny) covering the image at `zoom`."""
        width, height = self.size_at_zoom(zoom)
        return ceil_divide(width, self.tile_width), ceil_divide(height, self.tile_height)


def _get_ci(d: Mapping[str, Any], key: str) -> Any:
    """Case-insensitive mapping lookup; raises KeyError when absent."""
    if key in d:
        return d[key]
    lk = key.lower()
    for k, v in d.items():
        if str(k).lower() == lk:
            return v
    raise KeyError(key)


def parse_details(payload: Union[str, bytes, Mapping[str, Any]]) -> Details:
    """
    Build Details from the metadata JSON:

        {"Data": {"image_width": "13312", "image_height": "6656",
                  "tile_width": "512", "tile_height": "512", ...},
         "Location": {"panoId": "...", ...}}

    Integer fields may be strings or numbers.
    """
    try:
        raw: Dict[str, Any] = json.loads(payload) if isinstance(payload, (str, bytes)) else dict(payload)
        data = _get_ci(raw, "Data")
        location = _get_ci(raw, "Location")
        details = Details(
            image_width=int(_get_ci(data, "image_width")),
            image_height=int(_get_ci(data, "image_height")),
            tile_width=int(_get_ci(data, "tile_width")),
            tile_height=int(_get_ci(data, "tile_height")),
            pano_id=str(_get_ci(location, "panoId")),
        )
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        raise MetadataFetchError(f"invalid panorama metadata: {e!r}") from e
    return details
