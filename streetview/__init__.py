"""
Street View: Panorama Download

- Details: tile-grid description of a panorama (max zoom, size per zoom)
- StreetViewService: metadata + tile requests against the cbk endpoint
- fetch_panorama: bounded concurrent tile download, stitched into a CompositeImage
"""
from .composite import CompositeImage
from .details import Details, parse_details
from .service import StreetViewService
from .tiles import decode_tile, fetch_panorama, fetch_tiles

__all__ = [
    "CompositeImage",
    "Details",
    "StreetViewService",
    "decode_tile",
    "fetch_panorama",
    "fetch_tiles",
    "parse_details",
]
