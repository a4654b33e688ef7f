from __future__ import annotations

"""
Street View "cbk" endpoint client.

Usage:
    svc = StreetViewService(host="http://cbk0.google.com")
    details = svc.get_details(pano_id)                # -> Details
    data = svc.get_tile(pano_id, zoom=2, x=0, y=0)    # -> encoded image bytes

Failures are raised, never returned: MetadataFetchError for the metadata
document, TileFetchError for a single tile.
"""

from typing import Optional
from urllib.parse import urlencode

import requests

from common.errors import MetadataFetchError, TileFetchError
from common.logging_setup import get_logger
from streetview.details import Details, parse_details


log = get_logger("streetview.service")

DEFAULT_HOST = "http://cbk0.google.com"


class StreetViewService:
    def __init__(
        self,
        host: str = DEFAULT_HOST,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        """
        Params:
            host: e.g. http://cbk0.google.com
            session: optional requests.Session for connection reuse
            timeout: per-request timeout (seconds); a timeout fails the request
        """
        self.host = host.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = float(timeout)

    # ----------------------------
    # URLs
    # ----------------------------
    def details_url(self, pano_id: str, fmt: str = "json") -> str:
        """fmt -- "json" or "xml"."""
        return f"{self.host}/cbk?{urlencode({'output': fmt, 'panoid': pano_id})}"

    def tile_url(self, pano_id: str, zoom: int, x: int, y: int) -> str:
        params = {"output": "tile", "panoid": pano_id, "zoom": int(zoom), "x": int(x), "y": int(y)}
        return f"{self.host}/cbk?{urlencode(params)}"

    # ----------------------------
    # Requests
    # ----------------------------
    def get_details(self, pano_id: str) -> Details:
        url = self.details_url(pano_id, "json")
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise MetadataFetchError(f"metadata request failed for {pano_id}: {e}") from e
        if r.status_code != 200:
            raise MetadataFetchError(f"metadata request for {pano_id} returned {r.status_code}: {r.text[:200]}")
        if not r.content:
            raise MetadataFetchError(f"empty metadata response for {pano_id}")
        details = parse_details(r.content)
        log.info(
            "panorama details",
            extra={"extra": {"pano_id": details.pano_id, "image": [details.image_width, details.image_height],
                             "tile": [details.tile_width, details.tile_height], "max_zoom": details.max_zoom()}},
        )
        return details

    def get_tile(self, pano_id: str, zoom: int, x: int, y: int) -> bytes:
        url = self.tile_url(pano_id, zoom, x, y)
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.Timeout as e:
            raise TileFetchError(x, y, f"timeout after {self.timeout}s") from e
        except requests.RequestException as e:
            raise TileFetchError(x, y, f"request failed: {e}") from e
        if r.status_code != 200:
            raise TileFetchError(x, y, f"HTTP {r.status_code}")
        if not r.content:
            raise TileFetchError(x, y, "empty body")
        return r.content
