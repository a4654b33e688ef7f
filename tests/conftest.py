"""
Shared fixtures: synthetic tile images and an in-memory Street View stand-in.
"""

import io
import os
import sys
import threading
import time

import pytest
from PIL import Image

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(project_root)

from common.errors import MetadataFetchError, TileFetchError
from streetview.details import Details


def png_bytes(width, height, rgb):
    """Encode a solid-color RGB tile as PNG (lossless, so colors survive decode)."""
    buf = io.BytesIO()
    Image.new("RGB", (width, height), tuple(rgb)).save(buf, format="PNG")
    return buf.getvalue()


def tile_color(x, y):
    """Distinct 8-bit color per grid cell."""
    return (40 + 60 * x, 20 + 50 * y, 200)


class FakeStreetView:
    """
    Serves solid-color tiles for a fixed Details.

    Tiles on the last column/row are cut to the remaining image size, like
    the real server. `fail` lists (x, y) cells answering with an error,
    `garbage` lists cells answering with undecodable bytes.
    """

    host = "http://fake"

    def __init__(self, details, *, color=None, fail=(), garbage=(), delay=0.0, details_error=False):
        self.details = details
        self.color = color
        self.fail = set(fail)
        self.garbage = set(garbage)
        self.delay = delay
        self.details_error = details_error
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def get_details(self, pano_id):
        if self.details_error:
            raise MetadataFetchError(f"metadata request for {pano_id} returned 500")
        return self.details

    def get_tile(self, pano_id, zoom, x, y):
        with self._lock:
            self.calls.append((zoom, x, y))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            if (x, y) in self.fail:
                raise TileFetchError(x, y, "HTTP 503")
            if (x, y) in self.garbage:
                return b"not an image"
            d = self.details
            width, height = d.size_at_zoom(zoom)
            w = min(d.tile_width, width - x * d.tile_width)
            h = min(d.tile_height, height - y * d.tile_height)
            return png_bytes(w, h, self.color or tile_color(x, y))
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def details_512():
    return Details(image_width=512, image_height=512, tile_width=256, tile_height=256, pano_id="pano-512")


@pytest.fixture
def fake_streetview(details_512):
    return FakeStreetView(details_512)
