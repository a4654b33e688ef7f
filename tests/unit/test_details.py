"""
Unit tests for panorama Details and metadata parsing
"""

import json
import os
import sys

import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import MetadataFetchError, ZoomOutOfRange
from streetview.details import Details, parse_details


SAMPLE_METADATA = {
    "Data": {
        "image_width": "13312",
        "image_height": "6656",
        "tile_width": "512",
        "tile_height": "512",
        "image_date": "2011-06",
    },
    "Projection": {"projection_type": "spherical", "pano_yaw_deg": "179.5"},
    "Location": {"panoId": "XkZ3b7Qw9c_sample", "lat": "51.5", "lng": "-0.12"},
}


class TestDetails:
    """Test cases for Details"""

    def test_max_zoom(self):
        d = Details(13312, 6656, 512, 512, "p")
        # log2(26) = 4.7, log2(13) = 3.7 -> ceil(max) = 5
        assert d.max_zoom() == 5

    def test_max_zoom_exact_power(self):
        assert Details(512, 512, 256, 256, "p").max_zoom() == 1
        assert Details(256, 256, 256, 256, "p").max_zoom() == 0

    @pytest.mark.parametrize("dims", [(13312, 6656, 512, 512), (512, 512, 256, 256), (3328, 1664, 512, 512), (100, 37, 64, 64), (100, 100, 512, 512)])
    def test_size_at_max_zoom_is_full_size(self, dims):
        d = Details(*dims, pano_id="p")
        assert d.size_at_zoom(d.max_zoom()) == (d.image_width, d.image_height)

    def test_size_and_grid_at_zoom(self):
        d = Details(13312, 6656, 512, 512, "p")
        assert d.size_at_zoom(2) == (1664, 832)
        assert d.grid_at_zoom(2) == (4, 2)
        assert d.size_at_zoom(0) == (416, 208)
        assert d.grid_at_zoom(0) == (1, 1)

    def test_grid_512_at_zoom_1(self):
        d = Details(512, 512, 256, 256, "p")
        assert d.grid_at_zoom(1) == (2, 2)

    def test_zoom_out_of_range(self):
        d = Details(512, 512, 256, 256, "p")
        with pytest.raises(ValueError):
            d.size_at_zoom(2)
        with pytest.raises(ValueError):
            d.size_at_zoom(-1)

    def test_image_smaller_than_tile(self):
        d = Details(100, 100, 512, 512, "p")
        assert d.max_zoom() == 0
        assert d.size_at_zoom(0) == (100, 100)
        assert d.grid_at_zoom(0) == (1, 1)
        with pytest.raises(ZoomOutOfRange):
            d.size_at_zoom(1)

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            Details(0, 512, 256, 256, "p")


class TestParseDetails:
    """Test cases for parse_details"""

    def test_parse_dict(self):
        d = parse_details(SAMPLE_METADATA)
        assert d == Details(13312, 6656, 512, 512, "XkZ3b7Qw9c_sample")

    def test_parse_json_bytes(self):
        d = parse_details(json.dumps(SAMPLE_METADATA).encode())
        assert d.pano_id == "XkZ3b7Qw9c_sample"

    def test_keys_case_insensitive_and_numeric(self):
        payload = {
            "data": {"Image_Width": 512, "Image_Height": 256, "Tile_Width": 256, "Tile_Height": 256},
            "location": {"PanoId": "abc"},
        }
        assert parse_details(payload) == Details(512, 256, 256, 256, "abc")

    def test_missing_field(self):
        bad = json.loads(json.dumps(SAMPLE_METADATA))
        del bad["Data"]["tile_height"]
        with pytest.raises(MetadataFetchError):
            parse_details(bad)

    def test_non_integer_field(self):
        bad = json.loads(json.dumps(SAMPLE_METADATA))
        bad["Data"]["image_width"] = "wide"
        with pytest.raises(MetadataFetchError):
            parse_details(bad)

    def test_invalid_json(self):
        with pytest.raises(MetadataFetchError):
            parse_details("{not json")
        with pytest.raises(MetadataFetchError):
            parse_details("[]")
