"""
Unit tests for pixel sources: ArrayImage and the tiled CompositeImage
"""

import os
import sys

import numpy as np
import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import OutOfBoundsAccess
from common.types import Color
from resample.source import ArrayImage, PixelSource
from streetview.composite import CompositeImage


def random_tile(w, h, seed):
    rng = np.random.default_rng(seed)
    return ArrayImage(rng.integers(0, 65535, size=(h, w, 4), dtype=np.uint16, endpoint=True))


def column_tile(values):
    """1-row tile whose channel values are `values` along x."""
    arr = np.asarray([values], dtype=np.uint16)
    return ArrayImage(np.repeat(arr[..., None], 4, axis=-1))


class TestArrayImage:
    """Test cases for ArrayImage"""

    def test_from_rgb8_widens_and_adds_alpha(self):
        rgb = np.array([[[255, 0, 1]]], dtype=np.uint8)
        img = ArrayImage.from_rgb8(rgb)
        assert img.at(0, 0) == Color(65535, 0, 257, 65535)
        assert img.bounds == (1, 1)

    def test_solid(self):
        img = ArrayImage.solid(3, 2, Color(1, 2, 3, 4))
        assert img.bounds == (3, 2)
        assert img.at(2, 1) == Color(1, 2, 3, 4)

    def test_out_of_bounds(self):
        """Out-of-range access is a defect and raises"""
        img = ArrayImage.solid(3, 2, Color(1, 2, 3, 4))
        with pytest.raises(OutOfBoundsAccess):
            img.at(3, 0)
        with pytest.raises(IndexError):
            img.at(0, -1)

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            ArrayImage(np.zeros((2, 2, 3), dtype=np.uint16))
        with pytest.raises(TypeError):
            ArrayImage([[0, 0, 0, 0]])

    def test_satisfies_protocol(self):
        assert isinstance(ArrayImage.solid(1, 1, Color(0, 0, 0, 0)), PixelSource)


class TestCompositeImage:
    """Test cases for CompositeImage"""

    def _even_grid(self):
        # 2 x 3 grid of 4x4 tiles; index = tx * ny + ty
        tiles = [random_tile(4, 4, seed=i) for i in range(6)]
        return CompositeImage(tiles, 8, 12, 4, 4, 2, 3), tiles

    def test_bounds(self):
        comp, _ = self._even_grid()
        assert comp.bounds == (8, 12)
        assert isinstance(comp, PixelSource)

    def test_matches_tile_lookup(self):
        """With exact-size tiles every pixel equals the owning tile's pixel"""
        comp, tiles = self._even_grid()
        for y in range(12):
            for x in range(8):
                tile = tiles[(x // 4) * 3 + (y // 4)]
                assert comp.at(x, y) == tile.at(x % 4, y % 4)

    def test_column_major_index(self):
        """Tile (tx=0, ty=1) sits at index 1"""
        comp, tiles = self._even_grid()
        assert comp.at(0, 4) == tiles[1].at(0, 0)
        assert comp.at(4, 0) == tiles[3].at(0, 0)

    def test_take_matches_at(self):
        comp, _ = self._even_grid()
        xs = np.array([0, 7, 3, 5, 6])
        ys = np.array([11, 0, 8, 5, 2])
        out = comp.take(xs, ys)
        for k in range(len(xs)):
            assert Color(*out[k].tolist()) == comp.at(int(xs[k]), int(ys[k]))

    def test_rescales_undersized_tile(self):
        """A 2px-wide edge tile stretched over the 4px nominal slot"""
        full = column_tile([0, 10, 20, 30])
        edge = column_tile([100, 200])
        comp = CompositeImage([full, edge], 8, 1, 4, 1, 2, 1)
        # local u = round(lx / 3 * 1): 0 -> 0, 1 -> 0, 2 -> 1, 3 -> 1
        got = [comp.at(x, 0).r for x in range(4, 8)]
        assert got == [100, 100, 200, 200]
        assert [comp.at(x, 0).r for x in range(4)] == [0, 10, 20, 30]

    def test_out_of_bounds(self):
        comp, _ = self._even_grid()
        with pytest.raises(OutOfBoundsAccess):
            comp.at(8, 0)
        with pytest.raises(OutOfBoundsAccess):
            comp.at(0, -1)

    def test_tile_count_mismatch(self):
        tiles = [random_tile(4, 4, seed=i) for i in range(3)]
        with pytest.raises(ValueError, match="expected 2x2=4 tiles"):
            CompositeImage(tiles, 8, 8, 4, 4, 2, 2)

    def test_missing_tile(self):
        tiles = [random_tile(4, 4, seed=i) for i in range(4)]
        tiles[2] = None
        with pytest.raises(ValueError, match="missing tiles"):
            CompositeImage(tiles, 8, 8, 4, 4, 2, 2)
