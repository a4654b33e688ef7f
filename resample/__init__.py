"""
Resampling & Reprojection

This package provides:
- Pixel sources (ArrayImage) behind the PixelSource protocol
- Nearest / bilinear interpolation over any pixel source
- LogPolarMap, the inverse map behind the "tiny planet" projection
- warp(): the inverse-mapping executor writing into a Raster
"""
from .interpolate import Bilinear, Nearest, make_interpolator, mix
from .maps import LogPolarMap
from .raster import Raster
from .source import ArrayImage, PixelSource
from .warp import warp

__all__ = [
    "ArrayImage",
    "Bilinear",
    "LogPolarMap",
    "Nearest",
    "PixelSource",
    "Raster",
    "make_interpolator",
    "mix",
    "warp",
]
