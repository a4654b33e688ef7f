from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

from common.config import load_config
from common.errors import PlanetError
from common.logging_setup import get_logger, setup_logging
from common.types import Planet
from common.utils import iso_now_ms, parse_size, timer_ms
from planet.store import PlanetStore
from resample.interpolate import EDGE_MODES, INTERPOLATORS, make_interpolator
from resample.maps import LogPolarMap
from resample.raster import Raster
from resample.warp import warp
from streetview.service import StreetViewService
from streetview.tiles import fetch_panorama


log = get_logger("planet")


@dataclass(frozen=True)
class RenderOptions:
    """
    Knobs for one render.

    Args:
        width, height: destination canvas size
        zoom: log-polar zoom factor (scales the planet radius)
        fetch_zoom: tile pyramid level to download (not full resolution)
        interpolation: "bilinear" or "nearest"
        edge_mode: "clamp" or "wrap" for samples past the panorama edge
        workers: warp threads
        fetch_workers: concurrent tile downloads
        jpeg_quality: output JPEG quality
    """
    width: int = 800
    height: int = 800
    zoom: float = 2.0
    fetch_zoom: int = 2
    interpolation: str = "bilinear"
    edge_mode: str = "clamp"
    workers: int = 4
    fetch_workers: int = 8
    jpeg_quality: int = 75

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("canvas size must be positive")
        if self.interpolation not in INTERPOLATORS:
            raise ValueError(f"interpolation must be one of {sorted(INTERPOLATORS)}")
        if self.edge_mode not in EDGE_MODES:
            raise ValueError(f"edge_mode must be one of {EDGE_MODES}")
        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError(f"jpeg_quality must be in [1, 100], got {self.jpeg_quality}")


def options_from_config(P: Dict[str, Any]) -> RenderOptions:
    r = P.get("render", {})
    sv = P.get("streetview", {})
    return RenderOptions(
        width=int(r.get("width", 800)),
        height=int(r.get("height", 800)),
        zoom=float(r.get("zoom", 2.0)),
        fetch_zoom=int(r.get("fetch_zoom", 2)),
        interpolation=str(r.get("interpolation", "bilinear")).lower(),
        edge_mode=str(r.get("edge_mode", "clamp")).lower(),
        workers=int(r.get("workers", 4)),
        fetch_workers=int(sv.get("fetch_workers", 8)),
        jpeg_quality=int(r.get("jpeg_quality", 75)),
    )


def service_from_config(P: Dict[str, Any]) -> StreetViewService:
    sv = P.get("streetview", {})
    return StreetViewService(host=str(sv.get("host", "http://cbk0.google.com")), timeout=float(sv.get("timeout_s", 10.0)))


def render_planet(pano_id: str, service: StreetViewService, opts: RenderOptions = RenderOptions()) -> Raster:
    """
    details -> tiles -> composite -> interpolator -> log-polar warp -> raster.

    Any metadata or tile failure aborts the render; nothing partial is returned.
    """
    log.info("getting panorama details", extra={"extra": {"pano_id": pano_id}})
    details = service.get_details(pano_id)

    pano, fetch_ms = timer_ms(fetch_panorama)(details, service, opts.fetch_zoom, max_workers=opts.fetch_workers)
    src_width, src_height = pano.bounds
    log.info("panorama assembled", extra={"extra": {"size": [src_width, src_height], "ms": int(fetch_ms)}})

    fmap = LogPolarMap(opts.width, opts.height, src_width, src_height, opts.zoom)
    src = make_interpolator(opts.interpolation, pano, edge=opts.edge_mode)
    out, warp_ms = timer_ms(warp)(src, opts.width, opts.height, fmap, workers=opts.workers)
    log.info("warped image", extra={"extra": {"size": [opts.width, opts.height], "ms": int(warp_ms)}})
    return out


def create_planet(
    pano_id: str,
    service: StreetViewService,
    store: PlanetStore,
    opts: RenderOptions = RenderOptions(),
) -> Planet:
    """Render, encode and persist one planet. Returns the stored record."""
    out = render_planet(pano_id, service, opts)
    data = out.encode_jpeg(opts.jpeg_quality)
    blob_key = store.put_blob(data)
    planet = Planet(pano_id=pano_id, created=iso_now_ms(), blob_key=blob_key)
    store.save(planet)
    log.info("saved", extra={"extra": planet.to_dict()})
    return planet


def main(argv: Optional[list] = None) -> int:
    ap = argparse.ArgumentParser(description="Render a Street View panorama as a tiny planet")
    ap.add_argument("--panoid", required=True, help="Street View panorama ID")
    ap.add_argument("--out", default="planet.jpg", help="Output JPEG path")
    ap.add_argument("--config", default=None, help="YAML config (default config/params.yaml)")
    ap.add_argument("--size", type=parse_size, default=None, help="Canvas WxH, e.g. 800x800")
    ap.add_argument("--zoom", type=float, default=None, help="Log-polar zoom factor")
    ap.add_argument("--fetch-zoom", type=int, default=None, help="Tile pyramid level to fetch")
    ap.add_argument("--interp", choices=sorted(INTERPOLATORS), default=None)
    ap.add_argument("--edge", choices=EDGE_MODES, default=None)
    ap.add_argument("--quality", type=int, default=None, help="JPEG quality")
    ap.add_argument("--workers", type=int, default=None, help="Warp threads")
    ap.add_argument("--host", default=None, help="Tile server, e.g. http://cbk0.google.com")
    ap.add_argument("--save", action="store_true", help="Persist into the planet store instead of --out")
    args = ap.parse_args(argv)

    P = load_config(args.config)
    setup_logging(P.get("logging", {}).get("level", "INFO"), force=True)

    overrides: Dict[str, Any] = {}
    if args.size:
        overrides["width"], overrides["height"] = args.size
    if args.zoom is not None:
        overrides["zoom"] = args.zoom
    if args.fetch_zoom is not None:
        overrides["fetch_zoom"] = args.fetch_zoom
    if args.interp:
        overrides["interpolation"] = args.interp
    if args.edge:
        overrides["edge_mode"] = args.edge
    if args.quality is not None:
        overrides["jpeg_quality"] = args.quality
    if args.workers is not None:
        overrides["workers"] = args.workers
    try:
        opts = replace(options_from_config(P), **overrides)
    except ValueError as e:
        log.error("invalid render options", extra={"extra": {"error": str(e)}})
        return 1

    if args.host:
        P["streetview"]["host"] = args.host
    service = service_from_config(P)

    try:
        if args.save:
            store = PlanetStore(P["store"]["root"])
            planet = create_planet(args.panoid, service, store, opts)
            print(planet.blob_key)
        else:
            out = render_planet(args.panoid, service, opts)
            Path(args.out).write_bytes(out.encode_jpeg(opts.jpeg_quality))
            log.info("wrote planet", extra={"extra": {"path": args.out}})
    except PlanetError as e:
        log.error("render failed", extra={"extra": {"pano_id": args.panoid, "error": str(e)}})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
