from __future__ import annotations

from typing import Optional

import uvicorn
from fastapi import BackgroundTasks, FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse, Response

from common.config import load_config
from common.errors import PlanetError
from common.logging_setup import get_logger
from planet.pipeline import create_planet, options_from_config, service_from_config
from planet.store import PlanetStore


log = get_logger("planet.server")

P = load_config()

# Instances
store = PlanetStore(P.get("store", {}).get("root", "data/planets"))
service = service_from_config(P)
render_opts = options_from_config(P)

app = FastAPI(title="Tiny Planet API", version="1.0.0")


def _work(pano_id: str) -> None:
    """Background render; failures end up in the log, never in the response."""
    try:
        create_planet(pano_id, service, store, render_opts)
    except PlanetError as e:
        log.error("render failed", extra={"extra": {"pano_id": pano_id, "error": str(e)}})
    except Exception:
        log.exception("render crashed", extra={"extra": {"pano_id": pano_id}})


@app.get("/health")
def health():
    return {
        "status": "ok",
        "host": service.host,
        "render": {
            "size": [render_opts.width, render_opts.height],
            "zoom": render_opts.zoom,
            "fetch_zoom": render_opts.fetch_zoom,
            "interpolation": render_opts.interpolation,
        },
        "planets": len(store.list()),
    }


@app.api_route("/create", methods=["GET", "POST"])
def create(background: BackgroundTasks, panoid: str = Query("")):
    """
    Accept a panorama ID and render it in the background.
    Returns immediately; the finished planet shows up under /planets.
    """
    if not panoid:
        raise HTTPException(status_code=400, detail="panoid not specified")
    background.add_task(_work, panoid)
    return PlainTextResponse("patience is a virtue\n")


@app.get("/planets")
def planets(panoid: Optional[str] = Query(None)):
    return [p.to_dict() for p in store.list(panoid)]


@app.get("/planets/{blob_key}")
def planet_image(blob_key: str):
    try:
        data = store.get_blob(blob_key)
    except KeyError:
        raise HTTPException(status_code=404, detail="planet_not_found")
    return Response(content=data, media_type="image/jpeg", headers={"Cache-Control": "public, max-age=86400"})


# -------- local dev entrypoint --------
if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
