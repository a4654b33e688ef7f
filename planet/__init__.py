"""
Planet: Render Pipeline, Storage & API

- pipeline: details -> tiles -> log-polar warp -> JPEG (CLI: python -m planet.pipeline)
- store: content-addressed JPEG blobs + planet records
- server: FastAPI app (uvicorn planet.server:app --port 8000)
"""
from .pipeline import RenderOptions, create_planet, render_planet

__all__ = ["RenderOptions", "create_planet", "render_planet"]
