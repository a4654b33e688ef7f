from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, NamedTuple


# Channel values live on a 16-bit scale; 8-bit inputs are widened by 257.
CHANNEL_MAX = 65535


class Color(NamedTuple):
    """RGBA color with channels on the 0..65535 scale."""
    r: int
    g: int
    b: int
    a: int

    @classmethod
    def from_rgb8(cls, r: int, g: int, b: int, a: int = 255) -> "Color":
        return cls(int(r) * 257, int(g) * 257, int(b) * 257, int(a) * 257)


@dataclass(frozen=True, slots=True)
class Planet:
    """
    Persisted record of a finished render.

    Attributes:
        pano_id: Street View panorama ID the planet was rendered from.
        created: ISO-8601 (UTC) creation time.
        blob_key: content address of the encoded JPEG in the blob store.
    """
    pano_id: str
    created: str
    blob_key: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Planet":
        return cls(pano_id=str(d["pano_id"]), created=str(d["created"]), blob_key=str(d["blob_key"]))
