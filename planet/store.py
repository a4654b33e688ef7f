from __future__ import annotations

import hashlib
import json
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import List, Optional

from common.types import Planet


_KEY_RE = re.compile(r"^[0-9a-f]{64}$")


class PlanetStore:
    """
    File-backed store for rendered planets.

        root/
          ├─ blobs/{key[:2]}/{key}.jpg   (content-addressed by sha256)
          └─ planets.jsonl               (one Planet record per line)
    """

    def __init__(self, root: str = "data/planets"):
        self.root = Path(root)
        self._lock = threading.Lock()

    @property
    def index_path(self) -> Path:
        return self.root / "planets.jsonl"

    def _blob_path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise KeyError(key)
        return self.root / "blobs" / key[:2] / f"{key}.jpg"

    # -------- blobs --------

    def put_blob(self, data: bytes) -> str:
        key = hashlib.sha256(data).hexdigest()
        path = self._blob_path(key)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            # Each writer gets its own temp file; concurrent writers of the same
            # key all replace the blob with identical bytes.
            with tempfile.NamedTemporaryFile(dir=path.parent, prefix=f".{key}.", suffix=".tmp", delete=False) as f:
                f.write(data)
            try:
                os.replace(f.name, path)
            except OSError:
                os.unlink(f.name)
                raise
        return key

    def get_blob(self, key: str) -> bytes:
        path = self._blob_path(key)
        if not path.is_file():
            raise KeyError(key)
        return path.read_bytes()

    # -------- records --------

    def save(self, planet: Planet) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        with self._lock, self.index_path.open("a", buffering=1) as f:
            f.write(json.dumps(planet.to_dict()) + "\n")

    def list(self, pano_id: Optional[str] = None) -> List[Planet]:
        """Stored planets, newest first; optionally only those of one panorama."""
        if not self.index_path.exists():
            return []
        out: List[Planet] = []
        for line in self.index_path.read_text().splitlines():
            if not line.strip():
                continue
            p = Planet.from_dict(json.loads(line))
            if pano_id is None or p.pano_id == pano_id:
                out.append(p)
        out.sort(key=lambda p: p.created, reverse=True)
        return out
