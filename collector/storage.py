"""On-disk dataset layout: ``<root>/<device>/<n>.png`` + ``<n>.json``."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from labeler.config import DATASET_DIR

logger = logging.getLogger("collector.storage")

_UNSAFE = re.compile(r"[^\w.\- ]+")


def safe_dir_name(name: str) -> str:
    """Strip path separators and other unsafe characters from a device name."""
    cleaned = _UNSAFE.sub("_", name).strip(" .")
    return cleaned or "unnamed"


class DatasetStore:
    """Numbered (image, annotation) pairs per device directory."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or DATASET_DIR)
        self._lock = asyncio.Lock()

    def device_dir(self, device: str) -> Path:
        return self.root / safe_dir_name(device)

    def indices(self, device: str) -> List[int]:
        """Sorted indices of the complete (png + json) samples for a device."""
        d = self.device_dir(device)
        if not d.is_dir():
            return []
        return sorted(
            int(p.stem) for p in d.glob("*.png")
            if p.stem.isdigit() and p.with_suffix(".json").is_file()
        )

    def count(self, device: str) -> int:
        return len(self.indices(device))

    def _next_index(self, d: Path) -> int:
        # Highest index on disk + 1, incomplete pairs included
        taken = [int(p.stem) for p in d.iterdir() if p.stem.isdigit()]
        return max(taken, default=-1) + 1

    def _write_pair(self, device: str, png: bytes, target: Dict[str, Any]) -> int:
        d = self.device_dir(device)
        d.mkdir(parents=True, exist_ok=True)
        index = self._next_index(d)
        created: List[Path] = []

        # Annotation first; the png marks the sample complete
        try:
            json_path = d / f"{index}.json"
            with open(json_path, "x", encoding="utf-8") as f:
                created.append(json_path)
                json.dump(target, f, ensure_ascii=False)
            png_path = d / f"{index}.png"
            with open(png_path, "xb") as f:
                created.append(png_path)
                f.write(png)
        except (OSError, TypeError, ValueError):
            for path in created:
                path.unlink(missing_ok=True)
            raise
        return index

    async def save(self, device: str, png: bytes, target: Dict[str, Any]) -> int:
        """Store one pair and return its index within the device directory."""
        async with self._lock:
            index = await asyncio.to_thread(self._write_pair, device, png, target)
        logger.info(
            f"save: device={device!r}, index={index}, "
            f"boxes={len(target.get('contentBoxes', []))}, bytes={len(png)}"
        )
        return index


_store: Optional[DatasetStore] = None


def get_store() -> DatasetStore:
    global _store
    if _store is None:
        _store = DatasetStore()
    return _store
