"""Read-only key/value stores for overlay image bytes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class OverlayStore(Protocol):
    def get(self, key: str) -> bytes | None:
        """Return the bytes stored under ``key``, or None if absent."""


class DirectoryOverlayStore:
    """Overlays stored as ``<root>/<key>.png`` files."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def get(self, key: str) -> bytes | None:
        root = self.root.resolve()
        path = (root / f"{key}.png").resolve()
        if root not in path.parents:
            logger.warning("rejected overlay key outside store: %r", key)
            return None
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None


class MemoryOverlayStore:
    def __init__(self, items: Mapping[str, bytes] | None = None):
        self._items = dict(items or {})

    def get(self, key: str) -> bytes | None:
        return self._items.get(key)
