"""In-memory classification cache keyed by fully-qualified class name."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from layerdog.rules.models import Layer


class ClassificationCache:
    """Unbounded memo of class name -> layer.

    There is no per-entry invalidation: the whole cache is dropped when the
    rule document is replaced.  Each clear bumps a generation counter, and a
    ``put`` carrying an older generation is discarded, so a result computed
    against the previous document cannot land after the clear.
    """

    def __init__(self) -> None:
        self._store: dict[str, Layer] = {}
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    def get(self, qualified_name: str) -> Layer | None:
        """Return the cached layer, or None on a miss."""
        return self._store.get(qualified_name)

    def put(self, qualified_name: str, layer: Layer, *, generation: int | None = None) -> bool:
        """Store a result. Returns False if it was computed before the last clear."""
        with self._lock:
            if generation is not None and generation != self._generation:
                return False
            self._store[qualified_name] = layer
            return True

    def clear(self) -> None:
        """Drop every entry (e.g., after the rule document is reloaded)."""
        with self._lock:
            self._store = {}
            self._generation += 1

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, qualified_name: object) -> bool:
        return qualified_name in self._store

    def stats(self) -> dict[str, int]:
        """Return cache statistics."""
        return {"entries": len(self._store), "generation": self._generation}
