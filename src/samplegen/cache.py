"""Read-only access to the local model cache.

The engine only ever asks one question of the cache: where does a model URL
live on disk, if anywhere.  :class:`ModelCache` is that interface;
:class:`FileModelCache` answers it from the JSON index written by the
downloader.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import ValidationError

from samplegen.models import CachedModel

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@runtime_checkable
class ModelCache(Protocol):
    """Lookup of downloaded models by URL.

    A missing model is a normal outcome and yields None.
    """

    def get_cached_model(self, url: str) -> CachedModel | None:
        """Return the cache record for *url*, or None if not downloaded."""
        ...


class InMemoryModelCache:
    """Model cache backed by a dict, keyed by model URL."""

    def __init__(self, models: list[CachedModel] | None = None) -> None:
        self._models: dict[str, CachedModel] = {m.url: m for m in models or []}

    def add(self, model: CachedModel) -> None:
        self._models[model.url] = model

    def get_cached_model(self, url: str) -> CachedModel | None:
        return self._models.get(url)

    def __len__(self) -> int:
        return len(self._models)


class FileModelCache(InMemoryModelCache):
    """Model cache read from a JSON index file.

    The index has the shape ``{"models": [{"path": ..., "url": ..., "size":
    ..., "details": {...}}]}``.  A missing index is an empty cache; entries
    that fail validation are logged and skipped.
    """

    def __init__(self, index_path: Path) -> None:
        super().__init__()
        self._index_path = index_path
        for entry in self._read_index():
            try:
                self.add(CachedModel.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping malformed cache entry in %s: %s", index_path, exc)

    def _read_index(self) -> list[Any]:
        if not self._index_path.is_file():
            logger.debug("Model cache index %s not found, cache is empty", self._index_path)
            return []
        data: Any = json.loads(self._index_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict) or not isinstance(data.get("models", []), list):
            msg = f"Model cache index must be an object with a 'models' list: {self._index_path}"
            raise ValueError(msg)
        return list(data.get("models", []))
