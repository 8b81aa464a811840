"""Tests for samplegen.cache -- the read-only model cache."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from samplegen.cache import FileModelCache, InMemoryModelCache, ModelCache
from samplegen.models import CachedModel

if TYPE_CHECKING:
    from pathlib import Path


def _write_index(path: Path, models: list[dict[str, object]]) -> Path:
    path.write_text(json.dumps({"models": models}))
    return path


class TestInMemoryModelCache:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(InMemoryModelCache(), ModelCache)

    def test_lookup_by_url(self) -> None:
        model = CachedModel(path="/m/a", url="https://hf.example/a", size=1)
        cache = InMemoryModelCache([model])
        assert cache.get_cached_model("https://hf.example/a") is model
        assert cache.get_cached_model("https://hf.example/b") is None
        assert len(cache) == 1


class TestFileModelCache:
    def test_missing_index_is_empty_cache(self, tmp_path: Path) -> None:
        cache = FileModelCache(tmp_path / "cache.json")
        assert len(cache) == 0
        assert cache.get_cached_model("https://hf.example/a") is None

    def test_loads_entries_with_details(self, tmp_path: Path) -> None:
        index = _write_index(
            tmp_path / "cache.json",
            [
                {
                    "path": "/models/custom",
                    "url": "https://hf.example/custom",
                    "size": 42,
                    "details": {
                        "id": "custom",
                        "name": "Custom",
                        "url": "https://hf.example/custom",
                        "prompt_template": {"system": "be brief"},
                    },
                }
            ],
        )
        cached = FileModelCache(index).get_cached_model("https://hf.example/custom")
        assert cached is not None
        assert cached.path == "/models/custom"
        assert cached.size == 42
        assert cached.details is not None
        assert cached.details.prompt_template is not None
        assert cached.details.prompt_template.system == "be brief"

    def test_malformed_entry_skipped(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        index = _write_index(
            tmp_path / "cache.json",
            [
                {"path": "/models/a", "url": "https://hf.example/a", "size": 1},
                {"path": "/models/b"},
            ],
        )
        with caplog.at_level("WARNING"):
            cache = FileModelCache(index)
        assert len(cache) == 1
        assert "Skipping malformed cache entry" in caplog.text

    def test_index_must_be_object(self, tmp_path: Path) -> None:
        index = tmp_path / "cache.json"
        index.write_text("[]")
        with pytest.raises(ValueError, match="'models' list"):
            FileModelCache(index)
