"""Tests for samplegen.exporter -- writing a sample out as a project."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from samplegen.engine import SampleEngine
from samplegen.exporter import SAMPLE_FILE, ProjectExporter

if TYPE_CHECKING:
    from pathlib import Path

    from samplegen.cache import InMemoryModelCache
    from samplegen.catalog import ModelCatalog
    from samplegen.models import ModelDetails, ResolvedSelection, Sample

REQUIREMENTS_FILE = "requirements.txt"
README_FILE = "README.md"


@pytest.fixture
def engine(catalog: ModelCatalog, cache: InMemoryModelCache) -> SampleEngine:
    return SampleEngine(catalog, cache)


@pytest.fixture
def rag_selection(
    engine: SampleEngine,
    rag_sample: Sample,
    phi3_model: ModelDetails,
    minilm_model: ModelDetails,
) -> ResolvedSelection:
    selection = engine.resolve_selection(rag_sample, [phi3_model, minilm_model])
    assert selection is not None
    return selection


class TestProjectExporter:
    def test_writes_project_files(
        self,
        engine: SampleEngine,
        rag_sample: Sample,
        rag_selection: ResolvedSelection,
        tmp_path: Path,
    ) -> None:
        target = tmp_path / "rag"
        result = ProjectExporter(engine).export(rag_sample, rag_selection, target)

        assert result.directory == target
        assert [p.name for p in result.files] == [SAMPLE_FILE, README_FILE, REQUIREMENTS_FILE]
        assert (target / SAMPLE_FILE).read_text() == engine.render_sample(
            rag_sample, rag_selection
        )
        assert result.modules == ("genai_model", "llm_prompt_template")
        assert result.dependencies == ("numpy", "onnxruntime-genai-directml")

    def test_requirements_list_dependency_closure(
        self,
        engine: SampleEngine,
        rag_sample: Sample,
        rag_selection: ResolvedSelection,
        tmp_path: Path,
    ) -> None:
        ProjectExporter(engine).export(rag_sample, rag_selection, tmp_path / "out")
        requirements = (tmp_path / "out" / REQUIREMENTS_FILE).read_text()
        assert requirements == "numpy\nonnxruntime-genai-directml\n"

    def test_readme_lists_models_and_modules(
        self,
        engine: SampleEngine,
        rag_sample: Sample,
        rag_selection: ResolvedSelection,
        tmp_path: Path,
    ) -> None:
        ProjectExporter(engine).export(rag_sample, rag_selection, tmp_path / "out")
        readme = (tmp_path / "out" / README_FILE).read_text()
        assert readme.startswith("# RAG\n")
        assert "- `phi3-dml` (language_models, DML)" in readme
        assert "- `minilm` (embeddings, CPU)" in readme
        assert "- `genai_model.py`" in readme
        assert "- `llm_prompt_template.py`" in readme

    def test_readme_without_helper_modules(
        self,
        engine: SampleEngine,
        chat_sample: Sample,
        ollama_model: ModelDetails,
        tmp_path: Path,
    ) -> None:
        selection = engine.resolve_selection(chat_sample, [ollama_model])
        assert selection is not None
        ProjectExporter(engine).export(chat_sample, selection, tmp_path / "out")
        readme = (tmp_path / "out" / README_FILE).read_text()
        assert "None." in readme
        assert (tmp_path / "out" / REQUIREMENTS_FILE).read_text() == "ollama\n"

    def test_refuses_non_empty_directory(
        self,
        engine: SampleEngine,
        rag_sample: Sample,
        rag_selection: ResolvedSelection,
        tmp_path: Path,
    ) -> None:
        (tmp_path / "keep.txt").write_text("mine")
        with pytest.raises(FileExistsError, match="not empty"):
            ProjectExporter(engine).export(rag_sample, rag_selection, tmp_path)
        assert not (tmp_path / SAMPLE_FILE).exists()

    def test_overwrite_allows_non_empty_directory(
        self,
        engine: SampleEngine,
        rag_sample: Sample,
        rag_selection: ResolvedSelection,
        tmp_path: Path,
    ) -> None:
        (tmp_path / "keep.txt").write_text("mine")
        ProjectExporter(engine).export(rag_sample, rag_selection, tmp_path, overwrite=True)
        assert (tmp_path / SAMPLE_FILE).is_file()
        assert (tmp_path / "keep.txt").read_text() == "mine"
