"""Shared test fixtures for samplegen."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from samplegen.cache import InMemoryModelCache
from samplegen.catalog import ModelCatalog
from samplegen.config import _clear_settings_cache
from samplegen.models import (
    CachedModel,
    HardwareAccelerator,
    ModelCategory,
    ModelDetails,
    ModelSlot,
    PromptTemplate,
    ResolvedModel,
    ResolvedSelection,
    Sample,
    SelectedModel,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

PHI3_URL = "https://huggingface.co/microsoft/Phi-3-mini-4k-instruct-onnx/directml"
MINILM_URL = "https://huggingface.co/optimum/all-MiniLM-L6-v2"


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Start every test without environment overrides or cached settings."""
    for name in (
        "OLLAMA_HOST",
        "SAMPLEGEN_OLLAMA_HOST",
        "SAMPLEGEN_LOG_LEVEL",
        "SAMPLEGEN_CATALOG_DIR",
        "SAMPLEGEN_CACHE_INDEX",
    ):
        monkeypatch.delenv(name, raising=False)
    _clear_settings_cache()
    yield
    _clear_settings_cache()


@pytest.fixture
def phi3_template() -> PromptTemplate:
    return PromptTemplate(user="[INST]{{CONTENT}}[/INST]", stop=("</s>",))


@pytest.fixture
def phi3_model(phi3_template: PromptTemplate) -> ModelDetails:
    """A local language model that has to be downloaded."""
    return ModelDetails(
        id="phi3-dml",
        name="Phi 3 DirectML",
        url=PHI3_URL,
        size=2_000_000_000,
        accelerators=(HardwareAccelerator.DML,),
        categories=(ModelCategory.PHI3,),
        prompt_template=phi3_template,
    )


@pytest.fixture
def ollama_model() -> ModelDetails:
    """A language model served by a remote runtime."""
    return ModelDetails(
        id="ollama-llama3",
        name="Llama 3 (Ollama)",
        url="ollama/llama3",
        size=0,
        accelerators=(HardwareAccelerator.OLLAMA,),
        categories=(ModelCategory.LLAMA,),
    )


@pytest.fixture
def phi_silica_model() -> ModelDetails:
    """The platform-native language model."""
    return ModelDetails(
        id="phi-silica",
        name="Phi Silica",
        url="file://PhiSilica",
        size=0,
        accelerators=(HardwareAccelerator.WCRAPI,),
        categories=(ModelCategory.PHI_SILICA,),
    )


@pytest.fixture
def minilm_model() -> ModelDetails:
    """A local embedding model."""
    return ModelDetails(
        id="minilm",
        name="MiniLM",
        url=MINILM_URL,
        size=90_000_000,
        accelerators=(HardwareAccelerator.CPU, HardwareAccelerator.DML),
        categories=(ModelCategory.MINILM,),
    )


@pytest.fixture
def catalog(
    phi3_model: ModelDetails,
    ollama_model: ModelDetails,
    phi_silica_model: ModelDetails,
    minilm_model: ModelDetails,
) -> ModelCatalog:
    return ModelCatalog(models=[phi3_model, ollama_model, phi_silica_model, minilm_model])


@pytest.fixture
def cache() -> InMemoryModelCache:
    """A cache holding the two local test models."""
    return InMemoryModelCache(
        [
            CachedModel(path="/models/phi3", url=PHI3_URL, size=2_000_000_000),
            CachedModel(path="/models/minilm", url=MINILM_URL, size=90_000_000),
        ]
    )


@pytest.fixture
def chat_sample() -> Sample:
    return Sample(
        id="chat",
        name="Chat",
        source="self.client = await sample_params.get_chat_client_async()\n",
        slots=(ModelSlot(categories=(ModelCategory.LANGUAGE_MODELS,)),),
    )


@pytest.fixture
def rag_sample() -> Sample:
    return Sample(
        id="rag",
        name="RAG",
        source="self.client = await sample_params.get_chat_client_async()\n",
        modules=frozenset(),
        dependencies=frozenset({"numpy"}),
        slots=(
            ModelSlot(categories=(ModelCategory.LANGUAGE_MODELS,)),
            ModelSlot(categories=(ModelCategory.EMBEDDINGS,)),
        ),
    )


@pytest.fixture
def make_resolved() -> Callable[..., ResolvedModel]:
    """Build a ResolvedModel; size 0 marks an API model."""

    def _make(
        id: str = "model",
        *,
        path: str = "/models/model",
        url: str | None = None,
        size: int = 1000,
        accelerator: HardwareAccelerator = HardwareAccelerator.DML,
    ) -> ResolvedModel:
        return ResolvedModel(
            id=id,
            path=path,
            url=url if url is not None else path,
            size=size,
            accelerator=accelerator,
        )

    return _make


@pytest.fixture
def make_selection() -> Callable[..., ResolvedSelection]:
    """Build a selection from ``(category, ResolvedModel)`` pairs in slot order."""

    def _make(*pairs: tuple[ModelCategory, ResolvedModel]) -> ResolvedSelection:
        return ResolvedSelection(
            entries=tuple(
                SelectedModel(slot_index=i, category=category, model=model)
                for i, (category, model) in enumerate(pairs)
            )
        )

    return _make
