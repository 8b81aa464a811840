"""Pydantic models and enums for samplegen."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class HardwareAccelerator(StrEnum):
    """Execution backends a model can run on."""

    CPU = "cpu"
    DML = "dml"
    QNN = "qnn"
    NPU = "npu"
    OLLAMA = "ollama"
    WCRAPI = "wcrapi"


class ModelCategory(StrEnum):
    """Model categories; see :data:`PARENT_MAPPING` for the hierarchy."""

    LANGUAGE_MODELS = "language_models"
    PHI3 = "phi3"
    PHI35 = "phi35"
    LLAMA = "llama"
    MISTRAL = "mistral"
    PHI_SILICA = "phi_silica"
    EMBEDDINGS = "embeddings"
    MINILM = "minilm"
    BGE = "bge"
    IMAGE_MODELS = "image_models"
    RESNET = "resnet"
    YOLO = "yolo"
    AUDIO_MODELS = "audio_models"
    WHISPER = "whisper"
    WCR_APIS = "wcr_apis"
    TEXT_RECOGNITION = "text_recognition"
    IMAGE_DESCRIPTION = "image_description"


# Parent category -> ordered children.
PARENT_MAPPING: dict[ModelCategory, tuple[ModelCategory, ...]] = {
    ModelCategory.LANGUAGE_MODELS: (
        ModelCategory.PHI3,
        ModelCategory.PHI35,
        ModelCategory.LLAMA,
        ModelCategory.MISTRAL,
        ModelCategory.PHI_SILICA,
    ),
    ModelCategory.EMBEDDINGS: (ModelCategory.MINILM, ModelCategory.BGE),
    ModelCategory.IMAGE_MODELS: (ModelCategory.RESNET, ModelCategory.YOLO),
    ModelCategory.AUDIO_MODELS: (ModelCategory.WHISPER,),
    ModelCategory.WCR_APIS: (
        ModelCategory.PHI_SILICA,
        ModelCategory.TEXT_RECOGNITION,
        ModelCategory.IMAGE_DESCRIPTION,
    ),
}


def parents_of(category: ModelCategory) -> tuple[ModelCategory, ...]:
    """Return the direct parents of *category*."""
    return tuple(parent for parent, children in PARENT_MAPPING.items() if category in children)


def is_a(category: ModelCategory, ancestor: ModelCategory) -> bool:
    """Return True if *category* equals *ancestor* or descends from it."""
    if category == ancestor:
        return True
    return any(is_a(parent, ancestor) for parent in parents_of(category))


class ModuleId(StrEnum):
    """Helper modules a rendered sample can ship with."""

    GENAI_MODEL = "genai_model"
    LLM_PROMPT_TEMPLATE = "llm_prompt_template"
    PHI_SILICA_CLIENT = "phi_silica_client"
    DEVICE_UTILS = "device_utils"
    NATIVE_METHODS = "native_methods"
    IMAGE_UTILS = "image_utils"
    EMBEDDING_GENERATOR = "embedding_generator"
    CHAT_HISTORY = "chat_history"


class PromptTemplate(BaseModel):
    """Chat prompt template attached to a language model."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    system: str | None = None
    user: str | None = None
    assistant: str | None = None
    stop: tuple[str, ...] | None = None


class ModelDetails(BaseModel):
    """Catalog entry (or user-chosen descriptor) for a model."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str
    url: str
    size: int = 0
    accelerators: tuple[HardwareAccelerator, ...] = ()
    categories: tuple[ModelCategory, ...] = ()
    prompt_template: PromptTemplate | None = None
    license: str | None = None

    @property
    def is_api(self) -> bool:
        """API and remote-hosted models have no local payload."""
        return self.size == 0


class ApiDefinition(BaseModel):
    """Display metadata for a platform API category."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    category: ModelCategory
    name: str
    icon_glyph: str = ""
    description: str | None = None


class ModelSlot(BaseModel):
    """A declared model position in a sample, with its acceptable categories."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    categories: tuple[ModelCategory, ...]

    @field_validator("categories")
    @classmethod
    def _require_categories(cls, v: tuple[ModelCategory, ...]) -> tuple[ModelCategory, ...]:
        if not v:
            msg = "A model slot must accept at least one category"
            raise ValueError(msg)
        return v

    def accepts(self, categories: tuple[ModelCategory, ...]) -> ModelCategory | None:
        """Return the first slot category satisfied by any of *categories*."""
        for slot_category in self.categories:
            if any(is_a(c, slot_category) for c in categories):
                return slot_category
        return None


class Sample(BaseModel):
    """Immutable sample template record."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str
    description: str | None = None
    source: str
    modules: frozenset[ModuleId] = frozenset()
    dependencies: frozenset[str] = frozenset()
    slots: tuple[ModelSlot, ...]

    @field_validator("slots")
    @classmethod
    def _validate_slot_count(cls, v: tuple[ModelSlot, ...]) -> tuple[ModelSlot, ...]:
        if not 1 <= len(v) <= 2:
            msg = f"A sample declares one or two model slots, got {len(v)}"
            raise ValueError(msg)
        return v


class CachedModel(BaseModel):
    """A model present in the local model cache."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    url: str
    size: int
    details: ModelDetails | None = None


class ResolvedModel(BaseModel):
    """A model bound to a concrete locator and accelerator."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    path: str
    url: str
    size: int
    accelerator: HardwareAccelerator

    @property
    def is_api(self) -> bool:
        return self.size == 0


class SelectedModel(BaseModel):
    """A resolved model assigned to one sample slot."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    slot_index: int
    category: ModelCategory
    model: ResolvedModel


class ResolvedSelection(BaseModel):
    """Slot-ordered models chosen for one render request."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    entries: tuple[SelectedModel, ...]

    @field_validator("entries")
    @classmethod
    def _order_entries(cls, v: tuple[SelectedModel, ...]) -> tuple[SelectedModel, ...]:
        if not 1 <= len(v) <= 2:
            msg = f"A selection holds one or two models, got {len(v)}"
            raise ValueError(msg)
        indexes = [e.slot_index for e in v]
        if len(set(indexes)) != len(indexes):
            msg = f"Duplicate slot index in selection: {indexes}"
            raise ValueError(msg)
        return tuple(sorted(v, key=lambda e: e.slot_index))

    @property
    def primary(self) -> SelectedModel:
        return self.entries[0]

    @property
    def models(self) -> tuple[ResolvedModel, ...]:
        return tuple(e.model for e in self.entries)

    @property
    def categories(self) -> tuple[ModelCategory, ...]:
        return tuple(e.category for e in self.entries)

    def any_is_a(self, ancestor: ModelCategory) -> bool:
        """Return True if any selected slot category descends from *ancestor*."""
        return any(is_a(c, ancestor) for c in self.categories)

    def uses_accelerator(self, accelerator: HardwareAccelerator) -> bool:
        return any(m.accelerator == accelerator for m in self.models)
