"""Static catalog of models, platform APIs and samples.

The catalog is loaded from YAML files and never mutated afterwards.  Uses
``yaml.safe_load()`` exclusively.

Layout of a catalog directory::

    models.yaml       # list of ModelDetails mappings
    apis.yaml         # list of ApiDefinition mappings (optional)
    samples/*.yaml    # one Sample mapping per file
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import yaml

from samplegen.models import PARENT_MAPPING, ApiDefinition, ModelCategory, ModelDetails, Sample

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)

_YAML_EXTENSIONS = frozenset({".yaml", ".yml"})


class CatalogError(Exception):
    """Raised when a catalog file is missing or malformed."""


class ModelCatalog:
    """In-memory view of the static catalog."""

    def __init__(
        self,
        models: Iterable[ModelDetails] = (),
        samples: Iterable[Sample] = (),
        apis: Iterable[ApiDefinition] = (),
    ) -> None:
        self._models: dict[str, ModelDetails] = {m.id: m for m in models}
        self._samples: dict[str, Sample] = {s.id: s for s in samples}
        self._apis: dict[ModelCategory, ApiDefinition] = {a.category: a for a in apis}

    # -- models -------------------------------------------------------------

    def get_model(self, model_id: str) -> ModelDetails | None:
        return self._models.get(model_id)

    def find_model_by_url(self, url: str) -> ModelDetails | None:
        """Return the first catalog entry declaring *url*, if any."""
        return next((m for m in self._models.values() if m.url == url), None)

    def categories_for(self, model_id: str) -> tuple[ModelCategory, ...]:
        """Return the categories a model belongs to (empty when unknown)."""
        model = self._models.get(model_id)
        return model.categories if model is not None else ()

    def list_models(self) -> list[ModelDetails]:
        return sorted(self._models.values(), key=lambda m: m.id)

    # -- samples ------------------------------------------------------------

    def get_sample(self, sample_id: str) -> Sample | None:
        return self._samples.get(sample_id)

    def list_samples(self) -> list[Sample]:
        return sorted(self._samples.values(), key=lambda s: s.id)

    # -- platform APIs ------------------------------------------------------

    def api_definitions(self) -> list[ApiDefinition]:
        """Return platform API definitions in category-hierarchy order."""
        return [
            self._apis[category]
            for category in PARENT_MAPPING.get(ModelCategory.WCR_APIS, ())
            if category in self._apis
        ]


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _read_yaml(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        msg = f"Malformed YAML in {path}: {exc}"
        raise CatalogError(msg) from exc


def _read_list(path: Path) -> list[Any]:
    data = _read_yaml(path)
    if data is None:
        return []
    if not isinstance(data, list):
        msg = f"{path.name} must contain a YAML list, got: {type(data).__name__}"
        raise CatalogError(msg)
    return data


def load_sample_file(path: Path) -> Sample:
    """Load a single sample YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        CatalogError: If the file is not a YAML mapping.
        pydantic.ValidationError: If the data fails validation.
    """
    if not path.is_file():
        msg = f"Sample file not found: {path}"
        raise FileNotFoundError(msg)
    data = _read_yaml(path)
    if not isinstance(data, dict):
        msg = f"Sample file must contain a YAML mapping, got: {type(data).__name__}"
        raise CatalogError(msg)
    data.setdefault("id", path.stem)
    return Sample.model_validate(data)


def load_samples_directory(directory: Path) -> list[Sample]:
    """Load every sample file in *directory*.

    Files that fail to load are logged and skipped rather than failing the
    whole catalog.
    """
    samples: list[Sample] = []
    for sample_file in sorted(directory.rglob("*")):
        if sample_file.is_file() and sample_file.suffix in _YAML_EXTENSIONS:
            try:
                samples.append(load_sample_file(sample_file))
            except (CatalogError, ValueError, OSError) as exc:
                logger.warning("Failed to load sample %s: %s", sample_file.name, exc)
    return samples


def load_catalog(directory: Path) -> ModelCatalog:
    """Load the catalog stored in *directory*.

    Raises:
        CatalogError: If the directory or its ``models.yaml`` is missing or
            malformed.
    """
    resolved = directory.resolve()
    models_file = resolved / "models.yaml"
    if not models_file.is_file():
        msg = f"Catalog not found: {models_file}"
        raise CatalogError(msg)

    try:
        models = [ModelDetails.model_validate(m) for m in _read_list(models_file)]
        apis_file = resolved / "apis.yaml"
        apis = (
            [ApiDefinition.model_validate(a) for a in _read_list(apis_file)]
            if apis_file.is_file()
            else []
        )
    except ValueError as exc:
        msg = f"Invalid catalog entry in {resolved}: {exc}"
        raise CatalogError(msg) from exc

    samples_dir = resolved / "samples"
    samples = load_samples_directory(samples_dir) if samples_dir.is_dir() else []

    logger.debug(
        "Loaded catalog from %s: %d models, %d samples, %d APIs",
        resolved,
        len(models),
        len(samples),
        len(apis),
    )
    return ModelCatalog(models=models, samples=samples, apis=apis)
