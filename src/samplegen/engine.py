"""Sample materialization engine.

:class:`SampleEngine` is the single entry point for the UI and export
layers.  It holds no state between calls; the catalog, model cache and
settings are injected so every render is a pure function of its inputs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from samplegen.assembler import SampleAssembler
from samplegen.closure import dependency_closure, module_closure
from samplegen.config import get_settings
from samplegen.selection import SelectionResolver, check_selection

if TYPE_CHECKING:
    from collections.abc import Sequence

    from samplegen.cache import ModelCache
    from samplegen.catalog import ModelCatalog
    from samplegen.config import SamplegenSettings
    from samplegen.models import ModelDetails, ModuleId, ResolvedSelection, Sample


class SampleEngine:
    """Computes closures and rendered source for a sample and model selection.

    Parameters
    ----------
    catalog:
        The static model and sample catalog.
    cache:
        The local model cache.
    settings:
        Application settings; supplies the remote runtime address.
        Defaults to :func:`~samplegen.config.get_settings`.
    """

    def __init__(
        self,
        catalog: ModelCatalog,
        cache: ModelCache,
        settings: SamplegenSettings | None = None,
    ) -> None:
        self._catalog = catalog
        self._cache = cache
        resolved = settings if settings is not None else get_settings()
        self._assembler = SampleAssembler(catalog, cache, remote_host=resolved.ollama_host)
        self._resolver = SelectionResolver(catalog, cache)

    @property
    def catalog(self) -> ModelCatalog:
        return self._catalog

    def resolve_selection(
        self, sample: Sample, descriptors: Sequence[ModelDetails | None]
    ) -> ResolvedSelection | None:
        """Bind 1 or 2 chosen models to *sample*'s slots (None if not ready).

        Raises
        ------
        InvalidSelectionError
            If *descriptors* is empty or has more than two entries.
        """
        return self._resolver.resolve(sample, descriptors)

    def module_closure(self, sample: Sample, selection: ResolvedSelection) -> frozenset[ModuleId]:
        check_selection(sample, selection)
        return module_closure(sample.modules, selection)

    def dependency_closure(self, sample: Sample, selection: ResolvedSelection) -> frozenset[str]:
        check_selection(sample, selection)
        modules = module_closure(sample.modules, selection)
        return dependency_closure(sample.dependencies, selection, modules)

    def render_sample(self, sample: Sample, selection: ResolvedSelection) -> str:
        """Return *sample*'s runnable source for *selection*.

        Raises
        ------
        InvalidSelectionError
            If *selection* does not hold exactly one model per sample slot.
        """
        return self._assembler.render(sample, selection)
