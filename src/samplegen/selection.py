"""Map user-chosen model descriptors onto a sample's model slots."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from samplegen.models import HardwareAccelerator, ResolvedModel, ResolvedSelection, SelectedModel

if TYPE_CHECKING:
    from samplegen.cache import ModelCache
    from samplegen.catalog import ModelCatalog
    from samplegen.models import ModelCategory, ModelDetails, Sample

logger = logging.getLogger(__name__)

MAX_DESCRIPTORS = 2


class InvalidSelectionError(ValueError):
    """Raised for a bad descriptor count or a selection that misses a sample's slots."""


def check_selection(sample: Sample, selection: ResolvedSelection) -> None:
    """Check that *selection* holds exactly one entry per slot of *sample*.

    Raises:
        InvalidSelectionError: If the entry slot indexes are not
            ``0 .. len(sample.slots) - 1``.
    """
    indexes = [e.slot_index for e in selection.entries]
    expected = list(range(len(sample.slots)))
    if indexes != expected:
        msg = (
            f"Selection fills slots {indexes} but sample {sample.id!r} "
            f"declares slots {expected}"
        )
        raise InvalidSelectionError(msg)


class SelectionResolver:
    """Builds a :class:`ResolvedSelection` from descriptors and the model cache.

    Parameters
    ----------
    catalog:
        Static catalog, used to look up the categories of a chosen model.
    cache:
        Local model cache, used to find downloaded models.
    """

    def __init__(self, catalog: ModelCatalog, cache: ModelCache) -> None:
        self._catalog = catalog
        self._cache = cache

    def resolve(
        self, sample: Sample, descriptors: Sequence[ModelDetails | None]
    ) -> ResolvedSelection | None:
        """Resolve *descriptors* against *sample*'s slots.

        Returns
        -------
        ResolvedSelection | None
            The selection, or None when a required model is not selected or
            not downloaded yet.

        Raises
        ------
        InvalidSelectionError
            If *descriptors* is empty or has more than two entries.
        """
        if not descriptors:
            msg = "No model details provided"
            raise InvalidSelectionError(msg)
        if len(descriptors) > MAX_DESCRIPTORS:
            msg = f"More than {MAX_DESCRIPTORS} model details provided"
            raise InvalidSelectionError(msg)

        wanted = list(descriptors[: len(sample.slots)])
        wanted.extend([None] * (len(sample.slots) - len(wanted)))

        entries: list[SelectedModel] = []
        for descriptor in wanted:
            if descriptor is None:
                logger.debug("Sample %s: slot model not selected", sample.id)
                return None
            resolved = self._resolve_model(descriptor)
            if resolved is None:
                logger.debug("Sample %s: %s not in model cache", sample.id, descriptor.url)
                return None
            taken = {e.slot_index for e in entries}
            slot_index, category = self._assign_slot(sample, descriptor, taken)
            logger.debug(
                "Sample %s: %s assigned to slot %d (%s)",
                sample.id,
                descriptor.id,
                slot_index,
                category,
            )
            entries.append(SelectedModel(slot_index=slot_index, category=category, model=resolved))

        return ResolvedSelection(entries=tuple(entries))

    def _resolve_model(self, descriptor: ModelDetails) -> ResolvedModel | None:
        accelerator = (
            descriptor.accelerators[0] if descriptor.accelerators else HardwareAccelerator.CPU
        )
        if descriptor.is_api:
            return ResolvedModel(
                id=descriptor.id,
                path=descriptor.url,
                url=descriptor.url,
                size=0,
                accelerator=accelerator,
            )

        cached = self._cache.get_cached_model(descriptor.url)
        if cached is None:
            return None
        return ResolvedModel(
            id=descriptor.id,
            path=cached.path,
            url=cached.url,
            size=cached.size,
            accelerator=accelerator,
        )

    def _assign_slot(
        self, sample: Sample, descriptor: ModelDetails, taken: set[int]
    ) -> tuple[int, ModelCategory]:
        """Pick the first free slot accepting the model's catalog categories.

        Descriptors unknown to the catalog are matched on their own
        categories.  Falls back to the first free slot, matched on its first
        category.
        """
        categories = self._catalog.categories_for(descriptor.id) or descriptor.categories
        free = [(i, slot) for i, slot in enumerate(sample.slots) if i not in taken]
        for index, slot in free:
            matched = slot.accepts(categories)
            if matched is not None:
                return index, matched
        index, slot = free[0]
        return index, slot.categories[0]
