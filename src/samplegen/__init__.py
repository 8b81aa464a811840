"""samplegen - render runnable AI model samples."""

from __future__ import annotations

__version__ = "0.1.0"

from samplegen.catalog import ModelCatalog, load_catalog
from samplegen.engine import SampleEngine
from samplegen.models import ResolvedSelection, Sample
from samplegen.selection import InvalidSelectionError

__all__ = [
    "__version__",
    "InvalidSelectionError",
    "ModelCatalog",
    "ResolvedSelection",
    "Sample",
    "SampleEngine",
    "load_catalog",
]
