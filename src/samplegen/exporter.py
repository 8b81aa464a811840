"""Write a rendered sample out as a standalone project directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from samplegen.templates.engine import TemplateEngine

if TYPE_CHECKING:
    from pathlib import Path

    from samplegen.engine import SampleEngine
    from samplegen.models import ResolvedSelection, Sample

logger = logging.getLogger(__name__)

SAMPLE_FILE = "sample.py"


@dataclass(frozen=True)
class ExportResult:
    """Files written by :meth:`ProjectExporter.export`."""

    directory: Path
    files: tuple[Path, ...]
    modules: tuple[str, ...]
    dependencies: tuple[str, ...]


class ProjectExporter:
    """Exports a sample and its resolved selection to a directory.

    Writes the rendered sample as ``sample.py`` next to the files produced
    by the project templates: a ``requirements.txt`` built from the
    dependency closure and a README listing the helper modules.
    """

    def __init__(self, engine: SampleEngine, templates: TemplateEngine | None = None) -> None:
        self._engine = engine
        self._templates = templates if templates is not None else TemplateEngine()

    def export(
        self,
        sample: Sample,
        selection: ResolvedSelection,
        target: Path,
        *,
        overwrite: bool = False,
    ) -> ExportResult:
        """Write the project files for *sample* into *target*.

        Raises
        ------
        FileExistsError
            If *target* exists and is not empty and *overwrite* is False.
        """
        if target.exists() and any(target.iterdir()) and not overwrite:
            msg = f"Export directory is not empty: {target}"
            raise FileExistsError(msg)
        target.mkdir(parents=True, exist_ok=True)

        modules = tuple(sorted(self._engine.module_closure(sample, selection)))
        dependencies = tuple(sorted(self._engine.dependency_closure(sample, selection)))
        context = {
            "sample": sample,
            "selection": selection,
            "modules": [str(m) for m in modules],
            "dependencies": list(dependencies),
        }

        contents = {
            SAMPLE_FILE: self._engine.render_sample(sample, selection),
            **self._templates.render_project(context),
        }
        written: list[Path] = []
        for name, text in contents.items():
            path = target / name
            path.write_text(text, encoding="utf-8")
            written.append(path)

        logger.info("Exported sample %s to %s", sample.id, target)
        return ExportResult(
            directory=target,
            files=tuple(written),
            modules=tuple(str(m) for m in modules),
            dependencies=dependencies,
        )
