"""Rewrite a sample template into directly runnable source.

A sample template refers to its models through ``sample_params``
placeholders and asks for a chat client with
``await sample_params.get_chat_client_async()``.  :class:`SampleAssembler`
replaces both with literal code for a concrete :class:`ResolvedSelection`.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from samplegen.closure import module_closure
from samplegen.loaders import select_chat_client_loader
from samplegen.models import HardwareAccelerator, ModuleId
from samplegen.prompts import quote, render_prompt_template
from samplegen.selection import check_selection

if TYPE_CHECKING:
    from collections.abc import Callable

    from samplegen.cache import ModelCache
    from samplegen.catalog import ModelCatalog
    from samplegen.models import (
        ModelDetails,
        PromptTemplate,
        ResolvedModel,
        ResolvedSelection,
        Sample,
    )

logger = logging.getLogger(__name__)

ACCELERATOR_PLACEHOLDER = "sample_params.hardware_accelerator"
MODEL_PATH_PLACEHOLDER = "sample_params.model_path"
INDEXED_ACCELERATOR_PLACEHOLDER = "sample_params.hardware_accelerators[{index}]"
INDEXED_MODEL_PATH_PLACEHOLDER = "sample_params.model_paths[{index}]"
CHAT_CLIENT_PLACEHOLDER = "await sample_params.get_chat_client_async()"

# Locator templates use for platform-native models that have no file.
NO_FILE_LOCATOR = "file://PhiSilica"
EMPTY_LOCATOR = '""'

GENAI_INIT_CALL = "GenAIModel.initialize_genai()"

_COMPONENT_INIT_RE = re.compile(
    r"^(?P<indent>[ \t]*)self\.initialize_component\(\)[ \t]*(?P<eol>\r?\n|$)",
    re.MULTILINE,
)


def _replace_token(source: str, token: str, replacement: str) -> str:
    """Replace whole-identifier occurrences of *token* in *source*."""
    pattern = re.compile(r"(?<![\w.])" + re.escape(token) + r"(?![\w\[])")
    return pattern.sub(lambda _m: replacement, source)


def accelerator_literal(accelerator: HardwareAccelerator) -> str:
    return f"HardwareAccelerator.{accelerator.name}"


def line_indent(source: str, index: int) -> str:
    """Return the leading whitespace of the line containing *index*.

    Returns an empty string when there is no line break before *index*.
    """
    line_break = source.rfind("\n", 0, index)
    if line_break == -1:
        return ""
    line = source[line_break + 1 : index]
    return line[: len(line) - len(line.lstrip())]


class SampleAssembler:
    """Substitutes a resolved selection into a sample template.

    Parameters
    ----------
    catalog:
        Static catalog, consulted for prompt templates.
    cache:
        Model cache, last resort for prompt templates of downloaded models.
    remote_host:
        Remote runtime address baked into remote chat clients.
    """

    def __init__(
        self,
        catalog: ModelCatalog,
        cache: ModelCache,
        remote_host: str | None = None,
    ) -> None:
        self._catalog = catalog
        self._cache = cache
        self._remote_host = remote_host

    def render(self, sample: Sample, selection: ResolvedSelection) -> str:
        """Return *sample*'s source with every placeholder substituted.

        Raises:
            InvalidSelectionError: If *selection* does not fill exactly the
                slots *sample* declares.
        """
        check_selection(sample, selection)
        source = self._substitute_slots(sample, selection)
        modules = module_closure(sample.modules, selection)

        index = source.find(CHAT_CLIENT_PLACEHOLDER)
        if index == -1:
            logger.debug("Sample %s does not request a chat client", sample.id)
            return source

        source = self._substitute_chat_client(source, index, selection, modules)

        if ModuleId.GENAI_MODEL in modules:
            source = insert_genai_initialization(source)
        return source

    def _substitute_slots(self, sample: Sample, selection: ResolvedSelection) -> str:
        source = sample.source
        if len(sample.slots) == 1:
            model = selection.primary.model
            source = _replace_token(
                source, ACCELERATOR_PLACEHOLDER, accelerator_literal(model.accelerator)
            )
            return _replace_token(source, MODEL_PATH_PLACEHOLDER, quote(model.path))

        for entry in selection.entries:
            model = entry.model
            source = source.replace(
                INDEXED_ACCELERATOR_PLACEHOLDER.format(index=entry.slot_index),
                accelerator_literal(model.accelerator),
            )
            source = source.replace(
                INDEXED_MODEL_PATH_PLACEHOLDER.format(index=entry.slot_index),
                quote(model.path),
            )
        return source

    def _substitute_chat_client(
        self,
        source: str,
        index: int,
        selection: ResolvedSelection,
        modules: frozenset[ModuleId],
    ) -> str:
        primary = selection.primary
        indent = line_indent(source, index)

        if primary.model.accelerator == HardwareAccelerator.WCRAPI:
            source = source.replace(quote(NO_FILE_LOCATOR), EMPTY_LOCATOR)

        prompt_template = render_prompt_template(self.find_prompt_template(primary.model), indent)
        loader = select_chat_client_loader(
            modules,
            primary.model,
            primary.category,
            prompt_template,
            remote_host=self._remote_host,
        )
        if loader is None:
            logger.debug("No chat client loader for %s", primary.model.id)
            return source
        return source.replace(CHAT_CLIENT_PLACEHOLDER, loader.source)

    def find_prompt_template(self, model: ResolvedModel) -> PromptTemplate | None:
        """Return the first prompt template found for *model*.

        Looks in the catalog by model id, then in the catalog by URL, then
        in the model cache by URL.
        """
        lookups: tuple[Callable[[], PromptTemplate | None], ...] = (
            lambda: _template_of(self._catalog.get_model(model.id)),
            lambda: _template_of(self._catalog.find_model_by_url(model.url)),
            lambda: _cached_template(self._cache, model.url),
        )
        return next((t for t in (lookup() for lookup in lookups) if t is not None), None)


def _template_of(details: ModelDetails | None) -> PromptTemplate | None:
    return details.prompt_template if details is not None else None


def _cached_template(cache: ModelCache, url: str) -> PromptTemplate | None:
    cached = cache.get_cached_model(url)
    if cached is None:
        return None
    return _template_of(cached.details)


def insert_genai_initialization(source: str) -> str:
    """Add the runtime initialization call after the first component init.

    The new line reuses the indentation and line terminator of the
    ``self.initialize_component()`` line.  No match leaves *source* as is.
    """

    def _insert(match: re.Match[str]) -> str:
        indent = match.group("indent")
        eol = match.group("eol")
        if eol:
            return f"{match.group(0)}{indent}{GENAI_INIT_CALL}{eol}"
        return f"{match.group(0)}\n{indent}{GENAI_INIT_CALL}"

    return _COMPONENT_INIT_RE.sub(_insert, source, count=1)
