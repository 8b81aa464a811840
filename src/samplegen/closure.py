"""Module and dependency closure for rendered samples.

Both closures are computed by running an ordered tuple of implication rules
over a growing set until nothing new is added.  Rules only ever add
members, so the fixed point does not depend on rule order and re-closing an
already-closed set is a no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, TypeAlias

from samplegen.models import HardwareAccelerator, ModelCategory, ModuleId

if TYPE_CHECKING:
    from samplegen.models import ResolvedSelection

logger = logging.getLogger(__name__)

OLLAMA_DEPENDENCY = "ollama"
GENAI_DEPENDENCY = "onnxruntime-genai-directml"
NATIVE_INTEROP_DEPENDENCY = "cffi"

ModuleRule: TypeAlias = (
    "Callable[[frozenset[ModuleId], ResolvedSelection], Iterable[ModuleId]]"
)
DependencyRule: TypeAlias = (
    "Callable[[frozenset[str], ResolvedSelection, frozenset[ModuleId]], Iterable[str]]"
)


# ---------------------------------------------------------------------------
# Module rules
# ---------------------------------------------------------------------------


def _language_model_client(
    modules: frozenset[ModuleId], selection: ResolvedSelection
) -> Iterable[ModuleId]:
    if not selection.any_is_a(ModelCategory.LANGUAGE_MODELS):
        return ()
    if selection.uses_accelerator(HardwareAccelerator.WCRAPI):
        return (ModuleId.PHI_SILICA_CLIENT,)
    if not any(m.is_api for m in selection.models):
        return (ModuleId.GENAI_MODEL,)
    return ()


def _prompt_template_support(
    modules: frozenset[ModuleId], selection: ResolvedSelection
) -> Iterable[ModuleId]:
    if ModuleId.GENAI_MODEL in modules:
        return (ModuleId.LLM_PROMPT_TEMPLATE,)
    return ()


def _native_methods(
    modules: frozenset[ModuleId], selection: ResolvedSelection
) -> Iterable[ModuleId]:
    if ModuleId.DEVICE_UTILS in modules:
        return (ModuleId.NATIVE_METHODS,)
    return ()


MODULE_RULES: tuple[ModuleRule, ...] = (
    _language_model_client,
    _prompt_template_support,
    _native_methods,
)


# ---------------------------------------------------------------------------
# Dependency rules
# ---------------------------------------------------------------------------


def _language_model_runtime(
    dependencies: frozenset[str],
    selection: ResolvedSelection,
    modules: frozenset[ModuleId],
) -> Iterable[str]:
    if not selection.any_is_a(ModelCategory.LANGUAGE_MODELS):
        return ()
    if selection.uses_accelerator(HardwareAccelerator.OLLAMA):
        return (OLLAMA_DEPENDENCY,)
    return (GENAI_DEPENDENCY,)


def _native_interop_codegen(
    dependencies: frozenset[str],
    selection: ResolvedSelection,
    modules: frozenset[ModuleId],
) -> Iterable[str]:
    if ModuleId.NATIVE_METHODS in modules:
        return (NATIVE_INTEROP_DEPENDENCY,)
    return ()


DEPENDENCY_RULES: tuple[DependencyRule, ...] = (
    _language_model_runtime,
    _native_interop_codegen,
)


# ---------------------------------------------------------------------------
# Closures
# ---------------------------------------------------------------------------


def module_closure(
    declared: Iterable[ModuleId],
    selection: ResolvedSelection,
    rules: tuple[ModuleRule, ...] = MODULE_RULES,
) -> frozenset[ModuleId]:
    """Return the smallest superset of *declared* satisfying all module rules."""
    closed = frozenset(declared)
    while True:
        grown = closed.union(*(rule(closed, selection) for rule in rules))
        if grown == closed:
            return closed
        logger.debug("Module closure added: %s", sorted(grown - closed))
        closed = grown


def dependency_closure(
    declared: Iterable[str],
    selection: ResolvedSelection,
    modules: frozenset[ModuleId],
    rules: tuple[DependencyRule, ...] = DEPENDENCY_RULES,
) -> frozenset[str]:
    """Return the smallest superset of *declared* satisfying all dependency rules.

    *modules* must already be a closed module set (see :func:`module_closure`).
    """
    closed = frozenset(declared)
    while True:
        grown = closed.union(*(rule(closed, selection, modules) for rule in rules))
        if grown == closed:
            return closed
        logger.debug("Dependency closure added: %s", sorted(grown - closed))
        closed = grown
