"""Choose the source expression that builds a sample's chat client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from samplegen.config import DEFAULT_OLLAMA_HOST
from samplegen.models import HardwareAccelerator, ModelCategory, ModuleId, is_a
from samplegen.prompts import quote

if TYPE_CHECKING:
    from samplegen.models import ResolvedModel

logger = logging.getLogger(__name__)

_REMOTE_PREFIX = "ollama"


@dataclass(frozen=True)
class ChatClientLoader:
    """A client-construction expression and its calling convention."""

    expression: str
    awaited: bool

    @property
    def source(self) -> str:
        """Text to splice in place of the call-site placeholder."""
        return f"await {self.expression}" if self.awaited else self.expression


def is_remote_locator(locator: str) -> bool:
    """Return True if *locator* names a model served by a remote runtime."""
    return locator.lower().startswith(_REMOTE_PREFIX)


def select_chat_client_loader(
    modules: frozenset[ModuleId],
    primary: ResolvedModel,
    category: ModelCategory,
    prompt_template: str,
    remote_host: str | None = None,
) -> ChatClientLoader | None:
    """Pick the chat-client loader for the primary model.

    Args:
        modules: Closed module set of the sample.
        primary: Model bound to the sample's first slot.
        category: Slot category *primary* was matched against.
        prompt_template: Rendered prompt-template expression.
        remote_host: Remote runtime address; defaults to the local server.

    Returns:
        The loader, or None when the sample has no chat client to build.
    """
    is_native = primary.accelerator == HardwareAccelerator.WCRAPI
    if (
        ModuleId.GENAI_MODEL not in modules
        and not is_native
        and not is_a(category, ModelCategory.LANGUAGE_MODELS)
    ):
        return None

    if is_native:
        return ChatClientLoader("PhiSilicaClient.create_async()", awaited=True)

    if is_remote_locator(primary.path):
        model_id = primary.path.rstrip("/").split("/")[-1]
        host = remote_host or DEFAULT_OLLAMA_HOST
        logger.debug("Remote chat client for %s at %s", model_id, host)
        return ChatClientLoader(
            f"OllamaChatClient({quote(host)}, {quote(model_id)})", awaited=False
        )

    return ChatClientLoader(
        f"GenAIModel.create_async({quote(primary.path)}, {prompt_template})", awaited=True
    )
