"""Render a :class:`PromptTemplate` as a Python constructor expression."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from samplegen.models import PromptTemplate

NO_TEMPLATE = "None"

_FIELD_INDENT = "    "


def escape_string(value: str) -> str:
    """Escape *value* for use inside a double-quoted Python literal."""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\r", "\\r")
        .replace("\n", "\\n")
    )


def quote(value: str) -> str:
    """Return *value* as a double-quoted Python string literal."""
    return f'"{escape_string(value)}"'


def render_prompt_template(template: PromptTemplate | None, indent: int | str) -> str:
    """Render *template* as an ``LlmPromptTemplate(...)`` expression.

    Args:
        template: The prompt template, or None.
        indent: Leading whitespace of the statement the expression is
            spliced into, prefixed to every continuation line.  An int is
            a number of spaces.  Fields nest one tab deeper when the
            prefix is tab-indented, otherwise four spaces deeper.

    Returns:
        Source text of the expression.  Absent or empty fields are left out;
        a missing template renders as ``None``.
    """
    if template is None:
        return NO_TEMPLATE

    prefix = " " * indent if isinstance(indent, int) else indent
    field_prefix = prefix + ("\t" if "\t" in prefix else _FIELD_INDENT)
    lines = ["LlmPromptTemplate("]
    for name in ("system", "user", "assistant"):
        value = getattr(template, name)
        if value:
            lines.append(f"{field_prefix}{name}={quote(value)},")
    if template.stop:
        stop = ", ".join(quote(s) for s in template.stop)
        lines.append(f"{field_prefix}stop=[{stop}],")
    lines.append(f"{prefix})")
    return "\n".join(lines)
