"""Jinja2 templates for the side files of an exported sample project.

Every ``<name>.j2`` file in the project templates directory produces the
project file ``<name>``: ``requirements.txt.j2`` becomes
``requirements.txt``.  Templates only see the export context (sample,
selection, closed modules and dependencies), and catalog text flows
through them, so they render in a sandbox and a missing context key is
an error rather than an empty string.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any

from jinja2 import FileSystemLoader, StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

TEMPLATE_SUFFIX = ".j2"

_TEMPLATES_DIR = Path(__file__).parent / "project"


class TemplateEngine:
    """Renders project side files from a directory of ``.j2`` templates.

    Parameters
    ----------
    templates_dir:
        Directory of project templates. Defaults to the templates shipped
        with the package.
    """

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._templates_dir = templates_dir if templates_dir is not None else _TEMPLATES_DIR
        self._env = SandboxedEnvironment(
            loader=FileSystemLoader(str(self._templates_dir)),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        """Render one project template.

        Raises:
            ValueError: If *template_name* is not a bare ``.j2`` file name.
            jinja2.TemplateNotFound: If the template does not exist.
            jinja2.UndefinedError: If the context lacks a variable the
                template uses.
        """
        if PurePosixPath(template_name).name != template_name or not template_name.endswith(
            TEMPLATE_SUFFIX
        ):
            msg = f"Invalid template name: {template_name!r}"
            raise ValueError(msg)
        return self._env.get_template(template_name).render(**context)

    def render_project(self, context: dict[str, Any]) -> dict[str, str]:
        """Render every template, keyed by the project file it produces."""
        return {
            name.removesuffix(TEMPLATE_SUFFIX): self.render(name, context)
            for name in self.available_templates()
        }

    def available_templates(self) -> list[str]:
        return sorted(
            p.name
            for p in self._templates_dir.iterdir()
            if p.is_file() and p.suffix == TEMPLATE_SUFFIX
        )
