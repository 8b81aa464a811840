"""Templates package for exported sample projects."""

from samplegen.templates.engine import TemplateEngine

__all__ = ["TemplateEngine"]
