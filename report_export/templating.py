"""
Template engine for exported documents

Document shells and the embedded runtime are Jinja2 templates held in
memory and rendered in a sandboxed environment. Templates whose name ends in
``.html`` are autoescaped; script templates are not.
"""
from typing import Any, Dict, List, Optional

from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateError, TemplateNotFound
from jinja2.sandbox import SandboxedEnvironment

from core.logging import get_logger

logger = get_logger(__name__, domain="report_export")


class TemplateLoader(BaseLoader):
    """Loader serving templates from an in-memory mapping"""

    def __init__(self, templates: Optional[Dict[str, str]] = None):
        """
        Initialize template loader

        Args:
            templates: Dictionary of template name to template content
        """
        self.templates = dict(templates or {})

    def get_source(self, environment: Environment, template: str) -> tuple:
        """Get template source"""
        if template not in self.templates:
            raise TemplateNotFound(template)

        source = self.templates[template]
        return source, None, lambda: True

    def add_template(self, name: str, content: str) -> None:
        """Add a template to the loader"""
        self.templates[name] = content

    def list_templates(self) -> List[str]:
        """List available templates"""
        return sorted(self.templates)


def _autoescape(template_name: Optional[str]) -> bool:
    return bool(template_name) and template_name.endswith(".html")


class TemplateEngine:
    """Sandboxed Jinja2 environment over a :class:`TemplateLoader`"""

    def __init__(self, templates: Optional[Dict[str, str]] = None):
        self.loader = TemplateLoader(templates)
        self.env = SandboxedEnvironment(
            loader=self.loader,
            autoescape=_autoescape,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        logger.debug(f"Initialized TemplateEngine with {len(self.loader.templates)} templates")

    def add_template(self, name: str, content: str) -> None:
        self.loader.add_template(name, content)

    def render_template(self, template_name: str, **context: Any) -> str:
        """
        Render a registered template

        Raises:
            TemplateError: If template rendering fails
        """
        try:
            return self.env.get_template(template_name).render(**context)
        except TemplateError as e:
            logger.error(f"Template rendering failed for '{template_name}': {e}")
            raise
