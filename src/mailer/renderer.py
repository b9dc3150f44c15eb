"""
Jinja2 template store for emails.

This module provides the TemplateStore class that loads the named email
templates from a directory once and renders them into caller supplied
buffers.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, TextIO

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError, TemplateNotFound


logger = logging.getLogger(__name__)

TEMPLATE_PASSWORD_RESET = 'reset-password.html'

# Templates loaded by TemplateStore.load, keyed by file name
EMAIL_TEMPLATES = (TEMPLATE_PASSWORD_RESET,)


class RendererError(Exception):
    """Base exception for renderer errors."""
    pass


class TemplateStore:
    """
    Registry of compiled email templates.

    Templates are compiled at load time, so a missing file or a syntax
    error is reported while the store is built rather than on first use.
    The registry is read-only after load.

    Example:
        >>> store = TemplateStore.load('/etc/app/templates/email')
        >>> buf = io.StringIO()
        >>> store.render(TEMPLATE_PASSWORD_RESET, buf, {'reset_link': link})
    """

    def __init__(self, templates: Dict[str, Template]):
        self._templates = dict(templates)

    @classmethod
    def load(cls, templates_dir: str | Path) -> 'TemplateStore':
        """
        Load and compile every email template from templates_dir.

        Args:
            templates_dir: Directory holding the template files

        Returns:
            TemplateStore: Store with one entry per template file name

        Raises:
            RendererError: If a template is missing or cannot be compiled
        """
        templates_dir = Path(templates_dir)
        logger.debug(
            "loading templates from %s", templates_dir,
            extra={"event": "email.templates.load", "path": str(templates_dir)}
        )

        jinja_env = Environment(
            loader=FileSystemLoader(templates_dir),
            autoescape=True,  # Enable autoescape for HTML safety
            undefined=StrictUndefined,
        )

        templates = {}
        for name in EMAIL_TEMPLATES:
            try:
                templates[name] = jinja_env.get_template(name)
            except TemplateNotFound as e:
                raise RendererError(f"Template not found: {templates_dir / name}") from e
            except TemplateError as e:
                raise RendererError(f"Failed to load template '{name}': {e}") from e
        return cls(templates)

    def names(self) -> list[str]:
        return sorted(self._templates)

    def render(self, name: str, buf: TextIO, data: Any) -> None:
        """
        Execute a template writing the output into buf.

        Mapping data is used as the template context. For any other object
        its public attributes become template variables and the object
        itself is available as ``data``.

        Raises:
            RendererError: If the template is unknown or execution fails
        """
        template = self._templates.get(name)
        if template is None:
            raise RendererError(f"Template not loaded: {name}")

        try:
            template.stream(_build_context(data)).dump(buf)
        except TemplateError as e:
            raise RendererError(f"Failed to render template '{name}': {e}") from e


def _build_context(data: Any) -> Dict[str, Any]:
    if isinstance(data, Mapping):
        return dict(data)
    context = {}
    if data is not None:
        for attr in dir(data):
            if not attr.startswith('_'):
                context[attr] = getattr(data, attr)
    context['data'] = data
    return context
