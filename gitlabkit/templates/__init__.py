"""Jinja2 templates for the generated GitLab deployment files."""

import os

import jinja2
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..utils.errors import TemplateError

TEMPLATES_DIR = os.path.dirname(os.path.abspath(__file__))


def get_template_environment() -> Environment:
    """Create the Jinja2 environment used by every renderer."""
    return Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def render_template(name: str, **context) -> str:
    """
    Render one of the bundled templates.

    Args:
        name: Template file name, e.g. ``nginx.conf.j2``
        **context: Template variables

    Returns:
        str: Rendered text

    Raises:
        TemplateError: If the template is missing or references an undefined variable
    """
    try:
        template = get_template_environment().get_template(name)
        return template.render(**context)
    except jinja2.TemplateError as e:
        raise TemplateError(f"Failed to render {name}", details=str(e))
