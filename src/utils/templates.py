"""
Jinja2 template loader for rendered alert text.

Markdown bodies (incident descriptions) live in templates/ as .jinja2 files.
Use render_template() from any agent to render one with variables.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

# Resolve templates/ relative to this file: src/utils/templates.py → templates/
_TEMPLATES_DIR = Path(__file__).parent.parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATES_DIR)),
    undefined=StrictUndefined,   # raise immediately on undefined variables
    trim_blocks=True,            # strip newline after block tags
    lstrip_blocks=True,          # strip leading whitespace before block tags
)


def render_template(name: str, **kwargs: object) -> str:
    """Render a Jinja2 template from the templates/ directory.

    Args:
        name: Template filename, e.g. "related_alerts.md.jinja2"
        **kwargs: Variables passed into the template.

    Returns:
        Rendered string.

    Raises:
        jinja2.TemplateNotFound: If the template file doesn't exist.
        jinja2.UndefinedError: If the template references a variable not in kwargs.
    """
    template = _env.get_template(name)
    return template.render(**kwargs)
