"""Jinja2 template rendering for the generated artifacts.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``odoo_setup/renderer/templates/`` directory and renders them with a context
built from a single :class:`~odoo_setup.config.ConfigModel`.  Rendering is
purely in-memory; writing to disk is the caller's business.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for the deployment bundle.

    Undefined variables raise instead of rendering as empty strings, so a
    context that is missing a value fails loudly rather than producing an
    artifact that silently disagrees with its siblings.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["env_bool"] = _env_bool_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"docker-compose.yml.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _env_bool_filter(value: Any) -> str:
    """Render a boolean the way shell-style ``.env`` files expect (``true``/``false``)."""
    return "true" if value else "false"


