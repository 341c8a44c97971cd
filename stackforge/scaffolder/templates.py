"""Jinja2 environment shared by every catalog renderer.

Templates live under ``stackforge/scaffolder/templates/``, one directory per
file kind (``frontend/``, ``backend/<framework>/``, ``docker/`` ...).  Files
whose name starts with ``_`` hold macros imported by their siblings and are
never rendered on their own.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

from .naming import to_camel, to_kebab, to_pascal, to_snake

TEMPLATE_ROOT = Path(__file__).parent / "templates"


def _to_json(value: Any, indent: int | None = None) -> str:
    # Jinja's built-in tojson HTML-escapes quotes; generated sources need them raw.
    return json.dumps(value, indent=indent, ensure_ascii=False)


class TemplateRenderer:
    """Loads and renders catalog templates.

    One renderer can be shared by any number of catalogs; compiled templates
    are cached by the Jinja2 environment.  Whitespace handling is tuned so
    block tags on their own line leave no blank lines behind.
    """

    FILTERS = {
        "pascal_case": to_pascal,
        "camel_case": to_camel,
        "snake_case": to_snake,
        "kebab_case": to_kebab,
        "tojson": _to_json,
    }

    def __init__(self, template_dir: str | Path | None = None) -> None:
        self.template_dir = Path(template_dir) if template_dir is not None else TEMPLATE_ROOT
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.update(self.FILTERS)

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render *template_path* (relative to the template root) with *context*.

        Raises:
            jinja2.TemplateNotFound: If no such template exists.
            jinja2.TemplateError: On syntax or rendering failures.
        """
        return self.env.get_template(template_path).render(**context)

    def list_templates(self, prefix: str = "") -> list[str]:
        """Sorted renderable template paths under *prefix*, macro files excluded."""
        base = self.template_dir / prefix if prefix else self.template_dir
        if not base.is_dir():
            return []
        return sorted(
            path.relative_to(self.template_dir).as_posix()
            for path in base.rglob("*.j2")
            if not path.name.startswith("_")
        )
