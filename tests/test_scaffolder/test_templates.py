"""Tests for the Jinja2 renderer (stackforge.scaffolder.templates)."""

from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import TemplateNotFound

from stackforge.scaffolder.templates import TEMPLATE_ROOT, TemplateRenderer

pytestmark = pytest.mark.unit


@pytest.fixture
def local_renderer(tmp_path: Path) -> TemplateRenderer:
    (tmp_path / "kind").mkdir()
    (tmp_path / "kind" / "_macros.j2").write_text("{% macro hi(n) %}hi {{ n }}{% endmacro %}", encoding="utf-8")
    (tmp_path / "kind" / "file.j2").write_text(
        '{% import "kind/_macros.j2" as m %}\n'
        "{% for x in items %}\n"
        "{{ m.hi(x | pascal_case) }}\n"
        "{% endfor %}\n"
        "{{ data | tojson }}\n",
        encoding="utf-8",
    )
    return TemplateRenderer(tmp_path)


class TestTemplateRenderer:
    def test_default_root(self):
        assert TemplateRenderer().template_dir == TEMPLATE_ROOT

    def test_block_tags_leave_no_blank_lines(self, local_renderer: TemplateRenderer):
        text = local_renderer.render("kind/file.j2", {"items": ["a_b", "c"], "data": {"q": "\"<x>\""}})
        assert text == 'hi AB\nhi C\n{"q": "\\"<x>\\""}\n'

    def test_no_html_escaping(self, local_renderer: TemplateRenderer):
        text = local_renderer.render("kind/file.j2", {"items": [], "data": "<T> & 'q'"})
        assert text == "\"<T> & 'q'\"\n"

    def test_missing_template(self, local_renderer: TemplateRenderer):
        with pytest.raises(TemplateNotFound):
            local_renderer.render("kind/nope.j2", {})

    def test_list_skips_macro_files(self, local_renderer: TemplateRenderer):
        assert local_renderer.list_templates() == ["kind/file.j2"]
        assert local_renderer.list_templates("kind") == ["kind/file.j2"]
        assert local_renderer.list_templates("missing") == []

    def test_bundled_templates(self):
        listed = TemplateRenderer().list_templates("backend/express")
        assert listed == ["backend/express/auth.j2", "backend/express/entry.j2", "backend/express/route.j2"]
