"""
Tests for the sandboxed template engine
"""
import pytest
from jinja2 import TemplateError, TemplateNotFound

from report_export.templating import TemplateEngine, TemplateLoader


class TestTemplateEngine:
    def test_html_templates_are_escaped(self):
        engine = TemplateEngine({"page.html": "<p>{{ value }}</p>", "script.js": "var v = '{{ value }}';"})
        assert engine.render_template("page.html", value="<b>") == "<p>&lt;b&gt;</p>"
        assert engine.render_template("script.js", value="<b>") == "var v = '<b>';"

    def test_missing_template(self):
        with pytest.raises(TemplateNotFound):
            TemplateEngine().render_template("nope.html")

    def test_undefined_variables_fail(self):
        engine = TemplateEngine({"page.html": "{{ missing }}"})
        with pytest.raises(TemplateError):
            engine.render_template("page.html")

    def test_sandbox_blocks_internals(self):
        engine = TemplateEngine({"page.html": "{{ value.__class__.__mro__ }}"})
        with pytest.raises(TemplateError):
            engine.render_template("page.html", value="x")

    def test_add_template(self):
        engine = TemplateEngine()
        engine.add_template("late.txt", "{{ n }}")
        assert engine.render_template("late.txt", n=3) == "3"


class TestTemplateLoader:
    def test_list_templates_sorted(self):
        loader = TemplateLoader({"b.html": "", "a.html": ""})
        loader.add_template("c.js", "")
        assert loader.list_templates() == ["a.html", "b.html", "c.js"]
