"""
Tests for the embedded runtime program and its config payload
"""
import json

from core.config import Settings
from report_export.models import ExportOptions, PageMargins, RuntimeComponentConfig
from report_export.runtime import (
    RUNTIME_CONFIG_ELEMENT_ID,
    build_runtime_config,
    build_template_config,
    render_runtime_script,
    runtime_constants,
)


class TestRuntimeScript:
    """Test the rendered runtime program"""

    def test_constants_are_injected(self):
        script = render_runtime_script()
        assert f"var CONFIG_ELEMENT_ID = {json.dumps(RUNTIME_CONFIG_ELEMENT_ID)};" in script
        assert "var GAUGE_STROKE_WIDTH = 12;" in script
        assert '"yyyy|MMMM|MMM|MM|dddd|ddd|dd|HH|mm|ss"' in script

    def test_no_template_syntax_left(self):
        script = render_runtime_script()
        assert "{% raw %}" not in script
        assert "{% endraw %}" not in script
        assert "|tojson" not in script

    def test_safe_inside_script_element(self):
        assert "</script" not in render_runtime_script().lower()

    def test_visibility_reveals_preview_hidden_widgets(self):
        assert "el.removeAttribute('data-condition-hidden');" in render_runtime_script()

    def test_public_entry_point(self):
        script = render_runtime_script()
        assert "window.ReportRuntime = Object.freeze(" in script
        assert "DOMContentLoaded" in script

    def test_runtime_constants_cover_shared_tables(self):
        constants = runtime_constants()
        assert set(constants["status_styles"]) == {"pass", "fail", "warning", "neutral"}
        assert constants["date_formats"]["date-long"] == "MMMM dd, yyyy"
        assert len(constants["month_names"]) == 12


class TestRuntimeConfig:
    """Test the JSON config island payload"""

    def test_template_config_defaults_from_settings(self):
        settings = Settings(_env_file=None, runtime_print_delay_ms=250, runtime_data_path="./data.json")
        config = build_template_config(ExportOptions(), settings)
        assert config == {
            "pageSize": "A4",
            "margins": {"top": 20, "right": 20, "bottom": 20, "left": 20},
            "autoPrint": True,
            "printDelay": 250,
            "dataPath": "./data.json",
            "fetchTimeout": 10000,
            "chartWaitTimeout": 3000,
        }

    def test_options_override_settings(self):
        options = ExportOptions(
            page_size="Letter",
            margins=PageMargins.uniform(10),
            auto_print=False,
            fetch_timeout_ms=0,
            data_path="report.json",
        )
        config = build_template_config(options, Settings(_env_file=None))
        assert config["pageSize"] == "Letter"
        assert config["margins"]["left"] == 10
        assert config["autoPrint"] is False
        assert config["fetchTimeout"] == 0
        assert config["dataPath"] == "report.json"

    def test_sample_data_embedded_only_on_request(self):
        components = [RuntimeComponentConfig(id="t", type="text", props={"binding": "data.a"})]
        data = {"a": 1}

        config = build_runtime_config(components, data, ExportOptions(), Settings(_env_file=None))
        assert config["sampleData"] is None
        assert config["components"] == [{"id": "t", "type": "text", "props": {"binding": "data.a"}}]

        embedded = build_runtime_config(components, data, ExportOptions(include_sample_data=True))
        assert embedded["sampleData"] == data

    def test_no_data_to_embed(self):
        config = build_runtime_config([], None, ExportOptions(include_sample_data=True))
        assert config["sampleData"] is None
        assert config["components"] == []
