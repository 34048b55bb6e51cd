"""
Tests for the reportbuilder command-line interface
"""
import json

import pytest
from click.testing import CliRunner

from core.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tree_file(tmp_path, sample_tree):
    path = tmp_path / "audit.json"
    path.write_text(json.dumps(sample_tree), encoding="utf-8")
    return path


@pytest.fixture
def data_file(tmp_path, sample_data):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(sample_data), encoding="utf-8")
    return path


class TestCompileCommand:
    """Test compiling template files from the command line"""

    def test_compile_writes_document(self, runner, tree_file, data_file, tmp_path):
        output = tmp_path / "out.html"
        result = runner.invoke(
            cli,
            ["compile", str(tree_file), "--data", str(data_file), "-o", str(output), "--no-inline-assets"],
        )
        assert result.exit_code == 0, result.output
        assert "✓ Wrote" in result.output
        html = output.read_text(encoding="utf-8")
        assert html.startswith("<!DOCTYPE html>")
        assert "<title>audit</title>" in html

    def test_compile_options(self, runner, tree_file, data_file, tmp_path):
        output = tmp_path / "preview.html"
        result = runner.invoke(
            cli,
            [
                "compile",
                str(tree_file),
                "--data",
                str(data_file),
                "-o",
                str(output),
                "--filename",
                "Preview",
                "--page-size",
                "Letter",
                "--margins",
                "10,15,10,15",
                "--preview",
                "--embed-data",
                "--watermark",
                "--no-inline-assets",
                "--no-auto-print",
            ],
        )
        assert result.exit_code == 0, result.output
        html = output.read_text(encoding="utf-8")
        assert "<title>Preview</title>" in html
        assert "size: 215.9mm 279.4mm;" in html
        assert "margin: 10mm 15mm 10mm 15mm;" in html
        assert ">72</div>" in html
        assert '<div id="watermark"' in html
        assert '"autoPrint": false' in html

    def test_invalid_margins(self, runner, tree_file):
        result = runner.invoke(cli, ["compile", str(tree_file), "--margins", "1,2"])
        assert result.exit_code == 2

    def test_invalid_json(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(cli, ["compile", str(path)])
        assert result.exit_code == 2
        assert "not valid JSON" in result.output

    def test_strict_failure(self, runner, tmp_path):
        path = tmp_path / "cycle.json"
        path.write_text(json.dumps({"a": {"type": "Container", "nodes": ["a"]}}), encoding="utf-8")
        output = tmp_path / "cycle.html"
        result = runner.invoke(cli, ["compile", str(path), "-o", str(output), "--strict", "--no-inline-assets"])
        assert result.exit_code == 1
        assert "NO_ROOTS" in result.output
        assert not output.exists()


class TestValidateCommand:
    def test_valid_template(self, runner, tree_file, data_file):
        result = runner.invoke(cli, ["validate", str(tree_file), "--data", str(data_file)])
        assert result.exit_code == 0
        assert "✓ Template is valid" in result.output

    def test_unknown_widget_warns(self, runner, tmp_path):
        path = tmp_path / "tree.json"
        path.write_text(json.dumps({"x": {"type": "FooWidget"}}), encoding="utf-8")
        result = runner.invoke(cli, ["validate", str(path)])
        assert result.exit_code == 0
        assert "WARNING UNKNOWN_WIDGET_TYPE [x]" in result.output

    def test_errors_fail(self, runner, tmp_path):
        path = tmp_path / "tree.json"
        path.write_text(json.dumps({"a": {"type": "Container", "nodes": ["a"]}}), encoding="utf-8")
        result = runner.invoke(cli, ["validate", str(path)])
        assert result.exit_code == 1


class TestInfoCommands:
    def test_widgets(self, runner):
        result = runner.invoke(cli, ["widgets"])
        assert result.exit_code == 0
        assert "ProgressBar" in result.output.splitlines()

    def test_env_info(self, runner):
        result = runner.invoke(cli, ["env-info"])
        assert result.exit_code == 0
        assert "ReportBuilder v" in result.output
