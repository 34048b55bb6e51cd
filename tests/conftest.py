"""
Shared fixtures for ReportBuilder tests
"""
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402

from core.config import Settings, get_settings  # noqa: E402
from report_export.exporter import ReportExporter  # noqa: E402


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Clear the settings cache before each test"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings():
    """Settings isolated from any local .env file, with asset inlining off"""
    return Settings(_env_file=None, environment="test", asset_inline_enabled=False)


@pytest.fixture
def exporter(test_settings):
    return ReportExporter(settings=test_settings)


@pytest.fixture
def sample_data():
    return {
        "client": {"name": "Acme Labs"},
        "results": {
            "temperature": 72,
            "status": "PASS",
            "score": 84,
            "completion": 30,
            "checked_at": "2024-01-15T09:30:00",
        },
        "findings": ["Slow images", "Missing alt text"],
        "rows": [
            {"metric": "LCP", "value": 2.1},
            {"metric": "CLS", "value": 0.05},
        ],
        "series": [12, 19, 3],
    }


@pytest.fixture
def sample_tree():
    """Page with one widget of each bound kind"""
    return {
        "ROOT": {
            "type": {"resolvedName": "Page"},
            "props": {"background": "#ffffff", "padding": 40},
            "nodes": ["title", "temp", "status", "score", "progress", "findings", "rows", "chart"],
        },
        "title": {"type": "Text", "props": {"text": "Report for {{data.client.name}}", "x": 10, "y": 10}},
        "temp": {"type": "Text", "props": {"binding": "data.results.temperature", "x": 10, "y": 60}},
        "status": {"type": "Indicator", "props": {"binding": "data.results.status"}},
        "score": {"type": "Gauge", "props": {"binding": "data.results.score", "label": "Score"}},
        "progress": {"type": "ProgressBar", "props": {"binding": "data.results.completion"}},
        "findings": {"type": "BulletList", "props": {"binding": "data.findings"}},
        "rows": {"type": "Table", "props": {"binding": "data.rows", "columns": ["metric", "value"]}},
        "chart": {"type": "Chart", "props": {"binding": "data.series", "labels": "A, B, C", "title": "Trend"}},
    }
