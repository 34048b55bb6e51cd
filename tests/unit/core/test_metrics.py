"""
Test core metrics functionality
"""
from core.metrics import CONTENT_TYPE_LATEST, get_metrics_collector, get_metrics_response, metrics


class TestMetricsCollector:
    def test_track_request(self):
        """Test tracking HTTP requests"""
        metrics.track_request("GET", "/api/test", 200, 0.5)

        metrics_data, content_type = get_metrics_response()
        assert content_type == CONTENT_TYPE_LATEST
        assert b"reportbuilder_http_requests_total" in metrics_data
        assert b"reportbuilder_http_request_duration_seconds" in metrics_data

    def test_track_export(self):
        """Test tracking finished exports"""
        metrics.track_export("single", 0.2, widget_count=4)
        metrics.track_export("pages", 0.1, status="failed")

        metrics_data, _ = get_metrics_response()
        assert b"reportbuilder_exports_total" in metrics_data
        assert b'kind="pages",status="failed"' in metrics_data
        assert b"reportbuilder_export_duration_seconds" in metrics_data
        assert b"reportbuilder_widgets_rendered_total" in metrics_data

    def test_track_diagnostic(self):
        metrics.track_diagnostic("NO_ROOTS", "error")

        metrics_data, _ = get_metrics_response()
        assert b'code="NO_ROOTS",level="error"' in metrics_data

    def test_track_asset(self):
        metrics.track_asset(success=False)

        metrics_data, _ = get_metrics_response()
        assert b'reportbuilder_assets_inlined_total{status="failed"}' in metrics_data

    def test_app_info(self):
        metrics.set_app_info("9.9.9", "test")

        metrics_data, _ = get_metrics_response()
        assert b'version="9.9.9"' in metrics_data

    def test_global_collector(self):
        assert get_metrics_collector() is metrics
