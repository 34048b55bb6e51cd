"""
Core metrics collection for ReportBuilder using Prometheus
"""
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, Info, generate_latest

from core.logging import get_logger

# Create a global registry for the application
REGISTRY = CollectorRegistry()

# Application info
app_info = Info("reportbuilder_app", "ReportBuilder application information", registry=REGISTRY)

# Request metrics
request_count = Counter(
    "reportbuilder_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

request_duration = Histogram(
    "reportbuilder_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)

# Export metrics
exports_total = Counter(
    "reportbuilder_exports_total",
    "Total template exports",
    ["kind", "status"],
    registry=REGISTRY,
)

export_duration = Histogram(
    "reportbuilder_export_duration_seconds",
    "Time taken to compile and assemble a document",
    ["kind"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0),
    registry=REGISTRY,
)

widgets_rendered = Counter(
    "reportbuilder_widgets_rendered_total",
    "Total widgets rendered into exported documents",
    registry=REGISTRY,
)

diagnostics_total = Counter(
    "reportbuilder_diagnostics_total",
    "Compile diagnostics by code and level",
    ["code", "level"],
    registry=REGISTRY,
)

assets_inlined = Counter(
    "reportbuilder_assets_inlined_total",
    "Images processed by the asset pipeline",
    ["status"],
    registry=REGISTRY,
)


class MetricsCollector:
    """Helper class for collecting metrics"""

    def __init__(self):
        self.logger = get_logger("metrics")

    def set_app_info(self, version: str, environment: str):
        app_info.info({"version": version, "environment": environment})

    def track_request(self, method: str, endpoint: str, status: int, duration: float):
        """Track HTTP request metrics"""
        request_count.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def track_export(self, kind: str, duration: float, widget_count: int = 0, status: str = "success"):
        """Track a finished export"""
        exports_total.labels(kind=kind, status=status).inc()
        export_duration.labels(kind=kind).observe(duration)
        widgets_rendered.inc(widget_count)

    def track_diagnostic(self, code: str, level: str):
        diagnostics_total.labels(code=code, level=level).inc()

    def track_asset(self, success: bool = True):
        assets_inlined.labels(status="success" if success else "failed").inc()

    def get_metrics(self) -> bytes:
        """Get current metrics in Prometheus format"""
        return generate_latest(REGISTRY)


# Global metrics collector instance
metrics = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance"""
    return metrics


def get_metrics_response() -> tuple[bytes, str]:
    """Get metrics response for Prometheus endpoint"""
    return metrics.get_metrics(), CONTENT_TYPE_LATEST
