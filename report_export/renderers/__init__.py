"""
Widget renderer registry

Maps the closed set of widget types to their renderers. Lookups for unknown
type names return ``None``; the compiler degrades those widgets explicitly.
"""
from typing import Dict, List, Optional

from core.logging import get_logger
from report_export.renderers.base import ComponentRenderer, WidgetType, escape_html
from report_export.renderers.chart import DEFAULT_CHART_COLORS, ChartRenderer
from report_export.renderers.layout import (
    ContainerRenderer,
    DividerRenderer,
    ImageRenderer,
    PageBreakRenderer,
    PageNumberRenderer,
    PageRenderer,
    SpacerRenderer,
)
from report_export.renderers.status import (
    STATUS_STYLES,
    GaugeRenderer,
    IndicatorRenderer,
    ProgressBarRenderer,
    normalize_status,
)
from report_export.renderers.table import TableRenderer, normalize_columns
from report_export.renderers.text import BulletListRenderer, DateTimeRenderer, TextRenderer

logger = get_logger(__name__, domain="report_export")


class RendererRegistry:
    """Registry of renderers keyed by widget type"""

    def __init__(self):
        self._renderers: Dict[WidgetType, ComponentRenderer] = {}
        self._register_default_renderers()

    def _register_default_renderers(self) -> None:
        for renderer in (
            PageRenderer(),
            ContainerRenderer(),
            SpacerRenderer(),
            DividerRenderer(),
            PageBreakRenderer(),
            PageNumberRenderer(),
            ImageRenderer(),
            TextRenderer(),
            BulletListRenderer(),
            DateTimeRenderer(),
            IndicatorRenderer(),
            GaugeRenderer(),
            ProgressBarRenderer(),
            TableRenderer(),
            ChartRenderer(),
        ):
            self.register(renderer)

    def register(self, renderer: ComponentRenderer) -> None:
        """Register or replace the renderer for its widget type"""
        if renderer.widget_type in self._renderers:
            logger.info(f"Replacing renderer for {renderer.widget_type.value}")
        self._renderers[renderer.widget_type] = renderer

    def get(self, type_name: str) -> Optional[ComponentRenderer]:
        try:
            return self._renderers.get(WidgetType(type_name))
        except ValueError:
            return None

    def has(self, type_name: str) -> bool:
        return self.get(type_name) is not None

    def registered_types(self) -> List[str]:
        return [widget_type.value for widget_type in self._renderers]


# Global registry instance
renderer_registry = RendererRegistry()

__all__ = [
    "ComponentRenderer",
    "WidgetType",
    "RendererRegistry",
    "renderer_registry",
    "escape_html",
    "normalize_columns",
    "normalize_status",
    "STATUS_STYLES",
    "DEFAULT_CHART_COLORS",
]
