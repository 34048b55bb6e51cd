"""
Renderer base class

Every widget type has one renderer. A renderer is a pure function of
``(widget_id, props)``: it merges its defaults into the props, emits static
markup that already looks right without data, and returns a runtime config
when the widget must be re-bound in the browser.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from report_export.models import RendererResult, RuntimeComponentConfig
from report_export.styles import generate_position_styles

_HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#039;",
    }
)

POSITION_DEFAULTS = {"x": 0, "y": 0, "zIndex": 1, "visible": True}

# Set on bound props whose visibility condition is false for the preview data
CONDITION_HIDDEN = "conditionHidden"


class WidgetType(str, Enum):
    """Widget types understood by the export compiler"""

    # Layout
    PAGE = "Page"
    CONTAINER = "Container"
    SPACER = "Spacer"
    DIVIDER = "Divider"
    PAGE_BREAK = "PageBreak"
    PAGE_NUMBER = "PageNumber"
    IMAGE = "Image"

    # Text
    TEXT = "Text"
    BULLET_LIST = "BulletList"
    DATE_TIME = "DateTime"

    # Status
    INDICATOR = "Indicator"
    GAUGE = "Gauge"
    PROGRESS_BAR = "ProgressBar"

    # Data
    TABLE = "Table"
    CHART = "Chart"

    @property
    def kind(self) -> str:
        """Lowercase name used for ``data-component`` and runtime dispatch"""
        return self.value.lower()


def escape_html(value: Any) -> str:
    """Escape ``& < > " '`` for element content and attribute values"""
    if value is None:
        return ""
    return str(value).translate(_HTML_ESCAPES)


def condition_of(props: Mapping[str, Any]) -> Optional[str]:
    """The widget's visibility condition when it is a non-empty string"""
    condition = props.get("visibilityCondition")
    return condition if isinstance(condition, str) and condition.strip() else None


def data_attribute(name: str, value: Any) -> str:
    """`` name="value"`` with a leading space, or nothing for empty values"""
    if value is None or value == "":
        return ""
    return f' {name}="{escape_html(value)}"'


class ComponentRenderer(ABC):
    """Abstract base class for widget renderers"""

    widget_type: WidgetType
    is_container: bool = False
    defaults: Dict[str, Any] = {}
    # Props carried into the runtime config when the widget is bound
    runtime_props: Tuple[str, ...] = ()
    # Build the runtime config from compile-time bound props in previews
    config_from_bound_props: bool = False

    @property
    def kind(self) -> str:
        return self.widget_type.kind

    def resolve_props(self, props: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Merge defaults with props; ``None`` values count as absent"""
        merged = {**POSITION_DEFAULTS, **self.defaults}
        for key, value in (props or {}).items():
            if value is not None:
                merged[key] = value
        return merged

    def render(self, widget_id: str, props: Optional[Mapping[str, Any]]) -> RendererResult:
        """Render a widget to markup plus an optional runtime config"""
        resolved = self.resolve_props(props)
        if resolved.get("visible") is False:
            return RendererResult.empty()
        return RendererResult(
            html=self.render_html(widget_id, resolved),
            component_config=self.build_config(widget_id, resolved),
        )

    def config_for(self, widget_id: str, props: Optional[Mapping[str, Any]]) -> Optional[RuntimeComponentConfig]:
        """Runtime config for ``props`` without rendering markup"""
        resolved = self.resolve_props(props)
        if resolved.get("visible") is False:
            return None
        return self.build_config(widget_id, resolved)

    @abstractmethod
    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        """Render the widget's markup from fully resolved props"""

    def is_bound(self, props: Mapping[str, Any]) -> bool:
        return bool(str(props.get("binding") or "").strip())

    def build_config(self, widget_id: str, props: Mapping[str, Any]) -> Optional[RuntimeComponentConfig]:
        condition = condition_of(props)
        bound = self.is_bound(props)
        if not bound and not condition:
            return None

        config_props = {key: props.get(key) for key in self.runtime_props} if bound else {}
        if condition:
            config_props["visibilityCondition"] = condition
        return RuntimeComponentConfig(id=widget_id, type=self.kind, props=config_props)

    def position_styles(self, props: Mapping[str, Any]) -> str:
        return generate_position_styles(props)

    def open_tag(self, widget_id: str, props: Mapping[str, Any], style: str, extra: str = "") -> str:
        """Opening ``<div>`` carrying the id, component kind and binding hooks"""
        binding = str(props.get("binding") or "").strip()
        return (
            f'<div id="{escape_html(widget_id)}" data-component="{self.kind}"{extra} style="{escape_html(style)}"'
            f'{data_attribute("data-binding", binding)}'
            f'{data_attribute("data-visibility-condition", condition_of(props))}'
            f'{data_attribute("data-condition-hidden", "true" if props.get(CONDITION_HIDDEN) else None)}>'
        )
