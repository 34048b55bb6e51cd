"""
Data models for template export

Wire payloads come from the browser editor in camelCase; every model accepts
both camelCase aliases and snake_case field names.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

UNKNOWN_TYPE = "Unknown"


class WireModel(BaseModel):
    """Base model accepting camelCase or snake_case keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageSize(str, Enum):
    A4 = "A4"
    LETTER = "Letter"


class DiagnosticLevel(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class WidgetNode(WireModel):
    """A single widget in the template tree"""

    id: str = Field("", description="Widget identifier, unique within the tree")
    type: str = Field(UNKNOWN_TYPE, description="Widget type name, e.g. Text or Chart")
    props: Dict[str, Any] = Field(default_factory=dict, description="Type-specific configuration")
    children: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("children", "nodes"),
        description="Ordered child widget ids",
    )
    custom: Dict[str, Any] = Field(default_factory=dict, description="Editor metadata, not interpreted")

    @field_validator("type", mode="before")
    @classmethod
    def resolve_type_name(cls, v):
        # The editor serializes component types as {"resolvedName": "Text"}
        if isinstance(v, dict):
            return v.get("resolvedName") or UNKNOWN_TYPE
        return v or UNKNOWN_TYPE

    @field_validator("props", "custom", mode="before")
    @classmethod
    def default_mapping(cls, v):
        return v if v is not None else {}

    @field_validator("children", mode="before")
    @classmethod
    def default_children(cls, v):
        return v if v is not None else []


class WidgetTree(WireModel):
    """Arena of widgets keyed by id; parent links are implied by ``children``"""

    nodes: Dict[str, WidgetNode] = Field(default_factory=dict)
    root_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("rootId", "rootNodeId", "root_id"),
        description="Informational only, roots are derived from children edges",
    )

    @model_validator(mode="before")
    @classmethod
    def fill_node_ids(cls, data):
        if isinstance(data, dict) and isinstance(data.get("nodes"), dict):
            nodes = {}
            for key, node in data["nodes"].items():
                if isinstance(node, dict) and not node.get("id"):
                    node = {**node, "id": key}
                nodes[key] = node
            data = {**data, "nodes": nodes}
        return data

    @classmethod
    def from_payload(cls, payload: Any) -> "WidgetTree":
        """Build a tree from ``{"nodes": {...}}``, a bare node map, or a tree"""
        if isinstance(payload, WidgetTree):
            return payload
        if payload is None:
            return cls()
        if isinstance(payload, dict) and isinstance(payload.get("nodes"), dict):
            return cls.model_validate(payload)
        return cls.model_validate({"nodes": payload})

    def get(self, widget_id: str) -> Optional[WidgetNode]:
        return self.nodes.get(widget_id)


class PageMargins(WireModel):
    """Printed page margins in millimetres"""

    model_config = ConfigDict(frozen=True)

    top: float = Field(20, ge=0)
    right: float = Field(20, ge=0)
    bottom: float = Field(20, ge=0)
    left: float = Field(20, ge=0)

    @classmethod
    def uniform(cls, value: float) -> "PageMargins":
        return cls(top=value, right=value, bottom=value, left=value)


class ExportOptions(WireModel):
    """Options for a single export call

    Fields left as ``None`` fall back to application settings when the
    document is assembled.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    filename: str = Field("Report", description="Document title and download name")
    page_size: PageSize = Field(PageSize.A4, description="Printed page size")
    margins: PageMargins = Field(default_factory=PageMargins, description="Page margins in mm")
    include_sample_data: bool = Field(False, description="Embed the sample data in the document")
    include_watermark: bool = Field(False, description="Append the attribution watermark")

    auto_print: Optional[bool] = Field(None, description="Open the print dialog after rendering")
    print_delay_ms: Optional[int] = Field(None, ge=0, description="Delay before printing")
    data_path: Optional[str] = Field(None, description="Relative path of the runtime data file")
    fetch_timeout_ms: Optional[int] = Field(None, ge=0, description="Runtime data fetch timeout")
    inline_assets: Optional[bool] = Field(None, description="Embed external images as data URLs")
    chart_cdn_fallbacks: bool = Field(False, description="Try alternate CDNs when the chart library fails")
    bind_sample_data: bool = Field(False, description="Render sample values into the static markup")
    strict: bool = Field(False, description="Raise on error-level diagnostics")

    @field_validator("filename")
    @classmethod
    def default_filename(cls, v):
        return v.strip() or "Report"


class PageSettings(WireModel):
    background: str = "#ffffff"
    padding: float = 40


class PageState(WireModel):
    """One page of a multi-page template"""

    id: str
    name: str = ""
    canvas_state: WidgetTree = Field(default_factory=WidgetTree)
    settings: PageSettings = Field(default_factory=PageSettings)
    order: int = 0

    @field_validator("canvas_state", mode="before")
    @classmethod
    def parse_canvas(cls, v):
        return WidgetTree.from_payload(v)


class RuntimeComponentConfig(BaseModel):
    """Per-widget entry consumed by the embedded runtime"""

    id: str
    type: str
    props: Dict[str, Any] = Field(default_factory=dict)


class RendererResult(BaseModel):
    html: str = ""
    component_config: Optional[RuntimeComponentConfig] = None

    @classmethod
    def empty(cls) -> "RendererResult":
        return cls()


class Diagnostic(BaseModel):
    """A non-fatal problem found while compiling"""

    level: DiagnosticLevel
    code: str
    message: str
    widget_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "code": self.code,
            "message": self.message,
            "widget_id": self.widget_id,
        }


class CompileResult(BaseModel):
    html: str
    components: List[RuntimeComponentConfig] = Field(default_factory=list)
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    component_count: int = 0
    render_time_ms: float = 0.0

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.level == DiagnosticLevel.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.level == DiagnosticLevel.WARNING]
