"""
FastAPI endpoints for template export

Provides REST API for compiling templates to standalone HTML, validating
templates and listing supported widget types.
"""
import re
from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from fastapi.responses import HTMLResponse
from pydantic import Field, field_validator

from core.config import get_settings
from core.exceptions import ValidationError
from core.logging import get_logger
from report_export.exporter import report_exporter
from report_export.models import CompileResult, ExportOptions, PageState, WidgetTree, WireModel
from report_export.renderers import renderer_registry

# Initialize logger
logger = get_logger("report_export_api", domain="report_export")

# Create router
router = APIRouter()

_UNSAFE_FILENAME_CHARS = re.compile(r'[^\w\s.-]')


class ExportRequest(WireModel):
    tree: WidgetTree = Field(default_factory=WidgetTree)
    sample_data: Optional[Any] = None
    options: ExportOptions = Field(default_factory=ExportOptions)

    @field_validator("tree", mode="before")
    @classmethod
    def parse_tree(cls, v):
        return WidgetTree.from_payload(v)


class PagesExportRequest(WireModel):
    pages: List[PageState] = Field(default_factory=list)
    sample_data: Optional[Any] = None
    options: ExportOptions = Field(default_factory=ExportOptions)


class ValidateRequest(WireModel):
    tree: WidgetTree = Field(default_factory=WidgetTree)
    sample_data: Optional[Any] = None

    @field_validator("tree", mode="before")
    @classmethod
    def parse_tree(cls, v):
        return WidgetTree.from_payload(v)


def _check_tree_size(node_count: int) -> None:
    max_nodes = get_settings().max_tree_nodes
    if node_count > max_nodes:
        raise ValidationError(
            f"Template has {node_count} widgets; at most {max_nodes} are allowed",
            field="tree",
            node_count=node_count,
        )


def _download_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", filename).strip() or "Report"


def _html_response(result: CompileResult, filename: str) -> HTMLResponse:
    return HTMLResponse(
        content=result.html,
        headers={
            "Content-Disposition": f'attachment; filename="{_download_filename(filename)}.html"',
            "X-Report-Components": str(result.component_count),
            "X-Report-Warnings": str(len(result.warnings)),
        },
    )


@router.post("/", response_class=HTMLResponse)
async def export_template(request: ExportRequest) -> HTMLResponse:
    """Compile a widget tree into a downloadable HTML document."""
    if not request.tree.nodes:
        raise ValidationError("Template has no widgets", field="tree")
    _check_tree_size(len(request.tree.nodes))

    result = await report_exporter.export(request.tree, request.sample_data, request.options)
    logger.info(f"Exported template '{request.options.filename}' via API")
    return _html_response(result, request.options.filename)


@router.post("/pages", response_class=HTMLResponse)
async def export_pages(request: PagesExportRequest) -> HTMLResponse:
    """Compile a multi-page template into one HTML document."""
    if not request.pages:
        raise ValidationError("Template has no pages", field="pages")
    _check_tree_size(sum(len(page.canvas_state.nodes) for page in request.pages))

    result = await report_exporter.export_pages(request.pages, request.sample_data, request.options)
    return _html_response(result, request.options.filename)


@router.post("/validate")
async def validate_template(request: ValidateRequest) -> Dict[str, Any]:
    """Report compile diagnostics without producing a document."""
    _check_tree_size(len(request.tree.nodes))
    diagnostics = report_exporter.validate_template(request.tree, request.sample_data)
    errors = [d for d in diagnostics if d.level.value == "error"]
    return {
        "valid": not errors,
        "error_count": len(errors),
        "warning_count": sum(1 for d in diagnostics if d.level.value == "warning"),
        "diagnostics": [d.to_dict() for d in diagnostics],
    }


@router.get("/widgets")
async def list_widgets() -> Dict[str, Any]:
    """List the widget types the compiler can render."""
    return {"widgets": renderer_registry.registered_types()}
