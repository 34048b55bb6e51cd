"""
Report Export Module

Compiles widget trees built in the report designer into standalone,
print-ready HTML documents with an embedded data-binding runtime.
"""

from .compiler import CompiledTree, TreeCompiler, check_bindings, find_roots
from .document import DocumentAssembler
from .exporter import ReportExporter, compile_pages, compile_template, report_exporter, validate_template
from .models import (
    CompileResult,
    Diagnostic,
    DiagnosticLevel,
    ExportOptions,
    PageMargins,
    PageSize,
    PageState,
    RuntimeComponentConfig,
    WidgetNode,
    WidgetTree,
)
from .renderers import ComponentRenderer, RendererRegistry, WidgetType, renderer_registry

__all__ = [
    # Entry points
    "compile_template",
    "compile_pages",
    "validate_template",
    "ReportExporter",
    "report_exporter",
    # Compilation
    "TreeCompiler",
    "CompiledTree",
    "DocumentAssembler",
    "check_bindings",
    "find_roots",
    # Renderers
    "ComponentRenderer",
    "RendererRegistry",
    "WidgetType",
    "renderer_registry",
    # Models
    "CompileResult",
    "Diagnostic",
    "DiagnosticLevel",
    "ExportOptions",
    "PageMargins",
    "PageSize",
    "PageState",
    "RuntimeComponentConfig",
    "WidgetNode",
    "WidgetTree",
]
