"""
Export orchestration

``ReportExporter`` runs the full pipeline for one export: asset inlining,
tree compilation, binding checks and document assembly. Module-level
``compile_template`` and ``compile_pages`` return just the HTML.
"""
import time
from typing import Any, Iterable, List, Optional, Tuple, Union

import httpx

from core.config import Settings, get_settings
from core.exceptions import CompileError
from core.logging import get_logger
from core.metrics import metrics
from report_export.assets import inline_tree_assets
from report_export.compiler import CompiledTree, TreeCompiler, check_bindings
from report_export.document import DocumentAssembler
from report_export.models import (
    CompileResult,
    Diagnostic,
    DiagnosticLevel,
    ExportOptions,
    PageState,
    WidgetTree,
)

logger = get_logger(__name__, domain="report_export")

OptionsInput = Union[ExportOptions, dict, None]


def coerce_options(options: OptionsInput) -> ExportOptions:
    if options is None:
        return ExportOptions()
    if isinstance(options, ExportOptions):
        return options
    return ExportOptions.model_validate(options)


def coerce_pages(pages: Iterable[Any]) -> List[PageState]:
    return [page if isinstance(page, PageState) else PageState.model_validate(page) for page in pages]


class ReportExporter:
    """Compiles widget trees into standalone HTML documents"""

    def __init__(
        self,
        compiler: Optional[TreeCompiler] = None,
        assembler: Optional[DocumentAssembler] = None,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.compiler = compiler or TreeCompiler()
        self.assembler = assembler or DocumentAssembler(self.settings)
        self.client = client

    def _inline_enabled(self, options: ExportOptions) -> bool:
        if options.inline_assets is None:
            return self.settings.asset_inline_enabled
        return options.inline_assets

    async def _inline(self, tree: WidgetTree, options: ExportOptions) -> Tuple[WidgetTree, List[Diagnostic]]:
        if not self._inline_enabled(options):
            return tree, []
        tree, assets = await inline_tree_assets(
            tree,
            client=self.client,
            concurrency=self.settings.asset_fetch_concurrency,
        )
        diagnostics = [
            Diagnostic(
                level=DiagnosticLevel.WARNING,
                code="ASSET_INLINE_FAILED",
                message=f"Image {error['url']} was not inlined: {error['error']}",
            )
            for error in assets.errors
        ]
        return tree, diagnostics

    def _finish(
        self,
        kind: str,
        compiled: CompiledTree,
        diagnostics: List[Diagnostic],
        sample_data: Any,
        options: ExportOptions,
        started: float,
    ) -> CompileResult:
        diagnostics = diagnostics + compiled.diagnostics
        if sample_data is not None:
            diagnostics.extend(check_bindings(compiled.components, sample_data))

        for diagnostic in diagnostics:
            metrics.track_diagnostic(diagnostic.code, diagnostic.level.value)

        errors = [d for d in diagnostics if d.level == DiagnosticLevel.ERROR]
        if options.strict and errors:
            metrics.track_export(kind, time.perf_counter() - started, status="failed")
            logger.warning(f"Strict export of '{options.filename}' failed with {len(errors)} errors")
            raise CompileError(
                f"Template has {len(errors)} compile errors",
                diagnostics=[d.to_dict() for d in diagnostics],
            )

        html = self.assembler.assemble(compiled.html, compiled.components, sample_data, options)
        elapsed = time.perf_counter() - started
        render_time_ms = elapsed * 1000
        metrics.track_export(kind, elapsed, compiled.widget_count)
        logger.info(
            f"Exported '{options.filename}'",
            extra={
                "component_count": compiled.widget_count,
                "diagnostic_count": len(diagnostics),
                "render_time_ms": round(render_time_ms, 2),
            },
        )
        return CompileResult(
            html=html,
            components=compiled.components,
            diagnostics=diagnostics,
            component_count=compiled.widget_count,
            render_time_ms=render_time_ms,
        )

    async def export(self, tree: Any, sample_data: Any = None, options: OptionsInput = None) -> CompileResult:
        """
        Export a single-page template

        Args:
            tree: WidgetTree, ``{"nodes": {...}}`` payload or bare node map
            sample_data: Data to embed and/or bake into a preview
            options: Export options

        Returns:
            CompileResult with the document and diagnostics

        Raises:
            CompileError: In strict mode when error diagnostics were reported
        """
        started = time.perf_counter()
        options = coerce_options(options)
        tree = WidgetTree.from_payload(tree)

        tree, diagnostics = await self._inline(tree, options)
        compiled = self.compiler.compile(tree, sample_data if options.bind_sample_data else None)
        return self._finish("single", compiled, diagnostics, sample_data, options, started)

    async def export_pages(
        self,
        pages: Iterable[Any],
        sample_data: Any = None,
        options: OptionsInput = None,
    ) -> CompileResult:
        """Export a multi-page template; pages are emitted in ``order``"""
        started = time.perf_counter()
        options = coerce_options(options)

        diagnostics: List[Diagnostic] = []
        inlined = []
        for page in coerce_pages(pages):
            canvas, page_diagnostics = await self._inline(page.canvas_state, options)
            diagnostics.extend(page_diagnostics)
            inlined.append(page.model_copy(update={"canvas_state": canvas}))

        compiled = self.compiler.compile_pages(inlined, sample_data if options.bind_sample_data else None)
        return self._finish("pages", compiled, diagnostics, sample_data, options, started)

    def validate_template(self, tree: Any, sample_data: Any = None) -> List[Diagnostic]:
        """Compile without assets or assembly and return the diagnostics"""
        compiled = self.compiler.compile(WidgetTree.from_payload(tree))
        diagnostics = list(compiled.diagnostics)
        if sample_data is not None:
            diagnostics.extend(check_bindings(compiled.components, sample_data))
        return diagnostics


# Global exporter instance
report_exporter = ReportExporter()


async def compile_template(tree: Any, sample_data: Any = None, options: OptionsInput = None) -> str:
    """Compile a widget tree into a standalone HTML document"""
    result = await report_exporter.export(tree, sample_data, options)
    return result.html


async def compile_pages(pages: Iterable[Any], sample_data: Any = None, options: OptionsInput = None) -> str:
    """Compile ordered pages into one standalone HTML document"""
    result = await report_exporter.export_pages(pages, sample_data, options)
    return result.html


def validate_template(tree: Any, sample_data: Any = None) -> List[Diagnostic]:
    return report_exporter.validate_template(tree, sample_data)
