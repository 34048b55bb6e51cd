"""
Command-line interface for ReportBuilder
"""
import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import click

from core.config import settings
from core.exceptions import ReportBuilderError
from core.logging import get_logger
from report_export.exporter import report_exporter
from report_export.models import ExportOptions, PageMargins
from report_export.renderers import renderer_registry

logger = get_logger(__name__)


def _load_json(path: Optional[str]) -> Any:
    if path is None:
        return None
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e}")


def _parse_margins(ctx, param, value: Optional[str]) -> Optional[PageMargins]:
    if value is None:
        return None
    parts = [part.strip() for part in value.split(",")]
    try:
        numbers = [float(part) for part in parts]
    except ValueError:
        raise click.BadParameter("margins must be numbers in millimetres")
    if len(numbers) == 1:
        return PageMargins.uniform(numbers[0])
    if len(numbers) != 4:
        raise click.BadParameter("use one value or four values: top,right,bottom,left")
    top, right, bottom, left = numbers
    return PageMargins(top=top, right=right, bottom=bottom, left=left)


def _echo_diagnostics(diagnostics) -> None:
    for diagnostic in diagnostics:
        location = f" [{diagnostic.widget_id}]" if diagnostic.widget_id else ""
        click.echo(f"{diagnostic.level.value.upper()} {diagnostic.code}{location}: {diagnostic.message}", err=True)


@click.group()
@click.version_option(version=settings.app_version)
def cli():
    """ReportBuilder CLI - compile report templates to standalone HTML"""
    pass


@cli.command("compile")
@click.argument("tree_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--data", "data_file", type=click.Path(exists=True, dir_okay=False), help="Sample data JSON file")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file (default: <filename>.html)")
@click.option("--filename", default=None, help="Document title (default: tree file name)")
@click.option(
    "--page-size",
    type=click.Choice(["A4", "Letter"]),
    default=settings.default_page_size,
    show_default=True,
    help="Printed page size",
)
@click.option("--margins", callback=_parse_margins, help="Margins in mm: one value or top,right,bottom,left")
@click.option("--embed-data", is_flag=True, help="Embed the sample data in the document")
@click.option("--watermark", is_flag=True, help="Append the attribution watermark")
@click.option("--no-inline-assets", is_flag=True, help="Keep external image URLs")
@click.option("--preview", is_flag=True, help="Bake sample data into the static markup")
@click.option("--no-auto-print", is_flag=True, help="Do not open the print dialog")
@click.option("--strict", is_flag=True, help="Fail on compile errors")
def compile_command(
    tree_json: str,
    data_file: Optional[str],
    output: Optional[str],
    filename: Optional[str],
    page_size: str,
    margins: Optional[PageMargins],
    embed_data: bool,
    watermark: bool,
    no_inline_assets: bool,
    preview: bool,
    no_auto_print: bool,
    strict: bool,
):
    """Compile a widget tree JSON file into an HTML document"""
    tree = _load_json(tree_json)
    sample_data = _load_json(data_file)
    title = filename or Path(tree_json).stem
    options = ExportOptions(
        filename=title,
        page_size=page_size,
        margins=margins or PageMargins.uniform(settings.default_margin_mm),
        include_sample_data=embed_data,
        include_watermark=watermark,
        inline_assets=False if no_inline_assets else None,
        bind_sample_data=preview,
        auto_print=False if no_auto_print else None,
        strict=strict,
    )

    try:
        result = asyncio.run(report_exporter.export(tree, sample_data, options))
    except ReportBuilderError as e:
        click.echo(f"✗ {e.message}", err=True)
        for diagnostic in e.details.get("diagnostics", []):
            click.echo(f"  {diagnostic['level'].upper()} {diagnostic['code']}: {diagnostic['message']}", err=True)
        raise SystemExit(1)

    _echo_diagnostics(result.diagnostics)
    target = Path(output or f"{options.filename}.html")
    target.write_text(result.html, encoding="utf-8")
    click.echo(f"✓ Wrote {target} ({result.component_count} widgets, {result.render_time_ms:.1f} ms)")


@cli.command()
@click.argument("tree_json", type=click.Path(exists=True, dir_okay=False))
@click.option("--data", "data_file", type=click.Path(exists=True, dir_okay=False), help="Sample data JSON file")
def validate(tree_json: str, data_file: Optional[str]):
    """Report compile diagnostics for a widget tree"""
    diagnostics = report_exporter.validate_template(_load_json(tree_json), _load_json(data_file))
    _echo_diagnostics(diagnostics)

    errors = [d for d in diagnostics if d.level.value == "error"]
    if errors:
        click.echo(f"✗ {len(errors)} errors, {len(diagnostics) - len(errors)} other diagnostics", err=True)
        raise SystemExit(1)
    click.echo(f"✓ Template is valid ({len(diagnostics)} diagnostics)")


@cli.command()
def widgets():
    """List supported widget types"""
    for widget_type in renderer_registry.registered_types():
        click.echo(widget_type)


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", default=8000, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def runserver(host: str, port: int, reload: bool):
    """Run the FastAPI development server"""
    import uvicorn

    click.echo(f"Starting ReportBuilder server on {host}:{port}")
    click.echo(f"Environment: {settings.environment}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
def env_info():
    """Display environment information"""
    click.echo(f"ReportBuilder v{settings.app_version}")
    click.echo(f"Environment: {settings.environment}")
    click.echo(f"Chart.js: {settings.chart_js_cdn_url}")
    click.echo(f"Runtime data path: {settings.runtime_data_path}")
    click.echo(f"Auto print: {settings.runtime_auto_print} (delay {settings.runtime_print_delay_ms} ms)")
    click.echo(f"Asset inlining: {settings.asset_inline_enabled} (concurrency {settings.asset_fetch_concurrency})")


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
