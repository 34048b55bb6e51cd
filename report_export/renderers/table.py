"""
Table renderer

Unbound tables show placeholder rows. Tables with row data (a static ``data``
prop or rows bound at compile time) render the real cells.
"""
from typing import Any, Dict, List, Optional

from report_export.formatting import coerce_number, to_display_string
from report_export.renderers.base import ComponentRenderer, WidgetType, escape_html
from report_export.styles import combine_styles

Column = Dict[str, str]


def normalize_columns(columns: Any, rows: Optional[List[Any]] = None) -> List[Column]:
    """Normalize column definitions to ``{"key", "label"}`` pairs.

    Columns may be strings, ``{key, label}`` objects or a comma-separated
    string. When rows are given and none of the configured keys occur in the
    first row, columns are derived from the first row instead.
    """
    if isinstance(columns, str):
        columns = [part.strip() for part in columns.split(",") if part.strip()]

    normalized: List[Column] = []
    for column in columns or []:
        if isinstance(column, dict):
            key = to_display_string(column.get("key") or column.get("label"))
            label = to_display_string(column.get("label") or key)
        else:
            key = label = to_display_string(column)
        if key:
            normalized.append({"key": key, "label": label})

    if rows:
        first = rows[0]
        if isinstance(first, dict) and not any(column["key"] in first for column in normalized):
            normalized = [{"key": str(key), "label": str(key)} for key in first]
        elif isinstance(first, (list, tuple)) and not normalized:
            normalized = [{"key": str(index), "label": f"Column {index + 1}"} for index in range(len(first))]
    return normalized


def cell_value(row: Any, column: Column, index: int) -> str:
    if isinstance(row, dict):
        return to_display_string(row.get(column["key"]))
    if isinstance(row, (list, tuple)):
        return to_display_string(row[index]) if index < len(row) else ""
    return to_display_string(row) if index == 0 else ""


def render_table_markup(
    columns: List[Column],
    rows: List[List[str]],
    header_color: str,
    row_color: str,
    border_color: str,
) -> str:
    """Render a ``<table>`` from column labels and already-stringified cells"""
    border = f"border: 1px solid {escape_html(border_color)}; padding: 8px;"
    header = "".join(
        f'<th style="{border} text-align: left; color: #fff;">{escape_html(column["label"])}</th>' for column in columns
    )
    body = "".join(
        f'<tr style="background: {escape_html(row_color) if index % 2 == 0 else "#f5f5f5"};">'
        + "".join(f'<td style="{border} color: #333;">{escape_html(cell)}</td>' for cell in cells)
        + "</tr>"
        for index, cells in enumerate(rows)
    )
    return (
        '<table class="report-table" style="width: 100%; border-collapse: collapse; font-size: 14px;">'
        f'<thead><tr style="background: {escape_html(header_color)};">{header}</tr></thead>'
        f"<tbody>{body}</tbody></table>"
    )


class TableRenderer(ComponentRenderer):
    widget_type = WidgetType.TABLE
    defaults = {
        "columns": ["Column 1", "Column 2", "Column 3"],
        "rows": 3,
        "headerColor": "#1a1a2e",
        "rowColor": "#ffffff",
        "borderColor": "#e0e0e0",
        "binding": "",
        "width": 400,
        "height": 150,
    }
    runtime_props = ("columns", "rows", "headerColor", "rowColor", "borderColor", "binding")

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        data = props.get("data")
        if isinstance(data, list):
            columns = normalize_columns(props["columns"], data)
            rows = [[cell_value(row, column, index) for index, column in enumerate(columns)] for row in data]
        else:
            columns = normalize_columns(props["columns"])
            row_count = coerce_number(props["rows"])
            row_count = max(int(row_count), 0) if row_count is not None else 0
            rows = [[f"Data {index + 1}"] * len(columns) for index in range(row_count)]

        table = render_table_markup(columns, rows, props["headerColor"], props["rowColor"], props["borderColor"])
        style = combine_styles(self.position_styles(props), "overflow: auto; box-sizing: border-box")
        return f"{self.open_tag(widget_id, props, style)}{table}</div>"
