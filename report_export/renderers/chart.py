"""
Chart renderer

Charts are drawn by Chart.js in the exported document. The renderer emits an
empty canvas with placeholder content plus the full chart configuration; the
runtime resolves bindings and constructs the chart.
"""
from typing import Any, Dict, List, Mapping, Optional

from report_export.binding import has_binding
from report_export.formatting import parse_data_points, parse_labels
from report_export.models import RuntimeComponentConfig
from report_export.renderers.base import ComponentRenderer, WidgetType, condition_of, escape_html
from report_export.styles import combine_styles, hex_to_rgba

DEFAULT_CHART_COLORS = [
    "#0066cc",
    "#28a745",
    "#fd7e14",
    "#dc3545",
    "#17a2b8",
    "#6f42c1",
    "#007bff",
    "#c82333",
    "#20c997",
    "#ffc107",
]

DEFAULT_DATA_POINTS = "65, 59, 80, 81, 56"

_AXIS_TICKS = {"ticks": {"color": "#666"}, "grid": {"color": "rgba(0,0,0,0.1)"}}


def _compact(mapping: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in mapping.items() if value is not None}


def build_datasets(props: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Chart.js datasets with static data plus the bindings the runtime resolves"""
    chart_type = props.get("chartType") or "bar"
    pie = chart_type == "pie"
    multi_axis = bool(props.get("enableMultiAxis"))
    datasets = props.get("datasets") or []

    if datasets:
        built = []
        for index, dataset in enumerate(datasets):
            color = dataset.get("color") or DEFAULT_CHART_COLORS[index % len(DEFAULT_CHART_COLORS)]
            background = dataset.get("backgroundColor") or (hex_to_rgba(color, 0.5) if color.startswith("#") else color)
            dataset_type = dataset.get("chartType") or ("bar" if pie else chart_type)
            built.append(
                _compact(
                    {
                        "label": dataset.get("label") or f"Dataset {index + 1}",
                        "binding": dataset.get("binding") or None,
                        "dataPoints": dataset.get("dataPoints"),
                        "data": parse_data_points(dataset.get("dataPoints")),
                        "type": None if pie else dataset_type,
                        "backgroundColor": list(DEFAULT_CHART_COLORS) if pie else background,
                        "borderColor": color,
                        "borderWidth": 2,
                        "yAxisID": dataset.get("yAxisID") if multi_axis and dataset.get("yAxisID") else "y",
                        "fill": bool(dataset.get("fill")),
                        "tension": 0.3 if "line" in (dataset_type, chart_type) else 0,
                    }
                )
            )
        return built

    data_points = props.get("dataPoints") or DEFAULT_DATA_POINTS
    return [
        _compact(
            {
                "label": props.get("label") or "Dataset",
                "binding": props.get("binding") or None,
                "dataPoints": data_points,
                "data": parse_data_points(data_points),
                "backgroundColor": list(DEFAULT_CHART_COLORS) if pie else props.get("backgroundColor"),
                "borderColor": "#ffffff" if pie else props.get("borderColor"),
                "borderWidth": 2,
                "yAxisID": "y",
                "fill": False,
                "tension": 0.3 if chart_type == "line" else 0,
            }
        )
    ]


def build_scales(chart_type: str, multi_axis: bool) -> Optional[Dict[str, Any]]:
    if chart_type == "pie":
        return None

    base = {"beginAtZero": True, **_AXIS_TICKS}
    if not multi_axis:
        return {"y": base, "x": dict(_AXIS_TICKS)}

    return {
        "y": {
            **base,
            "type": "linear",
            "display": True,
            "position": "left",
            "title": {"display": True, "text": "Primary Axis", "color": "#666"},
        },
        "y1": {
            **base,
            "type": "linear",
            "display": True,
            "position": "right",
            "title": {"display": True, "text": "Secondary Axis", "color": "#666"},
            "grid": {"drawOnChartArea": False},
        },
        "x": dict(_AXIS_TICKS),
    }


def build_options(props: Mapping[str, Any]) -> Dict[str, Any]:
    chart_type = props.get("chartType") or "bar"
    return _compact(
        {
            "responsive": True,
            "maintainAspectRatio": False,
            "interaction": {"mode": "index", "intersect": False},
            "plugins": {
                "legend": {"position": "top", "labels": {"color": "#666"}},
                "title": {"display": True, "text": props.get("title") or "", "color": "#333", "font": {"size": 16}},
            },
            "scales": build_scales(chart_type, bool(props.get("enableMultiAxis"))),
        }
    )


class ChartRenderer(ComponentRenderer):
    widget_type = WidgetType.CHART
    defaults = {
        "chartType": "bar",
        "title": "Chart Title",
        "label": "Dataset",
        "labels": "",
        "dataPoints": DEFAULT_DATA_POINTS,
        "binding": "",
        "backgroundColor": "rgba(0, 102, 204, 0.5)",
        "borderColor": "#0066cc",
        "datasets": [],
        "enableMultiAxis": False,
        "width": 400,
        "height": 300,
    }
    config_from_bound_props = True

    def labels(self, props: Mapping[str, Any]) -> List[str]:
        datasets = props.get("datasets") or []
        primary = (datasets[0].get("dataPoints") if datasets else None) or props.get("dataPoints")
        return parse_labels(props.get("labels"), len(parse_data_points(primary)))

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        style = combine_styles(
            self.position_styles(props),
            "box-sizing: border-box; background: #fff; border-radius: 8px; padding: 16px",
        )
        placeholder = (
            '<div style="display: flex; flex-direction: column; align-items: center; justify-content: center; '
            'height: 100%; color: #666;">'
            f'<div style="font-size: 14px; font-weight: 500; margin-bottom: 8px;">{escape_html(props["title"])}</div>'
            '<div style="font-size: 12px; color: #999;">Chart will render when data is loaded</div>'
            "</div>"
        )
        return (
            f"{self.open_tag(widget_id, props, style)}"
            f'<canvas id="{escape_html(widget_id)}-canvas" style="width: 100%; height: 100%;">{placeholder}</canvas>'
            "</div>"
        )

    def build_config(self, widget_id: str, props: Mapping[str, Any]) -> Optional[RuntimeComponentConfig]:
        title = props.get("title") or ""
        datasets = props.get("datasets") or []
        config_props = {
            "chartType": props.get("chartType") or "bar",
            "title": title,
            "labels": self.labels(props),
            "datasets": build_datasets(props),
            "options": build_options(props),
            "enableMultiAxis": bool(props.get("enableMultiAxis")),
            "bindings": _compact(
                {
                    "title": title if has_binding(title) else None,
                    "datasets": [
                        _compact({"binding": dataset.get("binding"), "dataPoints": dataset.get("dataPoints")})
                        for dataset in datasets
                    ],
                    "primaryBinding": props.get("binding") or None,
                }
            ),
        }
        condition = condition_of(props)
        if condition:
            config_props["visibilityCondition"] = condition
        return RuntimeComponentConfig(id=widget_id, type=self.kind, props=config_props)
