"""
Compile-time binders

Each binder applies resolved data to a widget's props and returns new props;
the input props are never modified. Unresolved bindings leave the props
untouched, so the renderer's fallback content stays in place. The embedded
runtime performs the same per-kind updates on the live DOM.
"""
from typing import Any, Callable, Dict, List, Optional

from report_export.binding import has_binding, interpolate, resolve_path
from report_export.conditions import evaluate_condition
from report_export.formatting import coerce_number, parse_data_points, to_display_string
from report_export.renderers.base import CONDITION_HIDDEN, WidgetType, condition_of
from report_export.renderers.status import normalize_status

Props = Dict[str, Any]
Binder = Callable[[Props, Any], Props]


def _binding(props: Props) -> str:
    return str(props.get("binding") or "").strip()


def _resolve(props: Props, data: Any) -> Any:
    binding = _binding(props)
    return resolve_path(binding, data) if binding else None


def bind_text(props: Props, data: Any) -> Props:
    if _binding(props):
        value = _resolve(props, data)
        return props if value is None else {**props, "text": to_display_string(value)}
    text = props.get("text")
    if has_binding(text):
        return {**props, "text": interpolate(text, data)}
    return props


def bind_table(props: Props, data: Any) -> Props:
    rows = _resolve(props, data)
    return {**props, "data": rows} if isinstance(rows, list) else props


def bind_bullet_list(props: Props, data: Any) -> Props:
    items = _resolve(props, data)
    if isinstance(items, list):
        return {**props, "items": [to_display_string(item) for item in items]}
    if items is not None:
        return {**props, "items": to_display_string(items)}
    return props


def bind_indicator(props: Props, data: Any) -> Props:
    value = _resolve(props, data)
    return props if value is None else {**props, "status": normalize_status(value)}


def bind_numeric(props: Props, data: Any) -> Props:
    value = coerce_number(_resolve(props, data))
    return props if value is None else {**props, "value": value}


def bind_datetime(props: Props, data: Any) -> Props:
    value = _resolve(props, data)
    return props if value is None else {**props, "value": value}


def chart_series(value: Any) -> Optional[Dict[str, Any]]:
    """Interpret a bound chart value as ``{"data": [...], "labels": [...] | None}``.

    Accepts a list of numbers, a list of ``{label, value}`` objects (whose
    labels override the axis labels) or an object ``{data, labels}``.
    """
    if isinstance(value, dict) and isinstance(value.get("data"), list):
        labels = value.get("labels")
        return {"data": parse_data_points(value["data"]), "labels": labels if isinstance(labels, list) else None}
    if not isinstance(value, list) or not value:
        return None
    if isinstance(value[0], dict):
        labels = [to_display_string(item.get("label")) for item in value] if "label" in value[0] else None
        points = [item.get("value") if isinstance(item, dict) else item for item in value]
        return {"data": parse_data_points(points), "labels": labels}
    return {"data": parse_data_points(value), "labels": None}


def bind_chart(props: Props, data: Any) -> Props:
    bound = dict(props)
    title = props.get("title")
    if has_binding(title):
        bound["title"] = interpolate(title, data)

    labels: Optional[List[Any]] = None
    datasets = props.get("datasets") or []
    if datasets:
        bound_datasets = []
        for dataset in datasets:
            series = chart_series(resolve_path(dataset.get("binding"), data)) if dataset.get("binding") else None
            if series:
                dataset = {**dataset, "dataPoints": ", ".join(to_display_string(point) for point in series["data"])}
                labels = series["labels"] or labels
            bound_datasets.append(dataset)
        bound["datasets"] = bound_datasets
    else:
        series = chart_series(_resolve(props, data))
        if series:
            bound["dataPoints"] = ", ".join(to_display_string(point) for point in series["data"])
            labels = series["labels"]

    if labels:
        bound["labels"] = [to_display_string(label) for label in labels]
    return bound


BINDERS: Dict[WidgetType, Binder] = {
    WidgetType.TEXT: bind_text,
    WidgetType.TABLE: bind_table,
    WidgetType.BULLET_LIST: bind_bullet_list,
    WidgetType.INDICATOR: bind_indicator,
    WidgetType.GAUGE: bind_numeric,
    WidgetType.PROGRESS_BAR: bind_numeric,
    WidgetType.DATE_TIME: bind_datetime,
    WidgetType.CHART: bind_chart,
}


def bind_props(widget_type: WidgetType, props: Props, data: Any) -> Props:
    """Apply the visibility condition and the widget's binder to ``props``"""
    if data is None:
        return props
    binder = BINDERS.get(widget_type)
    bound = binder(props, data) if binder else props
    condition = condition_of(props)
    if condition and not evaluate_condition(condition, data):
        return {**bound, CONDITION_HIDDEN: True}
    return bound
