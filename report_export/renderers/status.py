"""
Status renderers: pass/fail indicators, gauges and progress bars
"""
import math
from typing import Any, Dict

from report_export.formatting import clamp_percentage, coerce_number, format_number, to_display_string, to_fixed
from report_export.renderers.base import ComponentRenderer, WidgetType, data_attribute, escape_html
from report_export.styles import combine_styles

STATUS_STYLES: Dict[str, Dict[str, str]] = {
    "pass": {
        "bgColor": "rgba(57, 255, 20, 0.15)",
        "borderColor": "#39ff14",
        "textColor": "#39ff14",
        "icon": "&#10004;",
        "label": "PASS",
    },
    "fail": {
        "bgColor": "rgba(255, 107, 107, 0.15)",
        "borderColor": "#ff6b6b",
        "textColor": "#ff6b6b",
        "icon": "&#10008;",
        "label": "FAIL",
    },
    "warning": {
        "bgColor": "rgba(255, 176, 0, 0.15)",
        "borderColor": "#ffb000",
        "textColor": "#ffb000",
        "icon": "&#9888;",
        "label": "WARNING",
    },
    "neutral": {
        "bgColor": "rgba(156, 163, 175, 0.15)",
        "borderColor": "#9ca3af",
        "textColor": "#9ca3af",
        "icon": "&#8722;",
        "label": "N/A",
    },
}

TRUTHY_STATUS_VALUES = ("true", "1", "yes")

GAUGE_STROKE_WIDTH = 12
GAUGE_ARC_FRACTION = 0.75
GAUGE_ROTATION = -225


def normalize_status(value: Any) -> str:
    """Map a bound value to pass/fail/warning/neutral"""
    status = to_display_string(value).strip().lower()
    if status in STATUS_STYLES:
        return status
    return "pass" if status in TRUTHY_STATUS_VALUES else "neutral"


def status_label(status: str, props: Dict[str, Any]) -> str:
    if props.get("label"):
        return to_display_string(props["label"])
    label_prop = {"pass": "passLabel", "fail": "failLabel", "warning": "warningLabel"}.get(status)
    if label_prop and props.get(label_prop):
        return to_display_string(props[label_prop])
    return STATUS_STYLES[status]["label"]


def _svg_number(value: float) -> str:
    return format_number(round(value, 4))


class IndicatorRenderer(ComponentRenderer):
    widget_type = WidgetType.INDICATOR
    defaults = {
        "status": "neutral",
        "label": "",
        "passLabel": "PASS",
        "failLabel": "FAIL",
        "warningLabel": "WARNING",
        "binding": "",
        "width": 120,
        "height": 44,
    }
    runtime_props = ("status", "label", "passLabel", "failLabel", "warningLabel", "binding")

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        status = normalize_status(props["status"])
        palette = STATUS_STYLES[status]
        badge_style = (
            "display: flex; align-items: center; justify-content: center; width: 100%; height: 100%; "
            "gap: 8px; padding: 8px 16px; border-radius: 8px; "
            f"border: 2px solid {palette['borderColor']}; background: {palette['bgColor']}; box-sizing: border-box"
        )
        icon_style = f"font-size: 18px; color: {palette['textColor']}; font-weight: bold"
        label_style = (
            f"font-size: 14px; font-weight: 600; color: {palette['textColor']}; "
            "font-family: 'JetBrains Mono', monospace"
        )
        badge = (
            f'<div class="indicator-badge" style="{badge_style}">'
            f'<span class="indicator-icon" style="{icon_style}">{palette["icon"]}</span>'
            f'<span class="indicator-label" style="{label_style}">{escape_html(status_label(status, props))}</span>'
            "</div>"
        )
        extra = data_attribute("data-status", status)
        return f"{self.open_tag(widget_id, props, self.position_styles(props), extra=extra)}{badge}</div>"


class GaugeRenderer(ComponentRenderer):
    """270 degree SVG arc gauge with the value in the centre"""

    widget_type = WidgetType.GAUGE
    defaults = {
        "value": 50,
        "min": 0,
        "max": 100,
        "label": "",
        "unit": "%",
        "primaryColor": "#0066cc",
        "backgroundColor": "rgba(0, 0, 0, 0.1)",
        "textColor": "#333333",
        "binding": "",
        "width": 150,
        "height": 150,
    }
    runtime_props = ("value", "min", "max", "label", "unit", "binding")

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        value = coerce_number(props["value"])
        value = 0 if value is None else value
        minimum = coerce_number(props["min"]) or 0
        maximum = coerce_number(props["max"])
        maximum = 100 if maximum is None else maximum
        percentage = clamp_percentage(value, minimum, maximum)

        width = coerce_number(props["width"]) or 0
        height = coerce_number(props["height"]) or 0
        svg_size = max(min(width, height) - 20, 0)
        radius = max(svg_size / 2 - GAUGE_STROKE_WIDTH, 0)
        circumference = 2 * math.pi * radius
        arc_length = circumference * GAUGE_ARC_FRACTION
        value_length = arc_length * percentage / 100
        center = svg_size / 2

        circle = (
            f'cx="{_svg_number(center)}" cy="{_svg_number(center)}" r="{_svg_number(radius)}" fill="none" '
            f'stroke-width="{GAUGE_STROKE_WIDTH}" stroke-linecap="round"'
        )
        svg = (
            f'<svg width="{_svg_number(svg_size)}" height="{_svg_number(svg_size)}" '
            f'viewBox="0 0 {_svg_number(svg_size)} {_svg_number(svg_size)}" '
            f'style="transform: rotate({GAUGE_ROTATION}deg);">'
            f'<circle class="gauge-track" {circle} stroke="{escape_html(props["backgroundColor"])}" '
            f'stroke-dasharray="{_svg_number(arc_length)} {_svg_number(circumference)}" />'
            f'<circle class="gauge-value-arc" {circle} stroke="{escape_html(props["primaryColor"])}" '
            f'stroke-dasharray="{_svg_number(value_length)} {_svg_number(circumference)}" />'
            "</svg>"
        )

        label = props["label"]
        label_html = (
            f'<span class="gauge-label" style="font-size: {_svg_number(svg_size * 0.08)}px; opacity: 0.7;">'
            f"{escape_html(label)}</span>"
            if label
            else ""
        )
        center_html = (
            '<div style="position: absolute; display: flex; flex-direction: column; align-items: center; '
            f'color: {escape_html(props["textColor"])};">'
            f'<span class="gauge-value" style="font-size: {_svg_number(svg_size * 0.18)}px; font-weight: bold;">'
            f'{to_fixed(value, 0)}{escape_html(props["unit"])}</span>{label_html}</div>'
        )

        style = combine_styles(
            self.position_styles(props),
            "display: flex; flex-direction: column; align-items: center; justify-content: center; "
            "box-sizing: border-box; background: rgba(0, 0, 0, 0.05); border-radius: 8px",
        )
        extra = (
            f"{data_attribute('data-value', format_number(value))}"
            f"{data_attribute('data-arc-length', _svg_number(arc_length))}"
            f"{data_attribute('data-circumference', _svg_number(circumference))}"
        )
        inner_style = (
            "position: relative; display: flex; flex-direction: column; align-items: center; "
            "justify-content: center; width: 100%; height: 100%"
        )
        return f'{self.open_tag(widget_id, props, style, extra=extra)}<div style="{inner_style}">{svg}{center_html}</div></div>'


class ProgressBarRenderer(ComponentRenderer):
    widget_type = WidgetType.PROGRESS_BAR
    defaults = {
        "value": 50,
        "min": 0,
        "max": 100,
        "label": "",
        "showValue": True,
        "fillColor": "#0066cc",
        "backgroundColor": "rgba(0, 0, 0, 0.1)",
        "textColor": "#333333",
        "borderRadius": 4,
        "binding": "",
        "width": 200,
        "height": 40,
    }
    runtime_props = ("value", "min", "max", "label", "showValue", "binding")

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        value = coerce_number(props["value"])
        value = 0 if value is None else value
        minimum = coerce_number(props["min"]) or 0
        maximum = coerce_number(props["max"])
        maximum = 100 if maximum is None else maximum
        percentage = clamp_percentage(value, minimum, maximum)

        label = props["label"]
        show_value = props["showValue"] is not False
        label_row = ""
        if label or show_value:
            value_html = f'<span class="progress-value">{to_fixed(percentage, 0)}%</span>' if show_value else ""
            label_row = (
                '<div style="display: flex; justify-content: space-between; margin-bottom: 4px; '
                f'font-size: 12px; color: {escape_html(props["textColor"])};">'
                f'<span class="progress-label">{escape_html(label)}</span>{value_html}</div>'
            )

        radius = props["borderRadius"]
        track_style = (
            f"width: 100%; overflow: hidden; flex: 1; background: {escape_html(props['backgroundColor'])}; "
            f"border-radius: {radius}px; min-height: 6px"
        )
        fill_style = (
            f"width: {_svg_number(percentage)}%; height: 100%; background: {escape_html(props['fillColor'])}; "
            f"border-radius: {radius}px; box-sizing: border-box"
        )
        bar = f'<div class="progress-track" style="{track_style}"><div class="progress-fill" style="{fill_style}"></div></div>'

        style = combine_styles(
            self.position_styles(props),
            "display: flex; flex-direction: column; justify-content: center; padding: 4px 8px; box-sizing: border-box",
        )
        extra = data_attribute("data-value", format_number(value))
        return f"{self.open_tag(widget_id, props, style, extra=extra)}{label_row}{bar}</div>"
