"""
Text renderers: free text, bullet lists and formatted dates
"""
from datetime import datetime
from typing import Any, Dict, List, Mapping

from report_export.binding import has_binding
from report_export.formatting import format_datetime, parse_datetime, resolve_date_format, to_display_string
from report_export.renderers.base import ComponentRenderer, WidgetType, data_attribute, escape_html
from report_export.styles import combine_styles, generate_font_styles

ORDERED_LIST_STYLES = ("decimal", "lower-roman", "upper-alpha")


class TextRenderer(ComponentRenderer):
    """Static text, a bound value, or text with inline ``{{path}}`` markers"""

    widget_type = WidgetType.TEXT
    defaults = {
        "text": "Edit this text",
        "fontSize": 16,
        "fontWeight": "normal",
        "fontFamily": "inherit",
        "color": "#000000",
        "textAlign": "left",
        "binding": "",
        "width": 200,
        "height": 50,
    }
    runtime_props = ("text", "binding")

    def is_bound(self, props: Mapping[str, Any]) -> bool:
        return super().is_bound(props) or has_binding(props.get("text"))

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        style = combine_styles(
            self.position_styles(props),
            generate_font_styles(
                font_size=props["fontSize"],
                font_weight=props["fontWeight"],
                font_family=props["fontFamily"],
                color=props["color"],
                text_align=props["textAlign"],
            ),
            "margin: 0; padding: 4px 8px; box-sizing: border-box",
        )
        text = to_display_string(props["text"])
        extra = ""
        if not super().is_bound(props) and has_binding(text):
            extra = ' data-has-bindings="true"'
        return f"{self.open_tag(widget_id, props, style, extra=extra)}{escape_html(text)}</div>"


def split_items(items: Any) -> List[str]:
    """Newline-separated text or a list becomes non-empty list items"""
    if isinstance(items, (list, tuple)):
        values = [to_display_string(item) for item in items]
    else:
        values = to_display_string(items).split("\n")
    return [value for value in values if value.strip()]


class BulletListRenderer(ComponentRenderer):
    widget_type = WidgetType.BULLET_LIST
    defaults = {
        "items": "Item 1\nItem 2\nItem 3",
        "listStyle": "disc",
        "fontSize": 14,
        "fontFamily": "inherit",
        "color": "#333333",
        "lineHeight": 1.6,
        "binding": "",
        "width": 200,
        "height": 100,
    }
    runtime_props = ("items", "listStyle", "binding")

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        style = combine_styles(
            self.position_styles(props),
            generate_font_styles(
                font_size=props["fontSize"],
                font_family=props["fontFamily"],
                color=props["color"],
                line_height=props["lineHeight"],
            ),
            "overflow: auto; box-sizing: border-box; padding: 8px 12px",
        )
        list_style = props["listStyle"]
        tag = "ol" if list_style in ORDERED_LIST_STYLES else "ul"
        items = "".join(f'<li style="margin-bottom: 4px;">{escape_html(item)}</li>' for item in split_items(props["items"]))
        list_html = (
            f'<{tag} class="report-list" style="list-style-type: {escape_html(list_style)}; '
            f'margin: 0; padding-left: 1.5em;">{items}</{tag}>'
        )
        return f"{self.open_tag(widget_id, props, style)}{list_html}</div>"


class DateTimeRenderer(ComponentRenderer):
    """Formats ``value`` when given, otherwise the time of compilation"""

    widget_type = WidgetType.DATE_TIME
    defaults = {
        "format": "date-long",
        "customFormat": "",
        "fontSize": 12,
        "fontFamily": "inherit",
        "color": "#666666",
        "textAlign": "center",
        "binding": "",
        "width": 150,
        "height": 30,
    }
    runtime_props = ("format", "customFormat", "binding")

    def display_text(self, props: Mapping[str, Any]) -> str:
        pattern = resolve_date_format(props["format"], props.get("customFormat"))
        value = props.get("value")
        if value is None:
            return format_datetime(datetime.now(), pattern)
        moment = parse_datetime(value)
        return format_datetime(moment, pattern) if moment else to_display_string(value)

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        text_align = props["textAlign"]
        style = combine_styles(
            self.position_styles(props),
            generate_font_styles(
                font_size=props["fontSize"],
                font_family=props["fontFamily"],
                color=props["color"],
                text_align=text_align,
            ),
            f"display: flex; align-items: center; justify-content: {text_align}; box-sizing: border-box; padding: 0 8px",
        )
        extra = data_attribute("data-format", props["format"])
        return f"{self.open_tag(widget_id, props, style, extra=extra)}{escape_html(self.display_text(props))}</div>"
