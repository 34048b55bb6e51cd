"""
Layout renderers: pages, containers, spacing, dividers, images and page numbers
"""
from typing import Any, Dict, Mapping, Optional

from report_export.models import RuntimeComponentConfig
from report_export.renderers.base import ComponentRenderer, WidgetType, data_attribute, escape_html
from report_export.styles import combine_styles, generate_font_styles

PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x200"


class PageRenderer(ComponentRenderer):
    """Flow root of a page; children are spliced in by the compiler"""

    widget_type = WidgetType.PAGE
    is_container = True
    defaults = {"background": "#ffffff", "padding": 40}

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        style = combine_styles(
            "position: relative; width: 100%; min-height: 100%",
            f"background: {props['background']}; padding: {props['padding']}px; box-sizing: border-box",
        )
        return f"{self.open_tag(widget_id, props, style)}</div>"


class ContainerRenderer(ComponentRenderer):
    widget_type = WidgetType.CONTAINER
    is_container = True
    defaults = {
        "background": "#f5f5f5",
        "padding": 16,
        "borderRadius": 8,
        "borderWidth": 1,
        "borderColor": "#e0e0e0",
        "width": 300,
        "height": 200,
    }

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        style = combine_styles(
            self.position_styles(props),
            f"background: {props['background']}; padding: {props['padding']}px; "
            f"border-radius: {props['borderRadius']}px; "
            f"border: {props['borderWidth']}px solid {props['borderColor']}; "
            "box-sizing: border-box; min-height: 60px",
        )
        return f"{self.open_tag(widget_id, props, style)}</div>"


class SpacerRenderer(ComponentRenderer):
    widget_type = WidgetType.SPACER
    defaults = {"width": 100, "height": 40}

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        return f"{self.open_tag(widget_id, props, self.position_styles(props))}</div>"


class DividerRenderer(ComponentRenderer):
    widget_type = WidgetType.DIVIDER
    defaults = {
        "orientation": "horizontal",
        "style": "solid",
        "color": "rgba(0, 0, 0, 0.3)",
        "thickness": 1,
        "width": 200,
        "height": 20,
    }

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        horizontal = props["orientation"] == "horizontal"
        thickness = props["thickness"]
        line = f"{thickness}px {props['style']} {props['color']}"
        if horizontal:
            line_style = f"width: 100%; height: {thickness}px; border-top: {line}"
        else:
            line_style = f"width: {thickness}px; height: 100%; border-left: {line}"

        style = combine_styles(
            self.position_styles(props),
            f"display: flex; align-items: center; justify-content: {'stretch' if horizontal else 'center'}",
        )
        return f'{self.open_tag(widget_id, props, style)}<div style="{escape_html(line_style)}"></div></div>'


class PageBreakRenderer(ComponentRenderer):
    widget_type = WidgetType.PAGE_BREAK
    defaults = {"width": 400, "height": 40}

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        style = combine_styles(self.position_styles(props), "page-break-before: always")
        return self.open_tag(widget_id, props, style, extra=' class="page-break"') + "</div>"


class ImageRenderer(ComponentRenderer):
    """Positioned wrapper with an inner ``<img>``; the asset pipeline may inline ``src``"""

    widget_type = WidgetType.IMAGE
    defaults = {"src": PLACEHOLDER_IMAGE, "alt": "Image", "objectFit": "cover", "width": 300, "height": 200}

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        image_style = f"width: 100%; height: 100%; object-fit: {props['objectFit']}; display: block"
        return (
            f"{self.open_tag(widget_id, props, self.position_styles(props))}"
            f'<img src="{escape_html(props["src"])}" alt="{escape_html(props["alt"])}" style="{escape_html(image_style)}" />'
            "</div>"
        )


class PageNumberRenderer(ComponentRenderer):
    """Page numbers come from CSS page counters; there is nothing to bind"""

    widget_type = WidgetType.PAGE_NUMBER
    defaults = {
        "format": "page-of",
        "fontSize": 12,
        "fontFamily": "inherit",
        "color": "#666666",
        "prefix": "",
        "suffix": "",
        "width": 100,
        "height": 30,
    }

    def render_html(self, widget_id: str, props: Dict[str, Any]) -> str:
        page = '<span class="page-number"></span>'
        count = '<span class="page-count"></span>'
        number_format = props["format"]
        if number_format == "page":
            body = page
        elif number_format == "slash":
            body = f"{page}/{count}"
        else:
            body = f"{page} of {count}"
        content = f"{escape_html(props['prefix'])}{body}{escape_html(props['suffix'])}"

        style = combine_styles(
            self.position_styles(props),
            generate_font_styles(
                font_size=props["fontSize"],
                font_family=props["fontFamily"],
                color=props["color"],
                text_align="center",
            ),
            "display: flex; align-items: center; justify-content: center; box-sizing: border-box",
        )
        extra = f'{data_attribute("data-format", number_format)} class="page-number-container"'
        return f"{self.open_tag(widget_id, props, style, extra=extra)}{content}</div>"

    def build_config(self, widget_id: str, props: Mapping[str, Any]) -> Optional[RuntimeComponentConfig]:
        return None
