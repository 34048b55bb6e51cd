"""
CSS generation for exported widgets and the printed page
"""
import re
from typing import Any, Dict, Mapping, Optional, Union

from report_export.formatting import format_number

Margins = Mapping[str, Union[int, float]]

# Page dimensions in millimetres
PAGE_SIZES: Dict[str, Dict[str, float]] = {
    "A4": {"width": 210, "height": 297},
    "Letter": {"width": 215.9, "height": 279.4},
}

_POSITION_DECLARATIONS = (
    ("x", "left", "px"),
    ("y", "top", "px"),
    ("width", "width", "px"),
    ("height", "height", "px"),
    ("zIndex", "z-index", ""),
)

_RGB_RE = re.compile(r"rgba?\s*\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*[\d.]+\s*)?\)")


def _css_value(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value)
    return str(value)


def generate_position_styles(props: Mapping[str, Any]) -> str:
    """Absolute positioning declarations; absent props omit their declaration"""
    styles = ["position: absolute"]
    for key, css_property, unit in _POSITION_DECLARATIONS:
        value = props.get(key)
        if value is not None:
            styles.append(f"{css_property}: {_css_value(value)}{unit}")
    return "; ".join(styles)


def generate_inline_styles(styles: Mapping[str, Any]) -> str:
    """Serialize a camelCase style mapping, skipping ``None`` values"""
    declarations = []
    for key, value in styles.items():
        if value is None:
            continue
        css_key = re.sub(r"([A-Z])", r"-\1", key).lower()
        declarations.append(f"{css_key}: {_css_value(value)}")
    return "; ".join(declarations)


def generate_font_styles(
    font_size: Optional[Union[int, float]] = None,
    font_weight: Optional[Union[str, int]] = None,
    font_family: Optional[str] = None,
    font_style: Optional[str] = None,
    line_height: Optional[Union[int, float, str]] = None,
    color: Optional[str] = None,
    text_align: Optional[str] = None,
) -> str:
    return generate_inline_styles(
        {
            "fontSize": f"{_css_value(font_size)}px" if font_size is not None else None,
            "fontWeight": font_weight,
            "fontFamily": font_family,
            "fontStyle": font_style,
            "lineHeight": line_height,
            "color": color,
            "textAlign": text_align,
        }
    )


def generate_border_styles(width: Union[int, float] = 1, style: str = "solid", color: str = "#000000") -> str:
    if style == "none" or width == 0:
        return "border: none"
    return f"border: {_css_value(width)}px {style} {color}"


def combine_styles(*style_strings: Optional[str]) -> str:
    """Merge declaration strings; later declarations of a property win.

    Property names are compared case-insensitively and keep the position
    where they were first seen.
    """
    merged: Dict[str, str] = {}
    for style_string in style_strings:
        if not style_string:
            continue
        for declaration in style_string.split(";"):
            declaration = declaration.strip()
            colon = declaration.find(":")
            if colon <= 0:
                continue
            prop = declaration[:colon].strip().lower()
            merged[prop] = declaration[colon + 1 :].strip()
    return "; ".join(f"{prop}: {value}" for prop, value in merged.items())


def generate_print_styles(page_size: str, margins: Margins) -> str:
    """``@page`` sizing, print rules and the on-screen page preview chrome"""
    page = PAGE_SIZES[page_size]
    width = _css_value(page["width"])
    height = _css_value(page["height"])
    margin = " ".join(f"{_css_value(margins[side])}mm" for side in ("top", "right", "bottom", "left"))

    return f"""@page {{
      size: {width}mm {height}mm;
      margin: {margin};
    }}

    @media print {{
      body {{
        -webkit-print-color-adjust: exact !important;
        print-color-adjust: exact !important;
      }}

      .no-print {{
        display: none !important;
      }}

      .page-break {{
        page-break-before: always;
      }}

      .avoid-break {{
        page-break-inside: avoid;
      }}

      #report {{
        width: 100%;
      }}
    }}

    @media screen {{
      body {{
        background: #f0f0f0;
      }}

      #report {{
        max-width: {width}mm;
        min-height: {height}mm;
        margin: 20px auto;
        background: #fff;
        box-shadow: 0 2px 10px rgba(0, 0, 0, 0.1);
      }}
    }}"""


def hex_to_rgba(hex_color: str, alpha: float) -> str:
    """``#00ffc8`` + 0.5 -> ``rgba(0, 255, 200, 0.5)``; alpha is clamped to [0, 1]"""
    clean = hex_color.replace("#", "")
    if len(clean) == 3:
        clean = "".join(char * 2 for char in clean)
    red, green, blue = (int(clean[index : index + 2], 16) for index in (0, 2, 4))
    clamped = max(0, min(1, alpha))
    return f"rgba({red}, {green}, {blue}, {format_number(clamped)})"


def to_hex(color: str) -> str:
    """Convert ``rgb()``/``rgba()`` colors to hex; anything else is returned unchanged"""
    if color.startswith("#"):
        return color
    match = _RGB_RE.search(color)
    if not match:
        return color
    return "#" + "".join(f"{int(channel):02x}" for channel in match.groups())
