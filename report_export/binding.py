"""
Binding expression language

A binding is either a bare path in a widget's ``binding`` prop
(``data.results.temperature``) or ``{{path}}`` markers inside text. Paths walk
object keys of the data document; a leading ``data.`` segment is optional.
"""
import re
from typing import Any, List, Optional

from report_export.formatting import to_display_string

BINDING_PATTERN = re.compile(r"\{\{([^}]+)\}\}")
_SINGLE_BINDING = re.compile(r"^\{\{([^}]+)\}\}$")

DATA_PREFIX = "data."


def normalize_path(path: str) -> str:
    path = path.strip()
    return path[len(DATA_PREFIX) :] if path.startswith(DATA_PREFIX) else path


def resolve_path(path: Optional[str], data: Any) -> Any:
    """Walk ``path`` through ``data``; ``None`` when any step is missing.

    Paths are plain dot-separated keys with no bracket index syntax. As an
    extension, a numeric segment indexes into a list and ``length`` gives its
    size, matching property access in the browser runtime.
    """
    if not path or data is None:
        return None

    current = data
    for part in normalize_path(path).split("."):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list):
            if part == "length":
                current = len(current)
            elif part.isdigit() and int(part) < len(current):
                current = current[int(part)]
            else:
                return None
        else:
            return None
    return current


def has_binding(text: Any) -> bool:
    """True when ``text`` contains both ``{{`` and ``}}``"""
    return isinstance(text, str) and "{{" in text and "}}" in text


def extract_bindings(text: Optional[str]) -> List[str]:
    """Trimmed paths of every ``{{path}}`` marker, in order"""
    if not text:
        return []
    return [match.strip() for match in BINDING_PATTERN.findall(text)]


def interpolate(text: Optional[str], data: Any) -> str:
    """Replace each ``{{path}}`` marker with its resolved, stringified value.

    Unresolved paths become empty strings. Unterminated markers stay verbatim.
    """
    if not text:
        return text or ""
    if data is None:
        return text
    return BINDING_PATTERN.sub(lambda match: to_display_string(resolve_path(match.group(1).strip(), data)), text)


def resolve_binding_or_value(value: Any, data: Any) -> Any:
    """A lone ``{{path}}`` yields the raw value; other marker text is interpolated"""
    if not isinstance(value, str):
        return value
    single = _SINGLE_BINDING.match(value)
    if single:
        return resolve_path(single.group(1).strip(), data)
    if BINDING_PATTERN.search(value):
        return interpolate(value, data)
    return value
