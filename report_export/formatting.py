"""
Value formatting shared by renderers and compile-time binders

The embedded runtime receives the constants below verbatim so browser output
matches compile-time output.
"""
import json
import math
import re
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

Number = Union[int, float]

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

DEFAULT_FORMATS: Dict[str, str] = {
    "date-short": "MM/dd/yyyy",
    "date-long": "MMMM dd, yyyy",
    "date-time": "MM/dd/yyyy HH:mm",
    "time-only": "HH:mm",
    "iso": "yyyy-MM-dd",
    "custom": "",
}

# Alternation is ordered longest first and matched in a single pass
DATE_TOKEN_PATTERN = "yyyy|MMMM|MMM|MM|dddd|ddd|dd|HH|mm|ss"
_DATE_TOKEN_RE = re.compile(DATE_TOKEN_PATTERN)


def format_number(value: Number) -> str:
    """Render a number the way JavaScript's ``String(n)`` does for common values"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def to_display_string(value: Any) -> str:
    """Stringify a resolved data value for text output

    ``None`` becomes an empty string, containers become compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return format_number(value)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)


def to_fixed(value: Number, digits: int = 0) -> str:
    """Fixed-point rendering with half-up rounding"""
    try:
        quantum = Decimal(1).scaleb(-digits)
        rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return format_number(value)
    if rounded == 0:
        rounded = abs(rounded)
    return f"{rounded:.{digits}f}"


def coerce_number(value: Any) -> Optional[Number]:
    """Coerce a bound value to a number, or ``None`` when it is not numeric"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else value
    if isinstance(value, str):
        match = re.match(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?", value)
        if not match:
            return None
        number = float(match.group(0))
        return int(number) if number.is_integer() and "." not in match.group(0) else number
    return None


def clamp_percentage(value: Number, minimum: Number = 0, maximum: Number = 100) -> float:
    """Position of ``value`` within ``[minimum, maximum]`` as a 0-100 percentage"""
    if maximum == minimum:
        return 0.0
    percentage = (value - minimum) / (maximum - minimum) * 100
    return float(min(100, max(0, percentage)))


def resolve_date_format(format_key: Optional[str], custom_format: Optional[str] = None) -> str:
    """Map a preset key to its token pattern; unknown keys are literal patterns"""
    if not format_key:
        return DEFAULT_FORMATS["date-long"]
    if format_key == "custom":
        return custom_format or DEFAULT_FORMATS["iso"]
    return DEFAULT_FORMATS.get(format_key, format_key)


def format_datetime(moment: Union[datetime, date], pattern: str) -> str:
    """Replace date tokens in ``pattern`` with components of ``moment``

    >>> format_datetime(datetime(2024, 1, 15), "MMMM dd, yyyy")
    'January 15, 2024'
    """
    if not isinstance(moment, datetime):
        moment = datetime(moment.year, moment.month, moment.day)

    # isoweekday: Monday=1..Sunday=7, DAY_NAMES starts on Sunday
    weekday = moment.isoweekday() % 7
    values = {
        "yyyy": f"{moment.year:04d}",
        "MMMM": MONTH_NAMES[moment.month - 1],
        "MMM": MONTH_NAMES[moment.month - 1][:3],
        "MM": f"{moment.month:02d}",
        "dddd": DAY_NAMES[weekday],
        "ddd": DAY_NAMES[weekday][:3],
        "dd": f"{moment.day:02d}",
        "HH": f"{moment.hour:02d}",
        "mm": f"{moment.minute:02d}",
        "ss": f"{moment.second:02d}",
    }
    return _DATE_TOKEN_RE.sub(lambda match: values[match.group(0)], pattern)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a bound date value: datetime, date, epoch milliseconds or ISO string"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def parse_data_points(value: Any) -> List[Number]:
    """Parse ``"65, 59, 80"`` (or a list) into numbers; non-numeric entries are dropped"""
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else str(value).split(",")
    points: List[Number] = []
    for item in items:
        if isinstance(item, str) and not item.strip():
            continue
        number = coerce_number(item)
        if number is not None:
            points.append(number)
    return points


def parse_labels(value: Any, count: int) -> List[str]:
    """Parse comma-separated labels, defaulting to ``Item n`` placeholders"""
    if isinstance(value, (list, tuple)):
        labels = [to_display_string(item) for item in value]
    elif value:
        labels = [part.strip() for part in str(value).split(",") if part.strip()]
    else:
        labels = []
    return labels or [f"Item {index + 1}" for index in range(count)]
