# services/encoding.py
"""
Encoding inference for arbitrary tabular query results.

Both the live renderer and the static export read their label / numeric
columns from here, so the two outputs agree for identical rows. Value coercion
follows the browser's ``Number()`` / ``String()`` rules because saved layouts
were designed against that behaviour (e.g. an empty string counts as the
number 0).
"""
import math
import re
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Union

from models.visual import Encoding

Row = Dict[str, Any]

_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_RADIX_RE = {
    16: re.compile(r"^0[xX][0-9a-fA-F]+$"),
    8: re.compile(r"^0[oO][0-7]+$"),
    2: re.compile(r"^0[bB][01]+$"),
}
_INFINITY = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}

def _normalize(number: float) -> Union[int, float]:
    if isinstance(number, float) and math.isfinite(number) and number.is_integer():
        return int(number)
    return number

def _parse_numeric_string(text: str) -> Union[int, float]:
    stripped = text.strip()
    if stripped == "":
        return 0
    if stripped in _INFINITY:
        return _INFINITY[stripped]
    if _DECIMAL_RE.match(stripped):
        return _normalize(float(stripped))
    for radix, pattern in _RADIX_RE.items():
        if pattern.match(stripped):
            return int(stripped[2:], radix)
    return math.nan

def to_number(value: Any) -> Union[int, float]:
    """Coerce a cell value the way ``Number(value)`` does; NaN when it can't"""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return _normalize(value)
    if isinstance(value, str):
        return _parse_numeric_string(value)
    return math.nan

def is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)

def is_numeric_value(value: Any) -> bool:
    """A number, or a string that survives numeric parsing (blank strings included)"""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        return not is_nan(to_number(value))
    return False

def infer_encoding(rows: List[Row]) -> Encoding:
    """Pick the label column and numeric series columns from the first row.

    Raises ValueError on empty input; callers render their placeholder first.
    """
    if not rows:
        raise ValueError("Cannot infer an encoding from an empty result")

    first = rows[0]
    if not isinstance(first, dict) or not first:
        raise ValueError("Cannot infer an encoding from a row without columns")

    columns = list(first.keys())
    numeric_columns = [column for column in columns if is_numeric_value(first[column])]
    label_column = next(
        (column for column in columns if isinstance(first[column], str)),
        columns[0]
    )

    return Encoding(labelColumn=label_column, numericColumns=numeric_columns)

def usable_rows(data: Any) -> Optional[List[Row]]:
    """Rows fit for rendering, or None when a placeholder should be shown"""
    if not isinstance(data, list) or not data:
        return None
    first = data[0]
    if not isinstance(first, dict) or not first:
        return None
    return data

def cell(row: Any, column: Optional[str]) -> Any:
    if column is None or not isinstance(row, dict):
        return None
    return row.get(column)

def series_value(value: Any) -> Optional[Union[int, float]]:
    """Numeric chart value; unparseable cells become gaps (None)"""
    number = to_number(value)
    if is_nan(number):
        return None
    return number

def js_string(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else js_string(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)

def _is_falsy(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or is_nan(value)
    if isinstance(value, str):
        return value == ""
    return False

def display_label(value: Any, fallback: str = "N/A") -> str:
    return fallback if _is_falsy(value) else js_string(value)

def cell_text(row: Any, column: str) -> str:
    """Table/card cell text; cells missing from a ragged row render empty"""
    if not isinstance(row, dict) or column not in row:
        return ""
    return js_string(row[column])

def humanize(column: str) -> str:
    return column.replace("_", " ")

def format_number(value: Union[int, float]) -> str:
    """en-US grouping with at most three fraction digits"""
    if is_nan(value):
        return "NaN"
    if isinstance(value, float) and math.isinf(value):
        return "∞" if value > 0 else "-∞"
    if isinstance(value, int):
        return f"{value:,}"
    formatted = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if formatted in ("-0", "") else formatted

def to_fixed(value: Union[int, float], digits: int) -> str:
    """Fixed-point text rounding halves away from zero"""
    if is_nan(value):
        return "NaN"
    if isinstance(value, float) and math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    exponent = Decimal(1).scaleb(-digits)
    # wide enough for any finite float
    context = Context(prec=400)
    return str(Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP, context=context))

def clamp_percent(value: Union[int, float]) -> Union[int, float]:
    if is_nan(value):
        return 0
    return min(max(value, 0), 100)
