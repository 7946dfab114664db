"""Static value handling: number parsing and Python literal rendering.

Scratch stores every primitive as something that may or may not behave
like a number. The helpers here decide, at compile time, how such a value
should be written out as Python source.
"""

import json
import math
import re
from typing import Any, Optional

from .constants import MAX_SAFE_INTEGER

_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_PREFIXED_RE = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_INFINITY_RE = re.compile(r"[+-]?Infinity")
_WHITESPACE = " \t\n\r\v\f ﻿"


def parse_number(value: Any) -> Optional[float]:
    """Convert a primitive the way JavaScript's ``Number()`` does.

    Returns None where ``Number()`` would give NaN. An empty or blank string
    converts to 0, as in JavaScript; callers that need "" to stay a string
    check for it themselves.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number
    if not isinstance(value, str):
        return None

    text = value.strip(_WHITESPACE)
    if not text:
        return 0.0
    if _PREFIXED_RE.fullmatch(text):
        return float(int(text, 0))
    if _INFINITY_RE.fullmatch(text):
        return -math.inf if text.startswith("-") else math.inf
    if _DECIMAL_RE.fullmatch(text):
        return float(text)
    return None


def is_unsafe_integer(number: float) -> bool:
    return math.isfinite(number) and number == int(number) and abs(number) > MAX_SAFE_INTEGER


def format_number(number: float) -> str:
    """Render a number as the shortest Python literal for it."""
    if math.isnan(number):
        return "math.nan"
    if math.isinf(number):
        return "math.inf" if number > 0 else "-math.inf"
    if number == int(number) and abs(number) < 1e21:
        return str(int(number))
    return repr(float(number))


def string_literal(value: Any) -> str:
    return json.dumps("" if value is None else str(value))


def to_boolean(value: Any) -> bool:
    """Scratch's truthiness rule for a static value."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return not (value == 0 or math.isnan(value))
    if value is None:
        return False
    text = str(value)
    return not (text == "" or text == "0" or text.lower() == "false")


def to_python_literal(value: Any) -> str:
    """Classify a raw Scratch value and render it as a Python literal.

    Strings that look like numbers become number literals, except integers
    too large to be stored exactly, which stay strings since such values
    are almost always ids. Lists are handled element by element.
    """
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(to_python_literal(item) for item in value) + "]"
    if isinstance(value, bool):
        return "True" if value else "False"
    if value is None:
        return "None"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        if not value.strip(_WHITESPACE):
            return string_literal(value)
        number = parse_number(value)
        if number is None or is_unsafe_integer(number):
            return string_literal(value)
        return format_number(number)
    return json.dumps(value)
