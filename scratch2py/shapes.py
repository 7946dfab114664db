"""Input shapes and the casts inserted between producers and consumers.

Every generated expression declares the shape of value it is known to
produce, and every input site asks for the shape it needs. ``resolve``
bridges the two with the smallest cast that is correct.
"""

from enum import Enum
from typing import Any, Optional, Tuple

from .constants import RUNTIME
from .literals import format_number, parse_number, string_literal, to_boolean, to_python_literal


class InputShape(str, Enum):
    # Anything goes; never cast.
    ANY = "any"
    # Wrapped with toNumber() unless known to be a number already.
    NUMBER = "number"
    # Wrapped with toString(); numeric-looking literals stay strings.
    STRING = "string"
    # Wrapped with toBoolean(), which follows Scratch's truthiness rules.
    BOOLEAN = "boolean"
    # A number already decreased by one, for 0-based list and string access.
    INDEX = "index"
    # A sequence of statements rather than a value.
    STACK = "stack"


_CASTS = {
    InputShape.BOOLEAN: "toBoolean",
    InputShape.STRING: "toString",
    InputShape.NUMBER: "toNumber",
}


def cast_call(shape: InputShape, fragment: str) -> str:
    return f"{RUNTIME}.{_CASTS[shape]}({fragment})"


def resolve(fragment: str, declared: Optional[InputShape], desired: Optional[InputShape]) -> str:
    """Adapt ``fragment``, known to satisfy ``declared``, to ``desired``."""
    if desired is None or desired == declared:
        return fragment
    if desired in (InputShape.ANY, InputShape.STACK):
        return fragment

    if desired == InputShape.INDEX:
        if declared != InputShape.NUMBER:
            fragment = cast_call(InputShape.NUMBER, fragment)
        return f"{fragment} - 1"

    if desired == InputShape.NUMBER and declared == InputShape.INDEX:
        return f"({fragment} + 1)"

    return cast_call(desired, fragment)


def static_number(value: Any) -> Optional[float]:
    """The number a primitive stands for, or None if it is not numeric."""
    if isinstance(value, str) and not value.strip():
        return None
    if not isinstance(value, (str, int, float, bool)):
        return None
    return parse_number(value)


def literal_to_python(value: Any, desired: Optional[InputShape]) -> Tuple[str, InputShape]:
    """Render a primitive input value so it already satisfies ``desired``."""
    if desired == InputShape.STRING:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return string_literal(format_number(value)), InputShape.STRING
        return string_literal(value), InputShape.STRING

    if desired == InputShape.BOOLEAN:
        return ("True" if to_boolean(value) else "False"), InputShape.BOOLEAN

    number = static_number(value)
    if desired == InputShape.INDEX:
        return format_number((number or 0) - 1), InputShape.INDEX
    if desired == InputShape.NUMBER:
        return format_number(number or 0), InputShape.NUMBER

    if isinstance(value, bool):
        return ("True" if value else "False"), InputShape.BOOLEAN
    text = to_python_literal(value)
    if number is not None and not text.startswith('"'):
        return text, InputShape.NUMBER
    return text, InputShape.ANY if not isinstance(value, str) else InputShape.STRING
