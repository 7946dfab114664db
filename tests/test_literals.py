import math

import pytest

from scratch2py.literals import format_number, parse_number, to_boolean, to_python_literal


@pytest.mark.parametrize(
    "value, expected",
    [
        ("10", "10"),
        ("3.5", "3.5"),
        ("1e3", "1000"),
        ("0x10", "16"),
        ("Infinity", "math.inf"),
        ("hello", '"hello"'),
        ("", '""'),
        ("  ", '"  "'),
        (7, "7"),
        (2.0, "2"),
        (True, "True"),
        (None, "None"),
    ],
)
def test_to_python_literal(value, expected):
    assert to_python_literal(value) == expected


def test_large_integers_stay_strings():
    assert to_python_literal("9007199254740993") == '"9007199254740993"'
    assert to_python_literal("9007199254740991") == "9007199254740991"


def test_list_literal_classifies_each_item():
    assert to_python_literal([1, "2", "x"]) == '[1, 2, "x"]'


def test_parse_number():
    assert parse_number("") == 0.0
    assert parse_number(" 12 ") == 12.0
    assert parse_number("abc") is None
    assert parse_number(True) == 1.0
    assert parse_number(float("nan")) is None
    assert parse_number("-Infinity") == -math.inf


def test_format_number():
    assert format_number(2.5) == "2.5"
    assert format_number(3.0) == "3"
    assert format_number(float("nan")) == "math.nan"
    assert format_number(-math.inf) == "-math.inf"


@pytest.mark.parametrize(
    "value, expected",
    [("false", False), ("FALSE", False), ("0", False), ("", False), (0, False), ("hello", True), (1, True)],
)
def test_to_boolean(value, expected):
    assert to_boolean(value) is expected
