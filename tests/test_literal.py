import cmath

import pytest

from complexgraph.literal import LiteralError, format_complex, parse_complex, try_parse_complex


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2", 2 + 0j),
        ("-0.25", -0.25 + 0j),
        ("1E-5", 1e-5 + 0j),
        ("i", 1j),
        ("-i", -1j),
        ("2.5i", 2.5j),
        ("-3i", -3j),
        ("{3,0.5i}", 3 + 0.5j),
        ("{-1.5,-2i}", -1.5 - 2j),
        ("{0,i}", 1j),
    ],
)
def test_parse_forms(text, expected):
    assert parse_complex(text) == expected


@pytest.mark.parametrize(
    "text",
    ["", "z", "inf", "nan", "2j", "{1,2}", "{1}", "{1,2i,3i}", "1..2", "ii", "{1,2i", "1_0", "\u0661\u0662", "1_0i", "1e999", "0x10"],
)
def test_invalid_literals_fail(text):
    assert try_parse_complex(text) is None
    with pytest.raises(LiteralError):
        parse_complex(text)


def test_literal_error_is_value_error():
    with pytest.raises(ValueError):
        parse_complex("sin")


@pytest.mark.parametrize(
    "value, expected",
    [
        (2 + 0j, "2"),
        (-0.5 + 1e-13j, "-0.5"),
        (1j, "i"),
        (1e-13 + 1j, "i"),
        (-2j, "-2i"),
        (0.5j, "0.5i"),
        (3 + 0.5j, "{3,0.5i}"),
    ],
)
def test_format_shortest_form(value, expected):
    assert format_complex(value) == expected


@pytest.mark.parametrize("value", [1.25 - 3.5j, -7.1 + 0.003j, 123456.789 + 2j, 0.1 + 0.2j, -4.0, 9.75j])
def test_format_then_parse_is_identity(value):
    assert cmath.isclose(parse_complex(format_complex(value)), value, abs_tol=1e-9)
