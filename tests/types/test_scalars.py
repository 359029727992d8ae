"""Tests for BOOLEAN, INTEGER, FLOAT, URI and CAL-ADDRESS values."""

from typing import Any

import pytest

from ical_syntax.exceptions import ValueDecodeError
from ical_syntax.parsing.property import ParsedProperty
from ical_syntax.types import DATA_TYPE, CalAddress, Uri


@pytest.mark.parametrize(
    ("value_type", "value", "expected", "encoded"),
    [
        ("BOOLEAN", "TRUE", True, "TRUE"),
        ("BOOLEAN", "false", False, "FALSE"),
        ("INTEGER", "-17", -17, "-17"),
        ("INTEGER", "+5", 5, "5"),
        ("FLOAT", "1000000.0000001", 1000000.0000001, "1000000.0000001"),
        ("FLOAT", "-3", -3.0, "-3.0"),
        ("URI", "http://example.com/my-report.txt", "http://example.com/my-report.txt", None),
        ("CAL-ADDRESS", "mailto:jane_doe@example.com", "mailto:jane_doe@example.com", None),
    ],
)
def test_scalar_values(
    value_type: str, value: str, expected: Any, encoded: str | None
) -> None:
    """Test decoding and encoding simple values."""
    result = DATA_TYPE.decode(ParsedProperty(name="X-VALUE", value=value), value_type)
    assert result == expected
    assert DATA_TYPE.encode(result, value_type) == (encoded or value, [])


@pytest.mark.parametrize(
    ("value_type", "value"),
    [
        ("BOOLEAN", "yes"),
        ("INTEGER", "1.5"),
        ("INTEGER", ""),
        ("FLOAT", "1e10"),
        ("FLOAT", "nan"),
        ("URI", "example.com"),
        ("CAL-ADDRESS", "jane_doe@example.com"),
    ],
)
def test_invalid_scalar_values(value_type: str, value: str) -> None:
    """Test values that don't match their value type."""
    with pytest.raises(ValueDecodeError):
        DATA_TYPE.decode(ParsedProperty(name="X-VALUE", value=value), value_type)


def test_float_without_exponent() -> None:
    """Test a FLOAT is never written with an exponent."""
    text, _ = DATA_TYPE.encode(1e-7, "FLOAT")
    assert "e" not in text
    assert float(text) == 1e-7
    for value in (1e-20, -2.5e-300, 1.5e16, 1e22):
        text, _ = DATA_TYPE.encode(value, "FLOAT")
        assert "e" not in text and "E" not in text
        assert float(text) == value
    assert DATA_TYPE.encode(1e-20, "FLOAT") == ("0.00000000000000000001", [])
    with pytest.raises(ValueError):
        DATA_TYPE.encode(float("inf"), "FLOAT")


def test_cal_address_email() -> None:
    """Test the email address of a calendar user."""
    assert CalAddress("mailto:jane_doe@example.com").email == "jane_doe@example.com"
    assert CalAddress("urn:uuid:1234").email is None
    assert isinstance(Uri("http://example.com"), str)
