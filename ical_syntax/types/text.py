"""Library for parsing TEXT values."""

from __future__ import annotations

from ical_syntax.parsing.property import ParsedProperty

from .data_types import DATA_TYPE

UNESCAPE_CHAR = {"\\": "\\", ";": ";", ",": ",", "N": "\n", "n": "\n"}
ESCAPE_CHAR = {"\\": "\\\\", ";": "\\;", ",": "\\,", "\n": "\\n"}
_ESCAPE = "\\"


def unescape(value: str) -> str:
    """Reverse the backslash encoding of a TEXT value."""
    if _ESCAPE not in value:
        return value
    result = []
    pos = 0
    value_len = len(value)
    while pos < value_len:
        char = value[pos]
        if char != _ESCAPE:
            result.append(char)
            pos += 1
            continue
        if pos + 1 >= value_len:
            raise ValueError("TEXT value ends with an incomplete escape sequence")
        if (escaped := UNESCAPE_CHAR.get(value[pos + 1])) is None:
            raise ValueError(f"Invalid escape sequence '\\{value[pos + 1]}' in TEXT value")
        result.append(escaped)
        pos += 2
    return "".join(result)


def escape(value: str) -> str:
    """Apply the backslash encoding for a TEXT value."""
    return "".join(ESCAPE_CHAR.get(char, char) for char in value)


def split_text_list(value: str) -> list[str]:
    """Split an encoded TEXT list on commas that are not escaped."""
    parts = []
    start = 0
    pos = 0
    value_len = len(value)
    while pos < value_len:
        char = value[pos]
        if char == _ESCAPE:
            pos += 2
            continue
        if char == ",":
            parts.append(value[start:pos])
            start = pos + 1
        pos += 1
    parts.append(value[start:])
    return parts


@DATA_TYPE.register("TEXT")
class TextEncoder:
    """Encode an rfc5545 TEXT value."""

    forbidden_params = frozenset({"TZID"})

    @classmethod
    def __property_type__(cls) -> type:
        return str

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> str:
        """Parse a rfc5545 into a text value."""
        return unescape(prop.value)

    @classmethod
    def __encode_property_value__(cls, value: str) -> str:
        """Serialize text as an ICS value."""
        return escape(value)

    @classmethod
    def __split_property_value__(cls, value: str) -> list[str]:
        """Split a list of TEXT values."""
        return split_text_list(value)
