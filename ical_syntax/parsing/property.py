"""Library for handling rfc5545 properties and parameters.

A property is the definition of an individual attribute describing a
calendar object or a calendar component. A property is also really
just a "contentline", however properties in this file are the
output of the parser and are provided in the context of where
they live on a component hierarchy (e.g. attached to a component,
or sub component).

This is a very simple parser that converts lines in an iCalendar file into an object
structure with necessary relationships to interpret the meaning of the contentlines and
how the parts break down into properties and parameters. This library does not attempt
to interpret the meaning of the properties or types themselves.

For example, given a content line of:

  DUE;VALUE=DATE:20070501

This library would create a ParsedProperty object with this structure:

  ParsedProperty(
    name='DUE',
    value='20070501',
    params=[
        ParsedPropertyParameter(
            name='VALUE',
            values=['DATE']
        )
    ]
  }

Names are case-insensitive and are normalized to upper case. The spelling
found in the input is kept in `original_name` so that it can be emitted again
when generating with letter case preserved.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Generator, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Optional

from ical_syntax.exceptions import (
    CalendarSyntaxError,
    EmptyPropertyName,
    InvalidParameterSyntax,
    InvalidPropertyName,
    InvalidPropertyValue,
    UnencodableValue,
    UnterminatedQuote,
)

_LOGGER = logging.getLogger(__name__)

# Characters that should be encoded in quotes
_UNSAFE_CHAR_RE = re.compile(r"[,:;]")
_RE_CONTROL_CHARS = re.compile("[\x00-\x08\x0a-\x1f\x7f]")
_RE_NAME = re.compile("[A-Za-z0-9-]+")
_NAME_DELIMITERS = (";", ":")
_PARAM_DELIMITERS = (",", ";", ":")
_QUOTE = '"'


def _find_first(
    line: str, chars: Sequence[str], start: int | None = None
) -> int | None:
    """Find the earliest occurrence of any of the given characters in the line."""
    if not chars:
        raise ValueError("At least one character must be provided to search for.")
    earliest: int | None = None
    for char in chars:
        pos = line.find(char, start)
        if pos != -1 and (earliest is None or pos < earliest):
            earliest = pos
    return earliest


def is_valid_name(name: str) -> bool:
    """Return True if the name is a valid iana-token or x-name."""
    return _RE_NAME.fullmatch(name) is not None


@dataclass
class ParsedPropertyParameter:
    """An rfc5545 property parameter."""

    name: str

    values: Sequence[str]
    """One or more values, in the order they appeared."""

    original_name: Optional[str] = field(default=None, compare=False, repr=False)
    """The name as spelled in the parsed input."""

    def ics(self, preserve_case: bool = False) -> str:
        """Encode the parameter as NAME=VALUE[,VALUE]."""
        name = (preserve_case and self.original_name) or self.name.upper()
        if not is_valid_name(name):
            raise UnencodableValue(f"Invalid parameter name '{name}'")
        if not self.values:
            raise UnencodableValue(f"Parameter '{name}' has no values")
        result_values = []
        for value in self.values:
            if not isinstance(value, str):
                raise UnencodableValue(
                    f"Parameter '{name}' value must be a string, got {type(value).__name__}"
                )
            if _QUOTE in value or _RE_CONTROL_CHARS.search(value):
                raise UnencodableValue(
                    f"Parameter '{name}' value {value!r} can't be represented"
                )
            # Property parameters with values contain a colon, semicolon,
            # or a comma character must be placed in quoted text
            if _UNSAFE_CHAR_RE.search(value):
                result_values.append(f"{_QUOTE}{value}{_QUOTE}")
            else:
                result_values.append(value)
        return f"{name}={','.join(result_values)}"


@dataclass
class ParsedProperty:
    """An rfc5545 property."""

    name: str
    value: str
    params: Optional[list[ParsedPropertyParameter]] = None

    lineno: Optional[int] = field(default=None, compare=False)
    """The physical line where the content line started, when parsed."""

    original_name: Optional[str] = field(default=None, compare=False, repr=False)
    """The name as spelled in the parsed input."""

    def get_parameter(self, name: str) -> ParsedPropertyParameter | None:
        """Return a single ParsedPropertyParameter with the specified name."""
        if not self.params:
            return None
        for param in self.params:
            if param.name.upper() != name.upper():
                continue
            return param
        return None

    def get_parameter_value(self, name: str) -> str | None:
        """Return the property parameter value."""
        if not (param := self.get_parameter(name)):
            return None
        if len(param.values) > 1:
            raise ValueError(
                f"Expected only a single parameter string value, got {param.values}"
            )
        return param.values[0]

    def ics(self, preserve_case: bool = False) -> str:
        """Encode a ParsedProperty into the unfolded serialized format."""
        name = (preserve_case and self.original_name) or self.name.upper()
        if not is_valid_name(name):
            raise UnencodableValue(f"Invalid property name '{name}'")
        if not isinstance(self.value, str):
            raise UnencodableValue(
                f"Property '{name}' value must be a string, got {type(self.value).__name__}"
            )
        if _RE_CONTROL_CHARS.search(self.value):
            raise UnencodableValue(
                f"Property '{name}' value contains control characters: {self.value!r}"
            )
        result = [name]
        for parameter in self.params or ():
            result.append(";")
            result.append(parameter.ics(preserve_case))
        result.append(":")
        result.append(self.value)
        return "".join(result)

    @classmethod
    def from_ics(cls, contentline: str, lineno: int | None = None) -> "ParsedProperty":
        """Decode a ParsedProperty from an rfc5545 iCalendar content line.

        Will raise a CalendarSyntaxError on failure.
        """
        return parse_line(contentline, lineno)


def parse_line(line: str, lineno: int | None = None) -> ParsedProperty:
    """Parse a single unfolded content line."""

    # parse NAME
    if (name_end_pos := _find_first(line, _NAME_DELIMITERS)) is None:
        raise CalendarSyntaxError(
            f"Invalid property line, expected {_NAME_DELIMITERS} after property name",
            detailed_error=line,
            lineno=lineno,
        )
    property_name = line[0:name_end_pos]
    if not property_name:
        raise EmptyPropertyName(
            "Content line has an empty property name",
            detailed_error=line,
            lineno=lineno,
        )
    if not is_valid_name(property_name):
        raise InvalidPropertyName(
            f"Invalid property name '{property_name}'",
            detailed_error=line,
            lineno=lineno,
        )
    canonical_name = property_name.upper()
    has_params = line[name_end_pos] == ";"
    pos = name_end_pos + 1
    line_len = len(line)

    def param_error(
        message: str, error_cls: type[CalendarSyntaxError] = InvalidParameterSyntax
    ) -> CalendarSyntaxError:
        return error_cls(
            message,
            detailed_error=line,
            lineno=lineno,
            property_name=canonical_name,
        )

    # parse PARAMS if any
    params: list[ParsedPropertyParameter] = []
    if has_params:
        while True:
            if (param_name_end_pos := line.find("=", pos)) == -1:
                raise param_error(
                    f"Invalid parameter format: missing '=' after parameter name part '{line[pos:]}'"
                )
            param_name = line[pos:param_name_end_pos]
            if not is_valid_name(param_name):
                raise param_error(f"Invalid parameter name '{param_name}'")
            pos = param_name_end_pos + 1

            # parse one or more comma-separated PARAM-VALUES
            param_values: list[str] = []
            delimiter: str | None = None
            while delimiter is None or delimiter == ",":
                if pos >= line_len:
                    raise param_error(
                        "Unexpected end of line. Expected parameter value or delimiter."
                    )
                param_value: str
                if line[pos] == _QUOTE:
                    if (end_quote_pos := line.find(_QUOTE, pos + 1)) == -1:
                        raise param_error(
                            "Unexpected end of line: unclosed quoted parameter value.",
                            UnterminatedQuote,
                        )
                    param_value = line[pos + 1 : end_quote_pos]
                    pos = end_quote_pos + 1
                else:
                    if (end_pos := _find_first(line, _PARAM_DELIMITERS, pos)) is None:
                        raise param_error(
                            "Unexpected end of line: missing parameter value delimiter."
                        )
                    param_value = line[pos:end_pos]
                    if _QUOTE in param_value:
                        raise param_error(
                            f"Parameter value '{param_value}' for parameter '{param_name}' is improperly quoted"
                        )
                    pos = end_pos

                if _RE_CONTROL_CHARS.search(param_value):
                    raise param_error(
                        f"Invalid parameter value '{param_value}' for parameter '{param_name}'"
                    )
                param_values.append(param_value)

                # A delimiter is always expected after a value within parameters.
                if pos >= line_len:
                    raise param_error(
                        f"Unexpected end of line after parameter value '{param_value}'. Expected delimiter {_PARAM_DELIMITERS}."
                    )
                if (delimiter := line[pos]) not in _PARAM_DELIMITERS:
                    raise param_error(
                        f"Expected {_PARAM_DELIMITERS} after parameter value, got '{delimiter}'"
                    )
                pos += 1

            params.append(
                ParsedPropertyParameter(
                    name=param_name.upper(),
                    values=param_values,
                    original_name=param_name,
                )
            )

            if delimiter == ":":
                break  # We are done with all parameters.

    property_value = line[pos:]
    if _RE_CONTROL_CHARS.search(property_value):
        raise InvalidPropertyValue(
            f"Property value contains control characters: {property_value!r}",
            detailed_error=line,
            lineno=lineno,
            property_name=canonical_name,
        )

    return ParsedProperty(
        name=canonical_name,
        value=property_value,
        params=params if params else None,
        lineno=lineno,
        original_name=property_name,
    )


def parse_contentlines(
    contentlines: Iterable[str | tuple[int, str]],
) -> Generator[ParsedProperty, None, None]:
    """Parse logical lines into ParsedProperty objects, skipping blank lines.

    Lines may be plain strings or (lineno, text) pairs as produced by
    `unfolded_lines`.
    """
    for index, contentline in enumerate(contentlines, start=1):
        if isinstance(contentline, tuple):
            lineno, text = contentline
        else:
            lineno, text = index, contentline
        if not text:
            continue
        yield parse_line(text, lineno)
