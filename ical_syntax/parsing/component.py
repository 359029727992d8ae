"""Library for handling rfc5545 components.

An iCalendar object consists of one or more components, that may have
properties or sub-components. An example of a component might be the
calendar itself, an event, a to-do, a journal entry, timezone info, etc.

Components created here have no semantic meaning, but hold all the
data needed to interpret based on the type (e.g. by a schema binding)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Generator, Iterable
from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Union

from ical_syntax.compat.strictness import is_strict
from ical_syntax.exceptions import (
    CalendarSyntaxError,
    InvalidPropertyName,
    MalformedLine,
    UnbalancedComponent,
)

from .const import ATTR_BEGIN, ATTR_END, FOLD_LEN
from .nesting import NestingRules
from .property import ParsedProperty, is_valid_name, parse_line

_LOGGER = logging.getLogger(__name__)

LINES_RE = re.compile(r"\r\n|\r|\n")
LINES_RE_BYTES = re.compile(rb"\r\n|\r|\n")
_FOLD_PREFIXES = (" ", "\t", b" ", b"\t")
_BOM = "\ufeff"

Content = Union[str, bytes, Iterable[str], Iterable[bytes]]


class LogicalLine(NamedTuple):
    """A content line after unfolding."""

    lineno: int
    """Physical line number (1-based) where the logical line started."""

    text: str


@dataclass
class InvalidLine:
    """A content line that was skipped when parsing leniently."""

    lineno: int
    text: str
    message: str


@dataclass
class ParsedComponent:
    """An rfc5545 component."""

    name: str
    properties: list[ParsedProperty] = field(default_factory=list)
    components: list[ParsedComponent] = field(default_factory=list)

    original_name: Optional[str] = field(default=None, compare=False, repr=False)
    """The name as spelled in the BEGIN line of the parsed input."""

    lineno: Optional[int] = field(default=None, compare=False)
    """The physical line of the BEGIN marker, when parsed."""

    invalid_lines: list[InvalidLine] = field(
        default_factory=list, compare=False, repr=False
    )
    """Content lines skipped by a lenient parse."""

    def get_properties(self, name: str) -> list[ParsedProperty]:
        """Return all properties with the specified name, in order."""
        name = name.upper()
        return [prop for prop in self.properties if prop.name == name]

    def get_property(self, name: str) -> ParsedProperty | None:
        """Return the first property with the specified name."""
        name = name.upper()
        return next((prop for prop in self.properties if prop.name == name), None)

    def get_components(self, name: str) -> list[ParsedComponent]:
        """Return all child components with the specified name, in order."""
        name = name.upper()
        return [child for child in self.components if child.name == name]

    def ics(self, preserve_case: bool | None = None, fold_length: int = FOLD_LEN) -> str:
        """Encode a component as rfc5545 text."""
        # pylint: disable=import-outside-toplevel
        from ical_syntax.generate import ics

        return ics(self, preserve_case=preserve_case, fold_length=fold_length)


def _split_lines(chunks: Iterable[str] | Iterable[bytes]) -> Generator[str | bytes, None, None]:
    """Split a stream of text or bytes chunks on any line terminator."""
    buffer: str | bytes | None = None
    for chunk in chunks:
        buffer = chunk if buffer is None else buffer + chunk  # type: ignore[operator]
        pattern = LINES_RE_BYTES if isinstance(buffer, bytes) else LINES_RE
        start = 0
        for match in pattern.finditer(buffer):  # type: ignore[arg-type]
            # A CR at the end of the chunk may be the first half of a CRLF
            if match.end() == len(buffer) and match.group() in ("\r", b"\r"):
                break
            yield buffer[start : match.start()]
            start = match.end()
        buffer = buffer[start:]
    if not buffer:
        return
    pattern = LINES_RE_BYTES if isinstance(buffer, bytes) else LINES_RE
    parts = pattern.split(buffer)  # type: ignore[arg-type]
    if not parts[-1]:
        parts.pop()
    yield from parts


def _decode(parts: list[str | bytes], lineno: int) -> str:
    if not parts or isinstance(parts[0], str):
        return "".join(parts)  # type: ignore[arg-type]
    raw = b"".join(parts)  # type: ignore[arg-type]
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as err:
        raise MalformedLine(
            "Content line is not valid UTF-8",
            detailed_error=str(err),
            lineno=lineno,
        ) from err


def unfolded_lines(content: Content) -> Generator[LogicalLine, None, None]:
    """Read content and unfold lines.

    The content may be a complete string or bytes, or any iterable of
    string or bytes chunks such as an open file. Lines are produced lazily
    so arbitrarily large input is never held in memory at once.
    """
    chunks: Iterable[str] | Iterable[bytes]
    if isinstance(content, (str, bytes, bytearray)):
        chunks = [bytes(content) if isinstance(content, bytearray) else content]  # type: ignore[list-item]
    else:
        chunks = content
    parts: list[str | bytes] = []
    start = 0
    for lineno, line in enumerate(_split_lines(chunks), start=1):
        if line[:1] in _FOLD_PREFIXES:
            if not parts and not start:
                raise MalformedLine(
                    "Continuation line found before any content line",
                    detailed_error=repr(line),
                    lineno=lineno,
                )
            parts.append(line[1:])
            continue
        if start:
            yield LogicalLine(start, _decode(parts, start))
        parts = [line]
        start = lineno
    if start:
        yield LogicalLine(start, _decode(parts, start))


def _strip_bom(lines: Iterable[LogicalLine]) -> Generator[LogicalLine, None, None]:
    first = True
    for line in lines:
        if first and line.text.startswith(_BOM):
            line = LogicalLine(line.lineno, line.text[len(_BOM) :])
        first = False
        yield line


def iter_content(
    content: Content,
    *,
    strict: bool | None = None,
    nesting_rules: NestingRules | None = None,
) -> Generator[ParsedComponent, None, None]:
    """Parse content into top level components, yielding each once complete.

    This walks through each logical line and uses a stack to associate
    properties with the current component. This does the absolute minimum
    parsing to get the right structure. Interpreting property values is
    handled by the schema binder, elsewhere.
    """
    strict = is_strict(strict)
    stack: list[ParsedComponent] = []
    for lineno, text in _strip_bom(unfolded_lines(content)):
        if not text:
            continue
        try:
            prop = parse_line(text, lineno)
        except CalendarSyntaxError as err:
            if strict or not stack:
                raise
            _LOGGER.warning("Skipping malformed content line %s: %s", lineno, err)
            stack[-1].invalid_lines.append(
                InvalidLine(lineno=lineno, text=text, message=str(err))
            )
            continue

        if prop.name == ATTR_BEGIN:
            _check_marker(prop)
            component = ParsedComponent(
                name=prop.value.upper(), original_name=prop.value, lineno=lineno
            )
            if nesting_rules is not None:
                nesting_rules.check(
                    component.name, stack[-1].name if stack else None, lineno
                )
            stack.append(component)
        elif prop.name == ATTR_END:
            _check_marker(prop)
            if not stack:
                raise UnbalancedComponent(
                    f"Unexpected '{ATTR_END}:{prop.value}' without matching {ATTR_BEGIN}",
                    detailed_error=text,
                    lineno=lineno,
                )
            if prop.value.upper() != stack[-1].name:
                raise UnbalancedComponent(
                    f"Unexpected '{ATTR_END}:{prop.value}', expected {ATTR_END}:{stack[-1].name}",
                    detailed_error=text,
                    lineno=lineno,
                )
            component = stack.pop()
            if stack:
                stack[-1].components.append(component)
            else:
                yield component
        else:
            if not stack:
                raise UnbalancedComponent(
                    f"Property {prop.name} found outside of any component",
                    detailed_error=text,
                    lineno=lineno,
                    property_name=prop.name,
                )
            stack[-1].properties.append(prop)

    if stack:
        raise UnbalancedComponent(
            f"Unexpected end of content, expected {ATTR_END}:{stack[-1].name}",
            lineno=stack[-1].lineno,
        )


def _check_marker(prop: ParsedProperty) -> None:
    if prop.params:
        raise CalendarSyntaxError(
            f"{prop.name} marker does not accept parameters",
            lineno=prop.lineno,
            property_name=prop.name,
        )
    if not is_valid_name(prop.value):
        raise InvalidPropertyName(
            f"Invalid component name '{prop.value}'",
            lineno=prop.lineno,
            property_name=prop.name,
        )


def parse_content(
    content: Content,
    *,
    strict: bool | None = None,
    nesting_rules: NestingRules | None = None,
) -> list[ParsedComponent]:
    """Parse content into a list of top level components."""
    return list(iter_content(content, strict=strict, nesting_rules=nesting_rules))


def encode_content(
    components: list[ParsedComponent],
    preserve_case: bool | None = None,
    fold_length: int = FOLD_LEN,
) -> str:
    """Encode a set of parsed components into content."""
    return "".join(
        component.ics(preserve_case=preserve_case, fold_length=fold_length)
        for component in components
    )


def parse_component(
    content: Content,
    *,
    strict: bool | None = None,
    nesting_rules: NestingRules | None = None,
) -> ParsedComponent:
    """Parse content that holds exactly one top level component."""
    components = iter_content(content, strict=strict, nesting_rules=nesting_rules)
    if (component := next(components, None)) is None:
        raise CalendarSyntaxError("Content has no component")
    if (extra := next(components, None)) is not None:
        raise CalendarSyntaxError(
            f"Content has more than one top level component, found {extra.name}",
            lineno=extra.lineno,
        )
    return component
