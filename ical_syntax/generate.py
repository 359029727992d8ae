"""Library for serializing a component tree as rfc5545 text.

Output is the exact inverse of parsing: every content line is CRLF
terminated and folded so that no physical line is longer than 75 octets,
not counting the line break. Continuation lines start with a single space,
which counts towards the limit.

Lines are only folded between UTF-8 characters, and never between a
backslash and the character it escapes, so that a reader that does not
unfold before unescaping still sees whole escape sequences.

```python
from ical_syntax.generate import serialize
from ical_syntax.parsing.component import ParsedComponent
from ical_syntax.parsing.property import ParsedProperty

event = ParsedComponent(
    name="VEVENT",
    properties=[ParsedProperty(name="SUMMARY", value="Meeting")],
)
print(serialize(event))
```
"""

from __future__ import annotations

import io
import logging
from collections.abc import Generator, Iterable
from typing import IO, TYPE_CHECKING

from ical_syntax.compat.strictness import is_preserve_case_enabled
from ical_syntax.exceptions import UnencodableValue, UnfoldableToken
from ical_syntax.parsing.const import ATTR_BEGIN, ATTR_END, CRLF, FOLD_INDENT, FOLD_LEN
from ical_syntax.parsing.property import is_valid_name

if TYPE_CHECKING:
    from ical_syntax.parsing.component import ParsedComponent

__all__ = [
    "fold",
    "iter_lines",
    "ics",
    "serialize",
    "write",
]

_LOGGER = logging.getLogger(__name__)

_ESCAPE = "\\"
_MIN_FOLD_LEN = 2


def _units(contentline: str) -> Generator[str, None, None]:
    """Split a content line into the smallest pieces a fold may not separate."""
    pos = 0
    line_len = len(contentline)
    while pos < line_len:
        end = pos + 2 if contentline[pos] == _ESCAPE and pos + 1 < line_len else pos + 1
        yield contentline[pos:end]
        pos = end


def fold(contentline: str, fold_length: int = FOLD_LEN) -> list[str]:
    """Fold a logical content line into physical lines of at most fold_length octets."""
    if fold_length < _MIN_FOLD_LEN:
        raise ValueError(f"Fold length must be at least {_MIN_FOLD_LEN}")
    if len(contentline.encode("utf-8")) <= fold_length:
        return [contentline]

    lines: list[str] = []
    current: list[str] = []
    current_len = 0
    for unit in _units(contentline):
        unit_len = len(unit.encode("utf-8"))
        if current_len + unit_len <= fold_length:
            current.append(unit)
            current_len += unit_len
            continue
        if len(FOLD_INDENT) + unit_len > fold_length:
            raise UnfoldableToken(
                f"Content line can't be folded to {fold_length} octets, "
                f"{unit!r} is {unit_len} octets",
            )
        lines.append("".join(current))
        current = [FOLD_INDENT, unit]
        current_len = len(FOLD_INDENT) + unit_len
    lines.append("".join(current))
    return lines


def _component_name(component: ParsedComponent, preserve_case: bool) -> str:
    name = (preserve_case and component.original_name) or component.name.upper()
    if not is_valid_name(name):
        raise UnencodableValue(f"Invalid component name '{name}'")
    return name


def iter_lines(
    component: ParsedComponent,
    preserve_case: bool | None = None,
    fold_length: int = FOLD_LEN,
) -> Generator[str, None, None]:
    """Generate the physical lines of a component, without line terminators."""
    if preserve_case is None:
        preserve_case = is_preserve_case_enabled()
    name = _component_name(component, preserve_case)
    yield from fold(f"{ATTR_BEGIN}:{name}", fold_length)
    for prop in component.properties:
        try:
            contentline = prop.ics(preserve_case)
        except UnencodableValue:
            _LOGGER.debug("Unable to encode property %s in %s", prop.name, name)
            raise
        yield from fold(contentline, fold_length)
    for child in component.components:
        yield from iter_lines(child, preserve_case, fold_length)
    yield from fold(f"{ATTR_END}:{name}", fold_length)


def ics(
    components: ParsedComponent | Iterable[ParsedComponent],
    preserve_case: bool | None = None,
    fold_length: int = FOLD_LEN,
) -> str:
    """Encode one or more components as rfc5545 text with CRLF line endings."""
    if not isinstance(components, Iterable):
        components = [components]
    return "".join(
        f"{line}{CRLF}"
        for component in components
        for line in iter_lines(component, preserve_case, fold_length)
    )


def serialize(
    components: ParsedComponent | Iterable[ParsedComponent],
    preserve_case: bool | None = None,
    fold_length: int = FOLD_LEN,
) -> bytes:
    """Encode one or more components as UTF-8 rfc5545 content."""
    return ics(components, preserve_case, fold_length).encode("utf-8")


def write(
    components: ParsedComponent | Iterable[ParsedComponent],
    fp: IO[str] | IO[bytes],
    preserve_case: bool | None = None,
    fold_length: int = FOLD_LEN,
) -> None:
    """Write components to a text or binary file object, one line at a time."""
    if not isinstance(components, Iterable):
        components = [components]
    binary = isinstance(fp, (io.RawIOBase, io.BufferedIOBase)) or "b" in getattr(
        fp, "mode", ""
    )
    for component in components:
        for line in iter_lines(component, preserve_case, fold_length):
            text = f"{line}{CRLF}"
            fp.write(text.encode("utf-8") if binary else text)  # type: ignore[arg-type]
