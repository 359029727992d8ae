"""The core, parsing and generating rfc5545 content.

These functions cover the complete path between bytes and typed records:

```python
from ical_syntax.calendar_stream import decode, encode, parse, serialize
from ical_syntax.event import Event

component = parse(b"BEGIN:VEVENT\\r\\nDTSTART:20240101T090000Z\\r\\nEND:VEVENT\\r\\n")
event = decode(component, Event.component_schema())
print(serialize(encode(event, Event.component_schema())))
```

A file may hold more than one calendar object. This is an example of parsing
an ics file as a stream of calendar objects:

```python
from pathlib import Path
from ical_syntax.calendar_stream import IcsCalendarStream

filename = Path("example/calendar.ics")
with filename.open(mode="rb") as ics_file:
    stream = IcsCalendarStream.from_ics(ics_file)
    print("File contains %s calendar(s)", len(stream.calendars))
```

You can encode a calendar stream as ics content calling the `ics()` method on
the `IcsCalendarStream`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from .calendar import Calendar
from .exceptions import CalendarParseError
from .generate import ics as _ics
from .generate import serialize as _serialize
from .parsing.component import Content, ParsedComponent, parse_component
from .parsing.component import parse_content as _parse_content
from .parsing.const import FOLD_LEN
from .parsing.nesting import NestingRules
from .schema import decode, encode

__all__ = [
    "CalendarStream",
    "IcsCalendarStream",
    "decode",
    "encode",
    "ics",
    "parse",
    "parse_content",
    "serialize",
]

_LOGGER = logging.getLogger(__name__)


def parse(
    content: Content,
    *,
    strict: bool | None = None,
    nesting_rules: NestingRules | None = None,
) -> ParsedComponent:
    """Parse content holding a single top level component."""
    return parse_component(content, strict=strict, nesting_rules=nesting_rules)


def parse_content(
    content: Content,
    *,
    strict: bool | None = None,
    nesting_rules: NestingRules | None = None,
) -> list[ParsedComponent]:
    """Parse content holding any number of top level components."""
    return _parse_content(content, strict=strict, nesting_rules=nesting_rules)


def serialize(
    components: ParsedComponent | Iterable[ParsedComponent],
    *,
    preserve_case: bool | None = None,
    fold_length: int = FOLD_LEN,
) -> bytes:
    """Generate UTF-8 rfc5545 content for one or more components."""
    return _serialize(components, preserve_case, fold_length)


def ics(
    components: ParsedComponent | Iterable[ParsedComponent],
    *,
    preserve_case: bool | None = None,
    fold_length: int = FOLD_LEN,
) -> str:
    """Generate rfc5545 text for one or more components."""
    return _ics(components, preserve_case, fold_length)


class CalendarStream(BaseModel):
    """A container that is a collection of calendaring information."""

    calendars: list[Calendar] = Field(default_factory=list)

    model_config = ConfigDict(validate_assignment=True)

    @classmethod
    def from_ics(
        cls,
        content: Content,
        *,
        strict: bool | None = None,
        nesting_rules: NestingRules | None = None,
    ) -> CalendarStream:
        """Factory method to create a new instance from an rfc5545 iCalendar content."""
        components = parse_content(content, strict=strict, nesting_rules=nesting_rules)
        _LOGGER.debug("Parsed %d calendar objects", len(components))
        return cls(
            calendars=[
                Calendar.from_component(component, strict=strict)
                for component in components
            ]
        )

    def ics(self, preserve_case: bool | None = None) -> str:
        """Encode the calendar stream as an rfc5545 iCalendar Stream content."""
        return ics(
            [calendar.to_component() for calendar in self.calendars],
            preserve_case=preserve_case,
        )


class IcsCalendarStream(CalendarStream):
    """A calendar stream that supports parsing and encoding ICS."""

    @classmethod
    def calendar_from_ics(cls, content: Content) -> Calendar:
        """Load a single calendar from an ics string."""
        stream = cls.from_ics(content)
        if len(stream.calendars) == 1:
            return stream.calendars[0]
        raise CalendarParseError(
            f"Calendar Stream had {len(stream.calendars)} calendars, expected one"
        )

    @classmethod
    def calendar_to_ics(cls, calendar: Calendar) -> str:
        """Serialize a calendar as an ICS stream."""
        stream = cls(calendars=[calendar])
        return stream.ics()
