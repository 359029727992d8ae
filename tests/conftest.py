"""Test fixtures."""

import dataclasses
import json
from typing import Any

from pydantic_core import to_jsonable_python
import pytest

PRODID = "-//example//1.2.3"

CALENDAR = "\r\n".join(
    [
        "BEGIN:VCALENDAR",
        f"PRODID:{PRODID}",
        "VERSION:2.0",
        "BEGIN:VTIMEZONE",
        "TZID:Europe/Berlin",
        "BEGIN:STANDARD",
        "DTSTART:19701025T030000",
        "TZOFFSETFROM:+0200",
        "TZOFFSETTO:+0100",
        "END:STANDARD",
        "END:VTIMEZONE",
        "BEGIN:VEVENT",
        "DTSTART;TZID=Europe/Berlin:20240101T090000",
        "SUMMARY:Meeting",
        "END:VEVENT",
        "BEGIN:VTODO",
        "UID:todo-1",
        "SUMMARY:Write report",
        "END:VTODO",
        "END:VCALENDAR",
        "",
    ]
)


class DataclassEncoder(json.JSONEncoder):
    """Class that can dump data classes as dict for comparison to golden."""

    def default(self, o: Any) -> Any:
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            # Omit empty values and fields that don't take part in equality
            return {
                field.name: value
                for field in dataclasses.fields(o)
                if field.compare and (value := getattr(o, field.name))
            }
        return to_jsonable_python(o)


@pytest.fixture
def json_encoder() -> json.JSONEncoder:
    """Fixture that creates a json encoder."""
    return DataclassEncoder()


@pytest.fixture(name="calendar_ics")
def mock_calendar_ics() -> str:
    """Fixture for a calendar with an event, a to-do and a timezone."""
    return CALENDAR
