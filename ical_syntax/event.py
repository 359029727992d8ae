"""A grouping of component properties that describe a calendar event.

An event can be an activity (e.g. a meeting from 8am to 9am tomorrow)
grouping of properties such as a summary or a description. An event will
take up time on a calendar as an opaque time interval, but can alternatively
have transparency set to transparent to prevent blocking of time as busy.

An event start and end time may either be a date and time or just a day
alone. Events may also span more than one day. Alternatively, an event
can have a start and a duration.

```python
from ical_syntax.event import Event

event = Event.from_ics(
    "BEGIN:VEVENT\\r\\n"
    "DTSTART:20240101T090000Z\\r\\n"
    "SUMMARY:Meeting\\r\\n"
    "END:VEVENT\\r\\n"
)
print(event.dtstart, event.summary)
print(event.ics())
```
"""

from __future__ import annotations

import datetime
import enum
import logging
from typing import Annotated, ClassVar, Optional, Union

from pydantic import AfterValidator, Field, model_validator

from .alarm import Alarm
from .component import Binding, ComponentModel
from .types import CalAddress, Period, Recur, Uri
from .types.date_time import require_utc

_LOGGER = logging.getLogger(__name__)


class EventStatus(str, enum.Enum):
    """Status or confirmation of the event set by the organizer."""

    CONFIRMED = "CONFIRMED"
    """Indicates event is definite."""

    TENTATIVE = "TENTATIVE"
    """Indicates event is tentative."""

    CANCELLED = "CANCELLED"
    """Indicates event was cancelled."""


class Transparency(str, enum.Enum):
    """Whether an event consumes time on a calendar."""

    OPAQUE = "OPAQUE"
    """Blocks or opaque on busy time searches."""

    TRANSPARENT = "TRANSPARENT"
    """Transparent on busy time searches."""


class Classification(str, enum.Enum):
    """Defines the access classification for a calendar component."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"
    CONFIDENTIAL = "CONFIDENTIAL"


class Event(ComponentModel):
    """A single event on a calendar.

    Can either be for a specific day, or with a start time and duration/end time.
    """

    component_name: ClassVar[str] = "VEVENT"

    dtstamp: Annotated[Optional[datetime.datetime], AfterValidator(require_utc)] = None
    """Specifies the date and time, in UTC, the event was created."""

    uid: Optional[str] = None
    """A globally unique identifier for the event."""

    dtstart: Union[datetime.datetime, datetime.date]
    """The start time or start day of the event."""

    dtend: Optional[Union[datetime.datetime, datetime.date]] = None
    """The end time or end day of the event.

    This may be specified as an explicit date. Alternatively, a duration
    can be used instead.
    """

    duration: Optional[datetime.timedelta] = None
    """The duration of the event as an alternative to an explicit end date/time."""

    summary: Optional[str] = None
    """Defines a short summary or subject for the event."""

    description: Optional[str] = None
    """A more complete description of the event than provided by the summary."""

    location: Optional[str] = None
    """Defines the intended venue for the activity defined by this event."""

    status: Optional[EventStatus] = None

    transparency: Optional[Transparency] = Field(alias="transp", default=None)

    classification: Optional[Classification] = Field(alias="class", default=None)
    """An access classification for a calendar event."""

    categories: Annotated[list[list[str]], Binding(delimited=True)] = Field(
        default_factory=list
    )
    """Categories for the event, one COMMA-separated list per CATEGORIES property."""

    resources: Annotated[list[list[str]], Binding(delimited=True)] = Field(
        default_factory=list
    )
    """Equipment or resources, such as a room, needed for the event."""

    organizer: Optional[CalAddress] = None
    """The organizer of a group-scheduled calendar entity."""

    attendees: list[CalAddress] = Field(alias="attendee", default_factory=list)
    """Specifies participants in a group-scheduled calendar."""

    url: Optional[Uri] = None

    priority: Optional[int] = Field(default=None, ge=0, le=9)
    """Defines the relative priority of the calendar event, 0 is undefined."""

    sequence: Optional[int] = None
    """The revision sequence number in the calendar component."""

    created: Annotated[Optional[datetime.datetime], AfterValidator(require_utc)] = None
    """The date and time the event information was created."""

    last_modified: Annotated[
        Optional[datetime.datetime], AfterValidator(require_utc)
    ] = None

    recurrence_id: Optional[Union[datetime.datetime, datetime.date]] = None
    """Defines a specific instance of a recurring event."""

    rrule: Optional[Recur] = None
    """A recurrence rule specification, not expanded by this library."""

    rdate: Annotated[
        list[list[Union[datetime.datetime, datetime.date, Period]]],
        Binding(delimited=True),
    ] = Field(default_factory=list)
    """Defines the list of date/time values for recurring events."""

    exdate: Annotated[
        list[list[Union[datetime.datetime, datetime.date]]], Binding(delimited=True)
    ] = Field(default_factory=list)
    """Defines the list of exceptions for recurring events, one list per property."""

    alarms: list[Alarm] = Field(default_factory=list)
    """A grouping of reminder alarms for the event."""

    @model_validator(mode="after")
    def check_end_or_duration(self) -> Event:
        """Validate that only one of duration or end date may be set."""
        if self.dtend is not None and self.duration is not None:
            raise ValueError("Only one of dtend or duration may be set.")
        return self

    @property
    def end(self) -> datetime.datetime | datetime.date | None:
        """Return the end of the event from dtend or the duration."""
        if self.dtend is not None:
            return self.dtend
        if self.duration is not None:
            return self.dtstart + self.duration
        return None
