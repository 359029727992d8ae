"""A grouping of component properties that defines a time zone.

A VTIMEZONE is the definition a TZID parameter refers to. It holds a set of
STANDARD and DAYLIGHT observances, each with the UTC offsets in use and the
local time of its first onset.

This library keeps the definition as data and does not compute offsets from
it. A datetime decoded with a `TzidReference` can be matched to its
definition by the TZID text:

```python
timezones = {timezone.tz_id: timezone for timezone in calendar.timezones}
definition = timezones[event.dtstart.tzinfo.key]
```
"""

from __future__ import annotations

import datetime
from typing import Annotated, ClassVar, Optional, Union

from pydantic import AfterValidator, Field, field_validator, model_validator

from .component import Binding, ComponentModel
from .types import Recur, Uri, UtcOffset
from .types.date_time import require_utc

__all__ = [
    "Daylight",
    "Observance",
    "Standard",
    "Timezone",
]


class Observance(ComponentModel):
    """A sub-component with properties for a set of timezone observances."""

    dtstart: datetime.datetime
    """The first onset datetime (local time) for the observance."""

    tz_offset_from: UtcOffset = Field(alias="tzoffsetfrom")
    """The UTC offset in use before the onset of this observance."""

    tz_offset_to: UtcOffset = Field(alias="tzoffsetto")
    """The UTC offset in use while this observance is in effect."""

    rrule: Optional[Recur] = None
    """The recurrence rule for the onset of observances defined in this sub-component."""

    rdate: Annotated[
        list[list[Union[datetime.datetime, datetime.date]]], Binding(delimited=True)
    ] = Field(default_factory=list)

    tz_name: list[str] = Field(alias="tzname", default_factory=list)
    """A name for the observance, e.g. CET."""

    comment: list[str] = Field(default_factory=list)

    @field_validator("dtstart")
    @classmethod
    def verify_dtstart_local_time(cls, value: datetime.datetime) -> datetime.datetime:
        """Validate that dtstart is specified in a local time."""
        if value.tzinfo is not None:
            raise ValueError(f"Start time must be in local time format: {value}")
        return value


class Standard(Observance):
    """The observance describing the base offset from UTC for the time zone."""

    component_name: ClassVar[str] = "STANDARD"


class Daylight(Observance):
    """The observance describing daylight saving time adjustments."""

    component_name: ClassVar[str] = "DAYLIGHT"


class Timezone(ComponentModel):
    """A timezone definition referenced by TZID parameters.

    A Timezone must have at least one definition of a standard or daylight
    sub-component.
    """

    component_name: ClassVar[str] = "VTIMEZONE"

    tz_id: str = Field(alias="tzid")
    """An identifier for this Timezone, unique within a calendar."""

    last_modified: Annotated[
        Optional[datetime.datetime], AfterValidator(require_utc)
    ] = None
    """Specifies the date and time that this time zone was last updated."""

    tz_url: Optional[Uri] = Field(alias="tzurl", default=None)
    """Url that points to a published timezone definition."""

    standard: list[Standard] = Field(default_factory=list)
    daylight: list[Daylight] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_observances(self) -> Timezone:
        """Validate the timezone defines at least one observance."""
        if not self.standard and not self.daylight:
            raise ValueError(
                f"Timezone {self.tz_id} requires a STANDARD or DAYLIGHT observance"
            )
        return self
