"""Library for parsing and encoding RECUR values.

A recurrence rule is decoded into its named rule parts rather than kept as
opaque text. This library does not expand the rule into occurrences; the
`Recur` object is meant to be handed to a recurrence library that does.

```python
from ical_syntax.types.recur import Recur

rule = Recur.from_rrule("FREQ=WEEKLY;COUNT=3;BYDAY=MO,WE")
print(rule.freq, rule.count, [str(day) for day in rule.by_weekday])
print(rule.as_rrule_str())
```
"""

from __future__ import annotations

import datetime
import enum
import logging
import re
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ical_syntax.parsing.property import ParsedProperty

from .data_types import DATA_TYPE
from .date import encode_date, parse_date
from .date_time import encode_date_time, parse_date_time

_LOGGER = logging.getLogger(__name__)


# Note: This can be StrEnum in python 3.11 and higher
class Weekday(str, enum.Enum):
    """Corresponds to a day of the week."""

    SUNDAY = "SU"
    MONDAY = "MO"
    TUESDAY = "TU"
    WEDNESDAY = "WE"
    THURSDAY = "TH"
    FRIDAY = "FR"
    SATURDAY = "SA"

    def __str__(self) -> str:
        """Return string representation."""
        return self.value


@dataclass(frozen=True)
class WeekdayValue:
    """Holds a weekday value and optional occurrence value."""

    weekday: Weekday
    """Day of the week value."""

    occurrence: Optional[int] = None
    """The occurrence value indicates the nth occurrence.

    Indicates the nth occurrence of a specific day within the MONTHLY or
    YEARLY "RRULE". For example +1 represents the first Monday of the
    month, or -1 represents the last Monday of the month.
    """

    def __str__(self) -> str:
        """Return the WeekdayValue as an encoded string."""
        return f"{self.occurrence or ''}{self.weekday}"


class Frequency(str, enum.Enum):
    """Type of recurrence rule."""

    SECONDLY = "SECONDLY"
    MINUTELY = "MINUTELY"
    HOURLY = "HOURLY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


WEEKDAY_REGEX = re.compile(r"([-+]?[0-9]{1,2})?([A-Z]{2})")
INTEGER_REGEX = re.compile(r"[-+]?[0-9]+")

# Rule part names in the order they are encoded.
_RULE_PARTS = {
    "FREQ": "freq",
    "UNTIL": "until",
    "COUNT": "count",
    "INTERVAL": "interval",
    "BYSECOND": "by_second",
    "BYMINUTE": "by_minute",
    "BYHOUR": "by_hour",
    "BYDAY": "by_weekday",
    "BYMONTHDAY": "by_month_day",
    "BYYEARDAY": "by_year_day",
    "BYWEEKNO": "by_week_no",
    "BYMONTH": "by_month",
    "BYSETPOS": "by_setpos",
    "WKST": "week_start",
}
_INT_LIST_PARTS = {
    "BYSECOND",
    "BYMINUTE",
    "BYHOUR",
    "BYMONTHDAY",
    "BYYEARDAY",
    "BYWEEKNO",
    "BYMONTH",
    "BYSETPOS",
}


def _parse_int(value: str) -> int:
    if not INTEGER_REGEX.fullmatch(value):
        raise ValueError(f"Expected integer in recurrence rule: '{value}'")
    return int(value)


def _check_range(
    values: list[int], low: int, high: int, signed: bool = False
) -> list[int]:
    for value in values:
        magnitude = abs(value) if signed else value
        if not low <= magnitude <= high:
            raise ValueError(f"Value {value} out of range {low}..{high}")
    return values


@DATA_TYPE.register("RECUR")
class Recur(BaseModel):
    """A type used to identify properties that contain a recurrence rule specification."""

    freq: Frequency

    until: Union[datetime.datetime, datetime.date, None] = None
    """The inclusive end date of the recurrence, or the last instance."""

    count: Optional[int] = Field(default=None, ge=1)
    """The number of occurrences to bound the recurrence."""

    interval: Optional[int] = Field(default=None, ge=1)
    """Interval at which the recurrence rule repeats, 1 when not set."""

    by_second: list[int] = Field(default_factory=list)
    """Seconds between 0 and 60."""

    by_minute: list[int] = Field(default_factory=list)
    """Minutes between 0 and 59."""

    by_hour: list[int] = Field(default_factory=list)
    """Hours between 0 and 23."""

    by_weekday: list[WeekdayValue] = Field(default_factory=list)
    """Supported days of the week."""

    by_month_day: list[int] = Field(default_factory=list)
    """Days of the month between 1 to 31, negative counts from the end."""

    by_year_day: list[int] = Field(default_factory=list)
    """Days of the year between 1 to 366, negative counts from the end."""

    by_week_no: list[int] = Field(default_factory=list)
    """Weeks of the year between 1 to 53, negative counts from the end."""

    by_month: list[int] = Field(default_factory=list)
    """Month number between 1 and 12."""

    by_setpos: list[int] = Field(default_factory=list)
    """Values that corresponds to the nth occurrence within the set of instances."""

    week_start: Optional[Weekday] = None
    """The day on which the work week starts."""

    model_config = ConfigDict(validate_assignment=True)

    forbidden_params: ClassVar[frozenset[str]] = frozenset({"TZID"})

    @field_validator("by_second")
    @classmethod
    def check_by_second(cls, value: list[int]) -> list[int]:
        return _check_range(value, 0, 60)

    @field_validator("by_minute")
    @classmethod
    def check_by_minute(cls, value: list[int]) -> list[int]:
        return _check_range(value, 0, 59)

    @field_validator("by_hour")
    @classmethod
    def check_by_hour(cls, value: list[int]) -> list[int]:
        return _check_range(value, 0, 23)

    @field_validator("by_month_day")
    @classmethod
    def check_by_month_day(cls, value: list[int]) -> list[int]:
        return _check_range(value, 1, 31, signed=True)

    @field_validator("by_year_day", "by_setpos")
    @classmethod
    def check_by_year_day(cls, value: list[int]) -> list[int]:
        return _check_range(value, 1, 366, signed=True)

    @field_validator("by_week_no")
    @classmethod
    def check_by_week_no(cls, value: list[int]) -> list[int]:
        return _check_range(value, 1, 53, signed=True)

    @field_validator("by_month")
    @classmethod
    def check_by_month(cls, value: list[int]) -> list[int]:
        return _check_range(value, 1, 12)

    @field_validator("by_weekday")
    @classmethod
    def check_by_weekday(cls, value: list[WeekdayValue]) -> list[WeekdayValue]:
        _check_range(
            [day.occurrence for day in value if day.occurrence is not None],
            1,
            53,
            signed=True,
        )
        return value

    @model_validator(mode="after")
    def check_count_until(self) -> Recur:
        if self.count is not None and self.until is not None:
            raise ValueError("Recurrence rule may not have both COUNT and UNTIL")
        return self

    def as_rrule_str(self) -> str:
        """Return the Recur instance as an RRULE string."""
        return self.__encode_property_value__(self)

    @classmethod
    def from_rrule(cls, rrule_str: str) -> Recur:
        """Create a Recur object from an RRULE string."""
        result: dict[str, Any] = {}
        for part in rrule_str.split(";"):
            if "=" not in part:
                raise ValueError(
                    f"Recurrence rule had unexpected format missing '=': {rrule_str}"
                )
            key, value = part.split("=", 1)
            key = key.upper()
            if (field_name := _RULE_PARTS.get(key)) is None:
                raise ValueError(f"Unknown recurrence rule part '{key}'")
            if field_name in result:
                raise ValueError(f"Recurrence rule part '{key}' is repeated")
            if key == "UNTIL":
                new_value: datetime.datetime | datetime.date
                try:
                    new_value = parse_date_time(value)
                except ValueError:
                    new_value = parse_date(value)
                result[field_name] = new_value
            elif key in _INT_LIST_PARTS:
                result[field_name] = [_parse_int(val) for val in value.split(",")]
            elif key in ("COUNT", "INTERVAL"):
                result[field_name] = _parse_int(value)
            elif key == "BYDAY":
                weekdays: list[WeekdayValue] = []
                for day in value.split(","):
                    if not (match := WEEKDAY_REGEX.fullmatch(day.upper())):
                        raise ValueError(f"Expected value to match BYDAY pattern: {day}")
                    occurrence, weekday = match.groups()
                    weekdays.append(
                        WeekdayValue(
                            weekday=Weekday(weekday),
                            occurrence=int(occurrence) if occurrence else None,
                        )
                    )
                result[field_name] = weekdays
            else:
                result[field_name] = value.upper()
        if "freq" not in result:
            raise ValueError(f"Recurrence rule is missing FREQ: {rrule_str}")
        _LOGGER.debug("Parsed recurrence rule %s", result)
        return cls(**result)

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> Recur:
        """Parse the recurrence rule text into its rule parts."""
        return cls.from_rrule(prop.value)

    @classmethod
    def __encode_property_value__(cls, value: Recur) -> str:
        """Encode the recurrence rule in ICS format."""
        result = []
        for key, field_name in _RULE_PARTS.items():
            part = getattr(value, field_name)
            if part is None or part == []:
                continue
            if isinstance(part, list):
                encoded = ",".join(str(item) for item in part)
            elif isinstance(part, datetime.datetime):
                encoded = encode_date_time(part)
            elif isinstance(part, datetime.date):
                encoded = encode_date(part)
            elif isinstance(part, enum.Enum):
                encoded = part.value
            else:
                encoded = str(part)
            result.append(f"{key}={encoded}")
        return ";".join(result)
