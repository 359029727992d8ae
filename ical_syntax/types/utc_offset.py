"""Library for parsing and encoding UTC-OFFSET values."""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass

from ical_syntax.parsing.property import ParsedProperty

from .data_types import DATA_TYPE

UTC_OFFSET_REGEX = re.compile(r"^([-+])([0-9]{2})([0-9]{2})([0-9]{2})?$")


@DATA_TYPE.register("UTC-OFFSET")
@dataclass(frozen=True)
class UtcOffset:
    """Contains an offset from UTC to local time."""

    offset: datetime.timedelta

    forbidden_params = frozenset({"TZID"})

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> UtcOffset:
        """Parse a UTC Offset."""
        value = prop.value
        if not (match := UTC_OFFSET_REGEX.fullmatch(value)):
            raise ValueError(f"Expected value to match UTC-OFFSET pattern: {value}")
        sign, hours, minutes, seconds = match.groups()
        if int(hours) > 23:
            raise ValueError(f"UTC-OFFSET hours must be below 24: {value}")
        if int(minutes) > 59 or int(seconds or 0) > 59:
            raise ValueError(f"UTC-OFFSET minutes and seconds must be below 60: {value}")
        result = datetime.timedelta(
            hours=int(hours),
            minutes=int(minutes),
            seconds=int(seconds or 0),
        )
        if sign == "-":
            if not result:
                raise ValueError("UTC-OFFSET of negative zero is not allowed")
            result = -result
        return UtcOffset(result)

    @classmethod
    def __encode_property_value__(cls, value: UtcOffset) -> str:
        """Serialize a time delta as a UTC-OFFSET ICS value."""
        duration = value.offset
        if duration.microseconds or abs(duration) >= datetime.timedelta(days=1):
            raise ValueError(f"UTC-OFFSET out of range: {duration}")
        parts = []
        if duration < datetime.timedelta(days=0):
            parts.append("-")
            duration = -duration
        else:
            parts.append("+")
        hours, seconds = divmod(duration.seconds, 3600)
        minutes, seconds = divmod(seconds, 60)
        parts.append(f"{hours:02}{minutes:02}")
        if seconds:
            parts.append(f"{seconds:02}")
        return "".join(parts)
