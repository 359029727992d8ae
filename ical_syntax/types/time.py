"""Library for parsing and encoding TIME values."""

from __future__ import annotations

import datetime
import re

from ical_syntax.parsing.const import ATTR_TZID
from ical_syntax.parsing.property import ParsedProperty, ParsedPropertyParameter

from .data_types import DATA_TYPE
from .date_time import encode_tzid_params, is_utc, tzid, tzinfo_for

TIME_REGEX = re.compile(r"^([0-9]{2})([0-9]{2})([0-9]{2})(Z)?$")


@DATA_TYPE.register("TIME")
class TimeEncoder:
    """Encode and decode an rfc5545 TIME as a datetime.time."""

    forbidden_params: frozenset[str] = frozenset()
    consumed_params = frozenset({ATTR_TZID})

    @classmethod
    def __property_type__(cls) -> type:
        return datetime.time

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> datetime.time:
        """Parse a rfc5545 TIME such as 230000 or 070000Z."""
        if not (match := TIME_REGEX.fullmatch(prop.value)):
            raise ValueError(f"Expected value to match TIME pattern: {prop.value}")
        hour, minute, second, utc = match.groups()
        tzinfo = tzinfo_for(prop)
        if utc and tzinfo is not None:
            raise ValueError(f"TIME in UTC may not also have a TZID: {prop.value}")
        return datetime.time(
            int(hour),
            int(minute),
            int(second),
            tzinfo=datetime.timezone.utc if utc else tzinfo,
        )

    @classmethod
    def __encode_property_value__(cls, value: datetime.time) -> str:
        """Serialize a time as an ICS value."""
        if value.microsecond:
            raise ValueError(f"TIME can't represent fractional seconds: {value}")
        result = f"{value.hour:02}{value.minute:02}{value.second:02}"
        if is_utc(value.tzinfo):
            return f"{result}Z"
        if value.tzinfo is not None and tzid(value.tzinfo) is None:
            raise ValueError(f"TIME timezone has no TZID to reference: {value.tzinfo}")
        return result

    @classmethod
    def __encode_property_params__(cls, value: datetime.time) -> list[ParsedPropertyParameter]:
        """Encode the TZID of a time relative to a timezone."""
        return encode_tzid_params(value.tzinfo)
