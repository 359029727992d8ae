"""Library for parsing and encoding DATE-TIME types.

A DATE-TIME value comes in three forms:

  - Floating local time, e.g. `19980118T230000`, decoded as a naive datetime.
  - UTC time, e.g. `19980119T070000Z`, decoded as an aware UTC datetime.
  - Local time relative to a timezone, e.g.
    `DTSTART;TZID=America/New_York:19980119T020000`.

This library does not resolve timezone definitions. A value with a TZID
parameter is decoded with a `TzidReference` tzinfo that only carries the
TZID text. It has no UTC offset, so the datetime behaves as local time until
the application resolves the reference, e.g. with
`value.replace(tzinfo=zoneinfo.ZoneInfo(value.tzinfo.key))`. When encoding, an
aware datetime whose tzinfo has a zone key (e.g. `zoneinfo.ZoneInfo`) is
written as local time with a TZID parameter.
"""

from __future__ import annotations

import datetime
import logging
import re
from typing import Any

from ical_syntax.parsing.const import ATTR_TZID
from ical_syntax.parsing.property import ParsedProperty, ParsedPropertyParameter

from .data_types import DATA_TYPE
from .date import encode_date

_LOGGER = logging.getLogger(__name__)


DATETIME_REGEX = re.compile(r"^([0-9]{4})([0-9]{2})([0-9]{2})T([0-9]{2})([0-9]{2})([0-9]{2})(Z)?$")
_UTC_KEYS = {"UTC", "Etc/UTC"}


def is_utc(tzinfo: datetime.tzinfo | None) -> bool:
    """Return True if the timezone is UTC itself, rather than a zone at offset zero."""
    if tzinfo is None:
        return False
    if tzinfo == datetime.timezone.utc:
        return True
    if isinstance(tzinfo, TzidReference):
        return False
    return getattr(tzinfo, "key", None) in _UTC_KEYS


def require_utc(value: datetime.datetime | None) -> datetime.datetime | None:
    """Validate a timestamp property such as DTSTAMP is in UTC time."""
    if value is not None and not is_utc(value.tzinfo):
        raise ValueError(f"Expected a DATE-TIME in UTC time: {value}")
    return value


class TzidReference(datetime.tzinfo):
    """A tzinfo that only names a timezone by its TZID parameter text.

    The reference has no UTC offset, so datetimes using it compare and
    subtract like naive local times.
    """

    def __init__(self, key: str) -> None:
        """Initialize TzidReference."""
        self.key = key

    def utcoffset(self, dt: datetime.datetime | None) -> None:
        return None

    def dst(self, dt: datetime.datetime | None) -> None:
        return None

    def tzname(self, dt: datetime.datetime | None) -> str:
        return self.key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TzidReference):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"TzidReference({self.key!r})"

    def __reduce__(self) -> tuple[Any, ...]:
        return (TzidReference, (self.key,))


def tzinfo_for(prop: ParsedProperty) -> TzidReference | None:
    """Return a reference to the timezone named by the TZID parameter, if any."""
    if not (key := prop.get_parameter_value(ATTR_TZID)):
        return None
    return TzidReference(key)


def parse_date_time(
    value: str, tzinfo: datetime.tzinfo | None = None
) -> datetime.datetime:
    """Parse a rfc5545 DATE-TIME into a datetime.datetime.

    The tzinfo is used for a local time value, and a UTC value may not
    have one.
    """
    if not (match := DATETIME_REGEX.fullmatch(value)):
        raise ValueError(f"Expected value to match DATE-TIME pattern: {value}")
    *parts, utc = match.groups()
    if utc and tzinfo is not None:
        raise ValueError(f"DATE-TIME in UTC may not also have a TZID: {value}")
    year, month, day, hour, minute, second = (int(part) for part in parts)
    return datetime.datetime(
        year,
        month,
        day,
        hour,
        minute,
        second,
        tzinfo=datetime.timezone.utc if utc else tzinfo,
    )


def encode_date_time(value: datetime.datetime) -> str:
    """Encode the wall clock time of the datetime, with a UTC marker if needed."""
    if value.microsecond:
        raise ValueError(f"DATE-TIME can't represent fractional seconds: {value}")
    result = f"{encode_date(value)}T{value.hour:02}{value.minute:02}{value.second:02}"
    if is_utc(value.tzinfo):
        return f"{result}Z"
    if value.tzinfo is not None and tzid(value.tzinfo) is None:
        raise ValueError(f"DATE-TIME timezone has no TZID to reference: {value.tzinfo}")
    return result


def tzid(tzinfo: datetime.tzinfo | None) -> str | None:
    """Return the TZID used to reference a timezone."""
    if tzinfo is None or is_utc(tzinfo):
        return None
    return getattr(tzinfo, "key", None)


def encode_tzid_params(tzinfo: datetime.tzinfo | None) -> list[ParsedPropertyParameter]:
    """Encode the TZID parameter for a value relative to the timezone."""
    if (key := tzid(tzinfo)) is None:
        return []
    return [ParsedPropertyParameter(name=ATTR_TZID, values=[key])]


@DATA_TYPE.register("DATE-TIME", parse_order=2)
class DateTimeEncoder:
    """Class to handle encoding for a datetime.datetime."""

    forbidden_params: frozenset[str] = frozenset()
    consumed_params = frozenset({ATTR_TZID})

    @classmethod
    def __property_type__(cls) -> type:
        return datetime.datetime

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> datetime.datetime:
        """Parse a rfc5545 into a datetime.datetime."""
        result = parse_date_time(prop.value, tzinfo_for(prop))
        _LOGGER.debug("DateTimeEncoder returned %s", result)
        return result

    @classmethod
    def __encode_property_value__(cls, value: datetime.datetime) -> str:
        """Encode the datetime as an ICS value."""
        return encode_date_time(value)

    @classmethod
    def __encode_property_params__(cls, value: Any) -> list[ParsedPropertyParameter]:
        """Encode parameters for the property value."""
        return encode_tzid_params(value.tzinfo)
