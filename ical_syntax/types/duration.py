"""Library for parsing and encoding DURATION values."""

import datetime
import re

from ical_syntax.parsing.property import ParsedProperty

from .data_types import DATA_TYPE

DATE_PART = r"(\d+)D"
TIME_PART = r"T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?"
DATETIME_PART = f"(?:{DATE_PART})?(?:{TIME_PART})?"
WEEKS_PART = r"(\d+)W"
DURATION_REGEX = re.compile(f"([-+]?)P(?:{WEEKS_PART}|{DATETIME_PART})$")


def parse_duration(value: str) -> datetime.timedelta:
    """Parse a DURATION such as P15DT5H0M20S or -PT15M."""
    if not (match := DURATION_REGEX.fullmatch(value)):
        raise ValueError(f"Expected value to match DURATION pattern: {value}")
    sign, weeks, days, hours, minutes, seconds = match.groups()
    if value.endswith(("P", "T")):
        raise ValueError(f"DURATION is missing a date or time value: {value}")
    result: datetime.timedelta
    try:
        if weeks:
            result = datetime.timedelta(weeks=int(weeks))
        else:
            result = datetime.timedelta(
                days=int(days or 0),
                hours=int(hours or 0),
                minutes=int(minutes or 0),
                seconds=int(seconds or 0),
            )
        if sign == "-":
            result = -result
    except OverflowError as err:
        raise ValueError(f"DURATION is out of range: {value}") from err
    return result


def encode_duration(duration: datetime.timedelta) -> str:
    """Serialize a time delta as a DURATION ICS value."""
    if duration.microseconds:
        raise ValueError(f"DURATION can't represent fractional seconds: {duration}")
    parts = []
    if duration < datetime.timedelta(days=0):
        parts.append("-")
        duration = -duration
    parts.append("P")
    days = duration.days
    if days and days % 7 == 0 and not duration.seconds:
        parts.append(f"{days // 7}W")
        return "".join(parts)
    if days > 0:
        parts.append(f"{days}D")
    if duration.seconds != 0 or days == 0:
        parts.append("T")
        seconds = duration.seconds
        hours, seconds = divmod(seconds, 3600)
        minutes, seconds = divmod(seconds, 60)
        if hours:
            parts.append(f"{hours}H")
        if minutes:
            parts.append(f"{minutes}M")
        if seconds or not (hours or minutes):
            parts.append(f"{seconds}S")
    return "".join(parts)


@DATA_TYPE.register("DURATION")
class DurationEncoder:
    """Class that can encode DURATION values."""

    forbidden_params = frozenset({"TZID"})

    @classmethod
    def __property_type__(cls) -> type:
        return datetime.timedelta

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> datetime.timedelta:
        """Parse a rfc5545 into a datetime.timedelta."""
        return parse_duration(prop.value)

    @classmethod
    def __encode_property_value__(cls, duration: datetime.timedelta) -> str:
        """Serialize a time delta as a DURATION ICS value."""
        return encode_duration(duration)
