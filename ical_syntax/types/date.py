"""Library for parsing and encoding DATE values."""

from __future__ import annotations

import datetime
import logging
import re

from ical_syntax.parsing.property import ParsedProperty

from .data_types import DATA_TYPE

_LOGGER = logging.getLogger(__name__)

DATE_REGEX = re.compile(r"^([0-9]{4})([0-9]{2})([0-9]{2})$")


def parse_date(value: str) -> datetime.date:
    """Parse a DATE value such as 19970714."""
    if not (match := DATE_REGEX.fullmatch(value)):
        raise ValueError(f"Expected value to match DATE pattern: '{value}'")
    year, month, day = (int(part) for part in match.groups())
    return datetime.date(year, month, day)


def encode_date(value: datetime.date) -> str:
    """Encode a date with a fixed width four digit year."""
    return f"{value.year:04}{value.month:02}{value.day:02}"


@DATA_TYPE.register("DATE", parse_order=1)
class DateEncoder:
    """Encode and decode an rfc5545 DATE and datetime.date."""

    # A date has no time of day, so it can't be relative to a timezone.
    forbidden_params = frozenset({"TZID"})

    @classmethod
    def __property_type__(cls) -> type:
        return datetime.date

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> datetime.date:
        """Parse a rfc5545 into a datetime.date."""
        result = parse_date(prop.value)
        _LOGGER.debug("DateEncoder returned %s", result)
        return result

    @classmethod
    def __encode_property_value__(cls, value: datetime.date) -> str:
        """Serialize as an ICS value."""
        return encode_date(value)
