"""Library for parsing and encoding PERIOD values."""

from __future__ import annotations

import datetime
import logging
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from ical_syntax.parsing.const import ATTR_TZID
from ical_syntax.parsing.property import ParsedProperty, ParsedPropertyParameter

from .data_types import DATA_TYPE
from .date_time import encode_date_time, encode_tzid_params, parse_date_time, tzinfo_for
from .duration import encode_duration, parse_duration

_LOGGER = logging.getLogger(__name__)


@DATA_TYPE.register("PERIOD")
class Period(BaseModel):
    """A value with a precise period of time."""

    start: datetime.datetime
    """Start of the period of time."""

    end: Optional[datetime.datetime] = None
    """End of the period of the time (duration is implicit)."""

    duration: Optional[datetime.timedelta] = None
    """Duration of the period of time (end time is implicit)."""

    model_config = ConfigDict(frozen=True)

    forbidden_params: ClassVar[frozenset[str]] = frozenset({"ENCODING"})
    consumed_params: ClassVar[frozenset[str]] = frozenset({ATTR_TZID})

    @model_validator(mode="after")
    def check_end_or_duration(self) -> Period:
        """Verify exactly one of end and duration is set."""
        if (self.end is None) == (self.duration is None):
            raise ValueError("Period requires exactly one of end or duration")
        return self

    @property
    def end_value(self) -> datetime.datetime:
        """A computed end value based on either or duration."""
        if self.end is not None:
            return self.end
        assert self.duration is not None
        return self.start + self.duration

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> Period:
        """Parse a rfc5545 period, explicit or with a duration."""
        parts = prop.value.split("/")
        if len(parts) != 2:
            raise ValueError(f"Period did not have two time values: {prop.value}")
        tzinfo = tzinfo_for(prop)
        start = parse_date_time(parts[0], tzinfo)
        if parts[1].lstrip("+-").startswith("P"):
            return Period(start=start, duration=parse_duration(parts[1]))
        _LOGGER.debug("Parsing period end %s as DATE-TIME", parts[1])
        return Period(start=start, end=parse_date_time(parts[1], tzinfo))

    @classmethod
    def __encode_property_value__(cls, value: Period) -> str:
        """Encode property value."""
        start = encode_date_time(value.start)
        if value.end is not None:
            return f"{start}/{encode_date_time(value.end)}"
        assert value.duration is not None
        return f"{start}/{encode_duration(value.duration)}"

    @classmethod
    def __encode_property_params__(cls, value: Period) -> list[ParsedPropertyParameter]:
        return encode_tzid_params(value.start.tzinfo)
