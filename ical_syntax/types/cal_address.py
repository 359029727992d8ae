"""Library for parsing and encoding CAL-ADDRESS values."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from ical_syntax.parsing.property import ParsedProperty

from .data_types import DATA_TYPE


@DATA_TYPE.register("CAL-ADDRESS")
class CalAddress(str):
    """A calendar user address, typically a mailto URI.

    Parameters such as the common name or participation status of an
    attendee are kept with the property and are not part of the value.
    """

    forbidden_params = frozenset({"TZID"})

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> CalAddress:
        """Parse a calendar user address."""
        if not urlparse(prop.value).scheme:
            raise ValueError(f"Expected calendar address with a scheme: '{prop.value}'")
        return CalAddress(prop.value)

    @classmethod
    def __encode_property_value__(cls, value: CalAddress) -> str:
        return str(value)

    @property
    def email(self) -> str | None:
        """Return the email address of a mailto address."""
        parsed = urlparse(self)
        if parsed.scheme.lower() != "mailto":
            return None
        return parsed.path

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls, core_schema.str_schema()
        )
