"""Library for parsing and encoding URI values."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from ical_syntax.parsing.property import ParsedProperty

from .data_types import DATA_TYPE


def _validate_uri(value: str) -> None:
    if not urlparse(value).scheme:
        raise ValueError(f"Expected URI with a scheme: '{value}'")


@DATA_TYPE.register("URI")
class Uri(str):
    """A value type for a property that contains a uniform resource identifier."""

    forbidden_params = frozenset({"TZID"})

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> Uri:
        """Parse a uniform resource identifier."""
        _validate_uri(prop.value)
        return Uri(prop.value)

    @classmethod
    def __encode_property_value__(cls, value: Uri) -> str:
        _validate_uri(value)
        return str(value)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls, core_schema.str_schema()
        )
