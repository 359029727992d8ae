"""Library for parsing and encoding INTEGER values."""

import re

from ical_syntax.parsing.property import ParsedProperty

from .data_types import DATA_TYPE

INTEGER_REGEX = re.compile(r"[-+]?[0-9]+")


@DATA_TYPE.register("INTEGER")
class IntEncoder:
    """Encode an int ICS value."""

    forbidden_params = frozenset({"TZID"})

    @classmethod
    def __property_type__(cls) -> type:
        return int

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> int:
        """Parse a rfc5545 int value."""
        if not INTEGER_REGEX.fullmatch(prop.value):
            raise ValueError(f"Expected value to match INTEGER pattern: {prop.value}")
        return int(prop.value)

    @classmethod
    def __encode_property_value__(cls, value: int) -> str:
        return str(value)
