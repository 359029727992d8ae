"""Library for parsing and encoding FLOAT values."""

import decimal
import math
import re

from ical_syntax.parsing.property import ParsedProperty

from .data_types import DATA_TYPE

FLOAT_REGEX = re.compile(r"[-+]?[0-9]+(\.[0-9]+)?")


@DATA_TYPE.register("FLOAT")
class FloatEncoder:
    """Encode a float ICS value."""

    forbidden_params = frozenset({"TZID"})

    @classmethod
    def __property_type__(cls) -> type:
        return float

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> float:
        """Parse a rfc5545 property into a float value."""
        if not FLOAT_REGEX.fullmatch(prop.value):
            raise ValueError(f"Expected value to match FLOAT pattern: {prop.value}")
        return float(prop.value)

    @classmethod
    def __encode_property_value__(cls, value: float) -> str:
        """Serialize a float without an exponent."""
        if not math.isfinite(value):
            raise ValueError(f"FLOAT value must be finite: {value}")
        text = repr(float(value))
        if "e" in text or "E" in text:
            # The shortest repr digits, written out in positional notation
            text = format(decimal.Decimal(text), "f")
        return text
