"""Library for parsing and encoding BOOLEAN values."""

from ical_syntax.parsing.property import ParsedProperty

from .data_types import DATA_TYPE

# Matching is case insensitive, encoding always uses the upper case form.
_BOOLEAN_VALUES = {"TRUE": True, "FALSE": False}


@DATA_TYPE.register("BOOLEAN")
class BooleanEncoder:
    """Codec for the BOOLEAN value type."""

    forbidden_params = frozenset({"TZID"})

    @classmethod
    def __property_type__(cls) -> type:
        return bool

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> bool:
        if (result := _BOOLEAN_VALUES.get(prop.value.upper())) is None:
            raise ValueError(f"Expected TRUE or FALSE for BOOLEAN value: {prop.value}")
        return result

    @classmethod
    def __encode_property_value__(cls, value: bool) -> str:
        return "TRUE" if value else "FALSE"
