"""Library for parsing and encoding BINARY values."""

from __future__ import annotations

import base64
import binascii

from ical_syntax.parsing.const import ATTR_ENCODING
from ical_syntax.parsing.property import ParsedProperty, ParsedPropertyParameter

from .data_types import DATA_TYPE

BASE64 = "BASE64"


@DATA_TYPE.register("BINARY")
class BinaryEncoder:
    """Encode inline binary data as BASE64 text."""

    forbidden_params = frozenset({"TZID"})
    consumed_params = frozenset({ATTR_ENCODING})

    @classmethod
    def __property_type__(cls) -> type:
        return bytes

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> bytes:
        """Parse a BASE64 encoded value."""
        encoding = prop.get_parameter_value(ATTR_ENCODING)
        if encoding is None or encoding.upper() != BASE64:
            raise ValueError(f"BINARY value requires {ATTR_ENCODING}={BASE64}")
        try:
            return base64.b64decode(prop.value, validate=True)
        except binascii.Error as err:
            raise ValueError(f"Invalid BASE64 value: {err}") from err

    @classmethod
    def __encode_property_value__(cls, value: bytes) -> str:
        """Serialize bytes as BASE64."""
        return base64.b64encode(value).decode("ascii")

    @classmethod
    def __encode_property_params__(cls, value: bytes) -> list[ParsedPropertyParameter]:
        """Binary data is always written with an inline encoding."""
        return [ParsedPropertyParameter(name=ATTR_ENCODING, values=[BASE64])]
