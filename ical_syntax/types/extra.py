"""Values of a type that is not registered with the library."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UnknownValue:
    """A property value with an x-name or unregistered iana value type.

    The value is kept as opaque text, exactly as it appeared in the content
    line, and is written back unchanged with its VALUE parameter.
    """

    value_type: str
    """The VALUE parameter naming the type, e.g. X-MY-TYPE."""

    value: str
    """The raw property value."""
