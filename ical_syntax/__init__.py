"""A library for the iCalendar (rfc5545) syntax.

Content is parsed into a tree of `ParsedComponent` objects holding raw
properties, and typed records are bound to that tree with a `Schema` or a
`ComponentModel`. Generation is the exact inverse: records are encoded into a
tree which is serialized as folded, CRLF terminated text.
"""

from .calendar_stream import decode, encode, ics, parse, parse_content, serialize

__all__ = [
    "alarm",
    "calendar",
    "calendar_stream",
    "compat",
    "component",
    "event",
    "exceptions",
    "generate",
    "journal",
    "schema",
    "timezone",
    "todo",
    "types",
    "decode",
    "encode",
    "ics",
    "parse",
    "parse_content",
    "serialize",
]
