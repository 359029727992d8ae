"""Rules for which components may be nested inside which parents.

The parser only requires BEGIN and END markers to balance. A NestingRules
table additionally rejects a component that shows up under a parent that
can't contain it, independent of any schema used to decode the tree later.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from ical_syntax.exceptions import InvalidNesting

__all__ = [
    "NestingRules",
    "RFC5545_NESTING_RULES",
    "TOP_LEVEL",
]

TOP_LEVEL = ""
"""Parent name used for components that are not inside any other component."""


@dataclass(frozen=True)
class NestingRules:
    """Map of component name to the names of parents allowed to contain it.

    Components that are not in the map may appear anywhere.
    """

    allowed_parents: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def check(self, name: str, parent: str | None, lineno: int | None = None) -> None:
        """Raise InvalidNesting if the component can't be placed under the parent."""
        if (allowed := self.allowed_parents.get(name.upper())) is None:
            return
        parent_name = parent.upper() if parent else TOP_LEVEL
        if parent_name in allowed:
            return
        where = f"inside {parent_name}" if parent_name else "at the top level"
        raise InvalidNesting(
            f"Component {name.upper()} is not allowed {where}",
            lineno=lineno,
        )


_CALENDAR_COMPONENTS = frozenset({"VCALENDAR"})

RFC5545_NESTING_RULES = NestingRules(
    allowed_parents={
        "VCALENDAR": frozenset({TOP_LEVEL}),
        "VEVENT": _CALENDAR_COMPONENTS,
        "VTODO": _CALENDAR_COMPONENTS,
        "VJOURNAL": _CALENDAR_COMPONENTS,
        "VFREEBUSY": _CALENDAR_COMPONENTS,
        "VTIMEZONE": _CALENDAR_COMPONENTS,
        "VALARM": frozenset({"VEVENT", "VTODO"}),
        "STANDARD": frozenset({"VTIMEZONE"}),
        "DAYLIGHT": frozenset({"VTIMEZONE"}),
    }
)
