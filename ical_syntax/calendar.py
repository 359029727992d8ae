"""The Calendar component."""

from __future__ import annotations

import logging
from typing import ClassVar, Optional

from pydantic import Field

from .component import ComponentModel
from .event import Event
from .journal import Journal
from .timezone import Timezone
from .todo import Todo

_LOGGER = logging.getLogger(__name__)


class Calendar(ComponentModel):
    """A sequence of calendar properties and calendar components.

    Components without a model here, such as VFREEBUSY, are kept in `extras`
    and written back unchanged.
    """

    component_name: ClassVar[str] = "VCALENDAR"

    prodid: str
    """The product that created the calendar, e.g. -//Example Corp//EN."""

    version: str
    """The iCalendar specification version, 2.0 for rfc5545."""

    calscale: Optional[str] = None
    method: Optional[str] = None

    #
    # Calendar components
    #

    timezones: list[Timezone] = Field(default_factory=list)
    """Definitions of the timezones referenced by TZID parameters."""

    events: list[Event] = Field(default_factory=list)
    """Events associated with this calendar."""

    todos: list[Todo] = Field(default_factory=list)
    """Todos associated with this calendar."""

    journals: list[Journal] = Field(default_factory=list)
    """Journal entries associated with this calendar."""
