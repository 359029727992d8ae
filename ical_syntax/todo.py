"""A grouping of component properties that describe a to-do.

A to-do is an action item or assignment, e.g. a household chore with a due
date. A to-do may have neither a start nor a due date.
"""

from __future__ import annotations

import datetime
import enum
from typing import Annotated, ClassVar, Optional, Union

from pydantic import AfterValidator, Field, model_validator

from .alarm import Alarm
from .component import Binding, ComponentModel
from .event import Classification
from .types import CalAddress, Recur
from .types.date_time import require_utc


class TodoStatus(str, enum.Enum):
    """Status or confirmation of the to-do."""

    NEEDS_ACTION = "NEEDS-ACTION"
    """Indicates to-do needs action."""

    COMPLETED = "COMPLETED"
    """Indicates to-do is completed."""

    IN_PROCESS = "IN-PROCESS"
    """Indicates to-do is in process."""

    CANCELLED = "CANCELLED"
    """Indicates to-do was cancelled."""


class Todo(ComponentModel):
    """A calendar todo component."""

    component_name: ClassVar[str] = "VTODO"

    dtstamp: Annotated[Optional[datetime.datetime], AfterValidator(require_utc)] = None
    uid: Optional[str] = None

    dtstart: Optional[Union[datetime.datetime, datetime.date]] = None
    """The start time of the to-do."""

    due: Optional[Union[datetime.datetime, datetime.date]] = None
    """The due date of the to-do."""

    duration: Optional[datetime.timedelta] = None
    """The duration of the to-do, measured from the start."""

    completed: Annotated[
        Optional[datetime.datetime], AfterValidator(require_utc)
    ] = None
    """The date and time, in UTC, the to-do was actually completed."""

    percent_complete: Optional[int] = Field(default=None, ge=0, le=100)

    priority: Optional[int] = Field(default=None, ge=0, le=9)

    status: Optional[TodoStatus] = None

    summary: Optional[str] = None
    description: Optional[str] = None

    classification: Optional[Classification] = Field(alias="class", default=None)

    categories: Annotated[list[list[str]], Binding(delimited=True)] = Field(
        default_factory=list
    )
    resources: Annotated[list[list[str]], Binding(delimited=True)] = Field(
        default_factory=list
    )

    organizer: Optional[CalAddress] = None

    rrule: Optional[Recur] = None

    alarms: list[Alarm] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_due_or_duration(self) -> Todo:
        """Validate the due and duration properties are not both set."""
        if self.due is not None and self.duration is not None:
            raise ValueError("Only one of due or duration may be set.")
        if self.duration is not None and self.dtstart is None:
            raise ValueError("A to-do with a duration requires a start")
        return self
