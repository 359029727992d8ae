"""A grouping of component properties that describe a journal entry.

A journal entry attaches descriptive text to a particular calendar date, e.g.
a daily record of a legislative body or a journal of a project. Journal
entries do not take up time on a calendar.
"""

from __future__ import annotations

import datetime
import enum
from typing import Annotated, ClassVar, Optional, Union

from pydantic import AfterValidator, Field

from .component import Binding, ComponentModel
from .event import Classification
from .types import CalAddress, Period, Recur, Uri
from .types.date_time import require_utc

__all__ = [
    "Journal",
    "JournalStatus",
]


class JournalStatus(str, enum.Enum):
    """Status or confirmation of the journal entry."""

    DRAFT = "DRAFT"
    FINAL = "FINAL"
    CANCELLED = "CANCELLED"


class Journal(ComponentModel):
    """A single journal entry on a calendar."""

    component_name: ClassVar[str] = "VJOURNAL"

    dtstamp: Annotated[Optional[datetime.datetime], AfterValidator(require_utc)] = None
    uid: Optional[str] = None

    dtstart: Optional[Union[datetime.datetime, datetime.date]] = None
    """The date the journal entry is associated with."""

    summary: Optional[str] = None

    descriptions: list[str] = Field(alias="description", default_factory=list)
    """The text of the entry, a journal may have more than one description."""

    status: Optional[JournalStatus] = None

    classification: Optional[Classification] = Field(alias="class", default=None)

    categories: Annotated[list[list[str]], Binding(delimited=True)] = Field(
        default_factory=list
    )

    organizer: Optional[CalAddress] = None
    attendees: list[CalAddress] = Field(alias="attendee", default_factory=list)

    url: Optional[Uri] = None
    sequence: Optional[int] = None

    created: Annotated[Optional[datetime.datetime], AfterValidator(require_utc)] = None
    last_modified: Annotated[
        Optional[datetime.datetime], AfterValidator(require_utc)
    ] = None

    recurrence_id: Optional[Union[datetime.datetime, datetime.date]] = None
    rrule: Optional[Recur] = None
    rdate: Annotated[
        list[list[Union[datetime.datetime, datetime.date, Period]]],
        Binding(delimited=True),
    ] = Field(default_factory=list)
    exdate: Annotated[
        list[list[Union[datetime.datetime, datetime.date]]], Binding(delimited=True)
    ] = Field(default_factory=list)
