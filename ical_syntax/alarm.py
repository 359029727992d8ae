"""Alarm information for calendar components."""

from __future__ import annotations

import datetime
import enum
from typing import Annotated, ClassVar, Optional, Union

from pydantic import Field, model_validator

from .component import Binding, ComponentModel
from .types import CalAddress, Uri


class Action(str, enum.Enum):
    """Type of action invoked when alarm is triggered."""

    AUDIO = "AUDIO"
    """An alarm that causes sound to be played to alert the user.

    The attachment is a sound resource, or a fallback is used.
    """

    DISPLAY = "DISPLAY"
    """An alarm that displays the description text to the user."""

    EMAIL = "EMAIL"
    """An email is composed and delivered to the attendees.

    The description is the body of the message, summary is the subject,
    and attachments are email attachments.
    """


class Alarm(ComponentModel):
    """An alarm component for a calendar.

    The action (e.g. AUDIO, DISPLAY, EMAIL) determine which properties
    are also specified.
    """

    component_name: ClassVar[str] = "VALARM"

    action: str
    """Action to be taken when the alarm is triggered.

    This is kept as text since x-name and iana actions are allowed, see
    `Action` for the standard values.
    """

    trigger: Annotated[
        Union[datetime.timedelta, datetime.datetime], Binding(value_type="DURATION")
    ]
    """When the alarm fires, relative to the start of the parent or at a fixed time."""

    duration: Optional[datetime.timedelta] = None
    """Delay between repetitions of the alarm, set together with repeat."""

    repeat: Optional[int] = None
    """Number of additional times the alarm fires after the first."""

    description: Optional[str] = None
    """Text shown by a DISPLAY alarm or the body of an EMAIL alarm."""

    summary: Optional[str] = None
    """Subject line of an EMAIL alarm."""

    attendees: list[CalAddress] = Field(alias="attendee", default_factory=list)
    """Recipients of an EMAIL alarm."""

    attachments: Annotated[list[Union[Uri, bytes]], Binding(value_type="URI")] = Field(
        alias="attach", default_factory=list
    )
    """A sound resource or email attachment, by reference or inline."""

    @model_validator(mode="after")
    def check_duration_repeat(self) -> Alarm:
        """Validate that duration and repeat are both set if either is set."""
        if (self.duration is None) != (self.repeat is None):
            raise ValueError(
                "Duration and Repeat must both be set if one is set: "
                f"duration={self.duration}, repeat={self.repeat}"
            )
        return self
