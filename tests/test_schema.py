"""Tests for binding components to records with a schema."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest

from ical_syntax.compat import enable_lenient_parsing
from ical_syntax.exceptions import (
    ComponentMismatch,
    DuplicateProperty,
    MissingRequiredProperty,
    SchemaDefinitionError,
    UnencodableValue,
    UnsupportedParameter,
    ValueDecodeError,
)
from ical_syntax.parsing.component import ParsedComponent, parse_component
from ical_syntax.parsing.property import ParsedProperty, ParsedPropertyParameter
from ical_syntax.schema import (
    Cardinality,
    Diagnostic,
    FieldBinding,
    OverflowBag,
    OverflowItem,
    Schema,
    decode,
    decode_property,
    encode,
    encode_property,
)
from ical_syntax.types import CalAddress, TzidReference, UnknownValue


@dataclass
class Meeting:
    """A hand written record bound to a VEVENT without pydantic."""

    start: datetime.datetime | datetime.date
    summary: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    attendees: list[str] = field(default_factory=list)
    extras: OverflowBag = field(default_factory=OverflowBag)


MEETING_SCHEMA = Schema(
    component_name="VEVENT",
    bindings=(
        FieldBinding(
            "DTSTART",
            Cardinality.REQUIRED_ONE,
            "DATE-TIME",
            field_name="start",
            allowed_types=("DATE-TIME", "DATE"),
        ),
        FieldBinding("SUMMARY", Cardinality.OPTIONAL_ONE, "TEXT"),
        FieldBinding("CATEGORIES", Cardinality.OPTIONAL_ONE, "TEXT", delimited=True),
        FieldBinding(
            "ATTENDEE",
            Cardinality.ZERO_OR_MORE,
            "CAL-ADDRESS",
            field_name="attendees",
        ),
    ),
    record_factory=Meeting,
)

MEETING = "\r\n".join(
    [
        "BEGIN:VEVENT",
        "DTSTART:20240101T090000Z",
        "X-CUSTOM;X-P=1:keep me",
        "SUMMARY;LANGUAGE=en:Meeting",
        "CATEGORIES:a,b\\,c",
        "ATTENDEE;CN=Jane:mailto:jane@example.com",
        "ATTENDEE:mailto:bob@example.com",
        "BEGIN:VALARM",
        "ACTION:DISPLAY",
        "END:VALARM",
        "END:VEVENT",
        "",
    ]
)


def test_decode_and_encode() -> None:
    """Test a component is decoded into a record and written back unchanged."""
    component = parse_component(MEETING)
    meeting = decode(component, MEETING_SCHEMA)
    assert meeting.start == datetime.datetime(2024, 1, 1, 9, tzinfo=datetime.timezone.utc)
    assert meeting.summary == "Meeting"
    assert meeting.categories == ["a", "b,c"]
    assert meeting.attendees == ["mailto:jane@example.com", "mailto:bob@example.com"]
    assert isinstance(meeting.attendees[0], CalAddress)

    assert [item.position for item in meeting.extras.properties] == [1]
    assert meeting.extras.properties[0].value.name == "X-CUSTOM"
    assert [item.value.name for item in meeting.extras.components] == ["VALARM"]
    assert meeting.extras.parameters[("SUMMARY", 0)] == [
        ParsedPropertyParameter(name="LANGUAGE", values=["en"])
    ]
    assert meeting.extras.parameters[("ATTENDEE", 0)] == [
        ParsedPropertyParameter(name="CN", values=["Jane"])
    ]
    assert meeting.extras.parameters[("ATTENDEE", 1)] == []
    assert not meeting.extras.diagnostics

    result = encode(meeting, MEETING_SCHEMA)
    assert result == component
    assert result.ics() == MEETING


def test_decode_does_not_share_input() -> None:
    """Test the record does not hold on to objects of the parsed component."""
    component = parse_component(MEETING)
    meeting = decode(component, MEETING_SCHEMA)
    meeting.extras.properties[0].value.value = "changed"
    meeting.extras.parameters[("SUMMARY", 0)][0].values = ["fr"]
    assert component.properties[1].value == "keep me"
    assert component.properties[2].params == [
        ParsedPropertyParameter(name="LANGUAGE", values=["en"])
    ]
    assert "X-CUSTOM;X-P=1:changed" in encode(meeting, MEETING_SCHEMA).ics()


def test_encode_new_record() -> None:
    """Test encoding a record that was not decoded."""
    meeting = Meeting(
        start=datetime.date(2024, 1, 1),
        summary="Planning, review",
        attendees=[CalAddress("mailto:jane@example.com")],
    )
    assert encode(meeting, MEETING_SCHEMA).ics() == (
        "BEGIN:VEVENT\r\n"
        "DTSTART;VALUE=DATE:20240101\r\n"
        "SUMMARY:Planning\\, review\r\n"
        "ATTENDEE:mailto:jane@example.com\r\n"
        "END:VEVENT\r\n"
    )


def test_value_parameter() -> None:
    """Test the VALUE parameter selects one of the allowed value types."""
    component = parse_component(
        "BEGIN:VEVENT\r\nDTSTART;VALUE=DATE:20240101\r\nEND:VEVENT\r\n"
    )
    meeting = decode(component, MEETING_SCHEMA)
    assert meeting.start == datetime.date(2024, 1, 1)
    assert meeting.extras.parameters[("DTSTART", 0)] == []
    assert encode(meeting, MEETING_SCHEMA) == component


@pytest.mark.parametrize("value_type", ["X-FOO", "TEXT"])
def test_value_type_not_allowed(value_type: str) -> None:
    """Test a VALUE parameter naming a type the binding does not allow."""
    component = parse_component(
        f"BEGIN:VEVENT\r\nDTSTART;VALUE={value_type}:20240101\r\nEND:VEVENT\r\n"
    )
    with pytest.raises(ValueDecodeError, match="not allowed") as exc_info:
        decode(component, MEETING_SCHEMA)
    assert exc_info.value.lineno == 2
    assert exc_info.value.property_name == "DTSTART"


def test_tzid() -> None:
    """Test the TZID parameter is read by the value type and written back."""
    component = parse_component(
        "BEGIN:VEVENT\r\nDTSTART;TZID=Europe/Berlin:20240101T090000\r\nEND:VEVENT\r\n"
    )
    meeting = decode(component, MEETING_SCHEMA)
    assert meeting.start.tzinfo == TzidReference("Europe/Berlin")
    assert meeting.extras.parameters[("DTSTART", 0)] == []
    assert encode(meeting, MEETING_SCHEMA) == component


def test_missing_required() -> None:
    """Test a required property that is not present."""
    component = parse_component("BEGIN:VEVENT\r\nSUMMARY:a\r\nEND:VEVENT\r\n")
    with pytest.raises(MissingRequiredProperty, match="VEVENT requires DTSTART") as exc_info:
        decode(component, MEETING_SCHEMA)
    assert exc_info.value.component_name == "VEVENT"
    assert exc_info.value.property_name == "DTSTART"


@pytest.mark.parametrize("strict", [True, False])
def test_duplicate(strict: bool) -> None:
    """Test a single valued property that is repeated."""
    component = parse_component(
        "BEGIN:VEVENT\r\nDTSTART:20240101T090000Z\r\n"
        "SUMMARY:a\r\nSUMMARY:b\r\nEND:VEVENT\r\n"
    )
    with pytest.raises(DuplicateProperty) as exc_info:
        decode(component, MEETING_SCHEMA, strict=strict)
    assert exc_info.value.property_name == "SUMMARY"
    assert exc_info.value.lineno == 4


def test_component_mismatch() -> None:
    """Test decoding a component of a different kind."""
    component = parse_component("BEGIN:VTODO\r\nDTSTART:20240101T090000Z\r\nEND:VTODO\r\n")
    with pytest.raises(ComponentMismatch, match="Expected component VEVENT, got VTODO"):
        decode(component, MEETING_SCHEMA)


def test_unsupported_parameter() -> None:
    """Test a parameter that is not allowed with the value type."""
    component = parse_component(
        "BEGIN:VEVENT\r\nDTSTART:20240101T090000Z\r\n"
        "SUMMARY;TZID=Europe/Berlin:a\r\nEND:VEVENT\r\n"
    )
    with pytest.raises(UnsupportedParameter, match="TZID") as exc_info:
        decode(component, MEETING_SCHEMA)
    assert exc_info.value.lineno == 3


def test_lenient_decode() -> None:
    """Test properties that can't be decoded are kept when decoding leniently."""
    content = (
        "BEGIN:VEVENT\r\n"
        "DTSTART:20240101T090000Z\r\n"
        "SUMMARY;TZID=Europe/Berlin:a\r\n"
        "ATTENDEE:not an address\r\n"
        "NOT A CONTENT LINE\r\n"
        "END:VEVENT\r\n"
    )
    component = parse_component(content, strict=False)
    with enable_lenient_parsing():
        meeting = decode(component, MEETING_SCHEMA)
    assert meeting.summary is None
    assert meeting.attendees == []
    assert [item.position for item in meeting.extras.properties] == [1, 2]
    assert [diagnostic.lineno for diagnostic in meeting.extras.diagnostics] == [5, 3, 4]
    assert meeting.extras.diagnostics[1].property_name == "SUMMARY"
    assert encode(meeting, MEETING_SCHEMA).ics() == content.replace(
        "NOT A CONTENT LINE\r\n", ""
    )


def test_encode_missing_required() -> None:
    """Test encoding a record without a required value."""
    with pytest.raises(MissingRequiredProperty):
        encode(Meeting(start=None), MEETING_SCHEMA)  # type: ignore[arg-type]


def test_encode_unsupported_value() -> None:
    """Test encoding values the binding can't represent."""
    with pytest.raises(UnencodableValue):
        encode(Meeting(start="tomorrow"), MEETING_SCHEMA)  # type: ignore[arg-type]
    with pytest.raises(UnencodableValue):
        encode(
            Meeting(start=datetime.datetime(2024, 1, 1), attendees="mailto:a@b"),  # type: ignore[arg-type]
            MEETING_SCHEMA,
        )


def test_default_parameters() -> None:
    """Test default parameters are only used for values without parameters of their own."""
    schema = Schema(
        component_name="VEVENT",
        bindings=(
            FieldBinding("DTSTART", Cardinality.REQUIRED_ONE, "DATE-TIME", field_name="start"),
            FieldBinding(
                "SUMMARY", Cardinality.OPTIONAL_ONE, "TEXT", default_parameters={"LANGUAGE": "en"}
            ),
        ),
        record_factory=Meeting,
    )
    meeting = Meeting(start=datetime.datetime(2024, 1, 1, 9), summary="a")
    assert encode(meeting, schema).properties[1] == ParsedProperty(
        name="SUMMARY",
        value="a",
        params=[ParsedPropertyParameter(name="LANGUAGE", values=["en"])],
    )

    component = parse_component(
        "BEGIN:VEVENT\r\nDTSTART:20240101T090000\r\nSUMMARY;LANGUAGE=de:a\r\nEND:VEVENT\r\n"
    )
    assert encode(decode(component, schema), schema) == component

    component = parse_component(
        "BEGIN:VEVENT\r\nDTSTART:20240101T090000\r\nSUMMARY:a\r\nEND:VEVENT\r\n"
    )
    assert encode(decode(component, schema), schema) == component


@dataclass
class Reminder:
    action: str
    extras: OverflowBag = field(default_factory=OverflowBag)


@dataclass
class Task:
    uid: str
    reminders: list[Reminder] = field(default_factory=list)
    data: Optional[Any] = None
    extras: OverflowBag = field(default_factory=OverflowBag)


REMINDER_SCHEMA = Schema(
    component_name="VALARM",
    bindings=(FieldBinding("ACTION", Cardinality.REQUIRED_ONE, "TEXT"),),
    record_factory=Reminder,
)
TASK_SCHEMA = Schema(
    component_name="VTODO",
    bindings=(
        FieldBinding("UID", Cardinality.REQUIRED_ONE, "TEXT"),
        FieldBinding(
            "VALARM",
            Cardinality.ZERO_OR_MORE,
            field_name="reminders",
            schema=REMINDER_SCHEMA,
        ),
        FieldBinding(
            "X-DATA", Cardinality.OPTIONAL_ONE, "TEXT", field_name="data", allow_unknown=True
        ),
    ),
    record_factory=Task,
)


def test_child_components() -> None:
    """Test binding child components with their own schema."""
    content = "\r\n".join(
        [
            "BEGIN:VTODO",
            "UID:1",
            "BEGIN:X-OTHER",
            "END:X-OTHER",
            "BEGIN:VALARM",
            "ACTION:AUDIO",
            "X-SOUND:bell",
            "END:VALARM",
            "BEGIN:VALARM",
            "ACTION:DISPLAY",
            "END:VALARM",
            "END:VTODO",
            "",
        ]
    )
    component = parse_component(content)
    task = decode(component, TASK_SCHEMA)
    assert [reminder.action for reminder in task.reminders] == ["AUDIO", "DISPLAY"]
    assert task.reminders[0].extras.properties[0].value.name == "X-SOUND"
    assert task.extras.components[0].position == 0
    assert encode(task, TASK_SCHEMA).ics() == content


def test_child_component_missing_property() -> None:
    """Test errors in a child component are raised for the child."""
    component = parse_component(
        "BEGIN:VTODO\r\nUID:1\r\nBEGIN:VALARM\r\nEND:VALARM\r\nEND:VTODO\r\n"
    )
    with pytest.raises(MissingRequiredProperty) as exc_info:
        decode(component, TASK_SCHEMA)
    assert exc_info.value.component_name == "VALARM"
    assert exc_info.value.lineno == 3


def test_unknown_value_type() -> None:
    """Test a value of an unregistered type is kept as text."""
    component = parse_component(
        "BEGIN:VTODO\r\nUID:1\r\nX-DATA;VALUE=X-BLOB;X-P=a:opaque;data\r\nEND:VTODO\r\n"
    )
    task = decode(component, TASK_SCHEMA)
    assert task.data == UnknownValue(value_type="X-BLOB", value="opaque;data")
    assert encode(task, TASK_SCHEMA) == component

    task = Task(uid="2", data=UnknownValue(value_type="x-other", value="raw"))
    assert encode(task, TASK_SCHEMA).properties[1].ics() == "X-DATA;VALUE=X-OTHER:raw"


def test_unknown_value_not_allowed() -> None:
    """Test an unknown value on a binding that does not allow one."""
    meeting = Meeting(
        start=datetime.datetime(2024, 1, 1), summary=UnknownValue("X-BLOB", "raw")  # type: ignore[arg-type]
    )
    with pytest.raises(UnencodableValue):
        encode(meeting, MEETING_SCHEMA)


def test_decode_property() -> None:
    """Test decoding a single property without a schema."""
    assert decode_property(ParsedProperty.from_ics("SUMMARY:a\\, b")) == "a, b"
    assert decode_property(
        ParsedProperty.from_ics("DUE;VALUE=DATE:20070501"), "DATE-TIME"
    ) == datetime.date(2007, 5, 1)
    assert decode_property(ParsedProperty.from_ics("X-A;VALUE=X-B:raw")) == UnknownValue(
        "X-B", "raw"
    )


def test_encode_property() -> None:
    """Test encoding a single value without a schema."""
    assert encode_property("DUE", datetime.date(2007, 5, 1), "DATE-TIME") == ParsedProperty(
        name="DUE",
        value="20070501",
        params=[ParsedPropertyParameter(name="VALUE", values=["DATE"])],
    )
    assert encode_property("summary", "a, b").ics() == "SUMMARY:a\\, b"
    assert encode_property("X-A", UnknownValue("X-B", "raw")).ics() == "X-A;VALUE=X-B:raw"


def test_overflow_bag_equality() -> None:
    """Test diagnostics and empty parameter entries don't affect equality."""
    prop = OverflowItem(0, ParsedProperty(name="X-A", value="1"))
    assert OverflowBag() == OverflowBag(
        parameters={("SUMMARY", 0): []}, diagnostics=[Diagnostic("skipped", lineno=2)]
    )
    assert OverflowBag([prop]) != OverflowBag()
    assert OverflowBag(
        parameters={("SUMMARY", 0): [ParsedPropertyParameter(name="LANGUAGE", values=["en"])]}
    ) != OverflowBag()
    assert not OverflowBag()
    assert OverflowBag([prop])


def _schema(*bindings: FieldBinding) -> Schema[Any]:
    return Schema(component_name="VEVENT", bindings=bindings, record_factory=dict)


@pytest.mark.parametrize(
    "bindings",
    [
        (
            FieldBinding("SUMMARY", value_type="TEXT"),
            FieldBinding("summary", value_type="TEXT", field_name="title"),
        ),
        (
            FieldBinding("SUMMARY", value_type="TEXT"),
            FieldBinding("DESCRIPTION", value_type="TEXT", field_name="summary"),
        ),
        (FieldBinding("SUMMARY", value_type="TEXT", field_name="extras"),),
        (FieldBinding("SUMMARY"),),
        (FieldBinding("SUMMARY", value_type="X-FOO"),),
        (FieldBinding("SUMMARY", value_type="TEXT", allowed_types=("URI",)),),
        (FieldBinding("BAD NAME", value_type="TEXT"),),
        (
            FieldBinding(
                "DTSTART",
                value_type="DATE-TIME",
                allowed_types=("DATE-TIME", "DATE"),
                default_parameters={"TZID": "Europe/Berlin"},
            ),
        ),
        (FieldBinding("DTSTART", value_type="DATE", default_parameters={"VALUE": "DATE"}),),
        (FieldBinding("SUMMARY", value_type="TEXT", default_parameters={"LANGUAGE": []}),),
        (FieldBinding("VALARM", value_type="TEXT", schema=REMINDER_SCHEMA),),
        (FieldBinding("X-ALARM", schema=REMINDER_SCHEMA),),
    ],
)
def test_invalid_schema(bindings: tuple[FieldBinding, ...]) -> None:
    """Test schemas that could never produce valid output are rejected."""
    with pytest.raises(SchemaDefinitionError):
        _schema(*bindings)


def test_invalid_component_name() -> None:
    """Test a schema for a component name that can't be written."""
    with pytest.raises(SchemaDefinitionError):
        Schema(component_name="V EVENT", bindings=(), record_factory=dict)


def test_binding_defaults() -> None:
    """Test names are normalized when a binding is created."""
    binding = FieldBinding("last-modified", value_type="date-time")
    assert binding.property_name == "LAST-MODIFIED"
    assert binding.field_name == "last_modified"
    assert binding.allowed_types == ("DATE-TIME",)
    assert binding.cardinality is Cardinality.OPTIONAL_ONE
    assert not binding.is_component
