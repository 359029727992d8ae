"""Tests for parsing content into a tree of components."""

import textwrap

import pytest

from ical_syntax.compat import enable_lenient_parsing
from ical_syntax.exceptions import (
    CalendarSyntaxError,
    InvalidNesting,
    InvalidParameterSyntax,
    InvalidPropertyName,
    UnbalancedComponent,
)
from ical_syntax.parsing.component import (
    InvalidLine,
    ParsedComponent,
    encode_content,
    iter_content,
    parse_component,
    parse_content,
)
from ical_syntax.parsing.nesting import RFC5545_NESTING_RULES, NestingRules
from ical_syntax.parsing.property import ParsedProperty


def ics(text: str) -> str:
    """Return indented test content with CRLF line endings."""
    return textwrap.dedent(text).lstrip("\n").replace("\n", "\r\n")


CALENDAR = ics(
    """
    BEGIN:VCALENDAR
    PRODID:-//example//EN
    VERSION:2.0
    BEGIN:VEVENT
    DTSTART:20240101T090000Z
    SUMMARY:Meeting
    BEGIN:VALARM
    ACTION:DISPLAY
    TRIGGER:-PT15M
    END:VALARM
    END:VEVENT
    BEGIN:VTODO
    SUMMARY:Chore
    END:VTODO
    END:VCALENDAR
    """
)


def test_parse_tree() -> None:
    """Test components are nested by their BEGIN and END markers."""
    (calendar,) = parse_content(CALENDAR)
    assert calendar.name == "VCALENDAR"
    assert calendar.lineno == 1
    assert [prop.name for prop in calendar.properties] == ["PRODID", "VERSION"]
    assert [child.name for child in calendar.components] == ["VEVENT", "VTODO"]
    event = calendar.components[0]
    assert event.lineno == 4
    assert event.get_property("summary") == ParsedProperty(
        name="SUMMARY", value="Meeting"
    )
    assert event.get_property("DESCRIPTION") is None
    (alarm,) = event.get_components("valarm")
    assert alarm.get_properties("TRIGGER")[0].value == "-PT15M"
    assert alarm.get_properties("TRIGGER")[0].lineno == 9


def test_round_trip() -> None:
    """Test the tree is written back as the same content."""
    assert encode_content(parse_content(CALENDAR)) == CALENDAR


def test_component_name_case() -> None:
    """Test component names are case-insensitive."""
    (component,) = parse_content("begin:vevent\r\nSUMMARY:a\r\nEnd:VEvent\r\n")
    assert component.name == "VEVENT"
    assert component.original_name == "vevent"


def test_multiple_top_level() -> None:
    """Test content with more than one top level component."""
    components = parse_content(
        "BEGIN:VCALENDAR\r\nEND:VCALENDAR\r\nBEGIN:VCALENDAR\r\nEND:VCALENDAR\r\n"
    )
    assert len(components) == 2
    with pytest.raises(CalendarSyntaxError, match="more than one"):
        parse_component(
            "BEGIN:VCALENDAR\r\nEND:VCALENDAR\r\nBEGIN:VCALENDAR\r\nEND:VCALENDAR\r\n"
        )


def test_parse_component_empty() -> None:
    """Test content without any component."""
    with pytest.raises(CalendarSyntaxError, match="no component"):
        parse_component("\r\n")


def test_blank_lines_and_bom() -> None:
    """Test a byte order mark and blank lines are ignored."""
    component = parse_component("\ufeffBEGIN:VEVENT\r\n\r\nSUMMARY:a\r\nEND:VEVENT\r\n\r\n")
    assert component == ParsedComponent(
        name="VEVENT", properties=[ParsedProperty(name="SUMMARY", value="a")]
    )


def test_iter_content_is_lazy() -> None:
    """Test components are produced as soon as they are complete."""
    components = iter_content("BEGIN:A\r\nEND:A\r\nBEGIN:B\r\n")
    assert next(components).name == "A"
    with pytest.raises(UnbalancedComponent, match="expected END:B"):
        next(components)


@pytest.mark.parametrize(
    ("content", "match", "lineno"),
    [
        ("END:VEVENT\r\n", "without matching BEGIN", 1),
        ("BEGIN:VEVENT\r\nEND:VTODO\r\n", "expected END:VEVENT", 2),
        ("BEGIN:VCALENDAR\r\nBEGIN:VEVENT\r\nEND:VCALENDAR\r\n", "expected END:VEVENT", 3),
        ("BEGIN:VEVENT\r\nSUMMARY:a\r\n", "end of content", 1),
        ("SUMMARY:a\r\n", "outside of any component", 1),
    ],
)
def test_unbalanced(content: str, match: str, lineno: int) -> None:
    """Test BEGIN and END markers that do not match."""
    with pytest.raises(UnbalancedComponent, match=match) as exc_info:
        parse_content(content)
    assert exc_info.value.lineno == lineno


def test_unbalanced_is_not_lenient() -> None:
    """Test structural errors abort even when parsing leniently."""
    with pytest.raises(UnbalancedComponent):
        parse_content("BEGIN:VEVENT\r\nEND:VTODO\r\n", strict=False)


def test_marker_with_parameters() -> None:
    """Test BEGIN markers do not accept parameters."""
    with pytest.raises(CalendarSyntaxError, match="does not accept parameters"):
        parse_content("BEGIN;X=1:VEVENT\r\nEND:VEVENT\r\n")


def test_invalid_component_name() -> None:
    """Test a component name outside the name grammar."""
    with pytest.raises(InvalidPropertyName, match="Invalid component name"):
        parse_content("BEGIN:V EVENT\r\nEND:V EVENT\r\n")


def test_strict_rejects_malformed_line() -> None:
    """Test a malformed content line fails the parse by default."""
    with pytest.raises(InvalidParameterSyntax) as exc_info:
        parse_content("BEGIN:VEVENT\r\nSUMMARY;X:a\r\nEND:VEVENT\r\n")
    assert exc_info.value.lineno == 2


def test_lenient_skips_malformed_line(caplog: pytest.LogCaptureFixture) -> None:
    """Test a malformed content line is recorded and skipped when lenient."""
    content = "BEGIN:VEVENT\r\nSUMMARY;X:a\r\nDESCRIPTION:b\r\nEND:VEVENT\r\n"
    (component,) = parse_content(content, strict=False)
    assert component.properties == [ParsedProperty(name="DESCRIPTION", value="b")]
    assert len(component.invalid_lines) == 1
    invalid = component.invalid_lines[0]
    assert isinstance(invalid, InvalidLine)
    assert invalid.lineno == 2
    assert invalid.text == "SUMMARY;X:a"
    assert "Skipping malformed content line 2" in caplog.text

    with enable_lenient_parsing():
        assert parse_content(content) == [component]


def test_lenient_requires_component() -> None:
    """Test a malformed line outside of any component still fails."""
    with pytest.raises(InvalidParameterSyntax):
        parse_content("SUMMARY;X:a\r\n", strict=False)


def test_nesting_rules() -> None:
    """Test components placed under parents that can't contain them."""
    content = "BEGIN:VCALENDAR\r\nBEGIN:VALARM\r\nEND:VALARM\r\nEND:VCALENDAR\r\n"
    assert parse_content(content)
    with pytest.raises(InvalidNesting, match="VALARM is not allowed inside VCALENDAR") as exc_info:
        parse_content(content, nesting_rules=RFC5545_NESTING_RULES)
    assert exc_info.value.lineno == 2

    with pytest.raises(InvalidNesting, match="at the top level"):
        parse_content(
            "BEGIN:VEVENT\r\nEND:VEVENT\r\n", nesting_rules=RFC5545_NESTING_RULES
        )


def test_nesting_rules_allowed() -> None:
    """Test valid nesting and components without rules."""
    content = CALENDAR.replace(
        "END:VCALENDAR", "BEGIN:X-THING\r\nEND:X-THING\r\nEND:VCALENDAR"
    )
    (calendar,) = parse_content(content, nesting_rules=RFC5545_NESTING_RULES)
    assert [child.name for child in calendar.components] == [
        "VEVENT",
        "VTODO",
        "X-THING",
    ]


def test_custom_nesting_rules() -> None:
    """Test a custom table of nesting rules."""
    rules = NestingRules(allowed_parents={"X-CHILD": frozenset({"X-PARENT"})})
    rules.check("X-CHILD", "x-parent")
    rules.check("X-OTHER", None)
    with pytest.raises(InvalidNesting):
        rules.check("x-child", None)
