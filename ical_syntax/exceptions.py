"""Exceptions for the ical_syntax library.

Every error carries enough context to locate the problem: parse errors
carry the physical line number where the offending logical line started,
and errors about a property carry the property name.
"""

from __future__ import annotations


class CalendarError(Exception):
    """Base exception for all ical_syntax errors."""


class CalendarParseError(CalendarError):
    """Exception raised when parsing an ical string.

    The 'message' attribute contains a human-readable message about the
    error that occurred. The 'detailed_error' attribute can provide additional
    information about the error, such as the offending content line, useful
    for debugging purposes.
    """

    def __init__(
        self,
        message: str,
        *,
        detailed_error: str | None = None,
        lineno: int | None = None,
        property_name: str | None = None,
    ) -> None:
        """Initialize the CalendarParseError with a message."""
        super().__init__(_with_context(message, lineno, property_name))
        self.message = message
        self.detailed_error = detailed_error
        self.lineno = lineno
        self.property_name = property_name


def _with_context(message: str, lineno: int | None, property_name: str | None) -> str:
    context = []
    if lineno is not None:
        context.append(f"line {lineno}")
    if property_name:
        context.append(f"property {property_name}")
    if not context:
        return message
    return f"{message} ({', '.join(context)})"


class LexError(CalendarParseError):
    """Exception raised when physical lines can't be unfolded."""


class MalformedLine(LexError):
    """A continuation line with nothing to continue, or undecodable bytes."""


class CalendarSyntaxError(CalendarParseError):
    """A content line or the component structure violates the grammar."""


class EmptyPropertyName(CalendarSyntaxError):
    """A content line has no name before the parameters or value."""


class InvalidPropertyName(CalendarSyntaxError):
    """A property or component name contains characters outside the name grammar."""


class InvalidParameterSyntax(CalendarSyntaxError):
    """A property parameter is malformed."""


class UnterminatedQuote(InvalidParameterSyntax):
    """A quoted parameter value is missing its closing quote."""


class InvalidPropertyValue(CalendarSyntaxError):
    """A property value contains characters not allowed in a content line."""


class UnbalancedComponent(CalendarSyntaxError):
    """BEGIN and END markers do not match."""


class InvalidNesting(CalendarSyntaxError):
    """A component appears under a parent that is not allowed to contain it."""


class ValueDecodeError(CalendarParseError, ValueError):
    """A property value does not match the grammar of its value type."""

    def __init__(
        self,
        message: str,
        *,
        detailed_error: str | None = None,
        lineno: int | None = None,
        property_name: str | None = None,
        value_type: str | None = None,
    ) -> None:
        """Initialize ValueDecodeError."""
        super().__init__(
            message,
            detailed_error=detailed_error,
            lineno=lineno,
            property_name=property_name,
        )
        self.value_type = value_type


class SchemaViolation(CalendarError):
    """A component does not satisfy the schema it is decoded with.

    The same exception types are raised when encoding a record that would
    produce a component that does not satisfy its schema.
    """

    def __init__(
        self,
        message: str,
        *,
        component_name: str | None = None,
        property_name: str | None = None,
        lineno: int | None = None,
    ) -> None:
        """Initialize SchemaViolation."""
        super().__init__(_with_context(message, lineno, property_name))
        self.message = message
        self.component_name = component_name
        self.property_name = property_name
        self.lineno = lineno


class MissingRequiredProperty(SchemaViolation):
    """A property bound as required is not present."""


class DuplicateProperty(SchemaViolation):
    """A property bound as appearing at most once is repeated."""


class UnsupportedParameter(SchemaViolation):
    """A property parameter is not allowed on the value type of the property."""


class ComponentMismatch(SchemaViolation):
    """The component name does not match the component name of the schema."""


class SchemaDefinitionError(CalendarError):
    """A schema declares a combination of bindings that can never be valid."""


class RegistryFrozenError(CalendarError):
    """A value type was registered after the registry was first used."""


class GenerationError(CalendarError):
    """Exception raised when serializing a component tree."""


class UnencodableValue(GenerationError):
    """A value can't be represented in the iCalendar syntax."""


class UnfoldableToken(GenerationError):
    """A content line contains an indivisible unit longer than the line limit."""
