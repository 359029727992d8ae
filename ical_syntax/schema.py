"""Library for binding typed records to components.

A `Schema` is a table describing how the properties and child components of
one kind of component map onto the fields of an application record. The
table is checked once, when it is constructed, so that a combination of
bindings that could never produce valid output (e.g. a TZID default
parameter on a DATE only property) is rejected before any data is seen.

```python
import datetime
from dataclasses import dataclass, field

from ical_syntax.schema import Cardinality, FieldBinding, OverflowBag, Schema, decode

@dataclass
class Meeting:
    start: datetime.datetime
    summary: str | None = None
    extras: OverflowBag = field(default_factory=OverflowBag)

MEETING = Schema(
    component_name="VEVENT",
    bindings=(
        FieldBinding("DTSTART", Cardinality.REQUIRED_ONE, "DATE-TIME", field_name="start"),
        FieldBinding("SUMMARY", Cardinality.OPTIONAL_ONE, "TEXT"),
    ),
    record_factory=Meeting,
)
```

Decoding never drops data: properties and components the schema does not
bind, and parameters the binder does not interpret, are kept in the
`OverflowBag` of the record and written back on encode at their original
position.
"""

from __future__ import annotations

import copy
import enum
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Generic, Optional, TypeVar, Union

from ical_syntax.compat.strictness import is_strict
from ical_syntax.exceptions import (
    ComponentMismatch,
    DuplicateProperty,
    MissingRequiredProperty,
    SchemaDefinitionError,
    UnencodableValue,
    UnsupportedParameter,
    ValueDecodeError,
)
from ical_syntax.parsing.component import ParsedComponent
from ical_syntax.parsing.const import ATTR_VALUE
from ical_syntax.parsing.property import (
    ParsedProperty,
    ParsedPropertyParameter,
    is_valid_name,
)
from ical_syntax.types import DATA_TYPE, Registry, UnknownValue

__all__ = [
    "Cardinality",
    "Diagnostic",
    "FieldBinding",
    "OverflowBag",
    "OverflowItem",
    "Schema",
    "decode",
    "decode_property",
    "encode",
    "encode_property",
]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
ITEM = TypeVar("ITEM", ParsedProperty, ParsedComponent)


class Cardinality(str, enum.Enum):
    """How many times a property or child component may appear."""

    REQUIRED_ONE = "required-one"
    OPTIONAL_ONE = "optional-one"
    ZERO_OR_MORE = "zero-or-more"

    @property
    def single(self) -> bool:
        """Return True if the binding holds at most one value."""
        return self is not Cardinality.ZERO_OR_MORE


@dataclass(frozen=True)
class FieldBinding:
    """Binds a property, or a child component, to a field of a record."""

    property_name: str
    """Name of the property, or of the child component for nested bindings."""

    cardinality: Cardinality = Cardinality.OPTIONAL_ONE

    value_type: Optional[str] = None
    """The default value type, used when a property has no VALUE parameter."""

    field_name: Optional[str] = None
    """Record field, defaults to the lower case property name with '-' as '_'."""

    allowed_types: tuple[str, ...] = ()
    """Value types a VALUE parameter may select, defaults to the value type."""

    default_parameters: Union[
        Mapping[str, Sequence[str]], tuple[tuple[str, tuple[str, ...]], ...]
    ] = ()
    """Parameters written on encode when the record has none of its own."""

    delimited: bool = False
    """A single property holds a COMMA-separated list of values."""

    allow_unknown: bool = False
    """Values with an unregistered VALUE type are kept as an UnknownValue."""

    schema: Optional[Schema[Any]] = None
    """Schema of the child component for a nested binding."""

    def __post_init__(self) -> None:
        """Normalize names so that lookups are case-insensitive."""
        object.__setattr__(self, "property_name", self.property_name.upper())
        object.__setattr__(self, "cardinality", Cardinality(self.cardinality))
        if self.field_name is None:
            object.__setattr__(
                self, "field_name", self.property_name.lower().replace("-", "_")
            )
        if self.value_type is not None:
            object.__setattr__(self, "value_type", self.value_type.upper())
        allowed = tuple(name.upper() for name in self.allowed_types)
        if not allowed and self.value_type is not None:
            allowed = (self.value_type,)
        object.__setattr__(self, "allowed_types", allowed)
        items = (
            self.default_parameters.items()
            if isinstance(self.default_parameters, Mapping)
            else self.default_parameters
        )
        object.__setattr__(
            self,
            "default_parameters",
            tuple(
                (name.upper(), (values,) if isinstance(values, str) else tuple(values))
                for name, values in items
            ),
        )

    @property
    def is_component(self) -> bool:
        """Return True if the binding is for child components."""
        return self.schema is not None

    def default_params(self) -> list[ParsedPropertyParameter]:
        """Return the default parameters as new parameter objects."""
        return [
            ParsedPropertyParameter(name=name, values=list(values))
            for name, values in self.default_parameters  # type: ignore[misc]
        ]


@dataclass(frozen=True)
class Schema(Generic[T]):
    """Describes how one kind of component maps onto a record type.

    The record factory is called with the decoded values as keyword
    arguments named after each binding field, plus the `OverflowBag` under
    the extras field name.
    """

    component_name: str
    bindings: tuple[FieldBinding, ...]
    record_factory: Callable[..., T]
    registry: Registry = DATA_TYPE
    extras_field: str = "extras"

    def __post_init__(self) -> None:
        """Validate the bindings against the registry."""
        object.__setattr__(self, "component_name", self.component_name.upper())
        object.__setattr__(self, "bindings", tuple(self.bindings))
        if not is_valid_name(self.component_name):
            raise SchemaDefinitionError(
                f"Invalid component name '{self.component_name}'"
            )
        property_names: set[str] = set()
        component_names: set[str] = set()
        field_names: set[str] = set()
        for binding in self.bindings:
            names = component_names if binding.is_component else property_names
            if binding.property_name in names:
                raise SchemaDefinitionError(
                    f"{self.component_name} binds {binding.property_name} more than once"
                )
            names.add(binding.property_name)
            if binding.field_name in field_names or binding.field_name == self.extras_field:
                raise SchemaDefinitionError(
                    f"{self.component_name} binds field '{binding.field_name}' more than once"
                )
            field_names.add(binding.field_name)  # type: ignore[arg-type]
            if binding.is_component:
                self._check_component_binding(binding)
            else:
                self._check_property_binding(binding)
        _LOGGER.debug(
            "Created schema for %s with %d bindings",
            self.component_name,
            len(self.bindings),
        )

    def _error(self, binding: FieldBinding, message: str) -> SchemaDefinitionError:
        return SchemaDefinitionError(
            f"{self.component_name} binding {binding.property_name}: {message}"
        )

    def _check_component_binding(self, binding: FieldBinding) -> None:
        assert binding.schema is not None
        if binding.value_type is not None or binding.allowed_types:
            raise self._error(binding, "a component binding can't have a value type")
        if binding.default_parameters or binding.delimited or binding.allow_unknown:
            raise self._error(binding, "a component binding only takes a schema")
        if binding.schema.component_name != binding.property_name:
            raise self._error(
                binding,
                f"schema is for {binding.schema.component_name}",
            )

    def _check_property_binding(self, binding: FieldBinding) -> None:
        if not is_valid_name(binding.property_name):
            raise self._error(binding, "invalid property name")
        if binding.value_type is None:
            raise self._error(binding, "a property binding requires a value type")
        if binding.value_type not in binding.allowed_types:
            raise self._error(
                binding,
                f"default value type {binding.value_type} is not one of {binding.allowed_types}",
            )
        for value_type in binding.allowed_types:
            if value_type not in self.registry:
                raise self._error(binding, f"value type {value_type} is not registered")
        for name, values in binding.default_parameters:  # type: ignore[misc]
            if name == ATTR_VALUE:
                raise self._error(
                    binding, f"{ATTR_VALUE} is derived from the value, not a default"
                )
            if not is_valid_name(name) or not values:
                raise self._error(binding, f"invalid default parameter '{name}'")
            for value_type in binding.allowed_types:
                if name in self.registry.forbidden_params(value_type):
                    raise self._error(
                        binding,
                        f"default parameter {name} is not allowed on {value_type} values",
                    )

    def property_binding(self, name: str) -> FieldBinding | None:
        """Return the binding for a property name."""
        name = name.upper()
        return next(
            (
                binding
                for binding in self.bindings
                if not binding.is_component and binding.property_name == name
            ),
            None,
        )

    def component_binding(self, name: str) -> FieldBinding | None:
        """Return the binding for a child component name."""
        name = name.upper()
        return next(
            (
                binding
                for binding in self.bindings
                if binding.is_component and binding.property_name == name
            ),
            None,
        )


@dataclass
class OverflowItem(Generic[ITEM]):
    """A property or component not bound by a schema, with its position."""

    position: int
    """Index among the properties, or child components, of the parsed component."""

    value: ITEM


@dataclass
class Diagnostic:
    """A problem that was tolerated while decoding leniently."""

    message: str
    lineno: Optional[int] = None
    property_name: Optional[str] = None


def _significant(
    parameters: Mapping[tuple[str, int], list[ParsedPropertyParameter]],
) -> dict[tuple[str, int], list[ParsedPropertyParameter]]:
    """Drop entries that only record that a property had no parameters."""
    return {key: params for key, params in parameters.items() if params}


class OverflowBag:
    """Everything found in a component that did not bind to a record field."""

    def __init__(
        self,
        properties: Iterable[OverflowItem[ParsedProperty]] = (),
        components: Iterable[OverflowItem[ParsedComponent]] = (),
        parameters: Mapping[tuple[str, int], list[ParsedPropertyParameter]] | None = None,
        diagnostics: Iterable[Diagnostic] = (),
        names: Mapping[tuple[str, int], str] | None = None,
        original_name: str | None = None,
    ) -> None:
        """Initialize OverflowBag."""
        self.properties: list[OverflowItem[ParsedProperty]] = list(properties)
        self.components: list[OverflowItem[ParsedComponent]] = list(components)
        self.parameters: dict[tuple[str, int], list[ParsedPropertyParameter]] = dict(
            parameters or {}
        )
        """Parameters of bound properties keyed by property name and occurrence.

        An entry, even an empty one, means the property was decoded and its
        parameters are written back instead of the binding defaults.
        """
        self.diagnostics: list[Diagnostic] = list(diagnostics)
        self.names: dict[tuple[str, int], str] = dict(names or {})
        """Spelling of bound property names as found in the input, for preserve_case."""
        self.original_name = original_name
        """Spelling of the component name as found in the input."""

    def __bool__(self) -> bool:
        return bool(
            self.properties or self.components or self.parameters or self.diagnostics
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OverflowBag):
            return NotImplemented
        return (
            self.properties == other.properties
            and self.components == other.components
            and _significant(self.parameters) == _significant(other.parameters)
        )

    def __repr__(self) -> str:
        return (
            f"OverflowBag(properties={self.properties!r}, "
            f"components={self.components!r}, parameters={self.parameters!r})"
        )

    def __deepcopy__(self, memo: dict[int, Any]) -> OverflowBag:
        return OverflowBag(
            copy.deepcopy(self.properties, memo),
            copy.deepcopy(self.components, memo),
            copy.deepcopy(self.parameters, memo),
            copy.deepcopy(self.diagnostics, memo),
            dict(self.names),
            self.original_name,
        )


def decode_property(
    prop: ParsedProperty,
    default_type: str = "TEXT",
    registry: Registry = DATA_TYPE,
) -> Any:
    """Decode a single property outside of any schema.

    A VALUE parameter naming a type that is not registered produces an
    `UnknownValue` holding the raw text.
    """
    value_type = registry.value_type_of(prop, default_type)
    if value_type not in registry:
        return UnknownValue(value_type=value_type, value=prop.value)
    return registry.decode(prop, value_type)


def encode_property(
    name: str,
    value: Any,
    default_type: str = "TEXT",
    registry: Registry = DATA_TYPE,
) -> ParsedProperty:
    """Encode a single value as a property outside of any schema."""
    binding = FieldBinding(
        name,
        value_type=default_type,
        allowed_types=tuple(registry.names()),
        allow_unknown=True,
    )
    return _encode_property(value, binding, registry, None)


def _check_params(
    prop: ParsedProperty, value_type: str, registry: Registry, component_name: str
) -> None:
    forbidden = registry.forbidden_params(value_type)
    for param in prop.params or ():
        if param.name in forbidden:
            raise UnsupportedParameter(
                f"Parameter {param.name} is not allowed on a {value_type} value",
                component_name=component_name,
                property_name=prop.name,
                lineno=prop.lineno,
            )


def _decode_value(
    prop: ParsedProperty, binding: FieldBinding, registry: Registry, component_name: str
) -> Any:
    assert binding.value_type is not None
    value_type = registry.value_type_of(prop, binding.value_type)
    if value_type not in registry and binding.allow_unknown:
        _LOGGER.debug("Keeping %s with value type %s as text", prop.name, value_type)
        return UnknownValue(value_type=value_type, value=prop.value)
    if value_type not in binding.allowed_types:
        raise ValueDecodeError(
            f"Value type {value_type} is not allowed, expected one of {list(binding.allowed_types)}",
            lineno=prop.lineno,
            property_name=prop.name,
            value_type=value_type,
        )
    _check_params(prop, value_type, registry, component_name)
    if binding.delimited:
        return [
            registry.decode(replace(prop, value=text), value_type)
            for text in registry.split(value_type, prop.value)
        ]
    return registry.decode(prop, value_type)


def _preserved_params(
    prop: ParsedProperty, binding: FieldBinding, registry: Registry
) -> list[ParsedPropertyParameter]:
    value_type = prop.get_parameter_value(ATTR_VALUE) or binding.value_type or ""
    consumed = registry.consumed_params(value_type)
    return [
        copy.deepcopy(param)
        for param in prop.params or ()
        if param.name != ATTR_VALUE and param.name not in consumed
    ]


def _duplicate(
    component_name: str, binding: FieldBinding, lineno: int | None = None
) -> DuplicateProperty:
    return DuplicateProperty(
        f"{component_name} may have only one {binding.property_name}",
        component_name=component_name,
        property_name=binding.property_name,
        lineno=lineno,
    )


def _collect(
    values: list[Any],
    items: list[tuple[int, Any]],
    binding: FieldBinding,
    component: ParsedComponent,
    fields: dict[str, Any],
) -> None:
    """Check the cardinality of the decoded values and store them in the fields."""
    if binding.cardinality is Cardinality.REQUIRED_ONE and not values:
        raise MissingRequiredProperty(
            f"{component.name} requires {binding.property_name}",
            component_name=component.name,
            property_name=binding.property_name,
            lineno=component.lineno,
        )
    if binding.cardinality.single and len(values) > 1:
        raise _duplicate(component.name, binding, items[1][1].lineno)
    if not values:
        return
    assert binding.field_name is not None
    fields[binding.field_name] = values[0] if binding.cardinality.single else values


def decode(
    component: ParsedComponent,
    schema: Schema[T],
    *,
    strict: bool | None = None,
) -> T:
    """Decode a component into a record using the schema.

    Strict decoding raises on the first property whose value can't be
    decoded. Lenient decoding moves such properties to the overflow bag
    with a diagnostic instead. Cardinality is checked in both modes.
    """
    strict = is_strict(strict)
    if component.name.upper() != schema.component_name:
        raise ComponentMismatch(
            f"Expected component {schema.component_name}, got {component.name}",
            component_name=component.name,
            lineno=component.lineno,
        )
    registry = schema.registry
    bag = OverflowBag(original_name=component.original_name)
    bag.diagnostics.extend(
        Diagnostic(message=line.message, lineno=line.lineno)
        for line in component.invalid_lines
    )
    fields: dict[str, Any] = {}

    bound_properties: dict[str, list[tuple[int, ParsedProperty]]] = {}
    for index, prop in enumerate(component.properties):
        if schema.property_binding(prop.name) is None:
            _LOGGER.debug("Keeping unbound property %s of %s", prop.name, component.name)
            bag.properties.append(OverflowItem(index, copy.deepcopy(prop)))
            continue
        bound_properties.setdefault(prop.name.upper(), []).append((index, prop))

    bound_components: dict[str, list[tuple[int, ParsedComponent]]] = {}
    for index, child in enumerate(component.components):
        if schema.component_binding(child.name) is None:
            _LOGGER.debug("Keeping unbound component %s of %s", child.name, component.name)
            bag.components.append(OverflowItem(index, copy.deepcopy(child)))
            continue
        bound_components.setdefault(child.name.upper(), []).append((index, child))

    for binding in schema.bindings:
        if binding.is_component:
            assert binding.schema is not None
            children = bound_components.get(binding.property_name, [])
            values = [decode(child, binding.schema, strict=strict) for _, child in children]
            _collect(values, children, binding, component, fields)
            continue

        props = bound_properties.get(binding.property_name, [])
        if strict and binding.cardinality.single and len(props) > 1:
            raise _duplicate(component.name, binding, props[1][1].lineno)
        values = []
        for index, prop in props:
            try:
                value = _decode_value(prop, binding, registry, schema.component_name)
            except (ValueDecodeError, UnsupportedParameter) as err:
                if strict:
                    raise
                _LOGGER.warning("Keeping undecodable property %s as text: %s", prop.name, err)
                bag.properties.append(OverflowItem(index, copy.deepcopy(prop)))
                bag.diagnostics.append(
                    Diagnostic(message=str(err), lineno=prop.lineno, property_name=prop.name)
                )
                continue
            key = (binding.property_name, len(values))
            bag.parameters[key] = _preserved_params(prop, binding, registry)
            if prop.original_name:
                bag.names[key] = prop.original_name
            values.append(value)
        _collect(values, props, binding, component, fields)

    bag.properties.sort(key=lambda item: item.position)
    fields[schema.extras_field] = bag
    return schema.record_factory(**fields)


def _as_values(record: Any, binding: FieldBinding, component_name: str) -> list[Any]:
    value = getattr(record, binding.field_name, None)  # type: ignore[arg-type]
    if binding.cardinality.single and not binding.delimited and isinstance(value, (list, tuple)):
        if len(value) > 1:
            raise _duplicate(component_name, binding)
        values = list(value)
    elif binding.cardinality.single:
        values = [] if value is None or (binding.delimited and not value) else [value]
    elif value is None:
        values = []
    elif isinstance(value, (list, tuple)):
        values = list(value)
    else:
        raise UnencodableValue(
            f"{component_name} field '{binding.field_name}' must be a list, got {type(value).__name__}"
        )
    if binding.cardinality is Cardinality.REQUIRED_ONE and not values:
        raise MissingRequiredProperty(
            f"{component_name} requires {binding.property_name}",
            component_name=component_name,
            property_name=binding.property_name,
        )
    return values


def _resolve(
    value: Any, binding: FieldBinding, registry: Registry
) -> tuple[str, str, list[ParsedPropertyParameter]]:
    """Return the value type, text and codec parameters for a value."""
    if isinstance(value, UnknownValue):
        if not binding.allow_unknown:
            raise UnencodableValue(
                f"Property {binding.property_name} does not accept value type {value.value_type}"
            )
        return value.value_type.upper(), value.value, []
    if (value_type := registry.resolve(value, binding.allowed_types)) is None:
        raise UnencodableValue(
            f"Property {binding.property_name} can't encode {type(value).__name__} "
            f"as one of {list(binding.allowed_types)}"
        )
    try:
        text, params = registry.encode(value, value_type)
    except ValueError as err:
        raise UnencodableValue(
            f"Property {binding.property_name} value can't be encoded: {err}"
        ) from err
    return value_type, text, params


def _encode_property(
    value: Any,
    binding: FieldBinding,
    registry: Registry,
    preserved: list[ParsedPropertyParameter] | None,
) -> ParsedProperty:
    if binding.delimited:
        encoded = [_resolve(item, binding, registry) for item in value]
        if len({value_type for value_type, _, _ in encoded}) > 1:
            raise UnencodableValue(
                f"Property {binding.property_name} list mixes value types"
            )
        value_type, _, codec_params = encoded[0]
        if any(params != codec_params for _, _, params in encoded):
            raise UnencodableValue(
                f"Property {binding.property_name} list mixes parameters, e.g. TZID"
            )
        text = ",".join(text for _, text, _ in encoded)
    else:
        value_type, text, codec_params = _resolve(value, binding, registry)

    params: list[ParsedPropertyParameter] = []
    if value_type != binding.value_type:
        params.append(ParsedPropertyParameter(name=ATTR_VALUE, values=[value_type]))
    params.extend(codec_params)
    codec_names = {param.name for param in codec_params}
    extra = copy.deepcopy(preserved) if preserved is not None else binding.default_params()
    params.extend(param for param in extra if param.name not in codec_names)
    forbidden = registry.forbidden_params(value_type)
    for param in params:
        if param.name in forbidden:
            raise UnsupportedParameter(
                f"Parameter {param.name} is not allowed on a {value_type} value",
                property_name=binding.property_name,
            )
    _LOGGER.debug("Encoded %s as value type %s", binding.property_name, value_type)
    return ParsedProperty(
        name=binding.property_name, value=text, params=params or None
    )


def _merge(bound: list[ITEM], overflow: list[OverflowItem[ITEM]]) -> list[ITEM]:
    """Insert overflow items back at their original positions."""
    result = list(bound)
    for item in sorted(overflow, key=lambda item: item.position):
        result.insert(min(item.position, len(result)), copy.deepcopy(item.value))
    return result


def encode(record: Any, schema: Schema[Any]) -> ParsedComponent:
    """Encode a record into a component using the schema."""
    registry = schema.registry
    bag = getattr(record, schema.extras_field, None)
    if not isinstance(bag, OverflowBag):
        bag = OverflowBag()
    properties: list[ParsedProperty] = []
    components: list[ParsedComponent] = []
    for binding in schema.bindings:
        values = _as_values(record, binding, schema.component_name)
        if binding.is_component:
            assert binding.schema is not None
            components.extend(encode(value, binding.schema) for value in values)
            continue
        for occurrence, value in enumerate(values):
            if binding.delimited and not value:
                continue
            key = (binding.property_name, occurrence)
            prop = _encode_property(value, binding, registry, bag.parameters.get(key))
            prop.original_name = bag.names.get(key)
            properties.append(prop)
    return ParsedComponent(
        name=schema.component_name,
        properties=_merge(properties, bag.properties),
        components=_merge(components, bag.components),
        original_name=bag.original_name,
    )
