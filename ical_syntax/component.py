"""Library for binding rfc5545 components to pydantic models.

The data model returned by the contentlines parsing is a bag of ParsedProperty
objects that support all the flexibility of the rfc5545 grammar. However in the
common case the grammar has a lot more flexibility than is needed for handling
simple property types e.g. a single summary field that is specified only once.

This library helps reduce boilerplate for translating that complex structure
into the simpler pydantic data model. Each subclass of `ComponentModel` is
inspected once, when the class is created, and the field annotations are
turned into a `Schema`:

  - `list[...]` fields may appear any number of times.
  - `Optional[...]` fields, or fields with a default, may appear at most once.
  - Any other field is required to appear exactly once.
  - The python types of a field select the value types from the registry, and
    a field with a union of types accepts any of them through the VALUE
    parameter.
  - The property name is the field alias, or the field name in upper case
    with '_' written as '-'.
  - A field holding another `ComponentModel` binds child components.

`Annotated[..., Binding(...)]` overrides any of these choices for a field.
A model that can't be bound (e.g. a field type with no value type) raises
`SchemaDefinitionError` when the class is created, not when data is decoded.
"""

from __future__ import annotations

import logging
import types
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Self, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.fields import FieldInfo

from .exceptions import CalendarParseError, SchemaDefinitionError
from .parsing.component import Content, ParsedComponent
from .parsing.component import parse_component as parse
from .parsing.const import FOLD_LEN
from .parsing.nesting import NestingRules
from .schema import Cardinality, FieldBinding, OverflowBag, Schema, decode, encode
from .types import DATA_TYPE, Registry, UnknownValue

__all__ = [
    "Binding",
    "ComponentModel",
]

_LOGGER = logging.getLogger(__name__)

_EXTRAS = "extras"


@dataclass(frozen=True)
class Binding:
    """Field metadata that overrides how a model field is bound.

    ```python
    categories: Annotated[list[str], Binding(delimited=True)] = Field(default_factory=list)
    ```
    """

    property_name: Optional[str] = None
    value_type: Optional[str] = None
    default_parameters: Union[Mapping[str, Sequence[str]], tuple[()]] = ()
    delimited: bool = False


def _members(annotation: Any) -> tuple[list[Any], bool]:
    """Return the members of a union, and whether None was one of them."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        return [arg for arg in args if arg is not type(None)], type(None) in args
    return [annotation], False


def _unlist(members: list[Any]) -> tuple[list[Any], bool]:
    """Unwrap a list type, returning the members of the item type."""
    if len(members) == 1 and get_origin(members[0]) in (list, Sequence):
        args = get_args(members[0])
        return _members(args[0] if args else Any)[0], True
    return members, False


def _is_component(member: Any) -> bool:
    return isinstance(member, type) and issubclass(member, ComponentModel)


def _field_binding(
    model: type[ComponentModel], name: str, field: FieldInfo, registry: Registry
) -> FieldBinding:
    """Derive the binding for a single model field."""
    override = next(
        (item for item in field.metadata if isinstance(item, Binding)), Binding()
    )
    members, optional = _members(field.annotation)
    members, is_list = _unlist(members)
    cardinality = (
        Cardinality.OPTIONAL_ONE
        if optional or not field.is_required()
        else Cardinality.REQUIRED_ONE
    )
    if override.delimited:
        if not is_list:
            raise SchemaDefinitionError(
                f"{model.__name__}.{name} is delimited but is not a list"
            )
        members, is_nested_list = _unlist(members)
        if is_nested_list:
            cardinality = Cardinality.ZERO_OR_MORE
    elif is_list:
        cardinality = Cardinality.ZERO_OR_MORE

    if any(_is_component(member) for member in members):
        if len(members) != 1:
            raise SchemaDefinitionError(
                f"{model.__name__}.{name} mixes components with other types"
            )
        schema = members[0].component_schema()
        return FieldBinding(
            schema.component_name,
            cardinality,
            field_name=name,
            schema=schema,
        )

    allowed: list[str] = []
    for member in members:
        if member is UnknownValue:
            continue
        if not (names := registry.for_python_type(member)):
            raise SchemaDefinitionError(
                f"{model.__name__}.{name} has no value type for {member!r}"
            )
        allowed.extend(value_type for value_type in names if value_type not in allowed)
    if not allowed:
        raise SchemaDefinitionError(f"{model.__name__}.{name} has no value type")
    allowed.sort(key=registry.parse_order, reverse=True)
    value_type = (override.value_type or allowed[0]).upper()
    if value_type not in allowed:
        allowed.insert(0, value_type)
    property_name = (
        override.property_name or field.alias or name.upper().replace("_", "-")
    )
    return FieldBinding(
        property_name,
        cardinality,
        value_type,
        field_name=name,
        allowed_types=tuple(allowed),
        default_parameters=override.default_parameters,
        delimited=override.delimited,
        allow_unknown=UnknownValue in members,
    )


def _model_schema(model: type[ComponentModel]) -> Schema[Any]:
    """Build the schema for a model class from its field annotations."""
    registry = model.__registry__
    bindings = tuple(
        _field_binding(model, name, field, registry)
        for name, field in model.model_fields.items()
        if name != _EXTRAS
    )
    _LOGGER.debug(
        "Bound %s to %s: %s",
        model.__name__,
        model.component_name,
        [binding.property_name for binding in bindings],
    )
    return Schema(
        component_name=model.component_name or model.__name__.upper(),
        bindings=bindings,
        record_factory=model,
        registry=registry,
        extras_field=_EXTRAS,
    )


class ComponentModel(BaseModel):
    """Abstract class for rfc5545 component model."""

    component_name: ClassVar[Optional[str]] = None
    """Name of the component, the upper case class name when not set."""

    __registry__: ClassVar[Registry] = DATA_TYPE

    extras: OverflowBag = Field(default_factory=OverflowBag, exclude=True, repr=False)
    """Properties, components and parameters not bound to a field."""

    model_config = ConfigDict(
        validate_assignment=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as err:
            _LOGGER.debug("Failed to parse component %s", err)
            message = [
                f"Failed to parse calendar {self.__class__.__name__.upper()} component"
            ]
            for error in err.errors():
                if msg := error.get("msg"):
                    message.append(msg)
            error_str = ": ".join(message)
            raise CalendarParseError(error_str, detailed_error=str(err)) from err

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        """Bind the model as soon as the class is complete."""
        super().__pydantic_init_subclass__(**kwargs)
        if cls.__pydantic_complete__:
            cls.__component_schema__ = _model_schema(cls)

    @classmethod
    def component_schema(cls) -> Schema[Self]:
        """Return the schema derived from the model fields."""
        if (schema := cls.__dict__.get("__component_schema__")) is None:
            cls.model_rebuild()
            schema = _model_schema(cls)
            cls.__component_schema__ = schema
        return schema

    @classmethod
    def from_component(
        cls, component: ParsedComponent, *, strict: bool | None = None
    ) -> Self:
        """Decode the model from a parsed component."""
        return decode(component, cls.component_schema(), strict=strict)

    def to_component(self) -> ParsedComponent:
        """Encode the model as a component tree."""
        return encode(self, self.component_schema())

    @classmethod
    def from_ics(
        cls,
        content: Content,
        *,
        strict: bool | None = None,
        nesting_rules: NestingRules | None = None,
    ) -> Self:
        """Parse and decode the model from rfc5545 content."""
        component = parse(content, strict=strict, nesting_rules=nesting_rules)
        return cls.from_component(component, strict=strict)

    def ics(
        self, preserve_case: bool | None = None, fold_length: int = FOLD_LEN
    ) -> str:
        """Encode the model as rfc5545 text."""
        return self.to_component().ics(
            preserve_case=preserve_case, fold_length=fold_length
        )
