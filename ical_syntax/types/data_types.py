"""Library for parsing and encoding rfc5545 types.

The registry maps a Property Value Data Type name (e.g. "DATE-TIME") to a
codec class and the python type the codec produces. Codecs are registered
with a class decorator when their module is imported.

The registry is open: new value types may be registered, but only before the
registry is first used. The first lookup freezes the registry behind a lock,
after which it is read-only and may be shared freely between threads.
Registering a value type after that raises `RegistryFrozenError`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any, ClassVar, Protocol, TypeVar

from ical_syntax.exceptions import RegistryFrozenError, ValueDecodeError
from ical_syntax.parsing.const import ATTR_VALUE
from ical_syntax.parsing.property import ParsedProperty, ParsedPropertyParameter

_LOGGER = logging.getLogger(__name__)

T_TYPE = TypeVar("T_TYPE", bound=type)


class DataType(Protocol):
    """Defines the protocol implemented by data types in this library.

    The methods defined in this protocol are all optional except for parsing.
    """

    forbidden_params: ClassVar[frozenset[str]]
    """Property parameters that are not allowed with values of this type."""

    consumed_params: ClassVar[frozenset[str]]
    """Property parameters read by the codec and written back by it on encode."""

    @classmethod
    def __property_type__(cls) -> type:
        """Defines the python type to match, if different from the type itself."""

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> Any:
        """Parse the specified property value as a python type."""

    @classmethod
    def __encode_property_value__(cls, value: Any) -> str:
        """Encode the python value as the ics string value."""

    @classmethod
    def __encode_property_params__(cls, value: Any) -> list[ParsedPropertyParameter]:
        """Encode the property parameters required by the python value."""

    @classmethod
    def __split_property_value__(cls, value: str) -> list[str]:
        """Split a value holding a COMMA-separated list of values."""


class Registry:
    """Registry of data types."""

    def __init__(self) -> None:
        """Initialize Registry."""
        self._items: dict[str, type] = {}
        self._python_types: dict[str, type] = {}
        self._parse_order: dict[str, int] = {}
        self._lock = threading.Lock()
        self._frozen = False

    def register(
        self,
        name: str,
        parse_order: int | None = None,
    ) -> Callable[[T_TYPE], T_TYPE]:
        """Return decorator to register a type.

        The name is the Property Data Type value name.
        """

        def decorator(func: T_TYPE) -> T_TYPE:
            """Register decorated class."""
            if not hasattr(func, "__parse_property_value__"):
                raise TypeError(f"Value type {name} must define __parse_property_value__")
            data_type = func
            if data_type_func := getattr(func, "__property_type__", None):
                data_type = data_type_func()
            with self._lock:
                if self._frozen:
                    raise RegistryFrozenError(
                        f"Value type {name} registered after the registry was used"
                    )
                self._items[name.upper()] = func
                self._python_types[name.upper()] = data_type
                if parse_order:
                    self._parse_order[name.upper()] = parse_order
            return func

        return decorator

    def freeze(self) -> None:
        """Make the registry read-only."""
        if self._frozen:
            return
        with self._lock:
            if not self._frozen:
                _LOGGER.debug("Freezing value type registry with %s", list(self._items))
                self._frozen = True

    @property
    def frozen(self) -> bool:
        """Return True once the registry is read-only."""
        return self._frozen

    def copy(self) -> Registry:
        """Return a new unfrozen registry with the same value types."""
        registry = Registry()
        with self._lock:
            registry._items = dict(self._items)
            registry._python_types = dict(self._python_types)
            registry._parse_order = dict(self._parse_order)
        return registry

    def names(self) -> list[str]:
        """Return all registered value type names, highest parse order first."""
        self.freeze()
        return sorted(self._items, key=self.parse_order, reverse=True)

    def __contains__(self, name: object) -> bool:
        self.freeze()
        return isinstance(name, str) and name.upper() in self._items

    def get(self, name: str) -> type | None:
        """Return the codec for the value type name."""
        self.freeze()
        return self._items.get(name.upper())

    def python_type(self, name: str) -> type | None:
        """Return the python type produced by the value type."""
        self.freeze()
        return self._python_types.get(name.upper())

    def parse_order(self, name: str) -> int:
        """Return the parse ordering of the specified type."""
        self.freeze()
        return self._parse_order.get(name.upper(), 0)

    def names_for_python_type(self, python_type: Any) -> list[str]:
        """Return value type names producing exactly the python type."""
        self.freeze()
        names = [
            name for name, data_type in self._python_types.items() if data_type is python_type
        ]
        names.sort(key=self.parse_order, reverse=True)
        return names

    def for_python_type(self, python_type: type) -> list[str]:
        """Return value type names able to hold the python type.

        An exact match is preferred, otherwise the closest base class in the
        method resolution order is used, so that `bool` never resolves to
        INTEGER while a `str` subclass such as an enum still resolves to TEXT.
        """
        for klass in getattr(python_type, "__mro__", (python_type,)):
            if names := self.names_for_python_type(klass):
                return names
        return []

    def forbidden_params(self, name: str) -> frozenset[str]:
        """Return the property parameters not allowed on the value type."""
        if not (codec := self.get(name)):
            return frozenset()
        return getattr(codec, "forbidden_params", frozenset())

    def consumed_params(self, name: str) -> frozenset[str]:
        """Return the property parameters owned by the codec of the value type."""
        if not (codec := self.get(name)):
            return frozenset()
        return getattr(codec, "consumed_params", frozenset())

    def value_type_of(self, prop: ParsedProperty, default: str) -> str:
        """Return the value type of a property, honoring the VALUE parameter."""
        try:
            value_type = prop.get_parameter_value(ATTR_VALUE)
        except ValueError as err:
            raise ValueDecodeError(
                str(err), lineno=prop.lineno, property_name=prop.name
            ) from err
        return value_type.upper() if value_type else default.upper()

    def split(self, name: str, value: str) -> list[str]:
        """Split a COMMA-separated list of values of the value type."""
        codec = self.get(name)
        if codec is not None and (splitter := getattr(codec, "__split_property_value__", None)):
            return splitter(value)
        return value.split(",")

    def decode(self, prop: ParsedProperty, value_type: str) -> Any:
        """Parse the property value as the value type."""
        if (codec := self.get(value_type)) is None:
            raise ValueDecodeError(
                f"Unsupported value type {value_type}",
                lineno=prop.lineno,
                property_name=prop.name,
                value_type=value_type,
            )
        _LOGGER.debug("Parsing %s as value type '%s'", prop.name, value_type)
        try:
            return codec.__parse_property_value__(prop)
        except ValueDecodeError:
            raise
        except (ValueError, OverflowError) as err:
            raise ValueDecodeError(
                f"Invalid {value_type} value '{prop.value}': {err}",
                detailed_error=str(err),
                lineno=prop.lineno,
                property_name=prop.name,
                value_type=value_type,
            ) from err

    def resolve(self, value: Any, value_types: Iterable[str]) -> str | None:
        """Return the value type among value_types able to encode the value."""
        self.freeze()
        candidates = [name.upper() for name in value_types]
        for klass in type(value).__mro__:
            for name in candidates:
                if self._python_types.get(name) is klass:
                    return name
        return None

    def encode(self, value: Any, value_type: str) -> tuple[str, list[ParsedPropertyParameter]]:
        """Encode the value as the value type, returning the text and parameters."""
        if (codec := self.get(value_type)) is None:
            raise ValueError(f"Unsupported value type {value_type}")
        if encoder := getattr(codec, "__encode_property_value__", None):
            text = encoder(value)
        else:
            text = str(value)
        params: list[ParsedPropertyParameter] = []
        if params_encoder := getattr(codec, "__encode_property_params__", None):
            params = params_encoder(value)
        return text, params


DATA_TYPE: Registry = Registry()
