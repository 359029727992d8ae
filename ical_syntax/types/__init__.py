"""Library for parsing rfc5545 Property Value Data Types.

Importing this package registers every built-in value type with the
`DATA_TYPE` registry.
"""

# Import all types for the registry
from . import boolean, date, date_time, duration, integer, text, time  # noqa: F401
from . import float as float_pkg  # noqa: F401
from .binary import BinaryEncoder
from .cal_address import CalAddress
from .data_types import DATA_TYPE, Registry
from .date_time import TzidReference
from .extra import UnknownValue
from .period import Period
from .recur import Frequency, Recur, Weekday, WeekdayValue
from .uri import Uri
from .utc_offset import UtcOffset

__all__ = [
    "BinaryEncoder",
    "CalAddress",
    "DATA_TYPE",
    "Frequency",
    "Period",
    "Recur",
    "Registry",
    "TzidReference",
    "UnknownValue",
    "Uri",
    "UtcOffset",
    "Weekday",
    "WeekdayValue",
]
