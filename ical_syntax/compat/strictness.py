"""Process defaults for how strictly calendar content is handled.

Functions in this library take explicit keyword arguments for these
settings. When an argument is not given, the value set by one of these
context managers is used instead, which allows callers to relax parsing for
a whole block of code without threading arguments through every call.
"""

from collections.abc import Generator
import contextlib
import contextvars


_lenient_parsing = contextvars.ContextVar("lenient_parsing", default=False)
_preserve_case = contextvars.ContextVar("preserve_case", default=False)


@contextlib.contextmanager
def enable_lenient_parsing() -> Generator[None]:
    """Context manager to skip malformed properties instead of failing."""
    token = _lenient_parsing.set(True)
    try:
        yield
    finally:
        _lenient_parsing.reset(token)


def is_lenient_parsing_enabled() -> bool:
    """Check if lenient parsing is enabled."""
    return _lenient_parsing.get()


def is_strict(strict: bool | None) -> bool:
    """Resolve an optional strict argument against the current context."""
    if strict is not None:
        return strict
    return not _lenient_parsing.get()


@contextlib.contextmanager
def enable_preserve_case() -> Generator[None]:
    """Context manager to emit names with the letter case they were parsed with."""
    token = _preserve_case.set(True)
    try:
        yield
    finally:
        _preserve_case.reset(token)


def is_preserve_case_enabled() -> bool:
    """Check if names are generated with their original letter case."""
    return _preserve_case.get()
