"""Function registry for {{NAME()}} placeholders."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional

from .exceptions import (
    DuplicateFunctionError,
    FunctionExecutionError,
    FunctionNotFoundError,
    InvalidArgumentError,
)
from .tokens import is_valid_name

logger = logging.getLogger(__name__)


class Clock:
    """Source of the current time for the timestamp functions."""

    def utc_now(self) -> datetime:
        raise NotImplementedError

    def local_now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Reads the real system clock."""

    def utc_now(self) -> datetime:
        return datetime.now(timezone.utc)

    def local_now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock(Clock):
    """
    Always returns the same instant.

    Naive instants are taken as UTC. Local time is the instant seen from
    ``local_timezone`` (UTC unless given).
    """

    def __init__(self, instant: datetime, local_timezone: tzinfo = timezone.utc):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant
        self.local_timezone = local_timezone

    @classmethod
    def parse(cls, text: str, local_timezone: tzinfo = timezone.utc) -> FixedClock:
        """Build a clock from ISO 8601 text such as '2024-01-01T10:00:00Z'."""
        try:
            instant = datetime.fromisoformat(text.strip().replace('Z', '+00:00'))
        except ValueError as e:
            raise InvalidArgumentError(f"Cannot parse clock instant '{text}': {e}", "clock") from e
        return cls(instant, local_timezone)

    def utc_now(self) -> datetime:
        return self.instant.astimezone(timezone.utc)

    def local_now(self) -> datetime:
        return self.instant.astimezone(self.local_timezone)


def format_utc(moment: datetime) -> str:
    """Render as yyyy-MM-ddTHH:mm:ss.fffZ."""
    moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat(timespec='milliseconds') + "Z"


def format_local(moment: datetime) -> str:
    """Render as yyyy-MM-ddTHH:mm:ss.fff+HH:MM."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.isoformat(timespec='milliseconds')


class GuidFunction:
    """Generates a random UUID in its canonical text form."""

    def __call__(self) -> str:
        return str(uuid.uuid4())


class NowFunction:
    """Current local time with its UTC offset."""

    def __init__(self, clock: Clock):
        self.clock = clock

    def __call__(self) -> str:
        return format_local(self.clock.local_now())


class UtcNowFunction:
    """Current UTC time."""

    def __init__(self, clock: Clock):
        self.clock = clock

    def __call__(self) -> str:
        return format_utc(self.clock.utc_now())


class FunctionRegistry:
    """
    Maps function names to zero-argument callables returning strings.

    Names are case-insensitive. Register everything before sharing a
    registry between threads; resolve and execute never modify it.

    Usage:
        registry = FunctionRegistry(clock=FixedClock.parse("2024-01-01T10:00:00Z"))
        registry.register("TENANT", lambda: "acme")
        registry.execute("utcnow")  # '2024-01-01T10:00:00.000Z'
    """

    def __init__(self, clock: Optional[Clock] = None, include_builtins: bool = True):
        """
        Initialize the registry.

        Args:
            clock: Time source for NOW and UTCNOW (system clock if not provided)
            include_builtins: Register GUID, NOW and UTCNOW
        """
        self.clock = clock or SystemClock()
        self._functions: dict[str, tuple[str, Callable[[], str]]] = {}

        if include_builtins:
            self.register("GUID", GuidFunction())
            self.register("NOW", NowFunction(self.clock))
            self.register("UTCNOW", UtcNowFunction(self.clock))

    def register(self, name: str, fn: Callable[[], str]) -> None:
        """
        Bind a function to a name.

        Raises:
            InvalidArgumentError: name is blank or not a placeholder name,
                or fn is missing/not callable
            DuplicateFunctionError: name is already bound (ignoring case)
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("Function name cannot be empty", "name")
        if not is_valid_name(name):
            raise InvalidArgumentError(
                f"Function name '{name}' may only contain letters, digits and underscores", "name"
            )
        if fn is None:
            raise InvalidArgumentError("Function cannot be None", "fn")
        if not callable(fn):
            raise InvalidArgumentError(
                f"Function '{name}' must be callable, got {type(fn).__name__}", "fn"
            )

        key = _key(name)
        if key in self._functions:
            raise DuplicateFunctionError(name)

        self._functions[key] = (name, fn)
        logger.debug("Registered function %s", name)

    def resolve(self, name: str) -> Optional[Callable[[], str]]:
        """Look up a function by name, ignoring case."""
        if not isinstance(name, str):
            return None
        entry = self._functions.get(_key(name))
        return entry[1] if entry else None

    def __contains__(self, name: str) -> bool:
        return self.resolve(name) is not None

    def registered_functions(self) -> list[str]:
        """Names of all registered functions, as registered."""
        return [name for name, _ in self._functions.values()]

    def execute(self, name: str) -> str:
        """
        Run the named function.

        Raises:
            FunctionNotFoundError: no function has this name
            FunctionExecutionError: the function raised or returned a non-string
        """
        fn = self.resolve(name)
        if fn is None:
            raise FunctionNotFoundError(name)

        try:
            result = fn()
        except Exception as e:
            raise FunctionExecutionError(name, str(e) or type(e).__name__) from e

        if not isinstance(result, str):
            raise FunctionExecutionError(
                name, f"returned {type(result).__name__}, expected str"
            )

        logger.debug("Executed function %s -> %r", name, result)
        return result


def _key(name: str) -> str:
    return name.upper()
