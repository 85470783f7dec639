"""
Clock -- Deterministic time abstraction.

Responsibility:
    Provides an injectable clock so that services never read wall time or
    block height directly.  History timestamps are integers: seconds since
    the epoch for SystemClock, or a caller-controlled height/surrogate for
    the deterministic clocks.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned I/O boundary for time).

Failure modes:
    - SequentialClock raises ValueError if initialized with no values.

Audit relevance:
    Every history entry timestamp is traceable to an injected Clock.
"""

import time
from abc import ABC, abstractmethod
from typing import Iterator


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        All services that need the current time receive a Clock via
        constructor injection.

    Guarantees:
        - ``timestamp()`` returns a non-negative integer.
    """

    @abstractmethod
    def timestamp(self) -> int:
        """Get the current timestamp (epoch seconds or block height)."""
        ...


class SystemClock(Clock):
    """
    Production clock returning wall time as epoch seconds.

    Non-goals:
        Not suitable for deterministic replay or testing.
    """

    def timestamp(self) -> int:
        return int(time.time())


class DeterministicClock(Clock):
    """
    Test clock with controlled time, usable as a block-height surrogate.

    Guarantees:
        - ``timestamp()`` returns the same value on repeated calls until
          ``advance()`` or ``set_time()`` is called.
        - ``tick()`` advances by exactly 1 and returns the new value.
    """

    def __init__(self, start: int = 100):
        self._start = start
        self._advance = 0

    def timestamp(self) -> int:
        return self._start + self._advance

    def set_time(self, value: int) -> None:
        """Set the clock to a specific value."""
        self._start = value
        self._advance = 0

    def advance(self, amount: int = 1) -> None:
        """Advance the clock by the specified amount."""
        self._advance += amount

    def tick(self) -> int:
        """Advance by 1 and return new value."""
        self.advance(1)
        return self.timestamp()


class SequentialClock(Clock):
    """
    Clock that returns sequential values from a predefined list.

    After exhaustion, repeats the last value.

    Raises:
        ValueError: If initialized with an empty list.
    """

    def __init__(self, values: list[int]):
        if not values:
            raise ValueError("SequentialClock requires at least one value")
        self._values: Iterator[int] = iter(values)
        self._last: int = values[0]

    def timestamp(self) -> int:
        self._last = next(self._values, self._last)
        return self._last
