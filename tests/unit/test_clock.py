"""Clock implementations."""

import pytest

from provenance_kernel.domain.clock import DeterministicClock, SequentialClock, SystemClock


def test_deterministic_clock_is_stable_until_advanced():
    clock = DeterministicClock(start=100)
    assert clock.timestamp() == 100
    assert clock.timestamp() == 100
    clock.advance(3)
    assert clock.timestamp() == 103
    assert clock.tick() == 104


def test_deterministic_clock_set_time():
    clock = DeterministicClock()
    clock.advance(5)
    clock.set_time(500)
    assert clock.timestamp() == 500


def test_sequential_clock_repeats_last_value():
    clock = SequentialClock([100, 101, 102])
    assert [clock.timestamp() for _ in range(5)] == [100, 101, 102, 102, 102]


def test_sequential_clock_requires_values():
    with pytest.raises(ValueError):
        SequentialClock([])


def test_system_clock_returns_integer_seconds():
    value = SystemClock().timestamp()
    assert isinstance(value, int)
    assert value > 0
