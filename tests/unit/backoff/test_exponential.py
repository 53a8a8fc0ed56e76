r"""Unit tests for ExponentialBackoff strategy."""

from __future__ import annotations

import pytest

from arelay.backoff.exponential import ExponentialBackoff


def test_exponential_backoff_basic() -> None:
    """Test basic exponential backoff calculation."""
    backoff = ExponentialBackoff(base_delay=1.0)
    assert backoff.calculate(1) == 1.5  # 1.0 * 1.5^1
    assert backoff.calculate(2) == 2.25  # 1.0 * 1.5^2
    assert backoff.calculate(3) == 3.375  # 1.0 * 1.5^3


def test_exponential_backoff_scales_with_base_delay() -> None:
    backoff = ExponentialBackoff(base_delay=2.0)
    assert backoff.calculate(1) == 3.0
    assert backoff.calculate(2) == 4.5


def test_exponential_backoff_is_increasing() -> None:
    backoff = ExponentialBackoff(base_delay=0.1)
    delays = [backoff.calculate(attempt) for attempt in range(1, 10)]
    assert delays == sorted(delays)
    assert len(set(delays)) == len(delays)


def test_exponential_backoff_custom_coefficient() -> None:
    backoff = ExponentialBackoff(base_delay=1.0, coefficient=2.0)
    assert backoff.calculate(3) == 8.0


def test_exponential_backoff_with_max_delay() -> None:
    """Test exponential backoff with max_delay cap."""
    backoff = ExponentialBackoff(base_delay=1.0, max_delay=3.0)
    assert backoff.calculate(1) == 1.5
    assert backoff.calculate(2) == 2.25
    assert backoff.calculate(3) == 3.0  # Would be 3.375, but capped
    assert backoff.calculate(10) == 3.0


def test_exponential_backoff_zero_base_delay() -> None:
    assert ExponentialBackoff(base_delay=0.0).calculate(4) == 0.0


def test_exponential_backoff_default_values() -> None:
    """Test exponential backoff with default values."""
    backoff = ExponentialBackoff()
    assert backoff.base_delay == 1.0
    assert backoff.coefficient == 1.5
    assert backoff.max_delay is None


def test_exponential_backoff_repr() -> None:
    assert repr(ExponentialBackoff()) == (
        "ExponentialBackoff(base_delay=1.0, coefficient=1.5, max_delay=None)"
    )


def test_exponential_backoff_invalid_base_delay() -> None:
    """Test that negative base_delay raises ValueError."""
    with pytest.raises(ValueError, match=r"base_delay must be non-negative"):
        ExponentialBackoff(base_delay=-1.0)


def test_exponential_backoff_invalid_coefficient() -> None:
    with pytest.raises(ValueError, match=r"coefficient must be >= 1"):
        ExponentialBackoff(coefficient=0.5)


def test_exponential_backoff_invalid_max_delay() -> None:
    """Test that non-positive max_delay raises ValueError."""
    with pytest.raises(ValueError, match=r"max_delay must be positive"):
        ExponentialBackoff(base_delay=1.0, max_delay=0)
    with pytest.raises(ValueError, match=r"max_delay must be positive"):
        ExponentialBackoff(base_delay=1.0, max_delay=-5.0)
