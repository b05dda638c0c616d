"""Property-based tests for synthetic candle generation.

**Feature: quantpilot**
"""

import random

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from quantpilot.market.generator import (
    BASE_VOLUME,
    CALM_VOLATILITY,
    VOLATILE_EXTRA_VOLUME,
    VOLATILE_VOLATILITY,
    CandleGenerator,
    format_time,
)
from quantpilot.models import Candle
from tests.conftest import FIXED_TIME


class ScriptedRandom:
    """Returns a fixed sequence of draws."""

    def __init__(self, draws):
        self._draws = iter(draws)

    def random(self) -> float:
        return next(self._draws)


def scripted(draws) -> CandleGenerator:
    return CandleGenerator(rng=ScriptedRandom(draws), clock=lambda: FIXED_TIME)


class TestCandleInvariants:
    """
    **Feature: quantpilot, Property: Candle Shape**

    *For any* previous close and random source, the generated candle
    opens at the previous close and its high/low bracket open and close.
    """

    @given(
        previous_close=st.floats(min_value=0.01, max_value=1_000_000.0, allow_nan=False, allow_infinity=False),
        seed=st.integers(min_value=0, max_value=2**32 - 1),
    )
    @settings(max_examples=200)
    def test_generated_candle_is_well_formed(self, previous_close: float, seed: int):
        """High and low always bracket open and close."""
        candle = CandleGenerator(rng=random.Random(seed)).next(previous_close)

        assert candle.open == previous_close
        assert candle.low <= min(candle.open, candle.close)
        assert candle.high >= max(candle.open, candle.close)
        assert candle.low >= 0

    @given(
        previous_close=st.floats(min_value=0.01, max_value=1_000_000.0, allow_nan=False, allow_infinity=False),
        seed=st.integers(min_value=0, max_value=2**32 - 1),
    )
    @settings(max_examples=100)
    def test_close_moves_within_volatile_band(self, previous_close: float, seed: int):
        """The close never moves more than twice the volatile volatility."""
        candle = CandleGenerator(rng=random.Random(seed)).next(previous_close)

        max_move = previous_close * VOLATILE_VOLATILITY * 2
        assert abs(candle.close - candle.open) <= max_move * (1 + 1e-9)

    @given(seed=st.integers(min_value=0, max_value=2**32 - 1))
    @settings(max_examples=100)
    def test_volume_in_range(self, seed: int):
        """Volume stays below base plus the volatile surcharge."""
        candle = CandleGenerator(rng=random.Random(seed)).next(100.0)

        assert 0 <= candle.volume < BASE_VOLUME + VOLATILE_EXTRA_VOLUME


class TestScriptedDraws:
    """Exact values for known random draws."""

    def test_calm_upward_tick(self):
        """A draw above 0.2 is calm; a delta draw of 1 is the maximum up move."""
        candle = scripted([0.5, 1.0, 0.0, 0.0, 0.5]).next(100.0)

        assert candle.close == pytest.approx(100.0 + 100.0 * CALM_VOLATILITY * 2)
        assert candle.high == pytest.approx(candle.close)
        assert candle.low == pytest.approx(100.0)
        assert candle.volume == 2500

    def test_volatile_downward_tick(self):
        """A draw below 0.2 is volatile and adds the volume surcharge."""
        candle = scripted([0.1, 0.0, 1.0, 1.0, 0.0]).next(100.0)

        assert candle.close == pytest.approx(98.4)
        assert candle.high == pytest.approx(100.8)
        assert candle.low == pytest.approx(97.6)
        assert candle.volume == VOLATILE_EXTRA_VOLUME

    def test_candle_time_uses_clock(self):
        candle = scripted([0.5, 0.5, 0.5, 0.5, 0.5]).next(10.0)

        assert candle.time == "09:15:30"
        assert format_time(FIXED_TIME) == "09:15:30"

    def test_same_seed_same_candles(self):
        """Seeded generators are reproducible."""
        first = CandleGenerator(rng=random.Random(3), clock=lambda: FIXED_TIME)
        second = CandleGenerator(rng=random.Random(3), clock=lambda: FIXED_TIME)

        assert first.next(500.0) == second.next(500.0)


class TestCandleModel:
    """Candle rejects inconsistent OHLC values."""

    def test_low_above_open_rejected(self):
        with pytest.raises(ValidationError):
            Candle(time="10:00:00", open=10, high=12, low=11, close=11.5, volume=1)

    def test_high_below_close_rejected(self):
        with pytest.raises(ValidationError):
            Candle(time="10:00:00", open=10, high=10.5, low=9, close=11, volume=1)

    def test_negative_volume_rejected(self):
        with pytest.raises(ValidationError):
            Candle(time="10:00:00", open=10, high=11, low=9, close=10, volume=-1)
