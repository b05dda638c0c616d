"""Synthetic candle generation.

Each candle is drawn from a two-regime random walk: most ticks are
calm (0.2% volatility), one in five is volatile (0.8% volatility) and
carries an extra 5000 units of volume.
"""

import random
from datetime import datetime
from typing import Callable, Optional

from quantpilot.models import Candle


VOLATILE_PROBABILITY = 0.2
CALM_VOLATILITY = 0.002
VOLATILE_VOLATILITY = 0.008
BASE_VOLUME = 5000
VOLATILE_EXTRA_VOLUME = 5000

TIME_FORMAT = "%H:%M:%S"


def format_time(moment: datetime) -> str:
    """Format a timestamp as a 24-hour HH:MM:SS label."""
    return moment.strftime(TIME_FORMAT)


class CandleGenerator:
    """Produces one synthetic OHLCV candle from the previous close.

    The random source and the clock are injectable so tests can make
    the output deterministic.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the generator.

        Args:
            rng: Random source. A fresh ``random.Random`` if omitted.
            clock: Callable returning the current time. ``datetime.now``
                if omitted.
        """
        self._rng = rng or random.Random()
        self._clock = clock or datetime.now

    def next(self, previous_close: float) -> Candle:
        """Generate the candle that follows ``previous_close``.

        Args:
            previous_close: Close of the preceding candle. Becomes the
                new candle's open.

        Returns:
            A new candle satisfying low <= min(open, close) and
            high >= max(open, close).
        """
        rand = self._rng.random

        is_volatile = rand() < VOLATILE_PROBABILITY
        volatility = VOLATILE_VOLATILITY if is_volatile else CALM_VOLATILITY

        change = previous_close * (2 * rand() - 1) * volatility * 2
        close = previous_close + change
        high = max(previous_close, close) + rand() * previous_close * volatility
        low = min(previous_close, close) - rand() * previous_close * volatility
        volume = int(rand() * BASE_VOLUME) + (VOLATILE_EXTRA_VOLUME if is_volatile else 0)

        return Candle(
            time=format_time(self._clock()),
            open=previous_close,
            high=high,
            low=max(low, 0.0),
            close=close,
            volume=volume,
        )
