"""Fixed-size rolling window of simulated candles."""

from pydantic import BaseModel, Field

from quantpilot.market.generator import CandleGenerator
from quantpilot.models import Candle


# Number of candles kept in the window
HISTORY_SIZE = 50


class PriceHistory(BaseModel):
    """Ordered, immutable window of candles (oldest first).

    ``advance`` returns a new window instead of mutating this one, so a
    reference held by an in-flight request is never affected by later
    ticks.
    """

    candles: tuple[Candle, ...] = Field(default=())

    model_config = {"frozen": True}

    @classmethod
    def seed(
        cls,
        initial_price: float,
        generator: CandleGenerator,
        size: int = HISTORY_SIZE,
    ) -> "PriceHistory":
        """Build a full window starting from ``initial_price``.

        Each candle opens at the previous candle's close; the first one
        opens at ``initial_price``.

        Args:
            initial_price: Open of the first candle.
            generator: Candle source.
            size: Window length.

        Returns:
            A history holding exactly ``size`` candles.
        """
        candles = []
        price = initial_price
        for _ in range(size):
            candle = generator.next(price)
            candles.append(candle)
            price = candle.close
        return cls(candles=tuple(candles))

    def advance(self, generator: CandleGenerator) -> "PriceHistory":
        """Drop the oldest candle and append one generated from the last close."""
        if not self.candles:
            raise ValueError("cannot advance an empty history; seed it first")
        candle = generator.next(self.last_close)
        return PriceHistory(candles=self.candles[1:] + (candle,))

    @property
    def last_close(self) -> float:
        """Close of the newest candle."""
        return self.candles[-1].close

    @property
    def previous_close(self) -> float:
        """Close of the candle before the newest, or the newest if alone."""
        if len(self.candles) < 2:
            return self.last_close
        return self.candles[-2].close

    def tail(self, count: int) -> list[Candle]:
        """Return the newest ``count`` candles, oldest first."""
        if count <= 0:
            return []
        return list(self.candles[-count:])

    def __len__(self) -> int:
        return len(self.candles)
