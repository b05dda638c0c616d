"""Market session: the live simulated feed for one tracked instrument."""

import logging
from typing import Callable, Optional

from quantpilot.market.assets import DEFAULT_PRICE
from quantpilot.market.generator import CandleGenerator
from quantpilot.market.history import HISTORY_SIZE, PriceHistory
from quantpilot.market.scheduler import PeriodicTask
from quantpilot.models import Asset

logger = logging.getLogger(__name__)

# Milliseconds between simulated ticks
DEFAULT_TICK_INTERVAL_MS = 1500

ResetListener = Callable[[int], None]


class MarketSession:
    """Owns the price history, its timer and the tracked instrument.

    Every instrument switch (or explicit reset) advances ``generation``.
    Requests tag themselves with the generation they were issued under
    so results arriving after a switch can be recognised as stale.
    """

    def __init__(
        self,
        generator: Optional[CandleGenerator] = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL_MS / 1000,
        history_size: int = HISTORY_SIZE,
        default_price: float = DEFAULT_PRICE,
    ):
        """Initialize and seed the session.

        Args:
            generator: Candle source.
            tick_interval: Seconds between automatic advances.
            history_size: Candles kept in the rolling window.
            default_price: Seed price when no instrument is tracked.
        """
        self.generator = generator or CandleGenerator()
        self.tick_interval = tick_interval
        self.history_size = history_size
        self.default_price = default_price
        self.generation = 0

        self._instrument: Optional[Asset] = None
        self._timer: Optional[PeriodicTask] = None
        self._listeners: list[ResetListener] = []
        self._history = self._seed()

    @property
    def instrument(self) -> Optional[Asset]:
        return self._instrument

    @property
    def history(self) -> PriceHistory:
        """Current window. Immutable, safe to hold across awaits."""
        return self._history

    @property
    def current_price(self) -> float:
        return self._history.last_close

    @property
    def active(self) -> bool:
        """True while the tick timer is running."""
        return self._timer is not None and self._timer.running

    def _seed(self) -> PriceHistory:
        price = self._instrument.price if self._instrument else self.default_price
        return PriceHistory.seed(price, self.generator, size=self.history_size)

    def advance(self) -> PriceHistory:
        """Move the window forward by one candle."""
        self._history = self._history.advance(self.generator)
        return self._history

    def start(self) -> None:
        """Start the tick timer. Must be called from a running event loop."""
        if self.active:
            return
        self._timer = PeriodicTask(self.tick_interval, self.advance, name="market-tick")
        self._timer.start()
        logger.debug("Market feed started (every %.2fs)", self.tick_interval)

    def stop(self) -> None:
        """Cancel the tick timer. Idempotent."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def add_reset_listener(self, listener: ResetListener) -> None:
        """Register a callback invoked with the new generation on reset."""
        self._listeners.append(listener)

    def select_instrument(self, asset: Optional[Asset]) -> bool:
        """Track a different instrument (``None`` for the default feed).

        Selecting the instrument already tracked is a no-op.

        Returns:
            True if the session was reset.
        """
        current_id = self._instrument.id if self._instrument else None
        new_id = asset.id if asset else None
        if current_id == new_id:
            return False
        self._instrument = asset
        self.reset()
        return True

    def reset(self) -> None:
        """Discard the history and start a new generation.

        The timer is cancelled before reseeding and restarted afterwards
        if it was running, so no tick from the old window can land on
        the new one.
        """
        was_active = self.active
        self.stop()

        self.generation += 1
        self._history = self._seed()
        symbol = self._instrument.symbol if self._instrument else "default"
        logger.info("Reseeded %s feed at %.2f (generation %d)", symbol, self.current_price, self.generation)

        for listener in self._listeners:
            listener(self.generation)

        if was_active:
            self.start()
