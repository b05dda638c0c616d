"""Application composition.

``PilotApp`` builds the generation client, market session, orchestrator
and chat session once, wires them together, and is the only surface the
presentation layer (the CLI) talks to.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from quantpilot.agents.base import GenerationClient
from quantpilot.agents.orchestrator import SignalOrchestrator
from quantpilot.agents.pilot import ConversationSession
from quantpilot.config import Settings
from quantpilot.errors import ConfigurationError
from quantpilot.market.assets import find_asset
from quantpilot.market.generator import CandleGenerator
from quantpilot.market.history import PriceHistory
from quantpilot.market.session import MarketSession
from quantpilot.models import (
    Asset,
    BotConfig,
    ChatContext,
    ChatMessage,
    CodeArtifacts,
    RequestKind,
    RequestState,
    Signal,
)
from quantpilot.wallet.allocation import AllocationSnapshot, allocate

logger = logging.getLogger(__name__)


class DashboardSnapshot(BaseModel):
    """Read-only view of everything the dashboard renders."""

    instrument: Optional[Asset]
    history: PriceHistory
    current_price: float
    price_change: float
    config: BotConfig
    allocation: AllocationSnapshot
    signal: Optional[Signal]
    requests: dict[RequestKind, RequestState]
    transcript: tuple[ChatMessage, ...]
    typing: bool
    generation: int

    model_config = {"frozen": True}


class PilotApp:
    """Top-level composition of the QuantPilot core."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[Any] = None,
        generator: Optional[CandleGenerator] = None,
    ):
        """Build the application.

        Args:
            settings: Loaded settings. Defaults if omitted.
            client: Generation client. A ``GenerationClient`` configured
                from ``settings`` if omitted.
            generator: Candle source for the market session.
        """
        self.settings = settings or Settings()
        self.client = client or GenerationClient(
            model=self.settings.get_model(),
            api_key=self.settings.get_api_key(),
            timeout=self.settings.requests.timeout,
        )
        self.market = MarketSession(
            generator=generator,
            tick_interval=self.settings.market.tick_interval_ms / 1000,
            history_size=self.settings.market.history_size,
            default_price=self.settings.market.default_price,
        )
        self.orchestrator = SignalOrchestrator(self.client, self.market)
        self.pilot = ConversationSession(self.client)
        self._config = self.settings.bot

    async def __aenter__(self) -> "PilotApp":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.stop()

    @property
    def config(self) -> BotConfig:
        return self._config

    def update_config(self, **changes: Any) -> BotConfig:
        """Apply user edits to the bot configuration.

        The whole record is re-validated; on failure nothing changes.

        Raises:
            ConfigurationError: If the edited configuration is invalid.
        """
        data = self._config.model_dump()
        data.update(changes)
        try:
            self._config = BotConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid bot configuration: {e}") from e
        return self._config

    def allocation(self) -> AllocationSnapshot:
        """Vault/trading split for the current configuration."""
        return allocate(self.settings.wallet.total_capital, self._config)

    def select_instrument(self, symbol: Optional[str]) -> Optional[Asset]:
        """Track the instrument with ``symbol`` (``None`` for the default feed).

        Raises:
            ValueError: If ``symbol`` is not in the catalog.
        """
        asset = None
        if symbol is not None:
            asset = find_asset(symbol)
            if asset is None:
                raise ValueError(f"Unknown instrument: {symbol}")
        self.market.select_instrument(asset)
        return asset

    def start(self) -> None:
        """Start the market feed. Requires a running event loop."""
        self.market.start()

    def stop(self) -> None:
        self.market.stop()

    async def analyze(self) -> Optional[Signal]:
        return await self.orchestrator.analyze(self._config)

    async def generate_code(self) -> CodeArtifacts:
        return await self.orchestrator.generate_code(self._config)

    async def send_chat(self, text: str) -> tuple[ChatMessage, ...]:
        context = ChatContext(
            current_price=self.market.current_price,
            config=self._config,
            last_signal=self.orchestrator.signal,
        )
        return await self.pilot.send(text, context)

    def snapshot(self) -> DashboardSnapshot:
        """Consistent read-only view of the current state."""
        history = self.market.history
        requests = self.orchestrator.states
        requests[RequestKind.CHAT] = self.pilot.state
        return DashboardSnapshot(
            instrument=self.market.instrument,
            history=history,
            current_price=history.last_close,
            price_change=history.last_close - history.previous_close,
            config=self._config,
            allocation=self.allocation(),
            signal=self.orchestrator.signal,
            requests=requests,
            transcript=self.pilot.transcript,
            typing=self.pilot.typing,
            generation=self.market.generation,
        )
