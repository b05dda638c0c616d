"""Signal and code-generation request orchestrator.

The orchestrator is the only component that talks to the generation
service on behalf of the dashboard's analyze and generate-code actions.
It enforces single-flight per action, records pending/result/error
state per request kind, and turns every service failure into a
fallback value so callers never see an exception.
"""

import asyncio
import json
import logging
import re
from datetime import datetime
from typing import Any, Callable, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from quantpilot.agents.prompts import (
    ANALYST_INSTRUCTIONS,
    ARCHITECT_INSTRUCTIONS,
    BACKTEST_INSTRUCTIONS,
    build_analysis_prompt,
    build_backtest_prompt,
    build_bot_code_prompt,
)
from quantpilot.errors import GENERATION_FAILURES, MalformedResponseError
from quantpilot.market.generator import format_time
from quantpilot.market.history import PriceHistory
from quantpilot.market.session import MarketSession
from quantpilot.models import (
    BotConfig,
    Candle,
    CodeArtifact,
    CodeArtifacts,
    ErrorKind,
    RequestKind,
    RequestState,
    Signal,
    SignalPayload,
)

logger = logging.getLogger(__name__)


FALLBACK_REASONING = "analysis unavailable"
BOT_CODE_PLACEHOLDER = "# Error generating code. Please check API Key."
BACKTEST_CODE_PLACEHOLDER = "# Error generating backtest code."

BOT_CODE_FILE = "algo_engine.py"
BACKTEST_CODE_FILE = "backtest_engine.py"

ORCHESTRATED_KINDS = (RequestKind.ANALYZE, RequestKind.BOT_CODE, RequestKind.BACKTEST_CODE)

_FENCE_RE = re.compile(r"^```[\w+-]*\s*\n(.*?)\n?```\s*$", re.DOTALL)


def fallback_signal(timestamp: str) -> Signal:
    """The signal shown when analysis could not be produced."""
    return Signal(
        type="HOLD",
        confidence=0,
        reasoning=FALLBACK_REASONING,
        market_regime="SIDEWAYS",
        sentiment="NEUTRAL",
        timestamp=timestamp,
    )


def strip_code_fences(text: str) -> str:
    """Remove a single markdown code fence wrapping the whole reply."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        return match.group(1)
    return stripped


def parse_signal(payload: Any, timestamp: str) -> Signal:
    """Validate a structured analysis reply into a Signal.

    Args:
        payload: ``SignalPayload``, dict, or JSON text.
        timestamp: Label stamped on the signal.

    Returns:
        Validated signal.

    Raises:
        MalformedResponseError: If the payload does not match the schema.
    """
    if isinstance(payload, BaseModel):
        data = payload.model_dump()
    elif isinstance(payload, dict):
        data = dict(payload)
    elif isinstance(payload, str):
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Analysis reply is not JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedResponseError("Analysis reply is not a JSON object")
    else:
        raise MalformedResponseError(f"Unexpected analysis payload type: {type(payload).__name__}")

    data["timestamp"] = timestamp
    try:
        return Signal.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Analysis reply does not match the signal schema: {e}") from e


class SignalOrchestrator:
    """Gates and sequences analysis and code-generation requests.

    * At most one request per action is in flight. A second trigger while
      one is pending joins the pending request instead of issuing another
      service call.
    * Analysis and code generation are independent and may overlap.
    * Analyses are tagged with the market session generation they were
      issued under; results that arrive after an instrument switch are
      dropped.
    """

    def __init__(
        self,
        client: Any,
        market: MarketSession,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the orchestrator.

        Args:
            client: Generation client exposing ``async generate(...)``.
            market: Market session providing history and generation.
            clock: Time source for signal timestamps.
        """
        self._client = client
        self._market = market
        self._clock = clock or datetime.now
        self._states: dict[RequestKind, RequestState] = {kind: RequestState() for kind in ORCHESTRATED_KINDS}
        self._inflight: dict[RequestKind, tuple[int, asyncio.Future]] = {}
        market.add_reset_listener(self._on_market_reset)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def state(self, kind: RequestKind) -> RequestState:
        """Current state snapshot for ``kind``."""
        return self._states[kind]

    @property
    def states(self) -> dict[RequestKind, RequestState]:
        return dict(self._states)

    @property
    def signal(self) -> Optional[Signal]:
        """Latest signal for the tracked instrument, if any."""
        return self._states[RequestKind.ANALYZE].result

    def _mark_pending(self, kind: RequestKind) -> None:
        self._states[kind] = self._states[kind].model_copy(update={"pending": True})

    def _clear_pending(self, kind: RequestKind) -> None:
        self._states[kind] = self._states[kind].model_copy(update={"pending": False})

    def _on_market_reset(self, generation: int) -> None:
        self._states[RequestKind.ANALYZE] = RequestState()
        if self._inflight.pop(RequestKind.ANALYZE, None) is not None:
            logger.debug("Instrument changed; pending analysis will be discarded")

    def _joinable(self, kind: RequestKind, generation: Optional[int] = None) -> Optional[asyncio.Future]:
        inflight = self._inflight.get(kind)
        if inflight is None:
            return None
        issued_under, future = inflight
        if future.done() or (generation is not None and issued_under != generation):
            return None
        return future

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    async def _request_analysis(
        self,
        candles: Sequence[Candle],
        config: BotConfig,
    ) -> tuple[Signal, Optional[ErrorKind]]:
        prompt = build_analysis_prompt(candles, config)
        try:
            payload = await self._client.generate(
                prompt,
                name="Market Analyst",
                instructions=ANALYST_INSTRUCTIONS,
                output_type=SignalPayload,
            )
            return parse_signal(payload, format_time(self._clock())), None
        except GENERATION_FAILURES as e:
            logger.warning("Analysis unavailable, falling back to HOLD: %s", e)
            return fallback_signal(format_time(self._clock())), ErrorKind.from_error(e)

    async def request_analysis(
        self,
        history: Union[PriceHistory, Sequence[Candle]],
        config: BotConfig,
    ) -> Signal:
        """Ask the generation service for a signal.

        Only the newest 20 candles are sent. Never raises for service
        failures: a HOLD fallback with zero confidence is returned instead.

        Args:
            history: Price history (or candle sequence) to analyse.
            config: Bot configuration.

        Returns:
            Validated or fallback signal.
        """
        candles = history.candles if isinstance(history, PriceHistory) else history
        signal, _ = await self._request_analysis(candles, config)
        return signal

    async def analyze(self, config: BotConfig) -> Optional[Signal]:
        """Run the analyze action against the market session.

        The history snapshot is taken now; later ticks do not affect it.

        Returns:
            The new signal, or None if the instrument changed before the
            reply arrived (the reply is discarded).
        """
        generation = self._market.generation
        pending = self._joinable(RequestKind.ANALYZE, generation)
        if pending is not None:
            logger.debug("Analysis already in flight; joining it")
            return await asyncio.shield(pending)

        history = self._market.history
        self._mark_pending(RequestKind.ANALYZE)
        future = asyncio.ensure_future(self._analyze(history, config, generation))
        self._inflight[RequestKind.ANALYZE] = (generation, future)
        return await asyncio.shield(future)

    async def _analyze(
        self,
        history: PriceHistory,
        config: BotConfig,
        generation: int,
    ) -> Optional[Signal]:
        try:
            signal, error = await self._request_analysis(history.candles, config)
        except BaseException:
            if self._market.generation == generation:
                self._clear_pending(RequestKind.ANALYZE)
            raise

        if self._market.generation != generation:
            logger.info(
                "Discarding stale analysis from generation %d (current %d)",
                generation,
                self._market.generation,
            )
            return None

        self._states[RequestKind.ANALYZE] = RequestState(result=signal, error=error)
        return signal

    # ------------------------------------------------------------------
    # Code generation
    # ------------------------------------------------------------------

    async def _generate_artifact(
        self,
        kind: RequestKind,
        prompt: str,
        instructions: str,
        file_name: str,
        description: str,
        placeholder: str,
    ) -> tuple[CodeArtifact, Optional[ErrorKind]]:
        error = None
        try:
            text = await self._client.generate(
                prompt,
                name="System Architect" if kind == RequestKind.BOT_CODE else "Backtest Engineer",
                instructions=instructions,
            )
            if not isinstance(text, str):
                raise MalformedResponseError(f"Expected text, got {type(text).__name__}")
            content = strip_code_fences(text)
            if not content:
                raise MalformedResponseError("Code reply was empty")
        except GENERATION_FAILURES as e:
            logger.warning("%s failed: %s", kind.value, e)
            content = placeholder
            error = ErrorKind.from_error(e)

        return CodeArtifact(file_name=file_name, content=content, description=description), error

    async def _request_code(
        self,
        config: BotConfig,
    ) -> tuple[CodeArtifacts, dict[RequestKind, Optional[ErrorKind]]]:
        (bot, bot_error), (backtest, backtest_error) = await asyncio.gather(
            self._generate_artifact(
                RequestKind.BOT_CODE,
                build_bot_code_prompt(config),
                ARCHITECT_INSTRUCTIONS,
                BOT_CODE_FILE,
                "Automated trading system",
                BOT_CODE_PLACEHOLDER,
            ),
            self._generate_artifact(
                RequestKind.BACKTEST_CODE,
                build_backtest_prompt(config),
                BACKTEST_INSTRUCTIONS,
                BACKTEST_CODE_FILE,
                "Backtesting and paper trading script",
                BACKTEST_CODE_PLACEHOLDER,
            ),
        )
        artifacts = CodeArtifacts(bot_code=bot, backtest_code=backtest)
        return artifacts, {RequestKind.BOT_CODE: bot_error, RequestKind.BACKTEST_CODE: backtest_error}

    async def request_code_artifacts(self, config: BotConfig) -> CodeArtifacts:
        """Generate the bot and backtest sources concurrently.

        A failed call yields a placeholder for its own slot only.

        Args:
            config: Bot configuration.

        Returns:
            Both artifacts.
        """
        artifacts, _ = await self._request_code(config)
        return artifacts

    async def generate_code(self, config: BotConfig) -> CodeArtifacts:
        """Run the generate-code action, recording state for both kinds."""
        pending = self._joinable(RequestKind.BOT_CODE)
        if pending is not None:
            logger.debug("Code generation already in flight; joining it")
            return await asyncio.shield(pending)

        self._mark_pending(RequestKind.BOT_CODE)
        self._mark_pending(RequestKind.BACKTEST_CODE)
        future = asyncio.ensure_future(self._generate_code(config))
        self._inflight[RequestKind.BOT_CODE] = (self._market.generation, future)
        return await asyncio.shield(future)

    async def _generate_code(self, config: BotConfig) -> CodeArtifacts:
        try:
            artifacts, errors = await self._request_code(config)
        except BaseException:
            self._clear_pending(RequestKind.BOT_CODE)
            self._clear_pending(RequestKind.BACKTEST_CODE)
            raise

        self._states[RequestKind.BOT_CODE] = RequestState(
            result=artifacts.bot_code,
            error=errors[RequestKind.BOT_CODE],
        )
        self._states[RequestKind.BACKTEST_CODE] = RequestState(
            result=artifacts.backtest_code,
            error=errors[RequestKind.BACKTEST_CODE],
        )
        return artifacts
