"""Tests for signal and code-generation orchestration.

**Feature: quantpilot**
"""

import asyncio
import json

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from quantpilot.agents.orchestrator import (
    BACKTEST_CODE_PLACEHOLDER,
    BOT_CODE_PLACEHOLDER,
    FALLBACK_REASONING,
    SignalOrchestrator,
    parse_signal,
    strip_code_fences,
)
from quantpilot.agents.prompts import ANALYSIS_WINDOW
from quantpilot.errors import ExternalServiceError, MalformedResponseError
from quantpilot.market.assets import find_asset
from quantpilot.models import BotConfig, ErrorKind, RequestKind, SignalPayload
from quantpilot.models.signal import MARKET_REGIMES, SENTIMENTS, SIGNAL_TYPES
from tests.conftest import FakeClient


ANALYST = "Market Analyst"
ARCHITECT = "System Architect"
BACKTESTER = "Backtest Engineer"

BUY_PAYLOAD = SignalPayload(
    type="BUY",
    confidence=82,
    market_regime="BULL",
    sentiment="POSITIVE",
    reasoning="Higher highs on rising volume.",
)


async def settle():
    """Let scheduled tasks reach their first await."""
    for _ in range(10):
        await asyncio.sleep(0)


@pytest.fixture
def config():
    return BotConfig()


class TestAnalysisFallback:
    """
    **Feature: quantpilot, Property: Analysis Never Raises**

    *For any* service failure, analysis yields a HOLD signal with zero
    confidence and records the failure kind.
    """

    @pytest.mark.asyncio
    async def test_successful_analysis(self, market, clock, config):
        client = FakeClient({ANALYST: BUY_PAYLOAD})
        orchestrator = SignalOrchestrator(client, market, clock=clock)

        signal = await orchestrator.analyze(config)

        assert signal.type == "BUY"
        assert signal.confidence == 82
        assert signal.timestamp == "09:15:30"
        state = orchestrator.state(RequestKind.ANALYZE)
        assert state.result == signal
        assert state.error is None
        assert not state.pending

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "failure,kind",
        [
            (ExternalServiceError("rate limited"), ErrorKind.EXTERNAL_SERVICE),
            (MalformedResponseError("not json"), ErrorKind.MALFORMED_RESPONSE),
        ],
    )
    async def test_failure_yields_hold(self, market, clock, config, failure, kind):
        orchestrator = SignalOrchestrator(FakeClient({ANALYST: failure}), market, clock=clock)

        signal = await orchestrator.analyze(config)

        assert signal.type == "HOLD"
        assert signal.confidence == 0
        assert signal.reasoning == FALLBACK_REASONING
        assert signal.market_regime == "SIDEWAYS"
        assert signal.sentiment == "NEUTRAL"
        assert orchestrator.state(RequestKind.ANALYZE).error == kind

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "MAYBE", "confidence": 50, "market_regime": "BULL", "sentiment": "NEUTRAL", "reasoning": "x"},
            {"type": "BUY", "confidence": 150, "market_regime": "BULL", "sentiment": "NEUTRAL", "reasoning": "x"},
            {"type": "BUY"},
            "not json at all",
            ["BUY"],
        ],
    )
    async def test_malformed_payload_yields_hold(self, market, clock, config, payload):
        orchestrator = SignalOrchestrator(FakeClient({ANALYST: payload}), market, clock=clock)

        signal = await orchestrator.analyze(config)

        assert signal.type == "HOLD"
        assert orchestrator.state(RequestKind.ANALYZE).error == ErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_only_recent_window_is_sent(self, market, clock, config):
        client = FakeClient({ANALYST: BUY_PAYLOAD})
        orchestrator = SignalOrchestrator(client, market, clock=clock)

        await orchestrator.request_analysis(market.history, config)

        prompt = client.calls[0]["prompt"]
        recent = [c.model_dump() for c in market.history.candles[-ANALYSIS_WINDOW:]]
        assert f"(last {ANALYSIS_WINDOW} candles)" in prompt
        assert json.dumps(recent) in prompt
        assert client.calls[0]["output_type"] is SignalPayload


class TestSingleFlight:
    """
    **Feature: quantpilot, Property: One Request Per Action**

    A second trigger while a request of the same kind is pending joins
    it instead of calling the service again.
    """

    @pytest.mark.asyncio
    async def test_concurrent_analyze_coalesces(self, market, clock, config):
        gate = asyncio.Event()
        client = FakeClient({ANALYST: BUY_PAYLOAD}, gate=gate)
        orchestrator = SignalOrchestrator(client, market, clock=clock)

        first = asyncio.ensure_future(orchestrator.analyze(config))
        second = asyncio.ensure_future(orchestrator.analyze(config))
        await settle()

        assert orchestrator.state(RequestKind.ANALYZE).pending
        gate.set()
        results = await asyncio.gather(first, second)

        assert client.count(ANALYST) == 1
        assert results[0] == results[1]
        assert not orchestrator.state(RequestKind.ANALYZE).pending

    @pytest.mark.asyncio
    async def test_sequential_analyze_issues_new_requests(self, market, clock, config):
        client = FakeClient({ANALYST: BUY_PAYLOAD})
        orchestrator = SignalOrchestrator(client, market, clock=clock)

        await orchestrator.analyze(config)
        await orchestrator.analyze(config)

        assert client.count(ANALYST) == 2

    @pytest.mark.asyncio
    async def test_concurrent_generate_coalesces(self, market, config):
        gate = asyncio.Event()
        client = FakeClient({ARCHITECT: "bot", BACKTESTER: "test"}, gate=gate)
        orchestrator = SignalOrchestrator(client, market)

        first = asyncio.ensure_future(orchestrator.generate_code(config))
        second = asyncio.ensure_future(orchestrator.generate_code(config))
        await settle()
        gate.set()
        await asyncio.gather(first, second)

        assert client.count(ARCHITECT) == 1
        assert client.count(BACKTESTER) == 1

    @pytest.mark.asyncio
    async def test_analysis_and_code_generation_overlap(self, market, clock, config):
        gate = asyncio.Event()
        client = FakeClient({ANALYST: BUY_PAYLOAD, ARCHITECT: "bot", BACKTESTER: "test"}, gate=gate)
        orchestrator = SignalOrchestrator(client, market, clock=clock)

        analysis = asyncio.ensure_future(orchestrator.analyze(config))
        code = asyncio.ensure_future(orchestrator.generate_code(config))
        await settle()

        assert orchestrator.state(RequestKind.ANALYZE).pending
        assert orchestrator.state(RequestKind.BOT_CODE).pending
        assert orchestrator.state(RequestKind.BACKTEST_CODE).pending
        assert len(client.calls) == 3

        gate.set()
        await asyncio.gather(analysis, code)

        assert not any(state.pending for state in orchestrator.states.values())


class TestStaleResults:
    """
    **Feature: quantpilot, Property: No Stale Signals**

    A reply issued before an instrument switch is never shown for the
    new instrument.
    """

    @pytest.mark.asyncio
    async def test_reply_after_switch_is_discarded(self, market, clock, config):
        gate = asyncio.Event()
        client = FakeClient({ANALYST: BUY_PAYLOAD}, gate=gate)
        orchestrator = SignalOrchestrator(client, market, clock=clock)

        pending = asyncio.ensure_future(orchestrator.analyze(config))
        await settle()
        market.select_instrument(find_asset("ETH"))
        gate.set()

        assert await pending is None
        assert orchestrator.signal is None
        assert not orchestrator.state(RequestKind.ANALYZE).pending

    @pytest.mark.asyncio
    async def test_switch_clears_previous_signal(self, market, clock, config):
        orchestrator = SignalOrchestrator(FakeClient({ANALYST: BUY_PAYLOAD}), market, clock=clock)
        await orchestrator.analyze(config)

        market.select_instrument(find_asset("BTC"))

        assert orchestrator.signal is None

    @pytest.mark.asyncio
    async def test_new_request_after_switch_is_not_joined(self, market, clock, config):
        gate = asyncio.Event()
        client = FakeClient({ANALYST: BUY_PAYLOAD}, gate=gate)
        orchestrator = SignalOrchestrator(client, market, clock=clock)

        stale = asyncio.ensure_future(orchestrator.analyze(config))
        await settle()
        market.select_instrument(find_asset("GOLD"))
        fresh = asyncio.ensure_future(orchestrator.analyze(config))
        await settle()
        gate.set()

        assert await stale is None
        assert (await fresh).type == "BUY"
        assert client.count(ANALYST) == 2
        assert orchestrator.signal.type == "BUY"

    @pytest.mark.asyncio
    async def test_history_snapshot_taken_at_request_time(self, market, clock, config):
        gate = asyncio.Event()
        client = FakeClient({ANALYST: BUY_PAYLOAD}, gate=gate)
        orchestrator = SignalOrchestrator(client, market, clock=clock)
        expected = json.dumps([c.model_dump() for c in market.history.candles[-ANALYSIS_WINDOW:]])

        pending = asyncio.ensure_future(orchestrator.analyze(config))
        await settle()
        market.advance()
        gate.set()
        await pending

        assert expected in client.calls[0]["prompt"]


class TestCodeGeneration:
    """Partial failure keeps the successful artifact."""

    @pytest.mark.asyncio
    async def test_both_artifacts_generated(self, market, config):
        client = FakeClient({ARCHITECT: "```python\nclass Bot:\n    pass\n```", BACKTESTER: "print('bt')"})
        orchestrator = SignalOrchestrator(client, market)

        artifacts = await orchestrator.generate_code(config)

        assert artifacts.bot_code.file_name == "algo_engine.py"
        assert artifacts.bot_code.content == "class Bot:\n    pass"
        assert artifacts.backtest_code.file_name == "backtest_engine.py"
        assert artifacts.backtest_code.content == "print('bt')"
        assert orchestrator.state(RequestKind.BOT_CODE).result == artifacts.bot_code

    @pytest.mark.asyncio
    async def test_one_failure_keeps_other_artifact(self, market, config):
        client = FakeClient({ARCHITECT: ExternalServiceError("boom"), BACKTESTER: "print('bt')"})
        orchestrator = SignalOrchestrator(client, market)

        artifacts = await orchestrator.generate_code(config)

        assert artifacts.bot_code.content == BOT_CODE_PLACEHOLDER
        assert artifacts.backtest_code.content == "print('bt')"
        assert orchestrator.state(RequestKind.BOT_CODE).error == ErrorKind.EXTERNAL_SERVICE
        assert orchestrator.state(RequestKind.BACKTEST_CODE).error is None

    @pytest.mark.asyncio
    async def test_empty_reply_uses_placeholder(self, market, config):
        client = FakeClient({ARCHITECT: "print('bot')", BACKTESTER: "```python\n```"})
        orchestrator = SignalOrchestrator(client, market)

        artifacts = await orchestrator.request_code_artifacts(config)

        assert artifacts.backtest_code.content == BACKTEST_CODE_PLACEHOLDER

    @pytest.mark.asyncio
    async def test_code_generation_survives_instrument_switch(self, market, config):
        gate = asyncio.Event()
        client = FakeClient({ARCHITECT: "bot", BACKTESTER: "test"}, gate=gate)
        orchestrator = SignalOrchestrator(client, market)

        pending = asyncio.ensure_future(orchestrator.generate_code(config))
        await settle()
        market.select_instrument(find_asset("ETH"))
        gate.set()
        artifacts = await pending

        assert artifacts.bot_code.content == "bot"
        assert orchestrator.state(RequestKind.BOT_CODE).result.content == "bot"


class TestParsing:
    """Reply parsing helpers."""

    @given(
        type_=st.sampled_from(SIGNAL_TYPES),
        confidence=st.floats(min_value=0, max_value=100, allow_nan=False),
        regime=st.sampled_from(MARKET_REGIMES),
        sentiment=st.sampled_from(SENTIMENTS),
    )
    @settings(max_examples=100)
    def test_valid_payloads_parse(self, type_, confidence, regime, sentiment):
        payload = {
            "type": type_,
            "confidence": confidence,
            "market_regime": regime,
            "sentiment": sentiment,
            "reasoning": "r",
        }

        signal = parse_signal(payload, "12:00:00")

        assert signal.type == type_
        assert signal.timestamp == "12:00:00"

    def test_json_text_parses(self):
        signal = parse_signal(BUY_PAYLOAD.model_dump_json(), "12:00:00")

        assert signal.type == "BUY"

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("```python\nx = 1\n```", "x = 1"),
            ("```\nx = 1\n```", "x = 1"),
            ("  x = 1  ", "x = 1"),
            ("before\n```python\nx = 1\n```", "before\n```python\nx = 1\n```"),
        ],
    )
    def test_strip_code_fences(self, text, expected):
        assert strip_code_fences(text) == expected


class TestUnmappedTransportErrors:
    """An injected client letting OSError through still gets the fallbacks."""

    @pytest.mark.asyncio
    async def test_connection_error_yields_hold(self, market, clock, config):
        orchestrator = SignalOrchestrator(FakeClient({ANALYST: ConnectionError("refused")}), market, clock=clock)

        signal = await orchestrator.analyze(config)

        assert signal.type == "HOLD"
        assert signal.confidence == 0
        assert orchestrator.state(RequestKind.ANALYZE).error == ErrorKind.EXTERNAL_SERVICE
        assert not orchestrator.state(RequestKind.ANALYZE).pending

    @pytest.mark.asyncio
    async def test_connection_error_uses_code_placeholder(self, market, config):
        client = FakeClient({ARCHITECT: TimeoutError("slow"), BACKTESTER: "print('bt')"})
        orchestrator = SignalOrchestrator(client, market)

        artifacts = await orchestrator.generate_code(config)

        assert artifacts.bot_code.content == BOT_CODE_PLACEHOLDER
        assert artifacts.backtest_code.content == "print('bt')"
