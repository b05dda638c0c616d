"""Tests for the market session and instrument catalog.

**Feature: quantpilot**
"""

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from quantpilot.market.assets import ASSETS, DEFAULT_PRICE, find_asset, list_assets
from quantpilot.market.session import MarketSession
from tests.conftest import make_generator


class TestInstrumentSwitch:
    """
    **Feature: quantpilot, Property: Generation Advances On Switch**

    *For any* sequence of instrument selections, the generation grows by
    one for every actual change and the window is reseeded at the new
    instrument's price.
    """

    @given(picks=st.lists(st.sampled_from([None] + [a.symbol for a in ASSETS]), max_size=15))
    @settings(max_examples=50)
    def test_generation_counts_changes(self, picks):
        session = MarketSession(generator=make_generator(), history_size=5)
        expected = 0
        current = None

        for symbol in picks:
            asset = find_asset(symbol) if symbol else None
            changed = session.select_instrument(asset)
            if symbol != current:
                expected += 1
            assert changed == (symbol != current)
            current = symbol

        assert session.generation == expected

    def test_initial_feed_uses_default_price(self, market):
        assert market.generation == 0
        assert market.instrument is None
        assert len(market.history) == 50
        assert market.history.candles[0].open == DEFAULT_PRICE

    def test_switch_reseeds_at_asset_price(self, market):
        eth = find_asset("ETH")

        assert market.select_instrument(eth) is True
        assert market.generation == 1
        assert market.instrument == eth
        assert market.history.candles[0].open == eth.price

    def test_reselecting_same_instrument_is_noop(self, market):
        btc = find_asset("BTC")
        market.select_instrument(btc)
        history = market.history

        assert market.select_instrument(btc) is False
        assert market.generation == 1
        assert market.history is history

    def test_reset_listeners_receive_generation(self, market):
        seen = []
        market.add_reset_listener(seen.append)

        market.select_instrument(find_asset("GOLD"))
        market.reset()

        assert seen == [1, 2]


class TestFeedTimer:
    """The feed advances while started and stops cleanly."""

    def test_advance_moves_window(self, market):
        last_close = market.current_price

        history = market.advance()

        assert history.candles[-1].open == last_close
        assert market.history is history

    @pytest.mark.asyncio
    async def test_started_feed_ticks(self, market):
        before = market.history

        market.start()
        await asyncio.sleep(0.05)
        market.stop()

        assert market.history != before
        assert not market.active

    @pytest.mark.asyncio
    async def test_no_ticks_after_stop(self, market):
        market.start()
        await asyncio.sleep(0.03)
        market.stop()
        market.stop()
        frozen = market.history

        await asyncio.sleep(0.05)

        assert market.history is frozen

    @pytest.mark.asyncio
    async def test_switch_while_running_keeps_feed_active(self, market):
        market.start()

        market.select_instrument(find_asset("TATA"))

        assert market.active
        assert market.history.candles[0].open == find_asset("TATA").price
        market.stop()


class TestAssetCatalog:
    """Instrument lookup."""

    def test_catalog_has_six_assets(self):
        assert [a.symbol for a in list_assets()] == ["NIFTY 50", "BTC", "ETH", "RELIANCE", "TATA", "GOLD"]

    @pytest.mark.parametrize("query", ["btc", "BTC", " Btc ", "2"])
    def test_find_asset_by_symbol_or_id(self, query):
        assert find_asset(query).symbol == "BTC"

    def test_find_unknown_asset(self):
        assert find_asset("DOGE") is None

    def test_list_assets_returns_copy(self):
        assets = list_assets()
        assets.clear()

        assert len(list_assets()) == 6
