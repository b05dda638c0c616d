"""Synthetic market engine."""

from quantpilot.market.assets import ASSETS, DEFAULT_PRICE, find_asset, list_assets
from quantpilot.market.generator import CandleGenerator, format_time
from quantpilot.market.history import HISTORY_SIZE, PriceHistory
from quantpilot.market.scheduler import PeriodicTask
from quantpilot.market.session import MarketSession

__all__ = [
    "ASSETS",
    "DEFAULT_PRICE",
    "HISTORY_SIZE",
    "CandleGenerator",
    "MarketSession",
    "PeriodicTask",
    "PriceHistory",
    "find_asset",
    "format_time",
    "list_assets",
]
