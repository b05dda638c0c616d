"""Wallet figures derived from the bot configuration."""

from quantpilot.wallet.allocation import (
    DEFAULT_TOTAL_CAPITAL,
    AllocationSnapshot,
    allocate,
    clamp_percent,
)

__all__ = [
    "DEFAULT_TOTAL_CAPITAL",
    "AllocationSnapshot",
    "allocate",
    "clamp_percent",
]
