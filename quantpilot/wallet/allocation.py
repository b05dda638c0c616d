"""Vault / trading capital split."""

import math

from pydantic import BaseModel, Field

from quantpilot.models import BotConfig


# Demo account size
DEFAULT_TOTAL_CAPITAL = 50000.0


class AllocationSnapshot(BaseModel):
    """How total capital is divided between the vault and active trading."""

    total_capital: float = Field(..., ge=0)
    vault_amount: float = Field(..., ge=0, description="Capital locked away from trading")
    trading_amount: float = Field(..., ge=0, description="Capital available to strategies")

    model_config = {"frozen": True}

    @property
    def vault_percent(self) -> float:
        if self.total_capital == 0:
            return 0.0
        return self.vault_amount / self.total_capital * 100


def clamp_percent(value: float) -> float:
    """Clamp a percentage into [0, 100]. NaN counts as 0."""
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 100.0)


def allocate(total_capital: float, config: BotConfig) -> AllocationSnapshot:
    """Split ``total_capital`` according to the secure wallet settings.

    The reserve percentage is clamped here, so out-of-range input never
    yields a negative trading balance.

    Args:
        total_capital: Total account value.
        config: Bot configuration.

    Returns:
        Allocation where vault + trading == total.
    """
    if not config.use_secure_wallet:
        return AllocationSnapshot(
            total_capital=total_capital,
            vault_amount=0.0,
            trading_amount=total_capital,
        )

    vault_amount = total_capital * (clamp_percent(config.vault_reserve_percent) / 100)
    return AllocationSnapshot(
        total_capital=total_capital,
        vault_amount=vault_amount,
        trading_amount=total_capital - vault_amount,
    )
