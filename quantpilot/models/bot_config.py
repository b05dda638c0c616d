"""Bot configuration model and its enumerations."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class MarketType(str, Enum):
    """Target market for the trading bot."""

    CRYPTO = "Crypto (Binance/Bybit)"
    STOCKS = "Stocks (Zerodha/Upstox)"
    FOREX = "Forex (OANDA/Interactive Brokers)"
    OPTIONS = "Options (Nifty/BankNifty/SPX)"


class StrategyType(str, Enum):
    """Core trading strategy."""

    TREND_FOLLOWING = "Trend Following + EMA Crossover"
    SCALPING = "High-Frequency Scalping (Orderflow)"
    BREAKOUT = "Volatility Breakout + Retest"
    ML_PREDICTION = "AI/ML Price Prediction (LSTM)"
    HYBRID = "Multi-Factor (RSI + MACD + Volume)"
    PORTFOLIO_REBALANCE = "Smart Portfolio Rebalancing"
    # Options
    OPTIONS_IRON_CONDOR = "Options: Iron Condor (Range Bound / Neutral)"
    OPTIONS_STRADDLE = "Options: Straddle / Strangle (High Volatility)"
    OPTIONS_SPREADS = "Options: Bull/Bear Spreads (Directional)"
    OPTIONS_WHEEL = "Options: The Wheel Strategy (Income)"
    OPTIONS_COVERED_CALL = "Options: Covered Call (Safe Income)"
    OPTIONS_GAMMA_SCALPING = "Options: Gamma Scalping (Market Maker)"
    # Arbitrage
    ARBITRAGE_TRIANGULAR = "Zero Risk: Triangular Arbitrage (Crypto)"
    ARBITRAGE_CASH_CARRY = "Zero Risk: Cash & Carry (Spot vs Future)"


class RiskProfile(str, Enum):
    """Overall risk appetite."""

    CONSERVATIVE = "Conservative (Low Risk, Stable Growth)"
    BALANCED = "Balanced (Moderate Risk)"
    AGGRESSIVE = "Aggressive (High Risk, Max Return)"
    ZERO_RISK = "Zero Risk (Arbitrage Only)"


class AIModel(str, Enum):
    """Prediction model the generated bot scaffolds."""

    LSTM = "LSTM (Long Short-Term Memory)"
    TRANSFORMER = "Transformer (Time-Series)"
    XGBOOST = "XGBoost / LightGBM"


class BotConfig(BaseModel):
    """User-edited trading bot configuration.

    Percentages are stored as entered; consumers that need a bounded
    value (e.g. the vault allocation) clamp on read.
    """

    market: MarketType = Field(default=MarketType.CRYPTO)
    strategy: StrategyType = Field(default=StrategyType.TREND_FOLLOWING)
    risk_profile: RiskProfile = Field(default=RiskProfile.BALANCED)
    ai_model: AIModel = Field(default=AIModel.LSTM)

    risk_per_trade: float = Field(default=1.0, description="Percent of capital risked per trade")
    stop_loss: float = Field(default=2.0, description="Stop loss percentage")
    take_profit: float = Field(default=5.0, description="Take profit percentage")
    leverage: int = Field(default=1, ge=1)

    use_trailing_stop: bool = True
    auto_rebalance: bool = True
    safe_mode: bool = Field(default=True, description="Move to cash in high volatility")

    # Options specific
    manage_greeks: Optional[bool] = None
    target_delta: Optional[float] = None
    min_iv: Optional[float] = None
    max_iv: Optional[float] = None

    # Secure wallet
    use_secure_wallet: bool = True
    vault_reserve_percent: float = Field(default=80.0, description="Percent of funds locked in the vault")
    strict_no_loss_mode: bool = Field(default=False, description="Only hedged or arbitrage entries")

    model_config = {"frozen": True}

    @property
    def is_options(self) -> bool:
        """True when the bot targets an options market."""
        return self.market == MarketType.OPTIONS

    @property
    def is_crypto(self) -> bool:
        return self.market == MarketType.CRYPTO

    @field_validator("market", "strategy", "risk_profile", "ai_model", mode="before")
    @classmethod
    def _accept_member_names(cls, value, info):
        # Config files and CLI flags use member names ("CRYPTO"), the UI uses labels
        enum_type = cls.model_fields[info.field_name].annotation
        if isinstance(value, str) and value.upper() in enum_type.__members__:
            return enum_type[value.upper()]
        return value
