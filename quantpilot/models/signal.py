"""Trading signal models."""

from typing import Literal, get_args

from pydantic import BaseModel, Field


SignalType = Literal["BUY", "SELL", "HOLD", "SAFE_MODE", "ARBITRAGE_EXECUTE", "REBALANCE"]
MarketRegime = Literal["BULL", "BEAR", "SIDEWAYS", "VOLATILE"]
Sentiment = Literal["POSITIVE", "NEGATIVE", "NEUTRAL"]

SIGNAL_TYPES: tuple[str, ...] = get_args(SignalType)
MARKET_REGIMES: tuple[str, ...] = get_args(MarketRegime)
SENTIMENTS: tuple[str, ...] = get_args(Sentiment)


class SignalPayload(BaseModel):
    """Structured output requested from the generation service.

    Kept free of numeric constraints so it can be used as a strict
    JSON schema; range checks happen when converting to a Signal.
    """

    type: SignalType = Field(..., description="Trading signal")
    confidence: float = Field(..., description="Confidence score 0-100")
    market_regime: MarketRegime = Field(..., description="Market regime")
    sentiment: Sentiment = Field(..., description="Sentiment from price action and volume")
    reasoning: str = Field(..., description="Detailed technical analysis summary")


class Signal(BaseModel):
    """A validated trading signal shown to the user."""

    type: SignalType
    confidence: float = Field(..., ge=0, le=100)
    reasoning: str
    market_regime: MarketRegime
    sentiment: Sentiment
    timestamp: str = Field(..., description="Wall-clock label (HH:MM:SS)")

    model_config = {"frozen": True}
