"""Candle (OHLCV) data model."""

from pydantic import BaseModel, Field, model_validator


class Candle(BaseModel):
    """Represents a single simulated OHLCV candle."""

    time: str = Field(..., description="Wall-clock label (HH:MM:SS)")
    open: float = Field(..., ge=0, description="Opening price")
    high: float = Field(..., ge=0, description="High price")
    low: float = Field(..., ge=0, description="Low price")
    close: float = Field(..., ge=0, description="Closing price")
    volume: int = Field(..., ge=0, description="Traded volume")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_range(self) -> "Candle":
        if self.low > min(self.open, self.close):
            raise ValueError("low must not exceed min(open, close)")
        if self.high < max(self.open, self.close):
            raise ValueError("high must not be below max(open, close)")
        return self
