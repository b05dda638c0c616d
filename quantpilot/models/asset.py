"""Tradeable instrument model."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class Asset(BaseModel):
    """An instrument the market session can track."""

    id: str = Field(..., description="Catalog identifier")
    symbol: str = Field(..., min_length=1, description="Ticker symbol")
    name: str = Field(..., description="Display name")
    price: float = Field(..., gt=0, description="Reference price used to seed the feed")
    change: float = Field(default=0.0, description="Day change percentage")
    type: Literal["CRYPTO", "STOCK", "INDEX"] = Field(..., description="Asset class")
    icon: Optional[str] = Field(default=None, description="Display glyph")

    model_config = {"frozen": True}
