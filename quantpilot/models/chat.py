"""Chat transcript models."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from quantpilot.models.bot_config import BotConfig
from quantpilot.models.signal import Signal


class ChatMessage(BaseModel):
    """A single message in the pilot conversation."""

    id: str = Field(..., description="Sequential message id")
    sender: Literal["user", "assistant"] = Field(..., description="Message author")
    text: str = Field(..., description="Message body")
    timestamp: datetime = Field(default_factory=datetime.now)

    model_config = {"frozen": True}


class ChatContext(BaseModel):
    """Dashboard state sent along with every chat turn."""

    current_price: float
    config: BotConfig
    last_signal: Optional[Signal] = None

    model_config = {"frozen": True}
