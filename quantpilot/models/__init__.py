"""Data models for QuantPilot."""

from quantpilot.models.artifact import CodeArtifact, CodeArtifacts
from quantpilot.models.asset import Asset
from quantpilot.models.bot_config import (
    AIModel,
    BotConfig,
    MarketType,
    RiskProfile,
    StrategyType,
)
from quantpilot.models.candle import Candle
from quantpilot.models.chat import ChatContext, ChatMessage
from quantpilot.models.request import ErrorKind, RequestKind, RequestState
from quantpilot.models.signal import Signal, SignalPayload

__all__ = [
    "AIModel",
    "Asset",
    "BotConfig",
    "Candle",
    "ChatContext",
    "ChatMessage",
    "CodeArtifact",
    "CodeArtifacts",
    "ErrorKind",
    "MarketType",
    "RequestKind",
    "RequestState",
    "RiskProfile",
    "Signal",
    "SignalPayload",
    "StrategyType",
]
