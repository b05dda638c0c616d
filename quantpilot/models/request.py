"""Request state tracked per orchestrated action kind."""

from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from quantpilot.errors import MalformedResponseError

T = TypeVar("T")


class RequestKind(str, Enum):
    """Kinds of request issued to the generation service."""

    ANALYZE = "analyze"
    BOT_CODE = "generate-bot-code"
    BACKTEST_CODE = "generate-backtest-code"
    CHAT = "chat-turn"


class ErrorKind(str, Enum):
    """Failure category recorded on a settled request."""

    EXTERNAL_SERVICE = "external_service"
    MALFORMED_RESPONSE = "malformed_response"

    @classmethod
    def from_error(cls, error: Exception) -> "ErrorKind":
        """Classify a generation failure."""
        if isinstance(error, MalformedResponseError):
            return cls.MALFORMED_RESPONSE
        return cls.EXTERNAL_SERVICE


class RequestState(BaseModel, Generic[T]):
    """Pending/result/error triple for one request kind.

    Instances are replaced wholesale on every transition so readers
    always hold a consistent snapshot.
    """

    pending: bool = False
    result: Optional[T] = None
    error: Optional[ErrorKind] = None

    model_config = {"frozen": True}
