"""Captain Quant: the conversational trading pilot.

A ``ConversationSession`` keeps an append-only transcript and allows a
single chat turn in flight at a time.
"""

import itertools
import logging
from datetime import datetime
from typing import Any, Callable, Literal, Optional

from quantpilot.agents.prompts import PILOT_INSTRUCTIONS, build_chat_prompt
from quantpilot.errors import GENERATION_FAILURES, MalformedResponseError, SessionBusyError
from quantpilot.models import ChatContext, ChatMessage, ErrorKind, RequestState

logger = logging.getLogger(__name__)


GREETING = (
    "Greetings, Commander. I am Captain Quant, your Autonomous Trading Pilot. "
    "I am monitoring the markets and your Secure Vault. Awaiting your orders, Sir."
)
FALLBACK_REPLY = "I apologize, Sir. I am experiencing a temporary network issue."


class ConversationSession:
    """Ordered chat transcript with single-flight turns.

    While a reply is pending the session is ``typing`` and further
    ``send`` calls raise ``SessionBusyError``.
    """

    def __init__(self, client: Any, clock: Optional[Callable[[], datetime]] = None):
        """Initialize the session with the greeting message.

        Args:
            client: Generation client exposing ``async generate(...)``.
            clock: Time source for message timestamps.
        """
        self._client = client
        self._clock = clock or datetime.now
        self.generation = 0
        self._start_transcript()

    def _start_transcript(self) -> None:
        self._ids = itertools.count(1)
        self._transcript: tuple[ChatMessage, ...] = ()
        self._typing = False
        self._state: RequestState = RequestState()
        self._append("assistant", GREETING)

    def _append(self, sender: Literal["user", "assistant"], text: str) -> ChatMessage:
        message = ChatMessage(
            id=str(next(self._ids)),
            sender=sender,
            text=text,
            timestamp=self._clock(),
        )
        self._transcript = self._transcript + (message,)
        return message

    @property
    def transcript(self) -> tuple[ChatMessage, ...]:
        return self._transcript

    @property
    def typing(self) -> bool:
        return self._typing

    @property
    def state(self) -> RequestState:
        """Request state of the current (or last) chat turn."""
        return self._state

    async def send(self, user_text: str, context: ChatContext) -> tuple[ChatMessage, ...]:
        """Send one user message and append the pilot's reply.

        Args:
            user_text: Message typed by the user. Blank input is ignored.
            context: Current price, configuration and last signal.

        Returns:
            The transcript after the turn.

        Raises:
            SessionBusyError: If a previous turn has not settled yet.
        """
        if self._typing:
            raise SessionBusyError("Captain Quant is still replying to the previous message")
        if not user_text.strip():
            return self._transcript

        generation = self.generation
        self._append("user", user_text)
        self._typing = True
        self._state = self._state.model_copy(update={"pending": True})

        error: Optional[ErrorKind] = None
        try:
            reply = await self._client.generate(
                build_chat_prompt(user_text, context),
                name="Captain Quant",
                instructions=PILOT_INSTRUCTIONS,
            )
            if not isinstance(reply, str) or not reply.strip():
                raise MalformedResponseError("Chat reply was empty")
            reply = reply.strip()
        except GENERATION_FAILURES as e:
            logger.warning("Chat turn failed: %s", e)
            reply = FALLBACK_REPLY
            error = ErrorKind.from_error(e)
        finally:
            if generation == self.generation:
                self._typing = False
                self._state = self._state.model_copy(update={"pending": False})

        if generation != self.generation:
            logger.info("Dropping chat reply from a reset conversation")
            return self._transcript

        message = self._append("assistant", reply)
        self._state = RequestState(result=message, error=error)
        return self._transcript

    def reset(self) -> None:
        """Start over from the greeting; a reply still in flight is dropped."""
        self.generation += 1
        self._start_transcript()
