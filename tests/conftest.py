"""Shared fixtures for QuantPilot tests."""

import asyncio
import random
from datetime import datetime
from typing import Any

import pytest

from quantpilot.market.generator import CandleGenerator
from quantpilot.market.session import MarketSession


FIXED_TIME = datetime(2024, 3, 1, 9, 15, 30)


class FakeClient:
    """Scripted stand-in for ``GenerationClient``.

    ``replies`` maps an agent name to a value, an exception instance to
    raise, or a callable taking the prompt. ``gate``, when set, holds
    every call until the event is set.
    """

    def __init__(self, replies: dict[str, Any] | None = None, gate: asyncio.Event | None = None):
        self.replies = replies or {}
        self.gate = gate
        self.calls: list[dict[str, Any]] = []

    async def generate(self, prompt, *, name, instructions="", output_type=None):
        self.calls.append({"prompt": prompt, "name": name, "output_type": output_type})
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.get(name)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(prompt)
        return reply

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call["name"] == name)


def make_generator(seed: int = 7) -> CandleGenerator:
    return CandleGenerator(rng=random.Random(seed), clock=lambda: FIXED_TIME)


@pytest.fixture
def generator() -> CandleGenerator:
    return make_generator()


@pytest.fixture
def market(generator) -> MarketSession:
    return MarketSession(generator=generator, tick_interval=0.01)


@pytest.fixture
def clock():
    return lambda: FIXED_TIME
