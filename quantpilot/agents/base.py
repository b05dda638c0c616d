"""Base utilities for the generation service.

This module wraps the OpenAI Agents SDK behind ``GenerationClient``,
which the orchestrator and chat session receive by injection. It
applies a per-call timeout and maps SDK failures onto the QuantPilot
error types.
"""

import asyncio
import logging
import os
from typing import Any, Optional

# Disable tracing to avoid noisy 503 errors from telemetry
os.environ.setdefault("OPENAI_AGENTS_DISABLE_TRACING", "1")

from agents import Agent, OpenAIProvider, RunConfig, Runner
from agents.exceptions import AgentsException, ModelBehaviorError
from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError
from rich.console import Console

from quantpilot.config import DEFAULT_MODEL, DEFAULT_REQUEST_TIMEOUT
from quantpilot.errors import ExternalServiceError, MalformedResponseError

logger = logging.getLogger(__name__)


def get_model() -> str:
    """Get the model to use for agents.

    Checks OPENAI_MODEL environment variable, falls back to default.

    Returns:
        Model name string.
    """
    return os.environ.get("OPENAI_MODEL", DEFAULT_MODEL)


def create_agent(
    name: str,
    instructions: str,
    model: Optional[str] = None,
    output_type: Optional[type] = None,
) -> Agent:
    """Create an agent for a single generation call.

    Args:
        name: Name of the agent.
        instructions: System instructions for the agent.
        model: Optional model override. Uses default if not specified.
        output_type: Optional pydantic model for structured output.

    Returns:
        Configured Agent instance.
    """
    return Agent(
        name=name,
        instructions=instructions,
        model=model or get_model(),
        output_type=output_type,
    )


def _get_model_info(model: str) -> tuple[str, str]:
    """Get model display name and reasoning level.

    Args:
        model: Model name string.

    Returns:
        Tuple of (display_name, reasoning_level).
    """
    o_series = {
        "o1": ("o1", "high"),
        "o1-mini": ("o1-mini", "medium"),
        "o3": ("o3", "very high"),
        "o3-mini": ("o3-mini", "medium"),
        "o4-mini": ("o4-mini", "medium"),
    }

    if model in o_series:
        return o_series[model]

    if model.startswith("gpt-5"):
        return (model, "medium")

    if model.startswith("gpt-4"):
        return (model, "standard")

    if model.startswith("gpt-"):
        return (model, "basic")

    return (model, "unknown")


class GenerationClient:
    """Client for the external text-generation service.

    One instance is built by the application and shared by the
    orchestrator and the chat session. Every call either returns a
    usable payload or raises ``ExternalServiceError`` /
    ``MalformedResponseError``.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        console: Optional[Console] = None,
    ):
        """Initialize the client.

        Args:
            model: Model name. Uses ``get_model()`` if omitted.
            api_key: OpenAI API key, kept on this client only. The SDK
                reads OPENAI_API_KEY if omitted.
            timeout: Seconds allowed per call.
            console: When given, each call prints a dim agent/model line.
        """
        self.model = model or get_model()
        self.timeout = timeout
        self._console = console
        if api_key:
            self.provider = OpenAIProvider(openai_client=AsyncOpenAI(api_key=api_key))
        else:
            self.provider = OpenAIProvider()

    def _log_agent_call(self, agent: Agent) -> None:
        display_name, reasoning = _get_model_info(agent.model)
        line = f"Agent: {agent.name} | Model: {display_name} | Reasoning: {reasoning}"
        if self._console is not None:
            self._console.print(f"[dim]🤖 {line}[/dim]")
        else:
            logger.debug(line)

    async def generate(
        self,
        prompt: str,
        *,
        name: str,
        instructions: str = "",
        output_type: Optional[type] = None,
    ) -> Any:
        """Run one generation call.

        Args:
            prompt: User prompt.
            name: Agent name, used in logs and error messages.
            instructions: System instructions.
            output_type: Pydantic model for structured output. Plain
                text is returned when omitted.

        Returns:
            An ``output_type`` instance, or non-empty text.

        Raises:
            ExternalServiceError: The call failed or timed out.
            MalformedResponseError: The reply was empty or did not match
                ``output_type``.
        """
        agent = create_agent(name, instructions, model=self.model, output_type=output_type)
        self._log_agent_call(agent)

        try:
            result = await asyncio.wait_for(
                Runner.run(agent, prompt, run_config=RunConfig(model_provider=self.provider)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ExternalServiceError(f"{name} timed out after {self.timeout:g}s") from e
        except (ModelBehaviorError, ValidationError) as e:
            raise MalformedResponseError(f"{name} returned an invalid payload: {e}") from e
        except (AgentsException, OpenAIError, OSError) as e:
            raise ExternalServiceError(f"{name} failed: {e}") from e

        output = result.final_output
        if output_type is None:
            if not isinstance(output, str) or not output.strip():
                raise MalformedResponseError(f"{name} returned an empty response")
        elif output is None:
            raise MalformedResponseError(f"{name} returned no structured output")
        return output
