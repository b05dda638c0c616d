"""Generation-service agents for QuantPilot.

This module provides:
- GenerationClient: injected wrapper around the OpenAI Agents SDK
- SignalOrchestrator: analysis and code-generation requests
- ConversationSession: the Captain Quant chat
"""

from quantpilot.agents.base import GenerationClient, create_agent, get_model
from quantpilot.agents.orchestrator import (
    SignalOrchestrator,
    fallback_signal,
    parse_signal,
    strip_code_fences,
)
from quantpilot.agents.pilot import ConversationSession

__all__ = [
    # Base utilities
    "GenerationClient",
    "create_agent",
    "get_model",
    # Orchestration
    "SignalOrchestrator",
    "ConversationSession",
    # Utility functions
    "fallback_signal",
    "parse_signal",
    "strip_code_fences",
]
