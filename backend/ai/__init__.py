"""AI client layer: client factory, reasoning service and tool negotiation."""

from backend.ai.client_factory import AIClientFactory, AIRequestContext
from backend.ai.reasoning_client import ReasoningClient
from backend.ai.tool_negotiation import (
    AssistantTurn,
    NegotiationState,
    ToolCall,
    ToolNegotiation,
)

__all__ = [
    "AIClientFactory",
    "AIRequestContext",
    "AssistantTurn",
    "NegotiationState",
    "ReasoningClient",
    "ToolCall",
    "ToolNegotiation",
]
