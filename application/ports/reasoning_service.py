"""
Reasoning Service Interface (Port).

Defines the contract for the external language-model service used to validate,
extract, repair and resolve. Implementations may use Anthropic or any other
vendor; callers only see parsed JSON and terminal tool results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol


class ModelTier(str, Enum):
    """Cost/quality tier of the model used for a call."""

    FAST = "fast"
    SMART = "smart"


@dataclass
class ToolResult:
    """
    Outcome of one tool invocation, as returned by a tool handler.

    ``content`` is sent back to the reasoning service. A result with
    ``terminal=True`` is the stop sentinel: the negotiation ends and ``value``
    is handed to the caller.
    """

    content: Dict[str, Any] = field(default_factory=dict)
    is_error: bool = False
    terminal: bool = False
    value: Any = None

    @classmethod
    def ok(cls, content: Dict[str, Any]) -> "ToolResult":
        return cls(content=content)

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(content={"error": message}, is_error=True)

    @classmethod
    def stop(cls, value: Any, content: Optional[Dict[str, Any]] = None) -> "ToolResult":
        return cls(content=content or {"status": "done"}, terminal=True, value=value)


ToolHandler = Callable[[str, Dict[str, Any]], Awaitable[ToolResult]]


class ToolCallError(Exception):
    """Raised by a tool handler to report a recoverable error to the model.

    The negotiation converts it into an error tool result instead of failing.
    """

    pass


class NegotiationError(Exception):
    """The tool negotiation ended without a terminal tool result."""

    pass


class ReasoningService(Protocol):
    """Abstract interface for the external reasoning service."""

    async def call(
        self,
        system_prompt: str,
        user_message: str,
        model_tier: ModelTier = ModelTier.FAST,
        temperature: float = 0.0,
        max_tokens: int = 1024,
        json_mode: bool = True,
    ) -> Any:
        """
        Send a single prompt and return the parsed reply.

        Args:
            system_prompt: Instructions for the model
            user_message: The content to operate on
            model_tier: Which model tier to use
            temperature: Sampling temperature
            max_tokens: Reply token budget
            json_mode: Parse the reply as a JSON object

        Returns:
            Parsed JSON (json_mode) or the raw reply text

        Raises:
            UpstreamServiceError: On transport failure or unparseable output
        """
        ...

    async def call_with_tools(
        self,
        system_prompt: str,
        user_message: str,
        tools: List[Dict[str, Any]],
        tool_handler: ToolHandler,
        model_tier: ModelTier = ModelTier.FAST,
        temperature: float = 0.0,
        max_tokens: int = 1024,
        max_turns: int = 6,
    ) -> ToolResult:
        """
        Run a bounded tool-use negotiation until a terminal tool result.

        Args:
            system_prompt: Instructions for the model
            user_message: Initial user turn
            tools: Tool definitions offered to the model
            tool_handler: Awaited once per requested tool call, in order
            model_tier: Which model tier to use
            temperature: Sampling temperature
            max_tokens: Reply token budget per turn
            max_turns: Maximum model turns before giving up

        Returns:
            The terminal ToolResult produced by the handler

        Raises:
            NegotiationError: If the negotiation ends without a terminal result
            UpstreamServiceError: On transport failure
        """
        ...
