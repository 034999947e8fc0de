"""
Bounded tool-use negotiation with a reasoning service.

The negotiation is an explicit finite state machine:

    AWAITING_RESPONSE --(reply with tool calls)--> TOOL_REQUESTED
    TOOL_REQUESTED    --(non-terminal results)---> AWAITING_RESPONSE
    TOOL_REQUESTED    --(terminal result)--------> TERMINAL

TERMINAL has no outgoing transitions. A terminal tool result stops the loop
immediately; tool calls that follow it in the same reply are not executed.
The number of model turns is bounded; running out of turns, or a reply that
requests no tool, ends the negotiation with NegotiationError.

The transport is injected as ``send_turn`` so the machine is provider-neutral
and can be driven by scripted replies in tests.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from application.ports import NegotiationError, ToolCallError, ToolHandler, ToolResult

logger = logging.getLogger(__name__)


class NegotiationState(str, Enum):
    AWAITING_RESPONSE = "awaiting_response"
    TOOL_REQUESTED = "tool_requested"
    TERMINAL = "terminal"


@dataclass
class ToolCall:
    """A single tool invocation requested by the model."""

    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AssistantTurn:
    """
    One model reply, normalized from the provider's response.

    ``content`` holds the provider-native content blocks so they can be echoed
    back verbatim in the transcript.
    """

    tool_calls: List[ToolCall] = field(default_factory=list)
    text: str = ""
    content: Any = None


TurnSender = Callable[[List[Dict[str, Any]]], Awaitable[AssistantTurn]]


class ToolNegotiation:
    """
    Drives one negotiation from the initial user message to a terminal result.

    A ToolNegotiation instance is single-use.

    Usage:
        >>> negotiation = ToolNegotiation(send_turn, handler, max_turns=6)
        >>> result = await negotiation.run("Resolve: DB Bench")
        >>> negotiation.state
        <NegotiationState.TERMINAL: 'terminal'>
    """

    def __init__(self, send_turn: TurnSender, tool_handler: ToolHandler, max_turns: int = 6):
        if max_turns < 1:
            raise ValueError(f"max_turns must be >= 1, got {max_turns}")
        self._send_turn = send_turn
        self._tool_handler = tool_handler
        self._max_turns = max_turns
        self._state = NegotiationState.AWAITING_RESPONSE
        self._started = False
        self.turns = 0
        self.tool_calls: List[ToolCall] = []
        self.result: Optional[ToolResult] = None

    @property
    def state(self) -> NegotiationState:
        return self._state

    def _transition(self, new_state: NegotiationState) -> None:
        if self._state == NegotiationState.TERMINAL:
            raise RuntimeError("Negotiation is terminal; no further transitions allowed")
        logger.debug(f"Negotiation {self._state.value} -> {new_state.value}")
        self._state = new_state

    async def run(self, user_message: str) -> ToolResult:
        """
        Run the negotiation.

        Args:
            user_message: Initial user turn

        Returns:
            The terminal ToolResult

        Raises:
            NegotiationError: If no terminal result is reached within max_turns
                or a reply requests no tool
            RuntimeError: If called twice on the same instance
        """
        if self._started:
            raise RuntimeError("ToolNegotiation instances are single-use")
        self._started = True

        messages: List[Dict[str, Any]] = [{"role": "user", "content": user_message}]

        while self.turns < self._max_turns:
            self.turns += 1
            reply = await self._send_turn(messages)

            if not reply.tool_calls:
                raise NegotiationError(
                    f"Reply on turn {self.turns} requested no tool: {reply.text[:200]!r}"
                )

            self._transition(NegotiationState.TOOL_REQUESTED)
            messages.append({"role": "assistant", "content": reply.content})

            tool_results: List[Dict[str, Any]] = []
            for call in reply.tool_calls:
                self.tool_calls.append(call)
                result = await self._dispatch(call)
                if result.terminal:
                    self._transition(NegotiationState.TERMINAL)
                    self.result = result
                    logger.info(f"Negotiation reached terminal tool '{call.name}' after {self.turns} turn(s)")
                    return result
                tool_results.append(
                    {
                        "type": "tool_result",
                        "tool_use_id": call.id,
                        "content": json.dumps(result.content),
                        "is_error": result.is_error,
                    }
                )

            messages.append({"role": "user", "content": tool_results})
            self._transition(NegotiationState.AWAITING_RESPONSE)

        raise NegotiationError(f"No terminal tool call within {self._max_turns} turns")

    async def _dispatch(self, call: ToolCall) -> ToolResult:
        """Run one tool call; recoverable handler errors go back to the model."""
        try:
            return await self._tool_handler(call.name, call.arguments)
        except ToolCallError as e:
            logger.info(f"Tool '{call.name}' returned error to model: {e}")
            return ToolResult.error(str(e))
