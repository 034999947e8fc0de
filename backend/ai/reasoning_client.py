"""
Anthropic-backed reasoning service.

Implements the ReasoningService port:
- call(): single prompt, optional JSON mode (assistant prefill with "{" and
  balanced-object extraction from the reply)
- call_with_tools(): bounded tool negotiation via ToolNegotiation

Replies that cannot be parsed, and transport failures, raise
UpstreamServiceError. Nothing is retried here.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import anthropic

from application.exceptions import UpstreamServiceError
from application.ports import ModelTier, ToolHandler, ToolResult
from backend.ai.client_factory import AIClientFactory, AIRequestContext
from backend.ai.tool_negotiation import AssistantTurn, ToolCall, ToolNegotiation
from backend.settings import Settings, get_settings

logger = logging.getLogger(__name__)

SERVICE_NAME = "reasoning"


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code fence if present."""
    content = content.strip()
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else ""
    if content.endswith("```"):
        content = content.rsplit("```", 1)[0]
    return content.strip()


def extract_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced ``{...}`` object in text, or None.

    Braces inside JSON strings (including escaped quotes) are ignored.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]
    return None


def parse_json_reply(text: str) -> Dict[str, Any]:
    """
    Parse a model reply into a JSON object.

    Raises:
        UpstreamServiceError: If no JSON object can be parsed
    """
    cleaned = strip_code_fences(text)
    candidate = extract_json_object(cleaned)
    if candidate is None:
        raise UpstreamServiceError(SERVICE_NAME, "reply did not contain a JSON object")
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise UpstreamServiceError(SERVICE_NAME, f"reply was not valid JSON ({e.msg})") from e
    if not isinstance(parsed, dict):
        raise UpstreamServiceError(SERVICE_NAME, "reply JSON was not an object")
    return parsed


def _reply_text(response: Any) -> str:
    return "".join(
        getattr(block, "text", "") for block in response.content if getattr(block, "type", None) == "text"
    )


def _to_turn(response: Any) -> AssistantTurn:
    tool_calls = [
        ToolCall(id=block.id, name=block.name, arguments=dict(block.input or {}))
        for block in response.content
        if getattr(block, "type", None) == "tool_use"
    ]
    return AssistantTurn(tool_calls=tool_calls, text=_reply_text(response), content=response.content)


class ReasoningClient:
    """
    ReasoningService implementation on the Anthropic Messages API.

    Usage:
        >>> client = ReasoningClient()
        >>> verdict = await client.call(SYSTEM, text, ModelTier.FAST, json_mode=True)
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        settings: Optional[Settings] = None,
        context: Optional[AIRequestContext] = None,
    ):
        """
        Initialize the reasoning client.

        Args:
            client: Optional AsyncAnthropic-compatible client (for testing)
            settings: Optional settings (defaults to get_settings())
            context: Request context for tracking headers
        """
        self._settings = settings or get_settings()
        self._client = client or AIClientFactory.create_anthropic_client(
            context=context,
            timeout=self._settings.reasoning_timeout_seconds,
            settings=self._settings,
        )

    def model_for(self, tier: ModelTier) -> str:
        """Resolve a model tier to a concrete model name."""
        if tier == ModelTier.SMART:
            return self._settings.reasoning_smart_model
        return self._settings.reasoning_fast_model

    async def _create(self, **kwargs: Any) -> Any:
        try:
            return await self._client.messages.create(**kwargs)
        except anthropic.APIError as e:
            logger.error(f"Reasoning service request failed: {type(e).__name__}")
            raise UpstreamServiceError(SERVICE_NAME, f"request failed ({type(e).__name__})") from e

    async def call(
        self,
        system_prompt: str,
        user_message: str,
        model_tier: ModelTier = ModelTier.FAST,
        temperature: float = 0.0,
        max_tokens: int = 1024,
        json_mode: bool = True,
    ) -> Any:
        messages: List[Dict[str, Any]] = [{"role": "user", "content": user_message}]
        if json_mode:
            # Prefilling the assistant turn forces the reply to start a JSON object
            messages.append({"role": "assistant", "content": "{"})

        response = await self._create(
            model=self.model_for(model_tier),
            system=system_prompt,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        text = _reply_text(response)

        if not json_mode:
            return text
        return parse_json_reply("{" + text)

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
        model = self.model_for(model_tier)

        async def send_turn(messages: List[Dict[str, Any]]) -> AssistantTurn:
            response = await self._create(
                model=model,
                system=system_prompt,
                messages=list(messages),
                tools=tools,
                tool_choice={"type": "any"},
                max_tokens=max_tokens,
                temperature=temperature,
            )
            return _to_turn(response)

        negotiation = ToolNegotiation(send_turn, tool_handler, max_turns=max_turns)
        return await negotiation.run(user_message)
