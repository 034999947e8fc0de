"""AI client factory with Helicone integration support."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict

import httpx
from backend.settings import Settings, get_settings


logger = logging.getLogger(__name__)

# Helicone proxy URLs (private - implementation detail)
_HELICONE_OPENAI_BASE_URL = "https://oai.helicone.ai/v1"
_HELICONE_ANTHROPIC_BASE_URL = "https://anthropic.helicone.ai"

# Default client timeout
DEFAULT_TIMEOUT = 60.0

# Header name validation pattern (RFC 7230)
_VALID_HEADER_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\-]+$")


def _create_async_httpx_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """
    Create the async httpx client used for proxied requests.

    Debug logging is left off so proxy auth headers never reach the logs.

    Args:
        timeout: Request timeout in seconds

    Returns:
        Configured httpx.AsyncClient instance
    """
    return httpx.AsyncClient(
        timeout=timeout,
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
    )


def _sanitize_header_value(value: str) -> str:
    """
    Sanitize a header value to prevent header injection.

    Keeps only printable ASCII characters.
    """
    return "".join(char for char in value if char.isprintable() and ord(char) < 128)


def _sanitize_header_name(name: str) -> str:
    """
    Sanitize a header name to ensure it only contains valid characters.

    Returns:
        Sanitized header name, or empty string if invalid
    """
    sanitized = name.replace("_", "-").title()
    if _VALID_HEADER_NAME_PATTERN.match(sanitized):
        return sanitized
    return ""


@dataclass
class AIRequestContext:
    """Context for AI requests, used for tracking and observability."""

    user_id: str | None = None
    feature_name: str | None = None
    request_id: str | None = None
    custom_properties: Dict[str, str] = field(default_factory=dict)

    def to_tracking_headers(self, environment: str | None = None) -> Dict[str, str]:
        """Convert context to provider-specific tracking headers.

        Currently generates Helicone headers. Header values are sanitized to
        prevent header injection attacks.
        """
        headers: Dict[str, str] = {}

        if self.user_id:
            headers["Helicone-User-Id"] = _sanitize_header_value(self.user_id)

        if self.feature_name:
            headers["Helicone-Property-Feature"] = _sanitize_header_value(self.feature_name)

        if self.request_id:
            headers["Helicone-Request-Id"] = _sanitize_header_value(self.request_id)

        # Environment for filtering in the Helicone dashboard
        headers["Helicone-Property-Environment"] = _sanitize_header_value(environment or get_settings().environment)

        for key, value in self.custom_properties.items():
            header_name = _sanitize_header_name(key)
            if header_name:
                headers[f"Helicone-Property-{header_name}"] = _sanitize_header_value(str(value))

        return headers


def _client_kwargs(
    api_key: str,
    proxy_base_url: str,
    provider: str,
    context: AIRequestContext | None,
    timeout: float,
    settings: Settings,
) -> Dict[str, Any]:
    """Build constructor kwargs, routing through Helicone when enabled."""
    client_kwargs: Dict[str, Any] = {
        "api_key": api_key,
        "timeout": timeout,
        # No SDK-level retries; a failed call surfaces as UpstreamServiceError
        "max_retries": 0,
    }

    if not settings.helicone_enabled:
        logger.debug(f"Creating {provider} client (direct)")
        return client_kwargs

    if not settings.helicone_api_key:
        logger.warning(
            "helicone_enabled=true but helicone_api_key not set. "
            f"Falling back to direct {provider} API calls."
        )
        return client_kwargs

    default_headers = {"Helicone-Auth": f"Bearer {settings.helicone_api_key}"}
    if context:
        default_headers.update(context.to_tracking_headers(settings.environment))

    client_kwargs["base_url"] = proxy_base_url
    client_kwargs["default_headers"] = default_headers
    client_kwargs["http_client"] = _create_async_httpx_client(timeout)
    logger.debug(f"Creating {provider} client with Helicone proxy")
    return client_kwargs


class AIClientFactory:
    """Factory for creating async AI clients with optional Helicone integration."""

    @staticmethod
    def create_openai_client(
        context: AIRequestContext | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        settings: Settings | None = None,
    ) -> Any:
        """
        Create an AsyncOpenAI client, optionally proxied through Helicone.

        Args:
            context: Request context for tracking and observability
            timeout: Client timeout in seconds
            settings: Settings to read keys from (defaults to get_settings())

        Returns:
            openai.AsyncOpenAI instance

        Raises:
            ValueError: If the OpenAI API key is not configured
        """
        from openai import AsyncOpenAI

        settings = settings or get_settings()
        api_key = settings.openai_api_key
        if not api_key:
            raise ValueError("OpenAI API key not configured. Set OPENAI_API_KEY environment variable.")

        return AsyncOpenAI(
            **_client_kwargs(api_key, _HELICONE_OPENAI_BASE_URL, "OpenAI", context, timeout, settings)
        )

    @staticmethod
    def create_anthropic_client(
        context: AIRequestContext | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        settings: Settings | None = None,
    ) -> Any:
        """
        Create an AsyncAnthropic client, optionally proxied through Helicone.

        Args:
            context: Request context for tracking and observability
            timeout: Client timeout in seconds
            settings: Settings to read keys from (defaults to get_settings())

        Returns:
            anthropic.AsyncAnthropic instance

        Raises:
            ValueError: If the Anthropic API key is not configured
        """
        from anthropic import AsyncAnthropic

        settings = settings or get_settings()
        api_key = settings.anthropic_api_key
        if not api_key:
            raise ValueError("Anthropic API key not configured. Set ANTHROPIC_API_KEY environment variable.")

        return AsyncAnthropic(
            **_client_kwargs(api_key, _HELICONE_ANTHROPIC_BASE_URL, "Anthropic", context, timeout, settings)
        )
