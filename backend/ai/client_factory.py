"""Anthropic client factory with optional Helicone proxy support."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict

import httpx
from anthropic import Anthropic

from backend.settings import Settings, get_settings


logger = logging.getLogger(__name__)

# Helicone proxy URL (private - implementation detail)
_HELICONE_ANTHROPIC_BASE_URL = "https://anthropic.helicone.ai"

# Header name validation pattern (RFC 7230)
_VALID_HEADER_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\-]+$")


def _create_httpx_client(timeout: float) -> httpx.Client:
    """
    Create the httpx client used when proxying through Helicone.

    Debug logging is left off so proxy auth headers never reach the logs.
    """
    return httpx.Client(
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
    """Normalize a header name, or return "" if it contains invalid characters."""
    sanitized = name.replace("_", "-").title()
    if _VALID_HEADER_NAME_PATTERN.match(sanitized):
        return sanitized
    return ""


@dataclass
class AIRequestContext:
    """Context for model requests, used for tracking and observability."""

    user_id: str | None = None
    feature_name: str | None = None
    request_id: str | None = None
    environment: str | None = None
    custom_properties: Dict[str, str] = field(default_factory=dict)

    def to_tracking_headers(self) -> Dict[str, str]:
        """Convert context to Helicone tracking headers (values sanitized)."""
        headers: Dict[str, str] = {}

        if self.user_id:
            headers["Helicone-User-Id"] = _sanitize_header_value(self.user_id)

        if self.feature_name:
            headers["Helicone-Property-Feature"] = _sanitize_header_value(self.feature_name)

        if self.request_id:
            headers["Helicone-Request-Id"] = _sanitize_header_value(self.request_id)

        environment = self.environment or get_settings().environment
        headers["Helicone-Property-Environment"] = _sanitize_header_value(environment)

        for key, value in self.custom_properties.items():
            header_name = _sanitize_header_name(key)
            if header_name:
                headers[f"Helicone-Property-{header_name}"] = _sanitize_header_value(str(value))

        return headers


class AIClientFactory:
    """Factory for creating Anthropic clients with optional Helicone integration."""

    @staticmethod
    def create_anthropic_client(
        settings: Settings | None = None,
        context: AIRequestContext | None = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Create an Anthropic client, optionally proxied through Helicone.

        Args:
            settings: Settings to read credentials from (defaults to get_settings())
            context: Request context for tracking and observability
            timeout: Client timeout in seconds (defaults to llm_timeout_seconds)

        Returns:
            Anthropic client instance

        Raises:
            ValueError: If the API key is not configured
        """
        settings = settings or get_settings()
        timeout = timeout or settings.llm_timeout_seconds

        if not settings.anthropic_api_key:
            raise ValueError("Anthropic API key not configured. Set ANTHROPIC_API_KEY environment variable.")

        client_kwargs: Dict[str, Any] = {
            "api_key": settings.anthropic_api_key,
            "timeout": timeout,
        }

        if settings.helicone_enabled:
            if not settings.helicone_api_key:
                logger.warning(
                    "helicone_enabled=true but helicone_api_key not set. "
                    "Falling back to direct Anthropic API calls."
                )
            else:
                client_kwargs["base_url"] = _HELICONE_ANTHROPIC_BASE_URL

                default_headers = {
                    "Helicone-Auth": f"Bearer {settings.helicone_api_key}",
                }
                if context:
                    if context.environment is None:
                        context.environment = settings.environment
                    default_headers.update(context.to_tracking_headers())

                client_kwargs["default_headers"] = default_headers
                client_kwargs["http_client"] = _create_httpx_client(timeout)

                logger.debug("Creating Anthropic client with Helicone proxy")
                return Anthropic(**client_kwargs)

        logger.debug("Creating Anthropic client (direct)")
        return Anthropic(**client_kwargs)
