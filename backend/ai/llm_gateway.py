"""
Anthropic implementation of the LLMGateway port.

This is the only module that maps model tiers to vendor model ids and that
speaks the vendor's message format. JSON decoding is delegated to the
ResponseDecoding strategy passed by the caller; PrefilledJson additionally
pre-fills the assistant turn.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import anthropic

from application.exceptions import LLMCallError, LLMResponseParseError
from application.ports import (
    Continue,
    LLMResponse,
    ModelTier,
    PrefilledJson,
    ResponseDecoding,
    Stop,
    TokenUsage,
    ToolHandler,
    ToolOutcome,
    ToolSpec,
)
from backend.ai.client_factory import AIClientFactory, AIRequestContext
from backend.services.token_counter import TokenUsageCounter
from backend.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _usage_of(response: Any) -> TokenUsage:
    usage = getattr(response, "usage", None)
    if usage is None:
        return TokenUsage()
    return TokenUsage(
        input_tokens=getattr(usage, "input_tokens", 0) or 0,
        output_tokens=getattr(usage, "output_tokens", 0) or 0,
    )


def _text_of(response: Any) -> Optional[str]:
    """Concatenated text blocks of a response, or None if it has none."""
    texts = [
        block.text
        for block in response.content
        if getattr(block, "type", None) == "text"
    ]
    if not texts:
        return None
    return "".join(texts)


def _tool_uses_of(response: Any) -> List[Any]:
    return [block for block in response.content if getattr(block, "type", None) == "tool_use"]


class AnthropicLLMGateway:
    """
    LLMGateway backed by the Anthropic Messages API.

    Usage:
        gateway = AnthropicLLMGateway(settings=get_settings())
        response = gateway.call(
            "You are a classifier.",
            "Validate the following text: ...",
            ModelTier.FAST,
            decoding=PrefilledJson(),
        )
        response.content  # -> dict
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        settings: Optional[Settings] = None,
        usage_counter: Optional[TokenUsageCounter] = None,
        context: Optional[AIRequestContext] = None,
    ):
        """
        Initialize the gateway.

        Args:
            client: Anthropic client (created lazily from settings when None)
            settings: Settings for model ids and call defaults
            usage_counter: Optional process-wide usage accumulator
            context: Tracking context forwarded to the client factory
        """
        self._settings = settings or get_settings()
        self._client = client
        self._usage_counter = usage_counter
        self._context = context
        self._model_ids: Dict[ModelTier, str] = {
            ModelTier.FAST: self._settings.fast_model_id,
            ModelTier.STRONG: self._settings.strong_model_id,
        }

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = AIClientFactory.create_anthropic_client(
                settings=self._settings,
                context=self._context,
            )
        return self._client

    def model_for(self, tier: ModelTier) -> str:
        return self._model_ids[tier]

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _create(
        self,
        tier: ModelTier,
        system_prompt: str,
        messages: List[Dict[str, Any]],
        temperature: Optional[float],
        max_tokens: Optional[int],
        **extra: Any,
    ) -> Any:
        model = self.model_for(tier)
        try:
            return self.client.messages.create(
                model=model,
                max_tokens=max_tokens or self._settings.llm_default_max_tokens,
                temperature=(
                    self._settings.llm_default_temperature
                    if temperature is None
                    else temperature
                ),
                system=system_prompt,
                messages=messages,
                **extra,
            )
        except anthropic.APIError as e:
            logger.error(f"Model call failed (tier={tier.value}, model={model}): {e}")
            raise LLMCallError(f"Language model call failed: {e}") from e

    def _record(self, tier: ModelTier, usage: TokenUsage) -> None:
        logger.debug(
            f"Model usage tier={tier.value} input={usage.input_tokens} output={usage.output_tokens}"
        )
        if self._usage_counter is not None:
            self._usage_counter.record(usage)

    # -------------------------------------------------------------------------
    # LLMGateway Interface
    # -------------------------------------------------------------------------

    def call(
        self,
        system_prompt: str,
        user_message: str,
        tier: ModelTier,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        decoding: Optional[ResponseDecoding] = None,
    ) -> LLMResponse[Any]:
        messages: List[Dict[str, Any]] = [{"role": "user", "content": user_message}]
        if isinstance(decoding, PrefilledJson):
            messages.append({"role": "assistant", "content": decoding.prefill})

        response = self._create(tier, system_prompt, messages, temperature, max_tokens)
        usage = _usage_of(response)
        self._record(tier, usage)

        text = _text_of(response)
        if decoding is None:
            # Non-text responses (e.g. a lone tool_use block) are returned as-is
            content: Any = text if text is not None else response.content
            return LLMResponse(content=content, usage=usage, raw=response)

        if text is None:
            raise LLMResponseParseError("Model response contained no text to decode")
        try:
            content = decoding.decode(text)
        except ValueError as e:
            logger.warning(f"Failed to decode model response as JSON: {e}")
            raise LLMResponseParseError(
                f"Model response is not valid JSON: {e}", raw_text=text
            ) from e
        return LLMResponse(content=content, usage=usage, raw=response)

    def call_with_tools(
        self,
        system_prompt: str,
        user_message: str,
        tools: Sequence[ToolSpec],
        handler: ToolHandler,
        tier: ModelTier,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        require_tool: bool = False,
    ) -> LLMResponse[Any]:
        messages: List[Dict[str, Any]] = [{"role": "user", "content": user_message}]
        extra: Dict[str, Any] = {"tools": [tool.as_dict() for tool in tools]}
        if require_tool:
            extra["tool_choice"] = {"type": "any"}

        usage = TokenUsage()
        max_rounds = self._settings.llm_max_tool_rounds

        for round_number in range(1, max_rounds + 1):
            response = self._create(
                tier, system_prompt, messages, temperature, max_tokens, **extra
            )
            usage = usage + _usage_of(response)

            tool_uses = _tool_uses_of(response)
            if response.stop_reason != "tool_use" or not tool_uses:
                self._record(tier, usage)
                return LLMResponse(content=_text_of(response), usage=usage, raw=response)

            messages.append({"role": "assistant", "content": response.content})

            # Every tool in the round runs; the first Stop decides the final value
            stop: Optional[Stop] = None
            tool_results: List[Dict[str, Any]] = []
            for tool_use in tool_uses:
                outcome = self._run_handler(handler, tool_use.name, tool_use.input)
                if isinstance(outcome, Stop):
                    logger.debug(f"Tool {tool_use.name} stopped the exchange in round {round_number}")
                    if stop is None:
                        stop = outcome
                    continue

                result_block: Dict[str, Any] = {
                    "type": "tool_result",
                    "tool_use_id": tool_use.id,
                    "content": (
                        outcome.result
                        if isinstance(outcome.result, str)
                        else json.dumps(outcome.result, default=str)
                    ),
                }
                if outcome.is_error:
                    result_block["is_error"] = True
                tool_results.append(result_block)

            if stop is not None:
                self._record(tier, usage)
                return LLMResponse(content=stop.value, usage=usage, raw=response)

            messages.append({"role": "user", "content": tool_results})

        self._record(tier, usage)
        raise LLMCallError(f"Tool-use exchange exceeded {max_rounds} round trips")

    @staticmethod
    def _run_handler(handler: ToolHandler, name: str, tool_input: Dict[str, Any]) -> ToolOutcome:
        """Run the handler; a handler failure is reported back to the model as a tool error."""
        try:
            return handler(name, tool_input)
        except Exception as e:
            logger.warning(f"Tool handler for {name} failed: {e}")
            return Continue(result={"error": str(e)}, is_error=True)
