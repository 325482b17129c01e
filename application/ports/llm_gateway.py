"""
LLM Gateway Interface (Port) and its value types.

The gateway is the only component that knows about the language-model vendor.
Callers select a capability tier (ModelTier), never a vendor model name, and
choose how the response text is decoded (RawJson or PrefilledJson).

Tool use is an iterative protocol: the model may request a tool, the caller's
handler answers with Continue(result) to feed the result back to the model or
with Stop(value) to end the exchange with a final value.
"""
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, Optional, Protocol, Sequence, TypeVar, Union

T = TypeVar("T")


class ModelTier(str, Enum):
    """Capability/cost class of model used for a call."""

    FAST = "fast"  # low cost: classification, validation
    STRONG = "strong"  # high capability: extraction, repair


# =============================================================================
# Response decoding strategies
# =============================================================================


def extract_json_object(text: str) -> Any:
    """
    Parse the first balanced JSON object in ``text``.

    Braces inside string literals are ignored. Trailing text after the object
    (commentary, a closing code fence) is discarded.

    Raises:
        ValueError: If no complete object is present or it is not valid JSON
    """
    start = text.find("{")
    if start == -1:
        raise ValueError("No JSON object found in response")

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
                return json.loads(text[start:index + 1])

    raise ValueError("Unterminated JSON object in response")


@dataclass(frozen=True)
class RawJson:
    """The model returns a complete JSON document, possibly wrapped in prose."""

    def decode(self, text: str) -> Any:
        stripped = text.strip()
        try:
            return json.loads(stripped)
        except ValueError:
            return extract_json_object(stripped)


@dataclass(frozen=True)
class PrefilledJson:
    """
    The assistant turn is pre-filled with ``prefill`` and the model continues it.

    The provider's text is a continuation of the already-open JSON, so the
    prefill is re-attached before parsing.
    """

    prefill: str = "{"

    def decode(self, text: str) -> Any:
        return extract_json_object(self.prefill + text)


ResponseDecoding = Union[RawJson, PrefilledJson]


# =============================================================================
# Call results
# =============================================================================


@dataclass
class TokenUsage:
    """Token counts for one call or a chain of calls."""
    input_tokens: int = 0
    output_tokens: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class LLMResponse(Generic[T]):
    """Decoded content plus usage. ``raw`` is the provider response object."""
    content: T
    usage: TokenUsage = field(default_factory=TokenUsage)
    raw: Any = None


# =============================================================================
# Tool use
# =============================================================================


@dataclass(frozen=True)
class ToolSpec:
    """A tool the model may invoke, described by a JSON schema."""
    name: str
    description: str
    input_schema: Dict[str, Any]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }


@dataclass(frozen=True)
class Continue:
    """Feed ``result`` back to the model and keep going."""
    result: Any
    is_error: bool = False


@dataclass(frozen=True)
class Stop:
    """End the tool-use exchange; ``value`` becomes the response content."""
    value: Any


ToolOutcome = Union[Continue, Stop]
ToolHandler = Callable[[str, Dict[str, Any]], ToolOutcome]


class LLMGateway(Protocol):
    """Uniform call interface to the language-model provider."""

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
        """
        Make one model call.

        Args:
            system_prompt: System instructions
            user_message: User turn (sanitized text wrapped in delimiter tags)
            tier: Model tier to use
            temperature: Sampling temperature (gateway default when None)
            max_tokens: Output token cap (gateway default when None)
            decoding: JSON decoding strategy; None returns the raw text

        Returns:
            LLMResponse with decoded content and token usage

        Raises:
            LLMCallError: Transport or provider failure
            LLMResponseParseError: ``decoding`` was given and the text is not JSON
        """
        ...

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
        """
        Run the tool-use round-trip protocol.

        The gateway calls ``handler(tool_name, tool_input)`` for every tool the
        model requests and feeds Continue results back, until the model stops
        requesting tools (content is its final text) or the handler returns
        Stop. A Stop ends the exchange once every tool of that round has run;
        content is the first Stop value. Usage is cumulative across all round
        trips.

        Raises:
            LLMCallError: Transport failure or the round-trip limit was exceeded
        """
        ...
