"""
Process-wide token usage accounting.

The LLM gateway records the usage of every completed call (or tool-use chain)
here. The counter is shared across concurrent requests, so updates take a lock.

Per-request usage comes from ``track()``: inside the ``with`` block every
usage recorded from the same execution context (thread or task) is also added
to the returned scope, so concurrent requests never see each other's tokens.
"""
import logging
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, List, Optional

from application.ports import TokenUsage

logger = logging.getLogger(__name__)


class UsageScope:
    """Token usage recorded while one ``track()`` block is active."""

    def __init__(self) -> None:
        self.input_tokens = 0
        self.output_tokens = 0
        self.calls = 0

    def add(self, input_tokens: int, output_tokens: int) -> None:
        self.input_tokens += input_tokens
        self.output_tokens += output_tokens
        self.calls += 1

    @property
    def usage(self) -> TokenUsage:
        return TokenUsage(input_tokens=self.input_tokens, output_tokens=self.output_tokens)


class TokenUsageCounter:
    """Accumulates input/output token counts."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._input_tokens = 0
        self._output_tokens = 0
        self._calls = 0
        self._scopes: ContextVar[Optional[List[UsageScope]]] = ContextVar(
            f"token_usage_scopes_{id(self)}", default=None
        )

    def increment(self, input_tokens: int, output_tokens: int) -> None:
        with self._lock:
            self._input_tokens += input_tokens
            self._output_tokens += output_tokens
            self._calls += 1
        for scope in self._scopes.get() or ():
            scope.add(input_tokens, output_tokens)

    def record(self, usage: TokenUsage) -> None:
        self.increment(usage.input_tokens, usage.output_tokens)

    @contextmanager
    def track(self) -> Iterator[UsageScope]:
        """Collect the usage recorded by the current context until the block exits."""
        scope = UsageScope()
        token = self._scopes.set([*(self._scopes.get() or ()), scope])
        try:
            yield scope
        finally:
            self._scopes.reset(token)

    def get_usage(self) -> TokenUsage:
        with self._lock:
            return TokenUsage(
                input_tokens=self._input_tokens,
                output_tokens=self._output_tokens,
            )

    @property
    def call_count(self) -> int:
        return self._calls

    def reset(self) -> None:
        with self._lock:
            logger.debug(
                f"Resetting token usage (input={self._input_tokens}, "
                f"output={self._output_tokens}, calls={self._calls})"
            )
            self._input_tokens = 0
            self._output_tokens = 0
            self._calls = 0
