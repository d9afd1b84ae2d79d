"""Token usage and cost tracking for model requests."""

from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass, field

from mcphost.styles import Style
from mcphost.theme import get_theme

_PER_MILLION = 1_000_000


@dataclass(frozen=True)
class Cost:
    """Price per million tokens."""

    input: float = 0.0
    output: float = 0.0
    cache_read: float | None = None
    cache_write: float | None = None


@dataclass(frozen=True)
class Limit:
    """Token limits of a model."""

    context: int = 0
    output: int = 0


@dataclass(frozen=True)
class ModelInfo:
    """The pricing and limits of one model."""

    id: str = ""
    name: str = ""
    cost: Cost = field(default_factory=Cost)
    limit: Limit = field(default_factory=Limit)


@dataclass
class UsageStats:
    """Tokens and costs of a single request."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_write_tokens: int = 0
    input_cost: float = 0.0
    output_cost: float = 0.0
    cache_read_cost: float = 0.0
    cache_write_cost: float = 0.0
    total_cost: float = 0.0


@dataclass
class SessionStats:
    """Totals over a whole session."""

    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cache_read_tokens: int = 0
    total_cache_write_tokens: int = 0
    total_cost: float = 0.0
    request_count: int = 0


def estimate_tokens(text: str) -> int:
    """Rough token count: about four bytes of text per token."""
    return len(text.encode("utf-8")) // 4


class UsageTracker:
    """Accumulates token usage and cost for one model.

    With OAuth credentials every cost is recorded as zero.
    """

    def __init__(
        self, model_info: ModelInfo, provider: str, width: int = 80, is_oauth: bool = False
    ) -> None:
        self.model_info = model_info
        self.provider = provider
        self.width = width
        self.is_oauth = is_oauth
        self._lock = threading.RLock()
        self._session = SessionStats()
        self._last: UsageStats | None = None

    def update_usage(
        self,
        input_tokens: int,
        output_tokens: int,
        cache_read_tokens: int = 0,
        cache_write_tokens: int = 0,
    ) -> None:
        """Record one request and add it to the session totals."""
        input_cost = output_cost = cache_read_cost = cache_write_cost = total_cost = 0.0
        if not self.is_oauth:
            cost = self.model_info.cost
            input_cost = input_tokens * cost.input / _PER_MILLION
            output_cost = output_tokens * cost.output / _PER_MILLION
            if cost.cache_read is not None:
                cache_read_cost = cache_read_tokens * cost.cache_read / _PER_MILLION
            if cost.cache_write is not None:
                cache_write_cost = cache_write_tokens * cost.cache_write / _PER_MILLION
            total_cost = input_cost + output_cost + cache_read_cost + cache_write_cost

        with self._lock:
            self._last = UsageStats(
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                cache_read_tokens=cache_read_tokens,
                cache_write_tokens=cache_write_tokens,
                input_cost=input_cost,
                output_cost=output_cost,
                cache_read_cost=cache_read_cost,
                cache_write_cost=cache_write_cost,
                total_cost=total_cost,
            )
            session = self._session
            session.total_input_tokens += input_tokens
            session.total_output_tokens += output_tokens
            session.total_cache_read_tokens += cache_read_tokens
            session.total_cache_write_tokens += cache_write_tokens
            session.total_cost += total_cost
            session.request_count += 1

    def estimate_and_update_usage(self, input_text: str, output_text: str) -> None:
        """Record a request whose token counts are estimated from its text."""
        self.update_usage(estimate_tokens(input_text), estimate_tokens(output_text), 0, 0)

    def render_usage_info(self) -> str:
        """One styled line with session tokens, context share and cost."""
        with self._lock:
            session = dataclasses.replace(self._session)

        theme = get_theme()
        total_tokens = session.total_input_tokens + session.total_output_tokens
        if total_tokens >= 1_000_000:
            token_text = f"{total_tokens / 1_000_000:.1f}M"
        elif total_tokens >= 1000:
            token_text = f"{total_tokens / 1000:.1f}K"
        else:
            token_text = str(total_tokens)

        percentage_text = ""
        context = self.model_info.limit.context
        if context > 0:
            percentage = total_tokens / context * 100
            if percentage >= 80:
                color = theme.error
            elif percentage >= 60:
                color = theme.warning
            else:
                color = theme.success
            percentage_text = Style(foreground=color).render(f" ({percentage:.0f}%)")

        cost_value = "$0.00" if self.is_oauth else f"${session.total_cost:.4f}"
        cost_text = Style(foreground=theme.primary).render(cost_value)
        tokens_label = Style(foreground=theme.muted).render("Tokens: ")
        tokens_value = Style(foreground=theme.text, bold=True).render(token_text)
        cost_label = Style(foreground=theme.muted).render(" | Cost: ")
        return f"{tokens_label}{tokens_value}{percentage_text}{cost_label}{cost_text}\n"

    def session_stats(self) -> SessionStats:
        """A copy of the session totals."""
        with self._lock:
            return dataclasses.replace(self._session)

    def last_request_stats(self) -> UsageStats | None:
        """A copy of the last request's stats, or None before any request."""
        with self._lock:
            return None if self._last is None else dataclasses.replace(self._last)

    def reset(self) -> None:
        """Forget all recorded usage."""
        with self._lock:
            self._session = SessionStats()
            self._last = None