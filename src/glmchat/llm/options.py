"""Composable request options.

Every ``with_*`` factory validates its argument as soon as it is called
and raises :class:`OptionError` on bad input, so an invalid configuration
never reaches the network.  The returned closure only applies the already
validated value to a :class:`ChatRequest` (or :class:`WebSearch`).

Usage::

    stream = await client.chat(
        "Latest tech news",
        with_temperature(0.7),
        with_web_search(with_search_recency("oneDay"), with_search_count(5)),
    )
"""

from __future__ import annotations

from typing import Any, Callable

from glmchat.errors import OptionError
from glmchat.types import ChatRequest, FunctionSpec, Thinking, Tool, WebSearch

Option = Callable[[ChatRequest], None]
WebSearchOption = Callable[[WebSearch], None]

RECENCY_FILTERS = ("noLimit", "oneDay", "oneWeek")
CONTENT_SIZES = ("low", "medium", "high")

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
MIN_SEARCH_COUNT = 1
MAX_SEARCH_COUNT = 100


def _require_number(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OptionError(f"{name} must be a number, got: {value!r}")


# ---------------------------------------------------------------------------
# Request options
# ---------------------------------------------------------------------------

def with_system_prompt(prompt: str) -> Option:
    """Set the system prompt that defines the assistant's behaviour."""

    def _apply(req: ChatRequest) -> None:
        req.system_prompt = prompt

    return _apply


def with_temperature(temperature: float) -> Option:
    """Set the sampling temperature (0.0 to 2.0, default 1.0)."""
    _require_number("temperature", temperature)
    if not MIN_TEMPERATURE <= temperature <= MAX_TEMPERATURE:
        raise OptionError(
            f"temperature must be between {MIN_TEMPERATURE} and "
            f"{MAX_TEMPERATURE}, got: {temperature:.2f}"
        )
    value = float(temperature)

    def _apply(req: ChatRequest) -> None:
        req.temperature = value

    return _apply


def with_max_tokens(tokens: int) -> Option:
    """Cap the response length.  Must be greater than 0."""
    if isinstance(tokens, bool) or not isinstance(tokens, int):
        raise OptionError(f"max_tokens must be an integer, got: {tokens!r}")
    if tokens <= 0:
        raise OptionError(f"max_tokens must be greater than 0, got: {tokens}")

    def _apply(req: ChatRequest) -> None:
        req.max_tokens = tokens

    return _apply


def with_top_p(top_p: float) -> Option:
    """Set nucleus sampling probability mass, in (0.0, 1.0]."""
    _require_number("top_p", top_p)
    if not 0.0 < top_p <= 1.0:
        raise OptionError(f"top_p must be in (0.0, 1.0], got: {top_p:.2f}")
    value = float(top_p)

    def _apply(req: ChatRequest) -> None:
        req.top_p = value

    return _apply


def with_thinking(enabled: bool) -> Option:
    """Toggle thinking mode.  Disabling removes the block entirely."""

    def _apply(req: ChatRequest) -> None:
        req.thinking = Thinking(type="enabled") if enabled else None

    return _apply


def with_function(
    name: str,
    description: str,
    parameters: dict[str, Any] | None = None,
) -> Option:
    """Declare a function the model may call.

    *parameters* is a JSON-schema-shaped mapping passed through as is.
    Each application appends a new tool entry.
    """

    def _apply(req: ChatRequest) -> None:
        req.tools.append(
            Tool(
                type="function",
                function=FunctionSpec(
                    name=name,
                    description=description or None,
                    parameters=parameters,
                ),
            )
        )

    return _apply


def with_web_search(*opts: WebSearchOption) -> Option:
    """Let the model search the web.  Each application appends a tool."""

    def _apply(req: ChatRequest) -> None:
        ws = WebSearch()
        for opt in opts:
            opt(ws)
        req.tools.append(Tool(type="web_search", web_search=ws))

    return _apply


# ---------------------------------------------------------------------------
# Web search options
# ---------------------------------------------------------------------------

def with_search_recency(recency: str) -> WebSearchOption:
    """Restrict results by age: ``noLimit``, ``oneDay`` or ``oneWeek``."""
    if recency not in RECENCY_FILTERS:
        raise OptionError(
            f"invalid search recency filter: {recency} "
            f"(valid: {', '.join(RECENCY_FILTERS)})"
        )

    def _apply(ws: WebSearch) -> None:
        ws.search_recency_filter = recency

    return _apply


def with_search_domain(domain: str) -> WebSearchOption:
    """Limit search to one domain, e.g. ``github.com``."""

    def _apply(ws: WebSearch) -> None:
        ws.search_domain_filter = domain

    return _apply


def with_search_intent(enabled: bool) -> WebSearchOption:
    def _apply(ws: WebSearch) -> None:
        ws.search_intent = enabled

    return _apply


def with_search_count(count: int) -> WebSearchOption:
    """Number of results to retrieve (1 to 100, default 10)."""
    if isinstance(count, bool) or not isinstance(count, int):
        raise OptionError(f"search count must be an integer, got: {count!r}")
    if not MIN_SEARCH_COUNT <= count <= MAX_SEARCH_COUNT:
        raise OptionError(
            f"search count must be between {MIN_SEARCH_COUNT} and "
            f"{MAX_SEARCH_COUNT}, got: {count}"
        )

    def _apply(ws: WebSearch) -> None:
        ws.count = count

    return _apply


def with_content_size(size: str) -> WebSearchOption:
    """Amount of content fetched per result: ``low``, ``medium``, ``high``."""
    if size not in CONTENT_SIZES:
        raise OptionError(
            f"invalid content size: {size} (valid: {', '.join(CONTENT_SIZES)})"
        )

    def _apply(ws: WebSearch) -> None:
        ws.content_size = size

    return _apply
