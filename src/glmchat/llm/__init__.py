"""Streaming client, request building and SSE decoding for glmchat."""

from glmchat.llm.client import AsyncChatClient
from glmchat.llm.decoder import decode_event
from glmchat.llm.options import (
    Option,
    WebSearchOption,
    with_content_size,
    with_function,
    with_max_tokens,
    with_search_count,
    with_search_domain,
    with_search_intent,
    with_search_recency,
    with_system_prompt,
    with_temperature,
    with_thinking,
    with_top_p,
    with_web_search,
)
from glmchat.llm.request import build_request
from glmchat.llm.sse import SSEFrame, SSEFrameParser, iter_frames
from glmchat.llm.stream import EventStream

__all__ = [
    "AsyncChatClient",
    "EventStream",
    "Option",
    "SSEFrame",
    "SSEFrameParser",
    "WebSearchOption",
    "build_request",
    "decode_event",
    "iter_frames",
    "with_content_size",
    "with_function",
    "with_max_tokens",
    "with_search_count",
    "with_search_domain",
    "with_search_intent",
    "with_search_recency",
    "with_system_prompt",
    "with_temperature",
    "with_thinking",
    "with_top_p",
    "with_web_search",
]
