"""Streaming SSE chat client for GLM-4.6 with conversation history."""

from glmchat.config import ClientConfig, load_config
from glmchat.errors import (
    ConfigError,
    DecodeError,
    DispatchError,
    GLMChatError,
    OptionError,
    StreamError,
    StreamTimeoutError,
)
from glmchat.llm import (
    AsyncChatClient,
    EventStream,
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
from glmchat.types import ConversationTurn, Role, StreamEvent, ToolCall

__version__ = "0.1.0"

__all__ = [
    "AsyncChatClient",
    "ClientConfig",
    "ConfigError",
    "ConversationTurn",
    "DecodeError",
    "DispatchError",
    "EventStream",
    "GLMChatError",
    "OptionError",
    "Role",
    "StreamError",
    "StreamEvent",
    "StreamTimeoutError",
    "ToolCall",
    "load_config",
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
