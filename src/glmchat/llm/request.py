"""Assemble a :class:`ChatRequest` from content, options and history."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from glmchat.config import ClientConfig
from glmchat.llm.options import Option
from glmchat.types import ChatRequest, ConversationTurn, Thinking


def build_request(
    content: str,
    options: Iterable[Option] = (),
    config: ClientConfig | None = None,
    history: Sequence[ConversationTurn] | None = None,
) -> ChatRequest:
    """Build the request for a single call.

    The prompt holds one fresh user turn with *content* (possibly empty).
    When *history* is given the prompt is replaced wholesale by it; the
    caller passes a snapshot that already includes the new user turn.
    """
    config = config or ClientConfig()
    req = ChatRequest(
        model=config.model,
        model_id=config.model_id,
        prompt=[ConversationTurn.user(content)],
        stream=True,
        thinking=Thinking(type="enabled"),
        max_tokens=config.max_tokens,
        temperature=config.temperature,
        top_p=config.top_p,
    )

    for opt in options:
        opt(req)

    if history is not None:
        req.prompt = list(history)
    # Streaming cannot be switched off by an option.
    req.stream = True
    return req
