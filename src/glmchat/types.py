"""Shared data types for glmchat.

Wire models are pydantic so the request body can be produced with
``model_dump(by_alias=True, exclude_none=True)``; the stream event is a
plain dataclass mirroring the loosely-typed upstream payload.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer


# ---------------------------------------------------------------------------
# Conversation types
# ---------------------------------------------------------------------------

class Role(str, enum.Enum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolCallFunction(BaseModel):
    """Function half of a tool call.  ``arguments`` is never parsed."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: str = ""


class ToolCall(BaseModel):
    """One tool-call fragment as streamed by the model."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    type: str = ""
    index: int = 0
    function: ToolCallFunction | None = None


class ConversationTurn(BaseModel):
    """A single entry of the conversation log."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    role: Role
    content: str | None = None
    file_content_list: tuple[Any, ...] | None = Field(
        default=None, serialization_alias="fileContentList",
    )
    tool_calls: tuple[ToolCall, ...] = Field(
        default=(), serialization_alias="toolCalls",
    )

    @classmethod
    def user(cls, content: str) -> ConversationTurn:
        return cls(role=Role.USER, content=content, file_content_list=())

    @classmethod
    def assistant(
        cls, content: str | None, tool_calls: list[ToolCall] | None = None,
    ) -> ConversationTurn:
        return cls(
            role=Role.ASSISTANT,
            content=content or None,
            tool_calls=tuple(tool_calls or ()),
        )

    @classmethod
    def tool(cls, content: str) -> ConversationTurn:
        return cls(role=Role.TOOL, content=content)

    def to_wire(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        if not data.get("content"):
            data.pop("content", None)
        if not data.get("fileContentList"):
            data.pop("fileContentList", None)
        if not data.get("toolCalls"):
            data.pop("toolCalls", None)
        return data


# ---------------------------------------------------------------------------
# Tool declarations
# ---------------------------------------------------------------------------

class FunctionSpec(BaseModel):
    """A callable function the model may request."""

    name: str
    description: str | None = None
    parameters: dict[str, Any] | None = None


class WebSearch(BaseModel):
    """Web search settings attached to a ``web_search`` tool."""

    search_engine: str = "search_std"
    search_recency_filter: str = "noLimit"
    count: int = 10
    search_intent: bool = False
    search_domain_filter: str | None = None
    content_size: str = "medium"


class Tool(BaseModel):
    """Tool declaration: either a function or a web search."""

    type: str
    function: FunctionSpec | None = None
    web_search: WebSearch | None = None


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

class Thinking(BaseModel):
    type: str = "enabled"


class ChatRequest(BaseModel):
    """Everything sent to the endpoint for one call."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model: str
    model_id: int = Field(serialization_alias="modelId")
    prompt: list[ConversationTurn] = Field(default_factory=list)
    stream: bool = True
    thinking: Thinking | None = Field(default_factory=Thinking)
    max_tokens: int
    temperature: float
    top_p: float
    system_prompt: str | None = None
    tools: list[Tool] = Field(default_factory=list)

    @field_serializer("prompt")
    def _serialize_prompt(self, prompt: list[ConversationTurn]) -> list[dict[str, Any]]:
        return [turn.to_wire() for turn in prompt]

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the transport."""
        payload = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        if not payload.get("tools"):
            payload.pop("tools", None)
        if not payload.get("system_prompt"):
            payload.pop("system_prompt", None)
        return payload


# ---------------------------------------------------------------------------
# Stream events
# ---------------------------------------------------------------------------

@dataclass
class StreamEvent:
    """One decoded unit of the response stream.

    Usually exactly one of ``think``, ``text``, ``tool_call`` or ``error``
    is meaningful, but nothing enforces it; check them all.
    """

    event: str = ""
    think: str = ""
    text: str = ""
    tool_call: ToolCall | None = None
    raw: dict[str, Any] = field(default_factory=dict)
    error: Exception | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None
