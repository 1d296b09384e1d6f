"""Exception hierarchy for glmchat.

- ``OptionError``: an option was constructed with an invalid value.
- ``DispatchError``: the request never produced a stream.
- ``StreamError``: a failure after the stream was handed out; these are
  delivered in-band as the last ``StreamEvent.error`` of a call.
"""

from __future__ import annotations


class GLMChatError(Exception):
    """Base class for all glmchat errors."""


class OptionError(GLMChatError, ValueError):
    """Invalid value passed to an option constructor."""


class ConfigError(GLMChatError):
    """Configuration file could not be parsed or validated."""


class DispatchError(GLMChatError):
    """Request could not be dispatched (serialisation, transport, status)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class StreamError(GLMChatError):
    """Failure while reading an already established stream."""


class DecodeError(StreamError):
    """Frame payload was not valid JSON or had a malformed tool call."""

    def __init__(self, message: str, data: str = ""):
        super().__init__(message)
        self.data = data


class StreamTimeoutError(StreamError):
    """Per-call deadline expired while the stream was being read."""
