"""Async streaming client for the GLM SSE endpoint.

``chat()`` is stateless.  ``chat_with_history()`` keeps the conversation
log, appending the user turn before dispatch and folding the streamed
response into one assistant turn once the stream completes cleanly.

Both return an :class:`EventStream` fed by a background task.  Failures
before the stream exists raise :class:`DispatchError`; everything after
that arrives as the final event of the stream.
"""

from __future__ import annotations

import asyncio
import json
import logging

import httpx

from glmchat.config import ClientConfig
from glmchat.errors import DispatchError, StreamError, StreamTimeoutError
from glmchat.history import ConversationHistory, TurnAccumulator
from glmchat.llm.decoder import decode_frame
from glmchat.llm.options import Option
from glmchat.llm.request import build_request
from glmchat.llm.sse import iter_frames
from glmchat.llm.stream import EventStream
from glmchat.types import ChatRequest, ConversationTurn, StreamEvent

_logger = logging.getLogger(__name__)

# Bytes of an error response body kept on DispatchError
_MAX_ERROR_BODY = 2000


class AsyncChatClient:
    """Streaming chat client with optional conversation history.

    Each instance owns its own history and HTTP client; instances share
    nothing.

    Parameters
    ----------
    config:
        Endpoint, defaults and header material.  Defaults to
        ``ClientConfig()``.
    http_client:
        Pre-built ``httpx.AsyncClient`` (e.g. with a mock transport).  A
        client passed in is not closed by :meth:`aclose`.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                self.config.timeout, connect=self.config.connect_timeout,
            ),
        )
        self._history = ConversationHistory()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def chat(
        self,
        content: str,
        *options: Option,
        timeout: float | None = None,
    ) -> EventStream:
        """Send a single message without touching the history.

        Example::

            stream = await client.chat("Hello!", with_temperature(0.7))
            async for event in stream:
                print(event.text, end="")
        """
        req = build_request(content, options, self.config)
        deadline = self._deadline(timeout)
        return await self._open_stream(req, deadline)

    async def chat_with_history(
        self,
        content: str,
        *options: Option,
        timeout: float | None = None,
    ) -> EventStream:
        """Send a message as part of the ongoing conversation.

        Pass an empty *content* to continue after :meth:`add_tool_response`.
        The user turn stays in the history even if dispatch fails.
        """
        snapshot = self._history.append_user(content)
        req = build_request(content, options, self.config, history=snapshot)
        deadline = self._deadline(timeout)
        raw = await self._open_stream(req, deadline)

        out = EventStream(maxsize=self.config.channel_buffer)
        return out.start(lambda stream: self._fold(raw, stream))

    def add_tool_response(self, content: str) -> None:
        """Append a tool result to the history.

        Call it after seeing ``event.tool_call`` and before the next
        ``chat_with_history("")``.
        """
        self._history.add_tool_response(content)

    def clear_history(self) -> None:
        self._history.clear()

    def get_history(self) -> list[ConversationTurn]:
        """Return a copy of the conversation log."""
        return list(self._history.snapshot())

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncChatClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    @staticmethod
    def _deadline(timeout: float | None) -> float | None:
        if timeout is None:
            return None
        return asyncio.get_running_loop().time() + timeout

    async def _open_stream(
        self, req: ChatRequest, deadline: float | None,
    ) -> EventStream:
        resp = await self._dispatch(req, deadline)
        stream = EventStream(maxsize=self.config.channel_buffer)
        return stream.start(lambda s: self._pump(resp, s, deadline))

    async def _dispatch(
        self, req: ChatRequest, deadline: float | None,
    ) -> httpx.Response:
        try:
            body = json.dumps(req.to_payload(), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise DispatchError(f"marshal request: {e}") from e

        try:
            http_req = self._client.build_request(
                "POST",
                self.config.base_url,
                content=body.encode("utf-8"),
                headers=self.config.build_headers(),
            )
        except (httpx.InvalidURL, httpx.HTTPError, UnicodeEncodeError) as e:
            # Malformed base_url, or header values that are not ASCII
            raise DispatchError(f"create request: {e}") from e
        _logger.debug(
            "POST %s (%d turns, %d tools)",
            self.config.base_url, len(req.prompt), len(req.tools),
        )

        try:
            async with asyncio.timeout_at(deadline):
                resp = await self._client.send(http_req, stream=True)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise DispatchError(f"do request: timed out ({e})") from e
        except httpx.HTTPError as e:
            raise DispatchError(f"do request: {e}") from e

        if resp.status_code != httpx.codes.OK:
            text = ""
            try:
                text = (await resp.aread()).decode("utf-8", errors="replace")
            except httpx.HTTPError:
                pass
            finally:
                await resp.aclose()
            _logger.warning("Endpoint returned status %d", resp.status_code)
            raise DispatchError(
                f"unexpected status code: {resp.status_code}",
                status_code=resp.status_code,
                body=text[:_MAX_ERROR_BODY],
            )
        return resp

    # ------------------------------------------------------------------
    # Background tasks
    # ------------------------------------------------------------------

    async def _pump(
        self,
        resp: httpx.Response,
        stream: EventStream,
        deadline: float | None,
    ) -> None:
        """Read frames off the wire and forward decoded events in order."""
        try:
            async with asyncio.timeout_at(deadline):
                async for frame in iter_frames(resp.aiter_lines()):
                    event = decode_frame(frame)
                    await stream.send(event)
                    if event.error is not None:
                        return
        except TimeoutError:
            _logger.warning("Stream deadline expired")
            await stream.send(
                StreamEvent(error=StreamTimeoutError("stream timed out")),
            )
        except (httpx.HTTPError, httpx.StreamError) as e:
            _logger.warning("Stream read failed: %s", e)
            await stream.send(StreamEvent(error=StreamError(f"scan error: {e}")))
        finally:
            await resp.aclose()

    async def _fold(self, raw: EventStream, out: EventStream) -> None:
        """Forward *raw* to *out* and commit the assistant turn on success."""
        acc = TurnAccumulator()
        acc.begin()
        try:
            async for event in raw:
                await out.send(event)
                if event.error is not None:
                    acc.discard()
                    return
                acc.observe(event)

            turn = acc.fold()
            if turn is not None:
                self._history.append(turn)
                _logger.debug(
                    "Committed assistant turn (%d chars, %d tool calls)",
                    len(turn.content or ""), len(turn.tool_calls),
                )
        finally:
            await raw.aclose()
