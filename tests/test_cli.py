"""Tests for the glmchat command line."""

import json

import httpx
import pytest
from click.testing import CliRunner

from glmchat import cli
from glmchat.llm.client import AsyncChatClient


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "glmchat.yaml"
    path.write_text("base_url: http://test/sse\n")
    return str(path)


def _patch_client(monkeypatch, handler):
    requests: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    def factory(config):
        http = httpx.AsyncClient(transport=httpx.MockTransport(recording))
        return AsyncChatClient(config, http_client=http)

    monkeypatch.setattr(cli, "AsyncChatClient", factory)
    return requests


def _sse_body(*texts: str) -> bytes:
    return b"".join(
        f"event: message\ndata: {json.dumps({'text': t})}\n\n".encode()
        for t in texts
    )


class TestCLI:
    def test_help(self):
        result = CliRunner().invoke(cli.main, ["--help"])
        assert result.exit_code == 0
        assert "ask" in result.output
        assert "repl" in result.output

    def test_invalid_temperature(self, config_file):
        result = CliRunner().invoke(
            cli.main, ["--config", config_file, "ask", "hi", "--temperature", "5"],
        )
        assert result.exit_code == 2
        assert "temperature" in result.output

    def test_missing_config_file(self, tmp_path):
        result = CliRunner().invoke(
            cli.main, ["--config", str(tmp_path / "nope.yaml"), "ask", "hi"],
        )
        assert result.exit_code == 2

    def test_ask_streams_text(self, monkeypatch, config_file):
        requests = _patch_client(
            monkeypatch,
            lambda request: httpx.Response(200, content=_sse_body("Hi", " there")),
        )
        result = CliRunner().invoke(
            cli.main, ["--config", config_file, "ask", "Hello", "--no-thinking"],
        )
        assert result.exit_code == 0, result.output
        assert "Hi there" in result.output

        payload = json.loads(requests[0].content)
        assert payload["prompt"][0]["content"] == "Hello"
        assert "thinking" not in payload

    def test_ask_dispatch_failure(self, monkeypatch, config_file):
        _patch_client(monkeypatch, lambda request: httpx.Response(503, content=b"down"))
        result = CliRunner().invoke(cli.main, ["--config", config_file, "ask", "Hello"])
        assert result.exit_code == 1
