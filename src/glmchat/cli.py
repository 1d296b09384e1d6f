"""Command line front-end: one-shot ``ask`` and an interactive ``repl``."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from glmchat import __version__
from glmchat.config import ClientConfig, load_config
from glmchat.errors import DispatchError, GLMChatError
from glmchat.llm.client import AsyncChatClient
from glmchat.llm.options import (
    Option,
    with_max_tokens,
    with_system_prompt,
    with_temperature,
    with_thinking,
    with_web_search,
)
from glmchat.llm.stream import EventStream

console = Console()
err_console = Console(stderr=True)


def _build_options(
    system: str | None,
    temperature: float | None,
    max_tokens: int | None,
    thinking: bool,
    web_search: bool,
) -> list[Option]:
    opts: list[Option] = [with_thinking(thinking)]
    if system:
        opts.append(with_system_prompt(system))
    if temperature is not None:
        opts.append(with_temperature(temperature))
    if max_tokens is not None:
        opts.append(with_max_tokens(max_tokens))
    if web_search:
        opts.append(with_web_search())
    return opts


async def _render(stream: EventStream, show_thinking: bool) -> bool:
    """Print a stream to the console.  Returns False if it ended in error."""
    in_thinking = False
    async with stream:
        async for event in stream:
            if event.error is not None:
                console.print()
                err_console.print(f"[red]Error: {escape(str(event.error))}[/red]")
                return False
            if event.think and show_thinking:
                in_thinking = True
                console.print(event.think, style="dim", end="", markup=False)
            if event.text:
                if in_thinking:
                    console.print()
                    in_thinking = False
                console.print(event.text, end="", markup=False, highlight=False)
            if event.tool_call is not None and event.tool_call.function:
                fn = event.tool_call.function
                console.print(
                    f"\n[yellow]tool call[/yellow] {escape(fn.name)}({escape(fn.arguments)})"
                )
    console.print()
    return True


def _print_history(client: AsyncChatClient) -> None:
    table = Table(title="History")
    table.add_column("#", justify="right")
    table.add_column("Role")
    table.add_column("Content")
    for i, turn in enumerate(client.get_history(), 1):
        content = turn.content or ""
        if turn.tool_calls:
            names = ", ".join(
                tc.function.name for tc in turn.tool_calls if tc.function
            )
            content = f"{content} [tool calls: {names}]".strip()
        table.add_row(str(i), turn.role.value, escape(content))
    console.print(table)


def _load(config_path: str | None) -> ClientConfig:
    try:
        return load_config(config_path)
    except (FileNotFoundError, GLMChatError) as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(2)


@click.group()
@click.version_option(__version__, prog_name="glmchat")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to a glmchat.yaml config file.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Stream answers from GLM-4.6."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s:%(name)s:%(levelname)s:%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ctx.obj = _load(config_path)


def _common_options(func):
    func = click.option("--system", default=None, help="System prompt.")(func)
    func = click.option("--temperature", type=float, default=None)(func)
    func = click.option("--max-tokens", type=int, default=None)(func)
    func = click.option("--no-thinking", is_flag=True,
                        help="Disable thinking mode.")(func)
    func = click.option("--web-search", is_flag=True,
                        help="Allow the model to search the web.")(func)
    return func


@main.command()
@click.argument("prompt")
@_common_options
@click.pass_obj
def ask(
    config: ClientConfig,
    prompt: str,
    system: str | None,
    temperature: float | None,
    max_tokens: int | None,
    no_thinking: bool,
    web_search: bool,
) -> None:
    """Send a single PROMPT and stream the answer."""
    try:
        opts = _build_options(system, temperature, max_tokens,
                              not no_thinking, web_search)
    except GLMChatError as e:
        raise click.BadParameter(str(e)) from e

    async def _run() -> bool:
        async with AsyncChatClient(config) as client:
            try:
                stream = await client.chat(prompt, *opts)
            except DispatchError as e:
                err_console.print(f"[red]Request failed: {escape(str(e))}[/red]")
                return False
            return await _render(stream, show_thinking=not no_thinking)

    if not asyncio.run(_run()):
        sys.exit(1)


@main.command()
@_common_options
@click.pass_obj
def repl(
    config: ClientConfig,
    system: str | None,
    temperature: float | None,
    max_tokens: int | None,
    no_thinking: bool,
    web_search: bool,
) -> None:
    """Interactive conversation.  Commands: /clear, /history, /exit."""
    try:
        opts = _build_options(system, temperature, max_tokens,
                              not no_thinking, web_search)
    except GLMChatError as e:
        raise click.BadParameter(str(e)) from e

    async def _loop() -> None:
        async with AsyncChatClient(config) as client:
            while True:
                try:
                    line = await asyncio.to_thread(input, "> ")
                except (EOFError, KeyboardInterrupt):
                    console.print()
                    return
                line = line.strip()
                if not line:
                    continue
                if line in ("/exit", "/quit"):
                    return
                if line == "/clear":
                    client.clear_history()
                    console.print("[dim]History cleared.[/dim]")
                    continue
                if line == "/history":
                    _print_history(client)
                    continue
                try:
                    stream = await client.chat_with_history(line, *opts)
                except DispatchError as e:
                    err_console.print(f"[red]Request failed: {escape(str(e))}[/red]")
                    continue
                await _render(stream, show_thinking=not no_thinking)

    asyncio.run(_loop())


if __name__ == "__main__":
    main()
