"""CLI entry point for conversation-memory.

Invoked as::

    conversation-memory [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m conversation_memory.cli.main

Commands
--------
- version  — Show version information
- compare  — Feed one conversation to every policy and compare the results
- context  — Show the context a policy would send for a conversation
- chat     — Interactive conversation through a memory policy
"""
from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, NoReturn

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from conversation_memory.memory.base import PolicyKind
from conversation_memory.memory.turn import Turn

if TYPE_CHECKING:
    from conversation_memory.config import ClientConfig, MemoryConfig

console = Console()

_POLICY_CHOICES = ["buffer", "window", "summary", "scored"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(1)


def _load_turns(turns_file: str | None) -> list[Turn]:
    from conversation_memory.errors import ConfigurationError
    from conversation_memory.samples import load_turns, sample_turns

    if turns_file is None:
        return sample_turns()
    try:
        return load_turns(turns_file)
    except ConfigurationError as exc:
        _fail(str(exc))


def _resolve_configs(
    config_file: str | None,
    policy: str | None,
) -> tuple[MemoryConfig, ClientConfig]:
    """Load configs from ``config_file``; ``--policy`` overrides the file only when given.

    Raises
    ------
    ConfigurationError
        If the config file cannot be loaded.
    """
    from conversation_memory.config import ClientConfig, MemoryConfig, load_config

    if config_file:
        memory_config, client_config = load_config(config_file)
    else:
        memory_config, client_config = MemoryConfig(), ClientConfig()
    if policy is not None:
        memory_config = memory_config.model_copy(update={"policy": PolicyKind(policy)})
    return memory_config, client_config


def _make_client(offline: bool) -> object:
    """Return a completion client: scripted when offline, HTTP otherwise."""
    from conversation_memory.config import ClientConfig
    from conversation_memory.errors import ConfigurationError
    from conversation_memory.llm.base import ScriptedClient
    from conversation_memory.llm.openai_client import OpenAIChatClient

    if offline:
        return ScriptedClient()
    try:
        return OpenAIChatClient(ClientConfig())
    except ConfigurationError as exc:
        _fail(f"{exc} Use --offline to run without a model.")


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="conversation-memory")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Conversational memory retention strategies."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from conversation_memory import __version__

    console.print(f"[bold]conversation-memory[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# compare
# ---------------------------------------------------------------------------


@cli.command(name="compare")
@click.option("--turns", "turns_file", default=None, help="YAML/JSON file of turns (default: built-in sample).")
@click.option("--window-k", default=2, show_default=True, help="Window width for the window policy.")
@click.option("--capacity", default=4, show_default=True, help="Capacity for the scored policy.")
@click.option("--summarize-every", default=1, show_default=True, help="Turns per summarization.")
@click.option("--llm", is_flag=True, help="Summarize with the chat-completions API instead of offline.")
@click.option("--json-output", is_flag=True, help="Output raw JSON instead of a table.")
def compare_command(
    turns_file: str | None,
    window_k: int,
    capacity: int,
    summarize_every: int,
    llm: bool,
    json_output: bool,
) -> None:
    """Feed the same conversation to every policy and compare them."""
    from conversation_memory.analytics.comparison import run_comparison
    from conversation_memory.config import MemoryConfig
    from conversation_memory.errors import ConfigurationError
    from conversation_memory.memory.factory import create_policy

    turns = _load_turns(turns_file)
    client = _make_client(offline=False) if llm else None

    try:
        policies = {
            name: create_policy(
                MemoryConfig(
                    policy=name,
                    window_k=window_k,
                    capacity=capacity,
                    summarize_every=summarize_every,
                ),
                client=client,
            )
            for name in _POLICY_CHOICES
        }
    except (ConfigurationError, ValueError) as exc:
        _fail(str(exc))

    reports = run_comparison(policies, turns)

    if json_output:
        click.echo(json.dumps([report.model_dump(mode="json") for report in reports], indent=2))
        return

    table = Table(title=f"Memory comparison ({len(turns)} exchanges)", show_lines=False)
    table.add_column("Policy", style="bold cyan")
    table.add_column("Turns", justify="right")
    table.add_column("Messages", justify="right")
    table.add_column("Chars", justify="right")
    table.add_column("~Tokens", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("LLM calls", justify="right")
    table.add_column("Cost profile")

    for report in reports:
        table.add_row(
            report.name,
            str(report.turn_count),
            str(report.message_count),
            str(report.serialized_chars),
            str(report.estimated_tokens),
            f"{report.relative_size:.0f}%",
            str(report.summarizer_calls),
            report.cost_profile.description,
        )
    console.print(table)

    for report in reports:
        for error in report.errors:
            console.print(f"[yellow]{report.name}:[/yellow] {escape(error)}")


# ---------------------------------------------------------------------------
# context
# ---------------------------------------------------------------------------


@cli.command(name="context")
@click.option(
    "--policy",
    default=None,
    type=click.Choice(_POLICY_CHOICES, case_sensitive=False),
    help="Retention policy to apply. Overrides --config; default: buffer.",
)
@click.option("--turns", "turns_file", default=None, help="YAML/JSON file of turns (default: built-in sample).")
@click.option("--config", "config_file", default=None, help="YAML config file with a memory section.")
@click.option("--category", default=None, help="Only include turns in this category.")
@click.option("--min-importance", default=None, type=int, help="Only include turns at or above this importance.")
@click.option("--input", "user_input", default=None, help="Render the full prompt for this new input.")
def context_command(
    policy: str | None,
    turns_file: str | None,
    config_file: str | None,
    category: str | None,
    min_importance: int | None,
    user_input: str | None,
) -> None:
    """Show the context a policy retains for a conversation."""
    from conversation_memory.chain import DEFAULT_CONVERSATION_TEMPLATE
    from conversation_memory.context.assembler import assemble
    from conversation_memory.context.template import PromptTemplate
    from conversation_memory.errors import ConfigurationError
    from conversation_memory.memory.factory import create_policy

    try:
        memory_config, _ = _resolve_configs(config_file, policy)
        memory = create_policy(memory_config)
    except ConfigurationError as exc:
        _fail(str(exc))

    for turn in _load_turns(turns_file):
        memory.append(turn)

    if user_input is not None:
        payload = assemble(memory, user_input, category=category, min_importance=min_importance)
        prompt = PromptTemplate(DEFAULT_CONVERSATION_TEMPLATE).render(**payload.as_variables())
        console.print(Panel(escape(prompt), title="Prompt", expand=False))
        return

    text = memory.context(category=category, min_importance=min_importance)
    if not text:
        console.print("[yellow]No context retained.[/yellow]")
        return
    stats = memory.stats()
    console.print(
        Panel(
            escape(text),
            title=f"{memory.kind.value} context | turns={stats.total_turns} | chars={len(text)}",
            expand=False,
        )
    )


# ---------------------------------------------------------------------------
# chat
# ---------------------------------------------------------------------------


@cli.command(name="chat")
@click.option(
    "--policy",
    default=None,
    type=click.Choice(_POLICY_CHOICES, case_sensitive=False),
    help="Retention policy to apply. Overrides --config; default: buffer.",
)
@click.option("--config", "config_file", default=None, help="YAML config file with memory/client sections.")
@click.option("--offline", is_flag=True, help="Use canned offline replies instead of the API.")
def chat_command(policy: str | None, config_file: str | None, offline: bool) -> None:
    """Chat interactively; type 'exit' or 'quit' to stop."""
    from conversation_memory.chain import ConversationChain
    from conversation_memory.errors import ConfigurationError, ServiceError
    from conversation_memory.llm.base import ScriptedClient
    from conversation_memory.llm.openai_client import OpenAIChatClient
    from conversation_memory.memory.factory import create_policy

    try:
        memory_config, client_config = _resolve_configs(config_file, policy)
        client = ScriptedClient() if offline else OpenAIChatClient(client_config)
        memory = create_policy(memory_config, client=client)
    except ConfigurationError as exc:
        _fail(f"{exc} Use --offline to run without a model.")

    chain = ConversationChain(client, memory)
    console.print(f"[bold]Chatting with {memory.kind.value} memory.[/bold] Type 'exit' to stop.")

    while True:
        try:
            user_input = click.prompt("you", prompt_suffix="> ")
        except (EOFError, click.Abort):
            break
        if user_input.strip().lower() in {"exit", "quit"}:
            break
        try:
            result = chain.predict(user_input)
        except ServiceError as exc:
            console.print(f"[red]Model call failed ({exc.kind}):[/red] {escape(str(exc))}")
            continue
        console.print(f"[blue]assistant>[/blue] {escape(result.response)}")
        if result.memory_error:
            console.print(f"[yellow]Memory warning:[/yellow] {escape(result.memory_error)}")

    stats = memory.stats()
    console.print(f"[dim]Session ended with {stats.total_turns} turn(s) in memory.[/dim]")


if __name__ == "__main__":
    cli()
