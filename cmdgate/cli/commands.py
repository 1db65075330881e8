"""CLI commands for cmdgate."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cmdgate import __app_name__, __version__
from cmdgate.config.loader import ConfigError, get_audit_log_path, get_config_path, load_config
from cmdgate.core.types import DEFAULT_TIMEOUT_MS, Rejected
from cmdgate.gate.service import CommandGate
from cmdgate.observability.health import collect_health_snapshot
from cmdgate.observability.logging_sink import JsonlLoggingSink
from cmdgate.policy.commands import COMMAND_TABLE

app = typer.Typer(
    name="cmdgate",
    help=f"{__app_name__} - command execution gatekeeper",
    no_args_is_help=True,
)

console = Console()

_STATUS_STYLE = {"ok": "green", "unknown": "yellow", "degraded": "yellow", "failed": "red"}

_state = {"verbose": False}


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def _load(config_path: Path | None):
    try:
        config = load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)
    if not _state["verbose"]:
        _configure_logging(config.log_level)
    return config


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__app_name__} v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """cmdgate - decide whether an admin command may run."""
    _state["verbose"] = verbose
    _configure_logging("DEBUG" if verbose else "WARNING")


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def check(
    command: list[str] = typer.Argument(..., help="Program followed by its arguments"),
    cwd: Optional[str] = typer.Option(None, "--cwd", help="Working directory for the command"),
    timeout: int = typer.Option(DEFAULT_TIMEOUT_MS, "--timeout", help="Timeout in milliseconds"),
    actor: str = typer.Option("cli", "--actor", help="Who is asking, for rate limiting and audit"),
    as_json: bool = typer.Option(False, "--json", help="Print the decision as JSON"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Validate a command line. Put `--` before the program to pass its flags through."""
    config = _load(config_path)
    gate = CommandGate.from_config(config)

    payload = {"command": command[0], "args": command[1:], "timeout": timeout}
    if cwd is not None:
        payload["workingDirectory"] = cwd

    decision = asyncio.run(gate.review(payload, actor=actor))

    if as_json:
        typer.echo(json.dumps(decision.to_dict(), indent=2))
    elif isinstance(decision.result, Rejected):
        console.print(
            f"[red]Rejected[/red] ({decision.result.code.value}): {escape(decision.result.reason)}",
            soft_wrap=True,
        )
    else:
        console.print(f"[green]Accepted[/green]: {escape(' '.join(decision.argv))}", soft_wrap=True)
        console.print(f"  cwd: {escape(str(decision.working_directory))}", soft_wrap=True)

    raise typer.Exit(0 if decision.allowed else 1)


@app.command("commands")
def list_commands(
    as_json: bool = typer.Option(False, "--json", help="Print the table as JSON"),
):
    """Show the whitelisted programs and their permitted arguments."""
    if as_json:
        payload = {
            name: {
                "subcommands": sorted(spec.subcommands),
                "args": {sub: sorted(allowed) for sub, allowed in spec.args_by_subcommand.items()},
                "max_args": spec.max_args,
            }
            for name, spec in COMMAND_TABLE.items()
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    table = Table(title="Whitelisted commands")
    table.add_column("Program", style="cyan")
    table.add_column("Subcommand")
    table.add_column("Allowed arguments")
    table.add_column("Max args", justify="right")

    for name, spec in COMMAND_TABLE.items():
        for sub, allowed in sorted(spec.args_by_subcommand.items()):
            shown = ", ".join(sorted(allowed)) if allowed else "[yellow](free-form)[/yellow]"
            table.add_row(name, sub or "-", shown, str(spec.max_args))

    console.print(table)


@app.command()
def logs(
    program: Optional[str] = typer.Option(None, "--program", help="Filter by program"),
    status: Optional[str] = typer.Option(None, "--status", help="accepted or rejected"),
    limit: int = typer.Option(20, "--limit", "-n", min=1, max=1000),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Page 1 is the most recent"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON lines"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Show recent gate decisions from the audit log."""
    if status is not None and status not in {"accepted", "rejected"}:
        console.print("[red]Error:[/red] --status must be 'accepted' or 'rejected'")
        raise typer.Exit(2)

    config = _load(config_path)
    sink = JsonlLoggingSink(get_audit_log_path(config))
    rows = sink.query(program=program, status=status, limit=limit, page=page)

    if as_json:
        for row in rows:
            typer.echo(json.dumps(row, ensure_ascii=False))
        return

    if not rows:
        console.print("No audit events found.")
        return

    for row in rows:
        args = " ".join(row.get("attrs", {}).get("args", []))
        line = f"{row.get('ts')} {row.get('actor')} {row.get('status')} {row.get('program')} {args}"
        if row.get("error_message"):
            line += f" -- {row['error_message']}"
        console.print(line, markup=False, highlight=False, soft_wrap=True)

    total = sink.count(program=program, status=status)
    pages = (total + limit - 1) // limit
    console.print(f"Page {page} of {pages} ({total} events)", highlight=False)


@app.command()
def health(
    as_json: bool = typer.Option(False, "--json", help="Print the snapshot as JSON"),
    deep: bool = typer.Option(False, "--deep", help="Include component details"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Report whether the gate is ready to make decisions."""
    path = config_path or get_config_path()
    config = _load(path)
    snapshot = collect_health_snapshot(config=config, config_path=path)

    if as_json:
        typer.echo(json.dumps(snapshot.to_dict(deep=deep), indent=2))
    else:
        style = _STATUS_STYLE.get(snapshot.readiness, "white")
        console.print(f"Readiness: [{style}]{snapshot.readiness}[/{style}]")
        for item in snapshot.evidence:
            item_style = _STATUS_STYLE.get(item.status, "white")
            console.print(f"  [{item_style}]{item.status:>8}[/{item_style}]  {item.component}: {item.summary}")
            if deep and item.details:
                console.print(f"            {json.dumps(item.details, ensure_ascii=False)}", markup=False)

    raise typer.Exit(0 if snapshot.readiness == "ok" else 1)


if __name__ == "__main__":
    app()
