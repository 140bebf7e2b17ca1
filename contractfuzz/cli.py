"""
contractfuzz CLI — the main entry point.

Usage:
    contractfuzz run units.yaml --base-url http://localhost:8080
    contractfuzz run units.json -u http://localhost:8080 -F Boundary,RemoveFields -o report.json
    contractfuzz list-fuzzers
    contractfuzz families
    contractfuzz config --concurrency 4 --save
"""

from __future__ import annotations

import logging
import signal
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table
from rich import box

from contractfuzz import __version__
from contractfuzz.config import CONFIG_FILE, resolve_config, save_config
from contractfuzz.errors import ContractError
from contractfuzz.fuzzer import catalog, families
from contractfuzz.fuzzer.context import ContractContext
from contractfuzz.fuzzer.fuzz_engine import FuzzEngine
from contractfuzz.fuzzer.transport import HttpTransport
from contractfuzz.models import HeaderSpec, VerdictStatus
from contractfuzz.reporters import generate_json_report
from contractfuzz.ui import (
    configure_logging,
    console,
    print_banner,
    print_section,
    print_verdict,
)
from contractfuzz.units_file import load_units_file

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="contractfuzz",
    help="⚡ API contract fuzzer — check that a service rejects what its contract forbids.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


def _parse_headers(header_list: list[str]) -> list[HeaderSpec]:
    """Parse 'Key: Value' strings into headers sent with every request."""
    headers = []
    for h in header_list:
        if ":" in h:
            key, value = h.split(":", 1)
            headers.append(HeaderSpec(name=key.strip(), value=value.strip()))
        else:
            console.print(
                f"[yellow]Warning: Invalid header format '{h}', expected 'Key: Value'[/yellow]"
            )
    return headers


@contextmanager
def _cancel_on_interrupt(engine: FuzzEngine):
    """First Ctrl+C lets the unit in flight finish and stops the run; a second one aborts."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = signal.getsignal(signal.SIGINT)
    if previous is None:
        previous = signal.default_int_handler

    def handle_sigint(signum, frame):
        console.print("\n  [muted]Stopping after the current unit... (Ctrl+C again to abort)[/muted]")
        engine.cancel()
        signal.signal(signal.SIGINT, previous)

    signal.signal(signal.SIGINT, handle_sigint)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _version_callback(value: bool):
    if value:
        console.print(f"contractfuzz v{__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-V", help="Show version and exit.", callback=_version_callback, is_eager=True),
):
    """contractfuzz — Contract fuzzer for HTTP APIs."""
    if ctx.invoked_subcommand is None:
        print_banner()


# ─── RUN COMMAND ─────────────────────────────────────────────────────────────

@app.command()
def run(
    units_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON or YAML file with operations and optional explicit units"),
    base_url: str = typer.Option(..., "--base-url", "-u", help="Base URL of the service under test"),
    fuzzers: Optional[str] = typer.Option(None, "--fuzzers", "-F", help="Comma-separated list of fuzzers to run (default: all)"),
    explicit_only: bool = typer.Option(False, "--explicit-only", help="Run only the units listed in the file"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Per-request timeout in seconds"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-c", help="Units run in parallel"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Deepest field path that is still fuzzed"),
    strict_types: Optional[bool] = typer.Option(None, "--strict-types/--lax-types", help="Expect type-coercible values to be rejected"),
    header: list[str] = typer.Option([], "--header", "-H", help="HTTP header in 'Key: Value' format, sent with every request. Can be repeated."),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file path for the JSON report"),
    event_log: Optional[str] = typer.Option(None, "--event-log", help="Append timeouts and server errors to this file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Minimal output (no banner, no progress)"),
):
    """
    🔥 Fuzz the operations in a units file against a running service.

    Every response is checked against the family of status codes the
    contract implies. Exits with 1 when any unit fails or errors.
    """
    try:
        config = resolve_config(
            timeout=timeout,
            concurrency=concurrency,
            max_depth=max_depth,
            strict_types=strict_types,
            log_level=log_level,
            event_log=event_log,
        )
    except ContractError as e:
        console.print(f"[danger]Error: {e}[/danger]")
        raise typer.Exit(2)

    configure_logging(config.log_level)
    if not quiet:
        print_banner()

    try:
        operations, explicit = load_units_file(units_file)
        extra_headers = _parse_headers(header)
        if extra_headers:
            operations = [
                op.model_copy(update={"headers": op.headers + extra_headers}) for op in operations
            ]
            explicit = [
                u.model_copy(update={"operation": u.operation.model_copy(update={"headers": u.operation.headers + extra_headers})})
                for u in explicit
            ]

        context = ContractContext.from_operations(operations, config)
        fuzzer_names = [f.strip() for f in fuzzers.split(",")] if fuzzers else None
        units = [] if explicit_only else catalog.build_units(operations, context, fuzzer_names)
        units = list(explicit) + units
    except ContractError as e:
        console.print(f"[danger]Error: {e}[/danger]")
        raise typer.Exit(2)

    transport = HttpTransport(base_url, timeout=config.timeout, event_log=config.event_log)
    engine = FuzzEngine(transport, context, config, show_progress=not quiet, target=base_url)
    try:
        with _cancel_on_interrupt(engine):
            summary = engine.run(units)
    except KeyboardInterrupt:
        console.print("\n  [muted]Run aborted.[/muted]")
        raise typer.Exit(130)
    finally:
        transport.close()

    noteworthy = [v for v in summary.verdicts if v.status in (VerdictStatus.FAIL, VerdictStatus.ERROR, VerdictStatus.WARN)]
    if noteworthy and not quiet:
        print_section("Findings", "🔎")
        for v in noteworthy:
            code = v.response_code if v.response_code is not None else "-"
            detail = f"expected {v.expected}, got {code}"
            if v.diagnostic:
                detail += f"\n{v.diagnostic}"
            if v.value_preview:
                detail += f"\nvalue: {v.value_preview}"
            target = f"{v.method} {v.path}" + (f" [{v.field}]" if v.field else "")
            print_verdict(v.status.value, v.fuzzer, target, detail)
        console.print()

    if output:
        if generate_json_report(summary, output):
            console.print(f"  [success]✔ Report saved to {output}[/success]")
        else:
            console.print(f"  [danger]✗ Failed to save report to {output}[/danger]")

    if summary.cancelled:
        console.print(f"  [muted]Run cancelled after {summary.total_count} verdict(s).[/muted]")
        raise typer.Exit(130)

    if summary.fail_count or summary.error_count:
        raise typer.Exit(1)


# ─── LIST-FUZZERS COMMAND ────────────────────────────────────────────────────

@app.command("list-fuzzers")
def list_fuzzers():
    """📋 List all built-in fuzzers."""
    print_banner()
    console.print()

    table = Table(
        box=box.SIMPLE_HEAVY,
        title="[bold cyan]Available Fuzzers[/bold cyan]",
        border_style="dim cyan",
        padding=(0, 2),
    )
    table.add_column("Fuzzer", style="bold cyan")
    table.add_column("Description", style="muted")
    table.add_column("Skipped for", style="muted")

    for spec in catalog.FUZZERS.values():
        table.add_row(spec.name, spec.description, ", ".join(spec.skip_methods) or "-")

    console.print(table)
    console.print()


# ─── FAMILIES COMMAND ────────────────────────────────────────────────────────

@app.command("families")
def list_families():
    """📋 List the predefined response code families."""
    print_banner()
    console.print()

    table = Table(
        box=box.SIMPLE_HEAVY,
        title="[bold cyan]Response Code Families[/bold cyan]",
        border_style="dim cyan",
        padding=(0, 2),
    )
    table.add_column("Name", style="bold cyan")
    table.add_column("Accepted codes", style="muted")

    for name, family in families.PREDEFINED.items():
        table.add_row(name, family.as_string())

    console.print(table)
    console.print()


# ─── CONFIG COMMAND ──────────────────────────────────────────────────────────

@app.command("config")
def show_config(
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Per-request timeout in seconds"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-c", help="Units run in parallel"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Deepest field path that is still fuzzed"),
    strict_types: Optional[bool] = typer.Option(None, "--strict-types/--lax-types", help="Expect type-coercible values to be rejected"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR"),
    save: bool = typer.Option(False, "--save", help=f"Write the resolved options to {CONFIG_FILE}"),
):
    """
    ⚙ Show the resolved engine options.

    Options come from flags, then CONTRACTFUZZ_* environment variables,
    then ~/.contractfuzz/config.json.
    """
    try:
        resolved = resolve_config(
            timeout=timeout,
            concurrency=concurrency,
            max_depth=max_depth,
            strict_types=strict_types,
            log_level=log_level,
        )
    except ContractError as e:
        console.print(f"[danger]Error: {e}[/danger]")
        raise typer.Exit(2)

    for key, value in resolved.model_dump().items():
        console.print(f"  [accent]{key}:[/accent] {value!r}")

    if save:
        save_config(resolved)
        console.print(f"\n  [success]✔ Saved to {CONFIG_FILE}[/success]")


if __name__ == "__main__":
    app()
