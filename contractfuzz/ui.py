"""
contractfuzz terminal UI theme.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn
from rich import box
from rich.markup import escape

# ── Custom Theme ─────────────────────────────────────────────────────────────

CONTRACTFUZZ_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "danger": "red bold",
    "success": "green bold",
    "muted": "dim white",
    "accent": "bold cyan",
    "verdict.pass": "green",
    "verdict.fail": "bold red",
    "verdict.error": "red",
    "verdict.warn": "yellow",
    "verdict.skipped": "dim cyan",
    "fuzzer_name": "bold magenta",
    "field": "bold cyan",
    "value": "green",
})

console = Console(theme=CONTRACTFUZZ_THEME)

SMALL_BANNER = "[bold cyan]⚡ contractfuzz[/bold cyan] [dim]v0.1.0[/dim]"


def print_banner():
    """Print the contractfuzz banner."""
    console.print(SMALL_BANNER)


def configure_logging(level: str = "WARNING"):
    """Route stdlib logging through rich on the shared console."""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


def print_verdict(status: str, fuzzer: str, target: str, detail: str = ""):
    """Print a single non-passing verdict."""
    style = f"verdict.{status.lower()}"
    icon = {"fail": "🔴", "error": "🟠", "warn": "🟡", "skipped": "⚪", "pass": "🟢"}.get(
        status.lower(), "⚪"
    )
    console.print(
        f"  {icon} [{style}]{status.upper().ljust(8)}[/{style}] "
        f"[fuzzer_name]{fuzzer}[/fuzzer_name] [muted]{escape(target)}[/muted]"
    )
    if detail:
        for line in detail.split("\n"):
            console.print(f"           [muted]{escape(line)}[/muted]")


def print_section(title: str, icon: str = "─"):
    """Print a section divider."""
    console.print()
    console.rule(f"[bold cyan] {icon} {title} [/bold cyan]", style="dim cyan")
    console.print()


def print_summary(total: int, passed: int, failed: int, errors: int, warnings: int, skipped: int):
    """Print run summary."""
    console.print()
    table = Table(
        box=box.DOUBLE_EDGE,
        title="[bold white]Fuzzing Summary[/bold white]",
        border_style="cyan",
        padding=(0, 2),
    )
    table.add_column("Verdict", style="bold")
    table.add_column("Count", justify="right")

    if failed > 0:
        table.add_row("[verdict.fail]FAIL[/verdict.fail]", f"[verdict.fail]{failed}[/verdict.fail]")
    if errors > 0:
        table.add_row("[verdict.error]ERROR[/verdict.error]", f"[verdict.error]{errors}[/verdict.error]")
    if warnings > 0:
        table.add_row("[verdict.warn]WARN[/verdict.warn]", f"[verdict.warn]{warnings}[/verdict.warn]")
    if skipped > 0:
        table.add_row("[verdict.skipped]SKIPPED[/verdict.skipped]", f"[verdict.skipped]{skipped}[/verdict.skipped]")
    table.add_row("[verdict.pass]PASS[/verdict.pass]", f"[verdict.pass]{passed}[/verdict.pass]")

    table.add_section()
    table.add_row("[bold white]TOTAL[/bold white]", f"[bold white]{total}[/bold white]")

    console.print(table)

    if failed > 0 or errors > 0:
        console.print("\n  [danger]⚠  The service did not honour its contract for some inputs.[/danger]")
    elif total == 0:
        console.print("\n  [warning]⚡ Nothing was sent. Check the units file.[/warning]")
    else:
        console.print("\n  [success]✔  All responses matched the expected families.[/success]")
    console.print()


def get_progress() -> Progress:
    """Get a styled progress bar."""
    return Progress(
        SpinnerColumn("dots", style="cyan"),
        TextColumn("[bold cyan]{task.description}"),
        BarColumn(bar_width=30, style="dim cyan", complete_style="cyan"),
        TextColumn("[muted]{task.percentage:>3.0f}%[/muted]"),
        TimeElapsedColumn(),
        console=console,
    )
