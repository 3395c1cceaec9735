"""Colorized console output for npk-deploy workflows.

Thin wrapper around :mod:`rich` that degrades gracefully when stdout
is not a TTY (e.g. piped, CI, cron).  All user-facing status messages
should flow through this module; ``logger.*`` calls are kept for
structured file logging.
"""

from __future__ import annotations

from typing import Callable, Optional

from rich.console import Console
from rich.panel import Panel

console = Console(stderr=False, force_terminal=None)

#: Exact answer accepted by :func:`confirm_phrase`.
CONFIRMATION_PHRASE = "Yes"

SUPPORT_URL = "https://discord.gg/k5PQnqSNDF"

_PASS = "[bold green]✓[/]"
_FAIL = "[bold red]✗[/]"
_WARN = "[bold yellow]⚠[/]"
_ARROW = "[bold cyan]›[/]"
_DOT = "[dim]·[/]"


def phase(title: str) -> None:
    """Print a bold phase header (e.g. ``PREFLIGHT``, ``DEPLOY``)."""
    console.print()
    console.print(f"[bold blue]── {title} ──[/]")


def ok(msg: str) -> None:
    console.print(f"  {_PASS} {msg}")


def fail(msg: str) -> None:
    console.print(f"  {_FAIL} [red]{msg}[/]")


def warn(msg: str) -> None:
    console.print(f"  {_WARN} [yellow]{msg}[/]")


def step(msg: str) -> None:
    console.print(f"  {_ARROW} {msg}")


def info(msg: str) -> None:
    console.print(f"  {_DOT} [dim]{msg}[/]")


def error_msg(msg: str) -> None:
    """Bold red error message (not indented)."""
    console.print(f"[bold red]ERROR:[/] {msg}")


def success_panel(title: str, body: str) -> None:
    console.print()
    console.print(
        Panel(
            body,
            title=f"[bold green]{title}[/]",
            border_style="green",
            padding=(1, 2),
        )
    )


def error_panel(title: str, body: str) -> None:
    console.print()
    console.print(
        Panel(
            body,
            title=f"[bold red]{title}[/]",
            border_style="red",
            padding=(1, 2),
        )
    )


def help_banner() -> None:
    """Support pointer shown before exiting on any fatal failure."""
    error_panel(
        "Deployment failed",
        "If you're having trouble, hop in Discord for help.\n"
        f"--> {SUPPORT_URL}",
    )


# ── Confirmation ───────────────────────────────────────────────────────────


def confirm_phrase(
    prompt: str,
    *,
    reader: Optional[Callable[[str], str]] = None,
) -> bool:
    """Show *prompt* and return *True* only if the answer is exactly ``Yes``.

    *reader* defaults to :meth:`rich.console.Console.input`.  Any other
    answer, including an empty one or end-of-input, is a refusal.
    """
    console.print()
    console.print(Panel(prompt, border_style="yellow", padding=(1, 2)))
    read = reader if reader is not None else console.input
    try:
        answer = read(f" Do you understand? [{CONFIRMATION_PHRASE}]: ")
    except EOFError:
        return False
    return answer.strip() == CONFIRMATION_PHRASE


def refuse(prompt: str) -> bool:
    """Non-interactive confirmation: always refuses."""
    warn("Confirmation required but running non-interactively; refusing.")
    return False
