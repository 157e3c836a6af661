# rich-based console output for walker runs
# src/monitoring/console.py
"""
Terminal output for BlockWalker (using `rich`).

- ConsoleNotifier: Notifier that prints operator notices.
- render_report: summary table of a finished run.
- EventTail: EventBus subscriber that prints monitoring events as they arrive.

This runs entirely offline; a game-client bridge would route notices into
its own chat instead.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .bus import EventBus
from .events import EventType, MonitoringEvent

if TYPE_CHECKING:  # avoid importing the walker core at module import time
    from blockwalker.controller import RunReport


_EVENT_STYLES = {
    EventType.TARGET_VISITED: "green",
    EventType.TARGET_UNREACHABLE: "yellow",
    EventType.ENVIRONMENT_UNAVAILABLE: "bold red",
    EventType.RUN_FINISHED: "bold cyan",
}


class ConsoleNotifier:
    """Notifier printing each notice on its own line."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console()

    def notify(self, message: str) -> None:
        style = "yellow" if "unreachable" in message else None
        self._console.print(Text(message, style=style))


class EventTail:
    """Print MonitoringEvents from a bus, one line each."""

    def __init__(self, bus: EventBus, console: Optional[Console] = None) -> None:
        self._bus = bus
        self._console = console or Console()
        bus.subscribe(self._on_event)

    def _on_event(self, event: MonitoringEvent) -> None:
        ts = datetime.fromtimestamp(event.ts).strftime("%H:%M:%S")
        style = _EVENT_STYLES.get(event.event_type, "dim")
        self._console.print(
            Text.assemble(
                (f"{ts} ", "dim"),
                (f"{event.event_type.name:<24}", style),
                event.message,
            )
        )

    def close(self) -> None:
        self._bus.unsubscribe(self._on_event)


def render_report(report: "RunReport", console: Optional[Console] = None) -> None:
    """Print a summary panel plus a table of unreachable targets."""
    console = console or Console()

    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="bold")
    summary.add_column()
    summary.add_row("Run", report.run_id)
    summary.add_row("Targets", str(report.target_count))
    summary.add_row("Visited", Text(str(len(report.visited)), style="green"))
    summary.add_row("Unreachable", Text(str(len(report.unreachable)), style="yellow"))
    summary.add_row("Cancelled", str(report.cancelled))
    summary.add_row("Aborted", report.aborted_reason or "-")
    summary.add_row("Duration", f"{report.duration_s:.2f}s")
    console.print(Panel(summary, title="BlockWalker run", expand=False))

    if report.unreachable:
        table = Table(title="Unreachable targets")
        table.add_column("x", justify="right")
        table.add_column("y", justify="right")
        table.add_column("z", justify="right")
        for c in report.unreachable:
            table.add_row(str(c.x), str(c.y), str(c.z))
        console.print(table)
