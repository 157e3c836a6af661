# src/cli/walk_offline.py
"""
Offline walker run against an in-memory scene.

    python -m cli.walk_offline --scene scenes/demo.yaml
    python -m cli.walk_offline --scene scenes/demo.yaml --events logs/walker/events.jsonl
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from blockwalker import ChatTrigger, InlineContext, RunController
from blockwalker.logging_config import configure_logging
from blockwalker.offline import load_scene
from env.loader import load_walker_config
from monitoring.bus import EventBus
from monitoring.console import ConsoleNotifier, EventTail, render_report
from monitoring.logger import JsonFileLogger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run one BlockWalker pass over an in-memory scene."
    )
    parser.add_argument("--scene", required=True, type=Path, help="Scene YAML file")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="walker.yaml to use when the scene has no 'walker' section",
    )
    parser.add_argument("--profile", default=None, help="Profile name inside walker.yaml")
    parser.add_argument("--events", type=Path, default=None, help="Write events as JSONL here")
    parser.add_argument("--log-level", default="WARNING", help="Python log level")
    parser.add_argument("--tail", action="store_true", help="Print monitoring events live")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, stream=sys.stderr, quiet_moves=True)
    console = Console()

    base = load_walker_config(args.config, args.profile) if (args.config or args.profile) else None
    grid, agent, config = load_scene(args.scene, base)

    bus = EventBus()
    sink = JsonFileLogger(args.events, bus) if args.events else None
    tail = EventTail(bus, console) if args.tail else None

    controller = RunController(
        grid,
        agent,
        agent,
        ConsoleNotifier(console),
        config=config,
        context=InlineContext(),
        bus=bus,
    )
    trigger = ChatTrigger(controller)
    try:
        if not trigger.on_message(config.start_token):
            console.print("[red]could not start run[/red]")
            return 1
        report = controller.wait()
    finally:
        controller.shutdown()
        if tail is not None:
            tail.close()
        if sink is not None:
            sink.close()

    if report is None:
        return 1
    render_report(report, console)
    return 0 if report.aborted_reason is None else 2


if __name__ == "__main__":
    sys.exit(main())
