"""Command-line entry point — run probes once or watch them on schedule."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from probewatch.config import settings
from probewatch.health.manager import HealthManager
from probewatch.health.models import HealthOptions, OverallHealth, Status
from probewatch.probes.loader import load_probes

console = Console()

STATUS_STYLE = {
    Status.HEALTHY: "green",
    Status.DEGRADED: "yellow",
    Status.UNHEALTHY: "bold red",
}

EXIT_CODES = {Status.HEALTHY: 0, Status.DEGRADED: 1, Status.UNHEALTHY: 2}


def build_manager(args: argparse.Namespace, auto_check: bool) -> HealthManager:
    options = HealthOptions.from_settings(settings).model_copy(
        update={"enable_auto_check": auto_check},
    )
    manager = HealthManager(options)
    for probe in load_probes(Path(args.file)):
        manager.register_check(probe)
    if args.infrastructure:
        manager.register_infrastructure_checks(disk_path=settings.disk_path)
    if args.compliance:
        manager.register_compliance_checks()
    return manager


def render(overall: OverallHealth) -> None:
    table = Table(title="Health checks")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    table.add_column("Message")
    for name, result in sorted(overall.checks.items()):
        style = STATUS_STYLE[result.status]
        table.add_row(
            name,
            f"[{style}]{result.status.value}[/{style}]",
            f"{result.duration_ms:.0f}ms",
            result.message or "",
        )
    console.print(table)

    s = overall.summary
    style = STATUS_STYLE[overall.status]
    console.print(Panel(
        f"{s.healthy} healthy / {s.degraded} degraded / {s.unhealthy} unhealthy (of {s.total})",
        title=f"Overall: {overall.status.value}",
        style=style,
    ))


async def run_once(args: argparse.Namespace) -> int:
    manager = build_manager(args, auto_check=False)
    if args.json:
        await manager.run_all_checks()
        overall = manager.get_overall_health()
        print(json.dumps(overall.to_dict(), indent=2))
        return EXIT_CODES[overall.status]

    if not manager.registry.names():
        console.print("[dim]No health checks configured[/dim]")
    with console.status("[bold green]Running health checks..."):
        await manager.run_all_checks()
    overall = manager.get_overall_health()
    render(overall)
    return EXIT_CODES[overall.status]


async def watch(args: argparse.Namespace) -> int:
    manager = build_manager(args, auto_check=True)
    console.print(Panel(
        f"Watching {len(manager.registry)} checks (Ctrl-C to stop)", style="bold blue",
    ))
    await manager.run_all_checks()
    loop = asyncio.get_running_loop()
    deadline = loop.time() + args.duration if args.duration else None
    try:
        while deadline is None or loop.time() < deadline:
            render(manager.get_overall_health())
            await asyncio.sleep(args.refresh)
    finally:
        await manager.shutdown()
    return EXIT_CODES[manager.get_overall_health().status]


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="probewatch health checks")
    sub = parser.add_subparsers(dest="command")

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--file", default=settings.probes_file, help="Probes YAML file")
        p.add_argument("--infrastructure", action="store_true", help="Add memory/disk checks")
        p.add_argument("--compliance", action="store_true", help="Add compliance checks")

    run_parser = sub.add_parser("run", help="Run every check once")
    add_common(run_parser)
    run_parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    watch_parser = sub.add_parser("watch", help="Run checks on their schedules")
    add_common(watch_parser)
    watch_parser.add_argument("--duration", type=float, default=0, help="Stop after N seconds")
    watch_parser.add_argument("--refresh", type=float, default=10, help="Seconds between reports")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    if args.command == "run":
        sys.exit(asyncio.run(run_once(args)))
    elif args.command == "watch":
        try:
            sys.exit(asyncio.run(watch(args)))
        except KeyboardInterrupt:
            sys.exit(130)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
