from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console

from brewstrap.config import ConfigError, load_plan
from brewstrap.provision import Homebrew, Provisioner, upsert_config_line
from brewstrap.runner import Report, RunLog, TaskRunner, render_summary

from .args import build_parser


def run_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)

        match args.command:
            case "run":
                return cmd_run(args)
            case "list":
                return cmd_list(args)
            case "patch":
                return cmd_patch(args)
            case _:
                return 2

    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def cmd_run(args: argparse.Namespace) -> int:
    plan = load_plan(args.plan)
    log_path = Path(args.log_file or plan.log_file).expanduser().resolve()
    console = Console(highlight=False, soft_wrap=True)

    if not args.yes and not confirm(console, log_path):
        console.print("Aborted by user.", style="blue")
        return 0

    with RunLog(log_path, console) as log:
        log.header(Path(args.plan).expanduser().resolve())
        log.info("User accepted, continuing...")
        runner = TaskRunner(log, capture_output=args.capture_output or plan.capture_output)
        report = Provisioner(plan, runner, Homebrew(plan.brew)).run()
        _print_summary(log, report)

    console.print(f"\nDone. Check {log_path} for the run log.", markup=False)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    plan = load_plan(args.plan)
    for name in plan.task_names():
        print(name)
    return 0


def cmd_patch(args: argparse.Namespace) -> int:
    try:
        patched = upsert_config_line(
            args.file, args.key, args.value, backup=not args.no_backup
        )
    except (OSError, UnicodeDecodeError) as exc:
        print(f"{args.file}: {exc}", file=sys.stderr)
        return 2

    print(f"{patched.action}: {patched.key} in {patched.path}")
    if patched.backup is not None:
        print(f"backup: {patched.backup}")
    return 0


def confirm(console: Console, log_path: Path) -> bool:
    console.print()
    console.print("This run writes its status log to:", markup=False)
    console.print(f"  {log_path}", markup=False)
    console.print("Command output is kept off the terminal.", markup=False)
    console.print()
    try:
        answer = console.input("Proceed? [Y/n]: ", markup=False)
    except EOFError:
        return False
    return accepts(answer)


def accepts(answer: str) -> bool:
    answer = answer.strip()
    return answer == "" or answer[0] in "yY"


def _print_summary(log: RunLog, report: Report) -> None:
    log.section("SUMMARY")
    log.console.print(f"Log file: {log.path}\n", markup=False)
    log.console.print(render_summary(report, markup=True))

    for line in render_summary(report).splitlines():
        if line:
            log.append(logging.INFO, line)

    log.footer(
        len(report.succeeded), len(report.warned), len(report.failed), report.total_elapsed
    )
