from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="brewstrap")

    parser.add_argument(
        "--plan",
        default="brewstrap.yml",
        help="Path to provisioning plan",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
    )

    # run
    run = subparsers.add_parser("run", help="Provision every task in the plan")
    run.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )
    run.add_argument(
        "--log-file",
        default=None,
        help="Append the run log here instead of the plan's log_file",
    )
    run.add_argument(
        "--capture-output",
        action="store_true",
        help="Append command stdout/stderr to the run log",
    )

    # list
    subparsers.add_parser("list", help="List tasks in execution order")

    # patch
    patch = subparsers.add_parser("patch", help="Set one key in a key = value config file")
    patch.add_argument("file", help="Config file to patch")
    patch.add_argument("key", help="Key to set")
    patch.add_argument("value", help="Value, written verbatim")
    patch.add_argument(
        "--no-backup",
        action="store_true",
        help="Do not keep a .bak.<timestamp> copy of the previous file",
    )

    return parser
