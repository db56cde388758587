from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from env import reset_env_caches
from env.paths import data_dir


# ----------------------------
# Help dispatch (subparser-local)
# ----------------------------


def dispatch_subparser_help(
    parser: argparse.ArgumentParser, path: list[str] | None
) -> int:
    """
    Implements consistent `X help [subcmd ...]` behavior for a subtree parser.
    """
    if not path:
        parser.print_help()
        return 0

    try:
        parser.parse_args(path + ["--help"])
    except SystemExit:
        pass
    return 0


# ----------------------------
# Shared flags
# ----------------------------


def add_output_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--verbose", action="store_true", help="Verbose console output")
    parser.add_argument("--quiet", action="store_true", help="Suppress console output")


def stamp_env(values: dict[str, Optional[object]]) -> None:
    """
    Write CLI overrides into os.environ, the configuration boundary for the
    stages. None leaves the current value alone.
    """
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "1" if value else "0"
        os.environ[key] = str(value)

    reset_env_caches()


# ----------------------------
# Checkpoint lookup
# ----------------------------


def resolve_checkpoint(name: str) -> Path | None:
    """
    Accept a checkpoint path, or a bare file name inside the data directory.
    """
    p = Path(name).expanduser()
    if p.is_file():
        return p.resolve()

    if not p.is_absolute():
        candidate = data_dir() / p
        if candidate.is_file():
            return candidate.resolve()

    return None


# ----------------------------
# CLI output helpers
# ----------------------------


def print_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    title: str | None = None,
    console: Console | None = None,
) -> None:
    console = console or Console()

    if not rows:
        console.print("(no results)")
        return

    table = Table(title=title, show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(str(c) for c in row))

    console.print(table)
