"""
Discotube CLI package.

argparse-based subcommands. Each module exposes:
- build_*_parser(subparsers)
- handle_*(args) -> int

No side effects at package import time.
"""
from __future__ import annotations

__all__ = [
    "cli_auth",
    "cli_env",
    "cli_sync",
]
