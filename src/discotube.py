#!/usr/bin/env python3
from __future__ import annotations

import argparse
import os
import sys

from bootstrap import bootstrap_base_env, bootstrap_run_context


_RUN_COMMANDS = ("collect", "push", "sync", "stats")


def _dispatch_help(argv: list[str]) -> int:
    # Support:
    #   discotube help
    #   discotube help push
    #   discotube push help
    if argv and argv[0] == "help":
        argv = argv[1:]
    argv = [a for a in argv if a != "help"]

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0

    try:
        parser.parse_args(argv[:1] + ["--help"])
    except SystemExit:
        pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="discotube",
        description="Copy an artist's Discogs release videos into a YouTube playlist",
    )

    sub = p.add_subparsers(dest="command", required=True)

    help_cmd = sub.add_parser("help", help="Show help")
    help_cmd.add_argument("path", nargs="*", help="Command path to show help for")
    help_cmd.set_defaults(_help=True)

    # Keep imports inside builder to avoid early side effects.
    from cli.cli_auth import build_auth_parser
    from cli.cli_env import build_env_parser
    from cli.cli_sync import build_sync_parser

    build_sync_parser(sub)
    build_auth_parser(sub)
    build_env_parser(sub)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    # Load .env and base environment early
    bootstrap_base_env(env_file=".env", required=False)

    if not argv or argv[0] == "help" or argv[-1] == "help":
        return _dispatch_help(argv)

    parser = build_parser()
    args = parser.parse_args(argv)

    # Stamp run context early (so the logger can route the run log)
    bootstrap_run_context(
        command=args.command,
        artist_id=getattr(args, "artist_id", None),
        playlist_id=getattr(args, "playlist_id", None),
        verbose=bool(getattr(args, "verbose", False)),
        quiet=bool(getattr(args, "quiet", False)),
    )

    # Initialize logging AFTER run-context env stamping
    from env import ConfigError
    from logger import get_logger, init_logging

    init_logging()
    log = get_logger("discotube")
    log.debug(f"Run id: {os.environ.get('DISCOTUBE_RUN_ID', '')}")

    try:
        if args.command in _RUN_COMMANDS:
            from cli import cli_sync

            return getattr(cli_sync, f"handle_{args.command}")(args)

        if args.command == "auth":
            from cli.cli_auth import handle_auth

            return handle_auth(args)

        if args.command == "env":
            from cli.cli_env import handle_env

            return handle_env(args)

    except ConfigError as e:
        log.error(f"Configuration error: {e}")
        return 2

    except KeyboardInterrupt:
        log.warning("Interrupted; progress up to the last saved checkpoint is kept")
        return 130

    raise RuntimeError(f"Unknown command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
