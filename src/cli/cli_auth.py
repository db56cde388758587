from __future__ import annotations

import argparse

from rich.console import Console
from rich.text import Text

from auth import AuthHealthStatus, check
from cli.common import add_output_flags
from env import get_logging_env
from logger import get_logger
from runner import EXIT_AUTH_INVALID, EXIT_FAILED, EXIT_OK, EXIT_USAGE


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_auth_parser(subparsers: argparse._SubParsersAction) -> None:
    auth = subparsers.add_parser(
        "auth",
        help="Check OAuth health and reauthenticate if required",
    )

    add_output_flags(auth)
    auth.add_argument(
        "--provider",
        default="youtube",
        help="Auth provider to check (default: youtube)",
    )

    auth.set_defaults(action="auth")


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


def handle_auth(args: argparse.Namespace, console: Console | None = None) -> int:
    logger = get_logger("auth")
    console = console or Console()
    quiet = get_logging_env().quiet
    verbose = get_logging_env().verbose

    try:
        result = check(args.provider)
    except ValueError as e:
        logger.error(str(e))
        return EXIT_USAGE

    if result.status == AuthHealthStatus.OK:
        logger.info("RUN_STATUS=completed")
        if not quiet:
            msg = Text(result.message, style="green")
            if verbose:
                msg.append(" (token valid and usable)", style="dim")
            console.print(msg)
        return EXIT_OK

    if result.status == AuthHealthStatus.OK_API_QUOTA:
        logger.info("RUN_STATUS=completed")
        if not quiet:
            msg = Text("OAuth OK", style="green")
            msg.append(" (API quota exhausted)", style="yellow")
            console.print(msg)
        return EXIT_OK

    if result.status == AuthHealthStatus.AUTH_INVALID:
        logger.error("RUN_STATUS=auth_invalid")
        if not quiet:
            console.print(Text(result.message, style="red"))
        return EXIT_AUTH_INVALID

    logger.error("RUN_STATUS=failed")
    if not quiet:
        console.print(Text(result.message, style="red"))
    return EXIT_FAILED
