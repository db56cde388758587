from __future__ import annotations

import argparse
from typing import Optional

from rich.prompt import Prompt

from branding import DISCOTUBE_BANNER, DISCOTUBE_HEADER
from cli.common import add_output_flags, print_table, resolve_checkpoint, stamp_env
from env import Environment, get_env, validate_playlist_id
from logger import get_logger
from pipeline.checkpoint import CheckpointError, CheckpointStore, summarize
from runner import (
    EXIT_FAILED,
    EXIT_OK,
    EXIT_USAGE,
    RunOutcome,
    RunResult,
    StageResult,
)

log = get_logger("discotube")


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def _add_collect_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Process only the first N releases (debugging)",
    )
    p.add_argument(
        "--no-pagination",
        action="store_true",
        help="Read only the first page of the release listing",
    )


def _add_push_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--playlist-id", default=None, help="Target YouTube playlist id")
    p.add_argument(
        "--dry-run", action="store_true", help="Log submissions without making them"
    )
    p.add_argument(
        "--max-submit",
        type=int,
        default=None,
        help="Stop submitting after N insert attempts (0 = unlimited)",
    )


def build_sync_parser(subparsers: argparse._SubParsersAction) -> None:
    collect = subparsers.add_parser(
        "collect", help="Collect an artist's release videos into a checkpoint"
    )
    collect.add_argument("artist_id", help="Discogs artist id")
    _add_collect_flags(collect)
    add_output_flags(collect)

    push = subparsers.add_parser(
        "push", help="Replay a checkpoint into a YouTube playlist"
    )
    push.add_argument("checkpoint", help="Checkpoint file (path or name in data dir)")
    _add_push_flags(push)
    add_output_flags(push)

    sync = subparsers.add_parser("sync", help="Collect, then push")
    sync.add_argument("artist_id", help="Discogs artist id")
    _add_collect_flags(sync)
    _add_push_flags(sync)
    add_output_flags(sync)

    stats = subparsers.add_parser("stats", help="Summarize a checkpoint file")
    stats.add_argument("checkpoint", help="Checkpoint file (path or name in data dir)")
    add_output_flags(stats)


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------


def _stamp_collect_flags(args: argparse.Namespace) -> None:
    stamp_env(
        {
            "DISCOTUBE_RELEASE_LIMIT": args.limit,
            "DISCOTUBE_PAGINATION": False if args.no_pagination else None,
        }
    )


def _stamp_push_flags(args: argparse.Namespace) -> None:
    stamp_env(
        {
            "DISCOTUBE_DRY_RUN": True if args.dry_run else None,
            "DISCOTUBE_MAX_SUBMIT": args.max_submit,
        }
    )


def resolve_playlist_id(explicit: Optional[str], env: Environment) -> Optional[str]:
    """
    Flag first, then DISCOTUBE_PLAYLIST_ID, then an interactive prompt.
    Returns None when nothing was supplied.

    Raises:
        ConfigError: for an id with characters outside [A-Za-z0-9_-]
    """
    playlist_id = (explicit or env.playlist_id or "").strip()

    if not playlist_id and env.interactive:
        playlist_id = Prompt.ask("Enter YouTube playlist ID").strip()

    if not playlist_id:
        return None
    return validate_playlist_id(playlist_id)


def _log_start(command: str) -> None:
    log.info(DISCOTUBE_BANNER)
    log.info("Discotube starting")
    log.info(f"Command: {command}")


def _log_run_summary(stages: list[StageResult]) -> None:
    log.info("")
    log.info("Run summary:")
    for stage in stages:
        if stage.reason:
            log.info(f"  - {stage.name}: {stage.state.value} ({stage.reason})")
        else:
            log.info(f"  - {stage.name}: {stage.state.value}")
    log.info("")


def _finish(state: RunResult, exit_code: int) -> int:
    if state in (RunResult.OK, RunResult.SKIPPED):
        log.info("RUN_STATUS=completed")
        log.info("Done: OK")
    elif state == RunResult.AUTH_INVALID:
        log.error("RUN_STATUS=auth_invalid")
        log.error("Done: OAuth invalid (reauth required)")
    else:
        log.error("RUN_STATUS=failed")
        log.error("Done: failed")
    return exit_code


# ------------------------------------------------------------
# Handlers
# ------------------------------------------------------------


def handle_collect(args: argparse.Namespace) -> int:
    from runner import run_collect

    _stamp_collect_flags(args)
    env = get_env()

    _log_start("collect")
    log.info(DISCOTUBE_HEADER(f"Artist {args.artist_id}").rstrip("\n"))

    result, store = run_collect(args.artist_id, env=env)
    if store is not None:
        log.info(f"Checkpoint: {store.path}")

    _log_run_summary([result])
    return _finish(result.state, result.exit_code)


def handle_push(args: argparse.Namespace) -> int:
    from runner import run_push

    path = resolve_checkpoint(args.checkpoint)
    if path is None:
        log.error(f"Checkpoint not found: {args.checkpoint}")
        return EXIT_USAGE

    _stamp_push_flags(args)
    env = get_env()

    playlist_id = resolve_playlist_id(args.playlist_id, env)
    if not playlist_id:
        log.error("No playlist id: pass --playlist-id or set DISCOTUBE_PLAYLIST_ID")
        return EXIT_USAGE

    _log_start("push")
    log.info(f"Checkpoint: {path}")
    log.info(f"Playlist: {playlist_id}")
    if env.dry_run:
        log.info("Dry run: no playlist changes will be made")

    result = run_push(CheckpointStore(path), playlist_id, env=env)

    _log_run_summary([result])
    return _finish(result.state, result.exit_code)


def handle_sync(args: argparse.Namespace) -> int:
    from runner import run_once

    _stamp_collect_flags(args)
    _stamp_push_flags(args)
    env = get_env()

    playlist_id = resolve_playlist_id(args.playlist_id, env)

    _log_start("sync")
    log.info(f"Artist: {args.artist_id}")
    log.info(f"Playlist: {playlist_id or '(none, push will be skipped)'}")

    outcome: RunOutcome = run_once(args.artist_id, playlist_id, env=env)
    if outcome.checkpoint is not None:
        log.info(f"Checkpoint: {outcome.checkpoint}")

    _log_run_summary(outcome.stages)
    return _finish(outcome.overall, outcome.exit_code)


def handle_stats(args: argparse.Namespace) -> int:
    path = resolve_checkpoint(args.checkpoint)
    if path is None:
        log.error(f"Checkpoint not found: {args.checkpoint}")
        return EXIT_USAGE

    try:
        document = CheckpointStore(path).load()
    except CheckpointError as e:
        log.error(f"Checkpoint unusable: {e}")
        return EXIT_FAILED

    s = summarize(document)
    rows = [
        ["Releases", s.releases],
        ["Complete releases", s.complete_releases],
        ["Total URLs", s.total_urls],
        ["Unique URLs", s.unique_urls],
        ["Unprocessed", s.unprocessed],
        ["Submitted", s.submitted],
        ["Not found (404)", s.not_found],
        ["Unparsable URLs", s.unparsable],
    ]

    if not get_env().quiet:
        print_table(["Metric", "Count"], rows, title=path.name)

    log.info(
        f"Stats {path.name}: releases={s.releases} total_urls={s.total_urls} "
        f"unique_urls={s.unique_urls}"
    )
    return EXIT_OK
