from __future__ import annotations

import logging
from pathlib import Path


def enforce_retention(log_dir: Path, keep: int) -> int:
    """Delete all but the newest `keep` logs in log_dir. Returns number removed."""
    if keep <= 0:
        return 0

    logs = sorted(
        log_dir.glob("*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    removed = 0
    for old in logs[keep:]:
        try:
            old.unlink()
            removed += 1
        except OSError as e:
            logging.getLogger(__name__).debug(f"Could not prune {old}: {e}")
    return removed
