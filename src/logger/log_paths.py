from __future__ import annotations

from pathlib import Path

from env.paths import artist_logs_dir, module_logs_dir


def run_logs_dir(command: str, artist: str | None) -> Path:
    return artist_logs_dir(command, artist) if artist else module_logs_dir(command)
