"""
utils.py

File I/O helpers.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any


def write_json(path: Path, data: Any, atomic: bool = True) -> None:
    """
    Write data to a JSON file.

    Args:
        path: Path to JSON file
        data: Data to serialize
        atomic: If True, write to a temp file, fsync, then rename over path.
            Readers see either the previous document or the new one.

    Raises:
        TypeError: If data is not JSON serializable
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Serialize first so a TypeError never leaves a truncated file behind
    payload = json.dumps(data, indent=2, ensure_ascii=False)

    if not atomic:
        path.write_text(payload, encoding="utf-8")
        return

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
