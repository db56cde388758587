import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from fakes import yt

SRC = Path(__file__).resolve().parent.parent / "src"


def _run_module(*args):
    env = dict(os.environ)
    env["PYTHONPATH"] = str(SRC) + os.pathsep + env.get("PYTHONPATH", "")
    return subprocess.run(
        [sys.executable, "-m", "discotube", *args],
        capture_output=True,
        text=True,
        env=env,
    )


@pytest.mark.parametrize("command", ["collect", "push", "sync", "stats", "auth"])
def test_command_help_runs(command):
    result = _run_module(command, "--help")
    assert result.returncode == 0
    assert command in result.stdout


def test_help_command_runs():
    result = _run_module("help")
    assert result.returncode == 0
    assert "collect" in result.stdout


def _write_checkpoint(tmp_path):
    path = tmp_path / "data" / "Test_youtube_links.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            [
                {
                    "id": 1,
                    "complete": True,
                    "videos": [
                        {"url": yt("aaaaaaaaaaa"), "uploaded": True},
                        {"url": yt("aaaaaaaaaaa"), "uploaded": False},
                        {"url": yt("bbbbbbbbbbb"), "uploaded": 404},
                    ],
                }
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_stats_reports_checkpoint(tmp_path, capsys):
    from discotube import main

    _write_checkpoint(tmp_path)

    assert main(["stats", "Test_youtube_links.json"]) == 0

    out = capsys.readouterr().out
    assert "Unique URLs" in out


def test_stats_on_corrupt_checkpoint_fails(tmp_path):
    from discotube import main

    bad = tmp_path / "bad.json"
    bad.write_text("nope", encoding="utf-8")

    assert main(["stats", str(bad), "--quiet"]) == 20


def test_push_missing_checkpoint_is_usage_error():
    from discotube import main

    assert main(["push", "does_not_exist.json", "--quiet"]) == 2


def test_push_without_playlist_id_is_usage_error(tmp_path):
    from discotube import main

    path = _write_checkpoint(tmp_path)

    # stdin is not a terminal under pytest, so there is no prompt
    assert main(["push", str(path), "--quiet"]) == 2


def test_push_rejects_invalid_playlist_id(tmp_path):
    from discotube import main

    path = _write_checkpoint(tmp_path)

    assert main(["push", str(path), "--playlist-id", "bad id!", "--quiet"]) == 2


def test_push_dry_run_leaves_checkpoint_untouched(tmp_path):
    from discotube import main

    path = _write_checkpoint(tmp_path)
    before = path.read_text(encoding="utf-8")

    code = main(["push", str(path), "--playlist-id", "PL123", "--dry-run", "--quiet"])

    # dry run never builds the YouTube client
    assert code == 0
    assert path.read_text(encoding="utf-8") == before


def test_env_dump(capsys):
    from discotube import main

    assert main(["env", "dump"]) == 0
    assert "Backoff" in capsys.readouterr().out
