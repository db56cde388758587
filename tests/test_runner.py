import pytest

import runner
from env import get_env
from fakes import FakePlaylist, FakeSource, yt
from pipeline.checkpoint import Artist, CheckpointStore, Settlement
from pipeline.errors import TargetMissing
from runner import (
    EXIT_AUTH_INVALID,
    EXIT_FAILED,
    EXIT_OK,
    RunResult,
    run_collect,
    run_once,
    run_push,
)


def _source():
    return FakeSource(
        artists={"7": "Test Artist"},
        listings={"7": [[{"id": 10}, {"id": 11}]]},
        releases={10: [yt("aaaaaaaaaaa")], 11: [yt("bbbbbbbbbbb")]},
    )


def test_collect_writes_checkpoint_named_after_artist(tmp_path, backoff):
    result, store = run_collect("7", source=_source(), backoff=backoff)

    assert result.state == RunResult.OK
    assert result.exit_code == EXIT_OK
    assert store.path == tmp_path / "data" / "Test_Artist_youtube_links.json"
    assert len(store.load()) == 2


def test_collect_unknown_artist_fails(backoff):
    result, store = run_collect("8", source=_source(), backoff=backoff)

    assert result.state == RunResult.FAILED
    assert result.exit_code == EXIT_FAILED
    assert store is None


def test_run_once_collects_then_pushes(backoff):
    dest = FakePlaylist()

    outcome = run_once(
        "7", "PL123", source=_source(), destination=dest, backoff=backoff
    )

    assert outcome.overall == RunResult.OK
    assert outcome.exit_code == EXIT_OK
    assert [s.name for s in outcome.stages] == ["Collect", "Push"]
    assert dest.calls == [("PL123", "aaaaaaaaaaa"), ("PL123", "bbbbbbbbbbb")]

    doc = CheckpointStore(outcome.checkpoint).load()
    statuses = [v.status for _r, v in doc.iter_videos()]
    assert statuses == [Settlement.SUBMITTED, Settlement.SUBMITTED]


def test_run_once_skips_push_when_collect_fails(backoff):
    dest = FakePlaylist()

    outcome = run_once(
        "8", "PL123", source=_source(), destination=dest, backoff=backoff
    )

    assert outcome.overall == RunResult.FAILED
    assert outcome.exit_code == EXIT_FAILED
    assert outcome.stages[-1].state == RunResult.SKIPPED
    assert dest.calls == []


def test_run_once_without_playlist_only_collects(backoff):
    outcome = run_once("7", None, source=_source(), backoff=backoff)

    assert outcome.overall == RunResult.OK
    assert outcome.stages[-1].state == RunResult.SKIPPED
    assert outcome.stages[-1].reason == "no playlist id"


def test_push_with_corrupt_checkpoint_fails(tmp_path, backoff):
    path = tmp_path / "bad.json"
    path.write_text("{{{", encoding="utf-8")

    result = run_push(
        CheckpointStore(path), "PL123", destination=FakePlaylist(), backoff=backoff
    )

    assert result.state == RunResult.FAILED
    assert path.read_text(encoding="utf-8") == "{{{"


def test_push_to_missing_playlist_fails_and_keeps_backlog(backoff):
    run_collect("7", source=_source(), backoff=backoff)
    store = runner.checkpoint_store_for(Artist("7", "Test Artist"))
    gone = TargetMissing("playlist gone", status="target_missing")
    dest = FakePlaylist({"aaaaaaaaaaa": [gone]})

    result = run_push(store, "PL123", destination=dest, backoff=backoff)

    assert result.state == RunResult.FAILED
    assert result.exit_code == EXIT_FAILED
    assert len(dest.calls) == 1
    assert {v.status for _r, v in store.load().iter_videos()} == {
        Settlement.UNPROCESSED
    }


def test_push_empty_checkpoint_never_builds_destination(tmp_path, backoff, monkeypatch):
    def boom(env):
        raise AssertionError("destination should not be built")

    monkeypatch.setattr(runner, "build_destination", boom)

    result = run_push(CheckpointStore(tmp_path / "none.json"), "PL123", backoff=backoff)

    assert result.state == RunResult.OK


def test_push_auth_failure_maps_to_auth_invalid(backoff, monkeypatch):
    from providers.youtube.client import AuthenticationError

    run_collect("7", source=_source(), backoff=backoff)
    store = runner.checkpoint_store_for(Artist("7", "Test Artist"))

    def denied(env):
        raise AuthenticationError("token revoked")

    monkeypatch.setattr(runner, "build_destination", denied)

    result = run_push(store, "PL123", backoff=backoff)

    assert result.state == RunResult.AUTH_INVALID
    assert result.exit_code == EXIT_AUTH_INVALID


def test_push_honours_dry_run_from_env(backoff, monkeypatch):
    from env import reset_env_caches

    run_collect("7", source=_source(), backoff=backoff)
    monkeypatch.setenv("DISCOTUBE_DRY_RUN", "1")
    reset_env_caches()
    dest = FakePlaylist()

    outcome = run_once(
        "7", "PL123", source=_source(), destination=dest, backoff=backoff
    )

    assert outcome.overall == RunResult.OK
    assert dest.calls == []
    assert get_env().dry_run is True


@pytest.mark.parametrize(
    "state, code",
    [
        (RunResult.OK, 0),
        (RunResult.SKIPPED, 0),
        (RunResult.AUTH_INVALID, 12),
        (RunResult.FAILED, 20),
    ],
)
def test_exit_codes(state, code):
    assert runner.StageResult.of("X", state).exit_code == code
