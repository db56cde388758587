import pytest

from fakes import FakeSource, yt
from pipeline.checkpoint import (
    Artist,
    CheckpointDocument,
    CheckpointStore,
    Release,
    Settlement,
    Video,
)
from pipeline.errors import Fatal, NotFound, RateLimited
from stages.collect import TraversalAborted, TraversalEngine, release_id_of

ARTIST = Artist(id="7", name="Test Artist")


def _source(**kw):
    listing = [
        [{"id": 10}, {"id": 11}],
        [{"id": 99, "type": "master", "main_release": 13}, {"id": 10}],
    ]
    releases = {
        10: [yt("aaaaaaaaaaa"), yt("bbbbbbbbbbb")],
        11: [],
        13: [yt("ccccccccccc")],
    }
    return FakeSource(
        artists={"7": "Test Artist"},
        listings={"7": listing},
        releases=releases,
        **kw,
    )


@pytest.fixture
def store(tmp_path):
    return CheckpointStore(tmp_path / ARTIST.checkpoint_name)


def test_release_id_prefers_main_release():
    assert release_id_of({"id": 1, "main_release": 2}) == 2
    assert release_id_of({"id": 1}) == 1


def test_resolve_artist(backoff):
    engine = TraversalEngine(_source(), backoff)
    assert engine.resolve_artist("7") == ARTIST


def test_unknown_artist_aborts(backoff):
    with pytest.raises(TraversalAborted):
        TraversalEngine(_source(), backoff).resolve_artist("8")


def test_full_run_completes_every_release(backoff, store):
    source = _source()
    report = TraversalEngine(source, backoff).run(ARTIST, store)

    assert report.discovered == 3
    assert report.fetched == 3
    assert report.videos_found == 3

    doc = store.load()
    assert [r.id for r in doc] == [10, 11, 13]
    assert all(r.complete for r in doc)
    assert doc.get(11).videos == []
    assert [v.url for v in doc.get(13).videos] == [yt("ccccccccccc")]


def test_second_run_fetches_no_release(backoff, store):
    TraversalEngine(_source(), backoff).run(ARTIST, store)
    before = store.path.read_text(encoding="utf-8")

    source = _source()
    report = TraversalEngine(source, backoff).run(ARTIST, store)

    assert source.release_calls() == []
    assert report.skipped_complete == 3
    assert store.path.read_text(encoding="utf-8") == before


def test_partial_checkpoint_resumes_with_missing_release(backoff, store):
    store.save(
        CheckpointDocument(
            [
                Release(id=10, complete=True, videos=[Video(yt("aaaaaaaaaaa"))]),
                Release(id=11, complete=True),
            ]
        )
    )

    source = _source()
    report = TraversalEngine(source, backoff).run(ARTIST, store)

    assert source.release_calls() == ["fake://releases/13"]
    assert report.fetched == 1
    assert store.load().get(13).complete is True


def test_fatal_aborts_and_keeps_last_checkpoint(backoff, store):
    source = _source(failures={"fake://releases/11": [Fatal("boom", status=500)]})

    with pytest.raises(TraversalAborted) as exc:
        TraversalEngine(source, backoff).run(ARTIST, store)

    assert exc.value.release_id == 11

    doc = store.load()
    assert doc.get(10).complete is True
    assert doc.get(11) is None or doc.get(11).complete is False
    assert doc.get(13) is None

    # the next run picks up where this one stopped
    retry = _source()
    TraversalEngine(retry, backoff).run(ARTIST, store)
    assert retry.release_calls() == ["fake://releases/11", "fake://releases/13"]


def test_missing_release_is_marked_complete_and_traversal_continues(backoff, store):
    source = _source(failures={"fake://releases/11": [NotFound("gone", status=404)]})

    report = TraversalEngine(source, backoff).run(ARTIST, store)

    assert report.missing == [11]
    doc = store.load()
    assert doc.get(11).complete is True
    assert doc.get(11).videos == []
    assert doc.get(13).complete is True


def test_rate_limited_release_is_retried(backoff, sleeps, store):
    limited = [RateLimited("429", status=429)] * 2
    source = _source(failures={"fake://releases/10": limited})

    TraversalEngine(source, backoff).run(ARTIST, store)

    assert sleeps == [20, 40]
    assert store.load().get(10).complete is True


def test_listing_failure_aborts_before_any_release(backoff, store):
    page2 = "fake://artists/7/releases?page=2"
    source = _source(failures={page2: [Fatal("boom", status=502)]})

    with pytest.raises(TraversalAborted):
        TraversalEngine(source, backoff).run(ARTIST, store)

    assert source.release_calls() == []
    assert len(store.load()) == 0


def test_release_limit(backoff, store):
    source = _source()
    report = TraversalEngine(source, backoff, limit=1).run(ARTIST, store)

    assert source.release_calls() == ["fake://releases/10"]
    assert report.discovered == 3
    assert len(store.load()) == 1


def test_recollecting_release_keeps_settled_videos(backoff, store):
    store.save(
        CheckpointDocument(
            [
                Release(
                    id=10,
                    complete=False,
                    videos=[Video(yt("aaaaaaaaaaa"), Settlement.SUBMITTED)],
                )
            ]
        )
    )

    TraversalEngine(_source(), backoff).run(ARTIST, store)

    videos = store.load().get(10).videos
    assert [v.status for v in videos] == [
        Settlement.SUBMITTED,
        Settlement.UNPROCESSED,
    ]
