import json

import pytest

from geeknews.checkpoint import CheckpointError, ProgressCheckpointer
from geeknews.models import ArticleRecord
from geeknews.store import FatalInputError, load_articles, save_articles
from conftest import make_article


def test_load_articles_reads_camel_case_fields(articles_file, articles):
    loaded = load_articles(articles_file)
    assert loaded == articles
    assert loaded[0].source_url == "https://news.hada.io/topic?id=1"


def test_missing_optional_fields_default_to_empty(tmp_path):
    path = tmp_path / "in.json"
    path.write_text(json.dumps([{"title": "T", "content": "C"}]), encoding="utf-8")
    assert load_articles(path) == [ArticleRecord(title="T", content="C")]


@pytest.mark.parametrize("body", [
    "{not json",
    json.dumps({"title": "T", "content": "C"}),
    json.dumps(["just a string"]),
    json.dumps([{"title": "no content"}]),
])
def test_unusable_input_is_fatal(tmp_path, body):
    path = tmp_path / "in.json"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(FatalInputError):
        load_articles(path)


def test_missing_input_is_fatal(tmp_path):
    with pytest.raises(FatalInputError, match="not found"):
        load_articles(tmp_path / "nope.json")


def test_failed_save_removes_temp_file(tmp_path, monkeypatch):
    path = tmp_path / "articles.json"

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("geeknews.store.os.replace", broken_replace)
    with pytest.raises(OSError, match="disk full"):
        save_articles(path, [make_article(1)])
    assert list(tmp_path.iterdir()) == []


def test_save_writes_readable_utf8_and_leaves_no_temp_file(tmp_path):
    path = tmp_path / "out" / "articles.json"
    record = make_article(1, "한국어 본문")
    save_articles(path, [record])

    text = path.read_text(encoding="utf-8")
    assert "한국어 본문" in text
    assert '"sourceUrl"' in text
    assert load_articles(path) == [record]
    assert [p.name for p in path.parent.iterdir()] == ["articles.json"]


# ── Checkpointer ──────────────────────────────────────────────────────────────

def test_checkpoint_overwrites_with_full_snapshot(tmp_path, articles):
    checkpointer = ProgressCheckpointer(tmp_path / "progress.json", every=5)
    checkpointer.checkpoint(articles[:2])
    checkpointer.checkpoint(articles[:4])
    assert checkpointer.load() == articles[:4]


def test_checkpoint_is_idempotent(tmp_path, articles):
    path = tmp_path / "progress.json"
    checkpointer = ProgressCheckpointer(path, every=5)
    checkpointer.checkpoint(articles)
    first = path.read_bytes()
    checkpointer.checkpoint(articles)
    assert path.read_bytes() == first


def test_maybe_checkpoint_only_on_interval(tmp_path, articles):
    checkpointer = ProgressCheckpointer(tmp_path / "progress.json", every=5)
    assert [checkpointer.maybe_checkpoint(articles[:n]) for n in range(0, 7)] == [
        False, False, False, False, False, True, False,
    ]
    assert len(checkpointer.load()) == 5


def test_load_without_snapshot_is_empty(tmp_path):
    assert ProgressCheckpointer(tmp_path / "none.json", every=1).load() == []


def test_corrupt_snapshot_raises_checkpoint_error(tmp_path):
    path = tmp_path / "progress.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(CheckpointError):
        ProgressCheckpointer(path, every=1).load()


def test_unwritable_path_raises_checkpoint_error(tmp_path, articles):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(CheckpointError):
        ProgressCheckpointer(blocker / "progress.json", every=1).checkpoint(articles)


def test_interval_must_be_positive(tmp_path):
    with pytest.raises(ValueError):
        ProgressCheckpointer(tmp_path / "p.json", every=0)
