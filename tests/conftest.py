import json

import pytest

from geeknews.models import ArticleRecord
from geeknews.translator import BackendError


class ScriptedTranslator:
    """Replays queued outcomes per text; unscripted texts get a `[ko]` prefix."""

    def __init__(self, script=None, default=None):
        self.script = {text: list(outcomes) for text, outcomes in (script or {}).items()}
        self.default = default
        self.calls = []

    def translate(self, text, source_lang="en", target_lang="ko"):
        self.calls.append(text)
        queue = self.script.get(text)
        outcome = queue.pop(0) if queue else self.default
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            return f"[{target_lang}] {text}"
        return outcome


class AlwaysFailing:
    def __init__(self, error=None):
        self.error = error or BackendError("boom")
        self.calls = 0

    def translate(self, text, source_lang="en", target_lang="ko"):
        self.calls += 1
        raise self.error


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)
        self.content = self.text.encode("utf-8")

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeSession:
    """Stands in for requests.Session: returns queued responses or raises queued errors."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.headers = {}
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_article(n, content=None):
    return ArticleRecord(
        title=f"Article {n}",
        content=content if content is not None else f"Sentence one of {n}. Sentence two of {n}.",
        source="GeekNews",
        source_url=f"https://news.hada.io/topic?id={n}",
        category="개발",
    )


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def articles():
    return [make_article(n) for n in range(1, 8)]


@pytest.fixture
def articles_file(tmp_path, articles):
    path = tmp_path / "geeknews-original-articles.json"
    path.write_text(
        json.dumps([a.to_dict() for a in articles], ensure_ascii=False), encoding="utf-8"
    )
    return path
