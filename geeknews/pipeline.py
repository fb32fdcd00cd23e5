"""
geeknews/pipeline.py
--------------------
TranslationPipeline — drives a whole batch through one translation backend.

Everything is strictly sequential: one article at a time, one chunk at a
time, one request in flight. Free backends throttle per time window, so the
only protection is a fixed pause after every successful request and a long
cooldown (plus a single retry) when the backend reports a rate limit.

Failures degrade instead of aborting:
  - a chunk that cannot be translated keeps its original text
  - an article that blows up unexpectedly keeps its original content
  - every input article yields exactly one output record

The pipeline never prints. It reports through `on_event(ProgressEvent)`.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable

import config
from geeknews.checkpoint import CheckpointError, ProgressCheckpointer
from geeknews.chunker import TextChunker
from geeknews.models import (
    ArticleRecord, Chunk, RunProgress, RunReport, RunStats, TranslationResult,
)
from geeknews.translator import BaseTranslator, RateLimited, TranslationError


# ── Progress events ───────────────────────────────────────────────────────────

RUN_STARTED       = "run_started"
ARTICLE_STARTED   = "article_started"
ARTICLE_FINISHED  = "article_finished"
ARTICLE_SKIPPED   = "article_skipped"
ARTICLE_FAILED    = "article_failed"
RATE_LIMITED      = "rate_limited"
CHUNK_FALLBACK    = "chunk_fallback"
CHECKPOINT_SAVED  = "checkpoint_saved"
CHECKPOINT_FAILED = "checkpoint_failed"
RUN_CANCELLED     = "run_cancelled"
RUN_FINISHED      = "run_finished"


@dataclass
class ProgressEvent:
    kind:       str
    index:      int = 0         # 1-based article position, 0 for run-level events
    total:      int = 0
    title:      str = ""
    detail:     str = ""
    chars_in:   int = 0
    chars_out:  int = 0
    chunks:     int = 0
    translated: int = 0
    stats:      RunStats | None = None


@dataclass
class PipelineSettings:
    source_lang:         str = config.SOURCE_LANG
    target_lang:         str = config.TARGET_LANG
    request_delay:       float = config.BACKEND_PROFILES["mymemory"]["request_delay"]
    rate_limit_cooldown: float = config.RATE_LIMIT_COOLDOWN
    max_content_chars:   int | None = None     # cap on content sent per article


class _Cancelled(Exception):
    """Raised between chunks when the cancel event is set."""


class TranslationPipeline:
    """Sequential chunk → translate → reassemble driver with checkpointing."""

    def __init__(
        self,
        translator: BaseTranslator,
        chunker: TextChunker,
        settings: PipelineSettings | None = None,
        checkpointer: ProgressCheckpointer | None = None,
        on_event: Callable[[ProgressEvent], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        cancel_event: threading.Event | None = None,
    ):
        """
        Args:
            translator:   Any object with `translate(text, source_lang, target_lang)`
                          raising `TranslationError` subclasses on failure.
            chunker:      Splits content and supplies the matching joiner.
            checkpointer: Optional; offered the progress after every article.
            sleep, clock: Injected so tests can run without real waits.
            cancel_event: Checked between chunks and between articles.
        """
        self.translator = translator
        self.chunker = chunker
        self.settings = settings or PipelineSettings()
        self.checkpointer = checkpointer
        self.on_event = on_event
        self.sleep = sleep
        self.clock = clock
        self.cancel_event = cancel_event

    # ── Public API ────────────────────────────────────────────────────────────

    def run(
        self,
        articles: Iterable[ArticleRecord],
        resume_from: list[ArticleRecord] | None = None,
        select: Callable[[ArticleRecord], bool] | None = None,
        limit: int | None = None,
    ) -> RunReport:
        """
        Translate *articles* in order and return one record per input article.

        Args:
            resume_from: A previous snapshot. Its leading records that match the
                         input are reused instead of being translated again.
            select:      Only articles for which this returns True are translated;
                         the rest are passed through unchanged.
            limit:       Process only the first *limit* articles.
        """
        articles = list(articles)
        if limit is not None:
            articles = articles[:limit]

        stats = RunStats(articles_total=len(articles))
        progress: RunProgress = self._resumed_prefix(articles, resume_from or [])
        stats.articles_resumed = len(progress)
        stats.articles_done = len(progress)
        report = RunReport(records=progress, stats=stats)
        started = self.clock()

        self._emit(RUN_STARTED, total=len(articles), stats=stats,
                   detail=f"resuming after {len(progress)} article(s)" if progress else "")

        for i in range(len(progress), len(articles)):
            if self._cancelled():
                report.cancelled = True
                break
            article = articles[i]
            position = dict(index=i + 1, total=len(articles), title=article.title)

            if select is not None and not select(article):
                progress.append(article)
                stats.articles_skipped += 1
                stats.articles_done += 1
                self._emit(ARTICLE_SKIPPED, **position)
                self._offer_checkpoint(progress)
                continue

            self._emit(ARTICLE_STARTED, chars_in=len(article.content), **position)
            translated_before = stats.chunks_translated
            try:
                record, chunk_count = self._translate_article(article, stats)
            except _Cancelled:
                report.cancelled = True
                break
            except Exception as exc:   # one bad article must not end the batch
                record = article
                stats.articles_failed += 1
                self._emit(ARTICLE_FAILED, detail=f"{type(exc).__name__}: {exc}", **position)
            else:
                translated = stats.chunks_translated - translated_before
                if translated:
                    stats.articles_translated += 1
                self._emit(ARTICLE_FINISHED, chars_in=len(article.content),
                           chars_out=len(record.content), chunks=chunk_count,
                           translated=translated, **position)

            progress.append(record)
            stats.articles_done += 1
            self._offer_checkpoint(progress)

        if report.cancelled:
            self._emit(RUN_CANCELLED, total=len(articles), stats=stats,
                       detail=f"stopped after {len(progress)} article(s)")
        self._final_checkpoint(progress)

        stats.elapsed = self.clock() - started
        self._emit(RUN_FINISHED, total=len(articles), stats=stats)
        return report

    def translate_article(self, article: ArticleRecord,
                          stats: RunStats | None = None) -> ArticleRecord:
        """Return a new record with `content` translated chunk by chunk."""
        record, _ = self._translate_article(article, stats or RunStats())
        return record

    def translate_chunk(self, chunk: Chunk, stats: RunStats | None = None) -> TranslationResult:
        """
        Translate one chunk.

        Success is followed by the pacing delay. A rate limit costs one
        cooldown and one retry; anything else falls back to the original text.
        """
        stats = stats if stats is not None else RunStats()
        try:
            translated = self._call(chunk)
        except RateLimited as exc:
            stats.rate_limit_hits += 1
            self._emit(RATE_LIMITED, detail=str(exc), stats=stats)
            self.sleep(self.settings.rate_limit_cooldown)
            try:
                translated = self._call(chunk)
            except TranslationError as retry_exc:
                return self._fallback(chunk, retry_exc, stats)
        except TranslationError as exc:
            return self._fallback(chunk, exc, stats)

        stats.chunks_translated += 1
        self.sleep(self.settings.request_delay)
        return TranslationResult(sequence_index=chunk.sequence_index, text=translated,
                                 succeeded=True)

    # ── Internals ─────────────────────────────────────────────────────────────

    def _translate_article(self, article: ArticleRecord,
                           stats: RunStats) -> tuple[ArticleRecord, int]:
        content = article.content
        if self.settings.max_content_chars is not None:
            content = content[:self.settings.max_content_chars]

        chunks = self.chunker.split(content)
        if not chunks:
            return article, 0

        stats.chunks_total += len(chunks)
        results = []
        for chunk in chunks:
            if self._cancelled():
                raise _Cancelled()
            results.append(self.translate_chunk(chunk, stats))

        results.sort(key=lambda r: r.sequence_index)
        text = self.chunker.joiner.join(r.text for r in results)
        stats.chars_in += len(content)
        stats.chars_out += len(text)
        return article.with_content(text), len(chunks)

    def _call(self, chunk: Chunk) -> str:
        return self.translator.translate(
            chunk.text, self.settings.source_lang, self.settings.target_lang
        )

    def _fallback(self, chunk: Chunk, exc: TranslationError, stats: RunStats) -> TranslationResult:
        stats.chunks_fallback += 1
        self._emit(CHUNK_FALLBACK, detail=f"chunk {chunk.sequence_index + 1}: {exc}", stats=stats)
        return TranslationResult(sequence_index=chunk.sequence_index, text=chunk.text,
                                 succeeded=False)

    @staticmethod
    def _resumed_prefix(articles: list[ArticleRecord],
                        snapshot: list[ArticleRecord]) -> RunProgress:
        progress = []
        for original, done in zip(articles, snapshot):
            if not original.same_article(done):
                break
            progress.append(done)
        return progress

    def _offer_checkpoint(self, progress: RunProgress) -> None:
        if self.checkpointer is None:
            return
        try:
            saved = self.checkpointer.maybe_checkpoint(progress)
        except CheckpointError as exc:
            self._emit(CHECKPOINT_FAILED, detail=str(exc))
            return
        if saved:
            self._emit(CHECKPOINT_SAVED, index=len(progress),
                       detail=str(self.checkpointer.path))

    def _final_checkpoint(self, progress: RunProgress) -> None:
        if self.checkpointer is None:
            return
        try:
            self.checkpointer.checkpoint(progress)
        except CheckpointError as exc:
            self._emit(CHECKPOINT_FAILED, detail=str(exc))
            return
        self._emit(CHECKPOINT_SAVED, index=len(progress), detail=str(self.checkpointer.path))

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _emit(self, kind: str, **fields) -> None:
        if self.on_event is not None:
            self.on_event(ProgressEvent(kind=kind, **fields))
