"""
main.py
-------
Command-line entry point — translates a GeekNews article dump.

Usage:
    python main.py translate                       # full run with config.py defaults
    python main.py translate --limit 10            # quick test on the first 10 articles
    python main.py translate --resume              # continue from the progress file
    python main.py fix --input geeknews-articles.json
    python main.py estimate
"""

import argparse
import math
import signal
import sys
import threading

import config
from geeknews.analyzer   import UntranslatedDetector
from geeknews.checkpoint import CheckpointError, ProgressCheckpointer
from geeknews.chunker    import TextChunker
from geeknews.models     import RunReport
from geeknews.pipeline   import PipelineSettings, ProgressEvent, TranslationPipeline
from geeknews.store      import FatalInputError, load_articles, save_articles
from geeknews.translator import BACKENDS, build_translator


EXIT_CANCELLED = 130


class ConsoleReporter:
    """Prints pipeline progress events in the usual console layout."""

    def __init__(self, out=None):
        self.out = out or sys.stdout

    def __call__(self, event: ProgressEvent) -> None:
        handler = getattr(self, f"_on_{event.kind}", None)
        if handler is not None:
            handler(event)

    def _print(self, text: str = "") -> None:
        print(text, file=self.out)

    def _on_run_started(self, e: ProgressEvent) -> None:
        self._print(f"  Articles to process: {e.total}")
        if e.detail:
            self._print(f"  ({e.detail})")
        self._print()

    def _on_article_started(self, e: ProgressEvent) -> None:
        self._print(f"[{e.index}/{e.total}] {shorten(e.title)}")
        self._print(f"  Original: {e.chars_in:,} chars")

    def _on_article_finished(self, e: ProgressEvent) -> None:
        mark = "✓" if e.translated == e.chunks else f"({e.chunks - e.translated} chunk(s) kept original)"
        self._print(f"  Translated: {e.chars_out:,} chars, {e.translated}/{e.chunks} chunks {mark}")

    def _on_article_skipped(self, e: ProgressEvent) -> None:
        self._print(f"[{e.index}/{e.total}] {shorten(e.title)} — skipped")

    def _on_article_failed(self, e: ProgressEvent) -> None:
        self._print(f"  ⚠ Error: {e.detail} — keeping original content")

    def _on_rate_limited(self, e: ProgressEvent) -> None:
        self._print(f"  [Rate limit hit, waiting before retry: {e.detail}]")

    def _on_chunk_fallback(self, e: ProgressEvent) -> None:
        self._print(f"  [translator] {e.detail}")

    def _on_checkpoint_saved(self, e: ProgressEvent) -> None:
        self._print(f"  [Progress saved: {e.index} articles → {e.detail}]")

    def _on_checkpoint_failed(self, e: ProgressEvent) -> None:
        self._print(f"  ⚠ Progress not saved: {e.detail}")

    def _on_run_cancelled(self, e: ProgressEvent) -> None:
        self._print(f"\n  Interrupted — {e.detail}")

    def _on_run_finished(self, e: ProgressEvent) -> None:
        s = e.stats
        self._print("\n" + "=" * 60)
        self._print("  TRANSLATION COMPLETE")
        self._print("=" * 60)
        self._print(f"  Time elapsed       : {s.elapsed / 60:.1f} minutes")
        self._print(f"  Articles processed : {s.articles_done}/{s.articles_total}")
        if s.articles_resumed:
            self._print(f"  Resumed from file  : {s.articles_resumed}")
        if s.articles_skipped:
            self._print(f"  Skipped            : {s.articles_skipped}")
        if s.articles_failed:
            self._print(f"  Failed (original)  : {s.articles_failed}")
        self._print(f"  Chunks translated  : {s.chunks_translated}/{s.chunks_total}")
        self._print(f"  Chunks kept as-is  : {s.chunks_fallback}")
        self._print(f"  Rate limits hit    : {s.rate_limit_hits}")


def shorten(title: str, width: int = 45) -> str:
    return title if len(title) <= width else title[:width] + "..."


def banner(title: str, subtitle: str = "") -> None:
    print("=" * 60)
    print(f"  {title}")
    if subtitle:
        print(f"  {subtitle}")
    print("=" * 60 + "\n")


# ── Building blocks ───────────────────────────────────────────────────────────

def build_chunker(args: argparse.Namespace) -> TextChunker:
    profile = config.BACKEND_PROFILES[args.backend]
    return TextChunker(
        max_chunk_chars=args.max_chunk_chars or profile["max_chunk_chars"],
        mode=profile["chunk_mode"],
    )


def build_pipeline(args: argparse.Namespace, translator=None, **kwargs) -> TranslationPipeline:
    """Assemble a pipeline from parsed arguments. *translator* overrides the backend."""
    profile = config.BACKEND_PROFILES[args.backend]
    if translator is None:
        backend_kwargs = {"timeout": args.timeout}
        if args.backend == "google-cloud":
            backend_kwargs["api_key"] = config.GOOGLE_API_KEY
        translator = build_translator(args.backend, **backend_kwargs)

    settings = PipelineSettings(
        source_lang=args.source,
        target_lang=args.target,
        request_delay=profile["request_delay"] if args.delay is None else args.delay,
        rate_limit_cooldown=args.cooldown,
        max_content_chars=getattr(args, "max_content_chars", None),
    )
    return TranslationPipeline(
        translator=translator,
        chunker=build_chunker(args),
        settings=settings,
        checkpointer=ProgressCheckpointer(args.progress, args.checkpoint_every),
        on_event=ConsoleReporter(),
        **kwargs,
    )


def run_until_done(pipeline: TranslationPipeline, **run_kwargs) -> RunReport:
    """Run *pipeline*, turning the first Ctrl-C into a clean stop at the next chunk."""
    cancel = threading.Event()
    pipeline.cancel_event = cancel

    def _stop(signum, frame):
        if cancel.is_set():
            raise KeyboardInterrupt
        cancel.set()

    previous = signal.signal(signal.SIGINT, _stop)
    try:
        return pipeline.run(**run_kwargs)
    finally:
        signal.signal(signal.SIGINT, previous)


# ── Commands ──────────────────────────────────────────────────────────────────

def cmd_translate(args: argparse.Namespace, translator=None, **kwargs) -> int:
    articles = load_articles(args.input)
    banner(f"Article Translation: {args.source} → {args.target}", f"Backend: {args.backend}")
    print(f"Loaded {len(articles)} articles from {args.input}\n")

    pipeline = build_pipeline(args, translator, **kwargs)
    resume_from = []
    if args.resume:
        try:
            resume_from = pipeline.checkpointer.load()
        except CheckpointError as exc:
            print(f"  ⚠ Ignoring progress file: {exc}")

    report = run_until_done(pipeline, articles=articles, resume_from=resume_from, limit=args.limit)
    if report.cancelled:
        print(f"  Partial results kept in {args.progress}; rerun with --resume")
        return EXIT_CANCELLED

    save_articles(args.output, report.records)
    print(f"\n✓ Saved {len(report.records)} articles to {args.output}")
    return 0


def cmd_fix(args: argparse.Namespace, translator=None, **kwargs) -> int:
    articles = load_articles(args.input)
    detector = UntranslatedDetector(args.threshold)
    flagged = detector.find_untranslated(articles)

    banner("Fixing articles that still read as English", f"Backend: {args.backend}")
    print(f"{len(flagged)} of {len(articles)} articles look untranslated\n")
    if not flagged:
        return 0

    pipeline = build_pipeline(args, translator, **kwargs)
    report = run_until_done(
        pipeline,
        articles=articles,
        select=lambda article: detector.looks_untranslated(article.content),
    )
    if report.cancelled:
        print(f"  Partial results kept in {args.progress}")
        return EXIT_CANCELLED

    output = args.output or args.input
    save_articles(output, report.records)
    print(f"\nFixed {report.stats.articles_translated} articles → {output}")
    return 0


def cmd_estimate(args: argparse.Namespace) -> int:
    articles = load_articles(args.input)
    chunker = build_chunker(args)
    total_chars = sum(len(a.content) for a in articles)
    total_chunks = sum(len(chunker.split(a.content)) for a in articles)

    banner("Translation estimate", f"Backend: {args.backend}")
    print(f"  Articles          : {len(articles)}")
    print(f"  Total characters  : {total_chars:,}")
    print(f"  Estimated chunks  : {total_chunks}")
    print(f"  Estimated time    : {math.ceil(total_chunks * config.SECONDS_PER_CHUNK / 60)} minutes")
    return 0


# ── Argument parsing ──────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Batch-translate GeekNews articles.")
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--input", default=str(config.INPUT_PATH))
    common.add_argument("--backend", choices=sorted(BACKENDS), default=config.TRANSLATION_BACKEND)
    common.add_argument("--max-chunk-chars", type=int, default=None,
                        help="override the backend's request-size ceiling")

    running = argparse.ArgumentParser(add_help=False)
    running.add_argument("--progress", default=str(config.PROGRESS_PATH))
    running.add_argument("--source", default=config.SOURCE_LANG)
    running.add_argument("--target", default=config.TARGET_LANG)
    running.add_argument("--delay", type=float, default=None,
                         help="seconds between requests (default: backend profile)")
    running.add_argument("--cooldown", type=float, default=config.RATE_LIMIT_COOLDOWN)
    running.add_argument("--checkpoint-every", type=int, default=config.CHECKPOINT_EVERY)
    running.add_argument("--timeout", type=float, default=config.REQUEST_TIMEOUT)

    p = sub.add_parser("translate", parents=[common, running], help="translate every article")
    p.add_argument("--output", default=str(config.OUTPUT_PATH))
    p.add_argument("--limit", type=int, default=None, help="only the first N articles")
    p.add_argument("--max-content-chars", type=int, default=None,
                   help="translate at most this many characters per article")
    p.add_argument("--resume", action="store_true", help="reuse articles from the progress file")

    p = sub.add_parser("fix", parents=[common, running],
                       help="re-translate articles that still look untranslated")
    p.add_argument("--output", default=None, help="defaults to overwriting --input")
    p.add_argument("--threshold", type=float, default=config.UNTRANSLATED_THRESHOLD)
    p.set_defaults(progress=str(config.FIX_PROGRESS_PATH))

    sub.add_parser("estimate", parents=[common], help="print size and time estimates")
    return parser


COMMANDS = {
    "translate": cmd_translate,
    "fix":       cmd_fix,
    "estimate":  cmd_estimate,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_chunk_chars is not None and args.max_chunk_chars < 1:
        parser.error("--max-chunk-chars must be positive")
    if getattr(args, "checkpoint_every", 1) < 1:
        parser.error("--checkpoint-every must be positive")
    if getattr(args, "limit", None) is not None and args.limit < 1:
        parser.error("--limit must be positive")
    if args.command != "estimate" and args.backend == "google-cloud" and not config.GOOGLE_API_KEY:
        parser.error("the google-cloud backend needs GOOGLE_API_KEY")

    try:
        return COMMANDS[args.command](args)
    except FatalInputError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
