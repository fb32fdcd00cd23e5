"""
geeknews/checkpoint.py
----------------------
ProgressCheckpointer — periodic full-snapshot saves of finished articles.

Each save overwrites the progress file with every article completed so far,
so the file on disk is always a complete list. A crash loses at most the
articles finished since the last save; recovery is per article, never per chunk.
"""

from pathlib import Path

from geeknews.models import ArticleRecord
from geeknews.store import FatalInputError, load_articles, save_articles


class CheckpointError(Exception):
    """The progress file could not be written or read back."""


class ProgressCheckpointer:

    def __init__(self, path: str | Path, every: int):
        if every < 1:
            raise ValueError(f"checkpoint interval must be positive, got {every}")
        self.path = Path(path)
        self.every = every

    def checkpoint(self, progress: list[ArticleRecord]) -> None:
        try:
            save_articles(self.path, progress)
        except OSError as exc:
            raise CheckpointError(f"cannot write {self.path}: {exc}") from exc

    def maybe_checkpoint(self, progress: list[ArticleRecord]) -> bool:
        """Save when the article count reaches a multiple of the interval."""
        if progress and len(progress) % self.every == 0:
            self.checkpoint(progress)
            return True
        return False

    def load(self) -> list[ArticleRecord]:
        """Return the last snapshot, or an empty list when none was saved."""
        if not self.path.exists():
            return []
        try:
            return load_articles(self.path)
        except FatalInputError as exc:
            raise CheckpointError(str(exc)) from exc
