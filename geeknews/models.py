"""
geeknews/models.py
------------------
Plain data records passed between the chunker, the translator and the pipeline.
"""

from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class ArticleRecord:
    """One scraped article. Never mutated; translation builds a new record."""

    title:      str
    content:    str
    source:     str = ""
    source_url: str = ""
    category:   str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ArticleRecord":
        """Build a record from the camelCase JSON shape. `title` and `content` are required."""
        missing = [key for key in ("title", "content") if not isinstance(data.get(key), str)]
        if missing:
            raise ValueError(f"article is missing {', '.join(missing)}")
        return cls(
            title=data["title"],
            content=data["content"],
            source=data.get("source") or "",
            source_url=data.get("sourceUrl") or "",
            category=data.get("category") or "",
        )

    def to_dict(self) -> dict:
        return {
            "title":     self.title,
            "content":   self.content,
            "source":    self.source,
            "sourceUrl": self.source_url,
            "category":  self.category,
        }

    def with_content(self, content: str) -> "ArticleRecord":
        return replace(self, content=content)

    def same_article(self, other: "ArticleRecord") -> bool:
        """True when both records describe the same input article."""
        return self.source_url == other.source_url and self.title == other.title


@dataclass(frozen=True)
class Chunk:
    text:           str
    sequence_index: int


@dataclass(frozen=True)
class TranslationResult:
    """Outcome for one chunk. On failure `text` carries the original chunk text."""

    sequence_index: int
    text:           str
    succeeded:      bool


# Ordered list of fully processed articles, owned by the pipeline.
RunProgress = list[ArticleRecord]


@dataclass
class RunStats:
    """Counters for a single run, returned to the caller instead of kept globally."""

    articles_total:      int = 0
    articles_done:       int = 0
    articles_translated: int = 0
    articles_skipped:    int = 0
    articles_resumed:    int = 0
    articles_failed:     int = 0
    chunks_total:        int = 0
    chunks_translated:   int = 0
    chunks_fallback:     int = 0
    rate_limit_hits:     int = 0
    chars_in:            int = 0
    chars_out:           int = 0
    elapsed:             float = 0.0


@dataclass
class RunReport:
    records:   RunProgress = field(default_factory=list)
    stats:     RunStats = field(default_factory=RunStats)
    cancelled: bool = False
