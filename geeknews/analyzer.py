"""
geeknews/analyzer.py
--------------------
UntranslatedDetector — spots articles whose content still reads as English
after a run, typically because most of their chunks fell back to the original.
"""

import re

import config
from geeknews.models import ArticleRecord


# Latin words of 4+ letters; short tokens (a, the, API, v2) are common in
# translated tech articles and would skew the ratio.
LATIN_WORD = re.compile(r"\b[a-zA-Z]{4,}\b")


class UntranslatedDetector:
    """Flags text where the share of English words exceeds a threshold."""

    def __init__(self, threshold: float = config.UNTRANSLATED_THRESHOLD):
        """
        Args:
            threshold: Flag text whose English-word ratio is STRICTLY MORE THAN this.
        """
        self.threshold = threshold

    def english_ratio(self, text: str) -> float:
        words = text.split()
        if not words:
            return 0.0
        return len(LATIN_WORD.findall(text)) / len(words)

    def looks_untranslated(self, text: str) -> bool:
        return self.english_ratio(text) > self.threshold

    def find_untranslated(self, records: list[ArticleRecord]) -> list[int]:
        """Return the indexes of records whose content still looks untranslated."""
        return [i for i, r in enumerate(records) if self.looks_untranslated(r.content)]
