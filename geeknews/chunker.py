"""
geeknews/chunker.py
-------------------
TextChunker — splits article text into request-sized pieces.

Two modes:
  - sentence : cut after . ! ? (before whitespace), 。 ！ ？ or a newline;
               rejoin with a space
  - paragraph: cut on blank lines, rejoin with a blank line

Units are packed greedily up to `max_chunk_chars`. A single unit longer than
the budget is truncated to it, which loses the tail of that unit.
"""

import re

from geeknews.models import Chunk


# Latin marks must be followed by whitespace so "1.80" stays whole; CJK marks need none.
SENTENCE_BOUNDARY  = re.compile(r"(?<=[.!?])(?=\s)|(?<=[。！？\n])")
PARAGRAPH_BOUNDARY = re.compile(r"\n\s*\n")

JOINERS = {
    "sentence":  " ",
    "paragraph": "\n\n",
}


class TextChunker:
    """Greedy, order-preserving splitter bounded by a character budget."""

    def __init__(self, max_chunk_chars: int, mode: str = "sentence"):
        if max_chunk_chars < 1:
            raise ValueError(f"max_chunk_chars must be positive, got {max_chunk_chars}")
        if mode not in JOINERS:
            raise ValueError(f"unknown chunk mode {mode!r} (expected one of {', '.join(JOINERS)})")
        self.max_chunk_chars = max_chunk_chars
        self.mode = mode

    @property
    def joiner(self) -> str:
        """Separator that undoes this chunker's split."""
        return JOINERS[self.mode]

    def split(self, text: str) -> list[Chunk]:
        if self.mode == "paragraph":
            pieces = self._pack_paragraphs(text)
        else:
            pieces = self._pack_sentences(text)
        return [Chunk(text=piece, sequence_index=i) for i, piece in enumerate(pieces)]

    # ── Packing ───────────────────────────────────────────────────────────────

    def _pack_sentences(self, text: str) -> list[str]:
        # Whitespace between sentences stays attached to the following sentence
        # so the budget check sees what will actually be sent.
        pieces, current = [], ""
        for sentence in SENTENCE_BOUNDARY.split(text):
            if not current.strip():
                current = sentence.lstrip()
            elif len(current) + len(sentence) <= self.max_chunk_chars:
                current += sentence
            else:
                self._seal(pieces, current)
                current = sentence.lstrip()
            current = current[:self.max_chunk_chars]
        self._seal(pieces, current)
        return pieces

    def _pack_paragraphs(self, text: str) -> list[str]:
        pieces, current = [], ""
        for paragraph in PARAGRAPH_BOUNDARY.split(text):
            paragraph = paragraph.strip()
            if not paragraph:
                continue
            paragraph = paragraph[:self.max_chunk_chars]
            candidate = f"{current}{self.joiner}{paragraph}" if current else paragraph
            if len(candidate) <= self.max_chunk_chars:
                current = candidate
            else:
                self._seal(pieces, current)
                current = paragraph
        self._seal(pieces, current)
        return pieces

    @staticmethod
    def _seal(pieces: list[str], current: str) -> None:
        piece = current.strip()
        if piece:
            pieces.append(piece)
