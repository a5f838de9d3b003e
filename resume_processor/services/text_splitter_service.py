import re
from typing import Any, Dict, List, NamedTuple

BREAK_CHARS = re.compile(r"[\s.,]")


class ChunkSegment(NamedTuple):
    text: str
    new_cursor: int
    is_exhausted: bool


class TextSplitterService:
    def __init__(self, chunk_size: int = 200, lookahead: int = 20, window_size: int = 300):
        if window_size < chunk_size + lookahead:
            raise ValueError("window_size must cover chunk_size + lookahead")
        self.chunk_size = chunk_size
        self.lookahead = lookahead
        self.window_size = window_size

    def next_chunk(self, text: str, cursor: int) -> ChunkSegment:
        """
        Cut the next word-boundary chunk starting at ``cursor``.

        The cut lands at ``chunk_size`` characters, pushed forward to the first
        whitespace, period or comma found within ``lookahead`` characters. When
        no break is found the chunk is cut mid-word.

        An empty ``text`` in the result means the span was only whitespace or
        delimiters: the cursor still moves past it but no chunk should be stored.
        """
        if cursor >= len(text):
            return ChunkSegment("", cursor, True)

        window = text[cursor:cursor + self.window_size]
        end = min(self.chunk_size, len(window))

        if end < len(window):
            match = BREAK_CHARS.search(window, end, end + self.lookahead)
            if match:
                end = match.start()

        chunk_text = window[:end].strip()
        if not chunk_text:
            # Only a delimiter at the cut is skipped, never the start of a word
            skip = 1 if BREAK_CHARS.match(window, end) else 0
            return ChunkSegment("", min(cursor + end + skip, len(text)), False)
        return ChunkSegment(chunk_text, cursor + end, False)

    def iter_chunks(self, text: str, cursor: int = 0):
        """Yield every non-empty chunk from ``cursor`` to the end of ``text``."""
        while True:
            segment = self.next_chunk(text, cursor)
            if segment.is_exhausted:
                return
            if segment.text:
                yield segment
            cursor = segment.new_cursor

    def split_text(self, text: str, chunk_size: int = 1000, chunk_overlap: int = 200) -> List[Dict[str, Any]]:
        """
        Split a whole document in one pass into overlapping chunks.

        Each chunk is trimmed back to the last whitespace before its cut, and the
        next one starts ``chunk_overlap`` characters before that cut. Only for
        callers that process a document synchronously; the embedding pipeline
        uses :meth:`next_chunk`.
        """
        if chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")

        chunks = []
        start = 0

        while start < len(text):
            end = min(start + chunk_size, len(text))
            if end < len(text):
                last_space = text.rfind(" ", start, end)
                if last_space > start:
                    end = last_space

            chunk_text = text[start:end].strip()
            if chunk_text:
                chunks.append({
                    "text": chunk_text,
                    "start": start,
                    "end": end,
                })

            if end >= len(text):
                break
            start = max(end - chunk_overlap, start + 1)

        return chunks
