"""Text chunker - overlapping character windows that prefer natural boundaries."""

import logging
import re

from ..exceptions import ChunkingConfigError
from ..models.document import Chunk, ChunkMetadata

logger = logging.getLogger(__name__)

# Break candidates, most preferred first. A chunk ends right after the match.
_PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n\s*")
_SENTENCE_BREAK = re.compile(r"[.!?]\s+|\n")
_WORD_BREAK = re.compile(r"\s+")


class TextChunker:
    """Split text into windows of at most `chunk_size` characters.

    Adjacent chunks share exactly `chunk_overlap` characters. Every chunk is
    an exact slice of the input, so `reconstruct` restores the text.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 50):
        if chunk_size < 1:
            raise ChunkingConfigError(
                "chunk_size must be >= 1", details={"chunk_size": chunk_size}
            )
        if chunk_overlap < 0:
            raise ChunkingConfigError(
                "chunk_overlap must be >= 0", details={"chunk_overlap": chunk_overlap}
            )
        if chunk_overlap >= chunk_size:
            raise ChunkingConfigError(
                "chunk_overlap must be less than chunk_size",
                details={"chunk_size": chunk_size, "chunk_overlap": chunk_overlap},
            )
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def chunk_overlap(self) -> int:
        return self._chunk_overlap

    def chunk(self, text: str, source_id: str = "", page_number: int = 0) -> list[Chunk]:
        """Split text into chunks.

        Args:
            text: Text to chunk.
            source_id: Source identifier copied into every chunk's metadata.
            page_number: Page index copied into every chunk's metadata.

        Returns:
            Chunks in document order.
        """
        if not text:
            return []

        chunks: list[Chunk] = []
        length = len(text)
        start = 0

        while True:
            hard_end = min(start + self._chunk_size, length)
            end = length if hard_end == length else self._find_break(text, start, hard_end)

            chunks.append(
                Chunk(
                    text=text[start:end],
                    metadata=ChunkMetadata(
                        source_id=source_id, page_number=page_number, offset=start
                    ),
                )
            )
            if end >= length:
                break
            start = end - self._chunk_overlap

        logger.debug(f"Chunked {length} chars into {len(chunks)} chunks ({source_id or 'text'})")
        return chunks

    def _find_break(self, text: str, start: int, hard_end: int) -> int:
        # The next window starts `overlap` before this end and must move forward.
        min_end = start + self._chunk_overlap + 1

        for pattern in (_PARAGRAPH_BREAK, _SENTENCE_BREAK, _WORD_BREAK):
            best = None
            for match in pattern.finditer(text, start, hard_end):
                if match.end() >= min_end:
                    best = match.end()
            if best is not None:
                return best

        return hard_end

    @staticmethod
    def reconstruct(chunks: list[Chunk]) -> str:
        """Join chunks of one text, dropping the overlapping prefixes."""
        parts: list[str] = []
        covered = 0
        for chunk in chunks:
            parts.append(chunk.text[covered - chunk.metadata.offset:])
            covered = chunk.end
        return "".join(parts)
