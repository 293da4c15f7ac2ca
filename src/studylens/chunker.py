# line-aligned chunking of the page-annotated document text
from typing import List
import logging

logger = logging.getLogger(__name__)


# split text into lines that keep their "\n" so joining them gives the text back
def _split_lines(text: str) -> List[str]:
    pieces = text.split("\n")
    lines = [piece + "\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def chunk_text(full_text: str, max_length: int) -> List[str]:
    """Split text into chunks of at most max_length characters along line breaks.

    A line is never broken: a line longer than max_length becomes a chunk of its
    own, so "--- Slide N ---" markers always stay intact. A whitespace-only tail
    is folded into the previous chunk, which keeps "".join(chunks) == full_text
    for any text with content.
    """
    if max_length <= 0:
        raise ValueError(f"max_length must be positive, got {max_length}")

    chunks: List[str] = []
    current = ""

    for line in _split_lines(full_text):
        # flush before this line would push the chunk over the limit
        if len(current) + len(line) > max_length and current:
            chunks.append(current)
            current = ""
        current += line

    if current.strip():
        chunks.append(current)
    elif current and chunks:
        chunks[-1] += current

    oversized = sum(1 for chunk in chunks if len(chunk) > max_length)
    if oversized:
        logger.warning(f"{oversized} chunk(s) exceed {max_length} chars because a single line is longer than the limit")

    logger.info(f"Split {len(full_text)} chars into {len(chunks)} chunks (max_length={max_length})")
    return chunks
