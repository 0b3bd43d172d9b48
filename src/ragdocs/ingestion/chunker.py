"""Text chunking."""

from __future__ import annotations

DEFAULT_CHUNK_SIZE = 1000


def chunk_text(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Split *text* into word-aligned chunks of at least *chunk_size* chars.

    Words are accumulated greedily; a chunk is emitted as soon as the
    space-joined words reach *chunk_size*, so a chunk overshoots the target
    by at most the word that pushed it over.  Whatever remains at the end
    becomes a final, shorter chunk.  Chunks never overlap and joining them
    with single spaces reproduces the whitespace-normalised input.

    Parameters
    ----------
    text:
        Extracted document text.
    chunk_size:
        Target minimum chunk length in characters.

    Returns
    -------
    list[str]
        The chunks in document order (empty for blank input).
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    chunks: list[str] = []
    current: list[str] = []
    current_len = 0

    for word in text.split():
        # joined length grows by the word plus one separating space
        current_len += len(word) + (1 if current else 0)
        current.append(word)
        if current_len >= chunk_size:
            chunks.append(" ".join(current))
            current = []
            current_len = 0

    if current:
        chunks.append(" ".join(current))
    return chunks
