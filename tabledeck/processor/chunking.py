"""Row chunking — splits data rows into slide-sized pages."""

import math


def chunk_rows(rows, size=30):
    """Split rows into contiguous, order-preserving chunks of ``size``.

    Every chunk has exactly ``size`` rows except possibly the last.
    An empty input yields no chunks.

    Raises:
        ValueError: If size is not a positive integer.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ValueError(f"Chunk size must be a positive integer, got {size!r}")
    rows = list(rows)
    return [rows[i:i + size] for i in range(0, len(rows), size)]


def chunk_plan(row_count, size=30):
    """Return the chunk lengths ``chunk_rows`` would produce for row_count rows."""
    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ValueError(f"Chunk size must be a positive integer, got {size!r}")
    count = math.ceil(row_count / size)
    return [min(size, row_count - i * size) for i in range(count)]


class RowChunker:
    """Pages data rows at a fixed number of rows per slide."""

    def __init__(self, size: int = 30) -> None:
        chunk_plan(0, size)  # validates size
        self.size = size

    def chunk(self, rows) -> list[list]:
        return chunk_rows(rows, self.size)

    def plan(self, row_count: int) -> list[int]:
        return chunk_plan(row_count, self.size)
