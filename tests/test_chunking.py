"""Tests for row chunking."""

import math

import pytest

from tabledeck.processor.chunking import RowChunker, chunk_plan, chunk_rows


def _rows(n):
    return [[str(i), f"name {i}"] for i in range(n)]


class TestChunkRows:
    def test_empty_input_yields_no_chunks(self):
        assert chunk_rows([], 30) == []

    def test_single_partial_chunk(self):
        rows = _rows(2)
        assert chunk_rows(rows, 30) == [rows]

    def test_exact_multiple(self):
        chunks = chunk_rows(_rows(60), 30)
        assert [len(c) for c in chunks] == [30, 30]

    def test_sixty_five_rows(self):
        chunks = chunk_rows(_rows(65), 30)
        assert [len(c) for c in chunks] == [30, 30, 5]

    def test_default_size_is_thirty(self):
        assert [len(c) for c in chunk_rows(_rows(31))] == [30, 1]

    def test_size_one(self):
        rows = _rows(3)
        assert chunk_rows(rows, 1) == [[r] for r in rows]

    @pytest.mark.parametrize("length,size", [
        (0, 1), (1, 1), (7, 3), (29, 30), (30, 30), (31, 30), (100, 7),
    ])
    def test_partition_properties(self, length, size):
        rows = _rows(length)
        chunks = chunk_rows(rows, size)
        assert len(chunks) == math.ceil(length / size)
        assert [r for c in chunks for r in c] == rows
        assert all(len(c) == size for c in chunks[:-1])
        if chunks:
            assert len(chunks[-1]) == length - size * (len(chunks) - 1)

    def test_preserves_row_identity_and_order(self):
        rows = _rows(5)
        chunks = chunk_rows(rows, 2)
        assert chunks[0][0] is rows[0]
        assert chunks[2][0] is rows[4]

    def test_accepts_iterables(self):
        chunks = chunk_rows(iter(_rows(4)), 3)
        assert [len(c) for c in chunks] == [3, 1]

    @pytest.mark.parametrize("size", [0, -1, 2.5, True, "30"])
    def test_invalid_size(self, size):
        with pytest.raises(ValueError, match="positive integer"):
            chunk_rows(_rows(3), size)


class TestChunkPlan:
    def test_matches_chunk_rows(self):
        assert chunk_plan(65, 30) == [30, 30, 5]

    def test_zero_rows(self):
        assert chunk_plan(0, 30) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            chunk_plan(10, 0)


class TestRowChunker:
    def test_chunk(self):
        chunker = RowChunker(2)
        assert [len(c) for c in chunker.chunk(_rows(5))] == [2, 2, 1]

    def test_plan(self):
        assert RowChunker(30).plan(65) == [30, 30, 5]

    def test_rejects_invalid_size(self):
        with pytest.raises(ValueError):
            RowChunker(0)
