from __future__ import annotations

import math

import pytest

from commit_review.config import MAX_CONTENT_SIZE
from commit_review.review.chunker import split_diff


def test_split_diff_empty_is_no_chunks() -> None:
    assert split_diff(diff="") == []


def test_split_diff_short_diff_is_single_chunk() -> None:
    diff = "+++ b/a.py\n+print('hi')\n"
    assert split_diff(diff=diff) == [diff]


@pytest.mark.parametrize("length,size", [(1, 1), (10, 3), (12, 4), (100, 7), (MAX_CONTENT_SIZE + 1, MAX_CONTENT_SIZE)])
def test_split_diff_reconstructs_and_bounds_chunks(length: int, size: int) -> None:
    diff = "".join(chr(ord("a") + i % 26) for i in range(length))
    chunks = split_diff(diff=diff, chunk_size=size)
    assert "".join(chunks) == diff
    assert all(len(c) <= size for c in chunks)
    assert len(chunks) == math.ceil(length / size)


def test_split_diff_exact_multiple_of_default_size() -> None:
    diff = "x" * (3 * MAX_CONTENT_SIZE)
    chunks = split_diff(diff=diff)
    assert len(chunks) == 3
    assert [len(c) for c in chunks] == [MAX_CONTENT_SIZE] * 3


def test_split_diff_invalid_size_raises() -> None:
    with pytest.raises(ValueError):
        split_diff(diff="abc", chunk_size=0)
