"""Tests for worker range planning."""

import pytest

from filesplitter.splitter.range_planner import count_blocks, plan_ranges


def _assert_exact_cover(ranges, total_size):
    assert ranges[0].start_offset == 0
    for current, following in zip(ranges, ranges[1:]):
        assert current.end_offset == following.start_offset
    assert ranges[-1].end_offset == total_size
    assert sum(r.length for r in ranges) == total_size


class TestPlanRanges:
    """Tests for plan_ranges function."""

    def test_even_division(self):
        ranges = plan_ranges(900, 3)

        assert [(r.start_offset, r.length) for r in ranges] == [(0, 300), (300, 300), (600, 300)]
        assert [r.worker_index for r in ranges] == [0, 1, 2]

    def test_last_worker_absorbs_remainder(self):
        ranges = plan_ranges(1_000_000, 3)

        assert [r.length for r in ranges] == [333333, 333333, 333334]
        assert [r.start_offset for r in ranges] == [0, 333333, 666666]

    @pytest.mark.parametrize("total_size", [0, 1, 7, 64, 1000, 1_000_003])
    @pytest.mark.parametrize("workers", [1, 2, 3, 8, 17])
    def test_ranges_cover_file_exactly_once(self, total_size, workers):
        ranges = plan_ranges(total_size, workers)

        assert len(ranges) == workers
        _assert_exact_cover(ranges, total_size)

    def test_zero_size_gives_empty_ranges(self):
        ranges = plan_ranges(0, 4)

        assert all(r.length == 0 for r in ranges)

    def test_more_workers_than_bytes(self):
        ranges = plan_ranges(3, 5)

        assert [r.length for r in ranges] == [0, 0, 0, 0, 3]
        assert ranges[-1].start_offset == 0

    def test_single_worker_takes_everything(self):
        (only,) = plan_ranges(12345, 1)

        assert (only.start_offset, only.length) == (0, 12345)

    def test_rejects_invalid_input(self):
        with pytest.raises(ValueError):
            plan_ranges(-1, 2)
        with pytest.raises(ValueError):
            plan_ranges(10, 0)


class TestCountBlocks:
    """Tests for count_blocks function."""

    def test_counts(self):
        assert count_blocks(0, 10) == 0
        assert count_blocks(10, 10) == 1
        assert count_blocks(11, 10) == 2
        assert count_blocks(333334, 300000) == 2

    def test_rejects_non_positive_block_size(self):
        with pytest.raises(ValueError):
            count_blocks(10, 0)
