"""
Tests for storage grid allocation.

Validates first-fit row-major allocation, region bounds and the
occupancy cache.
"""

import threading

import pytest

from core.errors import InvalidInput
from core.grid import (
    REGIONS,
    OccupancyCache,
    next_free_cell,
    region_for,
    size_class_of,
)
from core.models import Cell, SizeClass


def _all_cells(size_class):
    return list(region_for(size_class).cells())


class TestRegions:
    """Test the two fixed regions."""

    def test_region_sizes(self):
        assert len(_all_cells(SizeClass.SMALL)) == 8 * 16
        assert len(_all_cells(SizeClass.LARGE)) == 6 * 8

    def test_large_region_is_offset(self):
        cells = _all_cells(SizeClass.LARGE)
        assert cells[0] == Cell(8, 0)
        assert cells[-1] == Cell(13, 7)

    def test_size_class_of(self):
        assert size_class_of(Cell(0, 0)) == SizeClass.SMALL
        assert size_class_of(Cell(7, 15)) == SizeClass.SMALL
        assert size_class_of(Cell(8, 0)) == SizeClass.LARGE
        assert size_class_of(Cell(13, 7)) == SizeClass.LARGE
        assert size_class_of(Cell(8, 8)) is None
        assert size_class_of(Cell(14, 0)) is None

    def test_regions_are_disjoint(self):
        small = set(_all_cells(SizeClass.SMALL))
        large = set(_all_cells(SizeClass.LARGE))
        assert not small & large
        assert set(REGIONS) == {SizeClass.SMALL, SizeClass.LARGE}

    def test_unknown_size_class(self):
        with pytest.raises(InvalidInput):
            region_for("Medium")


class TestNextFreeCell:
    """Test the pure first-fit allocator."""

    def test_empty_small(self):
        assert next_free_cell(SizeClass.SMALL, set()) == Cell(0, 0)

    def test_empty_large(self):
        assert next_free_cell(SizeClass.LARGE, set()) == Cell(8, 0)

    def test_row_major_order(self):
        occupied = {Cell(0, col) for col in range(16)}
        assert next_free_cell(SizeClass.SMALL, occupied) == Cell(1, 0)

    def test_fills_gaps_first(self):
        occupied = {Cell(0, 0), Cell(0, 1), Cell(0, 3)}
        assert next_free_cell(SizeClass.SMALL, occupied) == Cell(0, 2)

    def test_accepts_plain_tuples(self):
        assert next_free_cell(SizeClass.LARGE, [(8, 0), (8, 1)]) == Cell(8, 2)

    def test_other_region_ignored(self):
        occupied = set(_all_cells(SizeClass.SMALL))
        assert next_free_cell(SizeClass.LARGE, occupied) == Cell(8, 0)

    @pytest.mark.parametrize("size_class", [SizeClass.SMALL, SizeClass.LARGE])
    def test_full_region(self, size_class):
        assert next_free_cell(size_class, set(_all_cells(size_class))) is None

    def test_last_free_cell(self):
        occupied = set(_all_cells(SizeClass.LARGE)) - {Cell(13, 7)}
        assert next_free_cell(SizeClass.LARGE, occupied) == Cell(13, 7)

    def test_deterministic(self):
        occupied = {Cell(0, 0), Cell(2, 5)}
        assert next_free_cell(SizeClass.SMALL, occupied) == next_free_cell(SizeClass.SMALL, occupied)

    def test_snapshot_not_mutated(self):
        occupied = {Cell(0, 0)}
        next_free_cell(SizeClass.SMALL, occupied)
        assert occupied == {Cell(0, 0)}

    def test_invalid_size_class(self):
        with pytest.raises(InvalidInput):
            next_free_cell(None, set())


class TestOccupancyCache:
    """Test the lock-guarded occupancy bitmaps."""

    def test_not_loaded_initially(self, occupancy):
        assert not occupancy.loaded
        with pytest.raises(RuntimeError):
            occupancy.allocate(SizeClass.SMALL)

    def test_allocate_matches_pure_allocator(self, occupancy):
        snapshot = {Cell(0, 0), Cell(0, 1), Cell(8, 0)}
        occupancy.load(snapshot)
        assert occupancy.allocate(SizeClass.SMALL) == next_free_cell(SizeClass.SMALL, snapshot)
        assert occupancy.allocate(SizeClass.LARGE) == next_free_cell(SizeClass.LARGE, snapshot)

    def test_allocate_marks_cell(self, occupancy):
        occupancy.load([])
        assert occupancy.allocate(SizeClass.SMALL) == Cell(0, 0)
        assert occupancy.allocate(SizeClass.SMALL) == Cell(0, 1)
        assert occupancy.occupied() == [Cell(0, 0), Cell(0, 1)]

    def test_release_frees_cell(self, occupancy):
        occupancy.load([Cell(0, 0), Cell(0, 1)])
        occupancy.release(Cell(0, 0))
        assert occupancy.allocate(SizeClass.SMALL) == Cell(0, 0)

    def test_release_ignores_out_of_range(self, occupancy):
        occupancy.load([])
        occupancy.release(Cell(-1, -1))
        assert occupancy.occupied() == []

    def test_second_load_is_noop(self, occupancy):
        occupancy.load([Cell(0, 0)])
        occupancy.load([])
        assert occupancy.occupied() == [Cell(0, 0)]

    def test_invalidate(self, occupancy):
        occupancy.load([Cell(0, 0)])
        occupancy.invalidate()
        assert not occupancy.loaded
        occupancy.load([])
        assert occupancy.allocate(SizeClass.SMALL) == Cell(0, 0)

    def test_exhausted(self, occupancy):
        occupancy.load(_all_cells(SizeClass.LARGE))
        assert occupancy.allocate(SizeClass.LARGE) is None
        assert occupancy.allocate(SizeClass.SMALL) == Cell(0, 0)

    def test_concurrent_allocations_are_unique(self, occupancy):
        occupancy.load([])
        results = []
        results_lock = threading.Lock()

        def worker():
            for _ in range(16):
                cell = occupancy.allocate(SizeClass.SMALL)
                with results_lock:
                    results.append(cell)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert None not in results
        assert len(results) == 8 * 16
        assert len(set(results)) == len(results)
        assert occupancy.allocate(SizeClass.SMALL) is None
