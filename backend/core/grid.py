"""
Storage grid allocation.

8 rows of small boxes on top, with 6 rows of big boxes below. Indexing for
rows and columns starts at the top left, so large boxes live at rows 8-13.
"""

import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from core.errors import InvalidInput
from core.models import Cell, SizeClass


@dataclass(frozen=True)
class GridRegion:
    rows: int
    cols: int
    row_offset: int

    def contains(self, cell: Cell) -> bool:
        return (
            self.row_offset <= cell.row < self.row_offset + self.rows
            and 0 <= cell.col < self.cols
        )

    def cells(self) -> Iterable[Cell]:
        """Row-major scan order."""
        for row in range(self.rows):
            for col in range(self.cols):
                yield Cell(row + self.row_offset, col)


REGIONS: Dict[SizeClass, GridRegion] = {
    SizeClass.SMALL: GridRegion(rows=8, cols=16, row_offset=0),
    SizeClass.LARGE: GridRegion(rows=6, cols=8, row_offset=8),
}


def region_for(size_class: SizeClass) -> GridRegion:
    if not isinstance(size_class, SizeClass):
        raise InvalidInput(f"Unknown size class: {size_class!r}")
    return REGIONS[size_class]


def size_class_of(cell: Cell) -> Optional[SizeClass]:
    for size_class, region in REGIONS.items():
        if region.contains(cell):
            return size_class
    return None


def next_free_cell(size_class: SizeClass, occupied: Iterable[Cell]) -> Optional[Cell]:
    """Return the first free cell of the region, or None when it is full.

    Pure function of its arguments: the same snapshot always yields the same cell.
    """
    region = region_for(size_class)
    taken = {Cell(*c) for c in occupied}
    for cell in region.cells():
        if cell not in taken:
            return cell
    return None


class OccupancyCache:
    """
    In-memory occupancy bitmaps, one per region.

    Loaded lazily from an occupancy snapshot, then kept current by allocate()
    and release(). Every read-check-and-mark happens under one lock so two
    concurrent inserts never receive the same cell.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._bitmaps: Optional[Dict[SizeClass, List[List[bool]]]] = None

    @property
    def loaded(self) -> bool:
        return self._bitmaps is not None

    def load(self, occupied: Iterable[Cell]) -> None:
        """Build the bitmaps from a snapshot. No-op if already loaded."""
        with self._lock:
            if self._bitmaps is not None:
                return
            bitmaps = {
                size_class: [[False] * region.cols for _ in range(region.rows)]
                for size_class, region in REGIONS.items()
            }
            for cell in occupied:
                cell = Cell(*cell)
                size_class = size_class_of(cell)
                if size_class is None:
                    continue
                region = REGIONS[size_class]
                bitmaps[size_class][cell.row - region.row_offset][cell.col] = True
            self._bitmaps = bitmaps

    def allocate(self, size_class: SizeClass) -> Optional[Cell]:
        """Reserve and return the first free cell, or None if the region is full."""
        region = region_for(size_class)
        with self._lock:
            bitmap = self._require_loaded()[size_class]
            for cell in region.cells():
                row = cell.row - region.row_offset
                if not bitmap[row][cell.col]:
                    bitmap[row][cell.col] = True
                    return cell
        return None

    def release(self, cell: Cell) -> None:
        cell = Cell(*cell)
        size_class = size_class_of(cell)
        if size_class is None:
            return
        region = REGIONS[size_class]
        with self._lock:
            if self._bitmaps is None:
                return
            self._bitmaps[size_class][cell.row - region.row_offset][cell.col] = False

    def invalidate(self) -> None:
        with self._lock:
            self._bitmaps = None

    def occupied(self) -> List[Cell]:
        with self._lock:
            bitmaps = self._require_loaded()
            return [
                cell
                for size_class, region in REGIONS.items()
                for cell in region.cells()
                if bitmaps[size_class][cell.row - region.row_offset][cell.col]
            ]

    def _require_loaded(self) -> Dict[SizeClass, List[List[bool]]]:
        if self._bitmaps is None:
            raise RuntimeError("OccupancyCache used before load()")
        return self._bitmaps
