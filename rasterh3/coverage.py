import itertools
from typing import Iterable, Iterator, List

import h3

from .errors import CompactionError
from .resolution import MAX_RESOLUTION, validate_resolution

N_RESOLUTIONS = MAX_RESOLUTION + 1


class CellCoverage:
    """
    A container for cells covering an area.

    Cells are kept in one list per resolution. After `compact()` the contained
    cells do not overlap, even when they were added in different resolutions,
    and duplicates are removed.
    """

    def __init__(self, cells: Iterable[str] = ()):
        self._cells_by_resolution: List[List[str]] = [[] for _ in range(N_RESOLUTIONS)]

        # resolutions with insertions since the last compaction
        self._modified_resolutions: List[bool] = [False] * N_RESOLUTIONS

        for cell in cells:
            self.insert(cell)

    def insert(self, cell: str) -> None:
        r = h3.get_resolution(cell)
        self._cells_by_resolution[r].append(cell)
        self._modified_resolutions[r] = True

    def append(self, other: "CellCoverage") -> None:
        """Move all cells of `other` into this coverage. `other` is empty afterwards."""
        for r, source in enumerate(other._cells_by_resolution):
            if not source:
                continue
            self._modified_resolutions[r] = True
            self._cells_by_resolution[r].extend(source)
            other._cells_by_resolution[r] = []
        other._modified_resolutions = [False] * N_RESOLUTIONS

    def covers(self, cell: str) -> bool:
        """Check if the coverage covers the given cell.

        Scans one bucket per resolution up to the one of the cell, use sparingly.
        """
        cell_res = h3.get_resolution(cell)
        for r in range(cell_res + 1):
            search_cell = cell if r == cell_res else h3.cell_to_parent(cell, r)
            if search_cell in self._cells_by_resolution[r]:
                return True
        return False

    def dedup(self, shrink: bool = False, remove_covered_by_parent: bool = False) -> None:
        for r, cells in enumerate(self._cells_by_resolution):
            if shrink:
                self._cells_by_resolution[r] = sorted(set(cells))
            else:
                cells[:] = sorted(set(cells))

        if remove_covered_by_parent and sum(1 for v in self._cells_by_resolution if v) > 1:
            # remove cells whose parents are already contained
            seen = set()
            for r, cells in enumerate(self._cells_by_resolution):
                if seen and cells:
                    cells[:] = [
                        cell for cell in cells
                        if not any(h3.cell_to_parent(cell, pr) in seen for pr in range(r, -1, -1))
                    ]
                seen.update(cells)

    def compact(self) -> None:
        self.dedup()

        modified = [r for r, m in enumerate(self._modified_resolutions) if m]
        if modified:
            # walk from the finest touched resolution towards 0. Compacting a
            # bucket may add cells to coarser buckets, which are visited later.
            for r in range(max(modified), -1, -1):
                compacted_in = sorted(set(self._cells_by_resolution[r]))
                self._cells_by_resolution[r] = []
                if not compacted_in:
                    continue
                try:
                    compacted = h3.compact_cells(compacted_in)
                except h3.H3BaseException as e:
                    raise CompactionError(f"compacting {len(compacted_in)} cells of resolution {r} failed: {e}") from e
                for cell in compacted:
                    self.insert(cell)

            self._modified_resolutions = [False] * N_RESOLUTIONS

        self.dedup(shrink=True, remove_covered_by_parent=True)

    def finalize(self, compact: bool) -> None:
        if compact:
            self.compact()
        else:
            self.dedup(shrink=True, remove_covered_by_parent=True)

    def compacted_iter(self) -> Iterator[str]:
        return itertools.chain.from_iterable(self._cells_by_resolution)

    def uncompacted_iter(self, resolution: int) -> Iterator[str]:
        """All cells expanded to `resolution`. Cells of finer resolutions are skipped."""
        resolution = validate_resolution(resolution)
        return (
            child
            for cells in self._cells_by_resolution[:resolution + 1]
            for cell in cells
            for child in h3.cell_to_children(cell, resolution)
        )

    def cells_at(self, resolution: int) -> List[str]:
        return list(self._cells_by_resolution[validate_resolution(resolution)])

    def resolutions(self) -> List[int]:
        return [r for r, cells in enumerate(self._cells_by_resolution) if cells]

    def is_empty(self) -> bool:
        return not any(self._cells_by_resolution)

    def __len__(self) -> int:
        return sum(len(cells) for cells in self._cells_by_resolution)

    def __iter__(self) -> Iterator[str]:
        return self.compacted_iter()

    def __repr__(self):
        return f"CellCoverage(len={len(self)}, resolutions={self.resolutions()})"
