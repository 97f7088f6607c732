"""Mutable letter grid with placement search helpers."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from ..core.constants import (
    ALPHABET,
    EMPTY,
    ORTHOGONAL_STEPS,
    SNAKE_SUBTREE_LIMIT,
    SNAKE_TOTAL_LIMIT,
    Bounds,
    PlacementGeometry,
)
from ..core.models import Cell, Grid
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class GridConfig:
    """Configuration values driving placement search."""

    width: int
    height: int
    geometry: PlacementGeometry = PlacementGeometry.SNAKE
    directions: Tuple[Tuple[int, int], ...] = ORTHOGONAL_STEPS
    snake_subtree_limit: int = SNAKE_SUBTREE_LIMIT
    snake_total_limit: int = SNAKE_TOTAL_LIMIT
    rng_seed: Optional[int] = None

    def bounds(self) -> Bounds:
        return Bounds(width=self.width, height=self.height)


@dataclass
class CommitRecord:
    """One committed word and the undo log for it.

    Undoing drops ``word_id`` from every cell of ``placement`` and empties the
    ``written_cell_ids``. Letters that were already on the grid, the overlap
    cell among them, stay.
    """

    word_id: str
    placement: List[str]
    overlap_cell_id: Optional[str] = None
    written_cell_ids: List[str] = field(default_factory=list)


class GridState:
    """Encapsulates the letter grid during one construction attempt."""

    def __init__(self, config: GridConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.bounds = config.bounds()
        self.rng = rng or random.Random(config.rng_seed)
        self.cells: List[List[Cell]] = [
            [Cell(id=f"r{y}c{x}", x=x, y=y) for x in range(self.bounds.width)]
            for y in range(self.bounds.height)
        ]
        self._by_id: Dict[str, Cell] = {cell.id: cell for cell in self.iter_cells()}
        self._commits: List[CommitRecord] = []
        self.frozen = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def iter_cells(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    def cell(self, x: int, y: int) -> Optional[Cell]:
        if not self.bounds.contains(x, y):
            return None
        return self.cells[y][x]

    def cell_by_id(self, cell_id: str) -> Optional[Cell]:
        return self._by_id.get(cell_id)

    def empty_cells(self) -> List[Cell]:
        return [cell for cell in self.iter_cells() if cell.is_empty()]

    def neighbors(self, cell: Cell) -> List[Cell]:
        """ORTHO_4 neighbours in random order."""
        found = []
        for dx, dy in ORTHOGONAL_STEPS:
            neighbor = self.cell(cell.x + dx, cell.y + dy)
            if neighbor is not None:
                found.append(neighbor)
        self.rng.shuffle(found)
        return found

    @property
    def commits(self) -> Tuple[CommitRecord, ...]:
        return tuple(self._commits)

    # ------------------------------------------------------------------
    # Placement search
    # ------------------------------------------------------------------
    def find_all_path_options(self, word: str, start_cell_id: Optional[str] = None) -> List[List[str]]:
        """Return every placement of ``word`` allowed by the configured geometry.

        With ``start_cell_id`` the first letter is pinned to that cell (the
        overlap point with the previous chain word). Otherwise every empty or
        letter-consistent cell is tried as a start. The result is shuffled.
        """

        word = word.upper()
        if not word:
            return []
        if start_cell_id is not None:
            start = self._by_id.get(start_cell_id)
            candidates = [start] if start is not None else []
        else:
            candidates = [cell for cell in self.iter_cells() if cell.accepts(word[0])]
            self.rng.shuffle(candidates)

        options: List[List[str]] = []
        for start in candidates:
            if not start.accepts(word[0]):
                continue
            if self.config.geometry == PlacementGeometry.RAY:
                options.extend(self._ray_paths(start, word))
                continue
            options.extend(self._snake_paths(start, word[1:], [start.id]))
            if len(options) > self.config.snake_total_limit:
                LOGGER.debug("SNAKE search for %s capped at %d options", word, len(options))
                break

        self.rng.shuffle(options)
        return options

    def _ray_paths(self, start: Cell, word: str) -> List[List[str]]:
        if len(word) == 1:
            return [[start.id]]
        paths: List[List[str]] = []
        for dx, dy in self.config.directions:
            cell_ids = [start.id]
            x, y = start.x, start.y
            for letter in word[1:]:
                x += dx
                y += dy
                cell = self.cell(x, y)
                if cell is None or not cell.accepts(letter):
                    break
                cell_ids.append(cell.id)
            else:
                paths.append(cell_ids)
        return paths

    def _snake_paths(self, current: Cell, remaining: str, visited: List[str]) -> List[List[str]]:
        if not remaining:
            return [list(visited)]
        letter = remaining[0]
        results: List[List[str]] = []
        for neighbor in self.neighbors(current):
            if neighbor.id in visited or not neighbor.accepts(letter):
                continue
            visited.append(neighbor.id)
            results.extend(self._snake_paths(neighbor, remaining[1:], visited))
            visited.pop()
            if len(results) > self.config.snake_subtree_limit:
                break
        return results

    # ------------------------------------------------------------------
    # Commit / undo
    # ------------------------------------------------------------------
    def commit_path(
        self,
        word_id: str,
        word: str,
        cell_ids: Sequence[str],
        overlap_cell_id: Optional[str] = None,
    ) -> CommitRecord:
        """Write ``word`` onto ``cell_ids`` and push a commit record."""

        self._ensure_mutable()
        word = word.upper()
        if len(word) != len(cell_ids):
            raise ValueError(f"Placement of {word} has {len(cell_ids)} cells")

        cells = []
        for cell_id, letter in zip(cell_ids, word):
            cell = self._by_id.get(cell_id)
            if cell is None:
                raise ValueError(f"Unknown cell {cell_id}")
            if not cell.accepts(letter):
                raise ValueError(f"Letter conflict at {cell_id}: {cell.value} != {letter}")
            cells.append(cell)

        # All checks passed, mutate grid
        written: List[str] = []
        for cell, letter in zip(cells, word):
            if not cell.value:
                cell.value = letter
                written.append(cell.id)
            cell.part_of_word_ids.add(word_id)

        record = CommitRecord(
            word_id=word_id,
            placement=list(cell_ids),
            overlap_cell_id=overlap_cell_id,
            written_cell_ids=written,
        )
        self._commits.append(record)
        return record

    def undo(self) -> Optional[CommitRecord]:
        """Revert the most recent commit; returns it, or None when nothing is committed."""

        self._ensure_mutable()
        if not self._commits:
            return None
        record = self._commits.pop()
        for cell_id in record.placement:
            self._by_id[cell_id].part_of_word_ids.discard(record.word_id)
        for cell_id in record.written_cell_ids:
            self._by_id[cell_id].value = EMPTY
        # Letters written by a word already taken out with remove_path lose their last owner here.
        for cell_id in record.placement:
            cell = self._by_id[cell_id]
            if not cell.part_of_word_ids:
                cell.value = EMPTY
        if record.overlap_cell_id is not None:
            LOGGER.debug("Undid %s, keeping overlap %s", record.word_id, record.overlap_cell_id)
        return record

    def remove_path(self, cell_ids: Iterable[str], word_id: Optional[str] = None) -> None:
        """Reset cells to empty unless another committed word still owns them.

        Without ``word_id`` the most recent commit with exactly this placement
        is the one being removed.
        """

        self._ensure_mutable()
        cell_ids = list(cell_ids)
        if word_id is None:
            for record in reversed(self._commits):
                if record.placement == cell_ids:
                    word_id = record.word_id
                    break
        if word_id is not None:
            self._commits = [record for record in self._commits if record.word_id != word_id]
        for cell_id in cell_ids:
            cell = self._by_id.get(cell_id)
            if cell is None:
                continue
            if word_id is not None:
                cell.part_of_word_ids.discard(word_id)
            if not cell.part_of_word_ids:
                cell.value = EMPTY

    # ------------------------------------------------------------------
    # Bonus words
    # ------------------------------------------------------------------
    def try_place_bonus_word(
        self,
        word: str,
        path_cell_ids: Iterable[str],
        word_id: Optional[str] = None,
    ) -> Optional[Tuple[List[str], str]]:
        """Place ``word`` so that exactly one of its cells lies on the path.

        Returns ``(placement, hint_cell_id)`` after committing, or None.
        """

        word = word.upper()
        path_cells = set(path_cell_ids)
        offsets = list(range(len(word)))
        self.rng.shuffle(offsets)

        for offset in offsets:
            letter = word[offset]
            targets = [c for c in self.iter_cells() if c.id in path_cells and c.value == letter]
            self.rng.shuffle(targets)
            for target in targets:
                if self.config.geometry == PlacementGeometry.RAY:
                    placement = self._bonus_ray(word, offset, target, path_cells)
                else:
                    placement = self._bonus_snake(word, offset, target, path_cells)
                if placement is None:
                    continue
                self.commit_path(word_id or word, word, placement)
                LOGGER.debug("Bonus word %s crosses the path at %s", word, target.id)
                return placement, target.id
        return None

    def _bonus_ray(self, word: str, offset: int, target: Cell, path_cells: Set[str]) -> Optional[List[str]]:
        directions = list(self.config.directions)
        self.rng.shuffle(directions)
        for dx, dy in directions:
            cell_ids: List[str] = []
            for index, letter in enumerate(word):
                cell = self.cell(target.x + (index - offset) * dx, target.y + (index - offset) * dy)
                if cell is None:
                    break
                if index != offset and (cell.id in path_cells or not cell.accepts(letter)):
                    break
                cell_ids.append(cell.id)
            else:
                return cell_ids
        return None

    def _bonus_snake(self, word: str, offset: int, target: Cell, path_cells: Set[str]) -> Optional[List[str]]:
        after = word[offset + 1:]
        before = word[:offset][::-1]
        for after_walk in self._free_walks(target, after, [target.id], path_cells):
            taken = set(after_walk)
            for before_walk in self._free_walks(target, before, [target.id], path_cells | taken):
                return list(reversed(before_walk[1:])) + [target.id] + after_walk[1:]
        return None

    def _free_walks(
        self,
        current: Cell,
        remaining: str,
        visited: List[str],
        blocked: Set[str],
    ) -> Iterator[List[str]]:
        """Lazily yield walks spelling ``remaining`` that avoid ``blocked`` cells."""
        if not remaining:
            yield list(visited)
            return
        letter = remaining[0]
        for neighbor in self.neighbors(current):
            if neighbor.id in visited or neighbor.id in blocked:
                continue
            if not neighbor.accepts(letter):
                continue
            visited.append(neighbor.id)
            yield from self._free_walks(neighbor, remaining[1:], visited, blocked)
            visited.pop()

    # ------------------------------------------------------------------
    # Finishing
    # ------------------------------------------------------------------
    def fill_distractors(self) -> int:
        """Assign uniform random letters to every empty cell; returns the count."""

        self._ensure_mutable()
        filled = 0
        for cell in self.iter_cells():
            if cell.is_empty():
                cell.value = self.rng.choice(ALPHABET)
                filled += 1
        return filled

    def freeze(self) -> None:
        self.frozen = True

    def export_grid(self, start_cell_id: str, end_cell_id: str) -> Grid:
        if not self.frozen:
            raise RuntimeError("Grid must be frozen before export")
        return Grid(
            width=self.bounds.width,
            height=self.bounds.height,
            cells=[
                Cell(id=cell.id, x=cell.x, y=cell.y, type=cell.type, value=cell.value)
                for cell in self.iter_cells()
            ],
            start_cell_id=start_cell_id,
            end_cell_id=end_cell_id,
        )

    def _ensure_mutable(self) -> None:
        if self.frozen:
            raise RuntimeError("Grid is frozen")
