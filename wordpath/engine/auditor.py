"""Structural audit of finished puzzles.

Every check runs independently and appends to a shared error list, so one
report shows every problem in a puzzle. Consumers must assert on
:class:`AuditCode` values, never on message text.

Checks, in order:

1. Schema validation (delegated to :mod:`.validator`) -> ``ERR_SCHEMA_INVALID``
2. Single placement per word -> ``ERR_MULTI_PLACEMENT``
3. Placement cell existence -> ``ERR_PLACEMENT_CELL_NOT_FOUND``
4. Grid bounds -> ``ERR_CELL_OUT_OF_BOUNDS``
5. Start/end cells -> ``ERR_START_*`` / ``ERR_END_*``
6. Connectivity (BFS over path-word cells) -> ``ERR_UNSOLVABLE``
7. Criticality (shortest-route membership) -> ``ERR_NON_CRITICAL_WORD``
8. Hint cells of bonus words -> ``ERR_HINT_*``
9. Placement uniqueness -> ``ERR_DUP_PLACEMENT``
10. Ray geometry, RAY models only -> ``ERR_PLACEMENT_*``
11. Parallel adjacency, RAY models only -> ``ERR_PARALLEL_ADJACENCY``
12. Same-direction intersections, RAY models only -> ``ERR_SAME_DIRECTION_INTERSECTION``

Criticality only looks at shortest routes: a word that forms a necessary but
longer alternate route is reported as non-critical.
"""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import asdict, dataclass, field
from enum import Enum
from itertools import combinations
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from ..core.constants import FORWARD_STEPS, ORTHOGONAL_STEPS, CellType, SelectionModel, WordCategory
from ..core.models import Cell, Puzzle, placement_key
from ..utils.logger import get_logger
from .validator import validate_puzzle


LOGGER = get_logger(__name__)


class AuditCode(str, Enum):
    SCHEMA_INVALID = "ERR_SCHEMA_INVALID"
    MULTI_PLACEMENT = "ERR_MULTI_PLACEMENT"
    UNSOLVABLE = "ERR_UNSOLVABLE"
    NON_CRITICAL_WORD = "ERR_NON_CRITICAL_WORD"
    START_VOID = "ERR_START_VOID"
    START_NOT_IN_PATH = "ERR_START_NOT_IN_PATH"
    END_VOID = "ERR_END_VOID"
    END_NOT_IN_PATH = "ERR_END_NOT_IN_PATH"
    HINT_NOT_FOUND = "ERR_HINT_NOT_FOUND"
    HINT_VOID = "ERR_HINT_VOID"
    HINT_NOT_IN_BONUS = "ERR_HINT_NOT_IN_BONUS"
    HINT_NOT_IN_PATH = "ERR_HINT_NOT_IN_PATH"
    DUP_PLACEMENT = "ERR_DUP_PLACEMENT"
    CELL_OUT_OF_BOUNDS = "ERR_CELL_OUT_OF_BOUNDS"
    PLACEMENT_CELL_NOT_FOUND = "ERR_PLACEMENT_CELL_NOT_FOUND"
    PLACEMENT_NOT_RAY = "ERR_PLACEMENT_NOT_RAY"
    PLACEMENT_NOT_CONTIGUOUS = "ERR_PLACEMENT_NOT_CONTIGUOUS"
    PLACEMENT_REVERSED = "ERR_PLACEMENT_REVERSED"
    PLACEMENT_DIAGONAL = "ERR_PLACEMENT_DIAGONAL"
    PARALLEL_ADJACENCY = "ERR_PARALLEL_ADJACENCY"
    SAME_DIRECTION_INTERSECTION = "ERR_SAME_DIRECTION_INTERSECTION"


@dataclass
class AuditError:
    code: AuditCode
    path: str
    message: str
    severity: str = "error"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "path": self.path, "message": self.message, "severity": self.severity}


@dataclass
class AuditWarning:
    path: str
    message: str
    severity: str = "warning"


@dataclass
class ConnectivityReport:
    solvable: bool = False
    # BFS distance from start to end, -1 when unreachable.
    path_length: int = -1
    unreachable_path_words: List[str] = field(default_factory=list)
    non_critical_path_words: List[str] = field(default_factory=list)


@dataclass
class AuditResult:
    valid: bool
    errors: List[AuditError] = field(default_factory=list)
    warnings: List[AuditWarning] = field(default_factory=list)
    connectivity: ConnectivityReport = field(default_factory=ConnectivityReport)

    @property
    def codes(self) -> Set[AuditCode]:
        return {error.code for error in self.errors}

    def has_error(self, code: AuditCode) -> bool:
        return code in self.codes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": [asdict(warning) for warning in self.warnings],
            "connectivity": asdict(self.connectivity),
        }


@dataclass
class _Lookup:
    cells: Dict[str, Cell]
    positions: Dict[Tuple[int, int], Cell]
    path_cells: Set[str]

    def neighbors(self, cell: Cell) -> Iterable[Cell]:
        for dx, dy in ORTHOGONAL_STEPS:
            neighbor = self.positions.get((cell.x + dx, cell.y + dy))
            if neighbor is not None:
                yield neighbor


def audit(puzzle: Union[Puzzle, Mapping[str, Any]]) -> AuditResult:
    """Run every structural check against ``puzzle`` and collect the findings."""

    errors: List[AuditError] = []
    warnings: List[AuditWarning] = []

    schema = validate_puzzle(puzzle)
    for issue in schema.errors:
        errors.append(AuditError(AuditCode.SCHEMA_INVALID, issue.path, issue.message))
    if schema.puzzle is None:
        return AuditResult(valid=False, errors=errors, warnings=warnings)
    parsed = schema.puzzle

    lookup = _Lookup(
        cells=parsed.grid.cell_map(),
        positions=parsed.grid.position_map(),
        path_cells=parsed.path_cell_ids(),
    )

    _check_single_placements(parsed, errors)
    _check_placement_cells_exist(parsed, lookup, errors)
    _check_grid_bounds(parsed, errors)
    _check_start_end_cells(parsed, lookup, errors)

    connectivity, distances = _check_connectivity(parsed, lookup)
    if not connectivity.solvable:
        unreachable = ", ".join(connectivity.unreachable_path_words) or "none identified"
        errors.append(
            AuditError(
                AuditCode.UNSOLVABLE,
                "connectivity",
                f"End cell not reachable from start via path words. Unreachable words: {unreachable}",
            )
        )
    else:
        _check_criticality(parsed, lookup, distances, connectivity, errors)

    _check_hint_cells(parsed, lookup, errors, warnings)
    _check_placement_uniqueness(parsed, errors)

    model = parsed.config.selection_model
    if model.is_ray:
        _check_placement_geometry(parsed, lookup, model, errors)
        _check_parallel_adjacency(parsed, lookup, errors)
        _check_same_direction_intersections(parsed, lookup, errors)

    if errors:
        LOGGER.debug("Audit of %s found %d errors", parsed.puzzle_id, len(errors))
    return AuditResult(valid=not errors, errors=errors, warnings=warnings, connectivity=connectivity)


def _word_path(category: WordCategory, word_id: str) -> str:
    return f"words.{category.value}.{word_id}"


def _check_single_placements(puzzle: Puzzle, errors: List[AuditError]) -> None:
    for category, word in puzzle.iter_words():
        if len(word.placements) != 1:
            errors.append(
                AuditError(
                    AuditCode.MULTI_PLACEMENT,
                    f"{_word_path(category, word.word_id)}.placements",
                    f"Word must have exactly 1 placement, found {len(word.placements)}",
                )
            )


def _check_placement_cells_exist(puzzle: Puzzle, lookup: _Lookup, errors: List[AuditError]) -> None:
    for category, word in puzzle.iter_words():
        for placement in word.placements:
            for cell_id in placement:
                if cell_id not in lookup.cells:
                    errors.append(
                        AuditError(
                            AuditCode.PLACEMENT_CELL_NOT_FOUND,
                            f"{_word_path(category, word.word_id)}.placements",
                            f'Placement references non-existent cell "{cell_id}"',
                        )
                    )


def _check_grid_bounds(puzzle: Puzzle, errors: List[AuditError]) -> None:
    grid = puzzle.grid
    for cell in grid.cells:
        if not 0 <= cell.x < grid.width:
            errors.append(
                AuditError(
                    AuditCode.CELL_OUT_OF_BOUNDS,
                    f"grid.cells.{cell.id}",
                    f"Cell x={cell.x} is outside grid width={grid.width}",
                )
            )
        if not 0 <= cell.y < grid.height:
            errors.append(
                AuditError(
                    AuditCode.CELL_OUT_OF_BOUNDS,
                    f"grid.cells.{cell.id}",
                    f"Cell y={cell.y} is outside grid height={grid.height}",
                )
            )


def _check_start_end_cells(puzzle: Puzzle, lookup: _Lookup, errors: List[AuditError]) -> None:
    markers = (
        ("start", puzzle.grid.start_cell_id, AuditCode.START_VOID, AuditCode.START_NOT_IN_PATH),
        ("end", puzzle.grid.end_cell_id, AuditCode.END_VOID, AuditCode.END_NOT_IN_PATH),
    )
    for name, cell_id, void_code, not_in_path_code in markers:
        cell = lookup.cells.get(cell_id)
        if cell is not None and cell.is_void():
            errors.append(
                AuditError(void_code, f"grid.{name}.adjacentCellId", f"{name.capitalize()} cell {cell_id} is VOID")
            )
        if cell_id not in lookup.path_cells:
            errors.append(
                AuditError(
                    not_in_path_code,
                    f"grid.{name}.adjacentCellId",
                    f"{name.capitalize()} cell {cell_id} is not part of any path word placement",
                )
            )


def _distances_from(source: str, lookup: _Lookup) -> Dict[str, int]:
    """BFS distances over non-VOID path-word cells, ORTHO_4 adjacency."""

    if source not in lookup.path_cells or source not in lookup.cells:
        return {}
    distances = {source: 0}
    queue = deque([source])
    while queue:
        current = queue.popleft()
        for neighbor in lookup.neighbors(lookup.cells[current]):
            if neighbor.type == CellType.VOID or neighbor.id not in lookup.path_cells:
                continue
            if neighbor.id in distances:
                continue
            distances[neighbor.id] = distances[current] + 1
            queue.append(neighbor.id)
    return distances


def _check_connectivity(puzzle: Puzzle, lookup: _Lookup) -> Tuple[ConnectivityReport, Dict[str, int]]:
    distances = _distances_from(puzzle.grid.start_cell_id, lookup)
    path_length = distances.get(puzzle.grid.end_cell_id, -1)
    unreachable = [
        word.word_id
        for word in puzzle.path_words
        if word.placements and not any(cell_id in distances for cell_id in word.placement)
    ]
    report = ConnectivityReport(
        solvable=path_length >= 0,
        path_length=path_length,
        unreachable_path_words=unreachable,
    )
    return report, distances


def _check_criticality(
    puzzle: Puzzle,
    lookup: _Lookup,
    from_start: Dict[str, int],
    report: ConnectivityReport,
    errors: List[AuditError],
) -> None:
    from_end = _distances_from(puzzle.grid.end_cell_id, lookup)
    critical = {
        cell_id
        for cell_id, distance in from_start.items()
        if cell_id in from_end and distance + from_end[cell_id] == report.path_length
    }
    for word in puzzle.path_words:
        if not word.placements or any(cell_id in critical for cell_id in word.placement):
            continue
        report.non_critical_path_words.append(word.word_id)
        errors.append(
            AuditError(
                AuditCode.NON_CRITICAL_WORD,
                _word_path(WordCategory.PATH, word.word_id),
                f"Path word {word.word_id} has no cell on a shortest start-to-end route "
                "(dead-end or bypassable branch)",
            )
        )


def _check_hint_cells(
    puzzle: Puzzle,
    lookup: _Lookup,
    errors: List[AuditError],
    warnings: List[AuditWarning],
) -> None:
    for word in puzzle.additional_words:
        word_path = _word_path(WordCategory.ADDITIONAL, word.word_id)
        hint_cell_id = word.hint_cell_id
        if not hint_cell_id:
            warnings.append(AuditWarning(word_path, f"Bonus word {word.word_id} has no hint cell"))
            continue

        hint_cell = lookup.cells.get(hint_cell_id)
        if hint_cell is None:
            errors.append(
                AuditError(AuditCode.HINT_NOT_FOUND, f"{word_path}.hintCellId", f"Hint cell {hint_cell_id} not found in grid")
            )
            continue
        if hint_cell.is_void():
            errors.append(
                AuditError(AuditCode.HINT_VOID, f"{word_path}.hintCellId", f"Hint cell {hint_cell_id} cannot be VOID")
            )
            continue

        if hint_cell_id not in word.placement:
            errors.append(
                AuditError(
                    AuditCode.HINT_NOT_IN_BONUS,
                    f"{word_path}.hintCellId",
                    f"Hint cell {hint_cell_id} must be in the bonus word's placement [{', '.join(word.placement)}]",
                )
            )
        if hint_cell_id not in lookup.path_cells:
            errors.append(
                AuditError(
                    AuditCode.HINT_NOT_IN_PATH,
                    f"{word_path}.hintCellId",
                    f"Hint cell {hint_cell_id} must also be in a path word placement",
                )
            )


def _check_placement_uniqueness(puzzle: Puzzle, errors: List[AuditError]) -> None:
    seen: Dict[str, Tuple[WordCategory, str]] = {}
    for category, word in puzzle.iter_words():
        if not word.placements:
            continue
        placement = word.placement
        key = placement_key(placement)
        existing = seen.get(key)
        if existing is not None:
            other_category, other_id = existing
            errors.append(
                AuditError(
                    AuditCode.DUP_PLACEMENT,
                    _word_path(category, word.word_id),
                    f'Duplicate placement key "{key}" conflicts with {other_category.value} word "{other_id}"',
                )
            )
            continue
        seen[key] = (category, word.word_id)
        seen.setdefault(placement_key(list(reversed(placement))), (category, word.word_id))


def _steps(placement: List[str], lookup: _Lookup) -> List[Tuple[int, int]]:
    steps = []
    for current_id, next_id in zip(placement, placement[1:]):
        current = lookup.cells.get(current_id)
        following = lookup.cells.get(next_id)
        if current is None or following is None:
            continue
        steps.append((following.x - current.x, following.y - current.y))
    return steps


def _geometry_violation(model: SelectionModel, steps: List[Tuple[int, int]]) -> Optional[Tuple[AuditCode, str]]:
    for index, (dx, dy) in enumerate(steps):
        if model == SelectionModel.RAY_4DIR and abs(dx) == 1 and abs(dy) == 1:
            return AuditCode.PLACEMENT_DIAGONAL, f"Placement is diagonal (not allowed in {model.value})"
        distance = abs(dx) + abs(dy)
        if distance != 1:
            return (
                AuditCode.PLACEMENT_NOT_CONTIGUOUS,
                f"Placement has non-adjacent cells at step {index} (Manhattan distance {distance})",
            )

    first = steps[0]
    if any(step != first for step in steps):
        return AuditCode.PLACEMENT_NOT_RAY, "Placement bends (not a straight ray)"

    if model == SelectionModel.RAY_4DIR and first not in FORWARD_STEPS:
        direction = "right-to-left" if first[1] == 0 else "bottom-to-top"
        return AuditCode.PLACEMENT_REVERSED, f"Word reads {direction} (reversed)"
    return None


def _check_placement_geometry(
    puzzle: Puzzle,
    lookup: _Lookup,
    model: SelectionModel,
    errors: List[AuditError],
) -> None:
    for category, word in puzzle.iter_words():
        steps = _steps(word.placement, lookup)
        if not steps:
            continue
        violation = _geometry_violation(model, steps)
        if violation is not None:
            code, message = violation
            errors.append(AuditError(code, _word_path(category, word.word_id), message))


def _touches(cells_a: Set[str], cells_b: Set[str], lookup: _Lookup) -> bool:
    for cell_id in cells_a:
        cell = lookup.cells.get(cell_id)
        if cell is None:
            continue
        if any(neighbor.id in cells_b for neighbor in lookup.neighbors(cell)):
            return True
    return False


def _check_parallel_adjacency(puzzle: Puzzle, lookup: _Lookup, errors: List[AuditError]) -> None:
    placed = [(word.word_id, set(word.placement)) for word in puzzle.path_words if word.placements]
    for (id_a, cells_a), (id_b, cells_b) in combinations(placed, 2):
        if cells_a & cells_b:
            continue
        if _touches(cells_a, cells_b, lookup):
            errors.append(
                AuditError(
                    AuditCode.PARALLEL_ADJACENCY,
                    f"words.path.{id_a},{id_b}",
                    f"Path words {id_a} and {id_b} run side by side without intersecting",
                )
            )


def _local_axis(placement: List[str], index: int, lookup: _Lookup) -> Optional[Tuple[int, int]]:
    """Direction a word runs through ``placement[index]``, sign-normalised."""

    if index + 1 < len(placement):
        a, b = placement[index], placement[index + 1]
    elif index > 0:
        a, b = placement[index - 1], placement[index]
    else:
        return None
    start, end = lookup.cells.get(a), lookup.cells.get(b)
    if start is None or end is None:
        return None
    dx, dy = end.x - start.x, end.y - start.y
    if dx < 0 or (dx == 0 and dy < 0):
        dx, dy = -dx, -dy
    return dx, dy


def _check_same_direction_intersections(puzzle: Puzzle, lookup: _Lookup, errors: List[AuditError]) -> None:
    runs: Dict[str, Dict[str, Tuple[int, int]]] = defaultdict(dict)
    for word in puzzle.path_words:
        placement = word.placement
        for index, cell_id in enumerate(placement):
            axis = _local_axis(placement, index, lookup)
            if axis is not None:
                runs[cell_id].setdefault(word.word_id, axis)

    for cell_id, by_word in runs.items():
        if len(by_word) < 2:
            continue
        by_axis: Dict[Tuple[int, int], List[str]] = defaultdict(list)
        for word_id, axis in by_word.items():
            by_axis[axis].append(word_id)
        clashing = next((ids for ids in by_axis.values() if len(ids) > 1), None)
        if clashing:
            errors.append(
                AuditError(
                    AuditCode.SAME_DIRECTION_INTERSECTION,
                    f"grid.cells.{cell_id}",
                    f"Path words {', '.join(clashing)} cross cell {cell_id} in the same direction",
                )
            )
