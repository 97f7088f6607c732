"""Editorial heuristics layered on top of the structural audit.

These checks do not make a puzzle invalid; they flag puzzles that are
structurally sound but too thin for a daily release.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Dict, List

from ..core.constants import ORTHOGONAL_STEPS
from ..core.models import Puzzle
from .auditor import audit


class QaProfile(str, Enum):
    EASY_DAILY_V1 = "EASY_DAILY_V1"


class QaCode(str, Enum):
    COVERAGE_TOO_LOW = "ERR_QA_COVERAGE_TOO_LOW"
    PATH_INTERSECTIONS_TOO_LOW = "ERR_QA_PATH_INTERSECTIONS_TOO_LOW"
    ROUTE_TOO_SHORT = "ERR_QA_ROUTE_TOO_SHORT"
    TOUCH_ONLY_CONNECTION = "ERR_QA_TOUCH_ONLY_CONNECTION"


@dataclass
class QaIssue:
    code: QaCode
    path: str
    message: str


# Minimum unique path cells for the common daily sizes.
COVERAGE_THRESHOLDS: Dict[tuple, int] = {
    (6, 6): 10,
    (7, 7): 12,
    (8, 8): 16,
    (10, 10): 25,
    (11, 11): 30,
    (12, 12): 20,
}
ROUTE_HEIGHT_RATIO = 0.6


def coverage_threshold(width: int, height: int) -> int:
    return COVERAGE_THRESHOLDS.get((width, height), max(8, (width * height) // 6))


def min_intersections(word_count: int) -> int:
    return max(2, word_count - 2)


def min_route_length(height: int) -> int:
    return math.ceil(ROUTE_HEIGHT_RATIO * height)


def evaluate_puzzle(puzzle: Puzzle, profile: QaProfile = QaProfile.EASY_DAILY_V1) -> List[QaIssue]:
    # Only one profile exists; unknown names raise ValueError.
    profile = QaProfile(profile)
    issues: List[QaIssue] = []
    grid = puzzle.grid
    placed = [(word.word_id, word.placement) for word in puzzle.path_words if word.placements]

    covered = {cell_id for _, cells in placed for cell_id in cells}
    threshold = coverage_threshold(grid.width, grid.height)
    if len(covered) < threshold:
        issues.append(
            QaIssue(
                QaCode.COVERAGE_TOO_LOW,
                "words.path",
                f"Path covers {len(covered)} cells, expected at least {threshold}",
            )
        )

    owners: Dict[str, int] = {}
    for _, cells in placed:
        for cell_id in set(cells):
            owners[cell_id] = owners.get(cell_id, 0) + 1
    intersections = sum(1 for count in owners.values() if count > 1)
    required = min_intersections(len(placed))
    if intersections < required:
        issues.append(
            QaIssue(
                QaCode.PATH_INTERSECTIONS_TOO_LOW,
                "words.path",
                f"Path words intersect at {intersections} cells, expected at least {required}",
            )
        )

    # Route length counts cells on the shortest start-to-end route.
    connectivity = audit(puzzle).connectivity
    route_cells = connectivity.path_length + 1 if connectivity.solvable else 0
    shortest = min_route_length(grid.height)
    if route_cells < shortest:
        issues.append(
            QaIssue(
                QaCode.ROUTE_TOO_SHORT,
                "connectivity",
                f"Shortest route has {route_cells} cells, expected at least {shortest}",
            )
        )

    positions = {cell.id: (cell.x, cell.y) for cell in grid.cells}
    for (id_a, cells_a), (id_b, cells_b) in combinations(placed, 2):
        if set(cells_a) & set(cells_b):
            continue
        coords_b = {positions[cell_id] for cell_id in cells_b if cell_id in positions}
        touching = any(
            (positions[cell_id][0] + dx, positions[cell_id][1] + dy) in coords_b
            for cell_id in cells_a
            if cell_id in positions
            for dx, dy in ORTHOGONAL_STEPS
        )
        if touching:
            issues.append(
                QaIssue(
                    QaCode.TOUCH_ONLY_CONNECTION,
                    f"words.path.{id_a},{id_b}",
                    f"{id_a} and {id_b} connect only by touching, not by sharing a cell",
                )
            )
    return issues
