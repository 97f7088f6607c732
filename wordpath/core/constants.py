"""Shared constants and enumerations for the puzzle generator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class CellType(str, Enum):
    """All supported cell types in the grid."""

    LETTER = "LETTER"
    VOID = "VOID"


class SelectionModel(str, Enum):
    """How a player may select a word on the grid."""

    RAY_8DIR = "RAY_8DIR"
    RAY_4DIR = "RAY_4DIR"
    ADJACENT = "ADJACENT"

    @property
    def is_ray(self) -> bool:
        return self in (SelectionModel.RAY_8DIR, SelectionModel.RAY_4DIR)


class ConnectivityModel(str, Enum):
    ORTHO_4 = "ORTHO_4"


class PlacementGeometry(str, Enum):
    """Placement search strategies supported by the grid."""

    RAY = "RAY"
    SNAKE = "SNAKE"


class WordCategory(str, Enum):
    PATH = "path"
    ADDITIONAL = "additional"


# (dx, dy) steps; y grows downwards.
ORTHOGONAL_STEPS: Tuple[Tuple[int, int], ...] = ((1, 0), (0, 1), (-1, 0), (0, -1))
FORWARD_STEPS: Tuple[Tuple[int, int], ...] = ((1, 0), (0, 1))

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
EMPTY = ""

# Chain planning bounds.
PATH_WORD_MIN_LENGTH = 3
PATH_WORD_MAX_LENGTH = 7
CHAIN_START_MAX_LENGTH = 6
CHAIN_MIN_WORDS = 3
CHAIN_MAX_WORDS = 4
CHAIN_SOFT_TOTAL = 18
CHAIN_OVERSHOOT_TOTAL = 22
CHAIN_HARD_TOTAL = 25
CHAIN_MAX_ATTEMPTS = 100

# Outer construction retry budget.
CONSTRUCTION_MAX_ATTEMPTS = 50

# SNAKE search caps: per DFS subtree and across all start cells.
SNAKE_SUBTREE_LIMIT = 1000
SNAKE_TOTAL_LIMIT = 5000

DEFAULT_GRID_SIZE = 6


@dataclass(frozen=True)
class Bounds:
    """Simple rectangle bounds helper."""

    width: int
    height: int

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height


def geometry_for(model: SelectionModel) -> PlacementGeometry:
    """Return the placement geometry that produces words selectable under ``model``."""

    return PlacementGeometry.RAY if model.is_ray else PlacementGeometry.SNAKE


def steps_for(model: SelectionModel) -> Tuple[Tuple[int, int], ...]:
    return FORWARD_STEPS if model == SelectionModel.RAY_4DIR else ORTHOGONAL_STEPS
