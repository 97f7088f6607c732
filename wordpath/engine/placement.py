"""Backtracking placement of a planned word chain onto a grid."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set

from ..core.exceptions import SearchExhausted
from ..core.models import WordDef
from ..utils.logger import get_logger
from .grid import GridState


LOGGER = get_logger(__name__)


@dataclass
class _Frame:
    word: str
    options: List[List[str]]
    cursor: int = 0
    committed: bool = False

    @property
    def current(self) -> List[str]:
        return self.options[self.cursor - 1]


class PlacementSolver:
    """Places chain words one after another, backtracking on dead ends.

    Each frame owns at most one commit on the grid's commit stack, so the top
    frame can always revert its own mutation with ``GridState.undo``.
    """

    def __init__(self, grid: GridState, rng: Optional[random.Random] = None) -> None:
        self.grid = grid
        self.rng = rng or grid.rng

    def place_chain(self, chain: Sequence[str]) -> List[WordDef]:
        if not chain:
            return []
        words = [word.upper() for word in chain]
        frames = [_Frame(words[0], self.grid.find_all_path_options(words[0]))]

        while frames:
            depth = len(frames) - 1
            frame = frames[-1]
            if frame.committed:
                self.grid.undo()
                frame.committed = False
            if frame.cursor >= len(frame.options):
                LOGGER.debug("No placement left for %s at depth %d", frame.word, depth)
                frames.pop()
                continue

            placement = frame.options[frame.cursor]
            frame.cursor += 1
            overlap = placement[0] if depth > 0 else None
            self.grid.commit_path(frame.word, frame.word, placement, overlap_cell_id=overlap)
            frame.committed = True

            if depth + 1 == len(words):
                return [WordDef.from_text(f.word, f.current) for f in frames]
            next_word = words[depth + 1]
            frames.append(_Frame(next_word, self.grid.find_all_path_options(next_word, placement[-1])))

        raise SearchExhausted("Could not place path words (backtracking exhausted)")

    def place_bonus(
        self,
        candidates: Iterable[str],
        path_cell_ids: Iterable[str],
        exclude_words: Iterable[str] = (),
    ) -> WordDef:
        """Place exactly one bonus word crossing the path."""

        excluded: Set[str] = {word.upper() for word in exclude_words}
        pool: List[str] = []
        for word in candidates:
            surface = word.upper()
            if surface and surface not in excluded and surface not in pool:
                pool.append(surface)
        self.rng.shuffle(pool)

        path_cells = set(path_cell_ids)
        for word in pool:
            result = self.grid.try_place_bonus_word(word, path_cells)
            if result is None:
                continue
            placement, hint_cell_id = result
            return WordDef.from_text(word, placement, hint_cell_id=hint_cell_id)
        raise SearchExhausted("Could not place bonus word")
