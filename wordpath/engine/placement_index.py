"""Exact-match lookup of player selections against puzzle placements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from ..core.constants import WordCategory
from ..core.models import Puzzle, placement_key


@dataclass(frozen=True)
class PlacementMatch:
    word_id: str
    category: WordCategory
    placement_index: int
    reversed: bool = False


class PlacementIndex:
    """Maps placement keys to words.

    With ``allowReverseSelection`` a selection made end-to-start resolves to
    the same word. The first registration of a key wins.
    """

    def __init__(self, puzzle: Puzzle) -> None:
        self.allow_reverse = puzzle.config.allow_reverse_selection
        self._entries: Dict[str, PlacementMatch] = {}
        for category, word in puzzle.iter_words():
            for index, placement in enumerate(word.placements):
                self._entries.setdefault(placement_key(placement), PlacementMatch(word.word_id, category, index))
                if self.allow_reverse and len(placement) > 1:
                    self._entries.setdefault(
                        placement_key(list(reversed(placement))),
                        PlacementMatch(word.word_id, category, index, reversed=True),
                    )

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, cell_ids: Sequence[str]) -> Optional[PlacementMatch]:
        if not cell_ids:
            return None
        return self._entries.get(placement_key(list(cell_ids)))
