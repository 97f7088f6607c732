"""Batch generation: one puzzle per topic per date."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Set

from ..core.exceptions import ConstructionFailed
from ..core.models import Puzzle
from ..data.wordlists import WordList
from ..utils.logger import get_logger
from .constructor import PuzzleConstructor


LOGGER = get_logger(__name__)


@dataclass
class BatchResult:
    puzzles: List[Puzzle] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    used_words: Dict[str, Set[str]] = field(default_factory=dict)


def generate_batch(
    constructor: PuzzleConstructor,
    wordlists: Mapping[str, WordList],
    topics: Sequence[str],
    dates: Sequence[str],
) -> BatchResult:
    """Generate ``len(topics) * len(dates)`` puzzles.

    A word is used at most once per topic across the batch. A puzzle that
    cannot be built is logged and recorded in ``failures``; the batch goes on.
    """

    result = BatchResult()
    for topic in topics:
        if topic not in wordlists:
            raise KeyError(f"Unknown topic {topic!r}")
        used = result.used_words.setdefault(topic, set())
        for date in dates:
            puzzle_id = f"{date}-{topic}"
            try:
                puzzle = constructor.generate(wordlists[topic], puzzle_id, theme=topic, exclude_words=used)
            except ConstructionFailed as exc:
                LOGGER.error("Skipping %s: %s", puzzle_id, exc)
                result.failures.append(puzzle_id)
                continue
            used.update(word.text for _, word in puzzle.iter_words())
            result.puzzles.append(puzzle)
    LOGGER.info("Batch finished: %d puzzles, %d failures", len(result.puzzles), len(result.failures))
    return result
