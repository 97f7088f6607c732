"""Selection of path words that chain end-to-start."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ..core.constants import (
    CHAIN_HARD_TOTAL,
    CHAIN_MAX_ATTEMPTS,
    CHAIN_MAX_WORDS,
    CHAIN_MIN_WORDS,
    CHAIN_OVERSHOOT_TOTAL,
    CHAIN_SOFT_TOTAL,
    CHAIN_START_MAX_LENGTH,
    PATH_WORD_MAX_LENGTH,
    PATH_WORD_MIN_LENGTH,
)
from ..core.exceptions import ChainBuildError
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


@dataclass
class ChainConfig:
    min_words: int = CHAIN_MIN_WORDS
    max_words: int = CHAIN_MAX_WORDS
    min_length: int = PATH_WORD_MIN_LENGTH
    max_length: int = PATH_WORD_MAX_LENGTH
    start_max_length: int = CHAIN_START_MAX_LENGTH
    soft_total: int = CHAIN_SOFT_TOTAL
    overshoot_total: int = CHAIN_OVERSHOOT_TOTAL
    hard_total: int = CHAIN_HARD_TOTAL
    max_attempts: int = CHAIN_MAX_ATTEMPTS


class ChainPlanner:
    """Picks an ordered word chain where each word starts with the previous word's last letter."""

    def __init__(self, config: Optional[ChainConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or ChainConfig()
        self.rng = rng or random.Random()

    def candidate_pool(self, words: Iterable[str], exclude_words: Iterable[str] = ()) -> List[str]:
        """Unique uppercase words within the length bounds, in input order."""

        excluded = {word.upper() for word in exclude_words}
        pool: List[str] = []
        seen = set()
        for word in words:
            surface = word.upper()
            if surface in seen or surface in excluded:
                continue
            if not self.config.min_length <= len(surface) <= self.config.max_length:
                continue
            seen.add(surface)
            pool.append(surface)
        return pool

    def plan(self, words: Sequence[str], exclude_words: Iterable[str] = ()) -> List[str]:
        pool = self.candidate_pool(words, exclude_words)
        start_options = [word for word in pool if len(word) <= self.config.start_max_length]
        if not start_options:
            raise ChainBuildError("No valid start words")

        for attempt in range(1, self.config.max_attempts + 1):
            chain = self._attempt(pool, start_options)
            if chain is not None:
                LOGGER.debug(
                    "Selected chain %s (total length %d) on attempt %d",
                    " -> ".join(chain),
                    sum(len(word) for word in chain),
                    attempt,
                )
                return chain
        raise ChainBuildError(
            f"Could not build valid word chain after {self.config.max_attempts} attempts"
        )

    def _attempt(self, pool: List[str], start_options: List[str]) -> Optional[List[str]]:
        current = self.rng.choice(start_options)
        chain = [current]
        used = {current}
        total = len(current)

        while len(chain) < self.config.max_words and total < self.config.soft_total:
            candidates = [w for w in pool if w not in used and w[0] == current[-1]]
            if not candidates:
                break
            next_word = self.rng.choice(candidates)
            chain.append(next_word)
            used.add(next_word)
            total += len(next_word)
            if total > self.config.overshoot_total:
                # Accepted as the closing word.
                break
            current = next_word

        if len(chain) >= self.config.min_words and total <= self.config.hard_total:
            return chain
        return None
