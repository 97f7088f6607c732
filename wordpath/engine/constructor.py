"""Puzzle construction orchestration.

One attempt runs the full pipeline on a fresh grid:
  1. Plan a chain of path words (ChainPlanner).
  2. Place the chain with backtracking, then one bonus word (PlacementSolver).
  3. Fill distractors, freeze, export and assemble the Puzzle.
  4. Audit gate: a puzzle with structural errors is rejected.

Any recoverable failure ends the attempt; the outer loop retries with a new
seed until ``max_attempts`` is spent.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..core.constants import (
    CONSTRUCTION_MAX_ATTEMPTS,
    DEFAULT_GRID_SIZE,
    SNAKE_SUBTREE_LIMIT,
    SNAKE_TOTAL_LIMIT,
    SelectionModel,
    geometry_for,
    steps_for,
)
from ..core.exceptions import ConstructionFailed, PuzzleRejected, SearchExhausted
from ..core.models import Grid, Puzzle, PuzzleConfig, WordDef
from ..data.wordlists import WordList
from ..utils.logger import get_logger
from .auditor import AuditResult, audit
from .chain import ChainConfig, ChainPlanner
from .grid import GridConfig, GridState
from .placement import PlacementSolver


LOGGER = get_logger(__name__)


@dataclass
class ConstructorConfig:
    width: int = DEFAULT_GRID_SIZE
    height: int = DEFAULT_GRID_SIZE
    selection_model: SelectionModel = SelectionModel.RAY_8DIR
    seed: Optional[int] = None
    max_attempts: int = CONSTRUCTION_MAX_ATTEMPTS
    require_audit_pass: bool = True
    allow_reverse_selection: bool = True
    chain: ChainConfig = field(default_factory=ChainConfig)
    snake_subtree_limit: int = SNAKE_SUBTREE_LIMIT
    snake_total_limit: int = SNAKE_TOTAL_LIMIT

    def to_grid_config(self, seed_override: Optional[int] = None) -> GridConfig:
        return GridConfig(
            width=self.width,
            height=self.height,
            geometry=geometry_for(self.selection_model),
            directions=steps_for(self.selection_model),
            snake_subtree_limit=self.snake_subtree_limit,
            snake_total_limit=self.snake_total_limit,
            rng_seed=seed_override if seed_override is not None else self.seed,
        )

    def to_chain_config(self) -> ChainConfig:
        return self.chain

    def to_puzzle_config(self) -> PuzzleConfig:
        return PuzzleConfig(
            selection_model=self.selection_model,
            allow_reverse_selection=self.allow_reverse_selection,
        )


@dataclass
class ConstructionResult:
    puzzle: Puzzle
    audit: AuditResult
    attempts: int
    seed: Optional[int] = None
    distractor_count: int = 0


class PuzzleConstructor:
    """Builds audited puzzles from a word list with bounded retries."""

    def __init__(self, config: Optional[ConstructorConfig] = None) -> None:
        self.config = config or ConstructorConfig()
        self.rng = random.Random(self.config.seed)

    # ------------------------------------------------------------------
    # Public entrypoint
    # ------------------------------------------------------------------
    def generate(
        self,
        wordlist: WordList,
        puzzle_id: str,
        theme: str = "",
        exclude_words: Iterable[str] = (),
    ) -> Puzzle:
        return self.construct(wordlist, puzzle_id, theme, exclude_words).puzzle

    def construct(
        self,
        wordlist: WordList,
        puzzle_id: str,
        theme: str = "",
        exclude_words: Iterable[str] = (),
    ) -> ConstructionResult:
        excluded = [word.upper() for word in exclude_words]
        last_error: Optional[Exception] = None
        for attempt in range(1, self.config.max_attempts + 1):
            attempt_seed = self.rng.randint(0, 1_000_000)
            LOGGER.info(
                "Construction attempt %s/%s for %s (seed %s)",
                attempt,
                self.config.max_attempts,
                puzzle_id,
                attempt_seed,
            )
            try:
                result = self._attempt(wordlist, puzzle_id, theme, excluded, attempt_seed)
            except SearchExhausted as exc:
                LOGGER.warning("Attempt %s failed: %s", attempt, exc)
                last_error = exc
                continue
            result.attempts = attempt
            LOGGER.info(
                "Built %s on attempt %s: path %s, bonus %s",
                puzzle_id,
                attempt,
                " -> ".join(word.text for word in result.puzzle.path_words),
                ", ".join(word.text for word in result.puzzle.additional_words) or "-",
            )
            return result
        raise ConstructionFailed(
            f"Unable to construct {puzzle_id} after {self.config.max_attempts} attempts: {last_error}"
        )

    # ------------------------------------------------------------------
    # One attempt
    # ------------------------------------------------------------------
    def _attempt(
        self,
        wordlist: WordList,
        puzzle_id: str,
        theme: str,
        excluded: List[str],
        seed: int,
    ) -> ConstructionResult:
        attempt_rng = random.Random(seed)
        grid = GridState(self.config.to_grid_config(seed_override=seed), rng=attempt_rng)

        planner = ChainPlanner(self.config.to_chain_config(), rng=attempt_rng)
        chain = planner.plan(wordlist.path, exclude_words=excluded)

        solver = PlacementSolver(grid, rng=attempt_rng)
        path_words = solver.place_chain(chain)
        path_cells = {cell_id for word in path_words for cell_id in word.placement}
        bonus = solver.place_bonus(wordlist.bonus, path_cells, exclude_words=list(chain) + excluded)

        distractors = grid.fill_distractors()
        grid.freeze()
        exported = grid.export_grid(
            start_cell_id=path_words[0].placement[0],
            end_cell_id=path_words[-1].placement[-1],
        )
        puzzle = self._assemble(puzzle_id, theme, exported, path_words, [bonus])

        report = audit(puzzle)
        if self.config.require_audit_pass and not report.valid:
            codes = sorted(code.value for code in report.codes)
            raise PuzzleRejected(f"Audit rejected puzzle: {', '.join(codes)}")
        return ConstructionResult(
            puzzle=puzzle,
            audit=report,
            attempts=0,
            seed=seed,
            distractor_count=distractors,
        )

    def _assemble(
        self,
        puzzle_id: str,
        theme: str,
        grid: Grid,
        path_words: List[WordDef],
        additional_words: List[WordDef],
    ) -> Puzzle:
        return Puzzle(
            puzzle_id=puzzle_id,
            theme=theme,
            config=self.config.to_puzzle_config(),
            grid=grid,
            path_words=path_words,
            additional_words=additional_words,
        )
