"""Pretty-print helpers for puzzles, audit reports and word lists."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Iterable, Optional

from ..core.constants import CellType

if TYPE_CHECKING:
    from ..core.models import Cell, Grid, Puzzle
    from ..data.wordlists import WordListStats
    from ..engine.auditor import AuditResult
    from ..engine.content_qa import QaIssue


def cell_symbol(cell: Cell) -> str:
    if cell.type == CellType.VOID:
        return "#"
    return cell.value or "."


def format_grid(grid: Grid, path_cell_ids: Optional[Iterable[str]] = None) -> str:
    """Render ``grid`` row by row; path cells are lowercase when given."""

    path = set(path_cell_ids or ())
    positions = grid.position_map()
    header_cells = [f"{x:>2}" for x in range(grid.width)]
    lines = ["    " + " ".join(header_cells)]
    lines.append("    " + "-" * (3 * grid.width - 1))
    for y in range(grid.height):
        symbols = []
        for x in range(grid.width):
            cell = positions.get((x, y))
            if cell is None:
                symbols.append("?")
                continue
            symbol = cell_symbol(cell)
            symbols.append(symbol.lower() if cell.id in path else symbol)
        lines.append(f"{y:>2} | " + " ".join(f"{symbol:>2}" for symbol in symbols))
    return "\n".join(lines)


def format_puzzle(puzzle: Puzzle) -> str:
    lines = [f"{puzzle.puzzle_id} ({puzzle.theme or 'untitled'}, {puzzle.config.selection_model.value})"]
    lines.append(format_grid(puzzle.grid, puzzle.path_cell_ids()))
    lines.append(f"  Start: {puzzle.grid.start_cell_id}  End: {puzzle.grid.end_cell_id}")
    lines.append("  Path:  " + " -> ".join(word.text for word in puzzle.path_words))
    for word in puzzle.additional_words:
        lines.append(f"  Bonus: {word.text} (hint {word.hint_cell_id or '-'})")
    return "\n".join(lines)


def format_audit_report(label: str, result: AuditResult, qa_issues: Iterable[QaIssue] = ()) -> str:
    status = "PASS" if result.valid else "FAIL"
    connectivity = result.connectivity
    lines = [f"[{status}] {label}"]
    lines.append(
        f"  solvable={connectivity.solvable} path_length={connectivity.path_length}"
    )
    if connectivity.unreachable_path_words:
        lines.append(f"  unreachable: {', '.join(connectivity.unreachable_path_words)}")
    if connectivity.non_critical_path_words:
        lines.append(f"  non-critical: {', '.join(connectivity.non_critical_path_words)}")
    for error in result.errors:
        lines.append(f"  {error.code.value:<34} {error.path}: {error.message}")
    for warning in result.warnings:
        lines.append(f"  {'WARNING':<34} {warning.path}: {warning.message}")
    for issue in qa_issues:
        lines.append(f"  {issue.code.value:<34} {issue.path}: {issue.message}")
    return "\n".join(lines)


def format_histogram(distribution: dict, width: int = 40) -> str:
    if not distribution:
        return "  (empty)"
    peak = max(distribution.values())
    lines = []
    for key, count in sorted(distribution.items()):
        bar = "#" * max(1, round(count / peak * width)) if count else ""
        lines.append(f"  {key!s:>3} | {bar} {count}")
    return "\n".join(lines)


def print_wordlist_stats(topic: str, stats: WordListStats, *, stream=None) -> None:
    """Print counts and the length distribution of one topic's word list."""

    stream = stream or sys.stdout
    print(f"--- {topic} ---", file=stream)
    print(f"  Path words:    {stats.path_count} ({stats.usable_path_count} usable)", file=stream)
    print(f"  Bonus words:   {stats.bonus_count}", file=stream)
    if stats.filtered_path_words:
        print(f"  Filtered out:  {', '.join(stats.filtered_path_words)}", file=stream)
    print("  Lengths:", file=stream)
    print(format_histogram(stats.length_distribution), file=stream)
    if stats.start_letters:
        letters = " ".join(f"{letter}:{count}" for letter, count in stats.start_letters.items())
        print(f"  Start letters: {letters}", file=stream)
