"""Data models shared by the generator, the auditor and the run-time lookup."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Set, Tuple

from .constants import (
    Bounds,
    CellType,
    ConnectivityModel,
    EMPTY,
    SelectionModel,
    WordCategory,
)


@dataclass
class Cell:
    """Represents a grid cell with metadata."""

    id: str
    x: int
    y: int
    type: CellType = CellType.LETTER
    value: str = EMPTY
    part_of_word_ids: Set[str] = field(default_factory=set, repr=False, compare=False)

    def is_empty(self) -> bool:
        return self.type == CellType.LETTER and not self.value

    def is_void(self) -> bool:
        return self.type == CellType.VOID

    def accepts(self, letter: str) -> bool:
        """True when ``letter`` may be written here without a conflict."""
        return self.type == CellType.LETTER and (not self.value or self.value == letter)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": self.id, "x": self.x, "y": self.y, "type": self.type.value}
        if self.type == CellType.LETTER:
            payload["value"] = self.value
        return payload


@dataclass
class Grid:
    width: int
    height: int
    cells: List[Cell]
    start_cell_id: str
    end_cell_id: str

    @property
    def bounds(self) -> Bounds:
        return Bounds(width=self.width, height=self.height)

    def cell_map(self) -> Dict[str, Cell]:
        return {cell.id: cell for cell in self.cells}

    def position_map(self) -> Dict[Tuple[int, int], Cell]:
        return {(cell.x, cell.y): cell for cell in self.cells}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "cells": [cell.to_dict() for cell in self.cells],
            "start": {"adjacentCellId": self.start_cell_id},
            "end": {"adjacentCellId": self.end_cell_id},
        }


@dataclass
class WordDef:
    """A word and its placements on the grid."""

    word_id: str
    tokens: List[str]
    size: int
    placements: List[List[str]] = field(default_factory=list)
    hint_cell_id: Optional[str] = None

    @classmethod
    def from_text(
        cls,
        text: str,
        placement: List[str],
        hint_cell_id: Optional[str] = None,
    ) -> "WordDef":
        return cls(
            word_id=text,
            tokens=list(text),
            size=len(text),
            placements=[list(placement)],
            hint_cell_id=hint_cell_id,
        )

    @property
    def placement(self) -> List[str]:
        """The first placement, or an empty list for an unplaced word."""
        return self.placements[0] if self.placements else []

    @property
    def text(self) -> str:
        return "".join(self.tokens)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "wordId": self.word_id,
            "tokens": [{"t": "L", "v": token} for token in self.tokens],
            "size": self.size,
            "placements": [list(p) for p in self.placements],
        }
        if self.hint_cell_id is not None:
            payload["hintCellId"] = self.hint_cell_id
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WordDef":
        tokens = [
            token["v"] if isinstance(token, Mapping) else str(token)
            for token in data.get("tokens") or []
        ]
        # ``clueCellId`` is the legacy name of the hint cell.
        hint = data.get("hintCellId")
        if hint is None:
            hint = data.get("clueCellId")
        return cls(
            word_id=str(data["wordId"]),
            tokens=tokens,
            size=int(data["size"]),
            placements=[[str(cell_id) for cell_id in p] for p in data.get("placements") or []],
            hint_cell_id=hint,
        )


@dataclass
class PuzzleConfig:
    selection_model: SelectionModel = SelectionModel.RAY_8DIR
    connectivity_model: ConnectivityModel = ConnectivityModel.ORTHO_4
    allow_reverse_selection: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selectionModel": self.selection_model.value,
            "connectivityModel": self.connectivity_model.value,
            "allowReverseSelection": self.allow_reverse_selection,
        }


@dataclass
class Puzzle:
    puzzle_id: str
    theme: str
    config: PuzzleConfig
    grid: Grid
    path_words: List[WordDef] = field(default_factory=list)
    additional_words: List[WordDef] = field(default_factory=list)

    def iter_words(self) -> Iterator[Tuple[WordCategory, WordDef]]:
        for word in self.path_words:
            yield WordCategory.PATH, word
        for word in self.additional_words:
            yield WordCategory.ADDITIONAL, word

    def path_cell_ids(self) -> Set[str]:
        """Union of the first placement of every path word."""
        cells: Set[str] = set()
        for word in self.path_words:
            cells.update(word.placement)
        return cells

    def to_dict(self) -> Dict[str, Any]:
        return {
            "puzzleId": self.puzzle_id,
            "theme": self.theme,
            "config": self.config.to_dict(),
            "grid": self.grid.to_dict(),
            "words": {
                "path": [word.to_dict() for word in self.path_words],
                "additional": [word.to_dict() for word in self.additional_words],
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Puzzle":
        """Build a puzzle from a well-formed document.

        Use :func:`wordpath.engine.validator.load_puzzle` for untrusted input.
        """

        config_data = data.get("config") or {}
        config = PuzzleConfig(
            selection_model=SelectionModel(config_data.get("selectionModel", SelectionModel.RAY_8DIR.value)),
            connectivity_model=ConnectivityModel(
                config_data.get("connectivityModel", ConnectivityModel.ORTHO_4.value)
            ),
            allow_reverse_selection=bool(config_data.get("allowReverseSelection", True)),
        )
        grid_data = data["grid"]
        cells = [
            Cell(
                id=str(cell["id"]),
                x=int(cell["x"]),
                y=int(cell["y"]),
                type=CellType(cell.get("type", CellType.LETTER.value)),
                value=cell.get("value") or EMPTY,
            )
            for cell in grid_data["cells"]
        ]
        grid = Grid(
            width=int(grid_data["width"]),
            height=int(grid_data["height"]),
            cells=cells,
            start_cell_id=str(grid_data["start"]["adjacentCellId"]),
            end_cell_id=str(grid_data["end"]["adjacentCellId"]),
        )
        words = data.get("words") or {}
        return cls(
            puzzle_id=str(data.get("puzzleId") or ""),
            theme=str(data.get("theme") or ""),
            config=config,
            grid=grid,
            path_words=[WordDef.from_dict(w) for w in words.get("path") or []],
            additional_words=[WordDef.from_dict(w) for w in words.get("additional") or []],
        )


def placement_key(cell_ids: List[str]) -> str:
    return "|".join(cell_ids)
