"""Schema validation for puzzle documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Literal, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ..core.constants import CellType, ConnectivityModel, SelectionModel
from ..core.exceptions import PuzzleSchemaError
from ..core.models import Puzzle
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)


class TokenModel(BaseModel):
    t: Literal["L"] = "L"
    v: str = Field(..., min_length=1, max_length=1)


class CellModel(BaseModel):
    id: str = Field(..., min_length=1)
    x: int
    y: int
    type: CellType = CellType.LETTER
    value: Optional[str] = None


class MarkerModel(BaseModel):
    adjacentCellId: str = Field(..., min_length=1)


class GridModel(BaseModel):
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    cells: List[CellModel]
    start: MarkerModel
    end: MarkerModel


class WordModel(BaseModel):
    wordId: str = Field(..., min_length=1)
    tokens: List[Union[TokenModel, str]]
    size: int = Field(..., ge=1)
    placements: List[List[str]]
    hintCellId: Optional[str] = None
    clueCellId: Optional[str] = None


class ConfigModel(BaseModel):
    selectionModel: SelectionModel = SelectionModel.RAY_8DIR
    connectivityModel: ConnectivityModel = ConnectivityModel.ORTHO_4
    allowReverseSelection: bool = True


class WordsModel(BaseModel):
    path: List[WordModel]
    additional: Optional[List[WordModel]] = None


class PuzzleDocument(BaseModel):
    puzzleId: str
    theme: str = ""
    config: ConfigModel = Field(default_factory=ConfigModel)
    grid: GridModel
    words: WordsModel


@dataclass
class SchemaIssue:
    path: str
    message: str


@dataclass
class ValidationResult:
    valid: bool
    errors: List[SchemaIssue] = field(default_factory=list)
    puzzle: Optional[Puzzle] = None


def _format_loc(loc: Sequence[Any]) -> str:
    return ".".join(str(part) for part in loc)


def validate_puzzle(document: Any) -> ValidationResult:
    """Validate a raw puzzle document.

    Structural problems (wrong types, missing fields) leave ``puzzle`` unset.
    Semantic problems (dangling start cell, size mismatches) are reported
    alongside a parsed ``puzzle``.
    """

    if isinstance(document, Puzzle):
        document = document.to_dict()
    if not isinstance(document, Mapping):
        return ValidationResult(valid=False, errors=[SchemaIssue("", "Puzzle document must be an object")])

    try:
        model = PuzzleDocument.model_validate(document)
    except PydanticValidationError as exc:
        issues = [SchemaIssue(_format_loc(err["loc"]), err["msg"]) for err in exc.errors()]
        LOGGER.debug("Puzzle document rejected with %d schema issues", len(issues))
        return ValidationResult(valid=False, errors=issues)

    errors: List[SchemaIssue] = []
    if not model.puzzleId:
        errors.append(SchemaIssue("puzzleId", "Missing puzzleId"))

    cell_ids = set()
    for cell in model.grid.cells:
        if cell.id in cell_ids:
            errors.append(SchemaIssue(f"grid.cells.{cell.id}", f"Duplicate cell id {cell.id}"))
        cell_ids.add(cell.id)

    for marker, name in ((model.grid.start, "start"), (model.grid.end, "end")):
        if marker.adjacentCellId not in cell_ids:
            errors.append(
                SchemaIssue(
                    f"grid.{name}.adjacentCellId",
                    f"{name.capitalize()} cell {marker.adjacentCellId} not found in grid",
                )
            )

    for category, words in (("path", model.words.path), ("additional", model.words.additional or [])):
        for word in words:
            word_path = f"words.{category}.{word.wordId}"
            if len(word.tokens) != word.size:
                errors.append(
                    SchemaIssue(word_path, f"Token count {len(word.tokens)} doesn't match size {word.size}")
                )
            for index, placement in enumerate(word.placements):
                if len(placement) != word.size:
                    errors.append(
                        SchemaIssue(
                            f"{word_path}.placements[{index}]",
                            f"Placement has {len(placement)} cells but word size is {word.size}",
                        )
                    )
                for cell_id in placement:
                    if cell_id not in cell_ids:
                        errors.append(
                            SchemaIssue(f"{word_path}.placements[{index}]", f"Cell {cell_id} not found in grid")
                        )

    puzzle = Puzzle.from_dict(model.model_dump(mode="json", exclude_none=True))
    return ValidationResult(valid=not errors, errors=errors, puzzle=puzzle)


def load_puzzle(document: Any, strict: bool = False) -> Puzzle:
    """Parse ``document`` into a :class:`Puzzle`.

    Raises :class:`PuzzleSchemaError` when the document cannot be parsed, or
    with ``strict`` when it has any schema issue.
    """

    result = validate_puzzle(document)
    if result.puzzle is None or (strict and not result.valid):
        summary = "; ".join(f"{issue.path}: {issue.message}" for issue in result.errors[:5])
        raise PuzzleSchemaError(f"Invalid puzzle document: {summary}", result.errors)
    return result.puzzle
