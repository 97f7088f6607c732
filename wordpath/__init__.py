"""Word path puzzle generator and auditor.

This package exposes the public API surface via:

- ``wordpath.engine.constructor.PuzzleConstructor``: builds audited puzzles from a word list.
- ``wordpath.engine.auditor.audit``: structural checks for finished puzzles.
- ``wordpath.data.wordlists`` helpers: loading topic word lists.
"""

from .core.models import Puzzle
from .data.wordlists import WordList, load_wordlists
from .engine.auditor import AuditCode, AuditResult, audit
from .engine.constructor import ConstructorConfig, PuzzleConstructor
from .engine.placement_index import PlacementIndex

__all__ = [
    "AuditCode",
    "AuditResult",
    "ConstructorConfig",
    "PlacementIndex",
    "Puzzle",
    "PuzzleConstructor",
    "WordList",
    "audit",
    "load_wordlists",
]

__version__ = "0.1.0"
