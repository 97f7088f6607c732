"""Custom exception hierarchy for puzzle generation."""


class WordPathError(Exception):
    """Base exception for generator failures."""


class SearchExhausted(WordPathError):
    """Raised when no placement or candidate exists at a search position.

    Always recoverable: the caller backtracks or starts a new attempt.
    """


class ChainBuildError(SearchExhausted):
    """Raised when no valid word chain was found within the retry budget."""


class PuzzleRejected(SearchExhausted):
    """Raised when an assembled puzzle fails the audit gate."""


class ConstructionFailed(WordPathError):
    """Raised when the outer construction retry budget is exhausted."""


class WordListError(WordPathError):
    """Raised when a word list source cannot be read or parsed."""


class PuzzleSchemaError(WordPathError):
    """Raised when a document cannot be interpreted as a puzzle."""

    def __init__(self, message: str, errors=None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])
