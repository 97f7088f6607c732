"""Topic word lists used as input for puzzle construction."""

from __future__ import annotations

import json
import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

import requests

from ..core.constants import PATH_WORD_MAX_LENGTH, PATH_WORD_MIN_LENGTH
from ..core.exceptions import WordListError
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

WORD_RE = re.compile(r"[^A-Za-z]")
DEFAULT_TIMEOUT_SECONDS = 30.0


def clean_word(text: str) -> str:
    """Return the uppercase ASCII-letter form of ``text``."""

    if not text:
        return ""
    return WORD_RE.sub("", text).upper()


def _clean_all(words: Iterable[Any]) -> List[str]:
    cleaned: List[str] = []
    for word in words:
        surface = clean_word(str(word))
        if surface and surface not in cleaned:
            cleaned.append(surface)
    return cleaned


@dataclass
class WordList:
    """Candidate words for one topic."""

    path: List[str] = field(default_factory=list)
    bonus: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WordList":
        return cls(path=_clean_all(data.get("path") or []), bonus=_clean_all(data.get("bonus") or []))


@dataclass
class WordListStats:
    path_count: int
    bonus_count: int
    usable_path_count: int
    filtered_path_words: List[str]
    length_distribution: Dict[int, int]
    start_letters: Dict[str, int]


def parse_wordlists(document: Any) -> Dict[str, WordList]:
    """Parse ``{contentVersion, topics: {id: {path, bonus}}}`` into word lists.

    A bare ``{id: {path, bonus}}`` mapping is accepted as well.
    """

    if not isinstance(document, Mapping):
        raise WordListError("Word list document must be an object")
    topics = document.get("topics", document)
    if not isinstance(topics, Mapping):
        raise WordListError("'topics' must map topic ids to word lists")

    wordlists: Dict[str, WordList] = {}
    for topic, data in topics.items():
        if topic == "contentVersion":
            continue
        if not isinstance(data, Mapping):
            raise WordListError(f"Topic {topic!r} must be an object with 'path' and 'bonus' lists")
        wordlists[str(topic)] = WordList.from_dict(data)
    if not wordlists:
        raise WordListError("Word list document contains no topics")
    return wordlists


def _fetch(url: str, timeout: float) -> Any:
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as exc:
        raise WordListError(f"Failed to download word lists from {url}: {exc}") from exc
    except ValueError as exc:
        raise WordListError(f"Word list response from {url} is not JSON: {exc}") from exc


def _read(path: Path) -> Any:
    if not path.exists():
        raise WordListError(f"Word list file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise WordListError(f"Word list file {path} is not valid JSON: {exc}") from exc


def load_wordlists(source: Union[str, Path], timeout: float = DEFAULT_TIMEOUT_SECONDS) -> Dict[str, WordList]:
    """Load topic word lists from a JSON file or an ``http(s)`` URL."""

    text = str(source)
    if text.startswith(("http://", "https://")):
        document = _fetch(text, timeout)
    else:
        document = _read(Path(source))
    wordlists = parse_wordlists(document)
    LOGGER.info("Loaded %d topics from %s", len(wordlists), text)
    return wordlists


def wordlist_stats(
    wordlist: WordList,
    min_length: int = PATH_WORD_MIN_LENGTH,
    max_length: int = PATH_WORD_MAX_LENGTH,
) -> WordListStats:
    usable = [word for word in wordlist.path if min_length <= len(word) <= max_length]
    filtered = [word for word in wordlist.path if word not in usable]
    return WordListStats(
        path_count=len(wordlist.path),
        bonus_count=len(wordlist.bonus),
        usable_path_count=len(usable),
        filtered_path_words=filtered,
        length_distribution=dict(sorted(Counter(len(word) for word in wordlist.path).items())),
        start_letters=dict(sorted(Counter(word[0] for word in usable).items())),
    )


__all__ = ["WordList", "WordListStats", "clean_word", "load_wordlists", "parse_wordlists", "wordlist_stats"]
