"""Command line interface: generate, audit and inspect word path puzzles."""

from __future__ import annotations

import argparse
import datetime
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from .core.constants import CHAIN_MAX_ATTEMPTS, CONSTRUCTION_MAX_ATTEMPTS, DEFAULT_GRID_SIZE, SelectionModel
from .core.exceptions import PuzzleSchemaError, WordListError, WordPathError
from .data.wordlists import load_wordlists, wordlist_stats
from .engine.auditor import audit
from .engine.batch import generate_batch
from .engine.chain import ChainConfig
from .engine.constructor import ConstructorConfig, PuzzleConstructor
from .engine.content_qa import evaluate_puzzle
from .engine.validator import load_puzzle
from .utils.logger import configure_logging, get_logger
from .utils.pretty import format_audit_report, format_puzzle, print_wordlist_stats


LOGGER = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate and audit word path puzzles")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Build puzzles from a topic word list")
    generate.add_argument("--wordlists", required=True, help="Word list JSON file or http(s) URL")
    generate.add_argument("--topic", action="append", required=True, help="Topic id (repeatable)")
    generate.add_argument(
        "--date",
        action="append",
        help="Puzzle date, used in the puzzle id (repeatable, default today)",
    )
    generate.add_argument("--width", type=int, default=DEFAULT_GRID_SIZE, help="Grid width in cells")
    generate.add_argument("--height", type=int, default=DEFAULT_GRID_SIZE, help="Grid height in cells")
    generate.add_argument(
        "--selection-model",
        type=str,
        choices=[model.value for model in SelectionModel],
        default=SelectionModel.RAY_8DIR.value,
        help="How players select words; decides the placement geometry",
    )
    generate.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    generate.add_argument(
        "--max-attempts",
        type=int,
        default=CONSTRUCTION_MAX_ATTEMPTS,
        help="Construction attempts per puzzle",
    )
    generate.add_argument(
        "--chain-attempts",
        type=int,
        default=CHAIN_MAX_ATTEMPTS,
        help="Chain selection attempts per construction attempt",
    )
    generate.add_argument("--output", type=Path, help="Optional path to JSON output")
    generate.add_argument("--show", action="store_true", help="Print each grid to stderr")

    audit_cmd = subparsers.add_parser("audit", help="Audit puzzle JSON files")
    audit_cmd.add_argument("files", nargs="+", type=Path, help="Puzzle JSON files")
    audit_cmd.add_argument("--qa", action="store_true", help="Also run the EASY_DAILY_V1 content checks")
    audit_cmd.add_argument("--json", action="store_true", help="Print machine readable results")

    stats = subparsers.add_parser("stats", help="Summarize topic word lists")
    stats.add_argument("--wordlists", required=True, help="Word list JSON file or http(s) URL")
    stats.add_argument("--topic", action="append", help="Topic id (repeatable, default all)")
    return parser


def _run_generate(args: argparse.Namespace) -> int:
    wordlists = load_wordlists(args.wordlists)
    unknown = [topic for topic in args.topic if topic not in wordlists]
    if unknown:
        raise WordListError(f"Unknown topics: {', '.join(unknown)}")

    config = ConstructorConfig(
        width=args.width,
        height=args.height,
        selection_model=SelectionModel(args.selection_model),
        seed=args.seed,
        max_attempts=args.max_attempts,
        chain=ChainConfig(max_attempts=args.chain_attempts),
    )
    dates = args.date or [datetime.date.today().isoformat()]
    batch = generate_batch(PuzzleConstructor(config), wordlists, args.topic, dates)

    if args.show:
        for puzzle in batch.puzzles:
            print(format_puzzle(puzzle), file=sys.stderr)

    documents = [puzzle.to_dict() for puzzle in batch.puzzles]
    payload: Any = documents[0] if len(documents) == 1 and not batch.failures else documents
    output_text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text)
    return 1 if batch.failures else 0


def _read_documents(path: Path) -> List[Any]:
    if not path.exists():
        raise PuzzleSchemaError(f"Puzzle file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            document = json.load(handle)
    except json.JSONDecodeError as exc:
        raise PuzzleSchemaError(f"Puzzle file {path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise PuzzleSchemaError(f"Puzzle file {path} could not be read: {exc}") from exc
    return document if isinstance(document, list) else [document]


def _run_audit(args: argparse.Namespace) -> int:
    failed = False
    reports = []
    for path in args.files:
        try:
            documents = _read_documents(path)
        except PuzzleSchemaError as exc:
            LOGGER.error("%s", exc)
            failed = True
            if args.json:
                reports.append({"file": str(path), "valid": False, "readError": str(exc)})
            continue
        for index, document in enumerate(documents):
            label = f"{path}[{index}]" if index else str(path)
            result = audit(document)
            qa_issues = []
            if args.qa and result.valid:
                qa_issues = evaluate_puzzle(load_puzzle(document))
            failed = failed or not result.valid or bool(qa_issues)
            if args.json:
                report = result.to_dict()
                report["file"] = label
                report["qa"] = [
                    {"code": issue.code.value, "path": issue.path, "message": issue.message}
                    for issue in qa_issues
                ]
                reports.append(report)
            else:
                print(format_audit_report(label, result, qa_issues))
    if args.json:
        print(json.dumps(reports, indent=2))
    return 1 if failed else 0


def _run_stats(args: argparse.Namespace) -> int:
    wordlists = load_wordlists(args.wordlists)
    for topic in args.topic or sorted(wordlists):
        if topic not in wordlists:
            raise WordListError(f"Unknown topic {topic!r}")
        print_wordlist_stats(topic, wordlist_stats(wordlists[topic]))
    return 0


COMMANDS = {
    "generate": _run_generate,
    "audit": _run_audit,
    "stats": _run_stats,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.INFO)
    configure_logging(level)

    try:
        return COMMANDS[args.command](args)
    except WordPathError as exc:
        LOGGER.error("%s", exc)
        return 2


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
