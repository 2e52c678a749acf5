from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from formfill.app import extract_form_fields, fill_form, load_document
from formfill.config import ConfigurationError, configure_logging
from formfill.domain.assembly import format_summary
from formfill.domain.errors import ExtractionFailedError, ValidationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from formfill.app import FillFormResult

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fill a blank form from reference documents")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level name (defaults to FORMFILL_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fill = subparsers.add_parser("fill", help="Extract, reconcile and assemble form answers")
    fill.add_argument("--form", type=Path, required=True, help="Blank form document")
    fill.add_argument(
        "--reference",
        type=Path,
        action="append",
        default=[],
        required=True,
        help="Reference document to draw facts from (repeatable)",
    )
    fill.add_argument(
        "--select",
        type=str,
        action="append",
        default=[],
        metavar="FIELD_ID=ANSWER",
        help="Choose one of the proposed candidates for a field (repeatable)",
    )
    fill.add_argument(
        "--answer",
        type=str,
        action="append",
        default=[],
        metavar="FIELD_ID=TEXT",
        help="Enter a manual answer for a field (repeatable)",
    )
    fill.add_argument(
        "--output",
        type=Path,
        help="Write assembled answers as JSON to this path instead of stdout",
    )

    fields = subparsers.add_parser("fields", help="List the fields extracted from a blank form")
    fields.add_argument("--form", type=Path, required=True, help="Blank form document")

    return parser.parse_args(list(argv))


def _parse_assignments(values: Sequence[str], *, option: str) -> dict[str, str]:
    assignments: dict[str, str] = {}
    for value in values:
        field_id, separator, text = value.partition("=")
        if not separator or not field_id.strip():
            raise ValueError(f"Invalid {option} value {value!r}; expected FIELD_ID=TEXT")
        assignments[field_id.strip()] = text
    return assignments


def _require_file(path: Path) -> Path:
    if not path.is_file():
        raise ValueError(f"No such file: {path}")
    return path


def _log_review(result: FillFormResult) -> None:
    for item in result.review:
        candidates = " | ".join(item.candidates) if item.candidates else "-"
        log.info(
            "[%s] %s (%s) answer=%r candidates=%s",
            item.id,
            item.text,
            item.status,
            item.selected_answer,
            candidates,
        )


def _write_answers(result: FillFormResult, output: Path | None) -> None:
    answers = result.answers or ()
    document = [
        {"id": item.field.id, "text": item.field.text, "answer": item.answer} for item in answers
    ]
    rendered = json.dumps(document, indent=2, ensure_ascii=False)
    if output is None:
        print(rendered)  # noqa: T201
    else:
        output.write_text(rendered + "\n", encoding="utf-8")
        log.info("Wrote %s answers to %s", len(document), output)


def _run_fill(args: argparse.Namespace) -> int:
    selections = _parse_assignments(args.select, option="--select")
    answers = _parse_assignments(args.answer, option="--answer")
    form = load_document(_require_file(args.form))
    references = [load_document(_require_file(path)) for path in args.reference]

    result = fill_form(form=form, references=references, selections=selections, answers=answers)
    _log_review(result)
    if not result.complete:
        log.error("Unresolved fields: %s", ", ".join(result.missing))
        return EXIT_FAILURE
    log.info("Summary:\n%s", format_summary(result.answers or ()))
    _write_answers(result, args.output)
    return EXIT_OK


def _run_fields(args: argparse.Namespace) -> int:
    fields = extract_form_fields(load_document(_require_file(args.form)))
    for item in fields:
        print(f"{item.id}\t{item.type or '-'}\t{item.text}")  # noqa: T201
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    try:
        configure_logging(level=parsed_args.log_level)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(EXIT_USAGE)

    try:
        if parsed_args.command == "fill":
            code = _run_fill(parsed_args)
        elif parsed_args.command == "fields":
            code = _run_fields(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ValueError, ValidationError, ConfigurationError) as exc:
        log.error("Error: %s", exc)  # noqa: TRY400
        sys.exit(EXIT_USAGE)
    except ExtractionFailedError as exc:
        log.error("Error: %s", exc)  # noqa: TRY400
        sys.exit(EXIT_FAILURE)
    except Exception:
        log.exception("Fatal error while filling form")
        sys.exit(EXIT_FAILURE)

    if code != EXIT_OK:
        sys.exit(code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
