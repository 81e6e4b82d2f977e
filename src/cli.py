from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import structlog
from dotenv import load_dotenv
from pydantic import ValidationError

from models.scoring import RiskEngineeringData
from models.survey import Survey
from readiness.validator import (
    compute_readiness_progress,
    get_validation_summary,
    group_blockers_by_module,
    validate_eligibility,
)
from scoring.aggregator import build_score_breakdown
from severity.engine import derive_severity, list_rules
from severity.migration import migrate_actions, needs_migration
from severity.outcome import check_material_deficiency, derive_executive_outcome
from utils.error_handler import EngineError, exit_with_error

logger = logging.getLogger(__name__)

COMMANDS = ("severity", "migrate", "score", "readiness")


def _add_common_arguments(parser: argparse.ArgumentParser, input_help: str) -> None:
    parser.add_argument(
        "--input",
        dest="input_path",
        default="",
        help=input_help,
    )
    parser.add_argument(
        "--output",
        dest="output_path",
        default="",
        help="Optional output JSON file path. If not set, prints to stdout.",
    )
    parser.add_argument(
        "--dotenv",
        dest="dotenv_path",
        default=".env",
        help="Path to .env file to load (default: .env at repo root)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=os.getenv("EZIRISK_LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )


def _add_context_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--context",
        dest="context_path",
        default="",
        help="Optional JSON file with the building context (occupancy_risk, storeys).",
    )


def build_severity_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ezirisk severity",
        description="Derive severity tier and priority for findings",
    )
    _add_common_arguments(parser, 'JSON file: one finding, or {"findings": [...], "context": {...}}')
    _add_context_argument(parser)
    parser.add_argument(
        "--list-rules",
        action="store_true",
        help="Print the ordered severity rule table and exit.",
    )
    return parser


def build_migrate_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ezirisk migrate",
        description="Migrate legacy likelihood x impact actions to severity tiers",
    )
    _add_common_arguments(parser, 'JSON file: {"actions": [...], "context": {...}}')
    _add_context_argument(parser)
    return parser


def build_score_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ezirisk score",
        description="Build the weighted risk engineering score breakdown",
    )
    _add_common_arguments(parser, "JSON file with risk engineering data (industry_key, ratings, ...)")
    return parser


def build_readiness_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ezirisk readiness",
        description="Check whether a survey is ready to issue",
    )
    _add_common_arguments(parser, "JSON file with the survey document")
    return parser


def _read_input(input_path: str) -> Any:
    if not input_path:
        raise EngineError("INPUT", "No input file given", "Pass --input <path>.")
    input_p = Path(input_path)
    if not input_p.exists():
        raise EngineError("INPUT", f"Input file not found: {input_path}")
    try:
        return json.loads(input_p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise EngineError("INPUT", f"Input is not valid JSON: {input_path}", str(e)) from e


def _write_output(payload: Any, output_path: str) -> None:
    text = json.dumps(payload, indent=2, default=str)
    if not output_path:
        print(text)
        return
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(text, encoding="utf-8")
    logger.info("[output] wrote=%s", str(output_file))


def _context(data: Any, context_path: str) -> Any:
    if context_path:
        return _read_input(context_path)
    return data.get("context") if isinstance(data, dict) else None


def run_severity(
    input_path: str,
    output_path: str = "",
    context_path: str = "",
    show_rules: bool = False,
) -> int:
    if show_rules:
        _write_output({"rules": list_rules()}, output_path)
        return 0

    data = _read_input(input_path)
    context = _context(data, context_path)

    if isinstance(data, dict) and "findings" not in data:
        result = derive_severity(data, context)
        _write_output(result.model_dump(mode="json"), output_path)
        return 0

    findings = data["findings"] if isinstance(data, dict) else data
    results = [derive_severity(f, context) for f in findings]
    logger.info("[run] findings=%s", len(results))

    _write_output({"results": [r.model_dump(mode="json") for r in results]}, output_path)
    return 0


def run_migrate(input_path: str, output_path: str = "", context_path: str = "") -> int:
    data = _read_input(input_path)
    context = _context(data, context_path)
    rows = data.get("actions", []) if isinstance(data, dict) else data
    actions = migrate_actions(rows, context)

    payload = {
        "actions": actions,
        "pending": sum(1 for a in actions if needs_migration(a)),
        "executive_outcome": derive_executive_outcome(actions).value,
        "material_deficiency": check_material_deficiency(actions, context).model_dump(mode="json"),
    }
    _write_output(payload, output_path)
    return 0


def run_score(input_path: str, output_path: str = "") -> int:
    data = RiskEngineeringData.model_validate(_read_input(input_path))
    breakdown = build_score_breakdown(data)
    _write_output(breakdown.model_dump(mode="json"), output_path)
    return 0


def run_readiness(input_path: str, output_path: str = "") -> int:
    survey = Survey.model_validate(_read_input(input_path))
    result = validate_eligibility(
        survey.survey_types,
        survey.issue_context,
        survey.answers,
        survey.module_progress,
        survey.actions,
    )
    progress = compute_readiness_progress(survey.survey_types, survey.issue_context, survey.module_progress)

    payload = {
        "eligible": result.eligible,
        "summary": get_validation_summary(result),
        "progress": progress.label,
        "blockers": [b.to_json() for b in result.blockers],
        "groups": {
            key: [b.to_json() for b in blockers]
            for key, blockers in group_blockers_by_module(result.blockers).items()
        },
    }
    _write_output(payload, output_path)
    return 0 if result.eligible else 2


def _dispatch(command: str, args: argparse.Namespace) -> int:
    runners: dict[str, Callable[[], int]] = {
        "severity": lambda: run_severity(args.input_path, args.output_path, args.context_path, args.list_rules),
        "migrate": lambda: run_migrate(args.input_path, args.output_path, args.context_path),
        "score": lambda: run_score(args.input_path, args.output_path),
        "readiness": lambda: run_readiness(args.input_path, args.output_path),
    }
    try:
        return runners[command]()
    except EngineError as e:
        return exit_with_error(e, context=command)
    except ValidationError as e:
        return exit_with_error(
            EngineError("INVALID_INPUT", "Input does not match the expected shape", str(e)),
            context=command,
            exc=e,
        )


def main(argv: Optional[list[str]] = None) -> int:
    argv_list = list(argv) if argv is not None else sys.argv[1:]

    parsers = {
        "severity": build_severity_parser,
        "migrate": build_migrate_parser,
        "score": build_score_parser,
        "readiness": build_readiness_parser,
    }

    if not argv_list or argv_list[0] not in parsers:
        print(f"usage: ezirisk {{{','.join(COMMANDS)}}} [options]", file=sys.stderr)
        return 2

    command = argv_list[0]
    args = parsers[command]().parse_args(argv_list[1:])

    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO))
    # Engine events go through stdlib logging (stderr) so stdout stays JSON
    structlog.configure(
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
    )
    load_dotenv(args.dotenv_path)

    return _dispatch(command, args)


if __name__ == "__main__":
    raise SystemExit(main())
