# Command line entry point for the production scheduler.
# Version: 1.0.0
# Schedules a JSON/YAML request file and prints the result.

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

import yaml

from . import __version__
from .config import load_config, configure_logging, save_config_to_yaml
from .constants import INFEASIBLE_CATEGORIES, BUDGET_CATEGORIES
from .errors import SchedulingError, FileLoadError
from .output_generator import (
    export_to_json,
    generate_text_gantt,
    generate_schedule_summary,
    generate_schedule_excel,
)
from .scheduler import schedule_payload
from .solution import ScheduleResult
from .schemas import parse_request
from .time_utils import to_minute_offset

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INFEASIBLE = 1
EXIT_INVALID_INPUT = 2
EXIT_INTERNAL_ERROR = 3


def load_request_file(path: str | Path) -> dict:
    """Read a request from a ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        FileLoadError: If the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        with open(path, 'r') as f:
            if path.suffix == '.json':
                return json.load(f)
            return yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise FileLoadError(str(path), e)


def exit_code_for(result: ScheduleResult) -> int:
    """Process exit status for a scheduling result."""
    if result.success:
        return EXIT_OK
    if result.error == "invalid_input":
        return EXIT_INVALID_INPUT
    if result.error in INFEASIBLE_CATEGORIES or result.error in BUDGET_CATEGORIES:
        return EXIT_INFEASIBLE
    # validation_failed: the engine produced an inconsistent schedule
    return EXIT_INTERNAL_ERROR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="production-scheduler",
        description="Assign route operations to resources, minimizing total tardiness.",
    )
    parser.add_argument("input", help="Request file (.json, .yaml or .yml)")
    parser.add_argument("--config", help="Engine config YAML (default: $SCHEDULER_CONFIG)")
    parser.add_argument("--gantt", action="store_true", help="Print a text Gantt chart and summary")
    parser.add_argument("--excel", metavar="PATH", help="Also write the schedule to an Excel file")
    parser.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    parser.add_argument("--log-level", help="Override the configured log level")
    parser.add_argument(
        "--save-config", metavar="PATH",
        help="Write the effective engine config (after overrides) to a YAML file"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        if args.log_level:
            config = replace(config, log_level=args.log_level.upper())
        configure_logging(config.log_level)
        if args.save_config:
            save_config_to_yaml(config, args.save_config)
            logger.info("Wrote engine config to %s", args.save_config)
        payload = load_request_file(args.input)
    except SchedulingError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    result = schedule_payload(payload, config=config)
    print(export_to_json(result, pretty=args.pretty))

    if not result.success:
        if args.gantt:
            print(generate_schedule_summary(result), file=sys.stderr)
        return exit_code_for(result)

    if args.gantt:
        request = parse_request(payload)
        horizon_length = to_minute_offset(request.horizon.end, request.horizon.start)
        resource_ids = [r.id for r in request.resources]
        print(generate_text_gantt(result, horizon_length, resource_ids), file=sys.stderr)
        print(generate_schedule_summary(result), file=sys.stderr)

    if args.excel:
        path = generate_schedule_excel(result, args.excel)
        logger.info("Wrote schedule workbook to %s", path)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
