import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from .config import JOURNEY_START_DATE
from .journey import build_journey_map, get_journey_activities
from .utils import parse_datetime


def _setup_logging(verbose: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="journey_map",
        description="Fetch Strava activities and write the journey map as JSON.",
    )
    parser.add_argument(
        "--start-date",
        default=JOURNEY_START_DATE,
        help="ISO-8601 start of the journey (default: %(default)s)",
    )
    parser.add_argument(
        "--activity-type",
        action="append",
        dest="activity_types",
        metavar="TYPE",
        help="Only include this activity type (repeatable)",
    )
    parser.add_argument("--output", help="Write JSON here instead of stdout")
    parser.add_argument("--indent", type=int, default=2)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        parse_datetime(args.start_date)
    except ValueError as exc:
        parser.error(f"invalid --start-date {args.start_date!r}: {exc}")
    _setup_logging(args.verbose)

    journey = get_journey_activities(
        args.start_date, activity_types=args.activity_types
    )
    journey_map = build_journey_map(journey)
    logging.info(
        "Journey map built from %s data: features=%s activities=%s bounds=%s",
        journey_map.source,
        len(journey_map.features),
        journey_map.stats.activity_count,
        journey_map.bounds.as_list() if journey_map.bounds else None,
    )

    payload = json.dumps(journey_map.to_dict(), indent=args.indent)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as handle:
            handle.write(payload)
        logging.info("Journey map saved to %s", args.output)
    else:
        sys.stdout.write(payload + "\n")
    return 0
