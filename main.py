#!/usr/bin/env python3
"""
FedSpace scoring CLI.

Commands:
    sweep                               delete expired score cache entries
    score --lat LAT --lng LNG [--radius R]
                                        print a neighborhood score as JSON
    match --property-id P --opportunity-id O
                                        print a property match score as JSON

``sweep`` is what the hourly cleanup job runs.
"""

import argparse
import json
import logging
import sys

from core.app_context import AppContext
from core.config_loader import load_config
from core.errors import ScoringError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def cmd_sweep(context: AppContext, args: argparse.Namespace) -> int:
    deleted = context.scoring_service.sweep_cache()
    logger.info(f"Cache sweep removed {deleted} expired entries")
    print(json.dumps({"deleted": deleted}))
    return 0


def cmd_score(context: AppContext, args: argparse.Namespace) -> int:
    response = context.scoring_service.neighborhood_score(args.lat, args.lng, args.radius)
    print(json.dumps({"cached": response.cached, "data": response.data}, indent=2))
    return 0


def cmd_match(context: AppContext, args: argparse.Namespace) -> int:
    response = context.scoring_service.match_score(args.property_id, args.opportunity_id)
    print(json.dumps({"cached": response.cached, "data": response.data}, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="FedSpace scoring CLI")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    subparsers = parser.add_subparsers(dest='command', required=True)

    sweep = subparsers.add_parser('sweep', help='Delete expired score cache entries')
    sweep.set_defaults(func=cmd_sweep)

    score = subparsers.add_parser('score', help='Neighborhood score for a location')
    score.add_argument('--lat', type=float, required=True, help='Latitude in degrees')
    score.add_argument('--lng', type=float, required=True, help='Longitude in degrees')
    score.add_argument('--radius', type=float, default=None, help='Search radius in miles (default 5)')
    score.set_defaults(func=cmd_score)

    match = subparsers.add_parser('match', help='Match score for a listing and opportunity')
    match.add_argument('--property-id', type=str, required=True)
    match.add_argument('--opportunity-id', type=str, required=True)
    match.set_defaults(func=cmd_match)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    context = AppContext.build(config)

    try:
        return args.func(context, args)
    except ScoringError as e:
        logger.error(f"{e.error_type}: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
