#!/usr/bin/env python3
"""Run a simulated fractional-ownership marketplace and export its event log.

Examples
--------
Simulate with defaults and print the summary::

    python scripts/simulate_marketplace.py

Write events to JSON Lines files and Kafka::

    EVENT_SINKS=json,kafka python scripts/simulate_marketplace.py --operations 1000
"""

import argparse
import json
import sys
from pathlib import Path

from fractional_ledger.config import LedgerConfig
from fractional_ledger.exceptions import LedgerError
from fractional_ledger.logging import get_logger, setup_logging
from fractional_ledger.scenarios import MarketplaceScenario
from fractional_ledger.sinks import build_sinks

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Simulate fractional property trading")
    parser.add_argument("--properties", type=int, default=None, help="Properties to tokenize")
    parser.add_argument("--investors", type=int, default=None, help="Investors trading")
    parser.add_argument("--operations", type=int, default=None, help="Operations to attempt")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--sinks",
        type=str,
        default=None,
        help="Comma-separated event sinks: console, json, kafka (overrides EVENT_SINKS)",
    )
    parser.add_argument("--output-dir", type=str, default=None, help="Directory for the json sink")
    parser.add_argument("--log-level", type=str, default=None, help="Log level")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> LedgerConfig:
    """Merge environment configuration with command line overrides."""
    config = LedgerConfig.from_env()
    if args.properties is not None:
        config.scenario.num_properties = args.properties
    if args.investors is not None:
        config.scenario.num_investors = args.investors
    if args.operations is not None:
        config.scenario.num_operations = args.operations
    if args.seed is not None:
        config.seed = args.seed
    if args.sinks is not None:
        config.events.sinks = [s.strip() for s in args.sinks.split(",") if s.strip()]
    if args.output_dir is not None:
        config.output.event_output_dir = Path(args.output_dir)
    if args.log_level is not None:
        config.log_level = args.log_level
    config.validate()
    return config


def main(argv: list[str] | None = None) -> int:
    """Entry point."""
    args = parse_args(argv)
    try:
        config = build_config(args)
    except LedgerError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.log_level, config.log_format)

    scenario = MarketplaceScenario(
        num_properties=config.scenario.num_properties,
        num_investors=config.scenario.num_investors,
        num_operations=config.scenario.num_operations,
        deactivation_rate=config.scenario.deactivation_rate,
        seed=config.seed,
        administrator=config.administrator,
    )
    scenario.generate()

    sinks = build_sinks(config)
    if sinks:
        logger.info("Exporting events to: %s", ", ".join(config.events.sinks))
        scenario.export(sinks)
        for sink in sinks:
            sink.close()

    print(json.dumps(scenario.summary(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
