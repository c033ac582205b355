#!/usr/bin/env python3
"""Generate a sample microloan portfolio.

Writes collectors, debtors, loans, payments, consolidated snapshots and a
penalty report as JSON files, and prints the portfolio statistics.
"""

import argparse
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from microloan.config import MicroloanConfig, ScenarioConfig
from microloan.exceptions import MicroloanError
from microloan.logging import get_logger, setup_logging
from microloan.scenarios import LoanPortfolioScenario
from microloan.sinks import ConsoleSink, JsonFileSink

logger = get_logger("microloan.scripts.generate_sample_data")


def print_summary(summary: dict, output_dir: Path) -> None:
    """Print portfolio statistics."""
    print("\n" + "=" * 60)
    print("Portfolio Summary")
    print("=" * 60)
    for name, value in summary.items():
        if isinstance(value, int) and "loans" not in name and name != "collection_efficiency":
            print(f"{name + ':':28}${value:,}")
        else:
            print(f"{name + ':':28}{value}")
    print(f"\nAll files saved to: {output_dir}")
    print("=" * 60)


def main() -> int:
    """Main entry point."""
    config = MicroloanConfig.from_env()

    parser = argparse.ArgumentParser(description="Generate a sample microloan portfolio")
    parser.add_argument(
        "--debtors",
        type=int,
        default=50,
        help="Number of debtors, one loan each (default: 50)",
    )
    parser.add_argument(
        "--collectors",
        type=int,
        default=5,
        help="Number of collectors (default: 5)",
    )
    parser.add_argument(
        "--weekly-rate",
        type=float,
        default=0.30,
        help="Share of weekly loans (default: 0.30)",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Observation date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed if config.seed is not None else 42,
        help="Random seed (default: 42)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=config.output.json_output_dir,
        help="Directory for JSON files (default: output)",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Also print the first records of each entity",
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["standard", "json"],
        default="standard",
        help="Log format (default: standard)",
    )
    args = parser.parse_args()

    setup_logging(level=args.log_level, format_type=args.log_format)

    scenario_config = ScenarioConfig(
        name="sample_portfolio",
        num_debtors=args.debtors,
        num_collectors=args.collectors,
        weekly_loan_rate=args.weekly_rate,
        reference_date=args.date,
    )

    try:
        scenario = LoanPortfolioScenario(seed=args.seed, config=scenario_config, terms=config.terms)
        scenario.generate()

        sinks = [JsonFileSink(args.output_dir, pretty=config.output.pretty_json)]
        if args.console:
            sinks.append(ConsoleSink(max_records=3))
        scenario.export(sinks)
        for sink in sinks:
            sink.close()
    except MicroloanError as e:
        logger.error("Sample data generation failed: %s", e)
        return 1

    print_summary(scenario.get_portfolio_summary(), args.output_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
