"""Command line entry point.

Usage:
    llhrr                         # defaults
    llhrr settings.txt            # values from a config file
    llhrr settings.txt --runs 500 --seed 7 -v
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from llhrr.config import RunConfig, load_config
from llhrr.learner import Learner
from llhrr.reporting import ResultsLogWriter, save_weights, write_final_report
from llhrr.types import InvalidConfigError

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llhrr",
        description="TD(lambda) value learning on a circular world of HRR-encoded locations",
    )
    parser.add_argument("config", nargs="?", default=None,
                        help="Config file (one header line, then worldSize vectorLength "
                             "alpha lambda epsilon discount numberOfRuns)")
    parser.add_argument("--runs", "-n", type=int, default=None,
                        help="Number of episodes (overrides the config file)")
    parser.add_argument("--max-steps", type=int, default=None,
                        help="Step cap per episode")
    parser.add_argument("--seed", "-s", type=int, default=None,
                        help="Random seed for a reproducible run")
    parser.add_argument("--results", default="results.log",
                        help="Per-step results log (default: results.log)")
    parser.add_argument("--final", default="final.log",
                        help="Final value report (default: final.log)")
    parser.add_argument("--weights", default=None,
                        help="Optional file for a flat dump of the learned weights")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Verbose output")
    return parser


def build_config(args: argparse.Namespace) -> RunConfig:
    """RunConfig from the config file (or defaults) and command line overrides."""
    config = load_config(args.config) if args.config else RunConfig()
    return config.with_overrides(
        number_of_runs=args.runs,
        max_steps=args.max_steps,
        seed=args.seed,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        config = build_config(args)
        learner = Learner(config)
    except (InvalidConfigError, FileNotFoundError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logger.info(f"Starting {config.number_of_runs} episodes on {learner.world}")

    with ResultsLogWriter(args.results) as writer:
        learner.add_listener(writer)
        learner.run_episodes()
        learner.remove_listener(writer)

    stats = learner.statistics
    logger.info(
        f"Finished: {stats.episodes} episodes, {stats.goals_reached} reached the goal, "
        f"average {stats.average_steps:.2f} steps "
        f"(min {stats.min_steps}, max {stats.max_steps})"
    )

    write_final_report(
        args.final,
        learner.report_values(),
        statistics=stats,
        goal_location=learner.world.goal_location,
    )
    if args.weights:
        save_weights(args.weights, learner.weights)

    return 0


if __name__ == "__main__":
    sys.exit(main())
