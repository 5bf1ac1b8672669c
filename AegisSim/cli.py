# AegisSim command line entry point
# Runs one batch simulation and prints its variability metrics.

import argparse
import logging
import sys
from typing import List, Optional

from .core.simulation_engine import DEFAULT_STEP_DELAY_SECONDS
from .data_generation.patient_catalog import (
    ChallengeScenario, DEFAULT_MEAL_PLANS, DEFAULT_PATIENT_ARCHETYPES
)
from .core.data_types import SimulationReport
from .exceptions import ConfigurationError
from .sdk.batch_simulation import BatchSimulationRunner
from .utils.config import ConfigManager

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aegissim-batch",
        description="Run a synthetic batch glucose simulation and report variability metrics",
    )
    parser.add_argument("--config", type=str, default=None,
                        help="Path to a YAML/JSON config file (simulation.* and catalog.* sections)")
    parser.add_argument("--patient", type=str, default=None,
                        help=f"Patient archetype key (built-in: {', '.join(DEFAULT_PATIENT_ARCHETYPES)})")
    parser.add_argument("--duration", type=str, default=None,
                        help="Simulated duration in whole hours")
    parser.add_argument("--meals", type=str, default=None,
                        help=f"Meal plan key (built-in: {', '.join(DEFAULT_MEAL_PLANS)})")
    parser.add_argument("--challenge", type=str, default=None,
                        help=f"Challenge scenario ({', '.join(s.value for s in ChallengeScenario)})")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the noise generator")
    parser.add_argument("--step-delay", type=float, default=None,
                        help=f"Seconds to yield between steps (default {DEFAULT_STEP_DELAY_SECONDS})")
    parser.add_argument("--csv", type=str, default=None,
                        help="Write the trajectory to this CSV file")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity")
    return parser


def format_report(report: SimulationReport) -> str:
    m = report.metrics
    rows = [
        ("Time in range (70-180)", f"{m.time_in_range_pct:.1f}%"),
        ("Time below range (<70)", f"{m.time_below_range_pct:.1f}%"),
        ("Severe hypoglycemia (<54)", f"{m.severe_hypo_pct:.1f}%"),
        ("Time above range (>180)", f"{m.time_above_range_pct:.1f}%"),
        ("Mean glucose", f"{m.mean_glucose:.1f} mg/dL"),
        ("Coefficient of variation", f"{m.coefficient_of_variation_pct:.1f}%"),
        ("Hypo violations", str(report.hypo_violations)),
        ("Meal decisions", str(report.meal_decisions)),
        ("Samples", str(m.sample_count)),
    ]
    width = max(len(label) for label, _ in rows)
    return "\n".join(f"{label.ljust(width)}  {value}" for label, value in rows)


def main(argv: Optional[List[str]] = None) -> int:
    """Run a batch simulation from the command line."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        config_manager = ConfigManager(args.config)
        # Command-line values take precedence over the config file.
        simulation_section = dict(config_manager.get_section("simulation"))
        overrides = {
            "patient": args.patient,
            "duration_hours": args.duration,
            "meal_plan": args.meals,
            "challenge": args.challenge,
            "seed": args.seed,
            "step_delay_seconds": args.step_delay,
        }
        simulation_section.update({k: v for k, v in overrides.items() if v is not None})
        config_manager.config_data["simulation"] = simulation_section

        runner = BatchSimulationRunner(config_manager)
        selections = runner.selections_from_config()
        report = runner.run_sync(**selections)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(format_report(report))
    if args.csv:
        report.result.to_dataframe().to_csv(args.csv, index=False)
        print(f"Trajectory written to {args.csv}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
