"""Main entry point for the ecosystem simulation.

This module provides command-line options to run the simulation:
- Web mode (default): FastAPI backend for the web client
- Headless mode: one simulation run, summary logged, optional JSON export
- Analyses: equilibrium prediction and phase-space sampling
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import orjson

from backend.logging_config import configure_logging

SEPARATOR_WIDTH = 60

logger = logging.getLogger(__name__)


def run_web_server():
    """Run the web server for the web client."""
    import uvicorn

    from backend.main import app
    from ecosim.config.server import DEFAULT_API_PORT

    port = int(os.getenv("ECOSIM_API_PORT", str(DEFAULT_API_PORT)))

    logger.info("=" * SEPARATOR_WIDTH)
    logger.info("ECOSYSTEM SIMULATION - WEB SERVER")
    logger.info("=" * SEPARATOR_WIDTH)
    logger.info("API available at http://localhost:%d/api", port)
    logger.info("Live updates at ws://localhost:%d/api/live", port)
    logger.info("API docs available at http://localhost:%d/docs", port)
    logger.info("Press Ctrl+C to stop the server")
    logger.info("=" * SEPARATOR_WIDTH)

    uvicorn.run(app, host="0.0.0.0", port=port)


def load_parameters(preset=None, params_file=None):
    """Resolve the parameter set from a preset name or a JSON file.

    Defaults to the first preset when neither is given.
    """
    from ecosim.presets import PRESETS, get_preset

    if params_file:
        return orjson.loads(Path(params_file).read_bytes())
    if preset:
        return get_preset(preset)["parameters"]
    return PRESETS[0]["parameters"]


def run_headless(parameters, export_file=None):
    """Run one simulation to completion and log its summary.

    Args:
        parameters: Nested camelCase parameter mapping
        export_file: Optional filename to export the full result as JSON
    """
    from ecosim.simulator import EcosystemSimulator

    result = EcosystemSimulator(parameters).run()
    summary = result.summary

    logger.info("=" * SEPARATOR_WIDTH)
    logger.info("SIMULATION SUMMARY")
    logger.info("=" * SEPARATOR_WIDTH)
    logger.info("Duration:            %.2f", summary.duration)
    logger.info("Records:             %d", len(result.time_steps))
    logger.info("Prey (min/max/end):  %.1f / %.1f / %.1f",
                summary.min_prey, summary.max_prey, summary.final_prey)
    logger.info("Predator (min/max/end): %.1f / %.1f / %.1f",
                summary.min_predator, summary.max_predator, summary.final_predator)
    logger.info("Average resource:    %.3f", summary.average_resource_level)
    logger.info("Extinction:          %s", result.extinction_occurred)
    if result.equilibrium_point is not None:
        point = result.equilibrium_point
        logger.info(
            "Equilibrium:         prey=%.1f predator=%.1f at t=%.2f",
            point.prey, point.predator, point.time_reached,
        )
    else:
        logger.info("Equilibrium:         not reached")

    if export_file:
        Path(export_file).write_bytes(
            orjson.dumps(result.to_dict(), option=orjson.OPT_INDENT_2)
        )
        logger.info("Results exported to: %s", export_file)

    return result


def run_predict(parameters):
    """Log the analytic equilibrium estimate."""
    from ecosim.analysis import predict_equilibrium

    prediction = predict_equilibrium(parameters)
    logger.info(
        "Predicted equilibrium: prey=%.2f predator=%.2f stable=%s",
        prediction.prey, prediction.predator, prediction.is_stable,
    )
    return prediction


def run_phase_space(parameters, resolution):
    """Print the sampled derivative field as JSON lines."""
    from ecosim.analysis import sample_phase_space

    vectors = sample_phase_space(parameters, resolution)
    for vector in vectors:
        sys.stdout.write(orjson.dumps(vector.to_dict()).decode("utf-8") + "\n")
    logger.info("Sampled %d phase-space points", len(vectors))
    return vectors


def main(argv=None):
    """Parse command-line arguments and run the appropriate mode."""
    parser = argparse.ArgumentParser(
        description="Predator-Prey Ecosystem Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run web server (default)
  python main.py

  # Run one preset headless
  python main.py --headless --preset "Predator Dominant"

  # Run custom parameters and export the result
  python main.py --headless --params params.json --export results.json

  # Analytic equilibrium estimate and a 10x10 phase-space sample
  python main.py --predict --phase-space 10 --preset "Resource Scarcity"
        """,
    )

    parser.add_argument(
        "--headless", action="store_true", help="Run one simulation without the web server"
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--preset", type=str, default=None, help="Preset name (default: Balanced Ecosystem)"
    )
    source.add_argument(
        "--params",
        type=str,
        default=None,
        metavar="FILENAME",
        help="JSON file with prey, predator and environment parameters",
    )

    parser.add_argument(
        "--export",
        type=str,
        default=None,
        metavar="FILENAME",
        help="Export the headless result to a JSON file",
    )

    parser.add_argument(
        "--predict", action="store_true", help="Print the analytic equilibrium estimate"
    )

    parser.add_argument(
        "--phase-space",
        type=int,
        default=None,
        metavar="N",
        help="Print the derivative field sampled on an N x N grid",
    )

    parser.add_argument(
        "--log-level", type=str, default=None, help="Log level (default: ECOSIM_LOG_LEVEL or INFO)"
    )

    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, include_uvicorn=False, extra_loggers=(__name__,))

    if not (args.headless or args.predict or args.phase_space is not None):
        run_web_server()
        return 0

    from ecosim.exceptions import EcosimError

    try:
        parameters = load_parameters(args.preset, args.params)
        if args.predict:
            run_predict(parameters)
        if args.phase_space is not None:
            run_phase_space(parameters, args.phase_space)
        if args.headless:
            logger.info("Starting headless simulation...")
            run_headless(parameters, export_file=args.export)
    except (EcosimError, KeyError, OSError, orjson.JSONDecodeError) as e:
        logger.error("Error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
