#!/usr/bin/env python3
# run_monitor.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Command-line interface for LTL/MTL monitoring with configurable logging levels

import sys
import argparse
from pathlib import Path
from typing import List, Optional

from core.monitor import StreamMonitor, VerdictUpdate
from core.verdict import Verdict
from model.trace import Trace
from parser import parse
from parser.ast_nodes import Formula
from parser.exceptions import ParseError
from utils.trace_reader import (
    read_trace,
    validate_trace_file,
    TraceFormatError,
    get_time_unit,
)
from utils.logger import configure_logging, get_logger, log_event_result


def read_property_file(filepath: Path) -> str:
    """Read a temporal property from file.

    Lines starting with '#' are comments; the remaining lines are joined
    into one formula.

    Args:
        filepath: Path to the property file

    Returns:
        Property formula as string

    Raises:
        FileNotFoundError: If property file doesn't exist
        ValueError: If property file is empty or invalid
    """
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            lines = [line.strip() for line in f if not line.lstrip().startswith("#")]

        content = " ".join(line for line in lines if line)
        if not content:
            raise ValueError("Property file is empty")

        return content

    except FileNotFoundError:
        raise FileNotFoundError(f"Property file not found: {filepath}")
    except UnicodeDecodeError as e:
        raise ValueError(f"Error reading property file: {e}")


def process_monitoring_session(
    monitor: StreamMonitor, trace_path: str, stop_on_verdict: bool
) -> int:
    """Execute the main monitoring session.

    Args:
        monitor: Initialized stream monitor in push mode
        trace_path: Path to trace file
        stop_on_verdict: Whether to stop reading when the verdict is resolved

    Returns:
        Number of events read from the trace
    """
    event_count = 0
    for event in read_trace(trace_path):
        event_count += 1
        update = monitor.process(event)

        if update is not None:
            log_event_result(str(event), str(update.verdict), update.reason)

        if stop_on_verdict and monitor.is_resolved:
            break

    return event_count


def report_final_verdict(update: Optional[VerdictUpdate], event_count: int) -> None:
    """Log the final verdict with its explanation.

    Args:
        update: Final update of the monitor
        event_count: Number of events read
    """
    logger = get_logger()
    logger.info(f"\n📊 Events processed: {event_count}")

    if update is None:
        logger.final_verdict(str(Verdict.PENDING))
        return

    logger.final_verdict(str(update.verdict))
    if update.verdict is Verdict.FALSE and update.reason:
        logger.info(f"❌ {update.result}")


def render_visualization(formula: Formula, trace_path: str, name: str, fmt: str) -> None:
    """Render the formula tree colored by its statuses on the whole trace."""
    from utils.formula_visualizer import visualize_formula

    trace = Trace(read_trace(trace_path))
    visualize_formula(formula, name, trace=trace, fmt=fmt)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser for command line interface.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Horae LTL/MTL Runtime Verification Monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_monitor.py -p property.ltl -t trace.csv
  python run_monitor.py -p property.ltl -t trace.csv -v
  python run_monitor.py -p property.ltl -t trace.csv --debug
  python run_monitor.py -p property.ltl -t trace.csv --validate-only
  python run_monitor.py -p property.ltl -t trace.csv --visualize login --format svg

Property file format:
  Create a file containing your formula, e.g.:

  property.ltl:
    G(request -> F[0, 2](response))
        """,
    )

    parser.add_argument(
        "-p", "--property", required=True, type=Path, help="Path to property file"
    )

    parser.add_argument(
        "-t", "--trace", required=True, type=Path, help="Path to CSV trace file"
    )

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )

    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output (overrides --verbose)"
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate the property and trace file format",
    )

    parser.add_argument(
        "--stop-on-verdict",
        action="store_true",
        help="Stop reading the trace once the verdict is resolved",
    )

    parser.add_argument(
        "--visualize",
        metavar="NAME",
        help="Render the formula tree with per-node statuses to formula_visualizations/NAME",
    )

    parser.add_argument(
        "--format", default="png", help="Output format for --visualize (default: png)"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the monitoring application.

    Args:
        argv: Command line arguments, defaults to sys.argv

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Initialize logging system
    configure_logging(verbose=args.verbose, debug=args.debug)
    logger = get_logger()

    try:
        # Load and parse property
        text = read_property_file(args.property)
        formula = parse(text)
        logger.info(f"📋 Property loaded: {formula}")

        # Validate trace file
        logger.info(f"🔍 Validating trace file: {args.trace} (time unit: {get_time_unit(str(args.trace))})")
        validate_trace_file(str(args.trace))

        if args.validate_only:
            logger.info("✅ Property and trace are well-formed. Exiting.")
            return 0

        # Begin monitoring session
        monitor = StreamMonitor(None, formula)
        logger.monitor_start(str(formula), str(Verdict.PENDING))
        event_count = process_monitoring_session(
            monitor, str(args.trace), args.stop_on_verdict
        )

        # Finalize and report results
        final = monitor.finalize()
        report_final_verdict(final, event_count)
        print(f"Verdict: {final.verdict if final else Verdict.PENDING}")

        if args.visualize:
            render_visualization(formula, str(args.trace), args.visualize, args.format)

        return 0

    except TraceFormatError as e:
        logger.error(f"Trace file error: {e}")
        return 1

    except ParseError as e:
        logger.error(f"Formula parsing error: {e}")
        return 2

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Property file error: {e}")
        return 3

    except KeyboardInterrupt:
        logger.error("Monitoring interrupted by user")
        return 4

    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        import traceback

        traceback.print_exc()
        return 5


if __name__ == "__main__":
    sys.exit(main())
