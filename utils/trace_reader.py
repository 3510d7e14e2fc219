# utils/trace_reader.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# CSV trace file reader for timestamped proposition sequences

import csv
from pathlib import Path
from typing import FrozenSet, Iterator

from model.trace import Trace, TraceEvent
from utils.logger import get_logger

TIME_UNIT_DIRECTIVE = "# time_unit:"

# Seconds per unit accepted by the time_unit directive
TIME_UNITS = {"s": 1.0, "ms": 1e-3, "us": 1e-6}


class TraceFormatError(Exception):
    """Exception raised when trace files contain invalid format or data."""

    pass


def read_trace(filepath: str) -> Iterator[TraceEvent]:
    """Read timestamped states from a CSV trace file.

    Each row holds a timestamp and the set of propositions true in that
    state. Timestamps are given in the unit named by the optional first-line
    directive (seconds by default) and must not decrease.

    Expected CSV format:
        # time_unit: ms
        timestamp,props
        0,idle
        150,request|busy
        900,response

    Args:
        filepath: Path to the CSV trace file

    Yields:
        TraceEvent: Events whose value is the frozenset of propositions,
        with timestamps converted to seconds

    Raises:
        TraceFormatError: If file format is invalid or rows cannot be parsed
    """
    logger = get_logger()
    path = Path(filepath)

    if not path.exists():
        raise TraceFormatError(f"Trace file not found: {filepath}")

    logger.debug(f"Reading trace file: {filepath}")
    scale = TIME_UNITS[get_time_unit(filepath)]

    try:
        with open(path, "r", newline="", encoding="utf-8") as file:
            # Handle optional time unit directive
            first_line = file.readline().strip()
            if not first_line.startswith(TIME_UNIT_DIRECTIVE):
                file.seek(0)

            reader = csv.DictReader(file)

            # Validate required headers
            required_headers = {"timestamp", "props"}
            if not required_headers.issubset(set(reader.fieldnames or [])):
                missing = required_headers - set(reader.fieldnames or [])
                raise TraceFormatError(f"Missing required headers: {missing}")

            previous = None
            for row_num, row in enumerate(reader, start=2):
                try:
                    event = _parse_event_row(row, scale)
                except (TraceFormatError, ValueError, TypeError) as e:
                    raise TraceFormatError(f"Error parsing row {row_num}: {e}") from e

                if previous is not None and event.timestamp < previous:
                    raise TraceFormatError(
                        f"Timestamp decreases at row {row_num}: {event.timestamp:g}s after {previous:g}s"
                    )
                previous = event.timestamp

                logger.debug(f"Parsed event {event} from row {row_num}")
                yield event

    except TraceFormatError:
        raise
    except OSError as e:
        raise TraceFormatError(f"Cannot open trace file: {filepath}") from e
    except csv.Error as e:
        raise TraceFormatError(f"Error reading trace file: {e}") from e


def load_trace(filepath: str) -> Trace:
    """Read a whole trace file into a Trace."""
    return Trace(read_trace(filepath))


def get_time_unit(filepath: str) -> str:
    """Extract the time unit from the trace file directive.

    Args:
        filepath: Path to the trace file

    Returns:
        One of "s", "ms", "us"; "s" if no directive is found

    Raises:
        TraceFormatError: If the directive names an unknown unit
    """
    logger = get_logger()
    path = Path(filepath)

    if not path.exists():
        return "s"

    try:
        with open(path, "r", encoding="utf-8") as file:
            first_line = file.readline().strip()
    except OSError:
        logger.debug("Could not read time unit directive")
        return "s"

    if not first_line.startswith(TIME_UNIT_DIRECTIVE):
        return "s"

    unit = first_line[len(TIME_UNIT_DIRECTIVE) :].strip()
    if unit not in TIME_UNITS:
        raise TraceFormatError(f"Unknown time unit '{unit}', expected one of {sorted(TIME_UNITS)}")

    logger.debug(f"Found time unit directive: {unit}")
    return unit


def validate_trace_file(filepath: str) -> None:
    """Validate trace file format and structure.

    Performs complete validation by attempting to parse all events in the file.
    This ensures the file format is correct before actual monitoring begins.

    Args:
        filepath: Path to the trace file to validate

    Raises:
        TraceFormatError: If validation fails
    """
    logger = get_logger()
    logger.debug(f"Validating trace file: {filepath}")

    try:
        events = list(read_trace(filepath))
        logger.validation_result(True, f"Trace validation successful: {len(events)} events")
    except TraceFormatError as e:
        logger.validation_result(False, f"Trace validation failed: {e}")
        raise


def _parse_event_row(row: dict, scale: float = 1.0) -> TraceEvent:
    """Parse a single CSV row into a TraceEvent.

    Args:
        row: Dictionary containing CSV row data
        scale: Seconds per timestamp unit

    Returns:
        TraceEvent: Parsed event

    Raises:
        TraceFormatError: If row data is invalid
    """
    return TraceEvent(_parse_props(row["props"] or ""), _parse_timestamp(row["timestamp"], scale))


def _parse_timestamp(timestamp_str: str, scale: float = 1.0) -> float:
    """Parse a non-negative timestamp and convert it to seconds.

    Args:
        timestamp_str: String like '150' or '1.5'
        scale: Seconds per unit

    Returns:
        Timestamp in seconds

    Raises:
        TraceFormatError: If format is invalid
    """
    if timestamp_str is None or not timestamp_str.strip():
        raise TraceFormatError("Empty timestamp field")

    try:
        value = float(timestamp_str.strip())
    except ValueError:
        raise TraceFormatError(f"Invalid timestamp: {timestamp_str}")

    if value < 0:
        raise TraceFormatError(f"Negative timestamp: {timestamp_str}")

    return value * scale


def _parse_props(props_str: str) -> FrozenSet[str]:
    """Parse pipe-separated proposition list.

    Args:
        props_str: String like 'p|q|r'

    Returns:
        FrozenSet of proposition names
    """
    if not props_str.strip():
        return frozenset()

    props = {p.strip() for p in props_str.split("|") if p.strip()}
    return frozenset(props)
