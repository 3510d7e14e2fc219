# utils/trace_utils.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Helpers for writing CSV trace files

import csv
import random
from typing import Dict, List, Optional

from .trace_reader import TIME_UNITS


def generate_trace_file(
    filename: str,
    num_events_total: int,
    prop_map: Dict[int, List[str]],  # Maps event_index -> list of props for that event
    time_map: Optional[Dict[int, float]] = None,  # Maps event_index -> timestamp
    time_unit: str = "ms",
    step: float = 100,
    filler_props: Optional[List[str]] = None,
    seed: Optional[int] = None,
) -> None:
    """
    Generates a CSV trace file with specified events and propositions.

    Args:
        filename: The name of the output CSV file.
        num_events_total: Total number of events to generate in the trace.
        prop_map: A dictionary where keys are 0-based event indices and values are
                  lists of propositions true for that event.
        time_map: Optional explicit timestamps (in `time_unit`) per event index.
                  Events without an entry are placed `step` units after the
                  previous one.
        time_unit: Unit written to the time_unit directive ("s", "ms" or "us").
        step: Default spacing between consecutive events.
        filler_props: Propositions sprinkled at random into events that have no
                      entry in `prop_map`.
        seed: Seed for the filler randomness, for reproducible files.
    """
    if time_unit not in TIME_UNITS:
        raise ValueError(f"Unknown time unit: {time_unit}")
    if num_events_total < 0:
        raise ValueError("num_events_total must be non-negative.")

    rng = random.Random(seed)
    time_map = time_map or {}
    rows = []
    timestamp = 0.0

    for i in range(num_events_total):
        if i in time_map:
            if time_map[i] < timestamp:
                raise ValueError(f"Timestamp for event {i} precedes the previous event.")
            timestamp = float(time_map[i])
        elif i > 0:
            timestamp += step

        props = set(prop_map.get(i, []))

        # Add filler to ~10% of events without explicit propositions
        if not props and filler_props and rng.random() < 0.1:
            props.add(rng.choice(filler_props))

        rows.append([f"{timestamp:g}", "|".join(sorted(props))])

    # Write to CSV
    with open(filename, "w", newline="", encoding="utf-8") as f:
        f.write(f"# time_unit: {time_unit}\n")
        writer = csv.writer(f)
        writer.writerow(["timestamp", "props"])
        writer.writerows(rows)
