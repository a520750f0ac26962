# mini_rig/report.py
"""
Readouts of a recompute result: a pandas table, text lines and CSV.
"""

from typing import List

import numpy as np
import pandas as pd

from .loads import DistributionStatus
from .rig import RecomputeResult

ROPE_COLUMNS = [
    'rope', 'attach_id', 'attach', 'anchor_id', 'anchor',
    'tension_N', 'angle_deg', 'severity', 'length_m',
]


def rope_table(result: RecomputeResult) -> pd.DataFrame:
    """
    One row per attach point rope, in attach point order.

    Unconnected ropes keep their row with NaN readings so the rope numbering
    matches the attach point list.
    """
    rows = []
    for i, reading in enumerate(result.ropes, start=1):
        rows.append({
            'rope': i,
            'attach_id': reading.attach_id,
            'attach': reading.attach_name,
            'anchor_id': reading.anchor_id,
            'anchor': reading.anchor_name,
            'tension_N': reading.tension if reading.tension is not None else np.nan,
            'angle_deg': reading.angle_deg if reading.angle is not None else np.nan,
            'severity': reading.severity.value if reading.severity is not None else None,
            'length_m': reading.length if reading.length is not None else np.nan,
        })
    return pd.DataFrame(rows, columns=ROPE_COLUMNS)


def format_readout(result: RecomputeResult) -> List[str]:
    """Human-readable lines: total load, then one line per rope (or the global warning)."""
    lines = [f"Total load on truss: {result.total_load:.2f} N"]

    if result.status is DistributionStatus.NO_ACTIVE_ROPES:
        lines.append("No active ropes to the ceiling.")
        return lines
    if result.status is DistributionStatus.INDETERMINATE:
        lines.append("Indeterminate load case or no load-bearing ropes (ropes too horizontal).")
        return lines

    for i, reading in enumerate(result.ropes, start=1):
        if not reading.connected:
            lines.append(f"Rope {i} ({reading.attach_name} not connected to a ceiling anchor): "
                         f"no force computed.")
            continue
        tension = "unbounded" if reading.unbounded else f"{reading.tension:.2f} N"
        lines.append(
            f"Rope {i} ({reading.attach_name} to {reading.anchor_name}): "
            f"force {tension}, angle to vertical {reading.angle_deg:.2f}° [{reading.severity.value}]"
        )
    return lines


def ropes_csv(result: RecomputeResult) -> str:
    """Rope table as CSV text (tension in N and kN)."""
    df = rope_table(result)
    df['tension_kN'] = (df['tension_N'] / 1000).round(3)
    df['tension_N'] = df['tension_N'].round(2)
    df['angle_deg'] = df['angle_deg'].round(2)
    df['length_m'] = df['length_m'].round(4)
    return df.to_csv(index=False)
