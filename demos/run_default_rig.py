#!/usr/bin/env python3
"""
RUN_DEFAULT_RIG: Rope Tensions for the Default Truss Rig
========================================================

This demo walks through a typical editing session:
1. Start from the default rig (2 anchors, 2 attach points, 1 load point)
2. Read the rope tensions
3. Slide an attach point along the truss and add a third rope
4. Pull an anchor down to the truss height (indeterminate load case)

Run with:
    python demos/run_default_rig.py
"""

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from mini_rig import Rig, PointRole
from mini_rig.report import format_readout, rope_table


def print_header(text: str):
    """Print a formatted section header."""
    print("\n" + "=" * 60)
    print(f"  {text}")
    print("=" * 60)


def print_result(rig: Rig):
    result = rig.last_result
    for line in format_readout(result):
        print(f"  {line}")
    for warning in result.warnings:
        print(f"  ! {warning.kind.value}: {warning.message}")


def main():
    print_header("DEFAULT RIG")
    rig = Rig()
    print(f"\nTruss: {rig.profile.name} ({rig.truss.length} m, {rig.truss.self_weight:.0f} kg)")
    print(f"Payload: {rig.load_mass:.0f} kg\n")
    print_result(rig)

    # =========================================================================
    # STEP 2: SLIDE AN ATTACH POINT, ADD A ROPE
    # =========================================================================
    print_header("EDITING")
    attach = rig.points(PointRole.ATTACH)
    applied = rig.set_position(attach[0].id, [-1.4, 3.0, 0.5])
    print(f"\nDragged {attach[0].name} -> {applied.round(3).tolist()} (snapped to its chord)")

    anchor_id = rig.add_point(PointRole.CEILING_ANCHOR, [-2.0, 4.0, 0.0])
    rig.add_point(PointRole.ATTACH, 1.2)
    print(f"Added anchor {anchor_id} and a third attach point\n")
    print_result(rig)

    print("\n" + rope_table(rig.last_result).to_string(index=False))

    # =========================================================================
    # STEP 3: DEGENERATE CASE
    # =========================================================================
    print_header("ALL ANCHORS AT TRUSS HEIGHT")
    for anchor in rig.points(PointRole.CEILING_ANCHOR):
        x, _, z = anchor.position
        rig.set_position(anchor.id, [x, 2.145, z])
    print()
    print_result(rig)

    return rig


if __name__ == "__main__":
    main()
