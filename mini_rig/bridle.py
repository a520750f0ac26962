# mini_rig/bridle.py
"""
Two-leg bridle readout.

A bridle hangs one point from two anchors. The quantities a rigger checks
are the leg lengths, how steep each leg is (inclination to the horizontal)
and the opening angle between the legs at the apex.
"""

import numpy as np
from dataclasses import dataclass

from .kernel.frames import WORLD_UP, as_vector


@dataclass(frozen=True)
class BridleGeometry:
    length_a: float
    length_b: float
    inclination_a_deg: float  # to horizontal, positive when the anchor is above the apex
    inclination_b_deg: float
    opening_angle_deg: float

    def as_dict(self) -> dict:
        return {
            "length_a": self.length_a,
            "length_b": self.length_b,
            "inclination_a_deg": self.inclination_a_deg,
            "inclination_b_deg": self.inclination_b_deg,
            "opening_angle_deg": self.opening_angle_deg,
        }


def _inclination_deg(leg: np.ndarray) -> float:
    length = np.linalg.norm(leg)
    if length <= 0.0:
        return 0.0
    return float(np.degrees(np.arcsin(np.clip(np.dot(leg, WORLD_UP) / length, -1.0, 1.0))))


def bridle_geometry(anchor_a, anchor_b, apex) -> BridleGeometry:
    """
    Leg lengths, inclinations and opening angle of a bridle.

    A zero-length leg has no direction: its inclination and the opening
    angle are reported as 0.
    """
    a = as_vector(anchor_a)
    b = as_vector(anchor_b)
    p = as_vector(apex)

    leg_a = a - p
    leg_b = b - p
    length_a = float(np.linalg.norm(leg_a))
    length_b = float(np.linalg.norm(leg_b))

    magnitude = length_a * length_b
    if magnitude > 0.0:
        cos_open = np.clip(np.dot(leg_a, leg_b) / magnitude, -1.0, 1.0)
        opening = float(np.degrees(np.arccos(cos_open)))
    else:
        opening = 0.0

    return BridleGeometry(
        length_a=length_a,
        length_b=length_b,
        inclination_a_deg=_inclination_deg(leg_a),
        inclination_b_deg=_inclination_deg(leg_b),
        opening_angle_deg=opening,
    )
