"""
CATALOG: TRUSS PROFILES
=======================

PURPOSE:
--------
This module defines a small catalog of truss profiles that a rig can be built
from. Instead of hardcoding length=3.0, height=0.29 in every call, a rig
references a profile by name and the geometry flows from there.

ENGINEERING CONTEXT:
--------------------
A four-chord box truss (the common "F34" family used in event rigging) is
described by:
  - length: overall length of the truss segment (m)
  - height / width: centre-to-centre chord spacing (m)
  - weight_per_meter: self-weight of the truss (kg/m)

The four chords sit at (±height/2, ±width/2) from the truss centerline.
Attachment points (round slings, shackles) are always placed on a chord.

The self-weight is added to the user payload before the load is distributed
over the ropes, so the profile weight matters for every readout.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class TrussProfile:
    """
    Geometry and self-weight of a box truss segment.

    Parameters:
    -----------
    name : str
        Catalog name (e.g., "F34-3m")

    length : float
        Overall truss length (m)

    height : float
        Vertical chord spacing (m)

    width : float
        Lateral chord spacing (m)

    weight_per_meter : float
        Self-weight (kg/m)

    Examples:
    ---------
    >>> prof = TrussProfile("F34-3m", length=3.0, height=0.29, width=0.29, weight_per_meter=10.0)
    >>> prof.self_weight
    30.0
    """
    name: str
    length: float
    height: float
    width: float
    weight_per_meter: float

    @property
    def self_weight(self) -> float:
        """Total truss mass (kg)."""
        return self.length * self.weight_per_meter


# F34 box truss: 29 cm chord spacing, example weight 10 kg/m
TRUSS_PROFILES: List[TrussProfile] = [
    TrussProfile("F34-1m", length=1.0, height=0.29, width=0.29, weight_per_meter=10.0),
    TrussProfile("F34-2m", length=2.0, height=0.29, width=0.29, weight_per_meter=10.0),
    TrussProfile("F34-3m", length=3.0, height=0.29, width=0.29, weight_per_meter=10.0),
    TrussProfile("F34-4m", length=4.0, height=0.29, width=0.29, weight_per_meter=10.0),
]

DEFAULT_PROFILE = TRUSS_PROFILES[2]


def get_profile(name: str) -> TrussProfile:
    """Look up a profile by name."""
    for profile in TRUSS_PROFILES:
        if profile.name == name:
            return profile
    available = [p.name for p in TRUSS_PROFILES]
    raise ValueError(f"Unknown truss profile: {name}. Available: {available}")
