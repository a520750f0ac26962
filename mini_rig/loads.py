# loads.py - Total vertical load and its distribution over the ropes

import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .kernel.frames import WORLD_UP
from .model import Truss

COSINE_EPSILON = 1e-6


class Severity(Enum):
    NOMINAL = "nominal"
    CAUTION = "caution"
    CRITICAL = "critical"


class DistributionStatus(Enum):
    OK = "ok"
    NO_ACTIVE_ROPES = "no_active_ropes"
    INDETERMINATE = "indeterminate"


def total_vertical_force(load_mass: float, truss: Truss, gravity: float = 9.81) -> float:
    """
    Total vertical force the ropes have to carry (N).

    The truss self-weight is added to the user payload:

        F = (m_load + L × w_truss) × g

    Parameters:
    -----------
    load_mass : float
        Payload mass hung from the truss (kg)
    truss : Truss
        Supplies length and weight per meter
    gravity : float
        Gravitational acceleration (m/s²)

    Example:
    --------
    >>> total_vertical_force(100.0, Truss(3.0, 0.29, 0.29, 10.0))
    1275.3  # (100 + 30) × 9.81, up to round-off
    """
    return (load_mass + truss.self_weight) * gravity


def angle_to_vertical(vector: np.ndarray) -> float:
    """
    Angle (rad) between a rope vector and world up, in [0, π].

    A zero-length vector has no direction; it is reported as horizontal
    (π/2) so it carries no vertical share.
    """
    v = np.asarray(vector, dtype=float)
    length = np.linalg.norm(v)
    if length <= 0.0:
        return np.pi / 2.0
    return float(np.arccos(np.clip(np.dot(v, WORLD_UP) / length, -1.0, 1.0)))


def classify_severity(angle_deg: float, caution_deg: float = 45.0,
                      critical_deg: float = 60.0) -> Severity:
    """≤45° nominal, (45°, 60°] caution, >60° critical."""
    if angle_deg > critical_deg:
        return Severity.CRITICAL
    if angle_deg > caution_deg:
        return Severity.CAUTION
    return Severity.NOMINAL


@dataclass(frozen=True)
class RopeGeometry:
    """A connected rope: attachment point below, ceiling anchor above."""
    attach_id: int
    attach_pos: np.ndarray
    anchor_id: int
    anchor_pos: np.ndarray

    @property
    def vector(self) -> np.ndarray:
        """Rope vector from attach point to anchor."""
        return np.asarray(self.anchor_pos, dtype=float) - np.asarray(self.attach_pos, dtype=float)


@dataclass
class RopeForce:
    """
    Result for one rope.

    tension is None when the load case is indeterminate and inf when the
    rope is (near) horizontal.
    """
    attach_id: int
    anchor_id: int
    angle: float  # rad, to vertical
    length: float
    severity: Severity
    tension: Optional[float] = None
    vertical_share: Optional[float] = None

    @property
    def angle_deg(self) -> float:
        return float(np.degrees(self.angle))

    @property
    def unbounded(self) -> bool:
        return self.tension is not None and np.isinf(self.tension)


@dataclass
class LoadDistribution:
    status: DistributionStatus
    total_force: float
    cosine_sum: float = 0.0
    forces: List[RopeForce] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is DistributionStatus.OK


def distribute(
    total_force: float,
    ropes: List[RopeGeometry],
    epsilon: float = COSINE_EPSILON,
    caution_deg: float = 45.0,
    critical_deg: float = 60.0,
) -> LoadDistribution:
    """
    Distribute a vertical load over connected ropes by angular proximity to vertical.

    This is a simplified static balance, not an equilibrium solve. Each rope
    takes a share of the vertical force proportional to cos(angle):

        share_i   = cos(θ_i) / Σcos(θ) × F
        tension_i = share_i / cos(θ_i)

    so Σ tension_i × cos(θ_i) = F whenever Σcos(θ) > ε.

    Steps:
    1. No ropes                      -> NO_ACTIVE_ROPES, nothing computed
    2. Σcos(θ) < ε (all horizontal)  -> INDETERMINATE, every rope critical,
                                        tensions left as None
    3. Otherwise per rope; |cos(θ_i)| ≤ ε gives tension = inf

    Parameters:
    -----------
    total_force : float
        Total vertical force to carry (N)
    ropes : List[RopeGeometry]
        Connected ropes, in attach point order
    epsilon : float
        Cosine tolerance for horizontal ropes
    caution_deg, critical_deg : float
        Severity thresholds (degrees to vertical)

    Returns:
    --------
    LoadDistribution
    """
    if not ropes:
        return LoadDistribution(DistributionStatus.NO_ACTIVE_ROPES, total_force)

    angles = [angle_to_vertical(r.vector) for r in ropes]
    cosines = [np.cos(a) for a in angles]
    cosine_sum = float(np.sum(cosines))

    forces = []
    if cosine_sum < epsilon:
        for rope, angle in zip(ropes, angles):
            forces.append(RopeForce(
                attach_id=rope.attach_id,
                anchor_id=rope.anchor_id,
                angle=angle,
                length=float(np.linalg.norm(rope.vector)),
                severity=Severity.CRITICAL,
            ))
        return LoadDistribution(DistributionStatus.INDETERMINATE, total_force, cosine_sum, forces)

    for rope, angle, cos_a in zip(ropes, angles, cosines):
        if abs(cos_a) > epsilon:
            share = (cos_a / cosine_sum) * total_force
            tension = share / cos_a
        else:
            share = 0.0
            tension = np.inf
        forces.append(RopeForce(
            attach_id=rope.attach_id,
            anchor_id=rope.anchor_id,
            angle=angle,
            length=float(np.linalg.norm(rope.vector)),
            severity=classify_severity(np.degrees(angle), caution_deg, critical_deg),
            tension=float(tension),
            vertical_share=float(share),
        ))

    return LoadDistribution(DistributionStatus.OK, total_force, cosine_sum, forces)
