# mini_rig/config.py
"""
Engine configuration and defaults.
"""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass
class RigConfig:
    """Global engine configuration."""

    # Physics
    gravity: float = 9.81  # m/s^2
    default_load_mass: float = 100.0  # kg

    # Truss
    profile_name: str = "F34-3m"
    default_pose_position: Tuple[float, float, float] = (0.0, 2.0, 0.0)
    pose_policy: str = "locked"  # 'locked' or 'free'

    # Points
    load_point_offset_y: float = -0.5  # m below the truss centerline (world Y)
    default_anchor_height: float = 4.0  # m
    connectivity: str = "nearest"  # 'nearest' or 'explicit'

    # Load distribution
    cosine_epsilon: float = 1e-6
    caution_angle_deg: float = 45.0
    critical_angle_deg: float = 60.0

    # Reset layout: anchors as world positions, attach points as (local x, chord),
    # load points as local x
    default_anchors: List[Tuple[float, float, float]] = None
    default_attach_points: List[Tuple[float, int]] = None
    default_load_points: List[float] = None

    # Available options
    pose_policies: List[str] = None
    connectivity_modes: List[str] = None

    def __post_init__(self):
        if self.default_anchors is None:
            self.default_anchors = [(0.0, 4.0, 0.0), (2.0, 4.0, 0.0)]
        if self.default_attach_points is None:
            self.default_attach_points = [(-0.75, 0), (0.75, 1)]
        if self.default_load_points is None:
            self.default_load_points = [0.0]
        if self.pose_policies is None:
            self.pose_policies = ['locked', 'free']
        if self.connectivity_modes is None:
            self.connectivity_modes = ['nearest', 'explicit']
        if self.caution_angle_deg > self.critical_angle_deg:
            raise ValueError(
                f"caution angle ({self.caution_angle_deg}) must not exceed "
                f"critical angle ({self.critical_angle_deg})"
            )


# Global config instance
CONFIG = RigConfig()
