# mini_rig/kernel - Frame and rotation math shared by the solver and the engine
"""
KERNEL: POSE AND DIRECTION MATH
===============================

Everything here is plain vector algebra on numpy arrays and knows nothing
about point roles or ropes:
- TrussPose: local <-> world transforms for the rigid truss body
- rotation_between / axis_angle_matrix: orientation from a direction,
  with deterministic fallbacks for degenerate input
"""

from .frames import (
    REFERENCE_AXIS,
    WORLD_UP,
    TrussPose,
    as_vector,
    axis_angle_matrix,
    rotation_between,
)

__all__ = [
    'REFERENCE_AXIS',
    'WORLD_UP',
    'TrussPose',
    'as_vector',
    'axis_angle_matrix',
    'rotation_between',
]
