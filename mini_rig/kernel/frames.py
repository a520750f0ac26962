# mini_rig/kernel/frames.py
"""
TRUSS POSE: Local <-> World Frames
==================================

PURPOSE:
--------
The truss is a rigid body. Every truss-bound point is stored in world
coordinates but constrained in the truss's LOCAL frame:

    local X  -> along the truss
    local Y  -> up (chord height offsets)
    local Z  -> across (chord width offsets)

A pose is a rotation R (3×3, orthonormal) plus a position p:

    world = R · local + p
    local = Rᵀ · (world - p)

Scale is always 1, so the inverse is just the transpose.

ROTATION FROM A DIRECTION:
--------------------------
The free-floating truss is oriented so its local X axis points along a
direction derived from the attachment points. The rotation that takes the
reference axis a to a target direction b is built with Rodrigues' formula:

    k = (a × b) / |a × b|        (rotation axis)
    θ = arccos(a · b)            (rotation angle)
    R = I + sinθ·K + (1 - cosθ)·K²

The cross product vanishes when a and b are parallel or antiparallel, so
those cases fall back to fixed rotations instead of producing NaN.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Sequence

WORLD_UP = np.array([0.0, 1.0, 0.0])
REFERENCE_AXIS = np.array([1.0, 0.0, 0.0])

# Below this the cross product is treated as zero (parallel directions)
PARALLEL_TOL = 1e-6


def as_vector(values: Sequence[float]) -> np.ndarray:
    """Convert a 3-sequence to a float vector (copy)."""
    v = np.array(values, dtype=float).reshape(-1)
    if v.shape != (3,):
        raise ValueError(f"Expected 3 coordinates, got {v.shape[0]}")
    return v


def axis_angle_matrix(axis: np.ndarray, angle: float) -> np.ndarray:
    """
    Rotation matrix for a rotation of `angle` radians about `axis`.

    A zero-length axis gives the identity.
    """
    axis = np.asarray(axis, dtype=float)
    norm = np.linalg.norm(axis)
    if norm <= 0.0:
        return np.eye(3)
    kx, ky, kz = axis / norm

    K = np.array([
        [0.0, -kz, ky],
        [kz, 0.0, -kx],
        [-ky, kx, 0.0],
    ])
    return np.eye(3) + np.sin(angle) * K + (1.0 - np.cos(angle)) * (K @ K)


def rotation_between(reference: np.ndarray, target: np.ndarray) -> np.ndarray:
    """
    Minimal rotation taking `reference` onto the direction of `target`.

    Fallbacks (no NaN is ever produced):
    - zero-length target        -> identity
    - parallel (same direction) -> identity
    - antiparallel              -> 180° about world Y
    """
    a = np.asarray(reference, dtype=float)
    b = np.asarray(target, dtype=float)
    a_len = np.linalg.norm(a)
    b_len = np.linalg.norm(b)
    if a_len <= 0.0 or b_len <= 0.0 or not np.isfinite(b_len):
        return np.eye(3)
    a = a / a_len
    b = b / b_len

    axis = np.cross(a, b)
    if np.linalg.norm(axis) < PARALLEL_TOL:
        if np.dot(a, b) < 0.0:
            return axis_angle_matrix(WORLD_UP, np.pi)
        return np.eye(3)

    angle = np.arccos(np.clip(np.dot(a, b), -1.0, 1.0))
    return axis_angle_matrix(axis, angle)


@dataclass
class TrussPose:
    """
    Position and orientation of the truss body.

    Attributes:
    -----------
    position : np.ndarray
        World position of the truss centre (local origin)

    rotation : np.ndarray
        3×3 rotation matrix, columns are the local axes in world coordinates
    """
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))

    def __post_init__(self):
        self.position = as_vector(self.position)
        self.rotation = np.array(self.rotation, dtype=float).reshape(3, 3)

    @classmethod
    def identity(cls, position: Sequence[float] = (0.0, 0.0, 0.0)) -> "TrussPose":
        return cls(position=as_vector(position), rotation=np.eye(3))

    @property
    def axis(self) -> np.ndarray:
        """World direction of the truss's local X axis."""
        return self.rotation[:, 0].copy()

    def to_world(self, local: Sequence[float]) -> np.ndarray:
        return self.rotation @ as_vector(local) + self.position

    def to_local(self, world: Sequence[float]) -> np.ndarray:
        return self.rotation.T @ (as_vector(world) - self.position)

    def copy(self) -> "TrussPose":
        return TrussPose(self.position.copy(), self.rotation.copy())

    def as_dict(self) -> dict:
        return {
            "position": [float(v) for v in self.position],
            "rotation": [[float(v) for v in row] for row in self.rotation],
        }
