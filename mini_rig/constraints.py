# mini_rig/constraints.py
"""
TRUSS CONSTRAINT SOLVER: Keeping Points on the Truss
====================================================

PURPOSE:
--------
Attachment points and load points cannot go anywhere: they are bolted to the
truss. This module turns a desired world position (from a drag or a field
edit) into the nearest allowed position, and keeps the truss pose and the
points consistent with each other.

PROJECTION:
-----------
    ATTACH:  world -> local, clamp x to [-L/2, L/2], force (y, z) to the
             chord offsets, local -> world
    LOAD:    remove the world Y offset, world -> local, clamp x, force
             (y, z) = (0, 0), local -> world, add the world Y offset back
    ANCHOR:  unconstrained, returned unchanged

Projecting a position that already satisfies the constraint returns it
unchanged (up to floating-point round-off).

POSE POLICIES:
--------------
    LOCKED: the pose is fixed when the solver is created. Points slide
            along their chord; nothing feeds back into the truss.

    FREE:   the truss follows its attachment points. Each attach point's
            truss-axis foot (its position minus its chord offset in the
            current orientation) is collected; the truss centre moves to the
            mean of the feet and its local X axis is turned onto the vector
            from the first to the last foot. With fewer than two attach
            points the orientation is the identity; with none the pose
            returns to its default. Afterwards every truss-bound point is
            re-snapped onto the new pose, so the invariants hold after every
            pass. Moves of an attach point are length-limited against the
            pose they will produce (project_drag), so repeating a move is a
            no-op.

Degenerate input (first and last feet coincide) falls back to the identity
orientation and is reported as a DEGENERATE_GEOMETRY warning.
"""

from enum import Enum
from typing import Dict, List, Optional, Sequence

import numpy as np

from .errors import InvalidInputError, RigWarning, RoleError, WarningKind
from .kernel.frames import REFERENCE_AXIS, TrussPose, as_vector, rotation_between
from .model import Point, PointRole, Truss


class PosePolicy(Enum):
    LOCKED = "locked"
    FREE = "free"


def finite_vector(position: Sequence[float]) -> np.ndarray:
    """Validate and convert a world position, raising InvalidInputError."""
    try:
        v = as_vector(position)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid position {position!r}: {e}") from None
    if not np.all(np.isfinite(v)):
        raise InvalidInputError(f"Position must be finite, got {v.tolist()}")
    return v


class TrussConstraintSolver:
    """
    Projects points onto the truss and maintains the truss pose.

    Parameters:
    -----------
    truss : Truss
        Truss geometry (length and chord offsets)
    pose : TrussPose
        Initial pose; also the default pose restored by reset()
    policy : PosePolicy
        LOCKED or FREE (see module docstring)
    load_offset_y : float
        World Y offset of load points from the truss centerline (m)
    """

    def __init__(self, truss: Truss, pose: Optional[TrussPose] = None,
                 policy: PosePolicy = PosePolicy.LOCKED, load_offset_y: float = -0.5):
        self.truss = truss
        self.default_pose = pose.copy() if pose is not None else TrussPose.identity()
        self.pose = self.default_pose.copy()
        self.policy = PosePolicy(policy)
        self.load_offset = np.array([0.0, load_offset_y, 0.0])

    def reset(self) -> None:
        self.pose = self.default_pose.copy()

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def project(self, position: Sequence[float], role: PointRole,
                chord: Optional[int] = None) -> np.ndarray:
        """Constrained world position for a desired world position."""
        desired = finite_vector(position)

        if role is PointRole.CEILING_ANCHOR:
            return desired

        if role is PointRole.ATTACH:
            if chord is None:
                raise RoleError("attach point projection needs a chord index")
            cy, cz = self.truss.chord_offset(chord)
            local = self.pose.to_local(desired)
            return self.pose.to_world((self.truss.clamp_x(local[0]), cy, cz))

        if role is PointRole.LOAD:
            local = self.pose.to_local(desired - self.load_offset)
            return self.pose.to_world((self.truss.clamp_x(local[0]), 0.0, 0.0)) + self.load_offset

        raise RoleError(f"Unknown role: {role}")

    def project_drag(self, point: Point, position: Sequence[float],
                     attach_points: List[Point]) -> np.ndarray:
        """
        Constrained world position for moving an existing point.

        Under LOCKED, or for anchors and load points, this is project().
        Under FREE the truss re-centres on its attach points after the move,
        so an attach point's place along the truss axis is limited against
        the pose the move will produce, not the current one: it is clamped
        to the interval in which it and every other attach point stay within
        half a truss length of the new centre. A lone attach point carries
        the truss with it and is not clamped at all.

        Repeating the same move therefore lands on the same position.
        """
        if self.policy is not PosePolicy.FREE or point.role is not PointRole.ATTACH:
            return self.project(position, point.role, point.chord)

        desired = finite_vector(position)
        cy, cz = self.truss.chord_offset(point.chord)
        s = self.pose.to_local(desired)[0]

        # Axis coordinates of the other feet, relative to the current centre
        others = [self.pose.to_local(self._foot(p))[0] for p in attach_points if p.id != point.id]
        if others:
            n = len(others) + 1
            h = self.truss.half_length
            total = float(np.sum(others))
            # New centre is (total + s) / n
            lo = (total - n * h) / (n - 1)
            hi = (total + n * h) / (n - 1)
            for t in others:
                lo = max(lo, n * (t - h) - total)
                hi = min(hi, n * (t + h) - total)
            s = float(np.clip(s, lo, hi)) if lo <= hi else 0.5 * (lo + hi)

        return self.pose.to_world((s, cy, cz))

    def local_coordinates(self, point: Point) -> np.ndarray:
        """Point position in the truss frame (load points measured from their overhead foot)."""
        if point.role is PointRole.LOAD:
            return self.pose.to_local(point.position - self.load_offset)
        return self.pose.to_local(point.position)

    def constraint_residual(self, point: Point) -> float:
        """Largest deviation of a point from its constraint (0 for anchors)."""
        if point.role is PointRole.CEILING_ANCHOR:
            return 0.0
        lx, ly, lz = self.local_coordinates(point)
        if point.role is PointRole.ATTACH:
            ty, tz = self.truss.chord_offset(point.chord)
        else:
            ty, tz = 0.0, 0.0
        overshoot = max(0.0, abs(lx) - self.truss.half_length)
        return float(max(abs(ly - ty), abs(lz - tz), overshoot))

    # ------------------------------------------------------------------
    # Pose update
    # ------------------------------------------------------------------

    def _foot(self, point: Point) -> np.ndarray:
        """Point on the truss centerline that the point hangs from."""
        if point.role is PointRole.LOAD:
            return point.position - self.load_offset
        cy, cz = self.truss.chord_offset(point.chord)
        return point.position - self.pose.rotation @ np.array([0.0, cy, cz])

    def update_pose(self, attach_points: List[Point], load_points: List[Point]) -> List[RigWarning]:
        """
        Update the pose (FREE policy) and re-snap every truss-bound point.

        Returns any DEGENERATE_GEOMETRY warnings raised while orienting the truss.
        """
        warnings: List[RigWarning] = []
        # Feet are measured with the orientation in force before the update
        feet = {p.id: self._foot(p) for p in list(attach_points) + list(load_points)}

        if self.policy is PosePolicy.FREE:
            if not attach_points:
                self.pose = self.default_pose.copy()
            else:
                attach_feet = np.array([feet[p.id] for p in attach_points])
                position = attach_feet.mean(axis=0)
                rotation = np.eye(3)
                if len(attach_points) >= 2:
                    direction = attach_feet[-1] - attach_feet[0]
                    if np.linalg.norm(direction) < 1e-9:
                        warnings.append(RigWarning(
                            WarningKind.DEGENERATE_GEOMETRY,
                            f"{attach_points[0].name} and {attach_points[-1].name} hang from the "
                            f"same truss position; truss orientation reset to default",
                        ))
                    else:
                        rotation = rotation_between(REFERENCE_AXIS, direction)
                self.pose = TrussPose(position=position, rotation=rotation)

        self.reproject(list(attach_points) + list(load_points), feet)
        return warnings

    def reproject(self, points: List[Point], feet: Optional[Dict[int, np.ndarray]] = None) -> None:
        """
        Snap truss-bound points onto the current pose, keeping their place along the truss.

        `feet` maps point ids to centerline feet measured before a pose change;
        by default they are measured against the current pose.
        """
        if feet is None:
            feet = {p.id: self._foot(p) for p in points if p.role is not PointRole.CEILING_ANCHOR}
        for point in points:
            if point.role is PointRole.CEILING_ANCHOR:
                continue
            local_x = self.truss.clamp_x(self.pose.to_local(feet[point.id])[0])
            if point.role is PointRole.ATTACH:
                cy, cz = self.truss.chord_offset(point.chord)
                point.position = self.pose.to_world((local_x, cy, cz))
            else:
                point.position = self.pose.to_world((local_x, 0.0, 0.0)) + self.load_offset
