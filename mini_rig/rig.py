# mini_rig/rig.py
"""
RIG: The Engine Facade
======================

A Rig owns the point registry, the constraint solver and the current load
mass, and exposes the operations a presentation layer needs:

    add_point / remove_point / remove_last
    set_position / set_coordinate / set_chord / set_connected_anchor
    set_load_mass
    recompute / reset

Every mutation runs one full, synchronous recompute pass before it returns:

    constraint solver (pose + re-snap)
        -> connectivity (rope routing)
        -> load distribution (tensions, angles, severity)
        -> rope line states

The result of the last pass is kept in `last_result`.

ERRORS:
-------
Caller mistakes (unknown id, wrong role, bad chord index) raise from the
RigError family. Bad coordinates or masses, degenerate geometry, unconnected
ropes and impossible load cases never raise: they become RigWarning entries
in the next RecomputeResult and the previous state is kept.
"""

from dataclasses import dataclass, field
from numbers import Real
from typing import List, Optional, Sequence, Union

import numpy as np

from .bridle import BridleGeometry, bridle_geometry
from .catalog import TrussProfile, get_profile
from .config import CONFIG, RigConfig
from .connectivity import ConnectivityMode, LoadHanger, load_hangers, resolve
from .constraints import PosePolicy, TrussConstraintSolver
from .errors import (
    InvalidInputError,
    RigWarning,
    RoleError,
    UnknownPointError,
    WarningKind,
)
from .kernel.frames import TrussPose
from .loads import (
    DistributionStatus,
    RopeGeometry,
    Severity,
    distribute,
    total_vertical_force,
)
from .logger import get_logger
from .model import AttachPayload, LineState, LoadPayload, Point, PointRole, Truss
from .registry import PointRegistry

log = get_logger(__name__)

AXES = {"x": 0, "y": 1, "z": 2}

SEVERITY_LINE_STATE = {
    Severity.NOMINAL: LineState.NOMINAL,
    Severity.CAUTION: LineState.CAUTION,
    Severity.CRITICAL: LineState.CRITICAL,
}


@dataclass(frozen=True)
class PointState:
    """Read-only snapshot of a point after a recompute pass."""
    id: int
    role: PointRole
    name: str
    position: tuple
    chord: Optional[int] = None
    anchor_id: Optional[int] = None
    local_x: Optional[float] = None
    line_state: Optional[LineState] = None


@dataclass(frozen=True)
class RopeReading:
    """
    Per-rope output. Unconnected ropes have no anchor, angle, tension or severity.
    tension is None for an indeterminate load case and inf for a horizontal rope.
    """
    attach_id: int
    attach_name: str
    anchor_id: Optional[int]
    anchor_name: Optional[str]
    connected: bool
    tension: Optional[float] = None
    angle: Optional[float] = None  # rad, to vertical
    severity: Optional[Severity] = None
    vertical_share: Optional[float] = None
    length: Optional[float] = None

    @property
    def angle_deg(self) -> Optional[float]:
        return None if self.angle is None else float(np.degrees(self.angle))

    @property
    def unbounded(self) -> bool:
        return self.tension is not None and np.isinf(self.tension)


@dataclass
class RecomputeResult:
    truss_pose: TrussPose
    points: List[PointState]
    ropes: List[RopeReading]
    load_hangers: List[LoadHanger]
    total_load: float
    status: DistributionStatus
    warnings: List[RigWarning] = field(default_factory=list)

    def rope(self, attach_id: int) -> RopeReading:
        for reading in self.ropes:
            if reading.attach_id == attach_id:
                return reading
        raise UnknownPointError(f"No rope for attach point {attach_id!r}")

    def point(self, point_id: int) -> PointState:
        for state in self.points:
            if state.id == point_id:
                return state
        raise UnknownPointError(f"No live point with id {point_id!r}")

    def warnings_of(self, kind: WarningKind) -> List[RigWarning]:
        return [w for w in self.warnings if w.kind is kind]

    @property
    def connected_ropes(self) -> List[RopeReading]:
        return [r for r in self.ropes if r.connected]


def _parse_number(value) -> float:
    """float() for edit fields; raises InvalidInputError on non-numeric or non-finite input."""
    if isinstance(value, bool):
        raise InvalidInputError(f"Not a number: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Not a number: {value!r}") from None
    if not np.isfinite(number):
        raise InvalidInputError(f"Value must be finite, got {value!r}")
    return number


class Rig:
    """
    Interactive truss rig: points, constraints, routing and tensions.

    Parameters:
    -----------
    profile : TrussProfile | str | None
        Truss profile or catalog name (default from config)
    config : RigConfig | None
        Engine configuration (default: global CONFIG)
    pose_policy : PosePolicy | str | None
        'locked' or 'free' (default from config)
    connectivity : ConnectivityMode | str | None
        'nearest' or 'explicit' (default from config)
    pose : TrussPose | None
        Initial/default truss pose (default: identity at config position)
    populate : bool
        Start with the default configuration (True) or empty (False)

    Example:
    --------
    >>> rig = Rig()
    >>> result = rig.recompute()
    >>> [round(r.tension, 1) for r in result.connected_ropes]
    """

    def __init__(
        self,
        profile: Union[TrussProfile, str, None] = None,
        config: Optional[RigConfig] = None,
        pose_policy: Union[PosePolicy, str, None] = None,
        connectivity: Union[ConnectivityMode, str, None] = None,
        pose: Optional[TrussPose] = None,
        populate: bool = True,
    ):
        self.config = config if config is not None else CONFIG
        if profile is None:
            profile = self.config.profile_name
        if isinstance(profile, str):
            profile = get_profile(profile)
        self.profile = profile
        self.truss = Truss.from_profile(profile)

        if pose is None:
            pose = TrussPose.identity(self.config.default_pose_position)
        policy = PosePolicy(pose_policy if pose_policy is not None else self.config.pose_policy)
        self.solver = TrussConstraintSolver(
            self.truss, pose, policy, self.config.load_point_offset_y
        )
        self.connectivity = ConnectivityMode(
            connectivity if connectivity is not None else self.config.connectivity
        )
        self.registry = PointRegistry()
        self._load_mass = float(self.config.default_load_mass)
        self._pending: List[RigWarning] = []
        self.last_result: Optional[RecomputeResult] = None

        if populate:
            self.reset()
        else:
            self.recompute()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def pose(self) -> TrussPose:
        return self.solver.pose

    @property
    def pose_policy(self) -> PosePolicy:
        return self.solver.policy

    @property
    def load_mass(self) -> float:
        return self._load_mass

    @property
    def total_load(self) -> float:
        return total_vertical_force(self._load_mass, self.truss, self.config.gravity)

    def point(self, point_id: int) -> Point:
        return self.registry.get(point_id)

    def points(self, role: Union[PointRole, str, None] = None) -> List[Point]:
        if role is None:
            return list(self.registry)
        return self.registry.of_role(PointRole(role))

    # ------------------------------------------------------------------
    # Point lifecycle
    # ------------------------------------------------------------------

    def add_point(
        self,
        role: Union[PointRole, str],
        position: Union[float, Sequence[float], None] = None,
        chord: Optional[int] = None,
        anchor_id: Optional[int] = None,
    ) -> int:
        """
        Create a point and recompute.

        `position` is either a number or a world position:
        - number, anchor: world X at the default anchor height
        - number, attach/load: local X along the truss (clamped)
        - 3-sequence: world position, projected onto the constraint

        A non-numeric or non-finite position does not raise: the point is
        created at x = 0 and the next result carries an INVALID_INPUT warning.

        Attachment points default to alternating chords 0/1 (front/back on
        the top of the truss). `anchor_id` pre-assigns the rope for explicit
        routing.
        """
        point = self._create_point(PointRole(role), position, chord, anchor_id)
        log.debug(f"added {point.name} (id={point.id}) at {np.round(point.position, 4).tolist()}")
        self.recompute()
        return point.id

    def _create_point(self, role: PointRole, position, chord, anchor_id) -> Point:
        if role is not PointRole.ATTACH:
            if chord is not None:
                raise RoleError(f"Only attach points have a chord (got role {role.value})")
            if anchor_id is not None:
                raise RoleError(f"Only attach points connect to an anchor (got role {role.value})")

        if role is PointRole.ATTACH:
            if chord is None:
                chord = 0 if len(self.registry.attach_points) % 2 == 0 else 1
            self._check_chord(chord)
            if anchor_id is not None:
                self._check_anchor(anchor_id)

        if position is None:
            position = 0.0

        rejected = None
        try:
            world = self._initial_position(role, position, chord)
        except InvalidInputError as e:
            rejected = str(e)
            world = self._initial_position(role, 0.0, chord)

        if role is PointRole.ATTACH:
            payload = AttachPayload(chord=chord, anchor_id=anchor_id)
        elif role is PointRole.LOAD:
            payload = LoadPayload()
        else:
            payload = None
        point = self.registry.add(role, world, payload)
        if rejected is not None:
            self._pending.append(RigWarning(
                WarningKind.INVALID_INPUT, f"{rejected}; {point.name} placed at x = 0", point.id
            ))
        return point

    def _initial_position(self, role: PointRole, position, chord) -> np.ndarray:
        """World position for a new point: a number is an along-truss slot (world X for anchors)."""
        if isinstance(position, Real) and not isinstance(position, bool):
            x = _parse_number(position)
            if role is PointRole.CEILING_ANCHOR:
                return np.array([x, self.config.default_anchor_height, 0.0])
            if role is PointRole.ATTACH:
                cy, cz = self.truss.chord_offset(chord)
                return self.pose.to_world((self.truss.clamp_x(x), cy, cz))
            return self.pose.to_world((self.truss.clamp_x(x), 0.0, 0.0)) + self.solver.load_offset
        return self.solver.project(position, role, chord)

    def remove_point(self, point_id: int) -> None:
        """Remove any point by id. Rope references to a removed anchor are cleared."""
        point = self.registry.get(point_id)
        cleared = self.registry.remove(point_id)
        log.debug(f"removed {point.name} (id={point_id})")
        if cleared:
            log.info(f"{point.name} removed; cleared rope assignment of attach points {cleared}")
        self.recompute()

    def remove_last(self, role: Union[PointRole, str]) -> Optional[int]:
        """Remove the newest point of a role. Returns its id, or None if there was none."""
        point_id = self.registry.last(PointRole(role))
        if point_id is None:
            return None
        self.remove_point(point_id)
        return point_id

    def reset(self) -> RecomputeResult:
        """
        Restore the default configuration from the config:
        anchors at their world positions, attach points at (local x, chord),
        load points at local x. The truss pose returns to its default; the
        load mass is kept. Identifiers are not reused.
        """
        self.registry.clear()
        self.solver.reset()
        self._pending = []

        anchors = [
            self._create_point(PointRole.CEILING_ANCHOR, pos, None, None)
            for pos in self.config.default_anchors
        ]
        for i, (x, chord) in enumerate(self.config.default_attach_points):
            anchor_id = None
            if self.connectivity is ConnectivityMode.EXPLICIT and i < len(anchors):
                anchor_id = anchors[i].id
            self._create_point(PointRole.ATTACH, x, chord, anchor_id)
        for x in self.config.default_load_points:
            self._create_point(PointRole.LOAD, x, None, None)

        log.info(f"rig reset to default configuration ({len(self.registry)} points)")
        return self.recompute()

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def set_position(self, point_id: int, position: Sequence[float]) -> np.ndarray:
        """
        Move a point towards a desired world position and recompute.

        Returns the applied (constrained) position. Invalid coordinates are
        reported as INVALID_INPUT and the previous position is kept.
        """
        point = self.registry.get(point_id)
        try:
            target = self.solver.project_drag(point, position, self.registry.attach_points)
        except InvalidInputError as e:
            self._pending.append(RigWarning(WarningKind.INVALID_INPUT, str(e), point_id))
        else:
            point.position = target
        self.recompute()
        return point.position.copy()

    def set_coordinate(self, point_id: int, axis: Union[str, int], value) -> np.ndarray:
        """Single-axis field edit (world axis 'x', 'y' or 'z'), then set_position."""
        point = self.registry.get(point_id)
        index = AXES.get(axis, axis) if isinstance(axis, str) else axis
        if isinstance(index, bool) or index not in (0, 1, 2):
            raise InvalidInputError(f"axis must be 'x', 'y' or 'z', got {axis!r}")
        try:
            number = _parse_number(value)
        except InvalidInputError as e:
            self._pending.append(RigWarning(WarningKind.INVALID_INPUT, str(e), point_id))
            self.recompute()
            return point.position.copy()

        desired = point.position.copy()
        desired[index] = number
        return self.set_position(point_id, desired)

    def set_chord(self, point_id: int, chord: int) -> np.ndarray:
        """Move an attach point to another chord, keeping its place along the truss."""
        point = self._attach_point(point_id)
        self._check_chord(chord)
        local_x = self.truss.clamp_x(self.solver.local_coordinates(point)[0])
        point.payload.chord = chord
        cy, cz = self.truss.chord_offset(chord)
        point.position = self.pose.to_world((local_x, cy, cz))
        self.recompute()
        return point.position.copy()

    def set_connected_anchor(self, point_id: int, anchor_id: Optional[int]) -> None:
        """
        Assign (or clear, with None) the anchor an attach point hangs from.

        Under nearest-anchor routing the assignment is overwritten by the
        next recompute.
        """
        point = self._attach_point(point_id)
        if anchor_id is not None:
            self._check_anchor(anchor_id)
        point.payload.anchor_id = anchor_id
        if self.connectivity is ConnectivityMode.NEAREST:
            log.info(f"{point.name}: explicit anchor assignment is overridden by nearest-anchor routing")
        self.recompute()

    def set_load_mass(self, value) -> float:
        """Set the payload mass (kg). Invalid or negative input keeps the previous mass."""
        try:
            mass = _parse_number(value)
            if mass < 0.0:
                raise InvalidInputError(f"Load mass must not be negative, got {mass}")
        except InvalidInputError as e:
            self._pending.append(RigWarning(WarningKind.INVALID_INPUT, str(e)))
        else:
            self._load_mass = mass
        self.recompute()
        return self._load_mass

    def bridle(self, anchor_a: int, anchor_b: int, point_id: int) -> BridleGeometry:
        """Bridle readout for a point hung from two anchors."""
        a = self._anchor(anchor_a)
        b = self._anchor(anchor_b)
        apex = self.registry.get(point_id)
        return bridle_geometry(a.position, b.position, apex.position)

    # ------------------------------------------------------------------
    # Recompute
    # ------------------------------------------------------------------

    def recompute(self) -> RecomputeResult:
        """Run the full pipeline once and return (and cache) the result."""
        warnings = list(self._pending)
        self._pending = []

        anchors = self.registry.anchors
        attach_points = self.registry.attach_points
        load_points = self.registry.load_points

        # 1. Constraints: pose update and re-snap of truss-bound points
        warnings.extend(self.solver.update_pose(attach_points, load_points))

        # 2. Routing
        routing = resolve(attach_points, anchors, self.connectivity)
        anchor_by_id = {a.id: a for a in anchors}
        ropes = []
        for attach in attach_points:
            anchor_id = routing[attach.id]
            attach.payload.anchor_id = anchor_id
            if anchor_id is None:
                warnings.append(RigWarning(
                    WarningKind.UNCONNECTED_ROPE,
                    f"{attach.name} is not connected to a ceiling anchor",
                    attach.id,
                ))
                continue
            anchor = anchor_by_id[anchor_id]
            ropes.append(RopeGeometry(attach.id, attach.position.copy(), anchor.id, anchor.position.copy()))
            if np.linalg.norm(anchor.position - attach.position) <= 0.0:
                warnings.append(RigWarning(
                    WarningKind.DEGENERATE_GEOMETRY,
                    f"{attach.name} coincides with {anchor.name}; rope treated as horizontal",
                    attach.id,
                ))

        # 3. Load distribution
        total = self.total_load
        distribution = distribute(
            total,
            ropes,
            epsilon=self.config.cosine_epsilon,
            caution_deg=self.config.caution_angle_deg,
            critical_deg=self.config.critical_angle_deg,
        )
        if distribution.status is DistributionStatus.NO_ACTIVE_ROPES:
            warnings.append(RigWarning(WarningKind.NO_ACTIVE_ROPES, "No active ropes to the ceiling"))
        elif distribution.status is DistributionStatus.INDETERMINATE:
            warnings.append(RigWarning(
                WarningKind.INDETERMINATE_LOAD_CASE,
                f"Indeterminate load case: no rope carries vertical load "
                f"(cosine sum {distribution.cosine_sum:.2e})",
            ))
        forces = {f.attach_id: f for f in distribution.forces}
        for force in distribution.forces:
            if force.unbounded:
                warnings.append(RigWarning(
                    WarningKind.UNBOUNDED_TENSION,
                    f"Rope at {force.angle_deg:.2f}° to vertical is horizontal; tension unbounded",
                    force.attach_id,
                ))

        # 4. Rope lines and readings
        readings = []
        for attach in attach_points:
            force = forces.get(attach.id)
            if force is None:
                attach.line.collapse(attach.position, LineState.DISCONNECTED)
                readings.append(RopeReading(
                    attach_id=attach.id,
                    attach_name=attach.name,
                    anchor_id=None,
                    anchor_name=None,
                    connected=False,
                ))
                continue
            anchor = anchor_by_id[force.anchor_id]
            attach.line.update(anchor.position, attach.position, SEVERITY_LINE_STATE[force.severity])
            readings.append(RopeReading(
                attach_id=attach.id,
                attach_name=attach.name,
                anchor_id=anchor.id,
                anchor_name=anchor.name,
                connected=True,
                tension=force.tension,
                angle=force.angle,
                severity=force.severity,
                vertical_share=force.vertical_share,
                length=force.length,
            ))

        hangers = load_hangers(load_points, attach_points, self.config.load_point_offset_y)
        for lp, hanger in zip(load_points, hangers):
            lp.line.update(lp.position, hanger.overhead, LineState.LOAD)

        result = RecomputeResult(
            truss_pose=self.pose.copy(),
            points=[self._snapshot(p) for p in self.registry],
            ropes=readings,
            load_hangers=hangers,
            total_load=total,
            status=distribution.status,
            warnings=warnings,
        )
        self.last_result = result

        log.debug(
            f"recompute: {len(anchors)} anchors, {len(attach_points)} attach, {len(load_points)} load, "
            f"F={total:.2f} N, status={distribution.status.value}, {len(warnings)} warnings"
        )
        for w in warnings:
            if w.kind in (WarningKind.INDETERMINATE_LOAD_CASE, WarningKind.UNBOUNDED_TENSION):
                log.warning(w.message)
            else:
                log.info(w.message)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _snapshot(self, point: Point) -> PointState:
        local_x = None
        if point.role is not PointRole.CEILING_ANCHOR:
            local_x = float(self.solver.local_coordinates(point)[0])
        line = point.line
        return PointState(
            id=point.id,
            role=point.role,
            name=point.name,
            position=tuple(float(v) for v in point.position),
            chord=point.chord,
            anchor_id=point.anchor_id,
            local_x=local_x,
            line_state=line.state if line is not None else None,
        )

    def _attach_point(self, point_id: int) -> Point:
        point = self.registry.get(point_id)
        if point.role is not PointRole.ATTACH:
            raise RoleError(f"{point.name} is not an attach point")
        return point

    def _anchor(self, point_id: int) -> Point:
        point = self.registry.get(point_id)
        if point.role is not PointRole.CEILING_ANCHOR:
            raise RoleError(f"{point.name} is not a ceiling anchor")
        return point

    def _check_anchor(self, anchor_id: int) -> None:
        self._anchor(anchor_id)

    def _check_chord(self, chord) -> None:
        try:
            self.truss.chord_offset(chord)
        except ValueError as e:
            raise InvalidInputError(str(e)) from None
