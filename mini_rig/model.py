# mini_rig/model.py
"""
RIG MODEL: Truss, Points and Rope Lines
=======================================

PURPOSE:
--------
This module defines the data structures of a rigging configuration:
- Truss: the rigid four-chord box truss (length, height, width, self-weight)
- Point: a tagged variant for the three point roles
- RopeLine: the line resource owned by attachment and load points

POINT ROLES:
------------
    CEILING_ANCHOR  free 3D position, no structural constraint, no payload
    ATTACH          on one of the four chords, routed to zero-or-one anchor
    LOAD            on the truss centerline, hanging a fixed distance below

The role is a tag; role-specific data lives in the payload
(AttachPayload / LoadPayload). Code that needs role-specific behaviour
switches on `point.role` rather than on the Python type.

CHORDS:
-------
Looking along the truss (local X), the chords sit at local (y, z):

    0: (+H/2, +W/2)   top, front
    1: (+H/2, -W/2)   top, back
    2: (-H/2, +W/2)   bottom, front
    3: (-H/2, -W/2)   bottom, back
"""

import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from .catalog import TrussProfile
from .errors import ResourceReleasedError

CHORD_COUNT = 4


class PointRole(Enum):
    CEILING_ANCHOR = "ceiling_anchor"
    ATTACH = "attach"
    LOAD = "load"


class LineState(Enum):
    """Visual state of a rope line (drives its colour)."""
    NOMINAL = "nominal"
    CAUTION = "caution"
    CRITICAL = "critical"
    DISCONNECTED = "disconnected"
    LOAD = "load"


LINE_COLORS = {
    LineState.NOMINAL: 0x00ff00,       # green
    LineState.CAUTION: 0xffff00,       # yellow
    LineState.CRITICAL: 0xff0000,      # red
    LineState.DISCONNECTED: 0x888888,  # grey
    LineState.LOAD: 0xffa500,          # orange
}


@dataclass(frozen=True)
class Truss:
    """
    Rigid box truss with four parallel chords.

    Parameters:
    -----------
    length : float
        Overall length L (m); points are clamped to local x in [-L/2, L/2]
    height : float
        Chord spacing H (m)
    width : float
        Chord spacing W (m)
    weight_per_meter : float
        Self-weight (kg/m)
    """
    length: float
    height: float
    width: float
    weight_per_meter: float = 0.0

    def __post_init__(self):
        if self.length <= 0.0:
            raise ValueError(f"length must be positive, got {self.length}")
        if self.height < 0.0 or self.width < 0.0:
            raise ValueError(f"height/width must be non-negative, got {self.height}, {self.width}")

    @classmethod
    def from_profile(cls, profile: TrussProfile) -> "Truss":
        return cls(
            length=profile.length,
            height=profile.height,
            width=profile.width,
            weight_per_meter=profile.weight_per_meter,
        )

    @property
    def half_length(self) -> float:
        return self.length / 2.0

    @property
    def self_weight(self) -> float:
        """Truss mass (kg)."""
        return self.length * self.weight_per_meter

    @property
    def chord_offsets(self) -> List[Tuple[float, float]]:
        h = self.height / 2.0
        w = self.width / 2.0
        return [(h, w), (h, -w), (-h, w), (-h, -w)]

    def chord_offset(self, index: int) -> Tuple[float, float]:
        """Local (y, z) of a chord."""
        if not isinstance(index, (int, np.integer)) or isinstance(index, bool) \
                or not 0 <= index < CHORD_COUNT:
            raise ValueError(f"chord index must be 0..{CHORD_COUNT - 1}, got {index!r}")
        return self.chord_offsets[index]

    def clamp_x(self, x: float) -> float:
        return float(np.clip(x, -self.half_length, self.half_length))


class RopeLine:
    """
    Line resource owned by an attachment or load point.

    The owning point acquires it on creation; the registry releases it when
    the point is removed. A released line refuses further updates.
    """

    def __init__(self, state: LineState = LineState.DISCONNECTED):
        self.start = np.zeros(3)
        self.end = np.zeros(3)
        self.state = state
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    @property
    def color(self) -> int:
        return LINE_COLORS[self.state]

    def update(self, start, end, state: Optional[LineState] = None) -> None:
        if self._released:
            raise ResourceReleasedError("rope line has been released")
        self.start = np.array(start, dtype=float)
        self.end = np.array(end, dtype=float)
        if state is not None:
            self.state = state

    def collapse(self, at, state: LineState = LineState.DISCONNECTED) -> None:
        """Zero-length line at a single point."""
        self.update(at, at, state)

    def set_state(self, state: LineState) -> None:
        if self._released:
            raise ResourceReleasedError("rope line has been released")
        self.state = state

    def release(self) -> None:
        self._released = True

    def __repr__(self) -> str:
        return f"RopeLine(state={self.state.value}, released={self._released})"


@dataclass
class AttachPayload:
    chord: int
    anchor_id: Optional[int] = None
    line: RopeLine = field(default_factory=RopeLine)


@dataclass
class LoadPayload:
    line: RopeLine = field(default_factory=lambda: RopeLine(LineState.LOAD))


@dataclass
class Point:
    """
    A point of the rig.

    Parameters:
    -----------
    id : int
        Stable identifier, unique for the lifetime of the registry
    role : PointRole
        Tag selecting the payload type
    name : str
        Display name ("Attach point 2")
    position : np.ndarray
        World position (m)
    payload : AttachPayload | LoadPayload | None
        Role-specific data (None for ceiling anchors)
    """
    id: int
    role: PointRole
    name: str
    position: np.ndarray
    payload: Union[AttachPayload, LoadPayload, None] = None

    @property
    def chord(self) -> Optional[int]:
        if self.role is PointRole.ATTACH:
            return self.payload.chord
        return None

    @property
    def anchor_id(self) -> Optional[int]:
        if self.role is PointRole.ATTACH:
            return self.payload.anchor_id
        return None

    @property
    def line(self) -> Optional[RopeLine]:
        if self.payload is None:
            return None
        return self.payload.line

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role.value,
            "name": self.name,
            "position": [float(v) for v in self.position],
            "chord": self.chord,
            "anchor_id": self.anchor_id,
        }
