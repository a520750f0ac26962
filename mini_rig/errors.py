# mini_rig/errors.py
"""Exceptions for caller misuse and warning records for recoverable geometry/input problems."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RigError(Exception):
    """Base class for rig engine errors."""
    pass


class UnknownPointError(RigError, KeyError):
    """Raised when an identifier does not name a live point."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class RoleError(RigError, ValueError):
    """Raised when an operation is applied to a point of the wrong role."""
    pass


class InvalidInputError(RigError, ValueError):
    """Raised when a coordinate or mass cannot be interpreted as a finite number."""
    pass


class ResourceReleasedError(RigError, RuntimeError):
    """Raised when a released rope line is updated."""
    pass


class WarningKind(Enum):
    """Recoverable problems reported by a recompute pass."""
    INVALID_INPUT = "invalid_input"
    DEGENERATE_GEOMETRY = "degenerate_geometry"
    UNCONNECTED_ROPE = "unconnected_rope"
    INDETERMINATE_LOAD_CASE = "indeterminate_load_case"
    UNBOUNDED_TENSION = "unbounded_tension"
    NO_ACTIVE_ROPES = "no_active_ropes"


@dataclass(frozen=True)
class RigWarning:
    """A warning attached to a recompute result, optionally tied to one point."""
    kind: WarningKind
    message: str
    point_id: Optional[int] = None

    def as_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message, "point_id": self.point_id}
