# mini_rig - Truss rigging: point constraints and rope load distribution
"""
MINI-RIG: An Interactive Truss Rigging Engine
=============================================

A horizontal box truss hangs from ceiling anchors by ropes and carries a
load. Users place and drag three kinds of points; after every change the
engine re-projects the points onto the truss, routes the ropes and
recomputes the rope tensions.

ARCHITECTURE:
-------------
    kernel/         Pose and rotation math (local <-> world frames)
    catalog.py      Truss profiles (F34 family)
    model.py        Truss, Point (tagged by role), RopeLine
    registry.py     Arena of live points with stable ids
    constraints.py  Truss constraint solver (projection + pose policies)
    connectivity.py Rope routing (nearest / explicit anchors)
    loads.py        Total vertical force and its distribution over ropes
    bridle.py       Two-leg bridle readout
    rig.py          Facade: mutations + full recompute pass
    report.py       pandas / text / CSV readouts
    config.py       Engine defaults
    errors.py       Exceptions and recompute warnings
"""

from .catalog import DEFAULT_PROFILE, TRUSS_PROFILES, TrussProfile, get_profile
from .config import CONFIG, RigConfig
from .connectivity import ConnectivityMode
from .constraints import PosePolicy, TrussConstraintSolver
from .errors import (
    InvalidInputError,
    RigError,
    RigWarning,
    RoleError,
    UnknownPointError,
    WarningKind,
)
from .kernel import TrussPose
from .loads import DistributionStatus, Severity, distribute, total_vertical_force
from .model import LineState, PointRole, Truss
from .rig import RecomputeResult, Rig, RopeReading

__version__ = "0.1.0"

__all__ = [
    'CONFIG',
    'DEFAULT_PROFILE',
    'TRUSS_PROFILES',
    'ConnectivityMode',
    'DistributionStatus',
    'InvalidInputError',
    'LineState',
    'PointRole',
    'PosePolicy',
    'RecomputeResult',
    'Rig',
    'RigConfig',
    'RigError',
    'RigWarning',
    'RoleError',
    'RopeReading',
    'Severity',
    'Truss',
    'TrussConstraintSolver',
    'TrussPose',
    'TrussProfile',
    'UnknownPointError',
    'WarningKind',
    'distribute',
    'get_profile',
    'total_vertical_force',
]
