# mini_rig/connectivity.py
"""Rope routing: which ceiling anchor each attachment point hangs from."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import numpy as np

from .model import Point


class ConnectivityMode(Enum):
    NEAREST = "nearest"     # closest anchor, recomputed every pass
    EXPLICIT = "explicit"   # anchor chosen by the user, stored on the attach point


def nearest_point(position: np.ndarray, candidates: List[Point]) -> Optional[Point]:
    """
    Point closest to `position` (Euclidean).

    Ties go to the first candidate in registry order. Returns None when
    there are no candidates.
    """
    closest = None
    min_dist = np.inf
    for candidate in candidates:
        dist = np.linalg.norm(candidate.position - position)
        if dist < min_dist:
            min_dist = dist
            closest = candidate
    return closest


def nearest_anchor(position: np.ndarray, anchors: List[Point]) -> Optional[Point]:
    return nearest_point(position, anchors)


def resolve(attach_points: List[Point], anchors: List[Point],
            mode: ConnectivityMode = ConnectivityMode.NEAREST) -> Dict[int, Optional[int]]:
    """
    Map every attachment point id to an anchor id (or None).

    In EXPLICIT mode the stored anchor id is dereferenced; an id that no
    longer names a live anchor resolves to None.
    """
    mode = ConnectivityMode(mode)
    live = {a.id for a in anchors}
    mapping: Dict[int, Optional[int]] = {}
    for attach in attach_points:
        if mode is ConnectivityMode.NEAREST:
            anchor = nearest_anchor(attach.position, anchors)
            mapping[attach.id] = anchor.id if anchor is not None else None
        else:
            ref = attach.anchor_id
            mapping[attach.id] = ref if ref in live else None
    return mapping


@dataclass(frozen=True)
class LoadHanger:
    """Where a load point hangs: its overhead point on the truss and the closest attach point."""
    load_id: int
    overhead: np.ndarray
    nearest_attach_id: Optional[int]


def load_hangers(load_points: List[Point], attach_points: List[Point],
                 offset_y: float) -> List[LoadHanger]:
    """Overhead truss point (load position minus the hang offset) per load point."""
    hangers = []
    for lp in load_points:
        overhead = lp.position - np.array([0.0, offset_y, 0.0])
        nearest = nearest_point(overhead, attach_points)
        hangers.append(LoadHanger(
            load_id=lp.id,
            overhead=overhead,
            nearest_attach_id=nearest.id if nearest is not None else None,
        ))
    return hangers
