# mini_rig/registry.py
"""
POINT REGISTRY: Arena of Live Points
====================================

Points are stored in an arena keyed by integer id. Ids come from a
monotonic counter and are never reused, not even after clear(), so a stale
id held by a caller can never silently address a different point.

Each role keeps its own ordered id list. Order matters:
- nearest-anchor ties are broken by first-encountered anchor
- the free truss pose is oriented from the FIRST to the LAST attach point
- remove_last(role) pops the newest point of a role

Removing a point releases its rope line synchronously. Removing an anchor
clears every attachment point reference to it, so surviving points never
hold a dangling anchor id.
"""

import itertools
from typing import Dict, Iterator, List, Optional

import numpy as np

from .errors import UnknownPointError
from .model import AttachPayload, LoadPayload, Point, PointRole

ROLE_LABELS = {
    PointRole.CEILING_ANCHOR: "Ceiling anchor",
    PointRole.ATTACH: "Attach point",
    PointRole.LOAD: "Load point",
}


class PointRegistry:
    """Owning collections of anchors, attachment points and load points."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._points: Dict[int, Point] = {}
        self._order: Dict[PointRole, List[int]] = {role: [] for role in PointRole}

    def add(self, role: PointRole, position: np.ndarray,
            payload=None, name: Optional[str] = None) -> Point:
        """Create a point and return it. Names count per role, like "Load point 2"."""
        if role is PointRole.ATTACH and not isinstance(payload, AttachPayload):
            raise TypeError("attach points need an AttachPayload")
        if role is PointRole.LOAD and not isinstance(payload, LoadPayload):
            raise TypeError("load points need a LoadPayload")
        if role is PointRole.CEILING_ANCHOR and payload is not None:
            raise TypeError("ceiling anchors carry no payload")

        point_id = next(self._ids)
        if name is None:
            name = f"{ROLE_LABELS[role]} {len(self._order[role]) + 1}"
        point = Point(
            id=point_id,
            role=role,
            name=name,
            position=np.array(position, dtype=float),
            payload=payload,
        )
        self._points[point_id] = point
        self._order[role].append(point_id)
        return point

    def get(self, point_id: int) -> Point:
        try:
            return self._points[point_id]
        except (KeyError, TypeError):
            raise UnknownPointError(f"No live point with id {point_id!r}") from None

    def is_live(self, point_id) -> bool:
        try:
            return point_id in self._points
        except TypeError:
            return False

    def remove(self, point_id: int) -> List[int]:
        """
        Remove a point and release its line.

        Returns:
        --------
        List[int]
            Ids of attachment points whose anchor reference was cleared
            (non-empty only when an anchor is removed)
        """
        point = self.get(point_id)
        del self._points[point_id]
        self._order[point.role].remove(point_id)
        if point.line is not None:
            point.line.release()

        cleared = []
        if point.role is PointRole.CEILING_ANCHOR:
            for attach in self.attach_points:
                if attach.payload.anchor_id == point_id:
                    attach.payload.anchor_id = None
                    cleared.append(attach.id)
        return cleared

    def last(self, role: PointRole) -> Optional[int]:
        ids = self._order[role]
        return ids[-1] if ids else None

    def of_role(self, role: PointRole) -> List[Point]:
        return [self._points[i] for i in self._order[role]]

    @property
    def anchors(self) -> List[Point]:
        return self.of_role(PointRole.CEILING_ANCHOR)

    @property
    def attach_points(self) -> List[Point]:
        return self.of_role(PointRole.ATTACH)

    @property
    def load_points(self) -> List[Point]:
        return self.of_role(PointRole.LOAD)

    def clear(self) -> None:
        """Remove every point. The id counter keeps running."""
        for point in self._points.values():
            if point.line is not None:
                point.line.release()
        self._points.clear()
        for ids in self._order.values():
            ids.clear()

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, point_id) -> bool:
        return self.is_live(point_id)

    def __iter__(self) -> Iterator[Point]:
        """Anchors, then attachment points, then load points."""
        for role in PointRole:
            for point_id in self._order[role]:
                yield self._points[point_id]
