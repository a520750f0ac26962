# tests/test_connectivity.py
"""
Rope routing (nearest / explicit) and load point hangers.
"""

import numpy as np
import pytest

from mini_rig.connectivity import ConnectivityMode, load_hangers, nearest_anchor, resolve
from mini_rig.model import AttachPayload, LoadPayload, PointRole
from mini_rig.registry import PointRegistry


@pytest.fixture
def registry():
    reg = PointRegistry()
    reg.add(PointRole.CEILING_ANCHOR, [0.0, 4.0, 0.0])                                    # 1
    reg.add(PointRole.CEILING_ANCHOR, [2.0, 4.0, 0.0])                                    # 2
    reg.add(PointRole.ATTACH, [-0.75, 2.145, 0.145], AttachPayload(chord=0, anchor_id=1))  # 3
    reg.add(PointRole.ATTACH, [0.75, 2.145, -0.145], AttachPayload(chord=1, anchor_id=2))  # 4
    reg.add(PointRole.LOAD, [0.0, 1.5, 0.0], LoadPayload())                                # 5
    return reg


def test_nearest_mode_routes_to_closest_anchor(registry):
    mapping = resolve(registry.attach_points, registry.anchors, ConnectivityMode.NEAREST)
    # Both attach points are closer to the anchor at the origin
    assert mapping == {3: 1, 4: 1}


def test_explicit_mode_uses_stored_anchor(registry):
    mapping = resolve(registry.attach_points, registry.anchors, ConnectivityMode.EXPLICIT)
    assert mapping == {3: 1, 4: 2}


def test_explicit_mode_drops_dead_reference(registry):
    registry.remove(2)
    mapping = resolve(registry.attach_points, registry.anchors, "explicit")
    assert mapping == {3: 1, 4: None}


def test_no_anchors_means_unconnected(registry):
    registry.remove(1)
    registry.remove(2)
    assert resolve(registry.attach_points, registry.anchors) == {3: None, 4: None}


def test_nearest_tie_goes_to_first_anchor():
    reg = PointRegistry()
    reg.add(PointRole.CEILING_ANCHOR, [-1.0, 4.0, 0.0])
    reg.add(PointRole.CEILING_ANCHOR, [1.0, 4.0, 0.0])
    closest = nearest_anchor(np.array([0.0, 2.0, 0.0]), reg.anchors)
    assert closest.id == 1
    assert nearest_anchor(np.zeros(3), []) is None


def test_load_hanger_overhead_and_nearest_attach(registry):
    hangers = load_hangers(registry.load_points, registry.attach_points, offset_y=-0.5)
    assert len(hangers) == 1
    h = hangers[0]
    assert h.load_id == 5
    np.testing.assert_allclose(h.overhead, [0.0, 2.0, 0.0])
    # Equidistant: first attach point wins
    assert h.nearest_attach_id == 3


def test_load_hanger_without_attach_points():
    reg = PointRegistry()
    reg.add(PointRole.LOAD, [0.4, 1.5, 0.0], LoadPayload())
    h = load_hangers(reg.load_points, reg.attach_points, offset_y=-0.5)[0]
    assert h.nearest_attach_id is None
    np.testing.assert_allclose(h.overhead, [0.4, 2.0, 0.0])
