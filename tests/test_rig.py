# tests/test_rig.py
"""
RIG FACADE TESTS
================

End-to-end behaviour of the engine: default layout, point lifecycle, edits,
rope routing and the load case warnings. Every mutation recomputes, so each
test reads `rig.last_result` directly.
"""

import numpy as np
import pytest

from mini_rig import Rig
from mini_rig.errors import InvalidInputError, RoleError, UnknownPointError, WarningKind
from mini_rig.loads import DistributionStatus, Severity
from mini_rig.model import LineState, PointRole

F = (100.0 + 30.0) * 9.81

DEFAULT_POSITIONS = [
    [0.0, 4.0, 0.0],
    [2.0, 4.0, 0.0],
    [-0.75, 2.145, 0.145],
    [0.75, 2.145, -0.145],
    [0.0, 1.5, 0.0],
]


def empty_rig(**kwargs):
    return Rig(populate=False, **kwargs)


class TestDefaultLayout:

    def test_points(self):
        rig = Rig()
        anchors = rig.points(PointRole.CEILING_ANCHOR)
        attach = rig.points(PointRole.ATTACH)
        loads = rig.points(PointRole.LOAD)

        assert [a.id for a in anchors] == [1, 2]
        np.testing.assert_allclose(anchors[0].position, [0.0, 4.0, 0.0])
        np.testing.assert_allclose(anchors[1].position, [2.0, 4.0, 0.0])
        np.testing.assert_allclose(attach[0].position, [-0.75, 2.145, 0.145])
        np.testing.assert_allclose(attach[1].position, [0.75, 2.145, -0.145])
        assert [t.chord for t in attach] == [0, 1]
        np.testing.assert_allclose(loads[0].position, [0.0, 1.5, 0.0])

    def test_nearest_routing_and_tensions(self):
        """
        Both attach points are closer to the anchor at the origin, so the two
        ropes are mirror images and share the load equally.
        """
        result = Rig().last_result
        assert result.status is DistributionStatus.OK
        assert result.total_load == pytest.approx(1275.3)
        assert result.warnings == []

        r1, r2 = result.ropes
        assert r1.anchor_id == r2.anchor_id == 1
        cos_a = 1.855 / np.linalg.norm([0.75, 1.855, 0.145])
        assert r1.tension == pytest.approx(F / (2.0 * cos_a))
        assert r2.tension == pytest.approx(r1.tension)
        assert r1.severity is Severity.NOMINAL
        assert r1.angle_deg == pytest.approx(np.degrees(np.arccos(cos_a)))
        print(f"✓ Default rope tension: {r1.tension:.2f} N at {r1.angle_deg:.2f}°")

    def test_explicit_routing(self):
        result = Rig(connectivity="explicit").last_result
        r1, r2 = result.ropes
        assert (r1.anchor_id, r2.anchor_id) == (1, 2)
        assert r2.angle_deg > r1.angle_deg
        vertical = sum(r.tension * np.cos(r.angle) for r in result.ropes)
        assert vertical == pytest.approx(F)

    def test_load_hanger(self):
        result = Rig().last_result
        (hanger,) = result.load_hangers
        np.testing.assert_allclose(hanger.overhead, [0.0, 2.0, 0.0])
        lp = Rig().points(PointRole.LOAD)[0]
        assert lp.line.state is LineState.LOAD


class TestLifecycle:

    def test_add_by_local_x_alternates_chords(self):
        rig = Rig()
        t3 = rig.add_point(PointRole.ATTACH, 1.2)
        t4 = rig.add_point("attach", -5.0)
        assert rig.point(t3).chord == 0
        assert rig.point(t4).chord == 1
        # Clamped to the truss end
        np.testing.assert_allclose(rig.point(t4).position, [-1.5, 2.145, -0.145])

    def test_add_anchor_by_world_x(self):
        rig = Rig()
        a = rig.add_point(PointRole.CEILING_ANCHOR, -2.0)
        np.testing.assert_allclose(rig.point(a).position, [-2.0, 4.0, 0.0])

    def test_add_projects_world_position(self):
        rig = Rig()
        lp = rig.add_point(PointRole.LOAD, [0.4, 0.0, 1.0])
        np.testing.assert_allclose(rig.point(lp).position, [0.4, 1.5, 0.0])
        assert rig.point(lp).name == "Load point 2"

    def test_add_with_invalid_position_uses_default_slot(self):
        rig = Rig()
        t = rig.add_point(PointRole.ATTACH, float("nan"))
        np.testing.assert_allclose(rig.point(t).position, [0.0, 2.145, 0.145])
        (warning,) = rig.last_result.warnings_of(WarningKind.INVALID_INPUT)
        assert warning.point_id == t

        lp = rig.add_point(PointRole.LOAD, [np.inf, 0.0, 0.0])
        np.testing.assert_allclose(rig.point(lp).position, [0.0, 1.5, 0.0])
        a = rig.add_point(PointRole.CEILING_ANCHOR, "abc")
        np.testing.assert_allclose(rig.point(a).position, [0.0, 4.0, 0.0])
        assert rig.last_result.warnings_of(WarningKind.INVALID_INPUT)[0].point_id == a

    def test_add_rejects_misplaced_fields(self):
        rig = Rig()
        with pytest.raises(RoleError):
            rig.add_point(PointRole.LOAD, 0.0, chord=1)
        with pytest.raises(RoleError):
            rig.add_point(PointRole.CEILING_ANCHOR, 0.0, anchor_id=1)
        with pytest.raises(InvalidInputError):
            rig.add_point(PointRole.ATTACH, 0.0, chord=7)
        with pytest.raises(RoleError):
            rig.add_point(PointRole.ATTACH, 0.0, anchor_id=3)  # 3 is an attach point
        with pytest.raises(UnknownPointError):
            rig.add_point(PointRole.ATTACH, 0.0, anchor_id=99)

    def test_remove_point_and_unknown_id(self):
        rig = Rig()
        rig.remove_point(5)
        assert rig.points(PointRole.LOAD) == []
        assert rig.last_result.load_hangers == []
        with pytest.raises(UnknownPointError):
            rig.remove_point(5)
        with pytest.raises(UnknownPointError):
            rig.set_position(5, [0.0, 0.0, 0.0])

    def test_remove_last(self):
        rig = Rig()
        assert rig.remove_last(PointRole.ATTACH) == 4
        assert rig.remove_last(PointRole.ATTACH) == 3
        assert rig.remove_last(PointRole.ATTACH) is None
        result = rig.last_result
        assert result.status is DistributionStatus.NO_ACTIVE_ROPES
        assert result.warnings_of(WarningKind.NO_ACTIVE_ROPES)

    def test_reset_restores_layout_and_keeps_mass(self):
        rig = Rig()
        rig.set_load_mass(250)
        rig.add_point(PointRole.ATTACH, 1.0)
        rig.set_position(1, [-3.0, 5.0, 1.0])
        rig.set_position(2, [4.0, 3.0, -2.0])
        rig.set_chord(3, 3)
        rig.set_position(4, [1.4, 0.0, 0.0])
        rig.set_position(5, [-1.0, 0.0, 0.0])
        result = rig.reset()

        assert [p.id for p in rig.points()] == [7, 8, 9, 10, 11]
        assert rig.load_mass == 250.0
        for p, expected in zip(rig.points(), DEFAULT_POSITIONS):
            np.testing.assert_allclose(p.position, expected, atol=1e-12)
        assert [p.chord for p in rig.points(PointRole.ATTACH)] == [0, 1]
        assert result.total_load == pytest.approx((250.0 + 30.0) * 9.81)
        with pytest.raises(UnknownPointError):
            rig.point(1)


class TestEdits:

    def test_set_position_snaps_attach_point(self):
        rig = Rig()
        applied = rig.set_position(3, [0.4, 3.0, 2.0])
        np.testing.assert_allclose(applied, [0.4, 2.145, 0.145])
        assert rig.last_result.point(3).local_x == pytest.approx(0.4)

    def test_set_position_moves_anchor_freely(self):
        rig = Rig()
        applied = rig.set_position(2, [5.0, 6.0, -1.0])
        np.testing.assert_allclose(applied, [5.0, 6.0, -1.0])

    def test_invalid_position_keeps_previous(self):
        rig = Rig()
        before = rig.point(3).position.copy()
        applied = rig.set_position(3, [np.nan, 1.0, 0.0])
        np.testing.assert_allclose(applied, before)
        (warning,) = rig.last_result.warnings_of(WarningKind.INVALID_INPUT)
        assert warning.point_id == 3
        # Reported once, not carried into the next pass
        rig.recompute()
        assert rig.last_result.warnings_of(WarningKind.INVALID_INPUT) == []

    def test_set_coordinate(self):
        rig = Rig()
        applied = rig.set_coordinate(3, "x", "0.25")
        np.testing.assert_allclose(applied, [0.25, 2.145, 0.145])
        # Y is constrained for attach points
        applied = rig.set_coordinate(3, "y", 10)
        np.testing.assert_allclose(applied, [0.25, 2.145, 0.145])

        applied = rig.set_coordinate(3, "x", "abc")
        np.testing.assert_allclose(applied, [0.25, 2.145, 0.145])
        assert rig.last_result.warnings_of(WarningKind.INVALID_INPUT)

        with pytest.raises(InvalidInputError):
            rig.set_coordinate(3, "w", 1.0)

    def test_set_chord_keeps_place_along_truss(self):
        rig = Rig()
        applied = rig.set_chord(3, 3)
        np.testing.assert_allclose(applied, [-0.75, 1.855, -0.145])
        assert rig.point(3).chord == 3
        with pytest.raises(InvalidInputError):
            rig.set_chord(3, 4)
        with pytest.raises(RoleError):
            rig.set_chord(1, 0)

    def test_set_load_mass(self):
        rig = Rig()
        assert rig.set_load_mass("200") == 200.0
        assert rig.last_result.total_load == pytest.approx(230.0 * 9.81)

        for bad in ["", "heavy", -5, float("nan"), None]:
            assert rig.set_load_mass(bad) == 200.0
            assert rig.last_result.warnings_of(WarningKind.INVALID_INPUT)

    def test_zero_mass_still_carries_truss(self):
        rig = Rig()
        rig.set_load_mass(0)
        assert rig.last_result.total_load == pytest.approx(294.3)


class TestRouting:

    def test_removing_anchor_disconnects_rope(self):
        rig = Rig(connectivity="explicit")
        rig.remove_point(2)
        result = rig.last_result
        r2 = result.rope(4)
        assert not r2.connected
        assert r2.tension is None
        assert rig.point(4).anchor_id is None
        assert rig.point(4).line.state is LineState.DISCONNECTED
        (warning,) = result.warnings_of(WarningKind.UNCONNECTED_ROPE)
        assert warning.point_id == 4
        # Remaining rope carries everything
        assert result.rope(3).tension * np.cos(result.rope(3).angle) == pytest.approx(F)

    def test_set_connected_anchor(self):
        rig = Rig(connectivity="explicit")
        rig.set_connected_anchor(4, 1)
        assert rig.last_result.rope(4).anchor_id == 1
        rig.set_connected_anchor(4, None)
        assert not rig.last_result.rope(4).connected
        with pytest.raises(RoleError):
            rig.set_connected_anchor(4, 3)
        with pytest.raises(RoleError):
            rig.set_connected_anchor(1, 2)

    def test_nearest_routing_overrides_assignment(self):
        rig = Rig()
        rig.set_connected_anchor(4, 2)
        assert rig.last_result.rope(4).anchor_id == 1

    def test_nearest_routing_follows_anchor(self):
        rig = Rig()
        rig.set_position(2, [0.75, 4.0, -0.145])
        result = rig.last_result
        assert result.rope(4).anchor_id == 2
        assert result.rope(4).angle_deg == pytest.approx(0.0)


class TestLoadCases:

    def test_single_vertical_rope(self):
        rig = empty_rig()
        rig.add_point(PointRole.CEILING_ANCHOR, [0.0, 4.0, 0.145])
        t = rig.add_point(PointRole.ATTACH, 0.0, chord=0)
        reading = rig.last_result.rope(t)
        assert reading.tension == pytest.approx(F)
        assert reading.length == pytest.approx(1.855)

    def test_indeterminate(self):
        rig = empty_rig()
        rig.add_point(PointRole.CEILING_ANCHOR, [-3.0, 2.145, 0.145])
        t = rig.add_point(PointRole.ATTACH, -1.0, chord=0)
        result = rig.last_result
        assert result.status is DistributionStatus.INDETERMINATE
        assert result.rope(t).tension is None
        assert result.rope(t).severity is Severity.CRITICAL
        assert rig.point(t).line.state is LineState.CRITICAL
        assert result.warnings_of(WarningKind.INDETERMINATE_LOAD_CASE)

    def test_unbounded_horizontal_rope(self):
        rig = empty_rig(connectivity="explicit")
        a1 = rig.add_point(PointRole.CEILING_ANCHOR, [-1.0, 4.0, 0.145])
        a2 = rig.add_point(PointRole.CEILING_ANCHOR, [3.0, 2.145, 0.145])
        t1 = rig.add_point(PointRole.ATTACH, -1.0, chord=0, anchor_id=a1)
        t2 = rig.add_point(PointRole.ATTACH, 1.0, chord=0, anchor_id=a2)
        result = rig.last_result

        assert result.status is DistributionStatus.OK
        assert result.rope(t1).tension == pytest.approx(F)
        assert result.rope(t2).unbounded
        (warning,) = result.warnings_of(WarningKind.UNBOUNDED_TENSION)
        assert warning.point_id == t2

    def test_severity_line_states(self):
        rig = empty_rig()
        rig.add_point(PointRole.CEILING_ANCHOR, [1.0, 4.0, 0.145])
        t = rig.add_point(PointRole.ATTACH, 0.0, chord=0)
        assert rig.last_result.rope(t).severity is Severity.NOMINAL
        rig.set_position(1, [2.5, 4.0, 0.145])
        assert rig.last_result.rope(t).severity is Severity.CAUTION
        assert rig.point(t).line.state is LineState.CAUTION
        rig.set_position(1, [4.0, 4.0, 0.145])
        assert rig.last_result.rope(t).severity is Severity.CRITICAL

    def test_coincident_anchor_is_degenerate(self):
        rig = empty_rig()
        t = rig.add_point(PointRole.ATTACH, 0.0, chord=0)
        rig.add_point(PointRole.CEILING_ANCHOR, rig.point(t).position.tolist())
        result = rig.last_result
        assert result.warnings_of(WarningKind.DEGENERATE_GEOMETRY)
        assert result.status is DistributionStatus.INDETERMINATE
        assert result.rope(t).angle_deg == pytest.approx(90.0)


class TestFreePose:

    def test_dragging_past_last_attach_point_turns_truss(self):
        rig = Rig(pose_policy="free")
        applied = rig.set_position(3, [1.2, 2.145, 0.145])
        np.testing.assert_allclose(rig.pose.axis, [-1.0, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(applied, [1.2, 2.145, -0.145], atol=1e-12)

    def test_same_edit_twice_is_idempotent(self):
        rig = Rig(pose_policy="free")
        first = rig.set_position(4, [0.5, 3.0, 1.0])
        np.testing.assert_allclose(first, [0.5, 2.145, -0.145], atol=1e-12)
        second = rig.set_position(4, [0.5, 3.0, 1.0])
        np.testing.assert_allclose(second, first, atol=1e-12)

    @pytest.mark.parametrize("point_id, desired, applied, centre, axis", [
        # Last attach point dragged far out: stops where it sits on the new truss end
        (4, [5.0, 2.145, -0.145], [2.25, 2.145, -0.145], [0.75, 2.0, 0.0], [1.0, 0.0, 0.0]),
        # First attach point dragged past the last: truss turns, then the same limit applies
        (3, [5.0, 2.145, 0.145], [3.75, 2.145, -0.145], [2.25, 2.0, 0.0], [-1.0, 0.0, 0.0]),
    ])
    def test_clamped_edit_twice_is_idempotent(self, point_id, desired, applied, centre, axis):
        """
        WHAT IS THIS TEST?
        ==================
        The truss re-centres after every move, so a move that hits the end of
        the truss must be limited against the pose it produces. Otherwise the
        truss creeps further along with every repeated identical edit.
        """
        rig = Rig(pose_policy="free")
        first = rig.set_position(point_id, desired)
        np.testing.assert_allclose(first, applied, atol=1e-12)
        np.testing.assert_allclose(rig.pose.position, centre, atol=1e-12)
        np.testing.assert_allclose(rig.pose.axis, axis, atol=1e-12)

        for _ in range(3):
            again = rig.set_position(point_id, desired)
            np.testing.assert_allclose(again, first, atol=1e-12)
            np.testing.assert_allclose(rig.pose.position, centre, atol=1e-12)
        for p in rig.points():
            assert rig.solver.constraint_residual(p) < 1e-9

    def test_lone_attach_point_carries_truss(self):
        rig = empty_rig(pose_policy="free")
        t = rig.add_point(PointRole.ATTACH, 0.0, chord=0)
        first = rig.set_position(t, [5.0, 2.145, 0.145])
        np.testing.assert_allclose(first, [5.0, 2.145, 0.145], atol=1e-12)
        np.testing.assert_allclose(rig.pose.position, [5.0, 2.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(rig.set_position(t, [5.0, 2.145, 0.145]), first, atol=1e-12)

    def test_coincident_attach_points_warn(self):
        rig = Rig(pose_policy="free")
        rig.set_position(3, [0.75, 2.145, 0.145])
        assert rig.last_result.warnings_of(WarningKind.DEGENERATE_GEOMETRY)
        assert np.all(np.isfinite(rig.pose.position))

    def test_reset_restores_default_pose(self):
        rig = Rig(pose_policy="free")
        rig.set_position(3, [1.2, 2.145, 0.145])
        rig.set_position(1, [-1.0, 3.0, 0.5])
        assert rig.pose.axis[0] < 0.0
        rig.reset()
        np.testing.assert_allclose(rig.pose.rotation, np.eye(3), atol=1e-12)
        np.testing.assert_allclose(rig.pose.position, [0.0, 2.0, 0.0], atol=1e-12)
        for p, expected in zip(rig.points(), DEFAULT_POSITIONS):
            np.testing.assert_allclose(p.position, expected, atol=1e-12)


def test_bridle_readout():
    rig = empty_rig()
    a = rig.add_point(PointRole.CEILING_ANCHOR, [-1.0, 4.0, 0.0])
    b = rig.add_point(PointRole.CEILING_ANCHOR, [1.0, 4.0, 0.0])
    t = rig.add_point(PointRole.ATTACH, 0.0, chord=0)
    geometry = rig.bridle(a, b, t)
    assert geometry.length_a == pytest.approx(geometry.length_b)
    with pytest.raises(RoleError):
        rig.bridle(a, t, t)
