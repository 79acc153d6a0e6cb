"""Tests for SelfTransition loops, EntryMarker arrows and the PendingEdge preview."""
from __future__ import annotations

import math

import pytest
from PyQt6.QtCore import QPointF

from geometry import distance
from models import GeometryKind
from diagram.edges import EntryMarker, PendingEdge, SelfTransition
from diagram.node import Node

R = 30.0


def _at_degrees(node: Node, degrees: float, dist: float = 50.0):
    a = math.radians(degrees)
    return node.x + dist * math.cos(a), node.y + dist * math.sin(a)


# ═══════════════════════════════════════════════════════════
# SelfTransition
# ═══════════════════════════════════════════════════════════

class TestSelfTransitionAngle:

    def test_snaps_to_quarter_turn(self):
        node = Node(100, 100)
        loop = SelfTransition(node, anchor_angle=math.radians(47))
        loop.set_anchor_angle(*_at_degrees(node, 92))
        assert loop.anchor_angle == pytest.approx(math.pi / 2)

    def test_no_snap_outside_tolerance(self):
        node = Node(100, 100)
        loop = SelfTransition(node)
        loop.set_anchor_angle(*_at_degrees(node, 60))
        assert loop.anchor_angle == pytest.approx(math.radians(60))

    def test_wraps_into_range(self):
        node = Node(0, 0)
        loop = SelfTransition(node)
        loop.set_anchor_angle(*_at_degrees(node, 179), grab_offset=math.radians(20))
        assert loop.anchor_angle == pytest.approx(math.radians(199 - 360))
        assert -math.pi <= loop.anchor_angle <= math.pi

    def test_grab_offset_keeps_loop_still(self):
        node = Node(0, 0)
        loop = SelfTransition(node, anchor_angle=math.radians(30))
        x, y = _at_degrees(node, 60)
        grab = loop.begin_drag(x, y)
        loop.set_anchor_angle(x, y, grab)
        assert loop.anchor_angle == pytest.approx(math.radians(30))


class TestSelfTransitionGeometry:

    def test_loop_circle_outside_node(self):
        loop = SelfTransition(Node(0, 0), anchor_angle=0.0)
        geom = loop.derive_geometry()
        assert geom.kind == GeometryKind.ARC
        assert not geom.is_reversed
        assert geom.circle.x == pytest.approx(1.5 * R)
        assert geom.circle.y == pytest.approx(0)
        assert geom.circle.radius == pytest.approx(0.75 * R)
        assert geom.start_angle == pytest.approx(-0.8 * math.pi)
        assert geom.end_angle == pytest.approx(0.8 * math.pi)

    def test_contains_is_radial_only(self):
        loop = SelfTransition(Node(0, 0), anchor_angle=0.0)
        c = loop.loop_circle()
        assert loop.contains_point(c.x + c.radius, c.y)
        assert loop.contains_point(c.x, c.y - c.radius - 3)
        assert not loop.contains_point(c.x, c.y)
        assert not loop.contains_point(c.x + c.radius + 12, c.y)

    def test_label_at_far_side(self):
        loop = SelfTransition(Node(0, 0), anchor_angle=math.pi / 2)
        anchor, angle = loop.label_placement()
        assert anchor.x() == pytest.approx(0)
        assert anchor.y() == pytest.approx(1.5 * R + 0.75 * R)
        assert angle == pytest.approx(math.pi / 2)

    def test_arrow_heading(self):
        loop = SelfTransition(Node(0, 0), anchor_angle=0.0)
        geom = loop.derive_geometry()
        assert loop.arrow_heading(geom) == pytest.approx(0.8 * math.pi + 0.4 * math.pi)

    def test_follows_node(self):
        node = Node(0, 0)
        loop = SelfTransition(node)
        node.move_by(100, 50)
        assert loop.loop_circle().x == pytest.approx(100 + 1.5 * R)
        assert loop.loop_circle().y == pytest.approx(50)


# ═══════════════════════════════════════════════════════════
# EntryMarker
# ═══════════════════════════════════════════════════════════

class TestEntryMarker:

    def test_offset_snaps_each_axis(self):
        marker = EntryMarker(Node(0, 0))
        marker.set_offset(-50, 3)
        assert (marker.delta_x, marker.delta_y) == (-50, 0)
        marker.set_offset(-4, -60)
        assert (marker.delta_x, marker.delta_y) == (0, -60)

    def test_no_snap_outside_padding(self):
        marker = EntryMarker(Node(10, 10))
        marker.set_offset(-40, 30)
        assert (marker.delta_x, marker.delta_y) == (-50, 20)

    def test_geometry_is_straight_to_boundary(self):
        marker = EntryMarker(Node(0, 0), delta_x=-50, delta_y=0)
        geom = marker.derive_geometry()
        assert geom.kind == GeometryKind.STRAIGHT
        assert (geom.start.x(), geom.start.y()) == (-50, 0)
        assert geom.end.x() == pytest.approx(-R)
        assert geom.end.y() == pytest.approx(0)

    def test_contains(self):
        marker = EntryMarker(Node(0, 0), delta_x=-50, delta_y=0)
        assert marker.contains_point(-40, 2)
        assert not marker.contains_point(-40, 12)
        assert not marker.contains_point(-60, 0)

    def test_heading_points_at_node(self):
        marker = EntryMarker(Node(0, 0), delta_x=0, delta_y=-80)
        geom = marker.derive_geometry()
        assert marker.arrow_heading(geom) == pytest.approx(math.pi / 2)

    def test_label_at_start_facing_away(self):
        marker = EntryMarker(Node(0, 0), delta_x=-50, delta_y=0)
        anchor, angle = marker.label_placement()
        assert (anchor.x(), anchor.y()) == (-50, 0)
        assert abs(angle) == pytest.approx(math.pi)

    def test_follows_node(self):
        node = Node(0, 0)
        marker = EntryMarker(node, delta_x=-50, delta_y=0)
        node.move_to(200, 200)
        geom = marker.derive_geometry()
        assert distance(geom.start, QPointF(150, 200)) == pytest.approx(0)


# ═══════════════════════════════════════════════════════════
# PendingEdge
# ═══════════════════════════════════════════════════════════

class TestPendingEdge:

    def test_straight_between_points(self):
        pending = PendingEdge(QPointF(0, 0), QPointF(30, 40))
        geom = pending.derive_geometry()
        assert geom.kind == GeometryKind.STRAIGHT
        assert distance(geom.start, geom.end) == pytest.approx(50)
        assert pending.arrow_heading(geom) == pytest.approx(math.atan2(40, 30))

    def test_has_no_text(self):
        assert not hasattr(PendingEdge(QPointF(), QPointF()), "text")
