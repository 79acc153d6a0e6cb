"""Tests for diagram/node.py: shape descriptors, containment and boundary points."""
from __future__ import annotations

import math

import pytest
from PyQt6.QtCore import QPointF

from geometry import closest_point_on_polygon_boundary, distance
from models import Shape
from diagram.node import Node, SHAPES, node_radius


R = 30.0


class TestDescriptorTable:

    def test_every_shape_has_descriptor(self):
        assert set(SHAPES) == set(Shape.ALL)

    @pytest.mark.parametrize("shape, sides", [
        (Shape.DOT, 0),
        (Shape.TRIANGLE, 3),
        (Shape.SQUARE, 4),
        (Shape.PENTAGON, 5),
        (Shape.HEXAGON, 6),
    ])
    def test_vertex_counts(self, shape, sides):
        assert len(Node(0, 0, shape=shape).vertices()) == sides

    def test_radius_from_settings(self, isolated_settings):
        assert node_radius() == R
        isolated_settings.settings.canvas.nodes.radius = 40.0
        assert Node(0, 0).boundary_point_towards(100, 0).x() == pytest.approx(40.0)

    def test_square_is_axis_aligned(self):
        xs = sorted({round(v.x(), 6) for v in Node(0, 0, shape=Shape.SQUARE).vertices()})
        ys = sorted({round(v.y(), 6) for v in Node(0, 0, shape=Shape.SQUARE).vertices()})
        assert xs == [pytest.approx(-0.85 * R), pytest.approx(0.85 * R)]
        assert ys == [pytest.approx(-0.85 * R), pytest.approx(0.85 * R)]

    def test_unknown_shape_falls_back_to_dot(self):
        assert Node(0, 0, shape="blob").descriptor is SHAPES[Shape.DOT]


class TestContainment:

    def test_dot_is_strict(self):
        n = Node(0, 0)
        assert n.contains_point(29.9, 0)
        assert not n.contains_point(30, 0)

    def test_triangle_barycentric(self):
        n = Node(0, 0, shape=Shape.TRIANGLE)
        assert n.contains_point(0, 0)
        assert n.contains_point(0, -29)
        # Bottom edge sits at y = 15
        assert not n.contains_point(0, 20)

    def test_square(self):
        n = Node(0, 0, shape=Shape.SQUARE)
        assert n.contains_point(25, 25)
        assert not n.contains_point(26, 0)

    def test_hexagon(self):
        n = Node(0, 0, shape=Shape.HEXAGON)
        assert n.contains_point(25, 0)
        assert not n.contains_point(29, 0)

    def test_pentagon(self):
        n = Node(100, 100, shape=Shape.PENTAGON)
        assert n.contains_point(100, 100)
        assert not n.contains_point(100, 131)


class TestBoundaryPoints:

    def test_dot_boundary_toward_target(self):
        p = Node(0, 0).boundary_point_towards(0, 100)
        assert p.x() == pytest.approx(0)
        assert p.y() == pytest.approx(R)

    def test_dot_boundary_target_at_center(self):
        p = Node(5, 5).boundary_point_towards(5, 5)
        assert (p.x(), p.y()) == (pytest.approx(5 + R), pytest.approx(5))

    @pytest.mark.parametrize("shape", [Shape.TRIANGLE, Shape.SQUARE, Shape.PENTAGON, Shape.HEXAGON])
    @pytest.mark.parametrize("angle", [0.0, 0.7, 2.0, -2.5])
    def test_polygon_boundary_lies_on_outline(self, shape, angle):
        n = Node(200, 100, shape=shape)
        target = QPointF(200 + 100 * math.cos(angle), 100 + 100 * math.sin(angle))
        p = n.boundary_point_towards(target.x(), target.y())
        on_outline = closest_point_on_polygon_boundary(p, n.vertices())
        assert distance(p, on_outline) < 1e-6

    @pytest.mark.parametrize("angle", [0.0, 1.0, 3.0, -1.2])
    def test_dot_boundary_lies_on_circle(self, angle):
        n = Node(-40, 60)
        p = n.boundary_point_towards(-40 + 80 * math.cos(angle), 60 + 80 * math.sin(angle))
        assert distance(n.center(), p) == pytest.approx(R)


class TestDragAndMove:

    def test_drag_keeps_grab_offset(self):
        n = Node(100, 100)
        grab = n.begin_drag(110, 95)
        n.drag_to(210, 150, grab)
        assert (n.x, n.y) == (200, 155)

    def test_move_by(self):
        n = Node(1, 2)
        n.move_by(3, -4)
        assert (n.x, n.y) == (4, -2)

    def test_fill_colors(self):
        n = Node(0, 0, color="green")
        assert n.base_fill() == "#c8e6c9"
        assert n.selected_fill() == "#a5d6a7"
        assert Node(0, 0, color="nope").base_fill() == "#fff2a8"

    def test_nodes_compare_by_identity(self):
        assert Node(0, 0) != Node(0, 0)


class TestLabelText:

    def test_splice_and_erase(self):
        n = Node(0, 0, text="ac")
        assert n.splice_text(1, "b") == 2
        assert n.text == "abc"
        assert n.erase_before(2) == 1
        assert n.text == "ac"
        assert n.erase_at(1) == 1
        assert n.text == "a"

    def test_erase_at_bounds_is_noop(self):
        n = Node(0, 0, text="a")
        assert n.erase_before(0) == 0
        assert n.erase_at(1) == 1
        assert n.text == "a"
