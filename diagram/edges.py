"""
diagram/edges.py

Edge entities: transitions between nodes, self-loops, entry markers, and
the pending edge shown while a new edge is being dragged out.

Edges never store absolute curves. Each variant keeps a small relative
descriptor and rebuilds an ``EdgeGeometry`` from the live node positions in
``derive_geometry()``. Rendering and ``contains_point()`` both consume that
one derivation, so what is drawn is exactly what is clickable.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from PyQt6.QtCore import QPointF

from geometry import Circle, circle_through_three_points, normalize_angle
from models import ArrowKind, GeometryKind, EdgeType, DEFAULT_EDGE_COLOR
from diagram.mixins import LabelMixin
from diagram.node import Node, node_radius
from settings import get_settings


# Self-loop proportions, relative to the node radius
SELF_LOOP_OFFSET = 1.5
SELF_LOOP_RADIUS = 0.75
SELF_LOOP_HALF_SPAN = 0.8 * math.pi
SELF_LOOP_SNAP = 0.1  # radians


def _snap_padding() -> float:
    """Get snap-to-straight padding from settings. Default: 6.0 pixels."""
    return get_settings().settings.canvas.edges.snap_padding


def _hit_padding() -> float:
    """Get edge hit-test padding from settings. Default: 6.0 pixels."""
    return get_settings().settings.canvas.edges.hit_padding


def arrow_offset(arrow_kind: str) -> float:
    """Pixels the stroke stops short of the arrow tip. Defaults: 5 (triangle), 3 (tee)."""
    edges = get_settings().settings.canvas.edges
    if arrow_kind == ArrowKind.TEE:
        return edges.tee_arrow_offset
    return edges.triangle_arrow_offset


# =============================================================================
# Derived geometry
# =============================================================================

@dataclass(frozen=True)
class EdgeGeometry:
    """
    Concrete draw/hit geometry of an edge for the current frame.

    For arcs, angles are radians in world (y-down) coordinates and the arc
    runs from ``start_angle`` to ``end_angle`` with increasing angle, or
    decreasing angle when ``is_reversed`` is set.
    """
    kind: str
    start: QPointF
    end: QPointF
    circle: Optional[Circle] = None
    start_angle: float = 0.0
    end_angle: float = 0.0
    is_reversed: bool = False

    @property
    def has_circle(self) -> bool:
        return self.kind == GeometryKind.ARC

    @property
    def reverse_scale(self) -> float:
        return 1.0 if self.is_reversed else -1.0

    def span_contains(self, angle: float) -> bool:
        """True if *angle* lies strictly inside the arc's angular span."""
        start = normalize_angle(self.start_angle)
        end = normalize_angle(self.end_angle)
        if self.is_reversed:
            start, end = end, start
        if end < start:
            end += 2 * math.pi
        if angle < start:
            angle += 2 * math.pi
        elif angle > end:
            angle -= 2 * math.pi
        return start < angle < end

    def trimmed(self, offset: float) -> "EdgeGeometry":
        """Copy with the destination end pulled back by *offset* pixels along the path."""
        if self.has_circle:
            end_angle = self.end_angle + self.reverse_scale * offset / self.circle.radius
            return replace(self, end_angle=end_angle, end=self.circle.point_at(end_angle))
        dx = self.end.x() - self.start.x()
        dy = self.end.y() - self.start.y()
        length = math.hypot(dx, dy)
        if length <= offset:
            return self
        return replace(self, end=QPointF(self.end.x() - dx * offset / length,
                                         self.end.y() - dy * offset / length))


def straight_hit(geom: EdgeGeometry, x: float, y: float, tolerance: float) -> bool:
    """Perpendicular distance within tolerance and projection strictly inside the segment."""
    dx = geom.end.x() - geom.start.x()
    dy = geom.end.y() - geom.start.y()
    length = math.hypot(dx, dy)
    if length == 0:
        return False
    percent = (dx * (x - geom.start.x()) + dy * (y - geom.start.y())) / (length * length)
    dist = (dx * (y - geom.start.y()) - dy * (x - geom.start.x())) / length
    return 0 < percent < 1 and abs(dist) < tolerance


def radial_hit(geom: EdgeGeometry, x: float, y: float, tolerance: float) -> bool:
    c = geom.circle
    return abs(math.hypot(x - c.x, y - c.y) - c.radius) < tolerance


# =============================================================================
# Edge base class
# =============================================================================

class Edge(LabelMixin):
    """Common surface of all persistent edge variants."""

    arrow_kind: str

    def derive_geometry(self) -> EdgeGeometry:
        raise NotImplementedError

    def contains_point(self, x: float, y: float) -> bool:
        raise NotImplementedError

    def label_placement(self) -> Tuple[QPointF, Optional[float]]:
        """Anchor point and push-away angle for the label."""
        raise NotImplementedError

    def arrow_heading(self, geom: EdgeGeometry) -> float:
        raise NotImplementedError

    def arrow_offset(self) -> float:
        return arrow_offset(self.arrow_kind)

    def endpoints(self) -> Tuple[Node, ...]:
        raise NotImplementedError

    def references(self, node: Node) -> bool:
        return any(n is node for n in self.endpoints())

    def to_record(self, node_ids: Dict[int, int]) -> dict:
        """Plain-data record; *node_ids* maps ``id(node)`` to its record id."""
        raise NotImplementedError


# =============================================================================
# Transition (node A -> node B)
# =============================================================================

@dataclass(eq=False)
class Transition(Edge):
    """
    Directed transition between two nodes.

    Curvature is stored relative to the live A->B baseline:
    ``parallel_part`` is the fractional progress of the anchor along the
    baseline and ``perpendicular_part`` its signed offset in pixels. Zero
    offset means a straight segment; anything else an arc through A, the
    anchor, and B.
    """
    node_a: Node
    node_b: Node
    text: str = ""
    arrow_kind: str = ArrowKind.TRIANGLE
    color: str = DEFAULT_EDGE_COLOR
    parallel_part: float = 0.5
    perpendicular_part: float = 0.0
    # Added to the label angle while straight; records which side the anchor snapped from
    straight_angle_bias: float = 0.0

    def endpoints(self) -> Tuple[Node, ...]:
        return (self.node_a, self.node_b)

    def _baseline(self) -> Tuple[float, float, float]:
        dx = self.node_b.x - self.node_a.x
        dy = self.node_b.y - self.node_a.y
        return dx, dy, math.hypot(dx, dy)

    def anchor_point(self) -> QPointF:
        """Absolute curvature control point for the current node positions."""
        dx, dy, scale = self._baseline()
        if scale == 0:
            return self.node_a.center()
        return QPointF(
            self.node_a.x + dx * self.parallel_part - dy * self.perpendicular_part / scale,
            self.node_a.y + dy * self.parallel_part + dx * self.perpendicular_part / scale,
        )

    def set_anchor_from_absolute_point(self, x: float, y: float) -> None:
        """
        Re-express an absolute point as (parallel, perpendicular) parts.

        A point strictly between the endpoints and within the snap padding of
        the baseline snaps the edge straight; the side it came from is kept in
        ``straight_angle_bias`` so the label stays on that side.
        """
        dx, dy, scale = self._baseline()
        if scale == 0:
            return
        rel_x = x - self.node_a.x
        rel_y = y - self.node_a.y
        self.parallel_part = (dx * rel_x + dy * rel_y) / (scale * scale)
        self.perpendicular_part = (dx * rel_y - dy * rel_x) / scale
        if 0 < self.parallel_part < 1 and abs(self.perpendicular_part) < _snap_padding():
            self.straight_angle_bias = math.pi if self.perpendicular_part < 0 else 0.0
            self.perpendicular_part = 0.0

    def _straight_geometry(self) -> EdgeGeometry:
        mid_x = (self.node_a.x + self.node_b.x) / 2
        mid_y = (self.node_a.y + self.node_b.y) / 2
        return EdgeGeometry(
            GeometryKind.STRAIGHT,
            self.node_a.boundary_point_towards(mid_x, mid_y),
            self.node_b.boundary_point_towards(mid_x, mid_y),
        )

    @staticmethod
    def _refine_angle(node: Node, circle: Circle, angle: float) -> float:
        # Polygons: move the approximate crossing onto the real outline, keeping it on the circle
        if node.descriptor.is_circle:
            return angle
        approx = circle.point_at(angle)
        on_outline = node.boundary_point_towards(approx.x(), approx.y())
        return circle.angle_of(on_outline)

    def derive_geometry(self) -> EdgeGeometry:
        if self.perpendicular_part == 0:
            return self._straight_geometry()

        _, _, scale = self._baseline()
        if scale == 0:
            return self._straight_geometry()
        circle = circle_through_three_points(self.node_a.center(), self.node_b.center(), self.anchor_point())
        if circle is None:
            return self._straight_geometry()

        is_reversed = self.perpendicular_part > 0
        reverse_scale = 1.0 if is_reversed else -1.0
        gap = node_radius() / circle.radius
        start_angle = circle.angle_of(self.node_a.center()) - reverse_scale * gap
        end_angle = circle.angle_of(self.node_b.center()) + reverse_scale * gap
        start_angle = self._refine_angle(self.node_a, circle, start_angle)
        end_angle = self._refine_angle(self.node_b, circle, end_angle)

        return EdgeGeometry(
            GeometryKind.ARC,
            circle.point_at(start_angle),
            circle.point_at(end_angle),
            circle,
            start_angle,
            end_angle,
            is_reversed,
        )

    def contains_point(self, x: float, y: float) -> bool:
        geom = self.derive_geometry()
        tolerance = _hit_padding()
        if geom.has_circle:
            if not radial_hit(geom, x, y, tolerance):
                return False
            return geom.span_contains(geom.circle.angle_of(QPointF(x, y)))
        return straight_hit(geom, x, y, tolerance)

    def label_placement(self) -> Tuple[QPointF, Optional[float]]:
        geom = self.derive_geometry()
        if geom.has_circle:
            start_angle = geom.start_angle
            end_angle = geom.end_angle
            if end_angle < start_angle:
                end_angle += 2 * math.pi
            text_angle = (start_angle + end_angle) / 2 + (math.pi if geom.is_reversed else 0.0)
            return geom.circle.point_at(text_angle), text_angle
        mid = QPointF((geom.start.x() + geom.end.x()) / 2, (geom.start.y() + geom.end.y()) / 2)
        text_angle = math.atan2(geom.end.x() - geom.start.x(), geom.start.y() - geom.end.y())
        return mid, text_angle + self.straight_angle_bias

    def arrow_heading(self, geom: EdgeGeometry) -> float:
        if geom.has_circle:
            return geom.end_angle - geom.reverse_scale * (math.pi / 2)
        return math.atan2(geom.end.y() - geom.start.y(), geom.end.x() - geom.start.x())

    def to_record(self, node_ids: Dict[int, int]) -> dict:
        return {
            "type": EdgeType.TRANSITION,
            "nodeA": node_ids[id(self.node_a)],
            "nodeB": node_ids[id(self.node_b)],
            "text": self.text,
            "arrowKind": self.arrow_kind,
            "color": self.color,
            "parallelPart": self.parallel_part,
            "perpendicularPart": self.perpendicular_part,
            "straightAngleBias": self.straight_angle_bias,
        }


# =============================================================================
# Self-transition (loop on one node)
# =============================================================================

@dataclass(eq=False)
class SelfTransition(Edge):
    """A loop drawn outside the node in the direction of ``anchor_angle``."""
    node: Node
    text: str = ""
    arrow_kind: str = ArrowKind.TRIANGLE
    color: str = DEFAULT_EDGE_COLOR
    anchor_angle: float = 0.0

    def endpoints(self) -> Tuple[Node, ...]:
        return (self.node,)

    def set_anchor_angle(self, x: float, y: float, grab_offset: float = 0.0) -> None:
        """Point the loop at (x, y), snapping to quarter turns and wrapping into [-pi, pi]."""
        angle = math.atan2(y - self.node.y, x - self.node.x) + grab_offset
        snap = round(angle / (math.pi / 2)) * (math.pi / 2)
        if abs(angle - snap) < SELF_LOOP_SNAP:
            angle = snap
        self.anchor_angle = normalize_angle(angle)

    def begin_drag(self, x: float, y: float) -> float:
        """Angle between the loop and a grab point; pass it back to ``set_anchor_angle``."""
        return self.anchor_angle - math.atan2(y - self.node.y, x - self.node.x)

    def loop_circle(self) -> Circle:
        r = node_radius()
        return Circle(
            self.node.x + SELF_LOOP_OFFSET * r * math.cos(self.anchor_angle),
            self.node.y + SELF_LOOP_OFFSET * r * math.sin(self.anchor_angle),
            SELF_LOOP_RADIUS * r,
        )

    def derive_geometry(self) -> EdgeGeometry:
        circle = self.loop_circle()
        start_angle = self.anchor_angle - SELF_LOOP_HALF_SPAN
        end_angle = self.anchor_angle + SELF_LOOP_HALF_SPAN
        return EdgeGeometry(
            GeometryKind.ARC,
            circle.point_at(start_angle),
            circle.point_at(end_angle),
            circle,
            start_angle,
            end_angle,
            False,
        )

    def contains_point(self, x: float, y: float) -> bool:
        # The loop spans nearly the full circle, so no angular bound
        return radial_hit(self.derive_geometry(), x, y, _hit_padding())

    def label_placement(self) -> Tuple[QPointF, Optional[float]]:
        return self.loop_circle().point_at(self.anchor_angle), self.anchor_angle

    def arrow_heading(self, geom: EdgeGeometry) -> float:
        return geom.end_angle + math.pi * 0.4

    def to_record(self, node_ids: Dict[int, int]) -> dict:
        return {
            "type": EdgeType.SELF_TRANSITION,
            "node": node_ids[id(self.node)],
            "text": self.text,
            "arrowKind": self.arrow_kind,
            "color": self.color,
            "anchorAngle": self.anchor_angle,
        }


# =============================================================================
# Entry marker (free point -> node)
# =============================================================================

@dataclass(eq=False)
class EntryMarker(Edge):
    """Arrow from a free point, offset from the node center, into the node."""
    node: Node
    delta_x: float = 0.0
    delta_y: float = 0.0
    text: str = ""
    arrow_kind: str = ArrowKind.TRIANGLE
    color: str = DEFAULT_EDGE_COLOR

    def endpoints(self) -> Tuple[Node, ...]:
        return (self.node,)

    def set_offset(self, x: float, y: float) -> None:
        """Place the free end at (x, y); each axis snaps to the node center line."""
        padding = _snap_padding()
        self.delta_x = x - self.node.x
        self.delta_y = y - self.node.y
        if abs(self.delta_x) < padding:
            self.delta_x = 0.0
        if abs(self.delta_y) < padding:
            self.delta_y = 0.0

    def derive_geometry(self) -> EdgeGeometry:
        start = QPointF(self.node.x + self.delta_x, self.node.y + self.delta_y)
        end = self.node.boundary_point_towards(start.x(), start.y())
        return EdgeGeometry(GeometryKind.STRAIGHT, start, end)

    def contains_point(self, x: float, y: float) -> bool:
        return straight_hit(self.derive_geometry(), x, y, _hit_padding())

    def label_placement(self) -> Tuple[QPointF, Optional[float]]:
        geom = self.derive_geometry()
        angle = math.atan2(geom.start.y() - geom.end.y(), geom.start.x() - geom.end.x())
        return QPointF(geom.start), angle

    def arrow_heading(self, geom: EdgeGeometry) -> float:
        return math.atan2(-self.delta_y, -self.delta_x)

    def to_record(self, node_ids: Dict[int, int]) -> dict:
        return {
            "type": EdgeType.ENTRY_MARKER,
            "node": node_ids[id(self.node)],
            "text": self.text,
            "arrowKind": self.arrow_kind,
            "color": self.color,
            "deltaX": self.delta_x,
            "deltaY": self.delta_y,
        }


# =============================================================================
# Pending edge (drag preview, never stored)
# =============================================================================

@dataclass(eq=False)
class PendingEdge:
    """Straight preview arrow between two free points while an edge is dragged out."""
    origin: QPointF
    target: QPointF
    arrow_kind: str = ArrowKind.TRIANGLE

    def derive_geometry(self) -> EdgeGeometry:
        return EdgeGeometry(GeometryKind.STRAIGHT, QPointF(self.origin), QPointF(self.target))

    def arrow_heading(self, geom: EdgeGeometry) -> float:
        return math.atan2(geom.end.y() - geom.start.y(), geom.end.x() - geom.start.x())

    def arrow_offset(self) -> float:
        return arrow_offset(self.arrow_kind)
