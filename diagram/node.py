"""
diagram/node.py

Node entity and the shape descriptor table that drives its geometry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from PyQt6.QtCore import QPointF
from PyQt6.QtGui import QPainterPath, QPolygonF

from geometry import (
    closest_point_on_polygon_boundary,
    point_in_convex_polygon,
    point_in_triangle,
    regular_polygon,
)
from models import Shape, DEFAULT_NODE_COLOR, node_base_color, node_selected_color
from diagram.mixins import LabelMixin
from settings import get_settings


def node_radius() -> float:
    """Get node radius from settings. Default: 30.0 pixels."""
    return get_settings().settings.canvas.nodes.radius


@dataclass(frozen=True)
class ShapeDescriptor:
    """
    Geometry of one node shape.

    ``sides == 0`` means a circle. Polygons are regular, centered on the
    node, with their first vertex at ``rotation`` and a circumradius of
    ``radius_scale * node radius``.
    """
    name: str
    sides: int
    rotation: float = 0.0
    radius_scale: float = 1.0
    barycentric: bool = False  # use the barycentric containment test

    @property
    def is_circle(self) -> bool:
        return self.sides == 0

    def vertices(self, center: QPointF, radius: float) -> List[QPointF]:
        if self.is_circle:
            return []
        return regular_polygon(center, radius * self.radius_scale, self.sides, self.rotation)

    def boundary_point(self, center: QPointF, radius: float, target: QPointF) -> QPointF:
        """Where the outline meets the direction toward (circle) or lies closest to (polygon) *target*."""
        if self.is_circle:
            dx = target.x() - center.x()
            dy = target.y() - center.y()
            scale = math.hypot(dx, dy)
            if scale == 0:
                return QPointF(center.x() + radius, center.y())
            return QPointF(center.x() + dx * radius / scale, center.y() + dy * radius / scale)
        return closest_point_on_polygon_boundary(target, self.vertices(center, radius))

    def contains(self, center: QPointF, radius: float, p: QPointF) -> bool:
        if self.is_circle:
            dx = p.x() - center.x()
            dy = p.y() - center.y()
            return dx * dx + dy * dy < radius * radius
        verts = self.vertices(center, radius)
        if self.barycentric:
            return point_in_triangle(p, verts[0], verts[1], verts[2])
        return point_in_convex_polygon(p, verts)

    def outline(self, center: QPointF, radius: float) -> QPainterPath:
        """Closed painter path of the shape outline."""
        path = QPainterPath()
        if self.is_circle:
            path.addEllipse(center, radius, radius)
        else:
            path.addPolygon(QPolygonF(self.vertices(center, radius)))
            path.closeSubpath()
        return path


SHAPES: Dict[str, ShapeDescriptor] = {
    Shape.DOT: ShapeDescriptor(Shape.DOT, 0),
    Shape.TRIANGLE: ShapeDescriptor(Shape.TRIANGLE, 3, -math.pi / 2, barycentric=True),
    # Axis-aligned square with half-side 0.85 * radius
    Shape.SQUARE: ShapeDescriptor(Shape.SQUARE, 4, -3 * math.pi / 4, 0.85 * math.sqrt(2)),
    Shape.PENTAGON: ShapeDescriptor(Shape.PENTAGON, 5, -math.pi / 2),
    Shape.HEXAGON: ShapeDescriptor(Shape.HEXAGON, 6, -math.pi / 2),
}


@dataclass(eq=False)
class Node(LabelMixin):
    """
    A state in the diagram.

    Nodes compare by identity so they can be held in selection sets while
    their position changes.
    """
    x: float
    y: float
    shape: str = Shape.DOT
    color: str = DEFAULT_NODE_COLOR
    text: str = ""
    accept_state: bool = False
    id: int = -1

    @property
    def descriptor(self) -> ShapeDescriptor:
        return SHAPES.get(self.shape, SHAPES[Shape.DOT])

    def center(self) -> QPointF:
        return QPointF(self.x, self.y)

    def vertices(self, radius: Optional[float] = None) -> List[QPointF]:
        return self.descriptor.vertices(self.center(), node_radius() if radius is None else radius)

    def outline(self, radius: Optional[float] = None) -> QPainterPath:
        return self.descriptor.outline(self.center(), node_radius() if radius is None else radius)

    def boundary_point_towards(self, target_x: float, target_y: float) -> QPointF:
        """Connection point on this node's rendered outline for a line aimed at the target."""
        return self.descriptor.boundary_point(self.center(), node_radius(), QPointF(target_x, target_y))

    def contains_point(self, x: float, y: float) -> bool:
        return self.descriptor.contains(self.center(), node_radius(), QPointF(x, y))

    def begin_drag(self, x: float, y: float) -> Tuple[float, float]:
        """Grab offset from the node center to the pointer."""
        return x - self.x, y - self.y

    def drag_to(self, x: float, y: float, grab: Tuple[float, float]) -> None:
        """Follow the pointer while keeping the grab offset from ``begin_drag``."""
        self.move_to(x - grab[0], y - grab[1])

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def move_by(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy

    def base_fill(self) -> str:
        return node_base_color(self.color)

    def selected_fill(self) -> str:
        return node_selected_color(self.color)
