"""
geometry.py

Pure geometry helpers shared by nodes, edges, and the renderer.

Every function here is stateless and works in world coordinates on QPointF.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from PyQt6.QtCore import QPointF


# Determinant magnitude below which three points are treated as collinear.
COLLINEAR_EPSILON = 1e-9


@dataclass(frozen=True)
class Circle:
    """A circle in world coordinates."""
    x: float
    y: float
    radius: float

    @property
    def center(self) -> QPointF:
        return QPointF(self.x, self.y)

    def point_at(self, angle: float) -> QPointF:
        """Return the point on the circle at *angle* (radians, y-down)."""
        return QPointF(self.x + self.radius * math.cos(angle),
                       self.y + self.radius * math.sin(angle))

    def angle_of(self, p: QPointF) -> float:
        return math.atan2(p.y() - self.y, p.x() - self.x)


def distance(a: QPointF, b: QPointF) -> float:
    return math.hypot(b.x() - a.x(), b.y() - a.y())


def normalize_angle(angle: float) -> float:
    """Wrap *angle* into the closed range [-pi, pi], whatever the number of turns."""
    if -math.pi <= angle <= math.pi:
        return angle
    wrapped = math.fmod(angle + math.pi, 2 * math.pi)
    if wrapped < 0:
        wrapped += 2 * math.pi
    return wrapped - math.pi


def circle_through_three_points(p1: QPointF, p2: QPointF, p3: QPointF) -> Optional[Circle]:
    """
    Compute the circumcircle of three points.

    Args:
        p1, p2, p3: Points the circle must pass through.

    Returns:
        The circle, or None when the points are collinear (no finite circle).
    """
    x1, y1 = p1.x(), p1.y()
    x2, y2 = p2.x(), p2.y()
    x3, y3 = p3.x(), p3.y()

    a = x1 * (y2 - y3) - y1 * (x2 - x3) + x2 * y3 - x3 * y2
    if abs(a) < COLLINEAR_EPSILON:
        return None

    s1 = x1 * x1 + y1 * y1
    s2 = x2 * x2 + y2 * y2
    s3 = x3 * x3 + y3 * y3
    bx = -(s1 * (y2 - y3) + s2 * (y3 - y1) + s3 * (y1 - y2))
    by = s1 * (x2 - x3) + s2 * (x3 - x1) + s3 * (x1 - x2)
    c = -(s1 * (x2 * y3 - x3 * y2) + s2 * (x3 * y1 - x1 * y3) + s3 * (x1 * y2 - x2 * y1))

    cx = -bx / (2 * a)
    cy = -by / (2 * a)
    radius = math.sqrt(bx * bx + by * by - 4 * a * c) / (2 * abs(a))
    return Circle(cx, cy, radius)


def closest_point_on_segment(p: QPointF, a: QPointF, b: QPointF) -> QPointF:
    """Project *p* onto segment a-b, clamping the parameter to [0, 1]."""
    dx = b.x() - a.x()
    dy = b.y() - a.y()
    length2 = dx * dx + dy * dy
    if length2 == 0:
        return QPointF(a)

    t = ((p.x() - a.x()) * dx + (p.y() - a.y()) * dy) / length2
    t = max(0.0, min(1.0, t))
    return QPointF(a.x() + t * dx, a.y() + t * dy)


def closest_point_on_polygon_boundary(p: QPointF, vertices: Sequence[QPointF]) -> QPointF:
    """Return the point on the closed polygon outline nearest to *p*."""
    best: Optional[QPointF] = None
    best_dist = math.inf
    count = len(vertices)
    for i in range(count):
        candidate = closest_point_on_segment(p, vertices[i], vertices[(i + 1) % count])
        d = distance(p, candidate)
        if d < best_dist:
            best_dist = d
            best = candidate
    return best if best is not None else QPointF(p)


def point_in_convex_polygon(p: QPointF, vertices: Sequence[QPointF]) -> bool:
    """Ray-casting containment test (even-odd rule)."""
    px, py = p.x(), p.y()
    inside = False
    j = len(vertices) - 1
    for i in range(len(vertices)):
        vi, vj = vertices[i], vertices[j]
        if (vi.y() > py) != (vj.y() > py):
            cross_x = (vj.x() - vi.x()) * (py - vi.y()) / (vj.y() - vi.y()) + vi.x()
            if px < cross_x:
                inside = not inside
        j = i
    return inside


def point_in_triangle(p: QPointF, a: QPointF, b: QPointF, c: QPointF) -> bool:
    """Barycentric sign test; points on an edge count as inside."""
    denom = (b.y() - c.y()) * (a.x() - c.x()) + (c.x() - b.x()) * (a.y() - c.y())
    if denom == 0:
        return False
    u = ((b.y() - c.y()) * (p.x() - c.x()) + (c.x() - b.x()) * (p.y() - c.y())) / denom
    v = ((c.y() - a.y()) * (p.x() - c.x()) + (a.x() - c.x()) * (p.y() - c.y())) / denom
    w = 1 - u - v
    return u >= 0 and v >= 0 and w >= 0


def regular_polygon(center: QPointF, radius: float, sides: int, rotation: float) -> List[QPointF]:
    """Vertices of a regular polygon, first vertex at *rotation* radians."""
    step = 2 * math.pi / sides
    return [
        QPointF(center.x() + radius * math.cos(rotation + i * step),
                center.y() + radius * math.sin(rotation + i * step))
        for i in range(sides)
    ]
