"""
canvas/painting.py

QPainter rendering of a diagram: nodes, edges, arrow heads, labels, the
text caret and the rubber band.

Nothing here computes edge geometry. Every edge is drawn from its
``derive_geometry()`` result, the same data ``contains_point`` tests.
"""

from __future__ import annotations

import math
from typing import Optional

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QBrush, QColor, QFont, QFontMetricsF, QPainter, QPainterPath, QPen, QPolygonF

from models import ArrowKind, Mode, edge_color
from diagram.edges import EdgeGeometry, PendingEdge
from diagram.mixins import LabelMixin
from diagram.node import Node, node_radius
from settings import CanvasSelectionSettings, CanvasTextSettings, get_settings
from utils import convert_latex_shortcuts, hex_to_qcolor, label_offset


# Arrow head proportions in pixels
TRIANGLE_LENGTH = 8.0
TRIANGLE_HALF_WIDTH = 5.0
TEE_HALF_LENGTH = 5.0

# Vertical distance from the label anchor row to the text baseline
TEXT_BASELINE_SHIFT = 6.0
CARET_HALF_HEIGHT = 10.0


# =============================================================================
# Cached canvas settings - loaded once per process to avoid settings lookups
# on every paint.
# =============================================================================

class _CachedPaintSettings:
    """Cache for paint-time settings values."""

    _instance = None

    def __init__(self):
        s = get_settings().settings.canvas
        # A malformed colour in the settings file falls back to the built-in default
        sel_defaults = CanvasSelectionSettings()
        self.stroke_width = s.nodes.stroke_width
        self.accept_inset = s.nodes.accept_inset
        self.selected_color = hex_to_qcolor(s.selection.selected_color, QColor(sel_defaults.selected_color))
        self.multiselect_color = hex_to_qcolor(s.selection.multiselect_color, QColor(sel_defaults.multiselect_color))
        self.idle_color = hex_to_qcolor(s.selection.idle_color, QColor(sel_defaults.idle_color))
        self.text_color = hex_to_qcolor(s.text.color, QColor(CanvasTextSettings().color))
        self.font = QFont(s.text.family)
        self.font.setStyleHint(QFont.StyleHint.Serif)
        self.font.setPixelSize(s.text.size_px)

    @classmethod
    def get(cls) -> "_CachedPaintSettings":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def invalidate(cls) -> None:
        """Drop the cache so the next paint re-reads settings."""
        cls._instance = None


# =============================================================================
# Geometry -> painter path
# =============================================================================

def edge_path(geom: EdgeGeometry) -> QPainterPath:
    """
    Painter path for a derived edge geometry.

    Arc angles are radians measured clockwise on screen (y down); Qt wants
    degrees counter-clockwise, so every angle is negated. A non-reversed arc
    runs clockwise from start to end, a reversed one counter-clockwise.
    """
    path = QPainterPath(geom.start)
    if not geom.has_circle:
        path.lineTo(geom.end)
        return path

    c = geom.circle
    rect = QRectF(c.x - c.radius, c.y - c.radius, 2 * c.radius, 2 * c.radius)
    two_pi = 2 * math.pi
    if geom.is_reversed:
        sweep = math.degrees((geom.start_angle - geom.end_angle) % two_pi)
    else:
        sweep = -math.degrees((geom.end_angle - geom.start_angle) % two_pi)
    path.arcTo(rect, -math.degrees(geom.start_angle), sweep)
    return path


def draw_arrow_head(painter: QPainter, tip: QPointF, heading: float, kind: str) -> None:
    """Draw an arrow head whose tip is at *tip*, pointing along *heading*."""
    dx = math.cos(heading)
    dy = math.sin(heading)
    if kind == ArrowKind.TEE:
        painter.drawLine(
            QPointF(tip.x() + TEE_HALF_LENGTH * dy, tip.y() - TEE_HALF_LENGTH * dx),
            QPointF(tip.x() - TEE_HALF_LENGTH * dy, tip.y() + TEE_HALF_LENGTH * dx),
        )
        return
    arrow = QPolygonF([
        tip,
        QPointF(tip.x() - TRIANGLE_LENGTH * dx + TRIANGLE_HALF_WIDTH * dy,
                tip.y() - TRIANGLE_LENGTH * dy - TRIANGLE_HALF_WIDTH * dx),
        QPointF(tip.x() - TRIANGLE_LENGTH * dx - TRIANGLE_HALF_WIDTH * dy,
                tip.y() - TRIANGLE_LENGTH * dy + TRIANGLE_HALF_WIDTH * dx),
    ])
    painter.drawPolygon(arrow)


def _label_layout(text: str, anchor: QPointF, angle: Optional[float]):
    style = _CachedPaintSettings.get()
    shown = convert_latex_shortcuts(text)
    metrics = QFontMetricsF(style.font)
    width = metrics.horizontalAdvance(shown)
    dx, dy = label_offset(width, angle)
    return shown, metrics, width, round(anchor.x() + dx), round(anchor.y() + dy)


def label_bounds(text: str, anchor: QPointF, angle: Optional[float]) -> QRectF:
    """Area covered by a label and its caret, as drawn by ``draw_label``."""
    _, metrics, width, x, y = _label_layout(text, anchor, angle)
    baseline = y + TEXT_BASELINE_SHIFT
    top = min(y - CARET_HALF_HEIGHT, baseline - metrics.ascent())
    bottom = max(y + CARET_HALF_HEIGHT, baseline + metrics.descent())
    return QRectF(x - 1, top, width + 2, bottom - top)


def draw_label(painter: QPainter, text: str, anchor: QPointF, angle: Optional[float],
               caret_offset: Optional[int] = None) -> None:
    """
    Draw a label near *anchor*, pushed away from it along *angle*.

    When *caret_offset* is given, a caret is drawn after that many raw
    characters.
    """
    style = _CachedPaintSettings.get()
    shown, metrics, _, x, y = _label_layout(text, anchor, angle)

    painter.setFont(style.font)
    painter.setPen(QPen(style.text_color))
    painter.drawText(QPointF(x, y + TEXT_BASELINE_SHIFT), shown)

    if caret_offset is not None:
        caret_x = x + metrics.horizontalAdvance(convert_latex_shortcuts(text[:caret_offset]))
        painter.setPen(QPen(style.text_color, 1))
        painter.drawLine(QPointF(caret_x, y - CARET_HALF_HEIGHT), QPointF(caret_x, y + CARET_HALF_HEIGHT))


# =============================================================================
# Entity painting
# =============================================================================

def caret_for(entity, state) -> Optional[int]:
    """Caret offset to draw on *entity*, or None outside a visible edit of it."""
    if state is None or state.mode != Mode.EDITING_TEXT:
        return None
    if entity is not state.selected or not state.caret_visible or state.cursor is None:
        return None
    return state.cursor.offset


def paint_node(painter: QPainter, node: Node, selected: bool = False, multi_selected: bool = False,
               caret_offset: Optional[int] = None) -> None:
    style = _CachedPaintSettings.get()
    fill = node.selected_fill() if (selected or multi_selected) else node.base_fill()
    if multi_selected:
        pen = QPen(style.multiselect_color, 3)
    elif selected:
        pen = QPen(style.selected_color, style.stroke_width)
    else:
        pen = QPen(style.idle_color, style.stroke_width)

    painter.setPen(pen)
    painter.setBrush(QBrush(QColor(fill)))
    painter.drawPath(node.outline())

    if node.accept_state:
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(node.outline(node_radius() - style.accept_inset))

    draw_label(painter, node.text, node.center(), None, caret_offset)


def edge_paint_color(edge, state) -> QColor:
    style = _CachedPaintSettings.get()
    if state is not None and edge is state.selected:
        return style.selected_color
    return QColor(edge_color(edge.color))


def paint_edge(painter: QPainter, edge, color: QColor, caret_offset: Optional[int] = None) -> None:
    """Stroke an edge shortened by its arrow offset, then its arrow head and label."""
    style = _CachedPaintSettings.get()
    geom = edge.derive_geometry()

    pen = QPen(color, style.stroke_width)
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawPath(edge_path(geom.trimmed(edge.arrow_offset())))

    painter.setBrush(QBrush(color))
    draw_arrow_head(painter, geom.end, edge.arrow_heading(geom), edge.arrow_kind)

    if isinstance(edge, LabelMixin):
        anchor, angle = edge.label_placement()
        draw_label(painter, edge.text, anchor, angle, caret_offset)


def paint_rubber_band(painter: QPainter, rect: QRectF) -> None:
    style = _CachedPaintSettings.get()
    pen = QPen(style.multiselect_color, 1, Qt.PenStyle.DashLine)
    fill = QColor(style.multiselect_color)
    fill.setAlpha(30)
    painter.setPen(pen)
    painter.setBrush(QBrush(fill))
    painter.drawRect(rect)


def paint_overlay(painter: QPainter, dispatcher) -> None:
    """Paint the in-progress gesture: the edge being dragged out and the rubber band."""
    style = _CachedPaintSettings.get()
    painter.save()
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)

    pending = dispatcher.pending
    if isinstance(pending, PendingEdge):
        geom = pending.derive_geometry()
        painter.setPen(QPen(style.selected_color, style.stroke_width))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(edge_path(geom.trimmed(pending.arrow_offset())))
        painter.setBrush(QBrush(style.selected_color))
        draw_arrow_head(painter, geom.end, pending.arrow_heading(geom), pending.arrow_kind)
    elif pending is not None:
        paint_edge(painter, pending, style.selected_color)

    band = dispatcher.rubber_band()
    if band is not None:
        paint_rubber_band(painter, band)

    painter.restore()
