"""
canvas/items.py

Graphics items that stand in for diagram entities inside the scene.

An item owns no geometry of its own. Its outline, hit area and appearance
all come from the entity it wraps, and input still goes through the
dispatcher, so the items only decide what Qt repaints and in which order.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, QRectF
from PyQt6.QtGui import QPainter, QPainterPath, QPainterPathStroker
from PyQt6.QtWidgets import QGraphicsItem

from canvas.painting import (
    TRIANGLE_LENGTH,
    caret_for,
    edge_paint_color,
    edge_path,
    label_bounds,
    paint_edge,
    paint_node,
)
from diagram.node import Node
from settings import get_settings

# Widest pen any entity is drawn with (the multiselect outline)
MAX_PEN_WIDTH = 3.0


class EntityItem(QGraphicsItem):
    """Base item: wraps one entity and reads selection from the scene's state."""

    Z_VALUE = 0.0

    def __init__(self, entity):
        super().__init__()
        self.entity = entity
        self.setZValue(self.Z_VALUE)
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)

    def _state(self):
        return getattr(self.scene(), "state", None)

    def sync(self) -> None:
        """Pick up a change in the wrapped entity's geometry or appearance."""
        self.prepareGeometryChange()
        self.update()


class EdgeItem(EntityItem):
    """Transition, self-transition or entry marker; painted below every node."""

    Z_VALUE = 0.0

    def _path(self) -> QPainterPath:
        return edge_path(self.entity.derive_geometry())

    def shape(self) -> QPainterPath:
        """The stroked edge widened by the hit padding on each side."""
        stroker = QPainterPathStroker()
        stroker.setWidth(2 * get_settings().settings.canvas.edges.hit_padding)
        stroker.setCapStyle(Qt.PenCapStyle.FlatCap)
        return stroker.createStroke(self._path())

    def boundingRect(self) -> QRectF:
        margin = TRIANGLE_LENGTH + MAX_PEN_WIDTH
        rect = self.shape().boundingRect().adjusted(-margin, -margin, margin, margin)
        anchor, angle = self.entity.label_placement()
        return rect.united(label_bounds(self.entity.text, anchor, angle))

    def paint(self, painter: QPainter, option, widget=None):
        state = self._state()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        paint_edge(painter, self.entity, edge_paint_color(self.entity, state), caret_for(self.entity, state))


class NodeItem(EntityItem):
    """A node's outline and label; always above the edges."""

    Z_VALUE = 1.0

    def shape(self) -> QPainterPath:
        return self.entity.outline()

    def boundingRect(self) -> QRectF:
        margin = MAX_PEN_WIDTH / 2 + 1
        rect = self.entity.outline().boundingRect().adjusted(-margin, -margin, margin, margin)
        return rect.united(label_bounds(self.entity.text, self.entity.center(), None))

    def paint(self, painter: QPainter, option, widget=None):
        state = self._state()
        node = self.entity
        selected = state is not None and node is state.selected
        multi = state is not None and state.is_multi_selected(node)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        paint_node(painter, node, selected, multi, caret_for(node, state))


def item_for_entity(entity) -> EntityItem:
    if isinstance(entity, Node):
        return NodeItem(entity)
    return EdgeItem(entity)
