"""
canvas/scene.py

QGraphicsScene that hosts a diagram: keeps one graphics item per entity,
forwards world-coordinate input to the dispatcher and paints in-progress
gestures in the foreground layer.
"""

from __future__ import annotations

from typing import Dict, Optional

from PyQt6.QtCore import Qt, QRectF
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QGraphicsScene

from canvas.items import EntityItem, item_for_entity
from canvas.painting import paint_overlay
from debug_trace import trace, TRACE_PAINT
from diagram.document import Diagram
from diagram.node import node_radius
from interaction.dispatcher import InputDispatcher, Key
from interaction.state import InteractionState

# World area the view can scroll over
SCENE_EXTENT = QRectF(-5000, -5000, 10000, 10000)

_NAMED_KEYS: Dict[Qt.Key, str] = {
    Qt.Key.Key_Shift: Key.SHIFT,
    Qt.Key.Key_Left: Key.LEFT,
    Qt.Key.Key_Right: Key.RIGHT,
    Qt.Key.Key_Home: Key.HOME,
    Qt.Key.Key_End: Key.END,
    Qt.Key.Key_Backspace: Key.BACKSPACE,
    Qt.Key.Key_Delete: Key.DELETE,
    Qt.Key.Key_Escape: Key.ESCAPE,
    Qt.Key.Key_Return: Key.ENTER,
    Qt.Key.Key_Enter: Key.ENTER,
}


def key_name(key: int) -> Optional[str]:
    """Dispatcher key name for a Qt key code, or None for keys it ignores."""
    try:
        qt_key = Qt.Key(key)
    except ValueError:
        return None
    if qt_key in _NAMED_KEYS:
        return _NAMED_KEYS[qt_key]
    if Qt.Key.Key_0.value <= key <= Qt.Key.Key_9.value or Qt.Key.Key_A.value <= key <= Qt.Key.Key_Z.value:
        return chr(key)
    return None


class DiagramScene(QGraphicsScene):
    """
    Scene wrapper around a Diagram.

    Every node and edge gets an item (see ``canvas.items``) that paints it
    from the model. ``refresh`` re-syncs the items with the diagram and runs
    on every redraw request from the state machine; code that edits the
    diagram directly calls it too.
    """

    def __init__(self, diagram: Optional[Diagram] = None, parent=None):
        super().__init__(parent)
        self.setSceneRect(SCENE_EXTENT)
        self.diagram = diagram if diagram is not None else Diagram()
        self.state = InteractionState(self)
        self.dispatcher = InputDispatcher(self.diagram, self.state)
        # Entities move without notifying their items, so no spatial index
        self.setItemIndexMethod(QGraphicsScene.ItemIndexMethod.NoIndex)
        self._items: Dict[int, EntityItem] = {}
        self.state.redraw_requested.connect(self.refresh)
        self.refresh()

    def refresh(self) -> None:
        """Add items for new entities, drop items of removed ones, then repaint."""
        live = {id(e): e for e in [*self.diagram.edges, *self.diagram.nodes]}
        for key in [k for k in self._items if k not in live]:
            self.removeItem(self._items.pop(key))
        for key, entity in live.items():
            item = self._items.get(key)
            if item is None:
                item = item_for_entity(entity)
                self._items[key] = item
                self.addItem(item)
            else:
                item.sync()
        if TRACE_PAINT:
            trace(f"synced {len(self._items)} item(s)", "PAINT")
        self.update()

    def item_for(self, entity) -> Optional[EntityItem]:
        """The graphics item currently showing *entity*, if any."""
        item = self._items.get(id(entity))
        return item if item is not None and item.entity is entity else None

    def diagram_bounds(self) -> QRectF:
        """Bounding rect of all nodes (null rect when empty)."""
        r = node_radius()
        bounds = QRectF()
        for node in self.diagram.nodes:
            bounds = bounds.united(QRectF(node.x - r, node.y - r, 2 * r, 2 * r))
        return bounds

    # ---- mouse ----

    def _sync_shift(self, event) -> None:
        self.dispatcher.shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        self._sync_shift(event)
        pos = event.scenePos()
        self.dispatcher.pointer_down(pos.x(), pos.y())
        event.accept()

    def mouseMoveEvent(self, event):
        pos = event.scenePos()
        self.dispatcher.pointer_move(pos.x(), pos.y())
        event.accept()

    def mouseReleaseEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        pos = event.scenePos()
        self.dispatcher.pointer_up(pos.x(), pos.y())
        event.accept()

    def mouseDoubleClickEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseDoubleClickEvent(event)
            return
        pos = event.scenePos()
        self.dispatcher.double_click(pos.x(), pos.y())
        event.accept()

    # ---- keyboard ----

    def keyPressEvent(self, event):
        name = key_name(event.key())
        consumed = self.dispatcher.key_down(name) if name else False
        if name not in _NAMED_KEYS.values():
            mods = event.modifiers()
            if not mods & (Qt.KeyboardModifier.ControlModifier
                           | Qt.KeyboardModifier.AltModifier
                           | Qt.KeyboardModifier.MetaModifier):
                consumed = self.dispatcher.key_press(event.text()) or consumed
        if consumed:
            event.accept()
        else:
            super().keyPressEvent(event)

    def keyReleaseEvent(self, event):
        if event.isAutoRepeat():
            return
        name = key_name(event.key())
        if name:
            self.dispatcher.key_up(name)
        event.accept()

    # ---- painting ----

    def drawForeground(self, painter: QPainter, rect: QRectF):
        if TRACE_PAINT:
            trace(f"drawForeground {rect.width():.0f}x{rect.height():.0f}", "PAINT")
        paint_overlay(painter, self.dispatcher)
