"""
interaction/dispatcher.py

Routes world-coordinate pointer and key events to the state machine and
the diagram.

Every handler applies its mode transition first, then mutates entities,
and only then asks for a redraw, so a frame always reflects the state
after the event.
"""

from __future__ import annotations

import time
from typing import Optional, Tuple, Union

from PyQt6.QtCore import QPointF, QRectF

from debug_trace import trace
from models import (
    Mode,
    COLOR_MODIFIERS,
    SHAPE_MODIFIERS,
    resolve_color_modifier,
    resolve_shape_modifier,
)
from diagram.document import Diagram
from diagram.edges import Edge, EntryMarker, PendingEdge, SelfTransition, Transition
from diagram.node import Node
from interaction.state import InteractionState
from settings import get_settings


class Key:
    """Named keys understood by ``key_down``/``key_up``; letters and digits are passed as-is."""
    SHIFT = "shift"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    BACKSPACE = "backspace"
    DELETE = "delete"
    ESCAPE = "escape"
    ENTER = "enter"


def _is_shape_key(key: str) -> bool:
    return key in SHAPE_MODIFIERS


def _is_color_key(key: str) -> bool:
    return len(key) == 1 and key.upper() in COLOR_MODIFIERS


class InputDispatcher:
    """
    Translates raw input into state transitions and entity edits.

    Transient gesture state (grab offsets, the rubber band, the edge being
    dragged out, held modifier keys) lives here rather than on entities.
    """

    def __init__(self, diagram: Diagram, state: InteractionState):
        self.diagram = diagram
        self.state = state

        self.shift = False
        self.shape_modifier: Optional[str] = None
        self.color_modifier: Optional[str] = None

        # Edge being created; only committed on release if it is not a PendingEdge
        self.pending: Optional[Union[Edge, PendingEdge]] = None

        self._origin: Optional[QPointF] = None
        self._band_origin: Optional[QPointF] = None
        self._band_end: Optional[QPointF] = None
        self._dragging = False
        self._grab: Union[Tuple[float, float], float, None] = None
        # Group member under the pointer while a multiselection is dragged
        self._handle: Optional[Node] = None
        self._suppress_typing_until = 0.0

    # ---- helpers ----

    def _redraw(self) -> None:
        self.state.redraw_requested.emit()

    def rubber_band(self) -> Optional[QRectF]:
        """Normalized rubber-band rectangle, or None when no band is active."""
        if self._band_origin is None:
            return None
        return QRectF(self._band_origin, self._band_end).normalized()

    def typing_suppressed(self) -> bool:
        return time.monotonic() < self._suppress_typing_until

    def _suppress_typing(self) -> None:
        ms = get_settings().settings.canvas.caret.typing_suppress_ms
        self._suppress_typing_until = time.monotonic() + ms / 1000.0

    def _edge_color(self) -> str:
        return get_settings().settings.canvas.edges.default_color

    # ---- pointer ----

    def pointer_down(self, x: float, y: float) -> None:
        hit = self.diagram.entity_at(x, y)
        self._origin = QPointF(x, y)
        self._dragging = False
        self._grab = None
        self._handle = None

        if self._presses_group_member(hit):
            self._handle = hit
            self._begin_drag(hit, x, y)
        elif hit is not None:
            # Clicking the entity being edited keeps the edit session
            if not (self.state.mode == Mode.EDITING_TEXT and hit is self.state.selected):
                self.state.select(hit)
            if self.shift and isinstance(hit, Node):
                loop = SelfTransition(hit, color=self._edge_color())
                loop.set_anchor_angle(x, y)
                self.pending = loop
            else:
                self._begin_drag(hit, x, y)
        elif self.shift:
            self.state.enter_canvas()
            self.pending = PendingEdge(QPointF(x, y), QPointF(x, y))
        else:
            self.state.enter_canvas()
            self._band_origin = QPointF(x, y)
            self._band_end = QPointF(x, y)
        self._redraw()

    def _presses_group_member(self, hit) -> bool:
        return (
            self.state.mode == Mode.MULTISELECT
            and not self.shift
            and isinstance(hit, Node)
            and self.state.is_multi_selected(hit)
        )

    def _begin_drag(self, entity, x: float, y: float) -> None:
        self._dragging = True
        if isinstance(entity, Node):
            self._grab = entity.begin_drag(x, y)
        elif isinstance(entity, SelfTransition):
            self._grab = entity.begin_drag(x, y)

    def pointer_move(self, x: float, y: float) -> None:
        if self._band_origin is not None:
            self._band_end = QPointF(x, y)
            self._redraw()
            return

        if self.pending is not None:
            self._retarget_pending(x, y)
            self._redraw()

        if self._dragging and self.state.can_drag():
            self._drag_selected(x, y)
            self._redraw()

    def _retarget_pending(self, x: float, y: float) -> None:
        target = self.diagram.node_at(x, y)
        source = self.state.selected if isinstance(self.state.selected, Node) else None
        color = self._edge_color()

        if source is None:
            if target is not None:
                marker = EntryMarker(target, color=color)
                marker.set_offset(self._origin.x(), self._origin.y())
                self.pending = marker
            else:
                self.pending = PendingEdge(QPointF(self._origin), QPointF(x, y))
        elif target is source:
            loop = SelfTransition(source, color=color)
            loop.set_anchor_angle(x, y)
            self.pending = loop
        elif target is not None:
            self.pending = Transition(source, target, color=color)
        else:
            self.pending = PendingEdge(source.boundary_point_towards(x, y), QPointF(x, y))

    def _drag_group(self, x: float, y: float) -> None:
        handle = self._handle
        if handle is None:
            return
        old_x, old_y = handle.x, handle.y
        handle.drag_to(x, y, self._grab)
        self.diagram.snap_node(handle)
        # The rest of the group follows the handle's post-snap delta
        others = [n for n in self.state.multi_selected if n is not handle]
        self.diagram.move_nodes(others, handle.x - old_x, handle.y - old_y)

    def _drag_selected(self, x: float, y: float) -> None:
        if self.state.mode == Mode.MULTISELECT:
            self._drag_group(x, y)
            return
        selected = self.state.selected
        if isinstance(selected, Node):
            selected.drag_to(x, y, self._grab)
            self.diagram.snap_node(selected)
        elif isinstance(selected, Transition):
            selected.set_anchor_from_absolute_point(x, y)
        elif isinstance(selected, SelfTransition):
            selected.set_anchor_angle(x, y, self._grab or 0.0)
        elif isinstance(selected, EntryMarker):
            selected.set_offset(x, y)

    def pointer_up(self, x: float, y: float) -> None:
        self._dragging = False
        self._handle = None

        if self._band_origin is not None:
            self._band_end = QPointF(x, y)
            rect = self.rubber_band()
            self._band_origin = self._band_end = None
            min_size = get_settings().settings.canvas.selection.min_box_size
            # A band smaller than min_size both ways is a plain click
            if rect.width() >= min_size or rect.height() >= min_size:
                caught = self.diagram.nodes_in_rect(rect)
                if caught:
                    self.state.enter_multiselect(caught)
            self._redraw()
        elif self.pending is not None:
            edge = self.pending
            self.pending = None
            if not isinstance(edge, PendingEdge):
                self.diagram.add_edge(edge)
                self.state.select(edge)
                trace(f"created {type(edge).__name__}", "EDGE")
            self._redraw()

    def double_click(self, x: float, y: float) -> None:
        hit = self.diagram.entity_at(x, y)
        modifier_held = self.shape_modifier is not None or self.color_modifier is not None

        if hit is None:
            app = get_settings().settings
            node = Node(
                x,
                y,
                shape=resolve_shape_modifier(self.shape_modifier, app.default_shape),
                color=resolve_color_modifier(self.color_modifier, app.default_color),
            )
            self.diagram.add_node(node)
            self.state.select(node)
            if modifier_held:
                self._suppress_typing()
            trace(f"created node {node.id} ({node.shape}, {node.color})", "NODE")
        elif isinstance(hit, Node) and modifier_held:
            # A group member restyles the whole multiselection
            if hit is not self.state.selected and not self.state.is_multi_selected(hit):
                self.state.select(hit)
            self._restyle(
                shape=SHAPE_MODIFIERS.get(self.shape_modifier) if self.shape_modifier else None,
                color=resolve_color_modifier(self.color_modifier) if self.color_modifier else None,
            )
        elif not (self.state.mode == Mode.EDITING_TEXT and hit is self.state.selected):
            if hit is not self.state.selected:
                self.state.select(hit)
            if self.state.can_begin_text_edit():
                self.state.begin_text_edit()
        self._redraw()

    # ---- keys ----

    def _restyle(self, shape: Optional[str] = None, color: Optional[str] = None) -> bool:
        if not self.state.can_restyle():
            return False
        for node in self.state.restyle_targets():
            if shape is not None:
                node.shape = shape
            if color is not None:
                node.color = color
        self._suppress_typing()
        self._redraw()
        return True

    def key_down(self, key: str) -> bool:
        """Handle a key press by name; returns True if the key was consumed."""
        if key == Key.SHIFT:
            self.shift = True
            return True
        if _is_shape_key(key):
            self.shape_modifier = key
            return self._restyle(shape=SHAPE_MODIFIERS[key])
        if _is_color_key(key):
            self.color_modifier = key.upper()
            return self._restyle(color=COLOR_MODIFIERS[key.upper()])

        if key in (Key.LEFT, Key.RIGHT, Key.HOME, Key.END, Key.BACKSPACE):
            if not self.state.can_edit_text():
                return False
            changed = {
                Key.LEFT: self.state.move_left,
                Key.RIGHT: self.state.move_right,
                Key.HOME: self.state.home,
                Key.END: self.state.end,
                Key.BACKSPACE: self.state.backspace,
            }[key]()
            if changed:
                self._redraw()
            return True
        if key == Key.DELETE:
            if self.state.can_edit_text():
                if self.state.delete_forward():
                    self._redraw()
                return True
            return self.delete_selection()
        if key == Key.ESCAPE:
            self.state.escape()
            self._redraw()
            return True
        if key == Key.ENTER:
            if self.state.can_begin_text_edit():
                self.state.begin_text_edit()
                self._redraw()
                return True
        return False

    def key_up(self, key: str) -> None:
        if key == Key.SHIFT:
            self.shift = False
        elif _is_shape_key(key):
            self.shape_modifier = None
        elif _is_color_key(key):
            self.color_modifier = None

    def key_press(self, char: str) -> bool:
        """Insert a typed character; typing on a selected label starts editing it."""
        if not char or not char.isprintable():
            return False
        if self.typing_suppressed():
            return False
        if self.state.can_begin_text_edit():
            self.state.begin_text_edit()
        if not self.state.can_edit_text():
            return False
        changed = self.state.insert(char)
        self._redraw()
        return changed

    def delete_selection(self) -> bool:
        """Remove the multiselected nodes, or else the selected entity, with cascade."""
        if self.state.mode == Mode.MULTISELECT:
            removed = self.diagram.remove_nodes(self.state.multi_selected)
            count = len(self.state.multi_selected)
        elif self.state.selected is not None:
            removed = self.diagram.remove(self.state.selected)
            count = 1
        else:
            return False
        trace(f"deleted {count} entity(ies), {len(removed)} edge(s)", "DIAGRAM")
        self.state.enter_canvas()
        self._redraw()
        return True

    def load_records(self, records) -> None:
        """
        Replace the diagram from plain-data records and drop every reference
        into the old one (selection, pending edge, rubber band and grab).

        Raises:
            DiagramImportError: the records were rejected; nothing changed.
        """
        self.diagram.replace_all(records)
        self.pending = None
        self._band_origin = self._band_end = None
        self._dragging = False
        self._grab = None
        self._handle = None
        self.state.enter_canvas()
        self._redraw()
