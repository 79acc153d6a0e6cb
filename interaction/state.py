"""
interaction/state.py

The interaction state machine: mode, selection, text cursor, and the caret
blink timer.

Modes are Canvas, Selection, Multiselect and EditingText. Input handlers
never inspect the selection to decide what is legal; they ask one of the
capability predicates (``can_drag``, ``can_restyle``, ``can_edit_text``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from debug_trace import trace
from models import Mode
from diagram.edges import Edge
from diagram.mixins import LabelMixin
from diagram.node import Node
from settings import get_settings

Entity = Union[Node, Edge]


class InteractionError(RuntimeError):
    """An operation was attempted in a mode that does not allow it."""


@dataclass
class TextCursor:
    """Character offset into the selected entity's text."""
    offset: int = 0


class InteractionState(QObject):
    """
    Owns the selection and the current mode.

    Signals:
        changed(str): Emitted with the new mode after any mode or selection change
        redraw_requested(): Emitted whenever the canvas needs repainting,
            including every caret blink
    """

    changed = pyqtSignal(str)
    redraw_requested = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.mode = Mode.CANVAS
        self.selected: Optional[Entity] = None
        self.multi_selected: List[Node] = []
        self.cursor: Optional[TextCursor] = None
        self.caret_visible = True

        self._caret_timer = QTimer(self)
        self._caret_timer.setInterval(get_settings().settings.canvas.caret.blink_ms)
        self._caret_timer.timeout.connect(self._blink)

    # ---- transitions ----

    def _enter(self, mode: str) -> None:
        previous = self.mode
        self.mode = mode
        if mode != Mode.EDITING_TEXT:
            self.cursor = None
        if previous != mode:
            trace(f"{previous} -> {mode}", "MODE")
        self.reset_caret()
        self.changed.emit(mode)

    def enter_canvas(self) -> None:
        self.selected = None
        self.multi_selected = []
        self._enter(Mode.CANVAS)

    def select(self, entity: Optional[Entity]) -> None:
        """
        Select a single entity, or go back to Canvas when *entity* is None.

        Always collapses any multiselection, members included.
        """
        if entity is None:
            self.enter_canvas()
            return
        self.multi_selected = []
        self.selected = entity
        self._enter(Mode.SELECTION)

    def enter_multiselect(self, nodes: List[Node]) -> None:
        if not nodes:
            raise InteractionError("multiselect needs at least one node")
        self.selected = None
        self.multi_selected = list(nodes)
        self._enter(Mode.MULTISELECT)

    def can_begin_text_edit(self) -> bool:
        return self.mode == Mode.SELECTION and isinstance(self.selected, LabelMixin)

    def begin_text_edit(self) -> None:
        """Selection -> EditingText with the cursor at the end of the text."""
        if not self.can_begin_text_edit():
            raise InteractionError(f"cannot edit text in mode {self.mode!r} with {self.selected!r}")
        self.cursor = TextCursor(len(self.selected.text))
        self._enter(Mode.EDITING_TEXT)

    def escape(self) -> None:
        """Step back one level: EditingText -> Selection -> Canvas; Multiselect -> Canvas."""
        if self.mode == Mode.EDITING_TEXT:
            self._enter(Mode.SELECTION)
        elif self.mode in (Mode.SELECTION, Mode.MULTISELECT):
            self.enter_canvas()

    # ---- capability predicates ----

    def can_edit_text(self) -> bool:
        return self.mode == Mode.EDITING_TEXT

    def can_drag(self) -> bool:
        return self.mode in (Mode.SELECTION, Mode.MULTISELECT)

    def can_restyle(self) -> bool:
        if self.mode == Mode.SELECTION:
            return isinstance(self.selected, Node)
        return self.mode == Mode.MULTISELECT

    def restyle_targets(self) -> List[Node]:
        if not self.can_restyle():
            return []
        if self.mode == Mode.SELECTION:
            return [self.selected]
        return list(self.multi_selected)

    def is_multi_selected(self, node: Node) -> bool:
        return any(n is node for n in self.multi_selected)

    # ---- caret ----

    def reset_caret(self) -> None:
        """Restart the blink phase with the caret shown."""
        self._caret_timer.stop()
        self.caret_visible = True
        if self.mode == Mode.EDITING_TEXT:
            self._caret_timer.start()
        self.redraw_requested.emit()

    def caret_active(self) -> bool:
        return self._caret_timer.isActive()

    def _blink(self) -> None:
        self.caret_visible = not self.caret_visible
        self.redraw_requested.emit()

    # ---- text cursor ----

    def _editing(self) -> LabelMixin:
        if not self.can_edit_text():
            raise InteractionError(f"text cursor is only available while editing, mode is {self.mode!r}")
        return self.selected

    def _moved(self, offset: int) -> bool:
        if offset == self.cursor.offset:
            return False
        self.cursor.offset = offset
        self.reset_caret()
        return True

    def move_left(self) -> bool:
        self._editing()
        return self._moved(max(0, self.cursor.offset - 1))

    def move_right(self) -> bool:
        entity = self._editing()
        return self._moved(min(len(entity.text), self.cursor.offset + 1))

    def home(self) -> bool:
        self._editing()
        return self._moved(0)

    def end(self) -> bool:
        entity = self._editing()
        return self._moved(len(entity.text))

    def insert(self, text: str) -> bool:
        entity = self._editing()
        if not text:
            return False
        self.cursor.offset = entity.splice_text(self.cursor.offset, text)
        self.reset_caret()
        return True

    def backspace(self) -> bool:
        entity = self._editing()
        if self.cursor.offset == 0:
            return False
        self.cursor.offset = entity.erase_before(self.cursor.offset)
        self.reset_caret()
        return True

    def delete_forward(self) -> bool:
        entity = self._editing()
        if self.cursor.offset >= len(entity.text):
            return False
        self.cursor.offset = entity.erase_at(self.cursor.offset)
        self.reset_caret()
        return True

    def debug_info(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "selected": type(self.selected).__name__ if self.selected is not None else None,
            "multi_selected": len(self.multi_selected),
            "cursor": self.cursor.offset if self.cursor else None,
            "caret_visible": self.caret_visible,
            "caret_active": self.caret_active(),
            "can_edit_text": self.can_edit_text(),
            "can_drag": self.can_drag(),
            "can_restyle": self.can_restyle(),
        }
