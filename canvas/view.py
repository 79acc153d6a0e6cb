"""
canvas/view.py

QGraphicsView providing the screen <-> world transform: wheel zoom and
middle-button panning. Everything else is left to the scene.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import Qt, QPoint, QRectF
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QGraphicsView

from canvas.scene import DiagramScene
from settings import get_settings


class DiagramView(QGraphicsView):
    """
    Graphics view for a DiagramScene.

    Navigation:
    - Mouse wheel zooms around the cursor
    - Middle-button drag pans
    """

    def __init__(self, scene: DiagramScene, parent=None):
        super().__init__(scene, parent)
        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.FullViewportUpdate)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        # Middle-button pan state
        self._pan_origin: Optional[QPoint] = None

    def wheelEvent(self, event):
        """Zoom with mouse wheel."""
        delta = event.angleDelta().y()
        if delta == 0:
            return
        # Zoom factor from settings. Default: 1.15 (15% per scroll step)
        zoom_factor = get_settings().settings.canvas.zoom.wheel_factor
        factor = zoom_factor if delta > 0 else 1 / zoom_factor
        self.scale(factor, factor)

    def mousePressEvent(self, event):
        """Start panning on middle button; everything else goes to the scene."""
        if event.button() == Qt.MouseButton.MiddleButton:
            self._pan_origin = event.position().toPoint()
            self.viewport().setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if self._pan_origin is not None:
            pos = event.position().toPoint()
            delta = pos - self._pan_origin
            self._pan_origin = pos
            self.horizontalScrollBar().setValue(self.horizontalScrollBar().value() - delta.x())
            self.verticalScrollBar().setValue(self.verticalScrollBar().value() - delta.y())
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.MiddleButton and self._pan_origin is not None:
            self._pan_origin = None
            self.viewport().unsetCursor()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def zoom_fit(self):
        """Zoom to fit every node in the view."""
        scene = self.scene()
        rect = scene.diagram_bounds() if isinstance(scene, DiagramScene) else QRectF()
        if rect.isNull() or rect.isEmpty():
            return
        # Add small margin
        margin = 20
        self.fitInView(rect.adjusted(-margin, -margin, margin, margin), Qt.AspectRatioMode.KeepAspectRatio)

    def zoom_reset(self):
        """Reset zoom to 100% (1:1 scale)."""
        self.resetTransform()

    def zoom_in(self):
        """Zoom in by the configured factor."""
        zoom_factor = get_settings().settings.canvas.zoom.wheel_factor
        self.scale(zoom_factor, zoom_factor)

    def zoom_out(self):
        """Zoom out by the configured factor."""
        zoom_factor = get_settings().settings.canvas.zoom.wheel_factor
        self.scale(1 / zoom_factor, 1 / zoom_factor)
