"""
canvas package

PyQt6 scene, view, graphics items and painter for the diagram editor.
"""

from canvas.items import EdgeItem, NodeItem
from canvas.painting import paint_overlay
from canvas.scene import DiagramScene
from canvas.view import DiagramView

__all__ = [
    "EdgeItem",
    "NodeItem",
    "paint_overlay",
    "DiagramScene",
    "DiagramView",
]
