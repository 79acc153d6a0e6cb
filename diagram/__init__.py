"""
diagram package

Node and edge entities plus the Diagram container that owns them.
"""

from diagram.mixins import LabelMixin
from diagram.node import Node, ShapeDescriptor, SHAPES, node_radius
from diagram.edges import (
    Edge,
    EdgeGeometry,
    Transition,
    SelfTransition,
    EntryMarker,
    PendingEdge,
)
from diagram.document import Diagram, DiagramImportError

__all__ = [
    "LabelMixin",
    "Node",
    "ShapeDescriptor",
    "SHAPES",
    "node_radius",
    "Edge",
    "EdgeGeometry",
    "Transition",
    "SelfTransition",
    "EntryMarker",
    "PendingEdge",
    "Diagram",
    "DiagramImportError",
]
