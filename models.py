"""
models.py

Constants and lookup tables for the StateSketch editor.
"""

from __future__ import annotations

from typing import Dict, Optional


# ----------------------------
# Interaction mode constants
# ----------------------------

class Mode:
    """Interaction mode constants for the editor."""
    CANVAS = "canvas"
    SELECTION = "selection"
    MULTISELECT = "multiselect"
    EDITING_TEXT = "editing_text"


# ----------------------------
# Entity kind constants
# ----------------------------

class Shape:
    """Node shape names."""
    DOT = "dot"
    TRIANGLE = "triangle"
    SQUARE = "square"
    PENTAGON = "pentagon"
    HEXAGON = "hexagon"

    ALL = (DOT, TRIANGLE, SQUARE, PENTAGON, HEXAGON)


class ArrowKind:
    """Arrow head styles for edges."""
    TRIANGLE = "triangle"
    TEE = "tee"

    ALL = (TRIANGLE, TEE)


class GeometryKind:
    """What an edge derives to for drawing and hit-testing."""
    STRAIGHT = "straight"
    ARC = "arc"


class EdgeType:
    """Record type tags used at the import/export boundary."""
    TRANSITION = "Link"
    SELF_TRANSITION = "SelfLink"
    ENTRY_MARKER = "StartLink"


# ----------------------------
# Color palettes
# ----------------------------

DEFAULT_NODE_COLOR = "yellow"
DEFAULT_EDGE_COLOR = "gray"

# Base fill per node color name
NODE_BASE_COLORS: Dict[str, str] = {
    "yellow": "#fff2a8",   # post-it yellow
    "green":  "#c8e6c9",   # soft mint
    "blue":   "#bbdefb",   # light sky
    "pink":   "#f8bbd9",   # soft rose
    "purple": "#e1bee7",   # light lavender
    "orange": "#ffe0b2",   # warm peach
    "white":  "#ffffff",
}

# Darker fill used while a node is selected or multiselected
NODE_SELECTED_COLORS: Dict[str, str] = {
    "yellow": "#ffcc66",
    "green":  "#a5d6a7",
    "blue":   "#90caf9",
    "pink":   "#f48fb1",
    "purple": "#ce93d8",
    "orange": "#ffcc80",
    "white":  "#f0f0f0",
}

EDGE_COLORS: Dict[str, str] = {
    "gray":   "#9ac29a",
    "black":  "#000000",
    "red":    "#d32f2f",
    "blue":   "#1976d2",
}


def node_base_color(color: str) -> str:
    """Hex fill for *color*, falling back to yellow for unknown names."""
    return NODE_BASE_COLORS.get(color, NODE_BASE_COLORS[DEFAULT_NODE_COLOR])


def node_selected_color(color: str) -> str:
    return NODE_SELECTED_COLORS.get(color, NODE_SELECTED_COLORS[DEFAULT_NODE_COLOR])


# ----------------------------
# Modifier-key tables
# ----------------------------

# Held number key -> node shape ("2" is reserved)
SHAPE_MODIFIERS: Dict[str, str] = {
    "1": Shape.DOT,
    "3": Shape.TRIANGLE,
    "4": Shape.SQUARE,
    "5": Shape.PENTAGON,
    "6": Shape.HEXAGON,
}

# Held letter key -> node color
COLOR_MODIFIERS: Dict[str, str] = {
    "Q": "yellow",
    "W": "green",
    "E": "blue",
    "R": "pink",
    "T": "white",
}


def resolve_shape_modifier(key: Optional[str], fallback: str = Shape.DOT) -> str:
    """Resolve a held shape key to a shape name.

    Args:
        key: The held key ("1", "3".."6") or None.
        fallback: Shape returned when no modifier is held.

    Returns:
        The shape name.
    """
    if key is None:
        return fallback
    return SHAPE_MODIFIERS.get(key, fallback)


def resolve_color_modifier(key: Optional[str], fallback: str = DEFAULT_NODE_COLOR) -> str:
    """Resolve a held color key (Q, W, E, R, T) to a color name."""
    if key is None:
        return fallback
    return COLOR_MODIFIERS.get(key.upper(), fallback)


def edge_color(color: str) -> str:
    """Hex stroke for an edge color name, falling back to gray."""
    return EDGE_COLORS.get(color, EDGE_COLORS[DEFAULT_EDGE_COLOR])
