"""
utils.py

Utility functions for the StateSketch editor.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from PyQt6.QtGui import QColor


GREEK_LETTER_NAMES = [
    "Alpha", "Beta", "Gamma", "Delta", "Epsilon", "Zeta", "Eta", "Theta",
    "Iota", "Kappa", "Lambda", "Mu", "Nu", "Xi", "Omicron", "Pi", "Rho",
    "Sigma", "Tau", "Upsilon", "Phi", "Chi", "Psi", "Omega",
]


def convert_latex_shortcuts(text: str) -> str:
    """
    Replace LaTeX-style shortcuts with their Unicode characters.

    Handles:
    - ``\\Alpha`` .. ``\\Omega`` and ``\\alpha`` .. ``\\omega``
    - ``_0`` .. ``_9`` subscripts

    Args:
        text: Raw label text as typed by the user

    Returns:
        Text suitable for display
    """
    for i, name in enumerate(GREEK_LETTER_NAMES):
        # Capital sigma has no final form, so skip U+03A2 past Rho
        offset = i + (1 if i > 16 else 0)
        text = text.replace("\\" + name, chr(913 + offset))
        text = text.replace("\\" + name.lower(), chr(945 + offset))

    for i in range(10):
        text = text.replace("_" + str(i), chr(8320 + i))

    return text


def label_offset(width: float, angle: Optional[float], line_height: float = 10.0) -> Tuple[float, float]:
    """
    Offset from a label anchor to the top-left of its text run.

    Without an angle the text is only centered horizontally. With an angle,
    the text is pushed off the anchor toward the side the angle points at,
    sliding smoothly around the corners so it never overlaps the edge.

    Args:
        width: Rendered text width in pixels
        angle: Direction (radians, y-down) away from the edge, or None
        line_height: Half the text height used for corner placement

    Returns:
        (dx, dy) to add to the anchor point
    """
    dx = -width / 2
    dy = 0.0
    if angle is None:
        return dx, dy

    cos = math.cos(angle)
    sin = math.sin(angle)
    corner_x = (width / 2 + 5) * (1 if cos > 0 else -1)
    corner_y = (line_height + 5) * (1 if sin > 0 else -1)
    slide = sin * abs(sin) ** 40 * corner_x - cos * abs(cos) ** 10 * corner_y
    dx += corner_x - sin * slide
    dy += corner_y + cos * slide
    return dx, dy


def hex_to_qcolor(s: str, fallback: QColor) -> QColor:
    """
    Parse a hex string to a QColor.

    Args:
        s: Hex string like "#RRGGBB" or "#RRGGBBAA"
        fallback: Color to return if parsing fails

    Returns:
        Parsed QColor or fallback
    """
    if not s:
        return QColor(fallback)
    s = s.strip().lstrip("#")
    try:
        if len(s) == 6:
            return QColor(int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
        if len(s) == 8:
            return QColor(int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16), int(s[6:8], 16))
    except ValueError:
        pass
    return QColor(fallback)
