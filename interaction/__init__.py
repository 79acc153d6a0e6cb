"""
interaction package

Mode/selection state machine and the input dispatcher that drives it.
"""

from interaction.state import InteractionState, InteractionError, TextCursor
from interaction.dispatcher import InputDispatcher, Key

__all__ = [
    "InteractionState",
    "InteractionError",
    "TextCursor",
    "InputDispatcher",
    "Key",
]
