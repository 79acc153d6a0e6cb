"""
diagram/mixins.py

Mixin classes shared by diagram entities.
"""

from __future__ import annotations


class LabelMixin:
    """
    Mixin for entities that carry an editable text label.

    Only classes with this mixin can enter text editing; the interaction
    state checks ``isinstance(entity, LabelMixin)`` rather than probing for
    a ``text`` attribute. Offsets are character positions in ``text`` and
    are clamped to ``[0, len(text)]``.
    """

    text: str

    def clamp_offset(self, offset: int) -> int:
        return max(0, min(offset, len(self.text)))

    def splice_text(self, offset: int, chars: str) -> int:
        """Insert *chars* at *offset*; return the offset after the insertion."""
        offset = self.clamp_offset(offset)
        self.text = self.text[:offset] + chars + self.text[offset:]
        return offset + len(chars)

    def erase_before(self, offset: int) -> int:
        """Remove the character before *offset* (backspace); return the new offset."""
        offset = self.clamp_offset(offset)
        if offset == 0:
            return 0
        self.text = self.text[:offset - 1] + self.text[offset:]
        return offset - 1

    def erase_at(self, offset: int) -> int:
        """Remove the character at *offset* (forward delete); the offset is unchanged."""
        offset = self.clamp_offset(offset)
        if offset < len(self.text):
            self.text = self.text[:offset] + self.text[offset + 1:]
        return offset
