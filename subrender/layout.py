"""Multi-line text layout with greedy word wrapping."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from subrender.text_shaping import ShapedText, TextDirection, TextShaper


@dataclass
class TextLayout:
    """Breaks text into shaped lines no wider than ``max_width`` pixels.

    With an infinite ``max_width`` the text is shaped as a single line.
    """

    shaper: TextShaper = field(default_factory=TextShaper)
    max_width: float = math.inf
    line_spacing: float = 1.0

    def layout_text(
        self, text: str, font_name: str, direction: TextDirection
    ) -> list[ShapedText]:
        """Shape ``text`` into lines, wrapping at whitespace.

        A word wider than ``max_width`` on its own gets a line to itself.
        """
        if math.isinf(self.max_width):
            return [self.shaper.shape_text(text, font_name, direction)]

        lines: list[ShapedText] = []
        current = ""
        for word in text.split():
            candidate = f"{current} {word}" if current else word
            shaped = self.shaper.shape_text(candidate, font_name, direction)
            if shaped.total_advance <= self.max_width:
                current = candidate
                continue
            if current:
                lines.append(self.shaper.shape_text(current, font_name, direction))
            current = word

        if current:
            lines.append(self.shaper.shape_text(current, font_name, direction))
        return lines