import math

import pytest

from subrender.layout import TextLayout
from subrender.text_shaping import TextDirection, TextShaper


def _glyph_counts(lines):
    return [len(line.glyphs) for line in lines]


def test_text_layout_wraps_into_multiple_lines():
    layout = TextLayout(TextShaper())
    layout.max_width = 100.0
    lines = layout.layout_text(
        "This is a long text that should wrap", "Arial", TextDirection.LEFT_TO_RIGHT
    )
    assert len(lines) > 1
    assert _glyph_counts(lines) == [9, 9, 4, 6, 4]


def test_wrapped_lines_fit_width_when_words_fit():
    layout = TextLayout(TextShaper(), max_width=100.0)
    lines = layout.layout_text(
        "This is a long text that should wrap", "Arial", TextDirection.LEFT_TO_RIGHT
    )
    assert all(line.total_advance <= 100.0 for line in lines)
    assert lines[0].total_advance == pytest.approx(9 * 16 * 0.6)


def test_infinite_width_gives_single_line():
    layout = TextLayout(TextShaper())
    assert math.isinf(layout.max_width)
    lines = layout.layout_text("a b  c", "Arial", TextDirection.LEFT_TO_RIGHT)
    assert len(lines) == 1
    assert len(lines[0].glyphs) == 6


def test_overlong_word_gets_own_line():
    layout = TextLayout(TextShaper(), max_width=10.0)
    lines = layout.layout_text("abc defghijklm", "Arial", TextDirection.LEFT_TO_RIGHT)
    assert _glyph_counts(lines) == [3, 10]


def test_whitespace_is_collapsed_between_words():
    layout = TextLayout(TextShaper(), max_width=100.0)
    lines = layout.layout_text("  a\t b\n", "Arial", TextDirection.LEFT_TO_RIGHT)
    assert len(lines) == 1
    assert [g.codepoint for g in lines[0].glyphs] == [ord("a"), ord(" "), ord("b")]


def test_empty_text_with_finite_width_gives_no_lines():
    layout = TextLayout(TextShaper(), max_width=50.0)
    assert layout.layout_text("", "Arial", TextDirection.LEFT_TO_RIGHT) == []


def test_larger_font_wraps_more():
    small = TextLayout(TextShaper(font_size=8.0), max_width=100.0)
    large = TextLayout(TextShaper(font_size=32.0), max_width=100.0)
    text = "one two three four five six"
    small_lines = small.layout_text(text, "Arial", TextDirection.LEFT_TO_RIGHT)
    large_lines = large.layout_text(text, "Arial", TextDirection.LEFT_TO_RIGHT)
    assert len(large_lines) > len(small_lines)